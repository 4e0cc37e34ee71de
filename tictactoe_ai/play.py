"""
Interactive tic-tac-toe against the MCTS agent.

Example usage:
    # Play first (X) against a 5000-iteration search
    tictactoe-play

    # Let the AI open, with a reproducible search
    tictactoe-play --second --seed 7
"""
import argparse
import logging
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from tictactoe_ai.core.constants import BOARD_SIZE, PLAYER_ONE, PLAYER_TWO, PLAYER_SYMBOLS
from tictactoe_ai.core.game import Game, GameResult, GameState
from tictactoe_ai.mcts.agent import MCTSAgent
from tictactoe_ai.mcts.config import MCTSConfig
from tictactoe_ai.utils.logging import setup_logging

SYMBOL_STYLES = {PLAYER_ONE: "bold red", PLAYER_TWO: "bold blue"}


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for game configuration."""
    parser = argparse.ArgumentParser(description="Play tic-tac-toe against an MCTS agent")

    parser.add_argument("--iterations", type=int, default=5000,
                        help="Number of MCTS iterations per move")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for the search")

    order = parser.add_mutually_exclusive_group()
    order.add_argument("--first", dest="human_first", action="store_true", default=True,
                       help="Human player goes first (default)")
    order.add_argument("--second", dest="human_first", action="store_false",
                       help="AI player goes first")

    parser.add_argument("--verbose", action="store_true",
                        help="Show search statistics for every AI move")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level")

    return parser.parse_args(argv)


def render_board(state: GameState) -> Table:
    """Build a rich table showing the board with row and column indices."""
    table = Table(show_header=True, show_lines=True, header_style="bold")
    table.add_column("")
    for col in range(BOARD_SIZE):
        table.add_column(str(col), justify="center")

    for row in range(BOARD_SIZE):
        cells = []
        for col in range(BOARD_SIZE):
            value = state.cells[row * BOARD_SIZE + col]
            style = SYMBOL_STYLES.get(value)
            symbol = PLAYER_SYMBOLS[value]
            cells.append(f"[{style}]{symbol}[/{style}]" if style else symbol)
        table.add_row(str(row), *cells)

    return table


def read_move(console: Console, player: int) -> Optional[tuple]:
    """Prompt for "row col"; return None if the input cannot be parsed."""
    raw = console.input(f"Player {player} ({PLAYER_SYMBOLS[player]}), enter your move (row col): ")
    parts = raw.replace(",", " ").split()
    if len(parts) != 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run an interactive game."""
    args = parse_args(argv)
    console = Console()
    setup_logging(getattr(logging, args.log_level), console=console)

    human = PLAYER_ONE if args.human_first else PLAYER_TWO
    names = ["You", "MCTS AI"] if human == PLAYER_ONE else ["MCTS AI", "You"]

    agent = MCTSAgent(
        config=MCTSConfig(iterations=args.iterations, seed=args.seed),
        name="MCTS AI",
        verbose=args.verbose,
        console=console
    )
    game = Game(player_names=names)

    while not game.game_over:
        console.print(render_board(game.state))
        player = game.state.current_player

        if player == human:
            try:
                move = read_move(console, player)
            except (EOFError, KeyboardInterrupt):
                console.print("\nGame abandoned.")
                return 1
            if move is None or not game.make_move(*move):
                console.print("[yellow]Invalid move. Try again.[/yellow]")
                continue
        else:
            move = agent.select_action(game.state, player)
            console.print(f"MCTS selects move: {move}")
            game.make_move(*move)

    console.print(render_board(game.state))
    if game.get_result() == GameResult.DRAW:
        console.print("It's a draw!")
    else:
        winner = game.get_winner()
        console.print(f"Player {winner} ({PLAYER_SYMBOLS[winner]}) wins!")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
