"""
Monte Carlo Tree Search Agent for tic-tac-toe.

This module provides the MCTSAgent class, a ready-to-use AI player that
uses Monte Carlo Tree Search to pick moves, together with a uniformly
random baseline agent and a factory for common configurations.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple
import json
import random
import time

from rich.console import Console
from rich.table import Table

from tictactoe_ai.core.game import Game, GameState, Move, TicTacToe
from tictactoe_ai.mcts.config import MCTSConfig
from tictactoe_ai.mcts.node import EXPLORATION_CONSTANT
from tictactoe_ai.mcts.search import mcts_search


class MCTSAgent:
    """
    Monte Carlo Tree Search agent for playing tic-tac-toe.

    The agent owns a random number generator seeded from its configuration,
    so a seeded agent plays the same moves for the same positions.
    """

    def __init__(
        self,
        config: Optional[MCTSConfig] = None,
        name: str = "MCTS Agent",
        verbose: bool = False,
        rng: Optional[random.Random] = None,
        console: Optional[Console] = None
    ):
        """
        Initialize an MCTS agent.

        Args:
            config: MCTS configuration parameters
            name: Name of the agent
            verbose: Whether to print a summary of every search
            rng: Random number generator shared by all of this agent's searches
                (defaults to one seeded from ``config.seed``)
            console: Console used for verbose output
        """
        self.config = config or MCTSConfig()
        self.name = name
        self.verbose = verbose
        self.console = console or Console()
        self.game = TicTacToe()
        self.rng = rng or random.Random(self.config.seed)

        # Statistics from the most recent search
        self.last_stats: Dict[str, Any] = {}

        # History of all moves and their statistics
        self.action_history: List[Tuple[Move, Dict[str, Any]]] = []

    def select_action(self, state: GameState, player_id: int) -> Move:
        """
        Select a move using Monte Carlo Tree Search.

        Args:
            state: Current game state
            player_id: Player making the decision

        Returns:
            Selected (row, col) move

        Raises:
            EmptySearchResult: If the game is already over
        """
        if state.current_player != player_id:
            raise ValueError(f"Not player {player_id}'s turn")

        # A single legal move needs no search
        empty_cells = state.empty_cells()
        if len(empty_cells) == 1 and not self.game.is_terminal(state):
            move = empty_cells[0]
            self.last_stats = {"iterations": 0, "forced_move": True, "chosen_move": move}
            self.action_history.append((move, self.last_stats))
            return move

        start_time = time.time()
        chosen_state, stats = mcts_search(state, game=self.game, config=self.config, rng=self.rng)
        stats["total_time"] = time.time() - start_time

        move = self.game.find_move(state, chosen_state)

        self.last_stats = stats
        self.action_history.append((move, stats))

        if self.verbose:
            self._print_search_info(move, stats)

        return move

    def _print_search_info(self, move: Move, stats: Dict[str, Any]) -> None:
        """
        Print information about the search.

        Args:
            move: Selected move
            stats: Search statistics
        """
        self.console.print(f"\n[bold]{self.name}[/bold] selects move: {move}")
        self.console.print(
            f"Iterations: {stats['iterations']}  "
            f"Time: {stats['time_elapsed']:.3f}s ({stats['iterations_per_second']:.1f} it/s)  "
            f"Nodes: {stats['node_count']}"
        )

        table = Table(title="Candidate moves")
        table.add_column("Move")
        table.add_column("Visits", justify="right")
        table.add_column("Value", justify="right")
        table.add_column("Win rate", justify="right")

        rows = sorted(
            stats["action_statistics"].items(),
            key=lambda item: item[1]["visits"],
            reverse=True
        )
        for move_str, row in rows:
            table.add_row(move_str, str(row["visits"]), f"{row['value']:+.3f}", f"{row['win_rate']:.1%}")

        self.console.print(table)

    def get_action_callback(self) -> Callable[[GameState, int], Move]:
        """
        Get a callback function for selecting moves.

        Returns:
            Callback that takes a game state and player ID and returns a move
        """
        return lambda state, player_id: self.select_action(state, player_id)

    def register_with_game(self, game: Game, player_id: int) -> None:
        """
        Register this agent with a game.

        Args:
            game: Game object
            player_id: Player to register as
        """
        game.register_agent(player_id, self.get_action_callback())

    def get_last_statistics(self) -> Dict[str, Any]:
        """Get statistics from the most recent search."""
        return self.last_stats

    def get_principal_variation(self) -> List[Tuple[Move, float]]:
        """
        Get the principal variation (most visited path) from the last search.

        Returns:
            List of (move, mean reward) pairs
        """
        return self.last_stats.get("principal_variation", [])

    def get_action_statistics(self) -> Dict[str, Dict[str, float]]:
        """
        Get statistics for every candidate move of the last search.

        Returns:
            Dictionary mapping move strings to statistics
        """
        return self.last_stats.get("action_statistics", {})

    def reset_statistics(self) -> None:
        """Reset all statistics."""
        self.last_stats = {}
        self.action_history = []

    def save_statistics(self, filename: str) -> None:
        """
        Save statistics to a JSON file.

        Args:
            filename: Name of the file to save to
        """
        history = []
        for move, stats in self.action_history:
            history.append({
                "move": list(move) if move is not None else None,
                "stats": {k: v for k, v in stats.items()
                          if isinstance(v, (int, float, bool, str))}
            })

        data = {
            "agent_name": self.name,
            "config": self.config.to_dict(),
            "history": history,
            "total_actions": len(self.action_history)
        }

        with open(filename, 'w') as f:
            json.dump(data, f, indent=2)

    def __str__(self) -> str:
        return f"{self.name} (MCTS, {self.config.iterations} iterations)"


class RandomAgent:
    """Agent that plays a uniformly random legal move."""

    def __init__(self, name: str = "Random Agent", seed: Optional[int] = None):
        self.name = name
        self.rng = random.Random(seed)

    def select_action(self, state: GameState, player_id: int) -> Move:
        empty_cells = state.empty_cells()
        if not empty_cells:
            raise ValueError(f"No valid moves for player {player_id}")
        return self.rng.choice(empty_cells)

    def get_action_callback(self) -> Callable[[GameState, int], Move]:
        return lambda state, player_id: self.select_action(state, player_id)

    def register_with_game(self, game: Game, player_id: int) -> None:
        game.register_agent(player_id, self.get_action_callback())

    def __str__(self) -> str:
        return f"{self.name} (random)"


class MCTSAgentFactory:
    """
    Factory for creating MCTS agents with different configurations.
    """

    @staticmethod
    def create_fast(seed: Optional[int] = None) -> MCTSAgent:
        """Create a fast MCTS agent with fewer iterations."""
        config = MCTSConfig.fast()
        config.seed = seed
        return MCTSAgent(config=config, name="Fast MCTS")

    @staticmethod
    def create_standard(seed: Optional[int] = None) -> MCTSAgent:
        """Create a standard MCTS agent with the default parameters."""
        config = MCTSConfig.default()
        config.seed = seed
        return MCTSAgent(config=config, name="Standard MCTS")

    @staticmethod
    def create_strong(seed: Optional[int] = None) -> MCTSAgent:
        """Create a strong MCTS agent with more iterations."""
        config = MCTSConfig.deep()
        config.seed = seed
        return MCTSAgent(config=config, name="Strong MCTS")

    @staticmethod
    def create_custom(
        iterations: int = 5000,
        exploration_weight: float = EXPLORATION_CONSTANT,
        final_selection: str = "visits",
        seed: Optional[int] = None,
        name: str = "Custom MCTS"
    ) -> MCTSAgent:
        """
        Create a custom MCTS agent.

        Args:
            iterations: Number of MCTS iterations
            exploration_weight: UCB1 exploration parameter
            final_selection: Final move selection policy
            seed: Random seed
            name: Name of the agent

        Returns:
            MCTSAgent
        """
        config = MCTSConfig(
            iterations=iterations,
            exploration_weight=exploration_weight,
            final_selection=final_selection,
            seed=seed
        )
        return MCTSAgent(config=config, name=name)
