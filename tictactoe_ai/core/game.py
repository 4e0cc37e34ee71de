"""
Game state and flow management for tic-tac-toe.

This module defines the core game mechanics, including:
- GameState: Immutable representation of a board position
- TicTacToe: The game adapter consumed by the MCTS engine
- Game: Manager for game flow, turn order and registered agents
- Helper functions for game setup and random simulation
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from functools import cached_property
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import random
import time

import numpy as np

from tictactoe_ai.core.adapter import GameAdapter
from tictactoe_ai.core.constants import (
    BOARD_SIZE, NUM_CELLS, EMPTY, PLAYER_ONE, PLAYER_TWO, PLAYERS,
    MAXIMIZING_PLAYER, WIN_REWARD, LOSS_REWARD, DRAW_REWARD,
    PLAYER_SYMBOLS, WIN_LINES, other_player
)
from tictactoe_ai.exceptions import AdapterContractViolation

Move = Tuple[int, int]


class GameResult(Enum):
    """Enum representing possible game results."""
    IN_PROGRESS = auto()
    WINNER = auto()  # Game has a winner
    DRAW = auto()  # Board filled without a line


@dataclass(frozen=True)
class GameState:
    """
    Immutable tic-tac-toe position.

    Cells are stored row-major as 0 (empty), 1 (player one) or 2 (player two).
    Two states are equal when their boards are identical; the player to move
    is not part of equality.
    """
    cells: Tuple[int, ...] = (EMPTY,) * NUM_CELLS
    current_player: int = field(default=PLAYER_ONE, compare=False)

    def __post_init__(self):
        """Validate the position."""
        if len(self.cells) != NUM_CELLS:
            raise ValueError(f"cells must have exactly {NUM_CELLS} entries")
        if any(cell not in PLAYER_SYMBOLS for cell in self.cells):
            raise ValueError("cells must only contain 0, 1 or 2")
        if self.current_player not in PLAYERS:
            raise ValueError("current_player must be 1 or 2")

    @classmethod
    def from_rows(cls, rows: Sequence[str], current_player: Optional[int] = None) -> 'GameState':
        """
        Build a state from strings such as ``["X.O", ".X.", "..."]``.

        Args:
            rows: One string per row using X, O and '.'
            current_player: Player to move (inferred from piece counts if None)

        Returns:
            GameState
        """
        lookup = {symbol: value for value, symbol in PLAYER_SYMBOLS.items()}
        cells = tuple(lookup[symbol] for row in rows for symbol in row.upper())

        if current_player is None:
            x_count = cells.count(PLAYER_ONE)
            o_count = cells.count(PLAYER_TWO)
            current_player = PLAYER_ONE if x_count == o_count else PLAYER_TWO

        return cls(cells=cells, current_player=current_player)

    @property
    def board(self) -> np.ndarray:
        """Get a read-only BOARD_SIZE x BOARD_SIZE view of the cells."""
        board = np.array(self.cells, dtype=np.int8).reshape(BOARD_SIZE, BOARD_SIZE)
        board.flags.writeable = False
        return board

    @cached_property
    def winner(self) -> int:
        """Get the player owning a complete line, or EMPTY if there is none."""
        for a, b, c in WIN_LINES:
            if self.cells[a] != EMPTY and self.cells[a] == self.cells[b] == self.cells[c]:
                return self.cells[a]
        return EMPTY

    @property
    def is_full(self) -> bool:
        """Check whether every cell is occupied."""
        return EMPTY not in self.cells

    @property
    def occupied_cells(self) -> int:
        """Get the number of occupied cells."""
        return int(np.count_nonzero(self.board))

    def empty_cells(self) -> List[Move]:
        """
        Get the coordinates of every empty cell.

        Returns:
            List of (row, col) pairs in row-major order
        """
        return [divmod(index, BOARD_SIZE) for index, cell in enumerate(self.cells) if cell == EMPTY]

    def is_valid_move(self, row: int, col: int) -> bool:
        """
        Check whether the current player may play at (row, col).

        Args:
            row: Row index
            col: Column index

        Returns:
            True if the cell is on the board and empty
        """
        if not (0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE):
            return False
        return self.cells[row * BOARD_SIZE + col] == EMPTY

    def with_move(self, row: int, col: int) -> Optional['GameState']:
        """
        Get the state after the current player plays at (row, col).

        This state is left unchanged.

        Args:
            row: Row index
            col: Column index

        Returns:
            The successor state, or None if the move is invalid
        """
        if not self.is_valid_move(row, col):
            return None

        cells = list(self.cells)
        cells[row * BOARD_SIZE + col] = self.current_player
        return GameState(cells=tuple(cells), current_player=other_player(self.current_player))

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the state to a dictionary for serialization.

        Returns:
            Dictionary representation of the state
        """
        return {
            "cells": list(self.cells),
            "current_player": self.current_player,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameState':
        """
        Create a state from a dictionary.

        Args:
            data: Dictionary representation of the state

        Returns:
            GameState
        """
        return cls(cells=tuple(data["cells"]), current_player=data["current_player"])

    def __str__(self) -> str:
        header = "  " + " ".join(str(col) for col in range(BOARD_SIZE))
        lines = [header]
        for row in range(BOARD_SIZE):
            symbols = " ".join(
                PLAYER_SYMBOLS[self.cells[row * BOARD_SIZE + col]] for col in range(BOARD_SIZE)
            )
            lines.append(f"{row} {symbols}")
        lines.append(f"Player {self.current_player}'s turn")
        return "\n".join(lines)


class TicTacToe(GameAdapter):
    """
    Game adapter for 3x3 tic-tac-toe.

    Successors are generated row-major over the empty cells. Rewards are
    scored for player one.
    """

    def is_terminal(self, state: GameState) -> bool:
        return state.winner != EMPTY or state.is_full

    def legal_successors(self, state: GameState) -> List[GameState]:
        if self.is_terminal(state):
            return []
        return [state.with_move(row, col) for row, col in state.empty_cells()]

    def terminal_reward(self, state: GameState) -> float:
        if not self.is_terminal(state):
            raise AdapterContractViolation("terminal_reward called on a non-terminal state")

        if state.winner == MAXIMIZING_PLAYER:
            return WIN_REWARD
        if state.winner != EMPTY:
            return LOSS_REWARD
        return DRAW_REWARD

    def reward_sign(self, state: GameState) -> int:
        # The player who just moved is the one not on turn
        mover = other_player(state.current_player)
        return 1 if mover == MAXIMIZING_PLAYER else -1

    def find_move(self, before: GameState, after: GameState) -> Optional[Move]:
        """
        Find the cell that is empty in ``before`` and occupied in ``after``.

        Args:
            before: State before the move
            after: State after the move

        Returns:
            (row, col) of the move, or None if the boards do not differ that way
        """
        placed = np.argwhere((before.board == EMPTY) & (after.board != EMPTY))
        if len(placed) == 0:
            return None
        row, col = placed[0]
        return int(row), int(col)


class Game:
    """
    Manager for tic-tac-toe game flow.

    This class tracks the current state and move history and provides
    interfaces for human input and registered agents.
    """
    def __init__(
        self,
        player_names: Optional[List[str]] = None,
        initial_state: Optional[GameState] = None
    ):
        """
        Initialize a new game.

        Args:
            player_names: Names for player one and player two
            initial_state: Starting position (defaults to the empty board)
        """
        if player_names is None:
            self.player_names = [f"Player {player}" for player in PLAYERS]
        else:
            if len(player_names) != len(PLAYERS):
                raise ValueError("Exactly two player names are required")
            self.player_names = list(player_names)

        self.adapter = TicTacToe()
        self.initial_state = initial_state or GameState()
        self.state = self.initial_state
        self.history: List[Tuple[int, Move]] = []  # (player, move)
        self.agent_callbacks: Dict[int, Callable[[GameState, int], Move]] = {}
        self.start_time = time.time()
        self.end_time: Optional[float] = None

    @property
    def game_over(self) -> bool:
        """Check whether the game has ended."""
        return self.adapter.is_terminal(self.state)

    def reset(self) -> GameState:
        """
        Reset the game to its initial state.

        Returns:
            Initial game state
        """
        self.state = self.initial_state
        self.history = []
        self.start_time = time.time()
        self.end_time = None
        return self.state

    def make_move(self, row: int, col: int) -> bool:
        """
        Play a move for the current player.

        Args:
            row: Row index
            col: Column index

        Returns:
            True if the move was applied, False if it was invalid or the game is over
        """
        if self.game_over:
            return False

        new_state = self.state.with_move(row, col)
        if new_state is None:
            return False

        self.history.append((self.state.current_player, (row, col)))
        self.state = new_state

        if self.game_over:
            self.end_time = time.time()

        return True

    def register_agent(self, player_id: int, agent_callback: Callable[[GameState, int], Move]) -> None:
        """
        Register an agent for a player.

        The callback takes a game state and player ID and returns a (row, col) move.

        Args:
            player_id: Player (1 or 2)
            agent_callback: Function that selects a move given the game state
        """
        if player_id not in PLAYERS:
            raise ValueError("player_id must be 1 or 2")
        self.agent_callbacks[player_id] = agent_callback

    def step(self, move: Optional[Move] = None) -> Tuple[GameState, bool]:
        """
        Advance the game by one move.

        If no move is provided, the current player's registered agent is asked for one.

        Args:
            move: Optional (row, col) move to apply

        Returns:
            Tuple of (new game state, whether the game is over)
        """
        if self.game_over:
            return self.state, True

        current_player = self.state.current_player

        if move is None and current_player in self.agent_callbacks:
            move = self.agent_callbacks[current_player](self.state, current_player)

        if move is None:
            raise ValueError("No move provided and no agent callback registered for current player")

        if not self.make_move(*move):
            raise ValueError(f"Invalid move {move}")

        return self.state, self.game_over

    def run_game(self) -> GameState:
        """
        Play the game to completion.

        This method requires both players to have agent callbacks registered.

        Returns:
            Final game state
        """
        for player in PLAYERS:
            if player not in self.agent_callbacks:
                raise ValueError(f"No agent callback registered for player {player}")

        while not self.game_over:
            self.step()

        return self.state

    def get_winner(self) -> Optional[int]:
        """
        Get the winning player, if any.

        Returns:
            Winning player, or None if the game is not over or ended in a draw
        """
        if not self.game_over or self.state.winner == EMPTY:
            return None
        return self.state.winner

    def get_result(self) -> GameResult:
        """
        Get the result of the game.

        Returns:
            Game result
        """
        if not self.game_over:
            return GameResult.IN_PROGRESS
        if self.state.winner != EMPTY:
            return GameResult.WINNER
        return GameResult.DRAW

    def get_game_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about the game.

        Returns:
            Dictionary of game statistics
        """
        end_time = self.end_time if self.end_time is not None else time.time()
        stats: Dict[str, Any] = {
            "duration": end_time - self.start_time,
            "turns": len(self.history),
            "result": self.get_result().name,
        }

        winner = self.get_winner()
        if winner is not None:
            stats["winner"] = winner
            stats["winner_name"] = self.player_names[winner - 1]

        for player in PLAYERS:
            stats[f"player_{player}_moves"] = sum(1 for mover, _ in self.history if mover == player)

        return stats

    def __str__(self) -> str:
        result = f"Tic-Tac-Toe Game (Turn: {len(self.history)})\n{self.state}\n"

        outcome = self.get_result()
        if outcome == GameResult.WINNER:
            result += f"Winner: {self.player_names[self.state.winner - 1]}\n"
        elif outcome == GameResult.DRAW:
            result += "Result: Draw\n"

        return result


def create_game(
    player_names: Optional[List[str]] = None,
    initial_state: Optional[GameState] = None
) -> Game:
    """
    Create a new tic-tac-toe game.

    Args:
        player_names: Names for player one and player two
        initial_state: Starting position

    Returns:
        Game object
    """
    return Game(player_names=player_names, initial_state=initial_state)


def simulate_random_game(random_seed: Optional[int] = None) -> Tuple[GameState, GameResult]:
    """
    Simulate a game between two uniformly random players.

    Args:
        random_seed: Random seed for reproducibility

    Returns:
        Tuple of (final game state, result)
    """
    rng = random.Random(random_seed)
    game = create_game()

    for player in PLAYERS:
        game.register_agent(player, lambda state, player_id: rng.choice(state.empty_cells()))

    final_state = game.run_game()
    return final_state, game.get_result()
