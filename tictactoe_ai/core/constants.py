"""
Constants for the tic-tac-toe game.

This module defines the board geometry, player identifiers, winning lines
and reward values used throughout the implementation.
"""
from typing import Dict, Final, List, Tuple


# Board geometry
BOARD_SIZE: Final[int] = 3
NUM_CELLS: Final[int] = BOARD_SIZE * BOARD_SIZE

# Cell contents / player identifiers
EMPTY: Final[int] = 0
PLAYER_ONE: Final[int] = 1  # "X", moves first
PLAYER_TWO: Final[int] = 2  # "O"
PLAYERS: Final[Tuple[int, int]] = (PLAYER_ONE, PLAYER_TWO)

# Rewards are scored for player one
MAXIMIZING_PLAYER: Final[int] = PLAYER_ONE
WIN_REWARD: Final[float] = 1.0
LOSS_REWARD: Final[float] = -1.0
DRAW_REWARD: Final[float] = 0.0

# Symbols for terminal display
PLAYER_SYMBOLS: Final[Dict[int, str]] = {
    EMPTY: ".",
    PLAYER_ONE: "X",
    PLAYER_TWO: "O",
}


def _build_win_lines() -> List[Tuple[int, ...]]:
    lines = []
    for i in range(BOARD_SIZE):
        lines.append(tuple(i * BOARD_SIZE + j for j in range(BOARD_SIZE)))  # row
        lines.append(tuple(j * BOARD_SIZE + i for j in range(BOARD_SIZE)))  # column
    lines.append(tuple(i * BOARD_SIZE + i for i in range(BOARD_SIZE)))
    lines.append(tuple(i * BOARD_SIZE + (BOARD_SIZE - 1 - i) for i in range(BOARD_SIZE)))
    return lines


# Flat cell indices of every row, column and diagonal
WIN_LINES: Final[List[Tuple[int, ...]]] = _build_win_lines()


def other_player(player: int) -> int:
    """Get the opponent of a player (1 -> 2, 2 -> 1)."""
    return PLAYER_ONE + PLAYER_TWO - player
