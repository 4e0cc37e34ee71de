"""
Tic-Tac-Toe AI Core Package

This package contains the game side of the system, including:
- The game adapter contract consumed by the search engine
- Tic-tac-toe state representation, rules and move application
- Game flow management
- Constants

All core components can be imported directly from this package.
"""

# Adapter contract
from tictactoe_ai.core.adapter import GameAdapter

# Game and game state
from tictactoe_ai.core.game import (
    Game, GameState, GameResult, TicTacToe, Move,
    create_game, simulate_random_game
)

# Constants
from tictactoe_ai.core.constants import (
    BOARD_SIZE, NUM_CELLS, EMPTY, PLAYER_ONE, PLAYER_TWO, PLAYERS,
    MAXIMIZING_PLAYER, PLAYER_SYMBOLS, WIN_LINES, other_player
)

__all__ = [
    # Adapter
    'GameAdapter',

    # Game
    'Game', 'GameState', 'GameResult', 'TicTacToe', 'Move',
    'create_game', 'simulate_random_game',

    # Constants
    'BOARD_SIZE', 'NUM_CELLS', 'EMPTY', 'PLAYER_ONE', 'PLAYER_TWO', 'PLAYERS',
    'MAXIMIZING_PLAYER', 'PLAYER_SYMBOLS', 'WIN_LINES', 'other_player'
]
