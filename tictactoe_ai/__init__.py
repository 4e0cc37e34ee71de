"""
Tic-Tac-Toe AI - A Monte Carlo Tree Search game solver.

This package provides tic-tac-toe rules behind a small game adapter
contract, along with an MCTS engine and agents that play through it.
"""

__version__ = "0.1.0"
__author__ = "Tic-Tac-Toe AI Team"

# Make key components available at package level
from tictactoe_ai.core.game import Game, GameState, TicTacToe
from tictactoe_ai.core.adapter import GameAdapter
from tictactoe_ai.exceptions import (
    TicTacToeAIError, EmptySearchResult, AdapterContractViolation
)
from tictactoe_ai.mcts.search import search, mcts_search

# Version info as a tuple for programmatic access
VERSION_INFO = tuple(map(int, __version__.split('.')))
