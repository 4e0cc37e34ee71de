"""
Monte Carlo Tree Search (MCTS) implementation for tic-tac-toe.

This package provides a complete MCTS agent that plays without any training.
The MCTS algorithm works by:

1. Selection: Starting from the root node, select child nodes using UCB1 while
   the current node is fully expanded.
2. Expansion: Create one new child node for a successor not yet in the tree.
3. Simulation: From the new node, perform a random playout to the end of the game.
4. Backpropagation: Update the statistics of all nodes on the path, negating the
   reward at every level.

The engine only talks to the game through the GameAdapter contract, so other
two-player games can be plugged in.
"""

from tictactoe_ai.mcts.node import MCTSNode, EXPLORATION_CONSTANT
from tictactoe_ai.mcts.agent import MCTSAgent, MCTSAgentFactory, RandomAgent
from tictactoe_ai.mcts.search import (
    mcts_search,
    search,
    select_node,
    expand_node,
    simulate_game,
    backpropagate,
    choose_final_child,
    count_nodes,
    get_action_statistics,
    get_principal_variation
)
from tictactoe_ai.mcts.config import MCTSConfig
from tictactoe_ai.mcts.evaluate import play_match

# Default configuration
DEFAULT_CONFIG = MCTSConfig(
    iterations=5000,                      # Number of MCTS iterations per move
    exploration_weight=EXPLORATION_CONSTANT,  # UCB1 exploration parameter (sqrt(2))
    final_selection="visits"              # Recommend the most visited move
)

__all__ = [
    'MCTSAgent',
    'MCTSAgentFactory',
    'RandomAgent',
    'MCTSNode',
    'MCTSConfig',
    'EXPLORATION_CONSTANT',
    'mcts_search',
    'search',
    'select_node',
    'expand_node',
    'simulate_game',
    'backpropagate',
    'choose_final_child',
    'count_nodes',
    'get_action_statistics',
    'get_principal_variation',
    'play_match',
    'DEFAULT_CONFIG'
]
