"""
Monte Carlo Tree Search (MCTS) algorithm.

This module implements the core MCTS algorithm with the four standard phases:
1. Selection: Traverse the tree with UCB1 to find a promising node
2. Expansion: Create one new child node
3. Simulation: Run a uniformly random playout to estimate the node's value
4. Backpropagation: Update statistics up the tree, flipping the reward's sign
   at every level

All randomness goes through an explicit ``random.Random`` handle so searches
are reproducible from a seed.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
import logging
import math
import random
import time

from tqdm import tqdm

from tictactoe_ai.core.adapter import GameAdapter
from tictactoe_ai.core.game import TicTacToe
from tictactoe_ai.exceptions import EmptySearchResult
from tictactoe_ai.mcts.config import MCTSConfig
from tictactoe_ai.mcts.node import EXPLORATION_CONSTANT, MCTSNode

logger = logging.getLogger(__name__)


def mcts_search(
    state: Any,
    game: Optional[GameAdapter] = None,
    config: Optional[MCTSConfig] = None,
    rng: Optional[random.Random] = None
) -> Tuple[Any, Dict[str, Any]]:
    """
    Run Monte Carlo Tree Search to find the best successor state.

    This function runs the full MCTS algorithm:
    1. Create a root node from the current state
    2. Repeatedly run selection/expansion, simulation and backpropagation
    3. Return the recommended child according to ``config.final_selection``

    The tree is discarded when the function returns.

    Args:
        state: Current game state
        game: Game adapter (defaults to tic-tac-toe)
        config: MCTS configuration parameters
        rng: Random number generator (defaults to one seeded from ``config.seed``)

    Returns:
        Tuple of (recommended successor state, search statistics)

    Raises:
        EmptySearchResult: If the root has no children after the search,
            e.g. because ``state`` is already terminal
    """
    if config is None:
        config = MCTSConfig()
    if game is None:
        game = TicTacToe()
    if rng is None:
        rng = random.Random(config.seed)

    root = MCTSNode(state=state, game=game)

    stats: Dict[str, Any] = {
        "iterations": 0,
        "max_tree_depth": 0,
        "max_simulation_steps": 0,
        "total_simulation_steps": 0,
        "time_elapsed": 0.0,
    }

    start_time = time.time()

    iterations = range(config.iterations)
    if config.show_progress:
        iterations = tqdm(iterations, desc="MCTS", unit="it", leave=False)

    for _ in iterations:
        # 1. Selection & Expansion
        leaf = select_node(root, rng, config.exploration_weight)

        # 2. Simulation, scored for the player who moved into the leaf
        outcome, steps = simulate_game_with_steps(leaf.state, game, rng)
        reward = game.reward_sign(leaf.state) * outcome

        # 3. Backpropagation
        backpropagate(leaf, reward)

        stats["iterations"] += 1
        stats["total_simulation_steps"] += steps
        stats["max_simulation_steps"] = max(stats["max_simulation_steps"], steps)
        stats["max_tree_depth"] = max(stats["max_tree_depth"], node_depth(leaf))

    stats["time_elapsed"] = time.time() - start_time
    stats["iterations_per_second"] = stats["iterations"] / max(0.001, stats["time_elapsed"])
    stats["average_simulation_steps"] = stats["total_simulation_steps"] / max(1, stats["iterations"])
    stats["node_count"] = count_nodes(root)

    best = choose_final_child(root, config.final_selection, rng, config.exploration_weight)
    if best is None:
        logger.warning("Search from a state with no legal moves produced no children")
        raise EmptySearchResult("search produced no children; the root state has no legal moves")

    stats["chosen_move"] = best.move
    stats["action_statistics"] = get_action_statistics(root, config.exploration_weight)
    stats["principal_variation"] = get_principal_variation(root)

    logger.debug(
        "MCTS chose %s after %d iterations (%d nodes, %.3fs)",
        best.move, stats["iterations"], stats["node_count"], stats["time_elapsed"]
    )

    return best.state, stats


def search(
    root_state: Any,
    iteration_count: int,
    game: Optional[GameAdapter] = None,
    rng: Optional[random.Random] = None
) -> Any:
    """
    Run a search and return only the recommended successor state.

    Args:
        root_state: State to search from
        iteration_count: Number of iterations (must be positive)
        game: Game adapter (defaults to tic-tac-toe)
        rng: Random number generator

    Returns:
        Recommended successor state

    Raises:
        EmptySearchResult: If ``root_state`` has no legal moves
    """
    config = MCTSConfig(iterations=iteration_count)
    chosen_state, _ = mcts_search(root_state, game=game, config=config, rng=rng)
    return chosen_state


def select_node(
    root: MCTSNode,
    rng: Optional[random.Random] = None,
    exploration_weight: float = EXPLORATION_CONSTANT
) -> MCTSNode:
    """
    Select a node to simulate from.

    This function implements the selection and expansion phases of MCTS.
    It descends with UCB1 while the current node is fully expanded and not
    terminal, then expands one new child if the node it stopped at allows it.

    Args:
        root: Root node of the MCTS tree
        rng: Random number generator used for tie-breaking (a fresh unseeded
            one per tie if None, which makes the descent non-reproducible)
        exploration_weight: UCB1 exploration constant

    Returns:
        The newly expanded child, or the terminal node the descent reached
    """
    node = root

    while not node.is_terminal() and node.is_fully_expanded():
        child = node.best_child(exploration=True, rng=rng, exploration_weight=exploration_weight)
        if child is None:
            break
        node = child

    if not node.is_terminal() and not node.is_fully_expanded():
        return expand_node(node)

    return node


def expand_node(node: MCTSNode) -> Optional[MCTSNode]:
    """
    Expand a node by adding a child.

    Args:
        node: Node to expand

    Returns:
        New child node, or None if the node is already fully expanded
    """
    return node.expand()


def simulate_game(state: Any, game: GameAdapter, rng: random.Random) -> float:
    """
    Play uniformly random moves from ``state`` until the game ends.

    Args:
        state: State to start the playout from
        game: Game adapter
        rng: Random number generator

    Returns:
        Fixed-perspective terminal reward of the final state
    """
    reward, _ = simulate_game_with_steps(state, game, rng)
    return reward


def simulate_game_with_steps(
    state: Any,
    game: GameAdapter,
    rng: random.Random
) -> Tuple[float, int]:
    """
    Run a random playout and report how many moves it took.

    If a non-terminal state has no successors the playout stops there; the
    adapter then raises AdapterContractViolation when asked for its reward.

    Args:
        state: State to start the playout from
        game: Game adapter
        rng: Random number generator

    Returns:
        Tuple of (fixed-perspective terminal reward, number of moves played)
    """
    steps = 0
    while not game.is_terminal(state):
        successors = game.legal_successors(state)
        if not successors:
            break
        state = rng.choice(successors)
        steps += 1

    return game.terminal_reward(state), steps


def backpropagate(node: MCTSNode, reward: float) -> None:
    """
    Update statistics from ``node`` up to the root.

    Each level sees the reward from its own mover's perspective, so the sign
    flips at every step.

    Args:
        node: Node the simulation started from
        reward: Reward from the perspective of the player who moved into ``node``
    """
    current: Optional[MCTSNode] = node
    while current is not None:
        current.update(reward)
        reward = -reward
        current = current.parent


def choose_final_child(
    root: MCTSNode,
    policy: str = "visits",
    rng: Optional[random.Random] = None,
    exploration_weight: float = EXPLORATION_CONSTANT
) -> Optional[MCTSNode]:
    """
    Pick the recommended child of the root once the search is over.

    Args:
        root: Root node of the MCTS tree
        policy: "visits" for the most visited child (first expanded on ties),
            "mean_reward" for the best mean reward (random on ties)
        rng: Random number generator used for tie-breaking (a fresh unseeded
            one per tie if None, which makes the pick non-reproducible)
        exploration_weight: UCB1 exploration constant

    Returns:
        Recommended child, or None if the root has no children
    """
    if policy == "visits":
        return root.most_visited_child()
    if policy == "mean_reward":
        return root.best_child(exploration=False, rng=rng, exploration_weight=exploration_weight)
    raise ValueError(f"Unknown final selection policy: {policy}")


def node_depth(node: MCTSNode) -> int:
    """
    Get the number of moves between the root and ``node``.

    Args:
        node: Node in the tree

    Returns:
        Depth of the node (0 for the root)
    """
    depth = 0
    current = node.parent
    while current is not None:
        depth += 1
        current = current.parent
    return depth


def count_nodes(node: MCTSNode) -> int:
    """
    Count the total number of nodes in the tree.

    Args:
        node: Root node of the tree

    Returns:
        Total number of nodes
    """
    count = 0
    stack = [node]
    while stack:
        current = stack.pop()
        count += 1
        stack.extend(current.children)
    return count


def get_principal_variation(root: MCTSNode, max_depth: int = 9) -> List[Tuple[Any, float]]:
    """
    Get the principal variation (most visited path) from the root.

    Args:
        root: Root node of the MCTS tree
        max_depth: Maximum depth to explore

    Returns:
        List of (move, mean reward) pairs along the principal variation
    """
    result = []
    current = root

    while current.children and len(result) < max_depth:
        best_child = current.most_visited_child()
        result.append((best_child.move, best_child.mean_reward))
        current = best_child

    return result


def get_action_statistics(
    root: MCTSNode,
    exploration_weight: float = EXPLORATION_CONSTANT
) -> Dict[str, Dict[str, float]]:
    """
    Get statistics for every child of the root.

    The win rate maps the mean reward from [-1, 1] onto [0, 1], counting a
    draw as half a win.

    Args:
        root: Root node of the MCTS tree
        exploration_weight: UCB1 exploration constant used for the "ucb" column

    Returns:
        Dictionary mapping move strings to statistics
    """
    result = {}

    for child in root.children:
        value = child.mean_reward
        result[str(child.move)] = {
            "visits": child.visits,
            "reward": child.total_reward,
            "value": value,
            "win_rate": (1.0 + value) / 2.0,
            "ucb": (root.ucb_score(child, True, exploration_weight)
                    if root.visits > 0 else math.inf),
        }

    return result
