"""
Monte Carlo Tree Search Node.

This module defines the MCTSNode class which represents a node in the MCTS tree.
Each node holds a game state, statistics (visits, accumulated reward), the
child nodes it owns and a weak back-reference to its parent.
"""
from __future__ import annotations
from typing import Any, List, Optional
import math
import random
import weakref

from tictactoe_ai.core.adapter import GameAdapter

# UCB1 exploration constant
EXPLORATION_CONSTANT = math.sqrt(2)


class MCTSNode:
    """
    A node in the Monte Carlo Tree Search.

    ``total_reward`` is scored from the perspective of the player who made the
    move leading into this node, so a parent picking the child with the best
    mean reward picks the best move for the player on turn at the parent.

    Parents own their children through ``children``. Children only hold a
    weak reference to their parent, so dropping the root releases the whole tree.
    """

    def __init__(
        self,
        state: Any,
        game: GameAdapter,
        parent: Optional['MCTSNode'] = None,
        move: Optional[Any] = None,
    ):
        """
        Initialize an MCTS node.

        Args:
            state: The game state this node represents
            game: Adapter used to query the game rules
            parent: The parent node (None for root)
            move: The move that led to this state (None for root)
        """
        self.state = state
        self.game = game
        self._parent = weakref.ref(parent) if parent is not None else None
        self.move = move

        # Node statistics
        self.visits = 0
        self.total_reward = 0.0
        self.children: List[MCTSNode] = []

        # Pure functions of the immutable state, computed on first use
        self._terminal: Optional[bool] = None
        self._successors: Optional[List[Any]] = None

    @property
    def parent(self) -> Optional['MCTSNode']:
        """Get the parent node, or None for the root."""
        if self._parent is None:
            return None
        return self._parent()

    @property
    def successors(self) -> List[Any]:
        """Get the legal successor states of this node's state, in adapter order."""
        if self._successors is None:
            self._successors = list(self.game.legal_successors(self.state)) if not self.is_terminal() else []
        return self._successors

    @property
    def num_legal_moves(self) -> int:
        """Get the number of legal moves from this node's state."""
        return len(self.successors)

    @property
    def mean_reward(self) -> float:
        """Get the average reward per visit (0 if never visited)."""
        if self.visits == 0:
            return 0.0
        return self.total_reward / self.visits

    def is_terminal(self) -> bool:
        """
        Check if this node represents a terminal game state.

        Returns:
            True if the game is over, False otherwise
        """
        if self._terminal is None:
            self._terminal = self.game.is_terminal(self.state)
        return self._terminal

    def is_fully_expanded(self) -> bool:
        """
        Check if every legal move from this node has a child.

        Terminal nodes are trivially fully expanded.

        Returns:
            True if all moves have been expanded, False otherwise
        """
        return len(self.children) == self.num_legal_moves

    def untried_successors(self) -> List[Any]:
        """
        Get the successor states that are not yet represented by a child.

        Returns:
            List of unexpanded successor states, in adapter order
        """
        return [
            successor for successor in self.successors
            if not any(child.state == successor for child in self.children)
        ]

    def ucb_score(
        self,
        child: 'MCTSNode',
        exploration: bool = True,
        exploration_weight: float = EXPLORATION_CONSTANT
    ) -> float:
        """
        Calculate the UCB1 score for a child node.

        UCB1 = average_reward + exploration_weight * sqrt(ln(parent_visits) / child_visits)

        Args:
            child: Child node to calculate score for
            exploration: Whether to include the exploration term
            exploration_weight: Exploration constant C

        Returns:
            UCB1 score
        """
        # Unvisited children are tried first
        if child.visits == 0:
            return float('inf')

        exploitation = child.total_reward / child.visits
        if not exploration:
            return exploitation

        return exploitation + exploration_weight * math.sqrt(math.log(self.visits) / child.visits)

    def best_child(
        self,
        exploration: bool = True,
        rng: Optional[random.Random] = None,
        exploration_weight: float = EXPLORATION_CONSTANT
    ) -> Optional['MCTSNode']:
        """
        Select the child with the highest UCB1 score.

        Exact ties are broken uniformly at random. With ``exploration`` off,
        this picks the child with the best mean reward.

        Args:
            exploration: Whether to include the exploration term
            rng: Random number generator used for tie-breaking (a fresh unseeded
                one if None, which makes tie-breaks non-reproducible)
            exploration_weight: Exploration constant C

        Returns:
            Best child node, or None if there are no children
        """
        if not self.children:
            return None

        best_score = -math.inf
        best: List[MCTSNode] = []
        for child in self.children:
            score = self.ucb_score(child, exploration, exploration_weight)
            if score > best_score:
                best_score = score
                best = [child]
            elif score == best_score:
                best.append(child)

        if len(best) == 1:
            return best[0]
        return (rng or random.Random()).choice(best)

    def most_visited_child(self) -> Optional['MCTSNode']:
        """
        Get the child with the most visits.

        Ties go to the child that was expanded first.

        Returns:
            Most visited child, or None if there are no children
        """
        if not self.children:
            return None
        return max(self.children, key=lambda c: c.visits)

    def expand(self) -> Optional['MCTSNode']:
        """
        Expand the tree by adding a new child node.

        The new child holds the first successor, in adapter order, that no
        existing child represents yet.

        Returns:
            The new child node, or None if the node is already fully expanded
        """
        for successor in self.successors:
            if any(child.state == successor for child in self.children):
                continue

            child = MCTSNode(
                state=successor,
                game=self.game,
                parent=self,
                move=self.game.find_move(self.state, successor),
            )
            self.children.append(child)
            return child

        return None

    def update(self, reward: float) -> None:
        """
        Record one simulation result passing through this node.

        Args:
            reward: Reward from the perspective of the player who moved into this node
        """
        self.visits += 1
        self.total_reward += reward

    def __str__(self) -> str:
        return (f"MCTSNode(move={self.move}, "
                f"visits={self.visits}, "
                f"reward={self.total_reward:.2f}, "
                f"children={len(self.children)}/{self.num_legal_moves})")
