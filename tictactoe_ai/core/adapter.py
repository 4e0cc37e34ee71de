"""
Game adapter contract consumed by the MCTS engine.

The engine never looks inside a game state. Everything it needs to know
about a game goes through the small interface defined here, so any
two-player, perfect-information, turn-based game with a finite move set
can be plugged in.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence


class GameAdapter(ABC):
    """
    Interface between a concrete game and the search engine.

    States are treated as immutable values: the engine compares them with
    ``==`` to detect successors it has already expanded and never mutates
    them.
    """

    @abstractmethod
    def is_terminal(self, state: Any) -> bool:
        """
        Check whether a state has a decided outcome.

        Args:
            state: Game state to check

        Returns:
            True if the game is won, lost or drawn, or no legal move remains
        """

    @abstractmethod
    def legal_successors(self, state: Any) -> Sequence[Any]:
        """
        Get every state reachable by exactly one legal move.

        The order must be stable for a given state, since expansion picks
        the first successor not yet represented among a node's children.

        Args:
            state: Game state to expand

        Returns:
            Successor states, empty if the state is terminal
        """

    @abstractmethod
    def terminal_reward(self, state: Any) -> float:
        """
        Get the outcome of a terminal state.

        The reward is always scored for the designated maximizing player:
        +1 for a win, -1 for a loss and 0 for a draw.

        Args:
            state: Terminal game state

        Returns:
            Fixed-perspective reward

        Raises:
            AdapterContractViolation: If the state is not terminal
        """

    @abstractmethod
    def reward_sign(self, state: Any) -> int:
        """
        Get the sign that turns a fixed-perspective reward into the
        perspective of the player who made the move leading into ``state``.

        Args:
            state: Game state

        Returns:
            +1 if that player is the maximizing player, -1 otherwise
        """

    def find_move(self, before: Any, after: Any) -> Optional[Any]:
        """
        Describe the move that turns ``before`` into ``after``.

        Only used for diagnostics, so adapters may leave it unimplemented.

        Args:
            before: Game state before the move
            after: Successor state

        Returns:
            A human-readable move, or None if it cannot be determined
        """
        return None
