"""
Configuration for Monte Carlo Tree Search (MCTS).

This module defines the configuration parameters for the MCTS algorithm:
the iteration budget, the UCB1 exploration constant, the final move
selection policy and the random seed.
"""
from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Literal, Optional
import math


@dataclass
class MCTSConfig:
    """
    Configuration parameters for Monte Carlo Tree Search.

    The iteration count is the only budget control; there is no time limit.
    """
    # Search parameters
    iterations: int = 5000
    """Number of select/simulate/backpropagate iterations per move decision"""

    exploration_weight: float = math.sqrt(2)
    """UCB1 exploration constant C (default is sqrt(2))"""

    final_selection: Literal["visits", "mean_reward"] = "visits"
    """How the recommended move is picked once the search is over"""

    # Reproducibility
    seed: Optional[int] = None
    """Seed for the search's random number generator (None = unseeded)"""

    # Output
    show_progress: bool = False
    """Whether to display a progress bar over the iterations"""

    FINAL_SELECTION_POLICIES: ClassVar[tuple] = ("visits", "mean_reward")

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.iterations <= 0:
            raise ValueError("iterations must be positive")

        if self.exploration_weight <= 0:
            raise ValueError("exploration_weight must be positive")

        if self.final_selection not in self.FINAL_SELECTION_POLICIES:
            raise ValueError("final_selection must be 'visits' or 'mean_reward'")

    @classmethod
    def default(cls) -> 'MCTSConfig':
        """
        Get the default configuration.

        Returns:
            Default MCTSConfig object
        """
        return cls()

    @classmethod
    def fast(cls) -> 'MCTSConfig':
        """
        Get a configuration optimized for speed (fewer iterations).

        Returns:
            Fast MCTSConfig object
        """
        return cls(iterations=500)

    @classmethod
    def deep(cls) -> 'MCTSConfig':
        """
        Get a configuration optimized for deep search.

        Returns:
            Deep MCTSConfig object
        """
        return cls(iterations=20000)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'MCTSConfig':
        """
        Create a configuration from a dictionary.

        Unknown keys are ignored.

        Args:
            config_dict: Dictionary of configuration parameters

        Returns:
            MCTSConfig object
        """
        valid_params = {k: v for k, v in config_dict.items()
                        if k in {f.name for f in fields(cls)}}
        return cls(**valid_params)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the configuration to a dictionary.

        Returns:
            Dictionary of configuration parameters
        """
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def __str__(self) -> str:
        params = ", ".join(f"{name}={value}" for name, value in self.to_dict().items())
        return f"MCTSConfig({params})"
