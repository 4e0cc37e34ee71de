"""
Head-to-head evaluation of tic-tac-toe agents.
"""
from collections import Counter
from typing import Any, Dict
import logging

from tqdm import tqdm

from tictactoe_ai.core.constants import PLAYER_ONE, PLAYER_TWO
from tictactoe_ai.core.game import Game, GameResult

logger = logging.getLogger(__name__)


def play_match(
    agent_one: Any,
    agent_two: Any,
    num_games: int = 10,
    alternate: bool = True,
    show_progress: bool = True
) -> Dict[str, int]:
    """
    Play a series of complete games between two agents.

    Args:
        agent_one: First agent (anything with ``get_action_callback``)
        agent_two: Second agent
        num_games: Number of games to play
        alternate: Whether the agents swap sides after every game
        show_progress: Whether to display a progress bar

    Returns:
        Dictionary with "agent_one_wins", "agent_two_wins" and "draws"
    """
    if num_games <= 0:
        raise ValueError("num_games must be positive")

    results: Counter = Counter(agent_one_wins=0, agent_two_wins=0, draws=0)

    for game_index in tqdm(range(num_games), desc="Evaluating", disable=not show_progress):
        agent_one_side = PLAYER_TWO if alternate and game_index % 2 == 1 else PLAYER_ONE
        agent_two_side = PLAYER_ONE if agent_one_side == PLAYER_TWO else PLAYER_TWO

        game = Game()
        game.register_agent(agent_one_side, agent_one.get_action_callback())
        game.register_agent(agent_two_side, agent_two.get_action_callback())
        game.run_game()

        if game.get_result() == GameResult.DRAW:
            results["draws"] += 1
        elif game.get_winner() == agent_one_side:
            results["agent_one_wins"] += 1
        else:
            results["agent_two_wins"] += 1

        logger.debug("Game %d finished: %s", game_index + 1, game.get_result().name)

    return dict(results)
