"""
Tests for the MCTS phases and the search driver.
"""
import random

import pytest

from tictactoe_ai.core.adapter import GameAdapter
from tictactoe_ai.core.game import GameState, TicTacToe
from tictactoe_ai.exceptions import AdapterContractViolation, EmptySearchResult
from tictactoe_ai.mcts.config import MCTSConfig
from tictactoe_ai.mcts.node import MCTSNode
from tictactoe_ai.mcts.search import (
    backpropagate, choose_final_child, count_nodes, get_action_statistics,
    get_principal_variation, mcts_search, node_depth, search, select_node,
    simulate_game, simulate_game_with_steps
)

# Player two (O) to move, with an immediate win at (1, 2)
O_TO_WIN = ["X.X", "OO.", ".X."]


@pytest.fixture
def game():
    return TicTacToe()


class StuckAdapter(GameAdapter):
    """Adapter whose only state claims to be open but has no moves."""

    def is_terminal(self, state):
        return False

    def legal_successors(self, state):
        return []

    def terminal_reward(self, state):
        raise AdapterContractViolation("terminal_reward called on a non-terminal state")

    def reward_sign(self, state):
        return 1


def run_iterations(root, game, iterations, seed=0):
    rng = random.Random(seed)
    for _ in range(iterations):
        leaf = select_node(root, rng)
        reward = game.reward_sign(leaf.state) * simulate_game(leaf.state, game, rng)
        backpropagate(leaf, reward)


def test_backpropagation_alternates_sign(game):
    root = MCTSNode(GameState(), game)
    chain = [root]
    for _ in range(5):
        chain.append(chain[-1].expand())
    leaf = chain[-1]

    backpropagate(leaf, 1.0)

    # Distance k from the leaf received (-1) ** k
    for k, node in enumerate(reversed(chain)):
        assert node.visits == 1
        assert node.total_reward == (-1) ** k
    assert node_depth(leaf) == 5


def test_backpropagation_adds_one_visit_per_call(game):
    root = MCTSNode(GameState(), game)
    child = root.expand()
    grandchild = child.expand()

    backpropagate(grandchild, -1.0)
    backpropagate(child, 1.0)

    assert (grandchild.visits, grandchild.total_reward) == (1, -1.0)
    assert (child.visits, child.total_reward) == (2, 2.0)
    assert (root.visits, root.total_reward) == (2, -2.0)


def test_select_expands_fresh_root(game):
    root = MCTSNode(GameState(), game)

    leaf = select_node(root, random.Random(0))

    assert leaf.parent is root
    assert root.children == [leaf]
    assert leaf.move == (0, 0)


def test_select_descends_when_fully_expanded(game):
    root = MCTSNode(GameState.from_rows(["XOX", "OXO", "..."]), game)
    run_iterations(root, game, 3)
    assert root.is_fully_expanded()

    leaf = select_node(root, random.Random(1))

    assert len(root.children) == 3
    if leaf in root.children:
        # X completes a diagonal at (2, 0) or (2, 2)
        assert leaf.is_terminal()
        assert leaf.move in ((2, 0), (2, 2))
    else:
        assert leaf.parent in root.children
        assert leaf.parent.move == (2, 1)
        assert leaf.parent.children[-1] is leaf


def test_select_returns_terminal_node(game):
    root = MCTSNode(GameState.from_rows(["XXX", "OO.", "..."]), game)

    assert select_node(root) is root


def test_select_stops_when_open_node_has_no_moves():
    root = MCTSNode("stuck", StuckAdapter())

    assert select_node(root) is root


def test_simulation_from_terminal_state(game):
    state = GameState.from_rows(["OOO", "XX.", "X.."])

    reward, steps = simulate_game_with_steps(state, game, random.Random(0))

    assert (reward, steps) == (-1, 0)


def test_simulation_is_reproducible(game):
    rewards = [simulate_game(GameState(), game, random.Random(seed)) for seed in range(30)]
    again = [simulate_game(GameState(), game, random.Random(seed)) for seed in range(30)]

    assert rewards == again
    assert set(rewards) <= {-1.0, 0.0, 1.0}
    assert len(set(rewards)) > 1


def test_simulation_reports_broken_adapter():
    with pytest.raises(AdapterContractViolation):
        simulate_game("stuck", StuckAdapter(), random.Random(0))


def test_search_aborts_on_broken_adapter():
    with pytest.raises(AdapterContractViolation):
        mcts_search("stuck", game=StuckAdapter(), config=MCTSConfig(iterations=5, seed=0))


def test_visit_invariants_hold_after_many_iterations(game):
    root = MCTSNode(GameState(), game)
    run_iterations(root, game, 500, seed=11)

    assert root.visits == 500
    stack = [root]
    while stack:
        node = stack.pop()
        assert len(node.children) <= node.num_legal_moves
        assert node.visits >= sum(child.visits for child in node.children)
        assert all(child.visits >= 1 for child in node.children)
        stack.extend(node.children)


def test_search_on_terminal_state_fails_cleanly(game):
    terminal = GameState.from_rows(["XOX", "XOO", "OXX"])

    with pytest.raises(EmptySearchResult):
        search(terminal, 100)
    with pytest.raises(EmptySearchResult):
        mcts_search(terminal, config=MCTSConfig(iterations=10, seed=0))


def test_search_requires_positive_iterations():
    with pytest.raises(ValueError):
        search(GameState(), 0)


def test_search_finds_immediate_win(game):
    state = GameState.from_rows(O_TO_WIN)
    assert state.current_player == 2

    wins = 0
    runs = 20
    for seed in range(runs):
        chosen = search(state, 5000, rng=random.Random(seed))
        if game.find_move(state, chosen) == (1, 2):
            wins += 1

    assert wins >= 0.95 * runs


def test_mean_reward_selection_finds_immediate_win(game):
    state = GameState.from_rows(O_TO_WIN)
    config = MCTSConfig(iterations=2000, final_selection="mean_reward", seed=5)

    chosen, stats = mcts_search(state, config=config)

    # Any other move scoring a perfect mean so far would tie with the win
    table = stats["action_statistics"]
    assert stats["chosen_move"] == game.find_move(state, chosen)
    assert table[str(stats["chosen_move"])]["value"] == pytest.approx(1.0)
    assert table[str((1, 2))]["value"] == pytest.approx(1.0)


def test_player_one_blocks_immediate_loss(game):
    # O threatens the left column; X has no win of its own
    state = GameState.from_rows(["O.X", "O..", ".X."])
    assert state.current_player == 1

    chosen, _ = mcts_search(state, config=MCTSConfig(iterations=5000, seed=2))

    assert game.find_move(state, chosen) == (2, 0)


def test_search_statistics(game):
    state = GameState.from_rows(O_TO_WIN)
    chosen, stats = mcts_search(state, config=MCTSConfig(iterations=300, seed=0))

    assert stats["iterations"] == 300
    assert stats["node_count"] > len(game.legal_successors(state))
    assert stats["max_tree_depth"] >= 1
    assert set(stats["action_statistics"]) == {
        str(game.find_move(state, s)) for s in game.legal_successors(state)
    }
    assert sum(row["visits"] for row in stats["action_statistics"].values()) == 300
    best_row = stats["action_statistics"][str((1, 2))]
    assert best_row["value"] == pytest.approx(1.0)
    assert best_row["win_rate"] == pytest.approx(1.0)
    assert stats["principal_variation"][0][0] == (1, 2)


def test_seeded_searches_are_reproducible():
    state = GameState()
    config = MCTSConfig(iterations=400, seed=42)

    first_state, first = mcts_search(state, config=config)
    second_state, second = mcts_search(state, config=config)

    assert first_state == second_state
    assert first["action_statistics"] == second["action_statistics"]
    assert first["principal_variation"] == second["principal_variation"]


def test_choose_final_child_policies(game):
    root = MCTSNode(GameState(), game)
    popular, accurate = root.expand(), root.expand()
    popular.visits, popular.total_reward = 10, 2.0
    accurate.visits, accurate.total_reward = 4, 3.0
    root.visits = 14

    assert choose_final_child(root, "visits") is popular
    assert choose_final_child(root, "mean_reward", random.Random(0)) is accurate
    with pytest.raises(ValueError):
        choose_final_child(root, "ucb")


def test_tree_helpers(game):
    root = MCTSNode(GameState(), game)
    child = root.expand()
    grandchild = child.expand()
    for node in (root, child, grandchild):
        node.visits = 1
    child.total_reward = 1.0

    assert count_nodes(root) == 3
    assert get_principal_variation(root) == [((0, 0), 1.0), ((0, 1), 0.0)]
    stats = get_action_statistics(root)
    assert stats["(0, 0)"]["visits"] == 1
    assert stats["(0, 0)"]["win_rate"] == pytest.approx(1.0)
