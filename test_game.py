"""
Tests for the tic-tac-toe game adapter, state and game flow.
"""
import random

import numpy as np
import pytest

from tictactoe_ai.core.constants import EMPTY, NUM_CELLS, PLAYER_ONE, PLAYER_TWO
from tictactoe_ai.core.game import (
    Game, GameResult, GameState, TicTacToe, create_game, simulate_random_game
)
from tictactoe_ai.exceptions import AdapterContractViolation


@pytest.fixture
def game():
    return TicTacToe()


X_WINS = [
    ["XXX", "OO.", "..."],  # row
    ["XO.", "XO.", "X.."],  # column
    ["XO.", "OX.", "..X"],  # diagonal
    ["O.X", ".XO", "X.."],  # anti-diagonal
]

O_WINS = [
    ["OOO", "XX.", "X.."],
    ["XXO", "XO.", "O.."],
    [".XO", "X.O", "X.O"],
]


def test_empty_board(game):
    state = GameState()

    assert state.current_player == PLAYER_ONE
    assert state.occupied_cells == 0
    assert not game.is_terminal(state)
    assert len(game.legal_successors(state)) == NUM_CELLS


@pytest.mark.parametrize("rows", X_WINS)
def test_player_one_line_rewards_one(game, rows):
    state = GameState.from_rows(rows)

    assert state.winner == PLAYER_ONE
    assert game.is_terminal(state)
    assert game.terminal_reward(state) == 1
    assert game.legal_successors(state) == []


@pytest.mark.parametrize("rows", O_WINS)
def test_player_two_line_rewards_minus_one(game, rows):
    state = GameState.from_rows(rows)

    assert state.winner == PLAYER_TWO
    assert game.is_terminal(state)
    assert game.terminal_reward(state) == -1


def test_full_board_without_line_is_draw(game):
    state = GameState.from_rows(["XOX", "XOO", "OXX"])

    assert state.is_full
    assert state.winner == EMPTY
    assert game.is_terminal(state)
    assert game.terminal_reward(state) == 0


@pytest.mark.parametrize("rows", [
    ["...", "...", "..."],
    ["X..", "...", "..."],
    ["XO.", ".X.", "..O"],
    ["XOX", "XOO", "OX."],
])
def test_non_full_board_without_line_is_not_terminal(game, rows):
    assert not game.is_terminal(GameState.from_rows(rows))


def test_terminal_reward_on_open_position_violates_contract(game):
    with pytest.raises(AdapterContractViolation):
        game.terminal_reward(GameState.from_rows(["X..", "...", "..."]))


def test_move_count_conservation_over_random_games(game):
    rng = random.Random(1234)
    for _ in range(50):
        state = GameState()
        while not game.is_terminal(state):
            successors = game.legal_successors(state)
            assert len(successors) + state.occupied_cells == NUM_CELLS
            # Every successor fills exactly one new cell
            assert all(s.occupied_cells == state.occupied_cells + 1 for s in successors)
            state = rng.choice(successors)


def test_successors_are_row_major_and_alternate_player(game):
    state = GameState.from_rows(["X..", ".O.", "..."])
    successors = game.legal_successors(state)

    moves = [game.find_move(state, s) for s in successors]
    assert moves == [(0, 1), (0, 2), (1, 0), (1, 2), (2, 0), (2, 1), (2, 2)]
    assert all(s.current_player == PLAYER_TWO for s in successors)
    assert all(s.cells.count(PLAYER_ONE) == 2 for s in successors)


def test_equality_is_positional(game):
    a = GameState.from_rows(["X..", "...", "..."], current_player=PLAYER_ONE)
    b = GameState.from_rows(["X..", "...", "..."], current_player=PLAYER_TWO)

    assert a == b
    assert hash(a) == hash(b)
    assert a != GameState.from_rows([".X.", "...", "..."])


@pytest.mark.parametrize("row, col", [(-1, 0), (0, 3), (3, 3), (1, 1)])
def test_with_move_rejects_invalid_moves(row, col):
    state = GameState.from_rows(["...", ".X.", "..."])

    assert state.with_move(row, col) is None
    assert not state.is_valid_move(row, col)
    assert state == GameState.from_rows(["...", ".X.", "..."])


def test_with_move_leaves_original_unchanged():
    state = GameState()
    new_state = state.with_move(2, 1)

    assert state.occupied_cells == 0
    assert new_state.cells[7] == PLAYER_ONE
    assert new_state.current_player == PLAYER_TWO


def test_board_view_is_read_only():
    board = GameState.from_rows(["X..", ".O.", "..."]).board

    assert board.shape == (3, 3)
    assert board[0, 0] == PLAYER_ONE and board[1, 1] == PLAYER_TWO
    with pytest.raises(ValueError):
        board[2, 2] = PLAYER_ONE


def test_find_move_diffs_occupied_cells(game):
    before = GameState.from_rows(["X..", ".O.", "..."])
    after = before.with_move(2, 0)

    assert game.find_move(before, after) == (2, 0)
    assert game.find_move(before, before) is None


def test_reward_sign_follows_last_mover(game):
    after_x = GameState().with_move(0, 0)
    after_o = after_x.with_move(1, 1)

    assert game.reward_sign(after_x) == 1
    assert game.reward_sign(after_o) == -1


def test_invalid_state_rejected():
    with pytest.raises(ValueError):
        GameState(cells=(0,) * 8)
    with pytest.raises(ValueError):
        GameState(cells=(3,) + (0,) * 8)
    with pytest.raises(ValueError):
        GameState(current_player=0)


def test_dict_round_trip():
    state = GameState.from_rows(["XO.", "...", "..X"])
    restored = GameState.from_dict(state.to_dict())

    assert restored == state
    assert restored.current_player == state.current_player


def test_str_renders_board():
    text = str(GameState.from_rows(["X..", ".O.", "..."]))

    assert "0 X . ." in text
    assert "1 . O ." in text
    assert "Player 1's turn" in text


class TestGameFlow:
    def test_make_move_rejects_invalid_and_keeps_state(self):
        game = create_game()
        assert game.make_move(1, 1)
        state = game.state

        assert not game.make_move(1, 1)
        assert not game.make_move(5, 0)
        assert game.state is state
        assert game.history == [(PLAYER_ONE, (1, 1))]

    def test_no_moves_after_game_over(self):
        game = Game(initial_state=GameState.from_rows(["XX.", "OO.", "..."]))
        assert game.make_move(0, 2)

        assert game.game_over
        assert game.get_result() == GameResult.WINNER
        assert game.get_winner() == PLAYER_ONE
        assert not game.make_move(2, 2)

    def test_step_uses_registered_agents(self):
        game = Game(player_names=["Alice", "Bob"])
        moves = iter([(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)])
        for player in (PLAYER_ONE, PLAYER_TWO):
            game.register_agent(player, lambda state, player_id: next(moves))

        final_state = game.run_game()

        assert final_state.winner == PLAYER_ONE
        stats = game.get_game_statistics()
        assert stats["turns"] == 5
        assert stats["winner_name"] == "Alice"
        assert stats["player_1_moves"] == 3
        assert stats["player_2_moves"] == 2

    def test_step_rejects_invalid_agent_move(self):
        game = Game()
        game.register_agent(PLAYER_ONE, lambda state, player_id: (9, 9))

        with pytest.raises(ValueError):
            game.step()

    def test_step_without_agent_or_move(self):
        with pytest.raises(ValueError):
            Game().step()

    def test_run_game_requires_both_agents(self):
        game = Game()
        game.register_agent(PLAYER_ONE, lambda state, player_id: state.empty_cells()[0])

        with pytest.raises(ValueError):
            game.run_game()

    def test_reset(self):
        game = Game()
        game.make_move(0, 0)

        assert game.reset() == GameState()
        assert game.history == []
        assert game.get_result() == GameResult.IN_PROGRESS

    def test_player_names_must_match(self):
        with pytest.raises(ValueError):
            Game(player_names=["Solo"])


def test_simulate_random_game_is_reproducible():
    first_state, first_result = simulate_random_game(random_seed=3)
    second_state, second_result = simulate_random_game(random_seed=3)

    assert first_state == second_state
    assert first_result == second_result
    assert first_result in (GameResult.WINNER, GameResult.DRAW)
    assert np.count_nonzero(first_state.board) >= 5
