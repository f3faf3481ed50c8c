"""Tests for the computer player's move selection."""

import math
import random

import pytest

from tictactoe.ai import (
    ComputerPlayer,
    Difficulty,
    NoLegalMoveError,
    choose_move,
    find_immediate_win,
    heuristic_move,
    minimax,
)
from tictactoe.game import EMPTY, InvalidBoardError, TicTacToeGame, empty_cells, evaluate


def board_from(text):
    return [EMPTY if ch == "." else ch for ch in text]


class ScriptedRandom:
    """Random source with a fixed roll that always picks the last option."""

    def __init__(self, roll):
        self.roll = roll
        self.choices = []

    def random(self):
        return self.roll

    def choice(self, seq):
        self.choices.append(list(seq))
        return seq[-1]


def test_hard_takes_immediate_win():
    board = board_from("OO.XX....")
    assert choose_move(board, "O", Difficulty.HARD) == 2


def test_hard_blocks_opponent_win():
    board = board_from("XX.O.....")
    assert choose_move(board, "O", Difficulty.HARD) == 2


def test_hard_prefers_first_cell_on_ties():
    assert choose_move([EMPTY] * 9, "X", Difficulty.HARD) == 0


def test_minimax_scores_terminal_positions():
    assert minimax(board_from("XXXOO...."), "O", "X", -math.inf, math.inf) == (10, None)
    assert minimax(board_from("XXXOO...."), "O", "O", -math.inf, math.inf) == (-10, None)
    assert minimax(board_from("XOXXOOOXX"), "X", "X", -math.inf, math.inf) == (0, None)


def test_minimax_restores_board():
    board = board_from("X...O....")
    snapshot = list(board)
    minimax(board, "X", "X", -math.inf, math.inf)
    assert board == snapshot


def _hard_never_loses(board, to_move, mover):
    outcome = evaluate(board)
    if outcome.is_terminal:
        assert outcome.winner in (None, mover), "".join(board)
        return
    if to_move == mover:
        moves = [choose_move(board, mover, Difficulty.HARD)]
    else:
        moves = empty_cells(board)
    for idx in moves:
        child = list(board)
        child[idx] = to_move
        _hard_never_loses(child, "O" if to_move == "X" else "X", mover)


@pytest.mark.parametrize("mover", ["X", "O"])
def test_hard_never_loses_against_any_replies(mover):
    _hard_never_loses([EMPTY] * 9, "X", mover)


def test_hard_vs_hard_is_a_draw():
    game = TicTacToeGame()
    while not game.is_over():
        game.play_move(choose_move(game.cells, game.current_player, Difficulty.HARD))
    assert evaluate(game.cells).winner is None


def test_find_immediate_win_uses_line_order():
    # O can finish the top row or the left column; the row comes first
    board = board_from("OO.O..X.X")
    assert find_immediate_win(board, "O") == 2
    assert find_immediate_win(board, "X") == 7
    assert find_immediate_win([EMPTY] * 9, "X") is None


def test_heuristic_takes_win_over_block():
    board = board_from("OO.XX....")
    assert heuristic_move(board, "O", ScriptedRandom(0.9)) == 2


def test_heuristic_blocks_then_falls_back_to_random():
    rng = ScriptedRandom(0.9)
    assert heuristic_move(board_from("XX.O....."), "O", rng) == 2
    assert rng.choices == []
    assert heuristic_move(board_from("X........"), "O", rng) == 8
    assert rng.choices == [[1, 2, 3, 4, 5, 6, 7, 8]]


def test_medium_uses_heuristic_above_random_rate():
    board = board_from("OO.XX....")
    assert choose_move(board, "O", Difficulty.MEDIUM, ScriptedRandom(0.4)) == 2


def test_medium_random_roll_can_skip_the_win():
    board = board_from("OO.XX....")
    rng = ScriptedRandom(0.1)
    assert choose_move(board, "O", Difficulty.MEDIUM, rng) == 8
    assert rng.choices == [[2, 5, 6, 7, 8]]


def test_easy_picks_from_empty_cells():
    rng = ScriptedRandom(0.0)
    assert choose_move(board_from("XO.X....."), "O", Difficulty.EASY, rng) == 8
    assert rng.choices == [[2, 4, 5, 6, 7, 8]]


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_seeded_choices_are_reproducible(difficulty):
    board = board_from("X...O....")
    first = [choose_move(board, "X", difficulty, random.Random(42)) for _ in range(5)]
    second = [choose_move(board, "X", difficulty, random.Random(42)) for _ in range(5)]
    assert first == second
    assert all(board[idx] == EMPTY for idx in first)


def test_difficulty_accepts_plain_strings():
    assert choose_move(board_from("OO.XX...."), "O", "hard") == 2


@pytest.mark.parametrize("difficulty", list(Difficulty))
@pytest.mark.parametrize("text", ["XOXXOOOXX", "XXXOO...."])
def test_no_legal_move_on_finished_board(difficulty, text):
    with pytest.raises(NoLegalMoveError):
        choose_move(board_from(text), "O", difficulty, random.Random(0))


def test_invalid_board_is_reported():
    with pytest.raises(InvalidBoardError):
        choose_move([EMPTY] * 4, "X", Difficulty.EASY)


def test_unknown_mover_is_rejected():
    with pytest.raises(ValueError):
        choose_move([EMPTY] * 9, "Z", Difficulty.EASY)


def test_computer_player_waits_for_its_turn():
    ai = ComputerPlayer(player="O", difficulty=Difficulty.HARD)
    game = TicTacToeGame()
    with pytest.raises(ValueError):
        ai.choose(game)
    game.play_move(0)
    move = ai.choose(game)
    assert move in game.available_moves()
