"""Move selection for the computer player: random, greedy and alpha-beta minimax."""

from __future__ import annotations

import enum
import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from .game import (
    EMPTY,
    WINNING_LINES,
    PLAYERS,
    Player,
    TicTacToeGame,
    empty_cells,
    evaluate,
    other_player,
)

logger = logging.getLogger(__name__)

WIN_SCORE = 10
# Share of medium moves played at random before the win/block check runs
MEDIUM_RANDOM_RATE = 0.4


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class NoLegalMoveError(RuntimeError):
    """Raised when asked to move on a full or already decided board."""


class RandomSource(Protocol):
    """The slice of ``random.Random`` the policies rely on."""

    def random(self) -> float: ...

    def choice(self, seq: Sequence[Any]) -> Any: ...


# ---- public API ----


def choose_move(
    board: Sequence[str],
    mover: Player,
    difficulty: Difficulty,
    rng: Optional[RandomSource] = None,
) -> int:
    """Pick an empty cell for ``mover`` under the given difficulty.

    ``rng`` defaults to the global ``random`` module; pass a seeded
    ``random.Random`` to make easy and medium play reproducible.
    """
    if rng is None:
        rng = random  # type: ignore[assignment]
    difficulty = Difficulty(difficulty)
    if mover not in PLAYERS:
        raise ValueError(f"Unknown player {mover!r}")

    moves = empty_cells(board)
    if evaluate(board).is_terminal or not moves:
        raise NoLegalMoveError("No legal move: the board is full or decided")

    if difficulty is Difficulty.EASY:
        move = rng.choice(moves)
    elif difficulty is Difficulty.MEDIUM:
        move = _medium_move(board, mover, moves, rng)
    else:
        score, best = minimax(list(board), mover, mover, -math.inf, math.inf)
        assert best is not None
        logger.debug("minimax picked %d for %s (score %d)", best, mover, score)
        move = best

    logger.debug("%s move for %s: %d", difficulty.value, mover, move)
    return move


def find_immediate_win(board: Sequence[str], player: Player) -> Optional[int]:
    """Empty cell completing a line for ``player``, first line in table order."""
    for line in WINNING_LINES:
        trio = [board[i] for i in line]
        if trio.count(player) == 2 and trio.count(EMPTY) == 1:
            return line[trio.index(EMPTY)]
    return None


def minimax(
    board: List[str],
    to_move: Player,
    mover: Player,
    alpha: float,
    beta: float,
) -> Tuple[int, Optional[int]]:
    """Full-depth alpha-beta search scored from ``mover``'s side.

    A win for ``mover`` is worth +10, a loss -10 and a draw 0 regardless of
    depth. Returns ``(score, index)``; ``index`` is ``None`` on terminal
    positions. Ties keep the first cell examined. ``board`` is marked and
    restored in place while searching.
    """
    outcome = evaluate(board)
    if outcome.winner == mover:
        return WIN_SCORE, None
    if outcome.winner is not None:
        return -WIN_SCORE, None
    if outcome.is_terminal:
        return 0, None

    moves = empty_cells(board)
    maximizing = to_move == mover
    best_score = -math.inf if maximizing else math.inf
    best_move = moves[0]
    opponent = other_player(to_move)

    for move in moves:
        board[move] = to_move
        score, _ = minimax(board, opponent, mover, alpha, beta)
        board[move] = EMPTY

        if maximizing:
            if score > best_score:
                best_score, best_move = score, move
            alpha = max(alpha, score)
        else:
            if score < best_score:
                best_score, best_move = score, move
            beta = min(beta, score)
        if beta <= alpha:
            break

    return int(best_score), best_move


def _medium_move(
    board: Sequence[str],
    mover: Player,
    moves: List[int],
    rng: RandomSource,
) -> int:
    # The random roll comes first, so a win on the board can still be skipped
    if rng.random() < MEDIUM_RANDOM_RATE:
        return rng.choice(moves)
    return heuristic_move(board, mover, rng)


def heuristic_move(board: Sequence[str], mover: Player, rng: RandomSource) -> int:
    """Greedy one-ply choice: win, else block, else random."""
    win = find_immediate_win(board, mover)
    if win is not None:
        return win
    block = find_immediate_win(board, other_player(mover))
    if block is not None:
        return block
    return rng.choice(empty_cells(board))


# ---- player wrapper ----


@dataclass
class ComputerPlayer:
    """Computer opponent bound to a mark, a difficulty and a random source."""

    player: Player
    difficulty: Difficulty = Difficulty.HARD
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def choose(self, game: TicTacToeGame) -> int:
        if game.current_player != self.player:
            raise ValueError("It is not this AI player's turn")
        return choose_move(game.cells, self.player, self.difficulty, self.rng)

