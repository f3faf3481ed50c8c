"""Board rules and outcome evaluation for 3x3 tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

Player = str  # "X" or "O"
Line = Tuple[int, int, int]

EMPTY = " "
PLAYERS: Tuple[Player, Player] = ("X", "O")
BOARD_SIZE = 9

WINNING_LINES: Tuple[Line, ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

IN_PROGRESS = "in_progress"
WIN = "win"
DRAW = "draw"


class InvalidBoardError(ValueError):
    """Raised for boards that cannot be evaluated."""


@dataclass(frozen=True)
class Outcome:
    """Result of scanning a board: in progress, drawn, or won along ``line``."""

    status: str
    winner: Optional[Player] = None
    line: Optional[Line] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != IN_PROGRESS


def other_player(player: Player) -> Player:
    if player not in PLAYERS:
        raise ValueError(f"Unknown player {player!r}")
    return "O" if player == "X" else "X"


def _check_board(board: Sequence[str]) -> None:
    if len(board) != BOARD_SIZE:
        raise InvalidBoardError(
            f"Board must have {BOARD_SIZE} cells, got {len(board)}"
        )
    for idx, value in enumerate(board):
        if value != EMPTY and value not in PLAYERS:
            raise InvalidBoardError(f"Unexpected value {value!r} at cell {idx}")


def empty_cells(board: Sequence[str]) -> List[int]:
    """Indices of the empty cells in ascending order."""
    _check_board(board)
    return [i for i, c in enumerate(board) if c == EMPTY]


def evaluate(board: Sequence[str]) -> Outcome:
    """Classify ``board`` without touching it.

    The first completed line in ``WINNING_LINES`` order decides the winner.
    Completed lines for both players at once cannot come from legal play and
    raise ``InvalidBoardError``.
    """
    _check_board(board)

    found: Optional[Outcome] = None
    for a, b, c in WINNING_LINES:
        v = board[a]
        if v != EMPTY and v == board[b] == board[c]:
            if found is None:
                found = Outcome(WIN, winner=v, line=(a, b, c))
            elif found.winner != v:
                raise InvalidBoardError("Both players have a completed line")
    if found is not None:
        return found

    if all(c != EMPTY for c in board):
        return Outcome(DRAW)
    return Outcome(IN_PROGRESS)


# ---------- Game ----------


@dataclass
class TicTacToeGame:
    """Mutable state of one round, owned by the turn controller."""

    cells: List[str] = field(default_factory=lambda: [EMPTY] * BOARD_SIZE)
    current_player: Player = "X"

    def outcome(self) -> Outcome:
        return evaluate(self.cells)

    def is_over(self) -> bool:
        return self.outcome().is_terminal

    def available_moves(self) -> List[int]:
        if self.is_over():
            return []
        return empty_cells(self.cells)

    def play_move(self, index: int) -> None:
        """Mark ``index`` for the current player and pass the turn."""
        if self.is_over():
            raise ValueError("Game already finished")
        if not 0 <= index < BOARD_SIZE:
            raise ValueError(f"Cell index {index} is off the board")
        if self.cells[index] != EMPTY:
            raise ValueError("Cell already occupied")

        self.cells[index] = self.current_player
        # A decided round keeps the last mover as current_player
        if not self.is_over():
            self.current_player = other_player(self.current_player)

    def clone(self) -> "TicTacToeGame":
        return TicTacToeGame(
            cells=self.cells.copy(), current_player=self.current_player
        )
