"""Tic-tac-toe package exposing board rules, the computer player, and the web API."""

from .ai import ComputerPlayer, Difficulty, NoLegalMoveError, choose_move
from .game import InvalidBoardError, Outcome, TicTacToeGame, empty_cells, evaluate
from .ui import app

__all__ = [
    "ComputerPlayer",
    "Difficulty",
    "InvalidBoardError",
    "NoLegalMoveError",
    "Outcome",
    "TicTacToeGame",
    "app",
    "choose_move",
    "empty_cells",
    "evaluate",
]
