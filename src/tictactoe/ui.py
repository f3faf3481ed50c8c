"""FastAPI service driving tic-tac-toe rounds for a browser front end."""

from __future__ import annotations

import enum
import logging
import random
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import threading

from fastapi import BackgroundTasks, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from .ai import ComputerPlayer, Difficulty
from .game import EMPTY, TicTacToeGame

logger = logging.getLogger(__name__)


class GameMode(str, enum.Enum):
    VS_AI = "ai"
    TWO_PLAYER = "2p"


@dataclass
class GameSession:
    """An active game, its scores and the optional computer opponent."""

    game: TicTacToeGame
    mode: GameMode
    difficulty: Difficulty
    ai: Optional[ComputerPlayer]
    scores: Dict[str, int] = field(
        default_factory=lambda: {"X": 0, "O": 0, "draws": 0}
    )
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    # Bumped on every board reset so a late computer move can tell it is stale
    round_id: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic-Tac-Toe", description="Tic-tac-toe against a friend or the computer")


# Seconds the computer "thinks" before replying
AI_THINK_DELAY: Tuple[float, float] = (0.35, 0.65)
AI_PLAYER = "O"


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    mode: GameMode = Field(default=GameMode.VS_AI)
    difficulty: Difficulty = Field(
        default=Difficulty.HARD,
        description="Computer strength, ignored in two-player mode",
    )
    seed: Optional[int] = Field(
        default=None,
        description="Seed for the computer's random choices",
    )


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


def _create_session(
    mode: GameMode, difficulty: Difficulty, seed: Optional[int] = None
) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    ai: Optional[ComputerPlayer] = None
    if mode is GameMode.VS_AI:
        ai = ComputerPlayer(
            player=AI_PLAYER, difficulty=difficulty, rng=random.Random(seed)
        )
    session = GameSession(
        game=TicTacToeGame(), mode=mode, difficulty=difficulty, ai=ai
    )
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info(
        "Created game %s (mode=%s, difficulty=%s)",
        session_id,
        mode.value,
        difficulty.value,
    )
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _record_move(session: GameSession, player: str, cell_index: int) -> None:
    """Log a move and bank the result if it ended the round. Caller holds the lock."""
    session.move_log.append({"player": player, "cellIndex": cell_index})
    outcome = session.game.outcome()
    if not outcome.is_terminal:
        return
    if outcome.winner is not None:
        session.scores[outcome.winner] += 1
    else:
        session.scores["draws"] += 1
    logger.info(
        "Round finished: %s", outcome.winner + " wins" if outcome.winner else "draw"
    )


def _reset_round(session: GameSession) -> None:
    session.game = TicTacToeGame()
    session.move_log.clear()
    session.ai_pending = False
    session.round_id += 1


def _run_ai_turn(game_id: str, round_id: int) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, random.uniform(*AI_THINK_DELAY)))

    with session.lock:
        if session.round_id != round_id:
            # The board was reset while the computer was thinking
            return
        try:
            if not session.ai:
                return
            game = session.game
            if game.is_over():
                return
            if game.current_player != session.ai.player:
                return
            cell_index = session.ai.choose(game)
            game.play_move(cell_index)
            _record_move(session, session.ai.player, cell_index)
        finally:
            session.ai_pending = False


def _player_names(session: GameSession) -> Dict[str, str]:
    return {
        "X": "Player X",
        "O": "AI" if session.mode is GameMode.VS_AI else "Player O",
    }


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        outcome = game.outcome()
        state: Dict[str, object] = {
            "id": game_id,
            "mode": session.mode.value,
            "difficulty": session.difficulty.value,
            "board": [c if c != EMPTY else "" for c in game.cells],
            "currentPlayer": game.current_player,
            "status": outcome.status,
            "winner": outcome.winner,
            "winningLine": list(outcome.line) if outcome.line else None,
            "availableMoves": game.available_moves(),
            "scores": dict(session.scores),
            "players": _player_names(session),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        game = session.game
        if game.is_over():
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if session.ai and game.current_player == session.ai.player:
            raise HTTPException(status_code=400, detail="It is the AI's turn")

        player = game.current_player
        try:
            game.play_move(cell_index)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        _record_move(session, player, cell_index)

        should_schedule_ai = bool(
            session.ai
            and not game.is_over()
            and game.current_player == session.ai.player
        )
        if should_schedule_ai:
            session.ai_pending = True
        round_id = session.round_id

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id, round_id)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.mode, request.difficulty, request.seed)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/new-round")
def new_round(game_id: str) -> Dict[str, object]:
    """Clear the board and keep the scores."""
    session = _get_session(game_id)
    with session.lock:
        _reset_round(session)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/reset-scores")
def reset_scores(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.scores = {"X": 0, "O": 0, "draws": 0}
        _reset_round(session)
    logger.info("Scores reset for game %s", game_id)
    return _serialize_session(game_id, session)
