"""Server-authoritative time-attack sessions.

A session is a fixed, randomly sampled sequence of published games answered
one at a time. The stored cursor is the single source of truth: every
accepted submission moves it forward by exactly one, and the session is
completed in the same write that moves the cursor past the last question.
That write is conditioned on the cursor value that was read, so of two
concurrent submissions only one can advance the session.
"""
from typing import List, Optional
from uuid import uuid4
import logging
import random

from mindwave.config import settings
from mindwave.models.game import GAMES_TABLE
from mindwave.models.time_attack import (
    COMPLETED,
    IN_PROGRESS,
    LEADERBOARD_TABLE,
    SESSIONS_TABLE,
    SUBMISSIONS_TABLE,
    GameSubmission,
    LeaderboardEntry,
    TimeAttackSession,
)
from mindwave.models.user import USERS_TABLE
from mindwave.services.catalog import public_game
from mindwave.utils.errors import Conflict, NotFound
from mindwave.utils.time_utils import elapsed_ms, get_ist_time

logger = logging.getLogger(__name__)

NOT_ENOUGH_QUESTIONS = "Not enough questions available to start a Time Attack session."
SESSION_NOT_FOUND = "Active session not found"


def _question(db, game_id: str, rng=None) -> Optional[dict]:
    rows = db.select(GAMES_TABLE, "*", {"id": game_id})
    if not rows:
        logger.warning(f"Time attack question {game_id} no longer exists")
        return None
    return public_game(rows[0], rng)


def start_session(db, student_id: str, game_type: str = None, difficulty: str = None, rng: random.Random = None):
    """Sample published games into a new session; returns (session, first question)."""
    filters = {"published": True}
    if game_type:
        filters["type"] = game_type
    if difficulty:
        filters["difficulty"] = difficulty

    candidates = [row["id"] for row in db.select(GAMES_TABLE, "id", filters)]
    if len(candidates) < 1:
        raise NotFound(NOT_ENOUGH_QUESTIONS)

    rng = rng or random.Random()
    picked = rng.sample(candidates, min(settings.time_attack_question_count, len(candidates)))

    session = TimeAttackSession(
        id=uuid4().hex,
        student_id=student_id,
        questions=picked,
        start_time=get_ist_time().isoformat(),
    )
    db.insert(SESSIONS_TABLE, session.model_dump())
    logger.info(f"Time attack session {session.id} started for {student_id} with {len(picked)} questions")
    return session, _question(db, picked[0], rng)


def _load_session(db, student_id: str, session_id: str) -> TimeAttackSession:
    rows = db.select(SESSIONS_TABLE, "*", {"id": session_id})
    if not rows:
        raise NotFound(SESSION_NOT_FOUND)
    session = TimeAttackSession.model_validate(rows[0])
    if session.student_id != student_id:
        raise NotFound(SESSION_NOT_FOUND)
    return session


def submit_answer(db, student_id: str, session_id: str, is_correct: bool, rng: random.Random = None) -> dict:
    """Record one answer and advance the session cursor.

    Not idempotent: every accepted call moves to the next question.
    """
    session = _load_session(db, student_id, session_id)
    if not session.is_active:
        raise NotFound(SESSION_NOT_FOUND)

    cursor = session.current_question_index
    score = session.score + (settings.time_attack_points if is_correct else 0)
    next_cursor = cursor + 1
    completed = next_cursor >= len(session.questions)

    changes = {"current_question_index": next_cursor, "score": score}
    if completed:
        ended = get_ist_time()
        end_time = ended.isoformat()
        changes.update({"status": COMPLETED, "end_time": end_time})

    updated = db.update(
        SESSIONS_TABLE,
        changes,
        {"id": session.id, "current_question_index": cursor, "status": IN_PROGRESS},
    )
    if updated is None:
        raise Conflict("Session was changed by another request; fetch its state before continuing")

    submission = GameSubmission(
        id=uuid4().hex,
        game_id=session.questions[cursor],
        student_id=student_id,
        is_correct=bool(is_correct),
        submitted_at=get_ist_time().isoformat(),
    )
    db.insert(SUBMISSIONS_TABLE, submission.model_dump())

    if completed:
        time_taken_ms = elapsed_ms(session.start_time, ended)
        entry = LeaderboardEntry(
            id=uuid4().hex,
            student_id=student_id,
            score=score,
            time_taken_ms=time_taken_ms,
            date=end_time,
        )
        db.insert(LEADERBOARD_TABLE, entry.model_dump())
        logger.info(f"Time attack session {session.id} completed: score={score} time={time_taken_ms}ms")
        return {"status": COMPLETED, "final_score": score, "time_taken_ms": time_taken_ms}

    return {"status": IN_PROGRESS, "question": _question(db, session.questions[next_cursor], rng)}


def get_session_state(db, student_id: str, session_id: str) -> dict:
    """Current cursor, score and question of one of the caller's sessions."""
    session = _load_session(db, student_id, session_id)
    state = {
        "session_id": session.id,
        "status": session.status,
        "current_question_index": session.current_question_index,
        "total_questions": len(session.questions),
        "score": session.score,
        "start_time": session.start_time,
        "end_time": session.end_time,
        "question": None,
    }
    if session.is_active:
        state["question"] = _question(db, session.questions[session.current_question_index])
    return state


def leaderboard_key(entry: dict):
    """Higher score first, then faster time."""
    return (-entry["score"], entry["time_taken_ms"])


def get_leaderboard(db, limit: int = None) -> List[dict]:
    limit = limit or settings.leaderboard_size
    rows = db.select(
        LEADERBOARD_TABLE,
        "*",
        limit=limit,
        order_by=[("score", True), ("time_taken_ms", False)],
    )
    rows = sorted(rows, key=leaderboard_key)[:limit]

    student_ids = {row["student_id"] for row in rows}
    names = {}
    if student_ids:
        users = db.select(USERS_TABLE, "id,name", in_filters={"id": student_ids})
        names = {user["id"]: user["name"] for user in users}

    return [
        {
            "student_id": row["student_id"],
            "student_name": names.get(row["student_id"]),
            "score": row["score"],
            "time_taken_ms": row["time_taken_ms"],
            "date": row["date"],
        }
        for row in rows
    ]
