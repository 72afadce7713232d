from fastapi import APIRouter, Depends
from mindwave.database import Database, get_db
from mindwave.models.base import CamelModel, camelize
from mindwave.models.time_attack import COMPLETED
from mindwave.services import time_attack
from mindwave.utils.auth_utils import get_current_user
from mindwave.utils.errors import MindwaveError, ServerError, ValidationError
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

class StartRequest(CamelModel):
    type: Optional[str] = None
    difficulty: Optional[str] = None

class SubmitRequest(CamelModel):
    session_id: Optional[str] = None
    is_correct: Optional[bool] = None

class LeaderboardRow(CamelModel):
    student_id: str
    student_name: Optional[str] = None
    score: int
    time_taken_ms: int
    date: str

class LeaderboardResponse(CamelModel):
    ok: bool = True
    leaderboard: List[LeaderboardRow]

def _public(question):
    return camelize(question) if question else None

@router.post("/time-attack/start")
async def start_time_attack(request: Optional[StartRequest] = None,
                            current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Start a time-attack session over randomly sampled published games"""
    request = request or StartRequest()
    try:
        session, question = time_attack.start_session(
            db, current_user["id"], game_type=request.type, difficulty=request.difficulty
        )
        return {"ok": True, "sessionId": session.id, "question": _public(question)}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Time Attack start error: {e}")
        raise ServerError("Server error starting Time Attack session")

@router.post("/time-attack/submit")
async def submit_time_attack(request: SubmitRequest,
                             current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Record the answer to the current question and move to the next one"""
    if not request.session_id or request.is_correct is None:
        raise ValidationError("sessionId and isCorrect are required")

    try:
        outcome = time_attack.submit_answer(db, current_user["id"], request.session_id, request.is_correct)
        if outcome["status"] == COMPLETED:
            return {
                "ok": True,
                "status": COMPLETED,
                "finalScore": outcome["final_score"],
                "timeTakenMs": outcome["time_taken_ms"],
            }
        return {"ok": True, "status": outcome["status"], "question": _public(outcome["question"])}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Time Attack submit error: {e}")
        raise ServerError("Server error submitting answer")

@router.get("/time-attack/{session_id}")
async def get_time_attack_session(session_id: str,
                                  current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Read back one of your sessions, e.g. after losing local state"""
    try:
        state = time_attack.get_session_state(db, current_user["id"], session_id)
        return {
            "ok": True,
            "session": {
                "sessionId": state["session_id"],
                "status": state["status"],
                "currentQuestionIndex": state["current_question_index"],
                "totalQuestions": state["total_questions"],
                "score": state["score"],
                "startTime": state["start_time"],
                "endTime": state["end_time"],
                "question": _public(state["question"]),
            },
        }
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Time Attack session read error: {e}")
        raise ServerError()

@router.get("/leaderboard/time-attack", response_model=LeaderboardResponse)
async def get_time_attack_leaderboard(db: Database = Depends(get_db)):
    """Top time-attack runs: highest score first, fastest time breaks ties"""
    try:
        return LeaderboardResponse(leaderboard=time_attack.get_leaderboard(db))
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Get Time Attack leaderboard error: {e}")
        raise ServerError()
