from fastapi import APIRouter, Depends
from mindwave.database import Database, get_db
from mindwave.engine.lobby import player_stats
from mindwave.models.base import camelize
from mindwave.models.game import GAME_RESULTS_TABLE
from mindwave.utils.auth_utils import get_current_user
from mindwave.utils.errors import MindwaveError, ServerError
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

def _my_results(db: Database, student_id: str):
    return db.select(GAME_RESULTS_TABLE, "*", {"student_id": student_id}, order_by=[("completed_at", True)])

@router.get("/my")
async def get_my_results(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Get the caller's completed play-throughs, newest first"""
    try:
        results = _my_results(db, current_user["id"])
        return {"ok": True, "results": [camelize(result) for result in results]}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Get results error: {e}")
        raise ServerError()

@router.get("/stats")
async def get_my_stats(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Level, XP, rank and wins recomputed from the caller's result history"""
    try:
        stats = player_stats(_my_results(db, current_user["id"]))
        return {"ok": True, "stats": camelize(stats)}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Get user stats error: {e}")
        raise ServerError()
