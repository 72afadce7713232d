"""Result records for completed play-throughs."""
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4
import json
import logging

from pydantic import ValidationError as PydanticValidationError

from mindwave.engine.engines import round_half_up
from mindwave.engine.models import WireModel
from mindwave.utils.time_utils import get_ist_time

logger = logging.getLogger(__name__)


class Player(WireModel):
    id: Optional[str] = None
    email: Optional[str] = None
    name: str = "Student"


class GameResult(WireModel):
    id: str
    game_id: Optional[str] = None
    game_title: str
    game_type: str
    student_id: Optional[str] = None
    student_email: Optional[str] = None
    student_name: Optional[str] = None
    score: int  # percentage of total points
    raw_score: int
    total_points: int
    time_taken: int  # seconds
    completed_at: str
    status: str = "completed"
    forced: bool = False
    details: Dict[str, Any] = {}


def percentage(score: int, total_points: int) -> int:
    if total_points <= 0:
        return 0
    return round_half_up(score / total_points * 100)


def build_result(
    game,
    score: int,
    total_points: int,
    time_taken: float,
    player: Optional[Player] = None,
    double_xp: bool = False,
    forced: bool = False,
    details: Optional[Dict[str, Any]] = None,
) -> GameResult:
    player = player or Player()
    return GameResult(
        id=uuid4().hex,
        game_id=game.id,
        game_title=game.title,
        game_type=game.type,
        student_id=player.id,
        student_email=player.email,
        student_name=player.name,
        score=percentage(score, total_points),
        raw_score=score * 2 if double_xp else score,
        total_points=total_points,
        time_taken=int(time_taken),
        completed_at=get_ist_time().isoformat(),
        forced=forced,
        details=details or {},
    )


class LocalResultStore:
    """Append-only JSON file of result records kept on the player's machine."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> List[GameResult]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
            return [GameResult.model_validate(item) for item in raw]
        except (json.JSONDecodeError, PydanticValidationError, TypeError) as e:
            logger.warning(f"Ignoring unreadable result store {self.path}: {e}")
            return []

    def append(self, result: GameResult) -> None:
        records = self.load()
        records.append(result)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps([r.model_dump(by_alias=True) for r in records], indent=2),
            encoding="utf-8",
        )

    __call__ = append
