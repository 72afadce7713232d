from pydantic import BaseModel
from typing import Any, Dict, Optional

GAMES_TABLE = "games"
GAME_RESULTS_TABLE = "game_results"

# Columns never shown to students
PRIVATE_GAME_FIELDS = ("created_by", "published")

class Game(BaseModel):
    id: str
    title: str
    type: str
    difficulty: str
    brief: str
    published: bool = False
    created_by: str
    definition: Optional[Dict[str, Any]] = None
    duration: Optional[int] = None  # minutes
    total_points: Optional[int] = None
    created_at: Optional[str] = None

    def __repr__(self):
        return f"<Game(id={self.id}, title={self.title}, type={self.type})>"
