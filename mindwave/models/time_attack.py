from pydantic import BaseModel
from typing import List, Literal, Optional

SESSIONS_TABLE = "time_attack_sessions"
LEADERBOARD_TABLE = "time_attack_leaderboard"
SUBMISSIONS_TABLE = "game_submissions"

IN_PROGRESS = "in-progress"
COMPLETED = "completed"

class TimeAttackSession(BaseModel):
    id: str
    student_id: str
    questions: List[str]  # game ids, fixed at creation
    current_question_index: int = 0
    score: int = 0
    start_time: str
    end_time: Optional[str] = None
    status: Literal["in-progress", "completed"] = IN_PROGRESS

    @property
    def is_active(self) -> bool:
        return self.status == IN_PROGRESS

    def __repr__(self):
        return (f"<TimeAttackSession(id={self.id}, student_id={self.student_id}, "
                f"cursor={self.current_question_index}/{len(self.questions)})>")

class GameSubmission(BaseModel):
    id: str
    game_id: str
    student_id: str
    is_correct: bool
    submitted_at: str

class LeaderboardEntry(BaseModel):
    id: str
    student_id: str
    score: int
    time_taken_ms: int
    date: str
