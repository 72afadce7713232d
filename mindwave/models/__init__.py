from .user import User, PasswordResetRequest
from .game import Game
from .time_attack import TimeAttackSession, GameSubmission, LeaderboardEntry
from .material import Subject, Material, Notification

__all__ = ["User", "PasswordResetRequest", "Game", "TimeAttackSession", "GameSubmission",
           "LeaderboardEntry", "Subject", "Material", "Notification"]
