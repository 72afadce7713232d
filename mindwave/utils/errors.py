"""Error taxonomy shared by the routes, services and the play engine.

Each error carries the HTTP status it maps to; ``mindwave.main`` renders
them as ``{"ok": false, "message": ...}``.
"""
from fastapi import status


class MindwaveError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MindwaveError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthError(MindwaveError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(MindwaveError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(MindwaveError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(MindwaveError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class ServerError(MindwaveError):
    pass


class GameError(ValidationError):
    """Raised by the play engine for actions a game cannot accept."""
    default_message = "Invalid game action"


class RateLimited(MindwaveError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests, try again in a minute"
