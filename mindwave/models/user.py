from pydantic import BaseModel
from typing import Literal, Optional

USERS_TABLE = "users"
PASSWORD_RESETS_TABLE = "password_resets"
ADMIN_NOTIFICATIONS_TABLE = "admin_notifications"

class User(BaseModel):
    id: str
    name: str
    email: str  # lower-cased, unique
    password_hash: str
    role: Literal["student", "admin"] = "student"
    created_at: Optional[str] = None

    def public(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role}

    def __repr__(self):
        return f"<User(id={self.id}, name={self.name}, email={self.email})>"

class PasswordResetRequest(BaseModel):
    id: str
    email: str
    code_hash: str
    expires_at: str
    used: bool = False
    created_at: Optional[str] = None
