from datetime import timedelta
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from mindwave.config import settings
from mindwave.utils.errors import AuthError, ForbiddenError
from mindwave.utils.time_utils import get_ist_time
from typing import Optional
import bcrypt
import jwt
import logging
import re

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ROLES = ("student", "admin")

def sanitize_role(role: Optional[str]) -> str:
    """Unknown roles fall back to student"""
    return role if role in ROLES else "student"

def validate_email(email: Optional[str], role: Optional[str] = None) -> bool:
    """Check an address against the campus domain rules for the role"""
    if not email:
        return False
    student_ok = re.search(settings.student_email_pattern, email, re.IGNORECASE) is not None
    admin_ok = re.search(settings.admin_email_pattern, email, re.IGNORECASE) is not None
    if role == "admin":
        return admin_ok
    if role == "student":
        return student_ok
    return student_ok or admin_ok

def validate_password(password: Optional[str]) -> bool:
    return bool(password) and len(password) >= settings.min_password_length

def hash_secret(secret: str) -> str:
    """bcrypt-hash a password or reset code"""
    return bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")

def verify_secret(secret: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(secret.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False

def sign_token(user: dict) -> str:
    """Issue the session JWT for a stored user record"""
    now = get_ist_time()
    payload = {
        "sub": str(user["id"]),
        "role": user["role"],
        "email": user["email"],
        "name": user["name"],
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

def decode_token(token: str) -> Optional[dict]:
    """Verify a session JWT and return its claims"""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.warning(f"Token verification failed: {e}")
        return None

def claims_to_user(claims: dict) -> dict:
    return {
        "id": claims["sub"],
        "role": claims.get("role", "student"),
        "email": claims.get("email"),
        "name": claims.get("name"),
    }

async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
):
    """Get current user from the session cookie or a bearer token"""
    token = request.cookies.get(settings.cookie_name)
    if not token and credentials:
        token = credentials.credentials
    if not token:
        raise AuthError("Unauthorized")

    claims = decode_token(token)
    if not claims:
        raise AuthError("Invalid token")
    return claims_to_user(claims)

def is_admin_user(user: dict) -> bool:
    return user.get("role") == "admin"

async def require_admin(current_user: dict = Depends(get_current_user)):
    """Require admin privileges"""
    if not is_admin_user(current_user):
        raise ForbiddenError("Admin privileges required")
    return current_user
