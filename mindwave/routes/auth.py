from datetime import timedelta
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from mindwave.config import settings
from mindwave.database import Database, get_db
from mindwave.models.base import CamelModel
from mindwave.models.user import (
    ADMIN_NOTIFICATIONS_TABLE, PASSWORD_RESETS_TABLE, USERS_TABLE, PasswordResetRequest, User,
)
from mindwave.utils.auth_utils import (
    get_current_user, hash_secret, sanitize_role, sign_token, validate_email, validate_password, verify_secret,
)
from mindwave.utils.errors import AuthError, Conflict, MindwaveError, NotFound, ServerError, ValidationError
from mindwave.utils.rate_limit import auth_limiter
from mindwave.utils.time_utils import get_ist_time, parse_ist
from typing import Optional
from uuid import uuid4
import logging
import secrets

logger = logging.getLogger(__name__)

router = APIRouter()

# Pydantic models for request bodies
class SignUpRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None

class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None

class ResetPasswordRequest(CamelModel):
    email: Optional[str] = None
    code: Optional[str] = None
    new_password: Optional[str] = None

def _set_session_cookie(response: Response, user: User):
    response.set_cookie(
        settings.cookie_name,
        sign_token(user.model_dump()),
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        max_age=settings.jwt_expire_days * 24 * 60 * 60,
    )

def _find_user(db: Database, filters: dict) -> Optional[User]:
    rows = db.select(USERS_TABLE, "*", filters)
    return User.model_validate(rows[0]) if rows else None

def create_admin_notification(db: Database, message: str, meta: dict = None):
    """Best-effort audit note for admins; failures are only logged"""
    try:
        db.insert(ADMIN_NOTIFICATIONS_TABLE, {
            "id": uuid4().hex,
            "message": message,
            "meta": meta or {},
            "created_at": get_ist_time().isoformat(),
        })
    except Exception as e:
        logger.error(f"Failed to create admin notification: {e}")

@router.post("/signup", status_code=status.HTTP_201_CREATED, dependencies=[Depends(auth_limiter)])
async def signup(request: SignUpRequest, response: Response, db: Database = Depends(get_db)):
    """Create a campus account and start a session"""
    if not request.name or not request.email or not request.password:
        raise ValidationError("All fields are required")
    role = sanitize_role(request.role)
    if not validate_email(request.email, role):
        raise ValidationError("Use your campus email")
    if not validate_password(request.password):
        raise ValidationError(f"Password must be at least {settings.min_password_length} characters")

    try:
        email = request.email.lower()
        if _find_user(db, {"email": email}):
            raise Conflict("Email already registered")

        user = User(
            id=uuid4().hex,
            name=request.name,
            email=email,
            password_hash=hash_secret(request.password),
            role=role,
            created_at=get_ist_time().isoformat(),
        )
        db.insert(USERS_TABLE, user.model_dump())
        _set_session_cookie(response, user)
        return {"ok": True, "user": user.public()}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Signup error: {e}")
        if "duplicate" in str(e).lower():
            raise Conflict("Email already registered")
        raise ServerError()

@router.post("/login", dependencies=[Depends(auth_limiter)])
async def login(request: LoginRequest, response: Response, db: Database = Depends(get_db)):
    """Sign in with campus email and password"""
    role = sanitize_role(request.role)
    if not request.email or not request.password:
        raise ValidationError("Email and password required")
    if not validate_email(request.email, role):
        raise ValidationError("Use your campus email")

    try:
        user = _find_user(db, {"email": request.email.lower(), "role": role})
        if not user or not verify_secret(request.password, user.password_hash):
            raise AuthError("Invalid credentials")

        _set_session_cookie(response, user)
        return {"ok": True, "user": user.public()}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Login error: {e}")
        raise ServerError()

@router.post("/logout")
async def logout(response: Response):
    """Clear the session cookie"""
    response.delete_cookie(settings.cookie_name, httponly=True, samesite="lax", secure=settings.cookie_secure)
    return {"ok": True, "message": "Logged out successfully"}

@router.get("/me")
async def get_me(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Get the signed-in user's account"""
    try:
        user = _find_user(db, {"id": current_user["id"]})
        if not user:
            raise NotFound("User not found")
        return {"ok": True, "user": user.public()}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Get me error: {e}")
        raise ServerError()

@router.post("/password/forgot", dependencies=[Depends(auth_limiter)])
async def forgot_password(request: ForgotPasswordRequest, db: Database = Depends(get_db)):
    """Issue a short-lived verification code for a password reset"""
    if not request.email:
        raise ValidationError("Email is required")

    try:
        user = _find_user(db, {"email": request.email.lower()})
        if not user:
            raise NotFound("No account found for this email")

        code = str(secrets.randbelow(900000) + 100000)
        now = get_ist_time()
        reset = PasswordResetRequest(
            id=uuid4().hex,
            email=user.email,
            code_hash=hash_secret(code),
            expires_at=(now + timedelta(minutes=settings.reset_code_ttl_minutes)).isoformat(),
            created_at=now.isoformat(),
        )
        db.insert(PASSWORD_RESETS_TABLE, reset.model_dump())

        # No mail transport is configured; the code goes to the server log
        logger.info(f"Password reset code for {user.email}: {code}")
        return {"ok": True, "message": "Password reset code sent. Please check your email."}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Forgot password error: {e}")
        raise ServerError()

@router.post("/password/reset", dependencies=[Depends(auth_limiter)])
async def reset_password(request: ResetPasswordRequest, db: Database = Depends(get_db)):
    """Set a new password using the latest valid verification code"""
    if not request.email or not request.code or not request.new_password:
        raise ValidationError("Email, code, and new password are required")
    if not validate_password(request.new_password):
        raise ValidationError(f"Password must be at least {settings.min_password_length} characters")

    try:
        email = request.email.lower()
        rows = db.select(
            PASSWORD_RESETS_TABLE, "*", {"email": email, "used": False},
            order_by=[("created_at", True)], limit=1,
        )
        reset = PasswordResetRequest.model_validate(rows[0]) if rows else None
        if not reset or parse_ist(reset.expires_at) <= get_ist_time():
            raise ValidationError("No valid reset request found")
        if not verify_secret(request.code, reset.code_hash):
            raise ValidationError("Invalid verification code")

        user = _find_user(db, {"email": email})
        if not user:
            raise NotFound("User not found")

        db.update(USERS_TABLE, {"password_hash": hash_secret(request.new_password)}, {"id": user.id})
        db.update(PASSWORD_RESETS_TABLE, {"used": True}, {"id": reset.id})

        create_admin_notification(db, "Password reset completed", {
            "email": user.email,
            "resetAt": get_ist_time().isoformat(),
        })
        return {"ok": True, "message": "Password updated successfully"}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Password reset error: {e}")
        raise ServerError()
