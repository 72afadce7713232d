import pytest
from datetime import timedelta
from fastapi.security import HTTPAuthorizationCredentials
from starlette.requests import Request
from mindwave.config import settings
from mindwave.utils.auth_utils import (
    decode_token,
    get_current_user,
    hash_secret,
    require_admin,
    sanitize_role,
    sign_token,
    validate_email,
    validate_password,
    verify_secret,
)
from mindwave.utils.errors import AuthError, ForbiddenError, RateLimited
from mindwave.utils.rate_limit import RateLimiter
from mindwave.utils.time_utils import get_ist_time
import jwt

USER = {"id": "user-1", "role": "student", "email": "asha.mca25@cmrit.ac.in", "name": "Asha"}


def make_request(cookies=None):
    headers = []
    if cookies:
        cookie = "; ".join(f"{k}={v}" for k, v in cookies.items())
        headers.append((b"cookie", cookie.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers, "client": ("10.0.0.1", 5000)})


class TestCampusRules:
    """Email, role and password rules"""

    def test_sanitize_role(self):
        assert sanitize_role("admin") == "admin"
        assert sanitize_role("superuser") == "student"
        assert sanitize_role(None) == "student"

    def test_student_email(self):
        assert validate_email("asha.mca25@cmrit.ac.in", "student")
        assert validate_email("ASHA.MCA25@CMRIT.AC.IN", "student")
        assert not validate_email("asha@gmail.com", "student")
        assert not validate_email("rao.mca@cmrit.ac.in", "student")

    def test_admin_email(self):
        assert validate_email("rao.mca@cmrit.ac.in", "admin")
        assert not validate_email("asha.mca25@cmrit.ac.in", "admin")

    def test_any_campus_email_without_role(self):
        assert validate_email("rao.mca@cmrit.ac.in")
        assert validate_email("asha.mca25@cmrit.ac.in")
        assert not validate_email("")

    def test_password_length(self):
        assert validate_password("secret")
        assert not validate_password("short")
        assert not validate_password(None)

    def test_hash_and_verify(self):
        hashed = hash_secret("secret123")
        assert hashed != "secret123"
        assert verify_secret("secret123", hashed)
        assert not verify_secret("wrong", hashed)
        assert not verify_secret("secret123", "not-a-hash")


class TestTokens:
    """Session JWTs"""

    def test_round_trip_claims(self):
        claims = decode_token(sign_token(USER))
        assert claims["sub"] == "user-1"
        assert claims["role"] == "student"
        assert claims["name"] == "Asha"

    def test_expired_token(self):
        past = get_ist_time() - timedelta(days=30)
        token = jwt.encode(
            {"sub": "user-1", "iat": past, "exp": past + timedelta(days=1)},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        assert decode_token(token) is None

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "user-1"}, "another-secret", algorithm="HS256")
        assert decode_token(token) is None


class TestAuthDependencies:
    """Cookie or bearer authentication"""

    @pytest.mark.asyncio
    async def test_cookie_token(self):
        request = make_request({settings.cookie_name: sign_token(USER)})
        user = await get_current_user(request, None)
        assert user == {"id": "user-1", "role": "student", "email": USER["email"], "name": "Asha"}

    @pytest.mark.asyncio
    async def test_bearer_token(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=sign_token(USER))
        user = await get_current_user(make_request(), credentials)
        assert user["id"] == "user-1"

    @pytest.mark.asyncio
    async def test_missing_token(self):
        with pytest.raises(AuthError) as exc_info:
            await get_current_user(make_request(), None)
        assert exc_info.value.message == "Unauthorized"

    @pytest.mark.asyncio
    async def test_invalid_token(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="garbage")
        with pytest.raises(AuthError) as exc_info:
            await get_current_user(make_request(), credentials)
        assert exc_info.value.message == "Invalid token"

    @pytest.mark.asyncio
    async def test_require_admin_valid_admin(self):
        admin_user = {"id": "admin-id", "role": "admin", "email": "rao.mca@cmrit.ac.in", "name": "Rao"}
        assert await require_admin(admin_user) == admin_user

    @pytest.mark.asyncio
    async def test_require_admin_non_admin(self):
        with pytest.raises(ForbiddenError) as exc_info:
            await require_admin(dict(USER))
        assert exc_info.value.status_code == 403


class TestRateLimiter:
    """Sliding window limiter"""

    def test_blocks_after_limit(self):
        limiter = RateLimiter(max_requests=2, window=60)
        assert limiter.check("1.2.3.4")
        assert limiter.check("1.2.3.4")
        assert not limiter.check("1.2.3.4")
        assert limiter.check("5.6.7.8")

        limiter.reset()
        assert limiter.check("1.2.3.4")

    def test_idle_clients_are_forgotten(self, monkeypatch):
        now = [1000.0]
        monkeypatch.setattr("mindwave.utils.rate_limit.time.time", lambda: now[0])
        limiter = RateLimiter(max_requests=2, window=60)
        for i in range(50):
            assert limiter.check(f"10.0.0.{i}")
        assert len(limiter.attempts) == 50

        now[0] += 61
        assert limiter.check("5.6.7.8")
        assert list(limiter.attempts) == ["5.6.7.8"]

        now[0] += 30
        assert limiter.check("5.6.7.8")
        assert not limiter.check("5.6.7.8")

    @pytest.mark.asyncio
    async def test_dependency_raises(self):
        limiter = RateLimiter(max_requests=1, window=60)
        await limiter(make_request())
        with pytest.raises(RateLimited):
            await limiter(make_request())
