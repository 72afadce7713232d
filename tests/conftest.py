import copy
import pytest
from collections import defaultdict
from httpx import AsyncClient, ASGITransport
from uuid import uuid4
from mindwave.main import app
from mindwave.database import get_db
from mindwave.utils.auth_utils import hash_secret, sign_token
from mindwave.utils.rate_limit import auth_limiter
from mindwave.utils.time_utils import get_ist_time


class FakeDatabase:
    """In-memory stand-in for the Supabase-backed Database wrapper"""

    def __init__(self):
        self.tables = defaultdict(list)

    @staticmethod
    def _matches(row, filters=None, in_filters=None):
        for key, value in (filters or {}).items():
            if row.get(key) != value:
                return False
        for key, values in (in_filters or {}).items():
            if row.get(key) not in list(values):
                return False
        return True

    def insert(self, table, data):
        row = copy.deepcopy(data)
        row.setdefault("id", uuid4().hex)
        self.tables[table].append(row)
        return copy.deepcopy(row)

    def select(self, table, columns="*", filters=None, limit=None, order_by=None, in_filters=None):
        rows = [r for r in self.tables[table] if self._matches(r, filters, in_filters)]
        for column, descending in reversed(order_by or []):
            rows.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=descending)
        if limit:
            rows = rows[:limit]
        if columns != "*":
            wanted = [c.strip() for c in columns.split(",")]
            rows = [{c: r.get(c) for c in wanted} for r in rows]
        return copy.deepcopy(rows)

    def update(self, table, data, filters):
        matched = [r for r in self.tables[table] if self._matches(r, filters)]
        for row in matched:
            row.update(copy.deepcopy(data))
        return copy.deepcopy(matched[0]) if matched else None

    def delete(self, table, filters):
        removed = [r for r in self.tables[table] if self._matches(r, filters)]
        self.tables[table] = [r for r in self.tables[table] if not self._matches(r, filters)]
        return removed


@pytest.fixture
def fake_db():
    """Fresh in-memory database wired into the app"""
    database = FakeDatabase()
    app.dependency_overrides[get_db] = lambda: database
    yield database
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    auth_limiter.reset()
    yield


@pytest.fixture
async def client(fake_db):
    """Create test client"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(fake_db):
    """Insert a user and return (record, auth headers)"""
    def _make_user(name="Test Student", email="asha.mca25@cmrit.ac.in", role="student", password="secret123"):
        user = {
            "id": uuid4().hex,
            "name": name,
            "email": email.lower(),
            "password_hash": hash_secret(password),
            "role": role,
            "created_at": get_ist_time().isoformat(),
        }
        fake_db.insert("users", user)
        return user, {"Authorization": f"Bearer {sign_token(user)}"}
    return _make_user


@pytest.fixture
def student(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(name="Prof Rao", email="rao.mca@cmrit.ac.in", role="admin")


@pytest.fixture
def add_game(fake_db):
    """Insert a game row directly"""
    def _add_game(title="Game", type="quiz", difficulty="easy", published=True, created_by="faculty-1",
                  definition=None, **extra):
        game = {
            "id": uuid4().hex,
            "title": title,
            "type": type,
            "difficulty": difficulty,
            "brief": f"{title} brief",
            "published": published,
            "created_by": created_by,
            "definition": definition,
            "duration": None,
            "total_points": None,
            "created_at": get_ist_time().isoformat(),
        }
        game.update(extra)
        fake_db.insert("games", game)
        return game
    return _add_game


@pytest.fixture
def quiz_definition():
    """Sample quiz payload for the play engine"""
    return {
        "questions": [
            {"text": "What does SQL stand for?",
             "options": ["Structured Query Language", "Simple Query Language", "Sequential Query Logic"],
             "correct": 0},
            {"text": "Which keyword removes duplicate rows?",
             "options": ["UNIQUE", "DISTINCT", "GROUP"],
             "correct": 1},
        ]
    }


@pytest.fixture
def auth_headers():
    """Helper to create auth headers"""
    def _auth_headers(token: str):
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
