"""
TaskFlow Test Configuration

Shared fixtures for all tests. The app runs against a throwaway SQLite file
and without Redis; authentication is replaced by a switchable current user.
"""
import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="taskflow-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ.setdefault("FIREBASE_PROJECT_ID", "taskflow-test")
os.environ["AUTH_COOKIE_SECURE"] = "false"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402
from fastapi import Depends  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from taskflow import cache as cache_module  # noqa: E402
from taskflow import rate_limiter  # noqa: E402
from taskflow.auth import get_current_user  # noqa: E402
from taskflow.database import Base, SessionLocal, engine, get_db  # noqa: E402
from taskflow.main import app  # noqa: E402
from taskflow.models import User  # noqa: E402
from taskflow.routes.auth import rate_limit_session  # noqa: E402


class FakeRedis:
    """Dict-backed stand-in for the few Redis commands the cache uses"""

    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value

    def delete(self, key):
        self.store.pop(key, None)

    def info(self):
        return {"keyspace_hits": 3, "keyspace_misses": 1, "connected_clients": 1}


def _redis_unavailable():
    raise ConnectionError("Redis disabled in tests")


@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Cache misses and a failing limiter unless a test installs FakeRedis"""
    monkeypatch.setattr(rate_limiter, "get_redis_client", _redis_unavailable)
    monkeypatch.setattr(cache_module, "get_redis_client", _redis_unavailable)
    monkeypatch.setattr(cache_module.cache, "redis_client", None)


@pytest.fixture
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(cache_module.cache, "redis_client", fake)
    return fake


@pytest.fixture(autouse=True)
def database():
    """Fresh tables for every test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def firebase_admin_calls(monkeypatch):
    """Record Firebase Admin calls instead of reaching Google"""
    calls = []
    monkeypatch.setattr(
        "taskflow.routes.auth.revoke_sessions", lambda uid: calls.append(("revoke", uid)) or True
    )
    monkeypatch.setattr(
        "taskflow.routes.users.set_role_claim",
        lambda uid, role: calls.append(("role", uid, role)) or True,
    )
    return calls


def create_user(email: str, role: str = "user", uid: str = None) -> int:
    db = SessionLocal()
    try:
        user = User(firebase_uid=uid or f"uid-{email}", email=email, name=email.split("@")[0], role=role)
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


@pytest.fixture
def client():
    """Unauthenticated client; the session rate limiter is disabled"""
    app.dependency_overrides[rate_limit_session] = lambda: None
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class Acting:
    """Which user the overridden get_current_user returns"""

    def __init__(self, user_id: int):
        self.user_id = user_id


@pytest.fixture
def user_id():
    return create_user("owner@example.com")


@pytest.fixture
def acting(user_id):
    return Acting(user_id)


@pytest.fixture
def api(client, acting):
    """Client authenticated as `acting.user_id`"""

    def current_user(db: Session = Depends(get_db)):
        return db.query(User).filter(User.id == acting.user_id).first()

    app.dependency_overrides[get_current_user] = current_user
    return client


@pytest.fixture
def make_client(api):
    def _make(name="Acme Corp", email="billing@acme.com", **fields):
        resp = api.post("/clients", json={"name": name, "email": email, **fields})
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def make_task(api):
    def _make(client_id, title="Write report", estimatedDuration=60, dueDate="2026-03-10", **fields):
        payload = {
            "clientId": client_id,
            "title": title,
            "estimatedDuration": estimatedDuration,
            "dueDate": dueDate,
            **fields,
        }
        resp = api.post("/tasks", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
