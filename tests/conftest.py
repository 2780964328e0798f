import os

# La base de datos de los tests es SQLite en memoria; debe configurarse antes de importar la app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("ADMIN_API_TOKEN", None)
os.environ.pop("BOT_USER_AGENT_PATTERNS", None)
os.environ.pop("SESSION_TIMEOUT_MINUTES", None)

from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.exc import OperationalError  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from vibedev_analytics.database import Base, SessionLocal, engine  # noqa: E402
from vibedev_analytics.main import app  # noqa: E402


class FakeClock:
    """Reloj controlable para probar expiración de sesiones y cambios de día."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 12, 0, 0))


@pytest.fixture
def failing_commit(monkeypatch):
    """Hace fallar el próximo commit de cualquier sesión de SQLAlchemy (una sola vez)."""
    original_commit = Session.commit
    state = {"remaining": 1}

    def commit(self):
        if state["remaining"] > 0:
            state["remaining"] -= 1
            raise OperationalError("COMMIT", {}, Exception("database is locked"))
        return original_commit(self)

    monkeypatch.setattr(Session, "commit", commit)
    return state
