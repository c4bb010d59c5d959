import os

# Must be set before anything imports core.config
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("LOG_DIR", "logs/test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from datetime import datetime, timedelta, timezone
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session
from typing import Generator

from main import app
from core.database import Base, SessionLocal, engine
from models.users import User
from utils.deps import get_db
from utils.hashing import get_password_hash

TEST_PASSWORD = "TestPassword123!"


class FrozenClock:
    """Stands in for utils.clock.utc_now; tests move time with advance()."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta):
        self.now += delta


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
async def client(session: Session):
    """
    Yields an HTTP client that talks to the app using the test database.
    """
    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session: Session):
    """Factory that inserts a user with a real argon2 hash."""
    def _make_user(email: str = "walt@example.com", password: str = TEST_PASSWORD) -> User:
        user = User(email=email, hashed_password=get_password_hash(password))
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def user(make_user) -> User:
    return make_user()


@pytest.fixture
async def login(client, user):
    """Logs the `user` fixture in and returns the response body."""
    response = await client.post("/api/login", json={
        "email": user.email,
        "password": TEST_PASSWORD
    })
    assert response.status_code == 200
    return response.json()
