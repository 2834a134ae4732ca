"""Pytest configuration and fixtures."""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import pantry_planner.services.realtime as realtime_module
from pantry_planner import models  # noqa: F401
from pantry_planner.api.dependencies import get_llm_service
from pantry_planner.database import Base, get_db
from pantry_planner.main import app
from pantry_planner.services.llm import LLMService


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id, email and default pantry."""

    def __init__(
        self,
        *args,
        user_id: int | None = None,
        email: str | None = None,
        pantry_id: int | None = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email
        self.pantry_id = pantry_id


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace(
        "/pantry_planner", "/pantry_planner_test"
    )
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def session_factory(monkeypatch):
    """Point code that opens its own sessions at the test database."""
    monkeypatch.setattr("pantry_planner.tasks.receipt_scan.SessionLocal", TestingSessionLocal)
    monkeypatch.setattr("pantry_planner.api.websocket.SessionLocal", TestingSessionLocal)
    return TestingSessionLocal


@pytest.fixture(scope="function", autouse=True)
def mock_redis():
    """Replace the publishing Redis client so no server is needed."""
    mock_client = MagicMock()
    realtime_module._sync_redis = mock_client
    yield mock_client
    realtime_module._sync_redis = None


@pytest.fixture
def mock_llm():
    """An LLM service whose JSON responses are set per test."""
    llm = MagicMock(spec=LLMService)
    llm.is_configured = True
    llm.generate_json = AsyncMock()
    return llm


@pytest.fixture(scope="function")
def client(db, mock_llm):
    """Create a test client with database and LLM overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_service] = lambda: mock_llm
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    # Register user
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "test@example.com", "password": "testpass123", "name": "Test User"},
    )
    assert response.status_code == 201
    data = response.json()
    token = data["access_token"]

    return AuthHeaders(
        {"Authorization": f"Bearer {token}"},
        user_id=data["user"]["id"],
        email=data["user"]["email"],
        pantry_id=data["user"]["default_pantry_id"],
    )


@pytest.fixture
def add_items(client, auth_headers):
    """Bulk add items to the default pantry and return the created items."""

    def _add(*items: dict, pantry_id: int | None = None) -> list[dict]:
        response = client.post(
            f"/api/v1/pantries/{pantry_id or auth_headers.pantry_id}/items/bulk",
            headers=auth_headers,
            json={"items": list(items)},
        )
        assert response.status_code == 200
        return response.json()["items"]

    return _add
