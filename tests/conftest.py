"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Point the application at a throwaway SQLite database per test
  - Provide a running TestClient (lifespan included)
  - Provide registered users and bearer headers for gated routes

Notes:
  - BCRYPT_ROUNDS is lowered so hashing stays fast
  - Environment is set through monkeypatch, never through a .env file
"""

from pathlib import Path
from typing import Dict, Iterator

import pytest
from fastapi.testclient import TestClient

from stockapi.core.app_factory import create_application
from stockapi.core.config import Settings

TEST_SECRET = "unit-test-secret-key-with-at-least-32-chars"
USER_EMAIL = "user@stock.io"
USER_PASSWORD = "Str0ng!Pass"


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


@pytest.fixture
def env(monkeypatch, tmp_path: Path) -> Path:
    """R: Minimal valid environment; returns the database path."""
    database_path = tmp_path / "stock.db"
    monkeypatch.setenv("JWT_SECRET_KEY", TEST_SECRET)
    monkeypatch.setenv("DATABASE_PATH", str(database_path))
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000")
    for key in (
        "JWT_ISSUER",
        "JWT_AUDIENCE",
        "JWT_EXPIRY_MINUTES",
        "LOG_LEVEL",
        "SEED_USER_EMAIL",
        "SEED_USER_PASSWORD",
    ):
        monkeypatch.delenv(key, raising=False)
    return database_path


@pytest.fixture
def settings(env: Path) -> Settings:
    return Settings()


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    app = create_application(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def registered_user(client: TestClient) -> Dict[str, str]:
    credentials = {"email": USER_EMAIL, "password": USER_PASSWORD}
    response = client.post("/api/auth/register", json=credentials)
    assert response.status_code == 200
    return credentials


@pytest.fixture
def auth_headers(client: TestClient, registered_user: Dict[str, str]) -> Dict[str, str]:
    response = client.post("/api/auth/login", json=registered_user)
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
