"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from exercise_tracker_api.app.core.db import Database
from exercise_tracker_api.app.main import create_app


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def database(temp_db_path):
    """An open data store backed by a temporary file."""
    db = Database(str(temp_db_path)).connect()
    yield db
    db.close()


@pytest.fixture
def app(temp_db_path):
    return create_app(database_url=str(temp_db_path))


@pytest.fixture
def client(app):
    """Test client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def create_user(client):
    """Create a user through the API and return its id."""

    def _create(username: str = "athlete") -> int:
        response = client.post("/api/exercise/new-user", json={"username": username})
        assert response.status_code == 200, response.text
        return response.json()["_id"]

    return _create
