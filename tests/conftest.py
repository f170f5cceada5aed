"""Pytest configuration and fixtures."""
import os

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from unittest.mock import MagicMock

from app.database import get_database
from app.main import app
from app.routers.auth import get_current_user_id


@pytest.fixture
def mock_db():
    """
    A MagicMock database whose collections are created on first access.

    Tests configure collections through mock_db.collections["goals"] etc.
    """
    collections = {}

    def get_collection(name):
        if name not in collections:
            collections[name] = MagicMock(name=name)
        return collections[name]

    db = MagicMock()
    db.__getitem__.side_effect = get_collection
    db.collections = collections
    for name in ("goals", "tasks", "users"):
        get_collection(name)
    return db


@pytest_asyncio.fixture
async def app_client(mock_db):
    """
    Create a test client backed by the mock database.

    This fixture:
    - Overrides the database dependency with mock_db
    - Authenticates every request as user123
    - Clears the overrides afterwards
    """
    app.dependency_overrides[get_database] = lambda: mock_db
    app.dependency_overrides[get_current_user_id] = lambda: "user123"

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def anonymous_client(mock_db):
    """Test client with the mock database but real token checks."""
    app.dependency_overrides[get_database] = lambda: mock_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()
