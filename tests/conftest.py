"""
Test configuration and fixtures for the Form Intake API.

Environment is set before the application is imported so that the settings
singleton picks up a throwaway SQLite database and a known form secret.
"""

import os
import tempfile
from typing import Generator, Optional
from uuid import uuid4

test_db_path = tempfile.mktemp(suffix=".db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"
os.environ["STORE_BACKEND"] = "sql"
os.environ["FORM_SECRET"] = "test-form-secret"
os.environ["LOG_DIR"] = os.path.join(tempfile.gettempdir(), "form_intake_test_logs")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.features.submissions.dependencies.store import get_store
from app.features.submissions.services.contact_store import ContactStore
from app.platform.db.session import init_models
from app.platform.exceptions import StoreError

FORM_SECRET = "test-form-secret"


class InMemoryContactStore(ContactStore):
    """ContactStore that keeps rows in dicts and records every call."""

    def __init__(self):
        self.contacts: dict = {}
        self.preferences: dict = {}
        self.submissions: list = []
        self.calls: list = []
        self.fail_on: Optional[str] = None

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_on == name:
            raise StoreError(f"{name} exploded", code="XX000")

    async def find_contact(self, email, phone_e164):
        self._record("find_contact")
        matches = [
            c for c in self.contacts.values() if c["email"] == email or c["phone_e164"] == phone_e164
        ]
        if len(matches) > 1:
            raise StoreError("ambiguous", code="ambiguous_match")
        return dict(matches[0]) if matches else None

    async def create_contact(self, values):
        self._record("create_contact")
        row = {"id": str(uuid4()), **values}
        self.contacts[row["id"]] = row
        return dict(row)

    async def update_contact(self, contact_id, patch):
        self._record("update_contact")
        self.contacts[contact_id].update(patch)
        return dict(self.contacts[contact_id])

    async def get_preferences(self, contact_id):
        self._record("get_preferences")
        row = self.preferences.get(contact_id)
        return dict(row) if row else None

    async def insert_preferences(self, contact_id, values):
        self._record("insert_preferences")
        self.preferences[contact_id] = {"contact_id": contact_id, **values}
        return dict(self.preferences[contact_id])

    async def update_preferences(self, contact_id, values):
        self._record("update_preferences")
        self.preferences[contact_id].update(values)
        return dict(self.preferences[contact_id])

    async def insert_submission(self, values):
        self._record("insert_submission")
        row = {"id": str(uuid4()), **values}
        self.submissions.append(row)
        return dict(row)


@pytest.fixture
def memory_store() -> InMemoryContactStore:
    return InMemoryContactStore()


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app, memory_store) -> Generator[TestClient, None, None]:
    """
    Test client whose store dependency is the in-memory store.
    """
    test_app.dependency_overrides[get_store] = lambda: memory_store
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.pop(get_store, None)


@pytest.fixture
def secret_headers() -> dict:
    return {"x-form-secret": FORM_SECRET}


@pytest_asyncio.fixture
async def sql_session_factory():
    """Fresh in-memory SQLite database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_models(bind=engine)
    yield async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    await engine.dispose()
