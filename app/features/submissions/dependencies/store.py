from typing import AsyncIterator

from fastapi import Request

from app.features.submissions.services.contact_store import ContactStore
from app.features.submissions.services.rest_store import RestContactStore
from app.features.submissions.services.sql_store import SqlContactStore
from app.platform.config import settings
from app.platform.db.session import SessionLocal


async def get_store(request: Request) -> AsyncIterator[ContactStore]:
    """
    FastAPI dependency yielding the configured ContactStore.

    The REST client lives on app.state (opened in the app lifespan); the SQL
    backend gets a fresh session per request.
    """
    if settings.STORE_BACKEND == "rest":
        yield RestContactStore(request.app.state.store_client)
        return

    async with SessionLocal() as session:
        yield SqlContactStore(session)
