from typing import Any, Optional

import httpx

from app.features.submissions.services.contact_store import ContactId, ContactStore, Row
from app.platform.config import settings
from app.platform.exceptions import StoreError
from app.platform.logger import get_logger

logger = get_logger(__name__)

SINGLE_OBJECT = "application/vnd.pgrst.object+json"
RETURN_ROW = "return=representation"

# PostgREST: a single object was requested but the result had 0 or >1 rows.
NOT_SINGULAR_CODE = "PGRST116"
# Postgres: unique_violation.
UNIQUE_VIOLATION_CODE = "23505"


def create_rest_client(
    base_url: Optional[str] = None,
    service_key: Optional[str] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Build the process-wide PostgREST client (Supabase `/rest/v1`).
    Created once at startup and closed on shutdown.
    """
    base_url = (base_url if base_url is not None else settings.SUPABASE_URL).rstrip("/")
    service_key = service_key if service_key is not None else settings.SUPABASE_SERVICE_ROLE_KEY
    if not base_url or not service_key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set for the rest store backend.")

    return httpx.AsyncClient(
        base_url=f"{base_url}/rest/v1",
        headers={
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Content-Type": "application/json",
        },
        timeout=timeout if timeout is not None else settings.STORE_TIMEOUT,
        transport=transport,
    )


def quote_filter_value(value: str) -> str:
    """Quote a value for use inside a PostgREST `or=(...)` filter."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _is_empty_result(error: dict) -> bool:
    return error.get("code") == NOT_SINGULAR_CODE and "0 rows" in str(error.get("details") or "")


class RestContactStore(ContactStore):
    """ContactStore backed by a PostgREST endpoint."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: Optional[dict] = None,
        json: Optional[Any] = None,
        prefer: Optional[str] = None,
    ) -> Optional[Row]:
        headers = {"Accept": SINGLE_OBJECT}
        if prefer:
            headers["Prefer"] = prefer

        try:
            response = await self.client.request(method, f"/{table}", params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {table} failed: {exc!r}") from exc

        if response.is_success:
            return response.json() if response.content else None

        try:
            error = response.json()
        except ValueError:
            error = {}
        if not isinstance(error, dict):
            error = {}

        if _is_empty_result(error):
            return None

        raise StoreError(
            f"{method} {table} returned {response.status_code}: "
            f"{error.get('message') or response.text} {error.get('details') or ''}".strip(),
            code=error.get("code"),
        )

    async def find_contact(self, email: str, phone_e164: str) -> Optional[Row]:
        predicate = f"(email.eq.{quote_filter_value(email)},phone_e164.eq.{quote_filter_value(phone_e164)})"
        return await self._request("GET", "contacts", params={"select": "*", "or": predicate})

    async def create_contact(self, values: Row) -> Row:
        try:
            row = await self._request("POST", "contacts", json=values, prefer=RETURN_ROW)
        except StoreError as exc:
            if exc.code != UNIQUE_VIOLATION_CODE:
                raise
            logger.warning("Contact insert hit a uniqueness conflict, re-reading the existing row")
            row = await self.find_contact(values.get("email"), values.get("phone_e164"))
        if row is None:
            raise StoreError("Contact insert returned no row")
        return row

    async def update_contact(self, contact_id: ContactId, patch: Row) -> Row:
        row = await self._request(
            "PATCH", "contacts", params={"id": f"eq.{contact_id}"}, json=patch, prefer=RETURN_ROW
        )
        if row is None:
            raise StoreError(f"Contact {contact_id} not found for update")
        return row

    async def get_preferences(self, contact_id: ContactId) -> Optional[Row]:
        return await self._request(
            "GET", "preferences", params={"select": "*", "contact_id": f"eq.{contact_id}"}
        )

    async def insert_preferences(self, contact_id: ContactId, values: Row) -> Row:
        row = await self._request(
            "POST", "preferences", json={"contact_id": contact_id, **values}, prefer=RETURN_ROW
        )
        if row is None:
            raise StoreError(f"Preferences insert for contact {contact_id} returned no row")
        return row

    async def update_preferences(self, contact_id: ContactId, values: Row) -> Row:
        row = await self._request(
            "PATCH", "preferences", params={"contact_id": f"eq.{contact_id}"}, json=values, prefer=RETURN_ROW
        )
        if row is None:
            raise StoreError(f"Preferences for contact {contact_id} not found for update")
        return row

    async def insert_submission(self, values: Row) -> Row:
        row = await self._request("POST", "submissions", json=values, prefer=RETURN_ROW)
        if row is None:
            raise StoreError("Submission insert returned no row")
        return row
