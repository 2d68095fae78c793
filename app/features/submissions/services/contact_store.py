from abc import ABC, abstractmethod
from typing import Any, Optional

ContactId = Any
Row = dict


class ContactStore(ABC):
    """
    The backing store for contacts, preferences and submissions.

    Rows are plain dicts keyed by column name. Lookups return None when no
    row matches and raise StoreError on anything else that goes wrong,
    including more than one matching row.
    """

    @abstractmethod
    async def find_contact(self, email: str, phone_e164: str) -> Optional[Row]:
        """Contact whose email OR phone matches."""

    @abstractmethod
    async def create_contact(self, values: Row) -> Row:
        ...

    @abstractmethod
    async def update_contact(self, contact_id: ContactId, patch: Row) -> Row:
        ...

    @abstractmethod
    async def get_preferences(self, contact_id: ContactId) -> Optional[Row]:
        ...

    @abstractmethod
    async def insert_preferences(self, contact_id: ContactId, values: Row) -> Row:
        ...

    @abstractmethod
    async def update_preferences(self, contact_id: ContactId, values: Row) -> Row:
        ...

    @abstractmethod
    async def insert_submission(self, values: Row) -> Row:
        ...
