from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.submissions.models.contact import Contact
from app.features.submissions.models.preferences import Preferences
from app.features.submissions.models.submission import Submission
from app.features.submissions.services.contact_store import ContactId, ContactStore, Row
from app.platform.exceptions import StoreError
from app.platform.logger import get_logger

logger = get_logger(__name__)


class SqlContactStore(ContactStore):
    """ContactStore backed by a SQLAlchemy AsyncSession. Each write commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _guard(self, action: str):
        try:
            yield
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise StoreError(f"{action} failed: {exc}", code=getattr(exc, "code", None)) from exc

    async def find_contact(self, email: str, phone_e164: str) -> Optional[Row]:
        stmt = (
            select(Contact)
            .where(or_(Contact.email == email, Contact.phone_e164 == phone_e164))
            .order_by(Contact.created_at)
            .limit(2)
        )
        async with self._guard("Contact lookup"):
            result = await self.db.execute(stmt)
            contacts = result.scalars().all()

        if len(contacts) > 1:
            raise StoreError(
                f"Contact lookup matched {len(contacts)} rows for email/phone",
                code="ambiguous_match",
            )
        return contacts[0].to_dict() if contacts else None

    async def create_contact(self, values: Row) -> Row:
        contact = Contact(**values)
        self.db.add(contact)
        try:
            await self.db.commit()
        except IntegrityError:
            # Another request created the same person between our lookup and insert.
            await self.db.rollback()
            logger.warning("Contact insert hit a uniqueness conflict, re-reading the existing row")
            existing = await self.find_contact(values.get("email"), values.get("phone_e164"))
            if existing is None:
                raise StoreError("Contact insert conflicted but no existing row was found")
            return existing
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise StoreError(f"Contact insert failed: {exc}") from exc
        return contact.to_dict()

    async def update_contact(self, contact_id: ContactId, patch: Row) -> Row:
        async with self._guard("Contact update"):
            contact = await self.db.get(Contact, contact_id)
            if contact is None:
                raise StoreError(f"Contact {contact_id} not found for update")
            for field, value in patch.items():
                setattr(contact, field, value)
            await self.db.commit()
        return contact.to_dict()

    async def get_preferences(self, contact_id: ContactId) -> Optional[Row]:
        async with self._guard("Preferences lookup"):
            prefs = await self.db.get(Preferences, contact_id)
        return prefs.to_dict() if prefs else None

    async def insert_preferences(self, contact_id: ContactId, values: Row) -> Row:
        prefs = Preferences(contact_id=contact_id, **values)
        async with self._guard("Preferences insert"):
            self.db.add(prefs)
            await self.db.commit()
        return prefs.to_dict()

    async def update_preferences(self, contact_id: ContactId, values: Row) -> Row:
        async with self._guard("Preferences update"):
            prefs = await self.db.get(Preferences, contact_id)
            if prefs is None:
                raise StoreError(f"Preferences for contact {contact_id} not found for update")
            for field, value in values.items():
                setattr(prefs, field, value)
            await self.db.commit()
        return prefs.to_dict()

    async def insert_submission(self, values: Row) -> Row:
        submission = Submission(**values)
        async with self._guard("Submission insert"):
            self.db.add(submission)
            await self.db.commit()
        return submission.to_dict()
