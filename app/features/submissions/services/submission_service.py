from typing import Any, Optional

from app.features.submissions.schemas.submission import DesiredPreferences, PreferencesIn, SubmissionIn
from app.features.submissions.services.contact_store import ContactId, ContactStore, Row
from app.features.submissions.utils.normalize import clean, normalize_email, to_e164
from app.platform.exceptions import MissingFieldsError
from app.platform.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SOURCE = "web"
CONTACT_FIELDS = ("first_name", "last_name", "email", "phone_e164")


def normalize_contact(submission: SubmissionIn) -> Row:
    """
    Normalized contact fields from a submission.
    Raises MissingFieldsError unless all four come out non-empty.
    """
    contact = {
        "first_name": clean(submission.first),
        "last_name": clean(submission.last),
        "email": normalize_email(submission.email),
        "phone_e164": to_e164(submission.phone),
    }
    if not all(contact.values()):
        raise MissingFieldsError()
    return contact


def build_contact_patch(existing: Row, desired: Row) -> Row:
    """Fields that are empty on the stored contact and non-empty in the submission."""
    return {
        field: desired[field]
        for field in CONTACT_FIELDS
        if not existing.get(field) and desired.get(field)
    }


def build_desired_preferences(prefs: PreferencesIn) -> DesiredPreferences:
    channels = []
    for channel in prefs.channels:
        if channel not in channels:
            channels.append(channel)
    return DesiredPreferences(
        thrive_invites=prefs.thrive_invites,
        friday_reminders=prefs.friday_reminders,
        updates=prefs.updates,
        real_insights=prefs.real_insights,
        frequency=prefs.frequency,
        channels=channels,
    )


class SubmissionService:
    def __init__(self, store: ContactStore):
        self.store = store

    async def process(
        self,
        submission: SubmissionIn,
        *,
        raw_payload: Any,
        ip: Optional[str],
        user_agent: Optional[str],
    ) -> ContactId:
        """
        Validate, resolve the contact, replace its preferences and log the
        submission. Returns the contact id.

        Store failures propagate as StoreError; nothing is retried and
        writes that already happened are not undone.
        """
        desired = normalize_contact(submission)

        contact = await self.resolve_contact(desired)
        contact_id = contact["id"]

        await self.replace_preferences(contact_id, build_desired_preferences(submission.prefs))
        await self.log_submission(
            contact_id,
            source=submission.source,
            ip=ip,
            user_agent=user_agent,
            payload=raw_payload,
        )
        return contact_id

    async def resolve_contact(self, desired: Row) -> Row:
        contact = await self.store.find_contact(desired["email"], desired["phone_e164"])
        if contact is None:
            contact = await self.store.create_contact(desired)
            logger.info(f"Created contact {contact['id']}")
            return contact

        patch = build_contact_patch(contact, desired)
        if not patch:
            logger.debug(f"Contact {contact['id']} already complete, no update")
            return contact

        logger.info(f"Back-filling contact {contact['id']} fields: {sorted(patch)}")
        return await self.store.update_contact(contact["id"], patch)

    async def replace_preferences(self, contact_id: ContactId, desired: DesiredPreferences) -> Row:
        values = desired.to_row()
        existing = await self.store.get_preferences(contact_id)
        if existing is None:
            return await self.store.insert_preferences(contact_id, values)
        return await self.store.update_preferences(contact_id, values)

    async def log_submission(
        self,
        contact_id: ContactId,
        *,
        source: Optional[str],
        ip: Optional[str],
        user_agent: Optional[str],
        payload: Any,
    ) -> Row:
        return await self.store.insert_submission(
            {
                "contact_id": contact_id,
                "source": source or DEFAULT_SOURCE,
                "ip": ip,
                "user_agent": user_agent or "",
                "payload": payload,
            }
        )
