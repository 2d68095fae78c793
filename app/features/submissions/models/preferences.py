import sqlalchemy
from sqlalchemy import JSON, Boolean, Column, ForeignKey, String

from app.platform.db.base import Base

FREQUENCIES = ("invites_only", "monthly", "weekly")
DEFAULT_FREQUENCY = "invites_only"
CHANNELS = ("email", "sms", "app")

PREFERENCE_FIELDS = (
    "thrive_invites",
    "friday_reminders",
    "updates",
    "real_insights",
    "frequency",
    "channels",
)


class Preferences(Base):
    """One row per contact; every submission replaces all fields."""

    __tablename__ = "preferences"

    contact_id = Column(
        String, ForeignKey("contacts.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    thrive_invites = Column(Boolean, nullable=False, default=False)
    friday_reminders = Column(Boolean, nullable=False, default=False)
    updates = Column(Boolean, nullable=False, default=False)
    real_insights = Column(Boolean, nullable=False, default=False)
    frequency = Column(String(20), nullable=False, default=DEFAULT_FREQUENCY)
    channels = Column(JSON, nullable=False, default=list)
    created_at = Column(
        sqlalchemy.DateTime(timezone=True), server_default=sqlalchemy.func.now(), nullable=False
    )
    updated_at = Column(
        sqlalchemy.DateTime(timezone=True),
        server_default=sqlalchemy.func.now(),
        onupdate=sqlalchemy.func.now(),
        nullable=False,
    )

    def to_dict(self) -> dict:
        data = {"contact_id": self.contact_id}
        data.update({field: getattr(self, field) for field in PREFERENCE_FIELDS})
        return data
