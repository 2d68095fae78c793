from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.features.submissions.models.preferences import CHANNELS, DEFAULT_FREQUENCY, FREQUENCIES


class Frequency(str, Enum):
    INVITES_ONLY = "invites_only"
    MONTHLY = "monthly"
    WEEKLY = "weekly"


class Channel(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    APP = "app"


class PreferencesIn(BaseModel):
    """
    Communication preferences as sent by the form.

    Parsing is deliberately forgiving: flags take the truthiness of whatever
    was sent, an unknown frequency falls back to the default and unknown
    channels are dropped.
    """

    model_config = ConfigDict(extra="ignore")

    thrive_invites: bool = False
    friday_reminders: bool = False
    updates: bool = False
    real_insights: bool = False
    frequency: Frequency = Frequency.INVITES_ONLY
    channels: List[Channel] = Field(default_factory=list)

    @field_validator("thrive_invites", "friday_reminders", "updates", "real_insights", mode="before")
    @classmethod
    def coerce_flag(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("frequency", mode="before")
    @classmethod
    def coerce_frequency(cls, value: Any) -> str:
        if isinstance(value, str) and value in FREQUENCIES:
            return value
        return DEFAULT_FREQUENCY

    @field_validator("channels", mode="before")
    @classmethod
    def filter_channels(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str) and item in CHANNELS]


class SubmissionIn(BaseModel):
    """
    Body of a form submission.

    Every field is optional at this layer; required-field checks run after
    normalization so that whitespace-only values are rejected as well.
    Unknown keys are kept (they are part of the audited payload).
    """

    model_config = ConfigDict(extra="allow")

    first: str = ""
    last: str = ""
    email: str = ""
    phone: str = ""
    prefs: PreferencesIn = Field(default_factory=PreferencesIn)
    source: Optional[str] = None
    honeypot: Any = None

    @field_validator("first", "last", "email", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("phone", mode="before")
    @classmethod
    def coerce_phone(cls, value: Any) -> str:
        # Forms occasionally post the number as a JSON number.
        if isinstance(value, bool):
            return ""
        if isinstance(value, (str, int)):
            return str(value)
        return ""

    @field_validator("prefs", mode="before")
    @classmethod
    def coerce_prefs(cls, value: Any) -> dict:
        return value if isinstance(value, dict) else {}

    @field_validator("source", mode="before")
    @classmethod
    def coerce_source(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @property
    def is_bot(self) -> bool:
        return bool(self.honeypot)


class DesiredPreferences(BaseModel):
    thrive_invites: bool
    friday_reminders: bool
    updates: bool
    real_insights: bool
    frequency: Frequency
    channels: List[Channel]

    def to_row(self) -> dict:
        return self.model_dump(mode="json")
