from sqlalchemy import JSON, Column, ForeignKey, String, Text

from app.platform.db.base import BaseModel


class Submission(BaseModel):
    """Append-only audit log of accepted form submissions."""

    __tablename__ = "submissions"

    contact_id = Column(String, ForeignKey("contacts.id"), nullable=False, index=True)
    source = Column(String(255), nullable=False, default="web")
    ip = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=False, default="")
    payload = Column(JSON, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "contact_id": self.contact_id,
            "source": self.source,
            "ip": self.ip,
            "user_agent": self.user_agent,
            "payload": self.payload,
        }
