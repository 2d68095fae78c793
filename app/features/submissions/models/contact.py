from sqlalchemy import Column, String

from app.platform.db.base import BaseModel


class Contact(BaseModel):
    __tablename__ = "contacts"

    email = Column(String(320), unique=True, nullable=True, index=True)
    phone_e164 = Column(String(16), unique=True, nullable=True, index=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "phone_e164": self.phone_e164,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }

    def __repr__(self) -> str:
        return f"<Contact(id='{self.id}', email='{self.email}', phone_e164='{self.phone_e164}')>"
