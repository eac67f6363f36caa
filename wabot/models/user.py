from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from wabot.database import Base
from wabot.services.language import SupportedLanguage


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    phone_number = Column(String(64), primary_key=True)  # whatsapp:+5491100000000
    thread_id = Column(Text, nullable=False, default="")
    name = Column(Text)
    email = Column(Text)
    language_code = Column(String(8), nullable=False, default="es")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    @property
    def is_registered(self) -> bool:
        return bool(self.name) and bool(self.email)

    @property
    def language(self) -> SupportedLanguage:
        return SupportedLanguage.from_code(self.language_code)

    def __repr__(self) -> str:
        return f"<User {self.phone_number} lang={self.language_code} registered={self.is_registered}>"
