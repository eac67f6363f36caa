from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from wabot.logging_config import get_logger
from wabot.models import User

logger = get_logger("user_storage_service")


class UserStorageService(ABC):
    @abstractmethod
    def get_user(self, phone_number: str) -> Optional[User]:
        pass

    @abstractmethod
    def upsert_user(self, user: User) -> User:
        pass

    @abstractmethod
    def update_registration(self, phone_number: str, name: str, email: str) -> None:
        pass


class SqlUserStorageService(UserStorageService):
    """User persistence on top of a SQLAlchemy session factory. One session per call."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_user(self, phone_number: str) -> Optional[User]:
        db = self.session_factory()
        try:
            return db.query(User).filter(User.phone_number == phone_number).first()
        finally:
            db.close()

    def upsert_user(self, user: User) -> User:
        db = self.session_factory()
        try:
            now = datetime.now(timezone.utc)
            existing = db.query(User).filter(User.phone_number == user.phone_number).first()
            if existing is None:
                existing = User(
                    phone_number=user.phone_number,
                    created_at=user.created_at or now,
                )
                db.add(existing)
                logger.info(f"Creating user {user.phone_number}")

            existing.thread_id = user.thread_id or existing.thread_id or ""
            existing.name = user.name
            existing.email = user.email
            existing.language_code = user.language_code or existing.language_code or "es"
            existing.updated_at = now

            db.commit()
            db.refresh(existing)
            return existing
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def update_registration(self, phone_number: str, name: str, email: str) -> None:
        db = self.session_factory()
        try:
            user = db.query(User).filter(User.phone_number == phone_number).first()
            if user is None:
                raise LookupError(f"User {phone_number} not found")
            user.name = name
            user.email = email
            user.updated_at = datetime.now(timezone.utc)
            db.commit()
            logger.info(f"Updated registration for {phone_number}: has_name={bool(name)}, has_email={bool(email)}")
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
