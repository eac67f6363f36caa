from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wabot.database import Base
from wabot.models import User
from wabot.services.user_storage_service import SqlUserStorageService


@pytest.fixture
def storage():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    yield SqlUserStorageService(session_factory)
    engine.dispose()


def _new_user(**overrides):
    values = {
        "phone_number": "whatsapp:+5491100000000",
        "thread_id": "thread_1",
        "language_code": "es",
        "created_at": datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return User(**values)


class TestSqlUserStorage:
    def test_get_missing_user(self, storage):
        assert storage.get_user("whatsapp:+100") is None

    def test_upsert_creates_user(self, storage):
        stored = storage.upsert_user(_new_user())

        assert stored.phone_number == "whatsapp:+5491100000000"
        assert stored.thread_id == "thread_1"
        assert stored.updated_at is not None

        loaded = storage.get_user("whatsapp:+5491100000000")
        assert loaded.language_code == "es"
        assert loaded.name is None
        assert not loaded.is_registered

    def test_upsert_updates_existing_user(self, storage):
        storage.upsert_user(_new_user())
        user = storage.get_user("whatsapp:+5491100000000")
        user.language_code = "en"
        user.thread_id = "thread_2"

        storage.upsert_user(user)

        loaded = storage.get_user("whatsapp:+5491100000000")
        assert loaded.language_code == "en"
        assert loaded.thread_id == "thread_2"
        assert loaded.created_at.date().isoformat() == "2024-03-15"

    def test_update_registration(self, storage):
        storage.upsert_user(_new_user())

        storage.update_registration("whatsapp:+5491100000000", "John Doe", "")
        assert storage.get_user("whatsapp:+5491100000000").name == "John Doe"

        storage.update_registration("whatsapp:+5491100000000", "John Doe", "john.doe@gmail.com")
        loaded = storage.get_user("whatsapp:+5491100000000")
        assert loaded.email == "john.doe@gmail.com"
        assert loaded.is_registered

    def test_update_registration_for_unknown_user(self, storage):
        with pytest.raises(LookupError):
            storage.update_registration("whatsapp:+100", "John", "john.doe@gmail.com")

    def test_language_property(self, storage):
        stored = storage.upsert_user(_new_user(language_code="en"))

        assert stored.language.display_name == "English"
