from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from wabot.models import User
from wabot.services.localization_service import LocalizationService


@pytest.fixture
def db_session():
    """Mock database session."""
    return Mock()


@pytest.fixture
def mock_env(monkeypatch):
    """Set test environment variables."""
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("OPENAI_ASSISTANT_ID", "asst_test")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("USE_MOCK_MESSENGER", "true")


@pytest.fixture
def localization():
    """Real localization backed by the bundled YAML resources."""
    return LocalizationService(default_language="es")


@pytest.fixture
def make_user():
    def _make_user(
        phone_number="whatsapp:+5491100000000",
        name=None,
        email=None,
        language_code="es",
        thread_id="thread_abc",
    ):
        return User(
            phone_number=phone_number,
            thread_id=thread_id,
            name=name,
            email=email,
            language_code=language_code,
            created_at=datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc),
            updated_at=datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc),
        )

    return _make_user


@pytest.fixture
def storage():
    """Mock user storage."""
    return Mock()


@pytest.fixture
def messenger():
    """Mock outbound messenger."""
    return Mock()
