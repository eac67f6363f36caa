"""Localized copy, extraction patterns and prompt templates loaded from YAML resources."""

from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional

import yaml

from wabot.logging_config import get_logger
from wabot.services.language import SupportedLanguage

logger = get_logger("localization_service")

RESOURCES_DIR = Path(__file__).resolve().parent.parent / "resources"


class LocalizationKeys:
    # Registration
    WELCOME_MESSAGE = "welcome_message"
    GREET_WITH_NAME = "greet_with_name"
    REQUEST_EMAIL = "request_email"
    REGISTRATION_COMPLETE = "registration_complete"
    INVALID_EMAIL = "invalid_email"

    # Language switching
    LANGUAGE_CHANGED = "language_changed"
    LANGUAGE_NOT_SUPPORTED = "language_not_supported"

    HELP_MESSAGE = "help_message"
    REPLY_FALLBACK = "reply_fallback"

    # Calendar
    CALENDAR_SLOTS_HEADER = "calendar_slots_header"
    CALENDAR_SLOTS_FOOTER = "calendar_slots_footer"
    CALENDAR_NO_SLOTS = "calendar_no_slots"
    CALENDAR_ERROR = "calendar_error"
    CALENDAR_BOOKING_HELP = "calendar_booking_help"

    # Extraction
    NAME_PATTERNS = "name_patterns"
    EMAIL_PATTERNS = "email_patterns"
    LLM_EXTRACT_NAME_PROMPT = "llm_extract_name_prompt"
    LLM_EXTRACT_EMAIL_PROMPT = "llm_extract_email_prompt"
    LLM_EXTRACT_BOTH_PROMPT = "llm_extract_both_prompt"

    # Context
    CONTEXT_TEMPLATE = "context_template"
    CONTEXT_TEMPLATE_MINIMAL = "context_template_minimal"
    CONTEXT_TEMPLATE_FULL = "context_template_full"
    CONTEXT_UNKNOWN_NAME = "context_unknown_name"
    CONTEXT_UNKNOWN_EMAIL = "context_unknown_email"
    PERSONAL_QUESTION_PATTERNS = "personal_question_patterns"
    NAME_QUESTION_PATTERNS = "name_question_patterns"
    EMAIL_QUESTION_PATTERNS = "email_question_patterns"


@lru_cache(maxsize=8)
def _load_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return data if isinstance(data, dict) else {}


def _format_message(message: str, params: tuple) -> str:
    if not params:
        return message
    try:
        return message.format(*params)
    except (IndexError, KeyError, ValueError):
        return message


class LocalizationService:
    """Resolves message keys per language with fallback to the default language."""

    def __init__(
        self,
        default_language: str = "es",
        languages: Optional[Iterable[str]] = None,
        resources_dir: Path = RESOURCES_DIR,
    ):
        self.default_language = SupportedLanguage.from_code(default_language).code
        self.resources_dir = resources_dir
        codes = list(languages) if languages is not None else [lang.code for lang in SupportedLanguage]
        self._messages: dict[str, dict] = {}
        for code in codes:
            messages = _load_yaml(resources_dir / f"{code}.yaml")
            if not messages:
                logger.warning(f"No localization resources found for language '{code}' in {resources_dir}")
                continue
            self._messages[code] = messages
            logger.info(f"Loaded {len(messages)} messages for language '{code}'")

    @property
    def supported_languages(self) -> List[str]:
        return list(self._messages.keys())

    def is_language_supported(self, language_code: Optional[str]) -> bool:
        return (language_code or "").strip().lower() in self._messages

    def _lookup(self, key: str, language_code: Optional[str]):
        code = (language_code or self.default_language).strip().lower()
        value = self._messages.get(code, {}).get(key)
        if value is not None:
            return value

        if code != self.default_language:
            value = self._messages.get(self.default_language, {}).get(key)
            if value is not None:
                logger.warning(
                    f"Message key '{key}' not found for language '{code}', using '{self.default_language}'"
                )
                return value

        return None

    def get_message(self, key: str, language_code: Optional[str], *params) -> str:
        """Return the localized text for key, formatted with positional params."""
        value = self._lookup(key, language_code)
        if value is None:
            logger.error(f"Message key '{key}' not found in any language")
            return key
        if not isinstance(value, str):
            raise TypeError(f"Message key '{key}' is not a text entry")
        return _format_message(value, params)

    def get_patterns(self, key: str, language_code: Optional[str]) -> List[str]:
        """Return a list entry (trigger phrases). Missing keys yield an empty list."""
        value = self._lookup(key, language_code)
        if value is None:
            return []
        if not isinstance(value, list):
            raise TypeError(f"Message key '{key}' is not a list entry")
        return [str(item) for item in value if item]


_localization_service: Optional[LocalizationService] = None


def get_localization_service() -> LocalizationService:
    """Get or create the shared localization service."""
    global _localization_service
    if _localization_service is None:
        from wabot.config import settings

        _localization_service = LocalizationService(default_language=settings.default_language)
    return _localization_service
