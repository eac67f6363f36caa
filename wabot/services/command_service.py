from datetime import datetime, timedelta, timezone
from typing import Callable, List

from wabot.logging_config import get_logger
from wabot.services.language import SupportedLanguage
from wabot.services.localization_service import LocalizationKeys
from wabot.services.result import Result

logger = get_logger("command_service")

LANGUAGE_COMMANDS = ("/lang", "/idioma")
HELP_COMMANDS = ("/help", "/ayuda")
SLOTS_COMMANDS = ("/slots", "/disponibilidad")
BOOK_COMMANDS = ("/book", "/reservar")

MAX_SLOTS_SHOWN = 5
SLOTS_LOOKAHEAD_DAYS = 7


def normalize_command(message: str) -> str:
    return (message or "").strip().casefold()


class CommandService:
    """Recognises control commands and performs them. First match wins."""

    def __init__(self, localization, storage, messenger, calendar, now: Callable[[], datetime] = None):
        self.localization = localization
        self.storage = storage
        self.messenger = messenger
        self.calendar = calendar
        self._now = now or (lambda: datetime.now(timezone.utc))

    def handle_command(self, user, message: str) -> bool:
        normalized = normalize_command(message)
        if not normalized:
            return False

        handlers = (
            ("language", self._handle_language),
            ("help", self._handle_help),
            ("slots", self._handle_slots),
            ("book", self._handle_book),
        )
        for name, handler in handlers:
            if handler(user, normalized):
                logger.info(f"Processed {name} command for {user.phone_number}")
                return True
        return False

    def _reply(self, user, key: str, *params) -> None:
        self.messenger.send_message(user.phone_number, self.localization.get_message(key, user.language_code, *params))

    def _handle_language(self, user, normalized: str) -> bool:
        parts = normalized.split()
        if parts[0] not in LANGUAGE_COMMANDS or len(parts) < 2:
            return False

        default_language = SupportedLanguage.from_code(self.localization.default_language)
        language = SupportedLanguage.from_code(parts[1], default=default_language)
        if not self.localization.is_language_supported(language.code):
            logger.warning(f"Language '{language.code}' has no localization resources loaded")
            self._reply(user, LocalizationKeys.LANGUAGE_NOT_SUPPORTED)
            return True

        user.language_code = language.code
        self.storage.upsert_user(user)
        self._reply(user, LocalizationKeys.LANGUAGE_CHANGED, language.display_name)
        return True

    def _handle_help(self, user, normalized: str) -> bool:
        if normalized not in HELP_COMMANDS:
            return False
        self._reply(user, LocalizationKeys.HELP_MESSAGE)
        return True

    def _fetch_slots(self) -> Result[List]:
        start = self._now() + timedelta(days=1)
        end = start + timedelta(days=SLOTS_LOOKAHEAD_DAYS)
        try:
            return Result.success(self.calendar.get_available_slots(start, end))
        except Exception as e:
            logger.error(f"Error getting available slots: {e}", exc_info=True)
            return Result.from_exception(e, "calendar_error")

    def _handle_slots(self, user, normalized: str) -> bool:
        if not normalized.startswith(SLOTS_COMMANDS):
            return False

        result = self._fetch_slots()
        if not result.ok:
            self._reply(user, LocalizationKeys.CALENDAR_ERROR)
            return True

        slots = result.value[:MAX_SLOTS_SHOWN]
        if not slots:
            self._reply(user, LocalizationKeys.CALENDAR_NO_SLOTS)
            return True

        header = self.localization.get_message(LocalizationKeys.CALENDAR_SLOTS_HEADER, user.language_code)
        footer = self.localization.get_message(LocalizationKeys.CALENDAR_SLOTS_FOOTER, user.language_code)
        lines = [f"{index}. {slot.display_text}" for index, slot in enumerate(slots, start=1)]
        self.messenger.send_message(user.phone_number, "\n".join([header, "", *lines, "", footer]))
        return True

    def _handle_book(self, user, normalized: str) -> bool:
        if not normalized.startswith(BOOK_COMMANDS):
            return False
        self._reply(user, LocalizationKeys.CALENDAR_BOOKING_HELP)
        return True
