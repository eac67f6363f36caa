from enum import IntEnum
from typing import List

from wabot.logging_config import get_logger
from wabot.services.localization_service import LocalizationKeys

logger = get_logger("context_service")

COMMAND_PREFIX = "/"
HELP_KEYWORDS = ("help", "ayuda")
MINIMAL_CONTEXT_MAX_WORDS = 3
DEFAULT_TIMEZONE = "UTC"

QUESTION_PATTERN_KEYS = (
    LocalizationKeys.NAME_QUESTION_PATTERNS,
    LocalizationKeys.EMAIL_QUESTION_PATTERNS,
    LocalizationKeys.PERSONAL_QUESTION_PATTERNS,
)


class ContextLevel(IntEnum):
    NONE = 0
    MINIMAL = 1  # name
    STANDARD = 2  # name, email, language
    FULL = 3  # name, email, language, member since, timezone


class UserContextService:
    """Decides how much of the user's profile goes in front of a conversational message."""

    def __init__(self, localization, timezone_name: str = DEFAULT_TIMEZONE):
        self.localization = localization
        self.timezone_name = timezone_name

    def should_include_context(self, message: str) -> bool:
        normalized = (message or "").strip().casefold()
        if normalized.startswith(COMMAND_PREFIX):
            return False
        return not normalized.startswith(HELP_KEYWORDS)

    def _question_patterns(self) -> List[str]:
        patterns = []
        for language_code in self.localization.supported_languages:
            for key in QUESTION_PATTERN_KEYS:
                patterns.extend(self.localization.get_patterns(key, language_code))
        return patterns

    def determine_context_level(self, message: str) -> ContextLevel:
        normalized = (message or "").strip().casefold()
        try:
            if any(pattern.casefold() in normalized for pattern in self._question_patterns()):
                return ContextLevel.FULL
        except Exception as e:
            logger.error(f"Error loading question patterns: {e}", exc_info=True)
            return ContextLevel.STANDARD

        if len(normalized.split()) <= MINIMAL_CONTEXT_MAX_WORDS:
            return ContextLevel.MINIMAL
        return ContextLevel.STANDARD

    def format_user_context(self, user, message: str, level: ContextLevel = ContextLevel.STANDARD) -> str:
        logger.info(f"Formatting user context for {user.phone_number} with level {level.name}")
        try:
            if level == ContextLevel.NONE:
                return message

            language_code = user.language_code
            name = user.name or self.localization.get_message(LocalizationKeys.CONTEXT_UNKNOWN_NAME, language_code)
            if level == ContextLevel.MINIMAL:
                formatted = self.localization.get_message(
                    LocalizationKeys.CONTEXT_TEMPLATE_MINIMAL, language_code, name, message
                )
            else:
                email = user.email or self.localization.get_message(
                    LocalizationKeys.CONTEXT_UNKNOWN_EMAIL, language_code
                )
                language = user.language.display_name
                if level == ContextLevel.STANDARD:
                    formatted = self.localization.get_message(
                        LocalizationKeys.CONTEXT_TEMPLATE, language_code, name, email, language, message
                    )
                else:
                    member_since = user.created_at.strftime("%Y-%m-%d") if user.created_at else "-"
                    formatted = self.localization.get_message(
                        LocalizationKeys.CONTEXT_TEMPLATE_FULL,
                        language_code,
                        name,
                        email,
                        language,
                        member_since,
                        self.timezone_name,
                        message,
                    )

            # A missing or broken template must not drop the user's text
            if message not in formatted:
                logger.warning(f"Context template for level {level.name} lost the message, sending it unformatted")
                return message
            return formatted
        except Exception as e:
            logger.error(f"Error formatting user context for {user.phone_number}: {e}", exc_info=True)
            return message
