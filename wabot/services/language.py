from enum import Enum
from typing import Optional


class SupportedLanguage(str, Enum):
    SPANISH = "es"
    ENGLISH = "en"

    @classmethod
    def from_code(cls, code: Optional[str], default: "SupportedLanguage" = None) -> "SupportedLanguage":
        """Map a language code or name to a supported language. Unknown input maps to the default."""
        normalized = (code or "").strip().casefold()
        language = LANGUAGE_ALIASES.get(normalized)
        if language is not None:
            return language
        return default or DEFAULT_LANGUAGE

    @property
    def code(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


DEFAULT_LANGUAGE = SupportedLanguage.SPANISH

LANGUAGE_ALIASES = {
    "en": SupportedLanguage.ENGLISH,
    "english": SupportedLanguage.ENGLISH,
    "inglés": SupportedLanguage.ENGLISH,
    "ingles": SupportedLanguage.ENGLISH,
    "es": SupportedLanguage.SPANISH,
    "spanish": SupportedLanguage.SPANISH,
    "español": SupportedLanguage.SPANISH,
    "espanol": SupportedLanguage.SPANISH,
}

DISPLAY_NAMES = {
    SupportedLanguage.SPANISH: "Español",
    SupportedLanguage.ENGLISH: "English",
}
