"""
Hybrid extraction of registration fields (name, email) from free text.

Tier 1 matches trigger phrases ("name:", "me llamo") at the start of the
message, the user's language first and then every other loaded language.
Tier 2 asks the LLM, preferring the user's assistant thread and falling
back once to a stateless completion.
"""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from email_validator import EmailNotValidError, validate_email

from wabot.logging_config import get_logger
from wabot.services.localization_service import LocalizationKeys

logger = get_logger("extraction_service")

NO_NAME_FOUND = "NO_NAME_FOUND"
NO_EMAIL_FOUND = "NO_EMAIL_FOUND"

PATTERN_CONFIDENCE = 0.9
REGEX_CONFIDENCE = 0.8
LLM_CONFIDENCE = 0.7

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100

EMAIL_REGEX = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
CODE_FENCE_REGEX = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class ExtractionMethod(str, Enum):
    PATTERN_MATCHING = "pattern_matching"
    LLM_FALLBACK = "llm_fallback"
    FAILED = "failed"


@dataclass
class ExtractionRequest:
    message: str
    language_code: str
    thread_id: Optional[str] = None


@dataclass
class ExtractionResult:
    value: Optional[str] = None
    method: ExtractionMethod = ExtractionMethod.FAILED
    confidence: float = 0.0
    error: Optional[str] = None
    # Value that was found but rejected by validation
    candidate: Optional[str] = None

    @property
    def is_successful(self) -> bool:
        return bool(self.value)

    @staticmethod
    def failed(error: str, candidate: Optional[str] = None) -> "ExtractionResult":
        return ExtractionResult(method=ExtractionMethod.FAILED, confidence=0.0, error=error, candidate=candidate)


@dataclass
class UserDataExtractionResult:
    name: Optional[ExtractionResult] = None
    email: Optional[ExtractionResult] = None

    @property
    def has_any_data(self) -> bool:
        return bool(self.name and self.name.is_successful) or bool(self.email and self.email.is_successful)


def is_valid_name(name: Optional[str]) -> bool:
    if not name or not name.strip():
        return False
    if len(name) < NAME_MIN_LENGTH or len(name) > NAME_MAX_LENGTH:
        return False
    return any(char.isalpha() for char in name)


def is_valid_email(email: Optional[str]) -> bool:
    if not email or any(char.isspace() for char in email):
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def looks_like_name_and_email(message: str) -> bool:
    """Cheap guess that a message carries both fields: an "@" and at least three words."""
    return "@" in message and len(message.split()) >= 3


class UserDataExtractionService:
    def __init__(self, localization, reply_generator, completion_client):
        self.localization = localization
        self.reply_generator = reply_generator
        self.completion_client = completion_client

    # Public API

    def extract_name(self, request: ExtractionRequest) -> ExtractionResult:
        logger.info(f"Extracting name, language={request.language_code}, thread={request.thread_id}")
        return self._extract(
            request,
            field_name="name",
            patterns_key=LocalizationKeys.NAME_PATTERNS,
            prompt_key=LocalizationKeys.LLM_EXTRACT_NAME_PROMPT,
            sentinel=NO_NAME_FOUND,
            validator=is_valid_name,
        )

    def extract_email(self, request: ExtractionRequest) -> ExtractionResult:
        logger.info(f"Extracting email, language={request.language_code}, thread={request.thread_id}")
        return self._extract(
            request,
            field_name="email",
            patterns_key=LocalizationKeys.EMAIL_PATTERNS,
            prompt_key=LocalizationKeys.LLM_EXTRACT_EMAIL_PROMPT,
            sentinel=NO_EMAIL_FOUND,
            validator=is_valid_email,
        )

    def extract_user_data(self, request: ExtractionRequest) -> UserDataExtractionResult:
        logger.info(f"Extracting user data, language={request.language_code}, thread={request.thread_id}")

        if looks_like_name_and_email(request.message or ""):
            logger.info("Message appears to contain both name and email, trying combined extraction")
            combined = self._extract_both_with_llm(request)
            if combined.has_any_data:
                return combined

        return UserDataExtractionResult(name=self.extract_name(request), email=self.extract_email(request))

    # Tiers

    def _extract(
        self,
        request: ExtractionRequest,
        field_name: str,
        patterns_key: str,
        prompt_key: str,
        sentinel: str,
        validator: Callable[[str], bool],
    ) -> ExtractionResult:
        pattern_result = self._extract_with_patterns(request, field_name, patterns_key, validator)
        if pattern_result.is_successful:
            logger.info(f"{field_name} extracted using pattern matching")
            return pattern_result

        logger.info(f"Pattern matching found no {field_name}, trying LLM fallback")
        llm_result = self._extract_with_llm(request, field_name, prompt_key, sentinel, validator)
        if llm_result.is_successful:
            logger.info(f"{field_name} extracted using LLM")
            return llm_result

        logger.warning(f"Both pattern matching and LLM extraction failed for {field_name}")
        if llm_result.candidate is None and pattern_result.candidate is not None:
            llm_result.candidate = pattern_result.candidate
        return llm_result

    def _extract_with_patterns(
        self,
        request: ExtractionRequest,
        field_name: str,
        patterns_key: str,
        validator: Callable[[str], bool],
    ) -> ExtractionResult:
        try:
            message = (request.message or "").strip()
            lower_message = message.casefold()
            candidate = None

            for pattern in self._trigger_phrases(patterns_key, request.language_code):
                lower_pattern = pattern.casefold()
                if not lower_message.startswith(lower_pattern):
                    continue
                value = message[len(pattern):].strip()
                if not value:
                    continue
                if validator(value):
                    return ExtractionResult(
                        value=value,
                        method=ExtractionMethod.PATTERN_MATCHING,
                        confidence=PATTERN_CONFIDENCE,
                    )
                if candidate is None:
                    candidate = value

            if field_name == "email":
                match = EMAIL_REGEX.search(message)
                if match and is_valid_email(match.group(0)):
                    return ExtractionResult(
                        value=match.group(0),
                        method=ExtractionMethod.PATTERN_MATCHING,
                        confidence=REGEX_CONFIDENCE,
                    )
                if candidate is None:
                    candidate = next((token for token in message.split() if "@" in token), None)

            return ExtractionResult.failed(f"No valid {field_name} pattern found", candidate=candidate)
        except Exception as e:
            logger.error(f"Error during pattern-based {field_name} extraction: {e}", exc_info=True)
            return ExtractionResult.failed(str(e))

    def _trigger_phrases(self, patterns_key: str, language_code: str) -> List[str]:
        """Trigger phrases for the user's language first, then those of the other supported languages."""
        phrases = list(self.localization.get_patterns(patterns_key, language_code))
        for code in self.localization.supported_languages:
            if code == language_code:
                continue
            phrases.extend(p for p in self.localization.get_patterns(patterns_key, code) if p not in phrases)
        return phrases

    def _extract_with_llm(
        self,
        request: ExtractionRequest,
        field_name: str,
        prompt_key: str,
        sentinel: str,
        validator: Callable[[str], bool],
    ) -> ExtractionResult:
        try:
            prompt = self.localization.get_message(prompt_key, request.language_code, request.message)
            response = self._ask_llm(prompt, request.thread_id).strip()

            if response.upper() == sentinel:
                return ExtractionResult.failed(f"LLM could not find {field_name}")

            if validator(response):
                return ExtractionResult(
                    value=response,
                    method=ExtractionMethod.LLM_FALLBACK,
                    confidence=LLM_CONFIDENCE,
                )
            return ExtractionResult.failed(f"LLM response not a valid {field_name}")
        except Exception as e:
            logger.error(f"Error during LLM-based {field_name} extraction: {e}", exc_info=True)
            return ExtractionResult.failed(str(e))

    def _extract_both_with_llm(self, request: ExtractionRequest) -> UserDataExtractionResult:
        try:
            prompt = self.localization.get_message(
                LocalizationKeys.LLM_EXTRACT_BOTH_PROMPT, request.language_code, request.message
            )
            response = self._ask_llm(prompt, request.thread_id)
            data = json.loads(CODE_FENCE_REGEX.sub("", response.strip()))
            if not isinstance(data, dict):
                raise ValueError("Combined extraction response is not a JSON object")

            result = UserDataExtractionResult()
            name = _json_text(data.get("name"))
            if name and is_valid_name(name):
                result.name = ExtractionResult(
                    value=name, method=ExtractionMethod.LLM_FALLBACK, confidence=LLM_CONFIDENCE
                )
            email = _json_text(data.get("email"))
            if email and is_valid_email(email):
                result.email = ExtractionResult(
                    value=email, method=ExtractionMethod.LLM_FALLBACK, confidence=LLM_CONFIDENCE
                )
            return result
        except Exception as e:
            logger.error(f"Error during LLM-based combined extraction: {e}", exc_info=True)
            return UserDataExtractionResult(name=ExtractionResult.failed(str(e)), email=ExtractionResult.failed(str(e)))

    def _ask_llm(self, prompt: str, thread_id: Optional[str]) -> str:
        if thread_id:
            logger.debug(f"Extraction via assistant thread {thread_id}")
            try:
                return self.reply_generator.get_reply(thread_id, prompt)
            except Exception as e:
                logger.warning(f"Thread extraction failed, falling back to stateless completion: {e}")
        else:
            logger.debug("No thread available, using stateless completion")
        return self.completion_client.get_completion(prompt)


def _json_text(value) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value.lower() == "null":
        return None
    return value
