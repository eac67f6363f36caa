from dataclasses import dataclass
from enum import Enum
from typing import Optional

from wabot.logging_config import get_logger
from wabot.services.extraction_service import ExtractionRequest, UserDataExtractionResult
from wabot.services.localization_service import LocalizationKeys
from wabot.services.state_machine import RegistrationState, complete, get_registration_state, record_name

logger = get_logger("registration_service")


class RegistrationAction(str, Enum):
    NONE = "none"
    REQUEST_NAME = "request_name"
    GREET_WITH_NAME = "greet_with_name"
    REQUEST_EMAIL = "request_email"
    COMPLETE_REGISTRATION = "complete_registration"
    SHOW_INVALID_EMAIL = "show_invalid_email"


@dataclass
class RegistrationResult:
    is_completed: bool
    requires_response: bool
    response_message: Optional[str] = None
    action: RegistrationAction = RegistrationAction.NONE


class RegistrationService:
    """Onboarding: collect the user's name, then email, persisting each step."""

    def __init__(self, extraction_service, storage, localization):
        self.extraction_service = extraction_service
        self.storage = storage
        self.localization = localization

    def is_registration_complete(self, user) -> bool:
        return get_registration_state(user) == RegistrationState.COMPLETE

    def process_registration(self, user, message: str) -> RegistrationResult:
        state = get_registration_state(user)
        logger.info(f"Registration step for {user.phone_number}: state={state.value}")

        request = ExtractionRequest(message=message, language_code=user.language_code, thread_id=user.thread_id or None)

        if state == RegistrationState.NEW:
            extraction = self.extraction_service.extract_user_data(request)
            return self._handle_new(user, state, extraction)

        if state == RegistrationState.HAS_NAME:
            return self._handle_has_name(user, state, self.extraction_service.extract_email(request))

        logger.warning(f"process_registration called for fully registered user {user.phone_number}")
        return RegistrationResult(is_completed=True, requires_response=False, action=RegistrationAction.NONE)

    def _message(self, user, key: str, *params) -> str:
        return self.localization.get_message(key, user.language_code, *params)

    def _handle_new(self, user, state: RegistrationState, extraction: UserDataExtractionResult) -> RegistrationResult:
        if not (extraction.name and extraction.name.is_successful):
            logger.debug(f"No name extracted, requesting name from {user.phone_number}")
            return RegistrationResult(
                is_completed=False,
                requires_response=True,
                response_message=self._message(user, LocalizationKeys.WELCOME_MESSAGE),
                action=RegistrationAction.REQUEST_NAME,
            )

        name = extraction.name.value
        logger.info(f"Extracted name for {user.phone_number} using {extraction.name.method.value}")

        if extraction.email and extraction.email.is_successful:
            complete(state)
            self.storage.update_registration(user.phone_number, name, extraction.email.value)
            logger.info(f"Registration completed in a single message for {user.phone_number}")
            return RegistrationResult(
                is_completed=True,
                requires_response=True,
                response_message=self._message(user, LocalizationKeys.REGISTRATION_COMPLETE, name),
                action=RegistrationAction.COMPLETE_REGISTRATION,
            )

        record_name(state)
        self.storage.update_registration(user.phone_number, name, "")
        return RegistrationResult(
            is_completed=False,
            requires_response=True,
            response_message=self._message(user, LocalizationKeys.GREET_WITH_NAME, name),
            action=RegistrationAction.GREET_WITH_NAME,
        )

    def _handle_has_name(self, user, state: RegistrationState, email_result) -> RegistrationResult:
        if email_result.is_successful:
            complete(state)
            self.storage.update_registration(user.phone_number, user.name, email_result.value)
            logger.info(f"Registration completed for {user.phone_number} using {email_result.method.value}")
            return RegistrationResult(
                is_completed=True,
                requires_response=True,
                response_message=self._message(user, LocalizationKeys.REGISTRATION_COMPLETE, user.name),
                action=RegistrationAction.COMPLETE_REGISTRATION,
            )

        if email_result.candidate:
            logger.warning(f"Rejected malformed email from {user.phone_number}")
            return RegistrationResult(
                is_completed=False,
                requires_response=True,
                response_message=self._message(user, LocalizationKeys.INVALID_EMAIL),
                action=RegistrationAction.SHOW_INVALID_EMAIL,
            )

        logger.debug(f"No email extracted, requesting email from {user.phone_number}")
        return RegistrationResult(
            is_completed=False,
            requires_response=True,
            response_message=self._message(user, LocalizationKeys.REQUEST_EMAIL),
            action=RegistrationAction.REQUEST_EMAIL,
        )
