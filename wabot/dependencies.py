"""Wires the collaborators into a single orchestrator built from settings."""

from typing import Optional

from wabot.config import settings
from wabot.database import SessionLocal
from wabot.logging_config import get_logger
from wabot.services.assistant import OpenAIAssistantService
from wabot.services.calendar_service import BusinessHoursCalendar
from wabot.services.command_service import CommandService
from wabot.services.completion_service import ChatCompletionService
from wabot.services.context_service import UserContextService
from wabot.services.extraction_service import UserDataExtractionService
from wabot.services.llm import OpenAIProvider
from wabot.services.localization_service import get_localization_service
from wabot.services.messenger import Messenger, MockMessenger, TwilioMessenger
from wabot.services.orchestration_service import OrchestrationService
from wabot.services.registration_service import RegistrationService
from wabot.services.user_storage_service import SqlUserStorageService

logger = get_logger("dependencies")

_orchestrator: Optional[OrchestrationService] = None


def build_messenger() -> Messenger:
    if settings.use_mock_messenger:
        logger.warning("Using mock messenger, outbound messages are only logged")
        return MockMessenger()
    return TwilioMessenger(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_from_number,
    )


def build_orchestrator() -> OrchestrationService:
    localization = get_localization_service()
    storage = SqlUserStorageService(SessionLocal)
    messenger = build_messenger()

    reply_generator = OpenAIAssistantService(
        api_key=settings.openai_api_key,
        assistant_id=settings.openai_assistant_id,
        storage=storage,
        run_timeout_seconds=settings.assistant_run_timeout_seconds,
        poll_interval_seconds=settings.assistant_poll_interval_seconds,
    )
    completion_client = ChatCompletionService(
        OpenAIProvider(
            api_key=settings.openai_api_key,
            default_model=settings.openai_completion_model,
            timeout_seconds=settings.openai_timeout_seconds,
        )
    )
    calendar = BusinessHoursCalendar(
        timezone_name=settings.calendar_timezone,
        start_hour=settings.calendar_start_hour,
        end_hour=settings.calendar_end_hour,
        slot_minutes=settings.calendar_slot_minutes,
    )

    extraction = UserDataExtractionService(localization, reply_generator, completion_client)
    return OrchestrationService(
        reply_generator=reply_generator,
        storage=storage,
        messenger=messenger,
        command_service=CommandService(localization, storage, messenger, calendar),
        registration_service=RegistrationService(extraction, storage, localization),
        context_service=UserContextService(localization, timezone_name=settings.calendar_timezone),
        localization=localization,
        default_language=localization.default_language,
    )


def get_orchestrator() -> OrchestrationService:
    """Get or create the shared orchestrator. Raises ValueError on missing credentials."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator()
        logger.info("Orchestrator initialized")
    return _orchestrator
