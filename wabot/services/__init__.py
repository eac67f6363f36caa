from wabot.services.command_service import CommandService
from wabot.services.context_service import ContextLevel, UserContextService
from wabot.services.extraction_service import (
    ExtractionMethod,
    ExtractionRequest,
    ExtractionResult,
    UserDataExtractionResult,
    UserDataExtractionService,
)
from wabot.services.registration_service import RegistrationAction, RegistrationResult, RegistrationService
from wabot.services.state_machine import (
    InvalidTransitionError,
    RegistrationState,
    can_transition,
    transition,
)
