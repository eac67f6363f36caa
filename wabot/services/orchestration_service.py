"""
Per-message routing: commands first, then onboarding for unregistered users,
then a conversational reply with an adaptive amount of user context.
"""

import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

from wabot.logging_config import LoggerAdapter, get_logger
from wabot.models import User
from wabot.services.localization_service import LocalizationKeys

logger = get_logger("orchestration_service")


class KeyedLock:
    """One lock per key; entries are dropped once nobody holds or waits on them."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # key -> [lock, refcount]

    @contextmanager
    def hold(self, key: str):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class OrchestrationService:
    def __init__(
        self,
        reply_generator,
        storage,
        messenger,
        command_service,
        registration_service,
        context_service,
        localization,
        default_language: str = "es",
    ):
        self.reply_generator = reply_generator
        self.storage = storage
        self.messenger = messenger
        self.command_service = command_service
        self.registration_service = registration_service
        self.context_service = context_service
        self.localization = localization
        self.default_language = default_language
        self.user_locks = KeyedLock()

    def handle_message(self, user_id: str, message: str) -> None:
        correlation_id = uuid.uuid4().hex[:8]
        log = LoggerAdapter(
            logger,
            {"correlation_id": correlation_id, "user_id": user_id, "message_length": len(message or "")},
        )

        if not message or not message.strip():
            log.warning("Empty message received, ignoring")
            return

        log.info("Starting message processing")
        try:
            with self.user_locks.hold(user_id):
                self._process(user_id, message, log)
        except Exception as e:
            log.error(f"Error processing message: {e}", exc_info=True)
            raise
        log.info("Message processing completed")

    def _process(self, user_id: str, message: str, log: LoggerAdapter) -> None:
        user, thread_id = self._get_or_create_user(user_id, log)
        log.debug(
            "User initialized",
            context={"registered": user.is_registered, "language": user.language_code, "thread_id": thread_id},
        )

        if self.command_service.handle_command(user, message):
            log.info("Message processed as command")
            return

        if not user.is_registered:
            log.info("Processing registration flow")
            result = self.registration_service.process_registration(user, message)
            log.info("Registration step finished", context={"action": result.action.value})
            if result.requires_response and result.response_message:
                self.messenger.send_message(user.phone_number, result.response_message)
            return

        self._handle_conversation(user, thread_id, message, log)

    def _get_or_create_user(self, user_id: str, log: LoggerAdapter):
        thread_id = self.reply_generator.create_or_get_thread(user_id)
        user = self.storage.get_user(user_id)

        if user is None:
            now = datetime.now(timezone.utc)
            user = self.storage.upsert_user(
                User(
                    phone_number=user_id,
                    thread_id=thread_id,
                    language_code=self.default_language,
                    created_at=now,
                    updated_at=now,
                )
            )
            log.info(f"Created new user with default language {user.language_code}")
        elif user.thread_id != thread_id:
            user.thread_id = thread_id
            user = self.storage.upsert_user(user)

        return user, thread_id

    def _handle_conversation(self, user, thread_id: str, message: str, log: LoggerAdapter) -> None:
        if self.context_service.should_include_context(message):
            level = self.context_service.determine_context_level(message)
            log.debug(f"Using context-aware reply with level {level.name}")
            contextual_message = self.context_service.format_user_context(user, message, level)
            reply = self.reply_generator.get_reply_with_context(thread_id, contextual_message)
        else:
            log.debug("Using plain reply without context")
            reply = self.reply_generator.get_reply(thread_id, message)

        log.info(f"Generated reply, length: {len(reply or '')}")
        if not reply:
            reply = self.localization.get_message(LocalizationKeys.REPLY_FALLBACK, user.language_code)
        self.messenger.send_message(user.phone_number, reply)
