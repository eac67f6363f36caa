from abc import ABC, abstractmethod


class AssistantError(Exception):
    """Raised when the assistant API rejects a request or a run ends unsuccessfully."""


class AssistantTimeoutError(AssistantError):
    """Raised when a run does not reach a terminal status in time."""


class ReplyGenerator(ABC):
    """Conversational reply generation bound to a persistent per-user thread."""

    @abstractmethod
    def create_or_get_thread(self, user_id: str) -> str:
        """Return the thread id for user_id, creating one if needed."""
        pass

    @abstractmethod
    def get_reply(self, thread_id: str, message: str) -> str:
        """Post message to the thread and return the assistant's answer."""
        pass

    @abstractmethod
    def get_reply_with_context(self, thread_id: str, contextual_message: str) -> str:
        """Like get_reply, for messages prefixed with a user-context block."""
        pass
