from wabot.services.assistant.base import AssistantError, AssistantTimeoutError, ReplyGenerator
from wabot.services.assistant.openai_assistant import OpenAIAssistantService

__all__ = ["AssistantError", "AssistantTimeoutError", "ReplyGenerator", "OpenAIAssistantService"]
