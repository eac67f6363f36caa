from wabot.services.llm.base import LLMError, LLMProvider, LLMResponse
from wabot.services.llm.openai_provider import OpenAIProvider

__all__ = ["LLMError", "LLMProvider", "LLMResponse", "OpenAIProvider"]
