from wabot.logging_config import get_logger
from wabot.services.llm import LLMProvider

logger = get_logger("completion_service")

NO_COMPLETION_RESPONSE = "No completion response."


class ChatCompletionService:
    """Stateless single-prompt completions, used when no conversation thread is at hand."""

    def __init__(self, provider: LLMProvider, model: str = None, max_tokens: int = 200):
        self.provider = provider
        self.model = model
        self.max_tokens = max_tokens

    def get_completion(self, prompt: str) -> str:
        logger.debug(f"Getting chat completion for prompt length: {len(prompt or '')}")
        response = self.provider.generate(
            [{"role": "user", "content": prompt}],
            model=self.model,
            temperature=0.0,
            max_tokens=self.max_tokens,
        )
        completion = response.content or NO_COMPLETION_RESPONSE
        logger.info(f"Received chat completion, length: {len(completion)}")
        return completion
