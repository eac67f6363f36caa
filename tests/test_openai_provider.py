from unittest.mock import MagicMock, Mock, patch

import pytest

from wabot.services.completion_service import NO_COMPLETION_RESPONSE, ChatCompletionService
from wabot.services.llm import LLMError, LLMResponse, OpenAIProvider


class TestOpenAIProvider:
    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            OpenAIProvider(api_key="")

    @patch("wabot.services.llm.openai_provider.httpx.Client")
    def test_generate(self, mock_client_class):
        mock_client = MagicMock()
        mock_client_class.return_value.__enter__.return_value = mock_client
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.json.return_value = {
            "model": "gpt-4o-mini",
            "choices": [{"message": {"content": "John Doe"}}],
            "usage": {"total_tokens": 12},
        }
        mock_client.post.return_value = mock_response

        provider = OpenAIProvider(api_key="sk-test")
        response = provider.generate([{"role": "user", "content": "hi"}], max_tokens=50)

        assert response.content == "John Doe"
        assert response.usage == {"total_tokens": 12}
        payload = mock_client.post.call_args[1]["json"]
        assert payload["model"] == "gpt-4o-mini"
        assert payload["max_tokens"] == 50
        assert payload["temperature"] == 0.0

    @patch("wabot.services.llm.openai_provider.httpx.Client")
    def test_error_status_raises(self, mock_client_class):
        mock_client = MagicMock()
        mock_client_class.return_value.__enter__.return_value = mock_client
        mock_response = Mock()
        mock_response.status_code = 429
        mock_response.text = "rate limited"
        mock_client.post.return_value = mock_response

        with pytest.raises(LLMError) as exc_info:
            OpenAIProvider(api_key="sk-test").generate([{"role": "user", "content": "hi"}])

        assert exc_info.value.status_code == 429


class TestChatCompletionService:
    def test_single_user_prompt(self):
        provider = Mock()
        provider.generate.return_value = LLMResponse(content="NO_NAME_FOUND", model="gpt-4o-mini")

        service = ChatCompletionService(provider, model="gpt-4o-mini")

        assert service.get_completion("Extract the name") == "NO_NAME_FOUND"
        messages = provider.generate.call_args[0][0]
        assert messages == [{"role": "user", "content": "Extract the name"}]

    def test_empty_content(self):
        provider = Mock()
        provider.generate.return_value = LLMResponse(content="", model="gpt-4o-mini")

        assert ChatCompletionService(provider).get_completion("x") == NO_COMPLETION_RESPONSE

    def test_provider_error_propagates(self):
        provider = Mock()
        provider.generate.side_effect = LLMError(500, "server error")

        with pytest.raises(LLMError):
            ChatCompletionService(provider).get_completion("x")
