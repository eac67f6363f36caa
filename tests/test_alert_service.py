from unittest.mock import MagicMock, Mock, patch

import httpx

from wabot.services.alert_service import alert_error, send_alert


class TestSendAlert:
    @patch("wabot.services.alert_service.ALERT_BOT_TOKEN", None)
    @patch("wabot.services.alert_service.ALERT_CHAT_ID", None)
    def test_returns_false_when_not_configured(self):
        assert send_alert("ERROR", "Test message") is False

    @patch("wabot.services.alert_service.ALERT_BOT_TOKEN", "test-token")
    @patch("wabot.services.alert_service.ALERT_CHAT_ID", "test-chat")
    @patch("wabot.services.alert_service.httpx.Client")
    def test_sends_alert_with_context(self, mock_client_class):
        mock_client = MagicMock()
        mock_client_class.return_value.__enter__.return_value = mock_client
        mock_response = Mock()
        mock_response.status_code = 200
        mock_client.post.return_value = mock_response

        result = send_alert("ERROR", "Webhook processing failed", {"sender": "whatsapp:+1"})

        assert result is True
        url = mock_client.post.call_args[0][0]
        assert url == "https://api.telegram.org/bottest-token/sendMessage"
        json_data = mock_client.post.call_args[1]["json"]
        assert json_data["chat_id"] == "test-chat"
        assert "ERROR" in json_data["text"]
        assert "sender: whatsapp:+1" in json_data["text"]

    @patch("wabot.services.alert_service.ALERT_BOT_TOKEN", "test-token")
    @patch("wabot.services.alert_service.ALERT_CHAT_ID", "test-chat")
    @patch("wabot.services.alert_service.httpx.Client")
    def test_returns_false_on_http_error(self, mock_client_class):
        mock_client = MagicMock()
        mock_client_class.return_value.__enter__.return_value = mock_client
        mock_client.post.side_effect = httpx.ConnectError("network down")

        assert send_alert("ERROR", "Test") is False

    @patch("wabot.services.alert_service.ALERT_BOT_TOKEN", "test-token")
    @patch("wabot.services.alert_service.ALERT_CHAT_ID", "test-chat")
    @patch("wabot.services.alert_service.httpx.Client")
    def test_returns_false_on_non_200(self, mock_client_class):
        mock_client = MagicMock()
        mock_client_class.return_value.__enter__.return_value = mock_client
        mock_response = Mock()
        mock_response.status_code = 403
        mock_client.post.return_value = mock_response

        assert send_alert("WARNING", "Test") is False


class TestShortcuts:
    @patch("wabot.services.alert_service.send_alert")
    def test_alert_error(self, mock_send):
        alert_error("boom", {"a": 1})
        mock_send.assert_called_once_with("ERROR", "boom", {"a": 1})
