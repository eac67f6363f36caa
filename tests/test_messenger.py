from unittest.mock import Mock, patch

import pytest
from twilio.base.exceptions import TwilioRestException

from wabot.services.messenger import DeliveryError, MockMessenger, TwilioMessenger


class TestTwilioMessenger:
    @pytest.mark.parametrize(
        "sid,token,number",
        [("", "t", "whatsapp:+1"), ("AC1", None, "whatsapp:+1"), ("AC1", "t", "")],
    )
    def test_missing_credentials(self, sid, token, number):
        with pytest.raises(ValueError):
            TwilioMessenger(sid, token, number)

    @patch("wabot.services.messenger.Client")
    def test_send_message(self, mock_client_class):
        mock_client = mock_client_class.return_value
        mock_client.messages.create.return_value = Mock(sid="SM1", status="queued")

        messenger = TwilioMessenger("AC123", "auth-token", "whatsapp:+14155238886")
        messenger.send_message("whatsapp:+5491100000000", "Hola")

        mock_client_class.assert_called_once_with("AC123", "auth-token")
        mock_client.messages.create.assert_called_once_with(
            to="whatsapp:+5491100000000",
            from_="whatsapp:+14155238886",
            body="Hola",
        )

    @patch("wabot.services.messenger.Client")
    def test_rejected_delivery_raises(self, mock_client_class):
        mock_client_class.return_value.messages.create.side_effect = TwilioRestException(
            400, "/Messages.json", msg="Invalid 'To' number", code=21211
        )

        messenger = TwilioMessenger("AC123", "auth-token", "whatsapp:+14155238886")

        with pytest.raises(DeliveryError) as exc_info:
            messenger.send_message("whatsapp:+1", "Hola")

        assert isinstance(exc_info.value.__cause__, TwilioRestException)


class TestMockMessenger:
    def test_records_messages(self):
        messenger = MockMessenger()

        messenger.send_message("whatsapp:+1", "first")
        messenger.send_message("whatsapp:+1", "second")

        assert messenger.sent == [("whatsapp:+1", "first"), ("whatsapp:+1", "second")]
