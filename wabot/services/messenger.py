from abc import ABC, abstractmethod
from typing import List, Tuple

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from wabot.logging_config import get_logger

logger = get_logger("messenger")


class DeliveryError(Exception):
    """Raised when the delivery provider rejects an outbound message."""


class Messenger(ABC):
    @abstractmethod
    def send_message(self, to: str, message: str) -> None:
        """Deliver message to the recipient."""
        pass


class TwilioMessenger(Messenger):
    """Send WhatsApp messages through the Twilio Messages API."""

    def __init__(self, account_sid: str, auth_token: str, from_number: str):
        if not account_sid:
            raise ValueError("Twilio Account SID is not configured")
        if not auth_token:
            raise ValueError("Twilio Auth Token is not configured")
        if not from_number:
            raise ValueError("Twilio From Number is not configured")
        self.from_number = from_number
        self.client = Client(account_sid, auth_token)
        logger.info(f"Twilio messenger initialized, from: {from_number}")

    def send_message(self, to: str, message: str) -> None:
        logger.info(f"Sending WhatsApp message to {to}, length: {len(message or '')}")
        try:
            sent = self.client.messages.create(to=to, from_=self.from_number, body=message)
        except TwilioRestException as e:
            logger.error(f"Twilio error for {to}: status={e.status}, code={e.code}, message={e.msg}")
            raise DeliveryError(f"Twilio API error: {e.status} - {e.msg}") from e

        logger.info(f"WhatsApp message sent to {to}, sid={sent.sid}, status={sent.status}")


class MockMessenger(Messenger):
    """Logs outbound messages instead of sending them. Used for local development."""

    def __init__(self):
        self.sent: List[Tuple[str, str]] = []

    def send_message(self, to: str, message: str) -> None:
        logger.info(f"[mock] message to {to}: {message}")
        self.sent.append((to, message))
