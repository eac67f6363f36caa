"""Twilio webhook request validation and inbound text sanitizing."""

import re
from typing import Mapping, Optional

from twilio.request_validator import RequestValidator

from wabot.logging_config import get_logger
from wabot.services.result import Result

logger = get_logger("webhook_security")

DEFAULT_MAX_MESSAGE_LENGTH = 4000

_WHITESPACE = re.compile(r"\s+")


def validate_signature(auth_token: Optional[str], signature: Optional[str], url: str, form: Mapping[str, str]) -> bool:
    """Check X-Twilio-Signature: HMAC-SHA1 of the URL plus sorted POST params, keyed by the auth token."""
    if not auth_token or not signature:
        return False
    return RequestValidator(auth_token).validate(url, dict(form), signature)


def sanitize_message(message: Optional[str], max_length: int = DEFAULT_MAX_MESSAGE_LENGTH) -> str:
    if not message:
        return ""
    if len(message) > max_length:
        logger.info(f"Message truncated from {len(message)} to {max_length} characters")
        message = message[:max_length]
    text = message.replace("\x00", "")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def validate_request(
    form: Mapping[str, str],
    url: str,
    signature: Optional[str],
    auth_token: Optional[str],
    check_signature: bool = True,
) -> Result[str]:
    """Return the sender id when the request is authentic and addressed from someone."""
    if check_signature and not validate_signature(auth_token, signature, url, form):
        logger.warning(f"Invalid Twilio signature for {url}")
        return Result.failure("Invalid webhook signature", code="invalid_signature")

    sender = (form.get("From") or "").strip()
    if not sender:
        return Result.failure("Missing sender", code="missing_sender")
    return Result.success(sender)
