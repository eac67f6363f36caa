import pytest
from twilio.request_validator import RequestValidator

from wabot.services.webhook_security import sanitize_message, validate_request, validate_signature

URL = "https://bot.example.org/api/whatsapp"
FORM = {"From": "whatsapp:+5491100000000", "Body": "Hola", "MessageSid": "SM123"}


def _sign(form, token="secret", url=URL):
    return RequestValidator(token).compute_signature(url, form)


class TestSignature:
    def test_valid_signature(self):
        assert validate_signature("secret", _sign(FORM), URL, FORM)

    def test_wrong_token(self):
        assert not validate_signature("other", _sign(FORM), URL, FORM)

    def test_tampered_form(self):
        assert not validate_signature("secret", _sign(FORM), URL, {**FORM, "Body": "changed"})

    @pytest.mark.parametrize("token,signature", [("", "abc"), ("secret", None), ("secret", "")])
    def test_missing_inputs(self, token, signature):
        assert not validate_signature(token, signature, URL, FORM)


class TestSanitizeMessage:
    @pytest.mark.parametrize("message", [None, ""])
    def test_empty(self, message):
        assert sanitize_message(message) == ""

    def test_removes_null_bytes_and_collapses_whitespace(self):
        assert sanitize_message("  hola\x00\r\n  que   tal\t ") == "hola que tal"

    def test_truncates(self):
        assert sanitize_message("a" * 5000) == "a" * 4000
        assert sanitize_message("abcdef", max_length=3) == "abc"

    def test_whitespace_only(self):
        assert sanitize_message(" \r\n\t ") == ""


class TestValidateRequest:
    def test_valid_request_returns_sender(self):
        signature = _sign(FORM)

        result = validate_request(FORM, URL, signature, "secret")

        assert result.ok
        assert result.value == "whatsapp:+5491100000000"

    def test_invalid_signature(self):
        result = validate_request(FORM, URL, "bogus", "secret")

        assert not result.ok
        assert result.error_code == "invalid_signature"

    def test_signature_check_disabled(self):
        result = validate_request(FORM, URL, None, None, check_signature=False)

        assert result.ok

    def test_missing_sender(self):
        form = {"Body": "Hola"}

        result = validate_request(form, URL, None, None, check_signature=False)

        assert not result.ok
        assert result.error_code == "missing_sender"
