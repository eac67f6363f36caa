from wabot.schemas.webhook import TwilioWebhookForm, WebhookResponse

__all__ = ["TwilioWebhookForm", "WebhookResponse"]
