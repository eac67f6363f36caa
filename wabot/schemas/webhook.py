from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TwilioWebhookForm(BaseModel):
    """Subset of the fields Twilio posts for an inbound WhatsApp message."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sender: Optional[str] = Field(default=None, alias="From")
    to: Optional[str] = Field(default=None, alias="To")
    body: Optional[str] = Field(default=None, alias="Body")
    message_sid: Optional[str] = Field(default=None, alias="MessageSid")
    profile_name: Optional[str] = Field(default=None, alias="ProfileName")
    num_media: int = Field(default=0, alias="NumMedia")


class WebhookResponse(BaseModel):
    success: bool
    message: str
