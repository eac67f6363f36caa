from fastapi import APIRouter, Depends, HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from wabot.config import settings
from wabot.dependencies import get_orchestrator
from wabot.logging_config import get_logger
from wabot.schemas.webhook import TwilioWebhookForm, WebhookResponse
from wabot.services.alert_service import alert_error
from wabot.services.orchestration_service import OrchestrationService
from wabot.services.webhook_security import sanitize_message, validate_request

logger = get_logger("webhook")

router = APIRouter()


@router.post("/api/whatsapp", response_model=WebhookResponse)
async def whatsapp_webhook(request: Request, orchestrator: OrchestrationService = Depends(get_orchestrator)):
    """Accept an inbound Twilio WhatsApp message; the reply goes out through the messenger."""
    form = {key: str(value) for key, value in (await request.form()).items()}

    result = validate_request(
        form,
        url=str(request.url),
        signature=request.headers.get("X-Twilio-Signature"),
        auth_token=settings.twilio_auth_token,
        check_signature=settings.twilio_validate_signature,
    )
    if not result.ok:
        logger.warning(f"Rejected webhook: {result.error}", extra={"context": {"error_code": result.error_code}})
        if result.error_code == "invalid_signature":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)

    sender = result.value
    payload = TwilioWebhookForm.model_validate(form)
    if payload.num_media:
        logger.info(f"Message {payload.message_sid} carries {payload.num_media} media item(s), only text is routed")

    message = sanitize_message(payload.body, settings.max_message_length)
    if not message:
        logger.info(f"Empty message from {sender}, nothing to route")
        return WebhookResponse(success=True, message="Empty message ignored")

    try:
        await run_in_threadpool(orchestrator.handle_message, sender, message)
    except Exception as e:
        logger.error(
            f"Error processing webhook message: {e}",
            extra={"context": {"sender": sender, "message_sid": payload.message_sid}},
            exc_info=True,
        )
        alert_error("Webhook processing failed", {"sender": sender, "error": str(e)[:200]})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error processing message"
        ) from e

    return WebhookResponse(success=True, message="Message processed")
