from typing import Dict

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status

from aleve_relay.config import Settings, settings
from aleve_relay.logging_config import LoggerAdapter, get_logger
from aleve_relay.schemas.twilio import StatusCallback
from aleve_relay.services.pipeline import ReplyPipeline, build_pipeline
from aleve_relay.services.twilio_service import TwilioMessenger, build_twiml_reply

logger = get_logger("webhook")

router = APIRouter()

TWIML_MEDIA_TYPE = "text/xml"


def get_settings() -> Settings:
    return settings


def get_pipeline(app_settings: Settings = Depends(get_settings)) -> ReplyPipeline:
    return build_pipeline(app_settings)


def get_messenger(app_settings: Settings = Depends(get_settings)) -> TwilioMessenger:
    return TwilioMessenger(
        account_sid=app_settings.twilio_account_sid,
        auth_token=app_settings.twilio_auth_token,
        api_base=app_settings.twilio_api_base,
        status_callback_url=app_settings.status_callback_url,
    )


async def read_form(request: Request) -> Dict[str, str]:
    """Read the form-encoded Twilio payload; an unreadable body is treated as empty."""
    try:
        form = await request.form()
    except Exception as e:
        logger.warning(f"Failed to parse webhook form: {e}", exc_info=True)
        return {}
    return {key: str(value) for key, value in form.items()}


def request_logger(form: Dict[str, str]) -> LoggerAdapter:
    """Logger bound to the Twilio message SID of the current webhook call."""
    return LoggerAdapter(logger, {"message_sid": form.get("MessageSid")})


async def deliver_reply(pipeline: ReplyPipeline, messenger: TwilioMessenger, form: Dict[str, str]) -> None:
    """Background delivery for the REST reply mode."""
    log = request_logger(form)
    reply = await pipeline.run(form)
    recipient = form.get("From")
    sender = form.get("To")
    if not reply:
        log.info("Empty reply, nothing to deliver")
        return
    if not recipient or not sender:
        log.warning("Cannot deliver reply without From/To numbers")
        return

    result = await messenger.send_message(to=recipient, from_=sender, body=reply)
    if not result.success:
        log.error("Reply delivery failed", context={"error": result.error})


@router.post("/webhook")
async def handle_whatsapp_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    pipeline: ReplyPipeline = Depends(get_pipeline),
    messenger: TwilioMessenger = Depends(get_messenger),
    app_settings: Settings = Depends(get_settings),
):
    """
    Handle an inbound WhatsApp message from Twilio.

    In "twiml" mode the reply is returned synchronously as TwiML. In "api"
    mode the webhook is acknowledged with an empty TwiML response and the
    reply is sent through the Messages API once it is ready.
    """
    form = await read_form(request)
    log = request_logger(form)
    log.info(
        "WhatsApp webhook received",
        context={"num_media": form.get("NumMedia"), "has_body": bool(form.get("Body"))},
    )

    if app_settings.reply_mode == "api":
        background_tasks.add_task(deliver_reply, pipeline, messenger, form)
        return Response(content=build_twiml_reply(""), media_type=TWIML_MEDIA_TYPE)

    reply = await pipeline.run(form)
    log.info("Sending TwiML reply", context={"reply_len": len(reply)})
    return Response(content=build_twiml_reply(reply), media_type=TWIML_MEDIA_TYPE)


@router.post("/status", status_code=status.HTTP_204_NO_CONTENT)
async def handle_status_callback(request: Request):
    """Log Twilio delivery status callbacks. Nothing here feeds back into replies."""
    callback = StatusCallback(**await read_form(request))
    context = {
        "message_sid": callback.MessageSid,
        "status": callback.MessageStatus,
        "to": callback.To,
    }
    if callback.is_failure:
        context["error_code"] = callback.ErrorCode
        context["error_message"] = callback.ErrorMessage
        logger.error("Message delivery failed", extra={"context": context})
    elif not callback.is_known_status:
        logger.warning("Unknown message status", extra={"context": context})
    else:
        logger.info("Message status update", extra={"context": context})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
