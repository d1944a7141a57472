from fastapi import FastAPI

from aleve_relay.config import settings
from aleve_relay.logging_config import get_logger, setup_logging
from aleve_relay.routers import webhook

setup_logging(settings.log_level)

logger = get_logger("main")

app = FastAPI(
    title="AleveLive WhatsApp Relay",
    description="Relays WhatsApp messages from Twilio to OpenAI and replies with TwiML",
    version="0.1.0",
)

app.include_router(webhook.router)


@app.on_event("startup")
async def check_required_settings() -> None:
    missing = settings.missing_required()
    for name in missing:
        logger.error(f"Required setting is not configured: {name.upper()}")
    logger.info(
        "Relay started",
        extra={
            "context": {
                "reply_mode": settings.reply_mode,
                "image_policy": settings.image_policy,
                "missing_settings": [name.upper() for name in missing],
            }
        },
    )


@app.get("/health")
async def health():
    missing = settings.missing_required()
    return {"status": "ok" if not missing else "degraded", "missing_settings": [name.upper() for name in missing]}
