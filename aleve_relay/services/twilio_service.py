"""Twilio messaging helpers: TwiML replies and REST delivery."""

from typing import Optional

import httpx
from twilio.twiml.messaging_response import MessagingResponse

from aleve_relay.logging_config import get_logger
from aleve_relay.schemas.twilio import SendResult

logger = get_logger("twilio_service")


def build_twiml_reply(reply: str) -> str:
    """Render the synchronous reply envelope; an empty reply yields an empty <Response/>."""
    response = MessagingResponse()
    if reply:
        response.message(reply)
    return str(response)


class TwilioMessenger:
    """Sends WhatsApp messages through the Twilio Messages REST API."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        api_base: str = "https://api.twilio.com/2010-04-01",
        status_callback_url: Optional[str] = None,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.api_base = api_base.rstrip("/")
        self.status_callback_url = status_callback_url
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def messages_url(self) -> str:
        return f"{self.api_base}/Accounts/{self.account_sid}/Messages.json"

    async def send_message(self, to: str, from_: str, body: str) -> SendResult:
        if not self.account_sid or not self.auth_token:
            logger.error("Twilio credentials are not configured, message not sent")
            return SendResult(success=False, error="missing_credentials")

        data = {"To": to, "From": from_, "Body": body}
        if self.status_callback_url:
            data["StatusCallback"] = self.status_callback_url

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.post(
                    self.messages_url,
                    data=data,
                    auth=(self.account_sid, self.auth_token),
                )
        except httpx.HTTPError as e:
            logger.error(f"Twilio send failed: {e}", extra={"context": {"to": to}})
            return SendResult(success=False, error=str(e))

        if response.status_code not in (200, 201):
            logger.error(
                f"Twilio API error: {response.status_code} - {response.text}",
                extra={"context": {"to": to}},
            )
            return SendResult(success=False, error=f"twilio_status_{response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        logger.info(
            "Message queued in Twilio",
            extra={"context": {"message_sid": payload.get("sid"), "status": payload.get("status")}},
        )
        return SendResult(success=True, message_sid=payload.get("sid"), status=payload.get("status"))
