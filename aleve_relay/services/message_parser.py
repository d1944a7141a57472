"""Normalize Twilio WhatsApp webhook form fields into an InboundMessage."""

from typing import List, Mapping, Optional

from aleve_relay.logging_config import get_logger
from aleve_relay.schemas.inbound import Attachment, InboundMessage
from aleve_relay.services.result import Result

logger = get_logger("message_parser")


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def parse_num_media(raw: Optional[str]) -> int:
    """Parse NumMedia, treating missing, non-numeric or negative values as 0."""
    try:
        count = int(_clean(raw) or "0")
    except (TypeError, ValueError):
        logger.warning("Invalid NumMedia value, treating as 0", extra={"context": {"num_media": raw}})
        return 0
    if count < 0:
        return 0
    return count


def parse_attachments(form: Mapping[str, str], num_media: int) -> List[Attachment]:
    attachments: List[Attachment] = []
    for index in range(num_media):
        attachments.append(
            Attachment(
                url=_clean(form.get(f"MediaUrl{index}")),
                mime_type=_clean(form.get(f"MediaContentType{index}")).lower(),
            )
        )
    return attachments


def parse_incoming_message(form: Mapping[str, str]) -> Result[InboundMessage]:
    """
    Build the canonical message from a webhook form.

    The sender (`From`) is the only mandatory field. Body text and media are
    optional and indexed media fields that are absent become empty strings.
    """
    sender = _clean(form.get("From"))
    if not sender:
        return Result.failure("Missing sender identifier (From)", "missing_sender")

    num_media = parse_num_media(form.get("NumMedia"))
    attachments = parse_attachments(form, num_media)

    message = InboundMessage(
        sender=sender,
        body=form.get("Body") or "",
        message_sid=form.get("MessageSid") or None,
        recipient=form.get("To") or None,
        profile_name=form.get("ProfileName") or None,
        wa_id=form.get("WaId") or None,
        attachments=tuple(attachments),
    )
    return Result.success(message)
