from typing import Optional

from pydantic import BaseModel

DELIVERY_STATUSES = {"queued", "sent", "delivered", "read", "failed", "undelivered"}


class StatusCallback(BaseModel):
    MessageSid: Optional[str] = None
    MessageStatus: Optional[str] = None
    To: Optional[str] = None
    ErrorCode: Optional[str] = None
    ErrorMessage: Optional[str] = None

    @property
    def is_known_status(self) -> bool:
        return (self.MessageStatus or "").lower() in DELIVERY_STATUSES

    @property
    def is_failure(self) -> bool:
        return (self.MessageStatus or "").lower() in {"failed", "undelivered"}


class SendResult(BaseModel):
    success: bool
    message_sid: Optional[str] = None
    status: Optional[str] = None
    error: Optional[str] = None
