from aleve_relay.schemas.inbound import Attachment, FetchedMedia, InboundMessage, Modality, classify_mime
from aleve_relay.schemas.twilio import SendResult, StatusCallback

__all__ = [
    "Attachment",
    "FetchedMedia",
    "InboundMessage",
    "Modality",
    "classify_mime",
    "SendResult",
    "StatusCallback",
]
