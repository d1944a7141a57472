import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class Modality(str, Enum):
    AUDIO = "audio"
    IMAGE = "image"
    VIDEO = "video"
    UNKNOWN = "unknown"


_MIME_PREFIXES = (
    ("audio/", Modality.AUDIO),
    ("image/", Modality.IMAGE),
    ("video/", Modality.VIDEO),
)


def classify_mime(mime_type: Optional[str]) -> Modality:
    """Map a declared MIME type to a modality; missing or unknown types never match."""
    normalized = (mime_type or "").strip().lower()
    for prefix, modality in _MIME_PREFIXES:
        if normalized.startswith(prefix):
            return modality
    return Modality.UNKNOWN


@dataclass(frozen=True)
class Attachment:
    url: str
    mime_type: str

    @property
    def modality(self) -> Modality:
        return classify_mime(self.mime_type)


@dataclass(frozen=True)
class InboundMessage:
    """Canonical form of one inbound WhatsApp webhook event."""

    sender: str
    body: str = ""
    message_sid: Optional[str] = None
    recipient: Optional[str] = None
    profile_name: Optional[str] = None
    wa_id: Optional[str] = None
    attachments: Tuple[Attachment, ...] = field(default_factory=tuple)

    @property
    def has_media(self) -> bool:
        return len(self.attachments) > 0

    @property
    def has_audio(self) -> bool:
        return self.first_attachment(Modality.AUDIO) is not None

    @property
    def has_image(self) -> bool:
        return self.first_attachment(Modality.IMAGE) is not None

    @property
    def has_video(self) -> bool:
        return self.first_attachment(Modality.VIDEO) is not None

    def first_attachment(self, modality: Modality) -> Optional[Attachment]:
        for attachment in self.attachments:
            if attachment.modality == modality:
                return attachment
        return None


@dataclass
class FetchedMedia:
    content: bytes
    mime_type: str

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"
