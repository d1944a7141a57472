from typing import List, Optional

from aleve_relay.logging_config import get_logger
from aleve_relay.schemas.inbound import Attachment
from aleve_relay.services.llm import LLMProvider, TranscriptionError
from aleve_relay.services.media_service import MediaError, MediaFetcher
from aleve_relay.services.persona import AUDIO_CONTEXT_PREFIX, IMAGE_CONTEXT_PREFIX, SYSTEM_PROMPT

logger = get_logger("ai_service")

MAX_REPLY_CHARS = 1500
ELLIPSIS = "..."

COMPLETION_MAX_TOKENS = 500
COMPLETION_TEMPERATURE = 0.7
AUDIO_FILENAME = "audio.ogg"

GREETING_REPLY = "Hola 👋 Soy AleveLive, agencia TikTok LIVE 🎯 Escríbenos y te guiamos para comenzar."
FALLBACK_REPLY = "Lo siento, tuve un problema procesando tu mensaje 🙏 ¿Podrías intentarlo de nuevo en unos minutos?"
AUDIO_FAILURE_CONTENT = (
    "El usuario envió un mensaje de voz, pero no pude procesar el audio. "
    "Pídele amablemente que escriba su mensaje."
)
DEFAULT_USER_CONTENT = "Hola"


def build_user_content(body: str, media_context: Optional[str] = None) -> str:
    """
    Derive the single user entry for the completion request.

    Media context (transcript or image description) comes first and the
    typed text follows on its own line. Plain text passes through unchanged.
    """
    body = body or ""
    has_text = bool(body.strip())
    if media_context:
        if has_text:
            return f"{media_context}\n{body}"
        return media_context
    return body if has_text else DEFAULT_USER_CONTENT


def audio_context(transcript: Optional[str]) -> str:
    if transcript:
        return f"{AUDIO_CONTEXT_PREFIX}{transcript}"
    return AUDIO_FAILURE_CONTENT


def image_context(description: Optional[str] = None) -> str:
    if description:
        return f"{IMAGE_CONTEXT_PREFIX}Descripción: {description}"
    return IMAGE_CONTEXT_PREFIX.strip()


def compose_messages(user_content: str, system_prompt: str = SYSTEM_PROMPT) -> List[dict]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_content or DEFAULT_USER_CONTENT},
    ]


def finalize_reply(text: Optional[str]) -> str:
    """Bound the reply to MAX_REPLY_CHARS and never return an empty reply."""
    reply = text or ""
    if not reply.strip():
        logger.warning("Empty completion text, using fallback reply")
        return FALLBACK_REPLY
    if len(reply) > MAX_REPLY_CHARS:
        logger.info(
            "Reply truncated",
            extra={"context": {"original_length": len(reply), "max_length": MAX_REPLY_CHARS}},
        )
        return reply[: MAX_REPLY_CHARS - len(ELLIPSIS)] + ELLIPSIS
    return reply


async def transcribe_attachment(
    attachment: Attachment,
    *,
    fetcher: MediaFetcher,
    provider: LLMProvider,
) -> Optional[str]:
    """Fetch and transcribe a voice note. Returns None on any recoverable failure."""
    try:
        media = await fetcher.fetch(attachment.url)
        transcript = await provider.transcribe_audio(
            audio_bytes=media.content,
            filename=AUDIO_FILENAME,
            mime_type=attachment.mime_type or media.mime_type,
        )
    except (MediaError, TranscriptionError) as e:
        logger.warning(
            f"Audio could not be transcribed: {e}",
            extra={"context": {"error_type": type(e).__name__}},
        )
        return None

    if not transcript:
        logger.warning("Audio transcription is empty")
        return None

    logger.info("Audio transcribed", extra={"context": {"transcript_len": len(transcript)}})
    return transcript


async def describe_attachment(
    attachment: Attachment,
    *,
    fetcher: MediaFetcher,
    provider: LLMProvider,
) -> Optional[str]:
    try:
        media = await fetcher.fetch(attachment.url)
    except MediaError as e:
        logger.warning(f"Image could not be downloaded: {e}")
        return None
    return await provider.describe_image(media.to_data_url())


async def fetch_inline_image(attachment: Attachment, *, fetcher: MediaFetcher) -> Optional[str]:
    try:
        media = await fetcher.fetch(attachment.url)
    except MediaError as e:
        logger.warning(f"Image could not be downloaded: {e}")
        return None
    return media.to_data_url()
