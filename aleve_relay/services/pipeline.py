"""Reply pipeline: normalize, route by modality, compose, complete, finalize."""

from enum import Enum
from typing import Mapping, Optional

from aleve_relay.config import Settings
from aleve_relay.logging_config import LoggerAdapter, get_logger
from aleve_relay.schemas.inbound import InboundMessage, Modality
from aleve_relay.services.ai_service import (
    COMPLETION_MAX_TOKENS,
    COMPLETION_TEMPERATURE,
    FALLBACK_REPLY,
    GREETING_REPLY,
    audio_context,
    build_user_content,
    compose_messages,
    describe_attachment,
    fetch_inline_image,
    finalize_reply,
    image_context,
    transcribe_attachment,
)
from aleve_relay.services.llm import CompletionError, LLMProvider, OpenAIProvider
from aleve_relay.services.media_service import MediaFetcher
from aleve_relay.services.message_parser import parse_incoming_message

logger = get_logger("pipeline")


class ImagePolicy(str, Enum):
    IGNORE = "ignore"
    DESCRIBE = "describe"
    INLINE = "inline"


class Route(str, Enum):
    SUPPRESS = "suppress"
    AUDIO = "audio"
    IMAGE = "image"
    TEXT = "text"


def route_message(message: InboundMessage, image_policy: ImagePolicy = ImagePolicy.IGNORE) -> Route:
    """Pick exactly one processing path. Audio wins over image, image over text."""
    if message.has_image and image_policy == ImagePolicy.IGNORE:
        return Route.SUPPRESS

    if message.has_audio:
        return Route.AUDIO
    if message.has_image:
        return Route.IMAGE
    # Video and unclassified attachments are answered from the text alone.
    return Route.TEXT


class ReplyPipeline:
    def __init__(
        self,
        provider: LLMProvider,
        fetcher: MediaFetcher,
        image_policy: ImagePolicy = ImagePolicy.IGNORE,
    ):
        self.provider = provider
        self.fetcher = fetcher
        self.image_policy = ImagePolicy(image_policy)

    async def run(self, form: Mapping[str, str]) -> str:
        """
        Produce the reply for one webhook invocation.

        Never raises. Returns an empty string only when an image is
        deliberately ignored; every other path yields a readable reply.
        """
        try:
            parsed = parse_incoming_message(form)
            if not parsed.ok:
                logger.warning(
                    "Invalid webhook payload, sending greeting",
                    extra={"context": {"error_code": parsed.error_code}},
                )
                return GREETING_REPLY
            return await self.reply_to(parsed.value)
        except CompletionError as e:
            logger.error(f"Completion failed, sending fallback reply: {e}")
            return FALLBACK_REPLY
        except Exception as e:
            logger.error(f"Unexpected pipeline error: {e}", exc_info=True)
            return FALLBACK_REPLY

    async def reply_to(self, message: InboundMessage) -> str:
        log = LoggerAdapter(logger, {"message_sid": message.message_sid, "num_media": len(message.attachments)})
        route = route_message(message, self.image_policy)
        log.info("Message routed", context={"route": route.value})

        if route == Route.SUPPRESS:
            log.info("Image attachment ignored, replying with empty body")
            return ""

        media_context: Optional[str] = None
        image_url: Optional[str] = None

        if route == Route.AUDIO:
            attachment = message.first_attachment(Modality.AUDIO)
            transcript = await transcribe_attachment(attachment, fetcher=self.fetcher, provider=self.provider)
            media_context = audio_context(transcript)
        elif route == Route.IMAGE:
            attachment = message.first_attachment(Modality.IMAGE)
            if self.image_policy == ImagePolicy.DESCRIBE:
                description = await describe_attachment(attachment, fetcher=self.fetcher, provider=self.provider)
                media_context = image_context(description)
            else:
                image_url = await fetch_inline_image(attachment, fetcher=self.fetcher)
                media_context = image_context()

        messages = compose_messages(build_user_content(message.body, media_context))
        response = await self.provider.generate(
            messages,
            image_url=image_url,
            temperature=COMPLETION_TEMPERATURE,
            max_tokens=COMPLETION_MAX_TOKENS,
        )
        log.info("Completion received", context={"reply_len": len(response.content), "model": response.model})
        return finalize_reply(response.content)


def build_pipeline(settings: Settings) -> ReplyPipeline:
    provider = OpenAIProvider(
        api_key=settings.openai_api_key,
        default_model=settings.completion_model,
        base_url=settings.openai_base_url,
        transcription_model=settings.transcription_model,
        transcription_language=settings.transcription_language,
        completion_timeout=settings.completion_timeout_seconds,
        transcription_timeout=settings.transcription_timeout_seconds,
        vision_timeout=settings.vision_timeout_seconds,
    )
    fetcher = MediaFetcher(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        timeout_seconds=settings.media_timeout_seconds,
    )
    return ReplyPipeline(provider=provider, fetcher=fetcher, image_policy=ImagePolicy(settings.image_policy))
