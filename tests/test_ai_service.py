from unittest.mock import AsyncMock

import pytest

from aleve_relay.schemas.inbound import Attachment
from aleve_relay.services.ai_service import (
    AUDIO_FAILURE_CONTENT,
    DEFAULT_USER_CONTENT,
    FALLBACK_REPLY,
    MAX_REPLY_CHARS,
    audio_context,
    build_user_content,
    compose_messages,
    finalize_reply,
    image_context,
    transcribe_attachment,
)
from aleve_relay.services.llm import TranscriptionError
from aleve_relay.services.media_service import MediaConfigError, MediaDownloadError
from aleve_relay.services.persona import AUDIO_CONTEXT_PREFIX, IMAGE_CONTEXT_PREFIX, SYSTEM_PROMPT

AUDIO = Attachment(url="https://api.twilio.com/media/ME1", mime_type="audio/ogg")


class TestBuildUserContent:
    def test_plain_text_is_unmodified(self):
        assert build_user_content("Hola") == "Hola"

    def test_empty_content_uses_default(self):
        assert build_user_content("") == DEFAULT_USER_CONTENT

    def test_surrounding_whitespace_is_preserved(self):
        assert build_user_content("  Hola\n") == "  Hola\n"

    def test_whitespace_only_uses_default(self):
        assert build_user_content("  \n") == DEFAULT_USER_CONTENT

    def test_media_context_only(self):
        assert build_user_content("", "contexto") == "contexto"

    def test_typed_text_follows_on_new_line(self):
        assert build_user_content("¿Cuánto gano?", "contexto") == "contexto\n¿Cuánto gano?"


class TestAudioContext:
    def test_transcript_is_prefixed_verbatim(self):
        assert audio_context("Quiero unirme") == AUDIO_CONTEXT_PREFIX + "Quiero unirme"

    def test_missing_transcript_uses_canned_text(self):
        assert audio_context(None) == AUDIO_FAILURE_CONTENT

    def test_canned_text_differs_from_fallback_reply(self):
        assert AUDIO_FAILURE_CONTENT != FALLBACK_REPLY


class TestImageContext:
    def test_with_description(self):
        assert image_context("un gato") == f"{IMAGE_CONTEXT_PREFIX}Descripción: un gato"

    def test_without_description(self):
        assert image_context() == IMAGE_CONTEXT_PREFIX.strip()


class TestComposeMessages:
    def test_system_then_single_user_entry(self):
        messages = compose_messages("Hola")

        assert messages == [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "Hola"},
        ]

    def test_never_sends_empty_user_content(self):
        assert compose_messages("")[1]["content"] == DEFAULT_USER_CONTENT


class TestFinalizeReply:
    def test_short_reply_passes_through(self):
        assert finalize_reply("¡Hola!") == "¡Hola!"

    def test_reply_at_limit_is_not_truncated(self):
        reply = "a" * MAX_REPLY_CHARS
        assert finalize_reply(reply) == reply

    def test_long_reply_is_truncated_with_ellipsis(self):
        reply = "".join(str(i % 10) for i in range(2000))

        result = finalize_reply(reply)

        assert len(result) == 1500
        assert result == reply[:1497] + "..."

    def test_empty_reply_uses_fallback(self):
        assert finalize_reply("") == FALLBACK_REPLY
        assert finalize_reply(None) == FALLBACK_REPLY
        assert finalize_reply("   ") == FALLBACK_REPLY


class TestTranscribeAttachment:
    @pytest.mark.asyncio
    async def test_returns_transcript(self, fetcher, provider):
        transcript = await transcribe_attachment(AUDIO, fetcher=fetcher, provider=provider)

        assert transcript == "Quiero unirme a la agencia"
        fetcher.fetch.assert_awaited_once_with(AUDIO.url)
        kwargs = provider.transcribe_audio.await_args.kwargs
        assert kwargs["audio_bytes"] == b"OggS-audio"
        assert kwargs["filename"] == "audio.ogg"

    @pytest.mark.asyncio
    async def test_transcription_error_is_recoverable(self, fetcher, provider):
        provider.transcribe_audio = AsyncMock(side_effect=TranscriptionError("timeout"))

        assert await transcribe_attachment(AUDIO, fetcher=fetcher, provider=provider) is None

    @pytest.mark.asyncio
    async def test_missing_credentials_are_recoverable(self, fetcher, provider):
        fetcher.fetch = AsyncMock(side_effect=MediaConfigError("no creds"))

        assert await transcribe_attachment(AUDIO, fetcher=fetcher, provider=provider) is None
        provider.transcribe_audio.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_download_error_is_recoverable(self, fetcher, provider):
        fetcher.fetch = AsyncMock(side_effect=MediaDownloadError("404"))

        assert await transcribe_attachment(AUDIO, fetcher=fetcher, provider=provider) is None

    @pytest.mark.asyncio
    async def test_empty_transcript_counts_as_failure(self, fetcher, provider):
        provider.transcribe_audio = AsyncMock(return_value="")

        assert await transcribe_attachment(AUDIO, fetcher=fetcher, provider=provider) is None
