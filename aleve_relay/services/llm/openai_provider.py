import copy
from typing import List, Optional

import httpx

from aleve_relay.logging_config import get_logger
from aleve_relay.services.llm.base import CompletionError, LLMProvider, LLMResponse, TranscriptionError

logger = get_logger("llm.openai")

COMPLETION_ERROR_MESSAGE = "Hubo un problema procesando tu mensaje. ¿Podrías intentarlo de nuevo?"
TRANSCRIPTION_ERROR_MESSAGE = "No pude escuchar el audio correctamente. ¿Podrías escribirme?"
VISION_PROMPT = "Describe brevemente esta imagen en español en máximo 50 palabras. Sé conciso."
VISION_FALLBACK_DESCRIPTION = "una imagen (no pude analizarla en detalle)"
VISION_EMPTY_DESCRIPTION = "una imagen"


def with_inline_image(messages: List[dict], image_url: str) -> List[dict]:
    """Return a copy of messages whose last user entry carries a low-detail image."""
    result = copy.deepcopy(messages)
    for entry in reversed(result):
        if entry.get("role") != "user":
            continue
        entry["content"] = [
            {"type": "text", "text": entry.get("content") or ""},
            {"type": "image_url", "image_url": {"url": image_url, "detail": "low"}},
        ]
        break
    return result


def _extract_content(data: dict) -> str:
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""


class OpenAIProvider(LLMProvider):
    """OpenAI API provider."""

    def __init__(
        self,
        api_key: str,
        default_model: str = "gpt-4o",
        base_url: str = "https://api.openai.com/v1",
        transcription_model: str = "whisper-1",
        transcription_language: Optional[str] = "es",
        completion_timeout: float = 30.0,
        transcription_timeout: float = 30.0,
        vision_timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.default_model = default_model
        self.base_url = base_url.rstrip("/")
        self.transcription_model = transcription_model
        self.transcription_language = transcription_language
        self.completion_timeout = completion_timeout
        self.transcription_timeout = transcription_timeout
        self.vision_timeout = vision_timeout
        self._transport = transport

    @property
    def chat_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    @property
    def audio_url(self) -> str:
        return f"{self.base_url}/audio/transcriptions"

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def _post_chat(self, payload: dict, timeout: float) -> dict:
        async with self._client(timeout) as client:
            response = await client.post(
                self.chat_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
            )

        logger.debug(f"OpenAI response status: {response.status_code}")
        if response.status_code != 200:
            logger.error(f"OpenAI error: {response.status_code} - {response.text}")
            raise httpx.HTTPStatusError(
                f"OpenAI API error: {response.status_code}",
                request=response.request,
                response=response,
            )
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("OpenAI response is not a JSON object")
        return data

    async def generate(
        self,
        messages: List[dict],
        image_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> LLMResponse:
        """Generate response from OpenAI. Raises CompletionError on any failure."""
        model = model or self.default_model
        if image_url:
            messages = with_inline_image(messages, image_url)

        payload = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        logger.debug(
            f"OpenAI request: model={model}, messages_count={len(messages)}, with_image={bool(image_url)}"
        )

        try:
            data = await self._post_chat(payload, self.completion_timeout)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Completion failed: {e}")
            raise CompletionError(COMPLETION_ERROR_MESSAGE) from e

        content = _extract_content(data)
        logger.debug(f"OpenAI content: {content[:100] if content else 'EMPTY'}")
        return LLMResponse(content=content, model=data.get("model", model), usage=data.get("usage"))

    async def transcribe_audio(
        self,
        *,
        audio_bytes: bytes,
        filename: str = "audio.ogg",
        mime_type: Optional[str] = None,
    ) -> str:
        """Transcribe audio with Whisper using the configured language hint."""
        if not audio_bytes:
            raise TranscriptionError("audio_bytes is empty")

        files = {"file": (filename, audio_bytes, mime_type or "audio/ogg")}
        data = {"model": self.transcription_model}
        if self.transcription_language:
            data["language"] = self.transcription_language

        try:
            async with self._client(self.transcription_timeout) as client:
                response = await client.post(
                    self.audio_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    files=files,
                    data=data,
                )
        except httpx.HTTPError as e:
            logger.error(f"OpenAI transcription request failed: {e}")
            raise TranscriptionError(TRANSCRIPTION_ERROR_MESSAGE) from e

        logger.debug(f"OpenAI transcription status: {response.status_code}")
        if response.status_code != 200:
            logger.error(f"OpenAI transcription error: {response.status_code} - {response.text}")
            raise TranscriptionError(TRANSCRIPTION_ERROR_MESSAGE)

        try:
            body = response.json()
        except ValueError as e:
            raise TranscriptionError(TRANSCRIPTION_ERROR_MESSAGE) from e
        transcript = body.get("text") if isinstance(body, dict) else None
        if not isinstance(transcript, str):
            raise TranscriptionError(TRANSCRIPTION_ERROR_MESSAGE)

        transcript = transcript.strip()
        if not transcript:
            logger.warning("OpenAI transcription returned empty text")
        return transcript

    async def describe_image(self, image_url: str) -> str:
        """Short description of an image; degrades to a placeholder instead of raising."""
        payload = {
            "model": self.default_model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": VISION_PROMPT},
                        {"type": "image_url", "image_url": {"url": image_url, "detail": "low"}},
                    ],
                }
            ],
            "max_tokens": 150,
        }
        try:
            data = await self._post_chat(payload, self.vision_timeout)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Image description failed: {e}")
            return VISION_FALLBACK_DESCRIPTION

        return _extract_content(data) or VISION_EMPTY_DESCRIPTION
