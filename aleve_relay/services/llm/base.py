from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class LLMResponse:
    content: str
    model: str
    usage: Optional[dict] = None


class CompletionError(Exception):
    """Completion call failed; the message is safe to show to the sender."""


class TranscriptionError(Exception):
    pass


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def generate(
        self,
        messages: List[dict],
        image_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> LLMResponse:
        """Generate a chat completion, optionally with one inline image."""
        pass

    @abstractmethod
    async def transcribe_audio(self, *, audio_bytes: bytes, filename: str, mime_type: Optional[str] = None) -> str:
        pass

    @abstractmethod
    async def describe_image(self, image_url: str) -> str:
        pass
