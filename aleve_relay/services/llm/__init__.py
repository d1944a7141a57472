from aleve_relay.services.llm.base import CompletionError, LLMProvider, LLMResponse, TranscriptionError
from aleve_relay.services.llm.openai_provider import OpenAIProvider

__all__ = ["CompletionError", "LLMProvider", "LLMResponse", "OpenAIProvider", "TranscriptionError"]
