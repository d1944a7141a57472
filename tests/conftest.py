from unittest.mock import AsyncMock, Mock

import pytest

from aleve_relay.schemas.inbound import FetchedMedia
from aleve_relay.services.llm import LLMResponse
from aleve_relay.services.pipeline import ImagePolicy, ReplyPipeline


@pytest.fixture
def mock_env(monkeypatch):
    """Set test environment variables."""
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "ACtest")
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "test-token")


@pytest.fixture
def text_form():
    return {
        "MessageSid": "SM123",
        "From": "whatsapp:+5215512345678",
        "To": "whatsapp:+14155238886",
        "Body": "Hola",
        "ProfileName": "Ana",
        "WaId": "5215512345678",
        "NumMedia": "0",
    }


@pytest.fixture
def audio_form(text_form):
    return {
        **text_form,
        "Body": "",
        "NumMedia": "1",
        "MediaUrl0": "https://api.twilio.com/2010-04-01/Accounts/AC1/Messages/MM1/Media/ME1",
        "MediaContentType0": "audio/ogg",
    }


@pytest.fixture
def image_form(text_form):
    return {
        **text_form,
        "Body": "Mira esto",
        "NumMedia": "1",
        "MediaUrl0": "https://api.twilio.com/2010-04-01/Accounts/AC1/Messages/MM2/Media/ME2",
        "MediaContentType0": "image/jpeg",
    }


@pytest.fixture
def provider():
    """LLM provider double with async methods."""
    fake = Mock()
    fake.generate = AsyncMock(return_value=LLMResponse(content="¡Hola! Soy Alex 😊", model="gpt-4o"))
    fake.transcribe_audio = AsyncMock(return_value="Quiero unirme a la agencia")
    fake.describe_image = AsyncMock(return_value="una persona haciendo un live")
    return fake


@pytest.fixture
def fetcher():
    fake = Mock()
    fake.fetch = AsyncMock(return_value=FetchedMedia(content=b"OggS-audio", mime_type="audio/ogg"))
    return fake


@pytest.fixture
def pipeline(provider, fetcher):
    return ReplyPipeline(provider=provider, fetcher=fetcher, image_policy=ImagePolicy.IGNORE)
