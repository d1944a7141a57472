from urllib.parse import parse_qs

import httpx
import pytest

from aleve_relay.services.twilio_service import TwilioMessenger, build_twiml_reply


class TestBuildTwimlReply:
    def test_reply_is_wrapped_in_message(self):
        xml = build_twiml_reply("¡Hola! 👋")

        assert "<Response><Message>¡Hola! 👋</Message></Response>" in xml

    def test_special_characters_are_escaped(self):
        xml = build_twiml_reply("5 < 6 & 7")

        assert "5 &lt; 6 &amp; 7" in xml

    def test_empty_reply_has_no_message(self):
        xml = build_twiml_reply("")

        assert "<Message" not in xml
        assert "<Response" in xml


class TestTwilioMessenger:
    @pytest.mark.asyncio
    async def test_sends_message_with_status_callback(self):
        captured = {}

        def handler(request):
            captured["url"] = str(request.url)
            captured["form"] = parse_qs(request.content.decode())
            return httpx.Response(201, json={"sid": "SM999", "status": "queued"})

        messenger = TwilioMessenger(
            account_sid="AC1",
            auth_token="tok",
            status_callback_url="https://relay.example.com/status",
            transport=httpx.MockTransport(handler),
        )

        result = await messenger.send_message(to="whatsapp:+1", from_="whatsapp:+2", body="Hola")

        assert result.success is True
        assert result.message_sid == "SM999"
        assert result.status == "queued"
        assert captured["url"] == "https://api.twilio.com/2010-04-01/Accounts/AC1/Messages.json"
        assert captured["form"]["To"] == ["whatsapp:+1"]
        assert captured["form"]["From"] == ["whatsapp:+2"]
        assert captured["form"]["StatusCallback"] == ["https://relay.example.com/status"]

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        messenger = TwilioMessenger(account_sid="", auth_token="")

        result = await messenger.send_message(to="whatsapp:+1", from_="whatsapp:+2", body="Hola")

        assert result.success is False
        assert result.error == "missing_credentials"

    @pytest.mark.asyncio
    async def test_api_error_is_reported(self):
        messenger = TwilioMessenger(
            account_sid="AC1",
            auth_token="tok",
            transport=httpx.MockTransport(lambda request: httpx.Response(400, json={"code": 21211})),
        )

        result = await messenger.send_message(to="whatsapp:+1", from_="whatsapp:+2", body="Hola")

        assert result.success is False
        assert result.error == "twilio_status_400"
