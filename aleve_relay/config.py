from typing import List, Literal

from pydantic_settings import BaseSettings

REQUIRED_SETTINGS = ("openai_api_key", "twilio_account_sid", "twilio_auth_token")


class Settings(BaseSettings):
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    completion_model: str = "gpt-4o"
    transcription_model: str = "whisper-1"
    transcription_language: str = "es"

    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_api_base: str = "https://api.twilio.com/2010-04-01"

    # "ignore" drops image messages with an empty reply; "describe" and "inline" enable vision.
    image_policy: Literal["ignore", "describe", "inline"] = "ignore"
    reply_mode: Literal["twiml", "api"] = "twiml"
    public_base_url: str = ""

    media_timeout_seconds: float = 30.0
    transcription_timeout_seconds: float = 30.0
    completion_timeout_seconds: float = 30.0
    vision_timeout_seconds: float = 20.0

    log_level: str = "INFO"
    debug: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"

    def missing_required(self) -> List[str]:
        return [name for name in REQUIRED_SETTINGS if not getattr(self, name)]

    @property
    def status_callback_url(self) -> str | None:
        if not self.public_base_url:
            return None
        return f"{self.public_base_url.rstrip('/')}/status"


settings = Settings()
