from typing import Optional

import httpx

from aleve_relay.logging_config import get_logger
from aleve_relay.schemas.inbound import FetchedMedia

logger = get_logger("media_service")

DEFAULT_MEDIA_TIMEOUT_SECONDS = 30.0


class MediaError(Exception):
    """Base error for attachment retrieval."""


class MediaConfigError(MediaError):
    """Raised before any network call when Twilio credentials are missing."""


class MediaDownloadError(MediaError):
    pass


class MediaFetcher:
    """Download Twilio-hosted attachments into memory using basic auth."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        timeout_seconds: float = DEFAULT_MEDIA_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token)

    async def fetch(self, url: str) -> FetchedMedia:
        if not self.is_configured:
            raise MediaConfigError("Twilio credentials are not configured")
        if not url:
            raise MediaDownloadError("Attachment has no URL")

        logger.info("Downloading media", extra={"context": {"url": url}})
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url, auth=(self.account_sid, self.auth_token))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Media download failed: {e}", extra={"context": {"url": url}})
            raise MediaDownloadError(f"Media download failed: {e}") from e

        if response.status_code != 200:
            logger.error(
                "Media download returned non-200",
                extra={"context": {"url": url, "status_code": response.status_code}},
            )
            raise MediaDownloadError(f"Media download error: {response.status_code}")

        content = response.content
        mime_type = (response.headers.get("content-type") or "application/octet-stream").split(";")[0].strip()
        logger.info("Media downloaded", extra={"context": {"bytes": len(content), "mime_type": mime_type}})
        return FetchedMedia(content=content, mime_type=mime_type)
