# bookmarket/images.py
"""Imgur upload client."""
import asyncio
import base64
from dataclasses import dataclass
from typing import Sequence

import httpx

from .exceptions import UpstreamFailure, ValidationError
from .utils import logger

ALLOWED_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")
MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB


@dataclass
class UploadedImage:
    url: str
    delete_hash: str


def check_image(content_type: str | None, size: int) -> None:
    """Reject files the image host should never see."""
    if content_type not in ALLOWED_TYPES:
        raise ValidationError("Invalid file type. Only JPEG, PNG, WebP, and GIF allowed")
    if size > MAX_IMAGE_BYTES:
        raise ValidationError("File too large. Maximum size is 5MB")
    if size == 0:
        raise ValidationError("No file provided")


class ImgurClient:
    """Client for anonymous image uploads via the Imgur API."""

    def __init__(self, client_id: str, base_url: str = "https://api.imgur.com/3",
                 transport: httpx.AsyncBaseTransport | None = None):
        self.client_id = client_id
        self.base_url = base_url
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Authorization": f"Client-ID {self.client_id}"},
                timeout=30.0,
                transport=self._transport,
            )
        return self._client

    async def upload(self, content: bytes) -> UploadedImage:
        """Upload one image.

        Args:
            content: Raw image bytes

        Returns:
            Public URL and the deletion token Imgur hands back
        """
        client = self._get_client()
        payload = {
            "image": base64.b64encode(content).decode("ascii"),
            "type": "base64",
        }
        try:
            response = await client.post("/image", json=payload)
            response.raise_for_status()
            data = response.json()["data"]
            return UploadedImage(url=data["link"], delete_hash=data["deletehash"])
        except httpx.HTTPError as e:
            logger.error("Image upload failed: %s", e)
            raise UpstreamFailure("Upload failed") from e
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Unexpected image host response: %s", e)
            raise UpstreamFailure("Upload failed") from e

    async def upload_all(self, contents: Sequence[bytes]) -> list[UploadedImage]:
        """Upload concurrently; any failure fails the whole batch.

        Images that did upload before the failure are left on the host.
        """
        return list(await asyncio.gather(*(self.upload(c) for c in contents)))

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
