"""ImageKit upload adapter.

Talks to the ImageKit upload endpoint over HTTP: raw bytes in, a public URL,
thumbnail URL and file id out.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import asdict, dataclass
from typing import Optional

import httpx

from marketplace.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ImageUploadError(Exception):
    """The image host rejected an upload or answered with something unusable."""


@dataclass(frozen=True)
class UploadedImage:
    url: str
    thumbnail: str
    id: str

    def to_dict(self) -> dict:
        return asdict(self)


class ImageKitClient:
    def __init__(
        self,
        *,
        private_key: str,
        upload_url: str,
        folder: str = "/products",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._upload_url = upload_url
        self._folder = folder
        self._client = httpx.AsyncClient(
            auth=(private_key, ""),
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ImageKitClient":
        settings = settings or get_settings()
        if not settings.imagekit_private_key:
            logger.warning("IMAGEKIT_PRIVATE_KEY not configured; image uploads will be rejected")
        return cls(
            private_key=settings.imagekit_private_key,
            upload_url=settings.imagekit_upload_url,
            folder=settings.imagekit_folder,
            timeout=settings.imagekit_timeout_seconds,
            transport=transport,
        )

    async def upload(self, content: bytes, *, filename: Optional[str] = None, folder: Optional[str] = None) -> UploadedImage:
        name = uuid.uuid4().hex
        files = {"file": (filename or name, content)}
        data = {"fileName": name, "folder": folder or self._folder}
        try:
            response = await self._client.post(self._upload_url, data=data, files=files)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise ImageUploadError(f"upload failed: {exc}") from exc
        except ValueError as exc:
            raise ImageUploadError("image host returned invalid JSON") from exc
        url = body.get("url")
        file_id = body.get("fileId")
        if not url or not file_id:
            raise ImageUploadError("image host response missing url or fileId")
        return UploadedImage(url=url, thumbnail=body.get("thumbnailUrl") or url, id=file_id)

    async def aclose(self) -> None:
        await self._client.aclose()
