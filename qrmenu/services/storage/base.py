"""
Image Storage Abstract Base Class

Defines the interface for storing uploaded menu images and handing back
their public address. Both the filesystem and the in-memory backends
derive object names the same way, so callers never pick names.
"""

import logging
import secrets
import time
from abc import ABC, abstractmethod
from pathlib import PurePath
from typing import Optional

from qrmenu.services.result import ServiceResult

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "bin"


def build_object_name(original_filename: Optional[str]) -> str:
    """
    Derive a collision-resistant object name for an upload.

    Random token + millisecond timestamp + the original extension:
        "photo.JPG" -> "9f3a0c1b4e27_1717000000000.jpg"
    """
    suffix = PurePath(original_filename or "").suffix.lstrip(".").lower()
    extension = suffix or DEFAULT_EXTENSION
    token = secrets.token_hex(6)
    return f"{token}_{int(time.time() * 1000)}.{extension}"


class BaseImageStorage(ABC):
    """
    Abstract base class for image storage backends.

    upload() never raises for storage problems: failures come back as a
    failed ServiceResult so the caller can keep the previous image.
    """

    def __init__(self, bucket: str, public_base_url: str):
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    def public_url(self, object_name: str) -> str:
        return f"{self.public_base_url}/{object_name}"

    @abstractmethod
    async def _store(self, object_name: str, content: bytes, content_type: Optional[str]) -> None:
        """Persist the bytes under object_name. May raise OSError."""
        pass

    async def upload(
        self,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
    ) -> ServiceResult[str]:
        """
        Store an uploaded image.

        Args:
            filename: Original client filename (only the extension is kept)
            content: File bytes
            content_type: MIME type reported by the client

        Returns:
            ServiceResult carrying the public URL of the stored image
        """
        if not content:
            return ServiceResult.fail("Empty upload", code="invalid")

        object_name = build_object_name(filename)
        try:
            await self._store(object_name, content, content_type)
        except OSError as e:
            logger.error(f"Error uploading image {filename!r} to {self.bucket}: {e}")
            return ServiceResult.fail(f"Image upload failed: {e}")

        url = self.public_url(object_name)
        logger.info(f"Image stored: {url} ({len(content)} bytes)")
        return ServiceResult.ok(url)

    async def health_check(self) -> bool:
        return True
