"""
Local Filesystem Image Storage

Writes uploads to <media_directory>/<bucket>/ which the application
serves as static files under media_url_prefix.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from qrmenu.services.storage.base import BaseImageStorage

logger = logging.getLogger(__name__)


class LocalImageStorage(BaseImageStorage):

    def __init__(self, media_directory: str, bucket: str, public_base_url: str):
        super().__init__(bucket=bucket, public_base_url=public_base_url)
        self.root = Path(media_directory)
        self.directory = self.root / bucket
        logger.info(f"LocalImageStorage initialized (directory={self.directory})")

    @property
    def provider_name(self) -> str:
        return "local"

    def _write(self, object_name: str, content: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / object_name).write_bytes(content)

    async def _store(self, object_name: str, content: bytes, content_type: Optional[str]) -> None:
        await asyncio.to_thread(self._write, object_name, content)

    async def health_check(self) -> bool:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Media directory unavailable: {e}")
            return False
        return True
