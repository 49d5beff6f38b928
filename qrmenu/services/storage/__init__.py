"""
Image Storage Factory

Returns the image storage backend selected by IMAGE_STORAGE_BACKEND.

Usage:
    from qrmenu.services.storage import get_image_storage

    storage = get_image_storage()
    result = await storage.upload("photo.jpg", data, "image/jpeg")
    if result.success:
        image_url = result.value
"""

import logging
from functools import lru_cache

from qrmenu.core.config import get_settings
from qrmenu.services.storage.base import BaseImageStorage, build_object_name
from qrmenu.services.storage.local import LocalImageStorage
from qrmenu.services.storage.mock import MockImageStorage

logger = logging.getLogger(__name__)


@lru_cache()
def get_image_storage() -> BaseImageStorage:
    """Get the configured image storage (cached singleton)."""
    settings = get_settings()

    if settings.image_storage_backend == "memory":
        logger.info("Image Storage: Using MockImageStorage")
        return MockImageStorage(
            bucket=settings.image_bucket,
            public_base_url=settings.public_media_url,
        )

    logger.info(f"Image Storage: Using LocalImageStorage ({settings.media_directory})")
    return LocalImageStorage(
        media_directory=settings.media_directory,
        bucket=settings.image_bucket,
        public_base_url=settings.public_media_url,
    )


def reset_image_storage() -> None:
    """Clear the cached storage instance."""
    get_image_storage.cache_clear()


__all__ = [
    "get_image_storage",
    "reset_image_storage",
    "build_object_name",
    "BaseImageStorage",
    "LocalImageStorage",
    "MockImageStorage",
]
