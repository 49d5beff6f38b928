"""
Mock Image Storage

Keeps uploads in memory. Used by tests and demos where writing to disk
is unwanted. Can simulate storage failures to exercise the
keep-previous-image fallback.
"""

import logging
import random
from typing import Optional

from qrmenu.services.storage.base import BaseImageStorage

logger = logging.getLogger(__name__)


class MockImageStorage(BaseImageStorage):
    """
    In-memory image storage.

    Attributes:
        failure_rate: Probability of a simulated storage failure (0.0-1.0)
        objects: Stored bytes keyed by object name
    """

    def __init__(self, bucket: str, public_base_url: str, failure_rate: float = 0.0):
        super().__init__(bucket=bucket, public_base_url=public_base_url)
        self.failure_rate = failure_rate
        self.objects: dict[str, bytes] = {}
        logger.info(f"MockImageStorage initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _store(self, object_name: str, content: bytes, content_type: Optional[str]) -> None:
        if random.random() < self.failure_rate:
            raise OSError("Simulated storage failure")
        self.objects[object_name] = content
