"""
In-Memory State Storage

Keeps visitor state in a process-local dictionary. Used in development
mode and tests; nothing survives a restart and nothing is shared between
worker processes.
"""

import copy
import logging
import time
from typing import Any, Optional

from qrmenu.services.state.base import BaseStateStorage

logger = logging.getLogger(__name__)


class MemoryStateStorage(BaseStateStorage):
    """Dictionary-backed storage with per-key expiry."""

    def __init__(self):
        self._data: dict[str, tuple[dict[str, Any], Optional[float]]] = {}
        logger.info("MemoryStateStorage initialized")

    @property
    def provider_name(self) -> str:
        return "memory"

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= time.monotonic():
            del self._data[key]
            return None
        # Callers must not mutate stored state through the returned dict
        return copy.deepcopy(value)

    async def set(self, key: str, value: dict[str, Any], ttl: Optional[int] = None) -> None:
        expires_at = time.monotonic() + ttl if ttl else None
        self._data[key] = (copy.deepcopy(value), expires_at)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def health_check(self) -> bool:
        return True

    def clear(self) -> None:
        self._data.clear()
