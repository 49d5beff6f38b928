"""
State Storage Factory

Returns MemoryStateStorage or RedisStateStorage based on ENV_MODE.

Usage:
    from qrmenu.services.state import get_state_storage

    storage = get_state_storage()
    await storage.set("key", {"a": 1}, ttl=60)

Environment Switching:
    - ENV_MODE=development → MemoryStateStorage
    - ENV_MODE=staging/production → RedisStateStorage
"""

import logging
from functools import lru_cache

from qrmenu.core.config import get_settings
from qrmenu.services.state.base import BaseStateStorage
from qrmenu.services.state.memory import MemoryStateStorage
from qrmenu.services.state.redis import RedisStateStorage

logger = logging.getLogger(__name__)


@lru_cache()
def get_state_storage() -> BaseStateStorage:
    """Get the configured state storage (cached singleton)."""
    settings = get_settings()

    if settings.is_development:
        logger.info("State Storage: Using MemoryStateStorage (development mode)")
        return MemoryStateStorage()

    logger.info(f"State Storage: Using RedisStateStorage ({settings.env_mode.value} mode)")
    return RedisStateStorage()


def reset_state_storage() -> None:
    """Clear the cached storage instance."""
    get_state_storage.cache_clear()
    logger.debug("State storage cache cleared")


__all__ = [
    "get_state_storage",
    "reset_state_storage",
    "BaseStateStorage",
    "MemoryStateStorage",
    "RedisStateStorage",
]
