"""
Redis State Storage

Stores visitor state as JSON strings in Redis so it survives restarts
and is shared by every API worker. Used in staging and production.
"""

import json
import logging
from typing import Any, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from qrmenu.core.config import get_settings
from qrmenu.services.state.base import BaseStateStorage

logger = logging.getLogger(__name__)


class RedisStateStorage(BaseStateStorage):
    """Redis-backed state storage."""

    def __init__(self, redis_url: Optional[str] = None, client: Optional[aioredis.Redis] = None):
        settings = get_settings()
        self.redis_url = redis_url or settings.redis_url
        self.client = client or aioredis.from_url(
            self.redis_url,
            decode_responses=True,
            socket_timeout=2,
        )
        logger.info("RedisStateStorage initialized")

    @property
    def provider_name(self) -> str:
        return "redis"

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        raw = await self.client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding unreadable state at {key}: {e}")
            return None

    async def set(self, key: str, value: dict[str, Any], ttl: Optional[int] = None) -> None:
        await self.client.set(key, json.dumps(value), ex=ttl)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def health_check(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.aclose()
