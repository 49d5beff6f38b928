"""
State Storage Abstract Base Class

Durable key/value storage for visitor state (cart, table number, order
history) and admin sessions. Values are JSON-compatible dictionaries.

Design Pattern: Strategy Pattern
    - MemoryStateStorage for development and tests
    - RedisStateStorage for staging and production
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class BaseStateStorage(ABC):
    """Interface every state storage backend implements."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the backend name (e.g. "memory", "redis")."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[dict[str, Any]]:
        """
        Load a value.

        Returns:
            The stored dictionary, or None if missing or expired
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: dict[str, Any], ttl: Optional[int] = None) -> None:
        """
        Store a value, replacing any previous one.

        Args:
            key: Storage key
            value: JSON-compatible dictionary
            ttl: Expiry in seconds (None = keep until deleted)
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify the backend is reachable.

        Returns:
            bool: True if operational
        """
        pass

    async def close(self) -> None:
        """Release connections. Optional for backends."""
        return None
