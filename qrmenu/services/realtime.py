"""
Realtime Order Notifications

In-process publish/subscribe for changes to the orders table. The data
access layer publishes one OrderEvent per insert, update or delete; the
admin dashboard feed subscribes and reloads its order list on each one.

Plain callbacks run inline; coroutine callbacks are scheduled as tasks
so the write that published the event never waits on a subscriber.
There is no debouncing: a burst of changes produces a burst of
callbacks.
"""

import asyncio
import enum
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)


class OrderEventType(str, enum.Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class OrderEvent:
    """A single change to an order row."""
    type: OrderEventType
    order_id: str
    record: Optional[dict[str, Any]] = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "order_id": self.order_id,
            "record": self.record,
            "occurred_at": self.occurred_at.isoformat(),
        }


OrderEventCallback = Callable[[OrderEvent], Union[None, Awaitable[None]]]


class Subscription:
    """Handle returned by subscribe(); call unsubscribe() to stop receiving events."""

    def __init__(self, registry: list, callback: Callable):
        self._registry = registry
        self._callback = callback

    @property
    def active(self) -> bool:
        return self._callback in self._registry

    def unsubscribe(self) -> None:
        if self._callback in self._registry:
            self._registry.remove(self._callback)


class OrderEventBus:
    """
    Fan-out of order change events to subscribers.

    Callbacks may be plain functions or coroutines. A callback that
    raises is logged and skipped; the remaining subscribers still run.
    Coroutine callbacks run in the background; drain() waits for them.
    """

    def __init__(self):
        self._subscribers: list[OrderEventCallback] = []
        self._pending: set[asyncio.Future] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def subscribe(self, callback: OrderEventCallback) -> Subscription:
        self._subscribers.append(callback)
        logger.debug(f"Order subscriber added ({self.subscriber_count} active)")
        return Subscription(self._subscribers, callback)

    async def publish(self, event: OrderEvent) -> None:
        logger.debug(f"Order event {event.type.value} for {event.order_id}")
        for callback in list(self._subscribers):
            try:
                result = callback(event)
            except Exception:
                logger.exception(f"Order subscriber failed on {event.type.value} {event.order_id}")
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(lambda t, e=event: self._finished(t, e))

    def _finished(self, task: asyncio.Future, event: OrderEvent) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Order subscriber failed on {event.type.value} {event.order_id}: {error}",
                exc_info=error,
            )

    async def drain(self) -> None:
        """Wait until every scheduled subscriber call has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


@lru_cache()
def get_order_event_bus() -> OrderEventBus:
    """Process-wide order event bus."""
    return OrderEventBus()


def reset_order_event_bus() -> None:
    get_order_event_bus.cache_clear()
