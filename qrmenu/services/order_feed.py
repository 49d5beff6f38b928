"""
Admin Order Feed

Keeps one dashboard connection's order list current: a snapshot when it
starts, then a full reload of all orders after every order event. No
incremental merge is attempted; the list is small.

Events are only queued when they are published; run() works through
the queue on the connection's own task, so a slow dashboard never holds
up the request that changed the order.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from qrmenu.services.orders import get_orders
from qrmenu.services.realtime import OrderEvent, OrderEventBus, Subscription

logger = logging.getLogger(__name__)

Sender = Callable[[dict[str, Any]], Awaitable[None]]


class AdminOrderFeed:

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        bus: OrderEventBus,
        send: Sender,
    ):
        self.session_factory = session_factory
        self.bus = bus
        self.send = send
        self.reload_count = 0
        self._events: asyncio.Queue[OrderEvent] = asyncio.Queue()
        self._subscription: Optional[Subscription] = None

    @property
    def pending(self) -> int:
        return self._events.qsize()

    async def start(self) -> None:
        await self.reload(kind="snapshot")
        self._subscription = self.bus.subscribe(self._events.put_nowait)

    async def run(self) -> None:
        """Reload after each queued event, in order, until cancelled."""
        while True:
            event = await self._events.get()
            await self.reload(kind="orders", event=event)

    async def process_pending(self) -> int:
        """Reload for every event queued so far; returns how many were handled."""
        handled = 0
        while not self._events.empty():
            await self.reload(kind="orders", event=self._events.get_nowait())
            handled += 1
        return handled

    async def reload(self, kind: str = "orders", event: Optional[OrderEvent] = None) -> None:
        async with self.session_factory() as session:
            result = await get_orders(session)

        self.reload_count += 1
        message: dict[str, Any] = {
            "type": kind,
            "event": event.to_dict() if event else None,
        }
        if result.success:
            message["orders"] = [order.model_dump(mode="json") for order in result.value]
        else:
            message["orders"] = None
            message["error"] = "Failed to load orders"
        await self.send(message)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
