"""
Customer Session

Owns every store belonging to one visitor and moves them across the
state storage boundary. Routes receive a loaded CustomerSession through
a dependency and call save() after mutating it.

Storage layout per session id:
    <prefix>:cart:<sid>     cart lines                 (durable)
    <prefix>:table:<sid>    table number               (durable)
    <prefix>:history:<sid>  order ids                  (durable)
    <prefix>:ui:<sid>       cart visibility, checkout  (short-lived)
"""

import logging
import secrets
from typing import Optional

from qrmenu.checkout import CheckoutFlow
from qrmenu.core.config import get_settings
from qrmenu.services.state import BaseStateStorage
from qrmenu.stores.cart import CartStore
from qrmenu.stores.history import OrderHistoryStore
from qrmenu.stores.table import TableStore

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return secrets.token_urlsafe(24)


class CustomerSession:

    def __init__(
        self,
        session_id: str,
        cart: Optional[CartStore] = None,
        table: Optional[TableStore] = None,
        history: Optional[OrderHistoryStore] = None,
        checkout: Optional[CheckoutFlow] = None,
    ):
        self.session_id = session_id
        self.cart = cart or CartStore()
        self.table = table or TableStore()
        self.history = history or OrderHistoryStore(limit=get_settings().order_history_limit)
        self.checkout = checkout or CheckoutFlow()

    @staticmethod
    def _key(kind: str, session_id: str) -> str:
        return f"{get_settings().state_key_prefix}:{kind}:{session_id}"

    @classmethod
    async def load(cls, storage: BaseStateStorage, session_id: str) -> "CustomerSession":
        settings = get_settings()

        cart = CartStore.from_snapshot(await storage.get(cls._key("cart", session_id)))
        table = TableStore.from_snapshot(await storage.get(cls._key("table", session_id)))
        history = OrderHistoryStore.from_snapshot(
            await storage.get(cls._key("history", session_id)),
            limit=settings.order_history_limit,
        )

        ui = await storage.get(cls._key("ui", session_id)) or {}
        cart.is_open = bool(ui.get("cart_open", False))
        checkout = CheckoutFlow.from_snapshot(ui.get("checkout"))

        return cls(session_id, cart=cart, table=table, history=history, checkout=checkout)

    async def save(self, storage: BaseStateStorage) -> None:
        settings = get_settings()
        ttl = settings.session_ttl_seconds

        await storage.set(self._key("cart", self.session_id), self.cart.to_snapshot(), ttl=ttl)
        await storage.set(self._key("table", self.session_id), self.table.to_snapshot(), ttl=ttl)
        await storage.set(self._key("history", self.session_id), self.history.to_snapshot(), ttl=ttl)
        await storage.set(
            self._key("ui", self.session_id),
            {"cart_open": self.cart.is_open, "checkout": self.checkout.to_snapshot()},
            ttl=settings.ui_state_ttl_seconds,
        )
        logger.debug(f"Session {self.session_id[:8]}… saved ({self.cart.get_item_count()} items in cart)")
