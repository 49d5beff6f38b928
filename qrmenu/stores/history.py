"""Ids of orders placed from this visitor's browser, newest first."""

from typing import Any, Iterable, Optional

DEFAULT_HISTORY_LIMIT = 10


class OrderHistoryStore:
    """
    Bounded most-recent-first list of order ids.

    Lets a customer look up their own orders without an account.
    """

    def __init__(self, order_ids: Optional[Iterable[str]] = None, limit: int = DEFAULT_HISTORY_LIMIT):
        self.limit = limit
        self.order_ids: list[str] = list(order_ids or [])[:limit]

    def add_order_id(self, order_id: str) -> None:
        ids = [order_id] + [existing for existing in self.order_ids if existing != order_id]
        self.order_ids = ids[: self.limit]

    def clear_history(self) -> None:
        self.order_ids = []

    def __len__(self) -> int:
        return len(self.order_ids)

    def to_snapshot(self) -> dict[str, Any]:
        return {"order_ids": list(self.order_ids)}

    @classmethod
    def from_snapshot(cls, data: Optional[dict[str, Any]], limit: int = DEFAULT_HISTORY_LIMIT) -> "OrderHistoryStore":
        if not data:
            return cls(limit=limit)
        ids = [str(order_id) for order_id in data.get("order_ids", []) if order_id]
        return cls(order_ids=ids, limit=limit)
