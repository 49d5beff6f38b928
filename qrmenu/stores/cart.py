"""
Cart Store

Per-visitor cart state. A line is identified by the pair
(menu item id, note): the same dish with two different notes stays on
two lines, the same dish with the same note accumulates quantity.

Persistence is explicit: to_snapshot() / from_snapshot() are the only
way cart contents cross the storage boundary. The visibility flag
(is_open) is never part of the snapshot.
"""

import logging
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class CartItem(BaseModel):
    """One cart line with the price captured when it was added."""
    id: int
    name: str
    price: int
    quantity: int = Field(default=1, ge=1)
    category: str = ""
    note: str = ""

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


class CartStore:
    """
    Cart contents plus the sidebar visibility flag.

    Every operation is total: unknown lines are ignored, quantities at
    or below zero remove the line.
    """

    def __init__(self, items: Optional[Iterable[CartItem]] = None, is_open: bool = False):
        self.items: list[CartItem] = list(items or [])
        self.is_open = is_open

    def _find(self, item_id: int, note: Optional[str]) -> int:
        note = note or ""
        for index, line in enumerate(self.items):
            if line.id == item_id and line.note == note:
                return index
        return -1

    def add_item(self, entry: dict[str, Any] | CartItem, quantity: Optional[int] = None) -> Optional[CartItem]:
        """
        Add an entry to the cart.

        Merges into the existing (id, note) line or appends a new line.
        The quantity argument wins over entry["quantity"]; both default
        to 1. A negative quantity takes away from an existing line and
        removes it once nothing is left; it never creates a line.

        Returns:
            The resulting line, or None when no line remains
        """
        data = entry.model_dump() if isinstance(entry, CartItem) else dict(entry)
        qty = quantity or data.get("quantity") or 1
        note = data.get("note") or ""

        index = self._find(data["id"], note)
        if index > -1:
            existing = self.items[index]
            merged = existing.quantity + qty
            if merged <= 0:
                del self.items[index]
                return None
            updated = existing.model_copy(update={"quantity": merged})
            self.items[index] = updated
            return updated

        if qty <= 0:
            return None

        line = CartItem(
            id=data["id"],
            name=data["name"],
            price=data["price"],
            quantity=qty,
            category=data.get("category") or "",
            note=note,
        )
        self.items.append(line)
        return line

    def remove_item(self, item_id: int, note: Optional[str] = "") -> None:
        note = note or ""
        self.items = [line for line in self.items if not (line.id == item_id and line.note == note)]

    def update_quantity(self, item_id: int, quantity: int, note: Optional[str] = "") -> None:
        """Set a line's quantity, removing the line when quantity <= 0."""
        if quantity <= 0:
            self.remove_item(item_id, note)
            return
        index = self._find(item_id, note)
        if index > -1:
            self.items[index] = self.items[index].model_copy(update={"quantity": quantity})

    def clear_cart(self) -> None:
        self.items = []

    def get_total(self) -> int:
        return sum(line.price * line.quantity for line in self.items)

    def get_item_count(self) -> int:
        return sum(line.quantity for line in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def open_cart(self) -> None:
        self.is_open = True

    def close_cart(self) -> None:
        self.is_open = False

    def toggle_cart(self) -> None:
        self.is_open = not self.is_open

    # ------------------------------------------------------------------
    # Serialization boundary
    # ------------------------------------------------------------------

    def to_snapshot(self) -> dict[str, Any]:
        """Durable part of the cart: the lines only."""
        return {"items": [line.model_dump() for line in self.items]}

    @classmethod
    def from_snapshot(cls, data: Optional[dict[str, Any]]) -> "CartStore":
        if not data:
            return cls()
        items = []
        for raw in data.get("items", []):
            try:
                items.append(CartItem.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Dropping malformed cart line {raw!r}: {e}")
        return cls(items=items)
