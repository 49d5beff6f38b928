"""
Checkout Flow

    form ──submit──► loading ──► success ──dismiss──► form
                        │
                        └──failure──► form (with a generic error)

Validation runs before anything touches the database. On success the
new order id goes into the visitor's order history right away, but the
cart is only cleared when the success screen is dismissed.
"""

import enum
import logging
from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from qrmenu.models import PaymentMethod
from qrmenu.schemas import CheckoutRequest, OrderCreate, OrderItemCreate
from qrmenu.services.orders import create_order, order_code
from qrmenu.stores import CartStore, OrderHistoryStore, TableStore

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100
MAX_TABLE_LENGTH = 20

NAME_REQUIRED = "Name is required"
NAME_TOO_SHORT = f"Name must be at least {MIN_NAME_LENGTH} characters"
NAME_TOO_LONG = f"Name must be at most {MAX_NAME_LENGTH} characters"
TABLE_REQUIRED = "Table number is required"
TABLE_TOO_LONG = f"Table number must be at most {MAX_TABLE_LENGTH} characters"
CART_EMPTY = "Your cart is empty"
CART_INVALID = "Your cart contains an item that cannot be ordered"
SUBMIT_FAILED = "Failed to submit order, please try again"


class CheckoutStatus(str, enum.Enum):
    FORM = "form"
    LOADING = "loading"
    SUCCESS = "success"


def validate_checkout_form(customer_name: str, table_number: str) -> dict[str, str]:
    """
    Field-level validation of the checkout form.

    Returns:
        Mapping of field ("name", "table") to message; empty when valid
    """
    errors: dict[str, str] = {}

    name = (customer_name or "").strip()
    if not name:
        errors["name"] = NAME_REQUIRED
    elif len(name) < MIN_NAME_LENGTH:
        errors["name"] = NAME_TOO_SHORT
    elif len(name) > MAX_NAME_LENGTH:
        errors["name"] = NAME_TOO_LONG

    table = (table_number or "").strip()
    if not table:
        errors["table"] = TABLE_REQUIRED
    elif len(table) > MAX_TABLE_LENGTH:
        errors["table"] = TABLE_TOO_LONG

    return errors


def build_order(
    cart: CartStore,
    customer_name: str,
    table_number: str,
    payment_method: PaymentMethod,
    notes: Optional[str] = None,
) -> OrderCreate:
    """Turn the cart into an order; the total is the cart total as it stands."""
    return OrderCreate(
        customer_name=customer_name.strip(),
        table_number=table_number.strip(),
        total_price=cart.get_total(),
        payment_method=payment_method,
        notes=notes or None,
        items=[
            OrderItemCreate(
                menu_item_id=line.id,
                quantity=line.quantity,
                price_at_order=line.price,
                notes=line.note,
            )
            for line in cart.items
        ],
    )


class CheckoutFlow:
    """Checkout screen state for one visitor."""

    def __init__(
        self,
        status: CheckoutStatus = CheckoutStatus.FORM,
        order_id: Optional[str] = None,
        errors: Optional[dict[str, str]] = None,
    ):
        self.status = status
        self.order_id = order_id
        self.errors: dict[str, str] = dict(errors or {})

    @property
    def order_code(self) -> Optional[str]:
        return order_code(self.order_id) if self.order_id else None

    async def submit(
        self,
        db: AsyncSession,
        form: CheckoutRequest,
        cart: CartStore,
        table: TableStore,
        history: OrderHistoryStore,
    ) -> bool:
        """
        Validate the form and place the order.

        Returns:
            True when the order was placed
        """
        if self.status == CheckoutStatus.SUCCESS:
            # A placed order must be dismissed before the next one
            return False

        table_number = form.table_number.strip() or table.table_number
        self.errors = validate_checkout_form(form.customer_name, table_number)
        if not self.errors and cart.is_empty:
            self.errors["cart"] = CART_EMPTY
        if self.errors:
            self.status = CheckoutStatus.FORM
            return False

        try:
            order = build_order(cart, form.customer_name, table_number, form.payment_method, form.notes)
        except ValidationError as e:
            logger.warning(f"Cart for table {table_number} cannot be ordered: {e}")
            self.errors = {"cart": CART_INVALID}
            self.status = CheckoutStatus.FORM
            return False

        self.status = CheckoutStatus.LOADING
        result = await create_order(db, order)

        if not result.success:
            logger.warning(f"Checkout failed for table {order.table_number}: {result.error_message}")
            self.errors = {"form": SUBMIT_FAILED}
            self.status = CheckoutStatus.FORM
            return False

        self.order_id = result.value.id
        history.add_order_id(self.order_id)
        self.status = CheckoutStatus.SUCCESS
        logger.info(f"Checkout complete: {self.order_code} ({order.total_price})")
        return True

    def dismiss(self, cart: CartStore) -> None:
        """
        Leave the checkout screen.

        After a successful order this empties and closes the cart; there
        is no undo.
        """
        if self.status == CheckoutStatus.SUCCESS:
            cart.clear_cart()
            cart.close_cart()
        self.status = CheckoutStatus.FORM
        self.order_id = None
        self.errors = {}

    def to_snapshot(self) -> dict[str, Any]:
        return {"status": self.status.value, "order_id": self.order_id, "errors": dict(self.errors)}

    @classmethod
    def from_snapshot(cls, data: Optional[dict[str, Any]]) -> "CheckoutFlow":
        if not data:
            return cls()
        try:
            status = CheckoutStatus(data.get("status", CheckoutStatus.FORM.value))
        except ValueError:
            status = CheckoutStatus.FORM
        # A request never survives mid-flight, so a stored "loading" is stale
        if status == CheckoutStatus.LOADING:
            status = CheckoutStatus.FORM
        return cls(status=status, order_id=data.get("order_id"), errors=data.get("errors") or {})
