import pytest
from sqlalchemy import select

from qrmenu.checkout import (
    CART_EMPTY,
    CART_INVALID,
    NAME_REQUIRED,
    NAME_TOO_LONG,
    NAME_TOO_SHORT,
    SUBMIT_FAILED,
    TABLE_REQUIRED,
    TABLE_TOO_LONG,
    CheckoutFlow,
    CheckoutStatus,
    validate_checkout_form,
)
from qrmenu.models import MenuItem, Order, OrderItem, PaymentMethod
from qrmenu.schemas import CheckoutRequest, CheckoutResponse, MenuItemUpdate
from qrmenu.services import catalog
from qrmenu.services.result import ServiceResult
from qrmenu.stores import CartStore, OrderHistoryStore, TableStore
from qrmenu.stores.cart import CartItem


class ExplodingSession:
    """Stands in for a database session that must never be touched."""

    def __getattr__(self, name):
        raise AssertionError(f"database accessed: {name}")


@pytest.fixture
def cart():
    cart = CartStore()
    cart.add_item({"id": 1, "name": "Ayam Goreng", "price": 15000, "category": "ayam"}, quantity=2)
    return cart


@pytest.mark.parametrize(
    "name,table,expected",
    [
        ("", "A1", {"name": NAME_REQUIRED}),
        ("   ", "A1", {"name": NAME_REQUIRED}),
        ("B", "A1", {"name": NAME_TOO_SHORT}),
        ("Bu", "A1", {}),
        ("Budi", "", {"table": TABLE_REQUIRED}),
        ("", "", {"name": NAME_REQUIRED, "table": TABLE_REQUIRED}),
        ("B" * 100, "A" * 20, {}),
        ("B" * 101, "A1", {"name": NAME_TOO_LONG}),
        ("Budi", "A" * 21, {"table": TABLE_TOO_LONG}),
    ],
)
def test_validate_checkout_form(name, table, expected):
    assert validate_checkout_form(name, table) == expected


@pytest.mark.parametrize("name", ["", "B", "B" * 101])
async def test_invalid_name_is_rejected_before_any_database_call(cart, name):
    flow = CheckoutFlow()
    placed = await flow.submit(
        ExplodingSession(),
        CheckoutRequest(customer_name=name, table_number="A1"),
        cart,
        TableStore(),
        OrderHistoryStore(),
    )

    assert not placed
    assert flow.status == CheckoutStatus.FORM
    assert "name" in flow.errors


async def test_empty_cart_is_rejected():
    flow = CheckoutFlow()
    placed = await flow.submit(
        ExplodingSession(),
        CheckoutRequest(customer_name="Budi", table_number="A1"),
        CartStore(),
        TableStore(),
        OrderHistoryStore(),
    )
    assert not placed
    assert flow.errors == {"cart": CART_EMPTY}


async def test_cart_line_the_order_cannot_hold_is_rejected_before_any_database_call():
    cart = CartStore(items=[CartItem(id=1, name="Ayam Goreng", price=15000, note="x" * 201)])
    flow = CheckoutFlow()
    placed = await flow.submit(
        ExplodingSession(),
        CheckoutRequest(customer_name="Budi", table_number="A1"),
        cart,
        TableStore(),
        OrderHistoryStore(),
    )

    assert not placed
    assert flow.status == CheckoutStatus.FORM
    assert flow.errors == {"cart": CART_INVALID}
    assert cart.get_item_count() == 1


async def test_end_to_end_order_keeps_prices_at_checkout(seeded_db):
    db = seeded_db
    ayam = (await db.execute(select(MenuItem).where(MenuItem.name == "Ayam Goreng"))).scalar_one()
    teh = (await db.execute(select(MenuItem).where(MenuItem.name == "Es Teh Manis"))).scalar_one()

    cart = CartStore()
    cart.add_item({"id": ayam.id, "name": ayam.name, "price": 15000, "category": "ayam"}, quantity=2)
    cart.add_item({"id": teh.id, "name": teh.name, "price": 5000, "category": "minuman"}, quantity=1)
    table = TableStore("A1")
    history = OrderHistoryStore()
    flow = CheckoutFlow()

    placed = await flow.submit(
        db,
        CheckoutRequest(customer_name="Budi", payment_method=PaymentMethod.QR_PAYMENT),
        cart,
        table,
        history,
    )

    assert placed
    assert flow.status == CheckoutStatus.SUCCESS
    assert history.order_ids == [flow.order_id]
    assert flow.order_code.startswith("PRM-")

    # The catalog price changes afterwards
    await catalog.update_menu_item(db, ayam.id, MenuItemUpdate(price=99000))

    db.expunge_all()
    order = await db.get(Order, flow.order_id)
    assert order.total_price == 35000
    assert order.table_number == "A1"
    assert order.payment_method == PaymentMethod.QR_PAYMENT

    lines = (await db.execute(select(OrderItem).where(OrderItem.order_id == flow.order_id))).scalars().all()
    assert sorted(line.price_at_order for line in lines) == [5000, 15000]

    # The cart survives until the success screen is dismissed
    assert cart.get_total() == 35000
    cart.open_cart()
    flow.dismiss(cart)
    assert cart.is_empty
    assert not cart.is_open
    assert flow.status == CheckoutStatus.FORM
    assert table.table_number == "A1"


async def test_failed_order_returns_to_form(cart, monkeypatch):
    async def failing_create_order(db, data):
        return ServiceResult.fail("Failed to submit order")

    monkeypatch.setattr("qrmenu.checkout.create_order", failing_create_order)
    flow = CheckoutFlow()
    history = OrderHistoryStore()

    placed = await flow.submit(None, CheckoutRequest(customer_name="Budi", table_number="A1"), cart, TableStore(), history)

    assert not placed
    assert flow.status == CheckoutStatus.FORM
    assert flow.errors == {"form": SUBMIT_FAILED}
    assert len(history) == 0
    assert cart.get_item_count() == 2


async def test_success_must_be_dismissed_before_next_order(cart):
    flow = CheckoutFlow(status=CheckoutStatus.SUCCESS, order_id="abc")
    placed = await flow.submit(
        ExplodingSession(), CheckoutRequest(customer_name="Budi", table_number="A1"), cart, TableStore(), OrderHistoryStore()
    )
    assert not placed
    assert flow.order_id == "abc"


def test_dismiss_without_success_keeps_cart(cart):
    flow = CheckoutFlow(errors={"name": NAME_REQUIRED})
    flow.dismiss(cart)
    assert cart.get_item_count() == 2
    assert flow.errors == {}


def test_checkout_response_errors_are_not_shared():
    first = CheckoutResponse(status="form")
    first.errors["name"] = NAME_REQUIRED
    assert CheckoutResponse(status="form").errors == {}
