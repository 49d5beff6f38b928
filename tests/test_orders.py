from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from qrmenu.models import Order, OrderStatus
from qrmenu.schemas import OrderCreate, OrderItemCreate
from qrmenu.services import orders
from qrmenu.services.realtime import OrderEventType


def order_data(name="Budi", table="A1", total=35000):
    return OrderCreate(
        customer_name=name,
        table_number=table,
        total_price=total,
        items=[
            OrderItemCreate(menu_item_id=1, quantity=2, price_at_order=15000, notes="extra pedas"),
            OrderItemCreate(menu_item_id=16, quantity=1, price_at_order=5000),
        ],
    )


def fail_second_commit(db, monkeypatch):
    original = db.commit
    calls = {"n": 0}

    async def commit():
        calls["n"] += 1
        if calls["n"] == 2:
            raise OperationalError("INSERT INTO order_items", {}, Exception("disk I/O error"))
        await original()

    monkeypatch.setattr(db, "commit", commit)


def test_order_code():
    assert orders.order_code("1a2b3c4d-5e6f-7a8b-9c0d-112233445566", prefix="PRM") == "PRM-1A2B3C4D"


async def test_create_order_stores_lines_with_menu_item_names(seeded_db, bus):
    events = []
    bus.subscribe(events.append)

    result = await orders.create_order(seeded_db, order_data())

    assert result.success
    order = result.value
    assert order.status == OrderStatus.PENDING
    assert order.total_price == 35000
    assert [(i.quantity, i.price_at_order) for i in order.order_items] == [(2, 15000), (1, 5000)]
    assert order.order_items[0].menu_item.name == "Ayam Goreng"
    assert order.order_items[0].notes == "extra pedas"
    assert [e.type for e in events] == [OrderEventType.INSERT]
    assert events[0].record["table_number"] == "A1"


async def test_total_is_stored_as_given(seeded_db):
    result = await orders.create_order(seeded_db, order_data(total=1))
    assert result.value.total_price == 1


async def test_line_item_failure_leaves_orphan_by_default(seeded_db, monkeypatch, bus):
    events = []
    bus.subscribe(events.append)
    fail_second_commit(seeded_db, monkeypatch)

    result = await orders.create_order(seeded_db, order_data(), rollback_orphans=False)

    assert not result.success
    assert result.error_message == "Failed to submit order"
    monkeypatch.undo()
    remaining = (await seeded_db.execute(select(func.count(Order.id)))).scalar()
    assert remaining == 1
    assert [e.type for e in events] == [OrderEventType.INSERT]


async def test_line_item_failure_with_rollback_removes_orphan(seeded_db, monkeypatch, bus):
    events = []
    bus.subscribe(events.append)
    fail_second_commit(seeded_db, monkeypatch)

    result = await orders.create_order(seeded_db, order_data(), rollback_orphans=True)

    assert not result.success
    monkeypatch.undo()
    remaining = (await seeded_db.execute(select(func.count(Order.id)))).scalar()
    assert remaining == 0
    assert events == []


async def test_get_orders_newest_first_and_by_status(seeded_db):
    first = (await orders.create_order(seeded_db, order_data(name="Siti"))).value
    second = (await orders.create_order(seeded_db, order_data(name="Andi"))).value
    await orders.update_order_status(seeded_db, first.id, OrderStatus.CONFIRMED)

    everything = await orders.get_orders(seeded_db)
    assert [o.id for o in everything.value] == [second.id, first.id]

    confirmed = await orders.get_orders_by_status(seeded_db, OrderStatus.CONFIRMED)
    assert [o.id for o in confirmed.value] == [first.id]


async def test_get_orders_by_ids_keeps_requested_order(seeded_db):
    a = (await orders.create_order(seeded_db, order_data(name="Siti"))).value
    b = (await orders.create_order(seeded_db, order_data(name="Andi"))).value

    result = await orders.get_orders_by_ids(seeded_db, [a.id, "missing", b.id])

    assert [o.id for o in result.value] == [a.id, b.id]
    assert (await orders.get_orders_by_ids(seeded_db, [])).value == []


async def test_status_update_is_not_guarded(seeded_db, bus):
    events = []
    bus.subscribe(events.append)
    order = (await orders.create_order(seeded_db, order_data())).value

    done = await orders.update_order_status(seeded_db, order.id, OrderStatus.COMPLETED)
    back = await orders.update_order_status(seeded_db, order.id, OrderStatus.PENDING)

    assert done.value.status == OrderStatus.COMPLETED
    assert back.value.status == OrderStatus.PENDING
    assert back.value.updated_at is not None
    assert [e.type for e in events] == [OrderEventType.INSERT, OrderEventType.UPDATE, OrderEventType.UPDATE]


async def test_missing_order(seeded_db):
    assert (await orders.get_order_by_id(seeded_db, "nope")).is_not_found
    assert (await orders.update_order_status(seeded_db, "nope", OrderStatus.CONFIRMED)).is_not_found
    assert (await orders.delete_order(seeded_db, "nope")).is_not_found


async def test_delete_order_publishes_delete(seeded_db, bus):
    order = (await orders.create_order(seeded_db, order_data())).value
    events = []
    bus.subscribe(events.append)

    assert (await orders.delete_order(seeded_db, order.id)).success

    assert (await orders.get_order_by_id(seeded_db, order.id)).is_not_found
    assert [(e.type, e.order_id) for e in events] == [(OrderEventType.DELETE, order.id)]


async def test_dashboard_counts_and_revenue(seeded_db):
    a = (await orders.create_order(seeded_db, order_data(total=35000))).value
    b = (await orders.create_order(seeded_db, order_data(total=20000))).value
    await orders.create_order(seeded_db, order_data(total=10000))
    await orders.update_order_status(seeded_db, a.id, OrderStatus.COMPLETED)
    await orders.update_order_status(seeded_db, b.id, OrderStatus.CONFIRMED)

    data = (await orders.get_dashboard_data(seeded_db)).value

    assert data.total_orders == 3
    assert data.pending_orders == 1
    assert data.confirmed_orders == 1
    assert data.completed_orders == 1
    assert data.today_revenue == 35000
    assert data.today_revenue_display == "Rp 35.000"
    assert data.menu_items == 25
    assert data.categories == 6
