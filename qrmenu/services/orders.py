"""
Order Data Access

Reads join-fetch each order's line items and, for every line, the name
and category of the referenced menu item. Writes publish an OrderEvent
so the admin dashboard can reload.

Order creation is two sequential commits (order row, then its line
items). There is no transaction spanning both: if the line items fail,
the order row already exists. With ROLLBACK_ORPHANED_ORDERS enabled the
orphaned row is deleted again; otherwise it is left in place and the
caller only sees a failed result.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from qrmenu.core.config import get_settings
from qrmenu.models import Category, MenuItem, Order, OrderItem, OrderStatus
from qrmenu.schemas import DashboardData, OrderCreate, OrderView
from qrmenu.core.currency import format_price
from qrmenu.services.realtime import OrderEvent, OrderEventBus, OrderEventType, get_order_event_bus
from qrmenu.services.result import NOT_FOUND, ServiceResult

logger = logging.getLogger(__name__)


def order_code(order_id: str, prefix: Optional[str] = None) -> str:
    """Short code shown to customers, e.g. PRM-1A2B3C4D."""
    if prefix is None:
        prefix = get_settings().order_code_prefix
    return f"{prefix}-{order_id.replace('-', '')[:8].upper()}"


def _orders_query():
    return (
        select(Order)
        .options(selectinload(Order.order_items).selectinload(OrderItem.menu_item))
        .execution_options(populate_existing=True)
    )


def _event_record(order: Order) -> dict:
    return {
        "id": order.id,
        "customer_name": order.customer_name,
        "table_number": order.table_number,
        "total_price": order.total_price,
        "status": order.status.value,
    }


async def _publish(events: Optional[OrderEventBus], event: OrderEvent) -> None:
    await (events or get_order_event_bus()).publish(event)


# =============================================================================
# READS
# =============================================================================

async def get_orders(db: AsyncSession, status: Optional[OrderStatus] = None) -> ServiceResult[list[OrderView]]:
    """All orders newest first, optionally only those in one status."""
    query = _orders_query().order_by(Order.created_at.desc())
    if status is not None:
        query = query.where(Order.status == status)

    try:
        result = await db.execute(query)
        orders = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching orders: {e}")
        return ServiceResult.fail("Failed to load orders")
    return ServiceResult.ok([OrderView.model_validate(o) for o in orders])


async def get_orders_by_status(db: AsyncSession, status: OrderStatus) -> ServiceResult[list[OrderView]]:
    return await get_orders(db, status=status)


async def get_order_by_id(db: AsyncSession, order_id: str) -> ServiceResult[OrderView]:
    try:
        result = await db.execute(_orders_query().where(Order.id == order_id))
        order = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching order {order_id}: {e}")
        return ServiceResult.fail("Failed to load order")
    if order is None:
        return ServiceResult.fail(f"Order {order_id} not found", code=NOT_FOUND)
    return ServiceResult.ok(OrderView.model_validate(order))


async def get_orders_by_ids(db: AsyncSession, order_ids: Iterable[str]) -> ServiceResult[list[OrderView]]:
    """Orders for the given ids, in the given order. Unknown ids are skipped."""
    ids = list(order_ids)
    if not ids:
        return ServiceResult.ok([])

    try:
        result = await db.execute(_orders_query().where(Order.id.in_(ids)))
        by_id = {o.id: o for o in result.scalars().all()}
    except SQLAlchemyError as e:
        logger.error(f"Error fetching orders {ids}: {e}")
        return ServiceResult.fail("Failed to load orders")
    return ServiceResult.ok([OrderView.model_validate(by_id[i]) for i in ids if i in by_id])


# =============================================================================
# WRITES
# =============================================================================

async def create_order(
    db: AsyncSession,
    data: OrderCreate,
    events: Optional[OrderEventBus] = None,
    rollback_orphans: Optional[bool] = None,
) -> ServiceResult[OrderView]:
    """
    Place an order: insert the order row, then bulk insert its lines.

    total_price is written exactly as given; it is not recomputed from
    the lines.
    """
    if rollback_orphans is None:
        rollback_orphans = get_settings().rollback_orphaned_orders

    # Step 1: the order row
    order = Order(
        customer_name=data.customer_name,
        table_number=data.table_number,
        total_price=data.total_price,
        payment_method=data.payment_method,
        status=OrderStatus.PENDING,
        notes=data.notes,
    )
    db.add(order)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error creating order for {data.customer_name}: {e}")
        return ServiceResult.fail("Failed to submit order")

    order_id = order.id
    record = _event_record(order)
    logger.info(f"Order {order_id} created for table {data.table_number} ({data.total_price})")

    # Step 2: its line items, referencing the generated id
    db.add_all(
        [
            OrderItem(
                order_id=order_id,
                menu_item_id=line.menu_item_id,
                quantity=line.quantity,
                price_at_order=line.price_at_order,
                notes=line.notes,
            )
            for line in data.items
        ]
    )
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error saving items of order {order_id}, order row has no items: {e}")
        if rollback_orphans:
            await _delete_orphan(db, order_id)
        else:
            await _publish(events, OrderEvent(OrderEventType.INSERT, order_id, record))
        return ServiceResult.fail("Failed to submit order")

    await _publish(events, OrderEvent(OrderEventType.INSERT, order_id, record))
    return await get_order_by_id(db, order_id)


async def _delete_orphan(db: AsyncSession, order_id: str) -> None:
    try:
        orphan = await db.get(Order, order_id)
        if orphan is not None:
            await db.delete(orphan)
            await db.commit()
            logger.warning(f"Orphaned order {order_id} removed")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Could not remove orphaned order {order_id}: {e}")


async def update_order_status(
    db: AsyncSession,
    order_id: str,
    status: OrderStatus,
    events: Optional[OrderEventBus] = None,
) -> ServiceResult[OrderView]:
    """
    Overwrite an order's status.

    No transition rules are enforced here; the dashboard only offers
    forward actions (see qrmenu.order_status).
    """
    try:
        order = await db.get(Order, order_id)
        if order is None:
            return ServiceResult.fail(f"Order {order_id} not found", code=NOT_FOUND)
        previous = order.status
        order.status = status
        order.updated_at = datetime.now(timezone.utc)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error updating order {order_id} status: {e}")
        return ServiceResult.fail("Failed to update order status")

    logger.info(f"Order {order_id}: {previous.value} → {status.value}")
    await _publish(events, OrderEvent(OrderEventType.UPDATE, order_id, _event_record(order)))
    return await get_order_by_id(db, order_id)


async def delete_order(
    db: AsyncSession,
    order_id: str,
    events: Optional[OrderEventBus] = None,
) -> ServiceResult[bool]:
    try:
        order = await db.get(Order, order_id)
        if order is None:
            return ServiceResult.fail(f"Order {order_id} not found", code=NOT_FOUND)
        await db.delete(order)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error deleting order {order_id}: {e}")
        return ServiceResult.fail("Failed to delete order")

    logger.info(f"Order {order_id} deleted")
    await _publish(events, OrderEvent(OrderEventType.DELETE, order_id))
    return ServiceResult.ok(True)


# =============================================================================
# DASHBOARD
# =============================================================================

async def get_dashboard_data(db: AsyncSession) -> ServiceResult[DashboardData]:
    """Order counts per status and today's completed revenue."""
    today_start = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)

    try:
        counts_result = await db.execute(select(Order.status, func.count(Order.id)).group_by(Order.status))
        counts = {status: count for status, count in counts_result.all()}

        revenue_result = await db.execute(
            select(func.coalesce(func.sum(Order.total_price), 0)).where(
                Order.status == OrderStatus.COMPLETED,
                Order.created_at >= today_start,
            )
        )
        today_revenue = int(revenue_result.scalar() or 0)

        menu_count = (await db.execute(select(func.count(MenuItem.id)))).scalar() or 0
        category_count = (await db.execute(select(func.count(Category.id)))).scalar() or 0
    except SQLAlchemyError as e:
        logger.error(f"Error computing dashboard data: {e}")
        return ServiceResult.fail("Failed to load dashboard")

    return ServiceResult.ok(
        DashboardData(
            total_orders=sum(counts.values()),
            pending_orders=counts.get(OrderStatus.PENDING, 0),
            confirmed_orders=counts.get(OrderStatus.CONFIRMED, 0),
            completed_orders=counts.get(OrderStatus.COMPLETED, 0),
            today_revenue=today_revenue,
            today_revenue_display=format_price(today_revenue),
            menu_items=menu_count,
            categories=category_count,
        )
    )
