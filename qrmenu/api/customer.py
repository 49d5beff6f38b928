"""
Customer API

Menu browsing, cart, table number, checkout and the visitor's own order
history. Visitor state comes from the session cookie; nothing here
requires an account.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from qrmenu.api.deps import get_customer_session, get_storage, raise_for_result, set_session_cookie
from qrmenu.core.currency import format_price
from qrmenu.database import get_db
from qrmenu.order_status import customer_label
from qrmenu.schemas import (
    CartItemAdd,
    CartItemRemove,
    CartQuantityUpdate,
    CartResponse,
    CategoryInfo,
    CheckoutRequest,
    CheckoutResponse,
    CustomerOrderView,
    MenuItemResponse,
    OrderHistoryResponse,
    OrderView,
    TableResponse,
    TableUpdate,
)
from qrmenu.services import catalog, orders
from qrmenu.services.state import BaseStateStorage
from qrmenu.stores.session import CustomerSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Customer"])


def cart_response(session: CustomerSession) -> CartResponse:
    cart = session.cart
    total = cart.get_total()
    return CartResponse(
        items=cart.items,
        is_open=cart.is_open,
        total=total,
        total_display=format_price(total),
        item_count=cart.get_item_count(),
    )


def checkout_response(session: CustomerSession) -> CheckoutResponse:
    flow = session.checkout
    return CheckoutResponse(
        status=flow.status.value,
        errors=flow.errors,
        order_id=flow.order_id,
        order_code=flow.order_code,
        total=session.cart.get_total(),
        table_number=session.table.table_number,
    )


def customer_order(order: OrderView) -> CustomerOrderView:
    return CustomerOrderView(
        **order.model_dump(),
        order_code=orders.order_code(order.id),
        status_label=customer_label(order.status),
    )


# =============================================================================
# MENU
# =============================================================================

@router.get("/categories", response_model=list[CategoryInfo])
async def list_categories(db: AsyncSession = Depends(get_db)) -> list[CategoryInfo]:
    """Categories in display order."""
    result = await catalog.get_categories(db)
    if not result.success:
        raise_for_result(result, "Failed to load categories")
    return result.value


@router.get("/menu-items", response_model=list[MenuItemResponse])
async def list_menu_items(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    available_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
) -> list[MenuItemResponse]:
    """Menu items of a category, or matching a search term in name or description."""
    result = await catalog.get_menu_items(db, category=category, search=search, available_only=available_only)
    if not result.success:
        raise_for_result(result, "Failed to load menu")
    return result.value


@router.get("/menu-items/{item_id}", response_model=MenuItemResponse)
async def get_menu_item(item_id: int, db: AsyncSession = Depends(get_db)) -> MenuItemResponse:
    result = await catalog.get_menu_item(db, item_id)
    if not result.success:
        raise_for_result(result, "Failed to load menu item")
    return result.value


# =============================================================================
# CART
# =============================================================================

@router.get("/cart", response_model=CartResponse)
async def get_cart(session: CustomerSession = Depends(get_customer_session)) -> CartResponse:
    return cart_response(session)


@router.post("/cart/items", response_model=CartResponse)
async def add_cart_item(
    entry: CartItemAdd,
    session: CustomerSession = Depends(get_customer_session),
    storage: BaseStateStorage = Depends(get_storage),
) -> CartResponse:
    session.cart.add_item(entry.model_dump(exclude={"quantity"}), quantity=entry.quantity)
    await session.save(storage)
    return cart_response(session)


@router.patch("/cart/items", response_model=CartResponse)
async def update_cart_quantity(
    change: CartQuantityUpdate,
    session: CustomerSession = Depends(get_customer_session),
    storage: BaseStateStorage = Depends(get_storage),
) -> CartResponse:
    """Set a line's quantity; zero or less removes the line."""
    session.cart.update_quantity(change.id, change.quantity, change.note)
    await session.save(storage)
    return cart_response(session)


@router.delete("/cart/items", response_model=CartResponse)
async def remove_cart_item(
    line: CartItemRemove,
    session: CustomerSession = Depends(get_customer_session),
    storage: BaseStateStorage = Depends(get_storage),
) -> CartResponse:
    session.cart.remove_item(line.id, line.note)
    await session.save(storage)
    return cart_response(session)


@router.delete("/cart", response_model=CartResponse)
async def clear_cart(
    session: CustomerSession = Depends(get_customer_session),
    storage: BaseStateStorage = Depends(get_storage),
) -> CartResponse:
    session.cart.clear_cart()
    await session.save(storage)
    return cart_response(session)


@router.post("/cart/{action}", response_model=CartResponse)
async def set_cart_visibility(
    action: str,
    session: CustomerSession = Depends(get_customer_session),
    storage: BaseStateStorage = Depends(get_storage),
) -> CartResponse:
    """Open, close or toggle the cart sidebar."""
    actions = {
        "open": session.cart.open_cart,
        "close": session.cart.close_cart,
        "toggle": session.cart.toggle_cart,
    }
    if action not in actions:
        raise HTTPException(status_code=404, detail=f"Unknown cart action '{action}'")
    actions[action]()
    await session.save(storage)
    return cart_response(session)


# =============================================================================
# TABLE
# =============================================================================

@router.get("/table", response_model=TableResponse)
async def get_table(session: CustomerSession = Depends(get_customer_session)) -> TableResponse:
    return TableResponse(table_number=session.table.table_number)


@router.put("/table", response_model=TableResponse)
async def set_table(
    data: TableUpdate,
    session: CustomerSession = Depends(get_customer_session),
    storage: BaseStateStorage = Depends(get_storage),
) -> TableResponse:
    session.table.set_table_number(data.table_number.strip())
    await session.save(storage)
    return TableResponse(table_number=session.table.table_number)


@router.post("/table/from-link", response_model=TableResponse)
async def set_table_from_link(
    table: str = Query(..., max_length=20),
    session: CustomerSession = Depends(get_customer_session),
    storage: BaseStateStorage = Depends(get_storage),
) -> TableResponse:
    """Apply a scanned ?table= value; a remembered table is not overwritten."""
    if session.table.populate_from_link(table.strip()):
        await session.save(storage)
    return TableResponse(table_number=session.table.table_number)


@router.delete("/table", response_model=TableResponse)
async def clear_table(
    session: CustomerSession = Depends(get_customer_session),
    storage: BaseStateStorage = Depends(get_storage),
) -> TableResponse:
    session.table.clear_table()
    await session.save(storage)
    return TableResponse(table_number="")


# =============================================================================
# CHECKOUT
# =============================================================================

@router.get("/checkout", response_model=CheckoutResponse)
async def get_checkout(session: CustomerSession = Depends(get_customer_session)) -> CheckoutResponse:
    return checkout_response(session)


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    responses={422: {"model": CheckoutResponse}, 500: {"model": CheckoutResponse}},
)
async def submit_checkout(
    form: CheckoutRequest,
    session: CustomerSession = Depends(get_customer_session),
    storage: BaseStateStorage = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    """
    Place the order for the current cart.

    Field problems come back as 422 with per-field messages; a failed
    write comes back as 500 with a generic message.
    """
    placed = await session.checkout.submit(db, form, session.cart, session.table, session.history)
    await session.save(storage)

    body = checkout_response(session)
    if placed:
        return body
    status_code = 500 if "form" in session.checkout.errors else 422
    response = JSONResponse(status_code=status_code, content=body.model_dump())
    set_session_cookie(response, session.session_id)
    return response


@router.post("/checkout/dismiss", response_model=CheckoutResponse)
async def dismiss_checkout(
    session: CustomerSession = Depends(get_customer_session),
    storage: BaseStateStorage = Depends(get_storage),
) -> CheckoutResponse:
    """Close the checkout screen; after a placed order this empties the cart."""
    session.checkout.dismiss(session.cart)
    await session.save(storage)
    return checkout_response(session)


# =============================================================================
# ORDER HISTORY
# =============================================================================

@router.get("/orders/history", response_model=OrderHistoryResponse)
async def order_history(
    session: CustomerSession = Depends(get_customer_session),
    db: AsyncSession = Depends(get_db),
) -> OrderHistoryResponse:
    """Orders placed from this browser, newest first."""
    ids = session.history.order_ids
    result = await orders.get_orders_by_ids(db, ids)
    if not result.success:
        raise_for_result(result, "Failed to load orders")
    return OrderHistoryResponse(order_ids=ids, orders=[customer_order(o) for o in result.value])


@router.delete("/orders/history", response_model=OrderHistoryResponse)
async def clear_order_history(
    session: CustomerSession = Depends(get_customer_session),
    storage: BaseStateStorage = Depends(get_storage),
) -> OrderHistoryResponse:
    session.history.clear_history()
    await session.save(storage)
    return OrderHistoryResponse(order_ids=[], orders=[])


@router.get("/orders/{order_id}", response_model=CustomerOrderView)
async def get_order(order_id: str, db: AsyncSession = Depends(get_db)) -> CustomerOrderView:
    result = await orders.get_order_by_id(db, order_id)
    if not result.success:
        raise_for_result(result, "Failed to load order")
    return customer_order(result.value)
