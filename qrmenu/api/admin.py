"""
Admin API

Staff sign-in, catalog management, order handling and the live order
feed used by the dashboard. Everything except /login requires a signed
in admin (Bearer token or the admin session cookie).
"""

import asyncio
import logging
from typing import Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    Query,
    Response,
    UploadFile,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from qrmenu.api.deps import (
    get_admin_token,
    get_auth,
    get_event_bus,
    get_images,
    raise_for_result,
    require_admin,
)
from qrmenu.core.config import get_settings
from qrmenu.database import get_db, get_session_factory
from qrmenu.models import OrderStatus
from qrmenu.order_status import available_actions
from qrmenu.schemas import (
    AdminOrderListResponse,
    AdminOrderView,
    AdminUserInfo,
    CategoryCreate,
    CategoryInfo,
    CategoryUpdate,
    DashboardData,
    ImageUploadResponse,
    LoginRequest,
    LoginResponse,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    OrderStatusUpdate,
    OrderView,
)
from qrmenu.services import catalog, orders
from qrmenu.services.auth import AuthService
from qrmenu.services.order_feed import AdminOrderFeed
from qrmenu.services.realtime import OrderEventBus
from qrmenu.services.storage import BaseImageStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


def admin_order(order: OrderView) -> AdminOrderView:
    return AdminOrderView(
        **order.model_dump(),
        order_code=orders.order_code(order.id),
        available_actions=available_actions(order.status),
    )


# =============================================================================
# AUTHENTICATION
# =============================================================================

@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": LoginResponse}},
)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    auth: AuthService = Depends(get_auth),
):
    result = await auth.sign_in(db, credentials.email, credentials.password)
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=LoginResponse(success=False, error=result.error_message).model_dump(),
        )

    settings = get_settings()
    response.set_cookie(
        settings.admin_cookie_name,
        result.token,
        max_age=settings.admin_session_ttl_seconds,
        httponly=True,
        samesite="lax",
    )
    return LoginResponse(success=True, token=result.token, user=result.user)


@router.post("/logout")
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_admin_token),
    auth: AuthService = Depends(get_auth),
) -> dict[str, bool]:
    signed_out = await auth.sign_out(token)
    response.delete_cookie(get_settings().admin_cookie_name)
    return {"success": signed_out}


@router.get("/me", response_model=AdminUserInfo)
async def current_admin(user: AdminUserInfo = Depends(require_admin)) -> AdminUserInfo:
    return user


# =============================================================================
# CATEGORIES
# =============================================================================

@router.get("/categories", response_model=list[CategoryInfo])
async def list_categories(
    db: AsyncSession = Depends(get_db),
    _: AdminUserInfo = Depends(require_admin),
) -> list[CategoryInfo]:
    result = await catalog.get_categories(db)
    if not result.success:
        raise_for_result(result, "Failed to load categories")
    return result.value


@router.post("/categories", response_model=CategoryInfo, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    _: AdminUserInfo = Depends(require_admin),
) -> CategoryInfo:
    result = await catalog.create_category(db, data)
    if not result.success:
        raise_for_result(result, "Failed to create category")
    return result.value


@router.patch("/categories/{category_id}", response_model=CategoryInfo)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    _: AdminUserInfo = Depends(require_admin),
) -> CategoryInfo:
    result = await catalog.update_category(db, category_id, data)
    if not result.success:
        raise_for_result(result, "Failed to update category")
    return result.value


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: str,
    db: AsyncSession = Depends(get_db),
    _: AdminUserInfo = Depends(require_admin),
) -> dict[str, bool]:
    """Delete a category. Its menu items keep the old category id."""
    result = await catalog.delete_category(db, category_id)
    if not result.success:
        raise_for_result(result, "Failed to delete category")
    return {"success": True}


# =============================================================================
# MENU ITEMS
# =============================================================================

@router.get("/menu-items", response_model=list[MenuItemResponse])
async def list_menu_items(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
    _: AdminUserInfo = Depends(require_admin),
) -> list[MenuItemResponse]:
    result = await catalog.get_menu_items(db, category=category, search=search)
    if not result.success:
        raise_for_result(result, "Failed to load menu")
    return result.value


@router.post("/menu-items", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
async def create_menu_item(
    data: MenuItemCreate,
    db: AsyncSession = Depends(get_db),
    _: AdminUserInfo = Depends(require_admin),
) -> MenuItemResponse:
    result = await catalog.create_menu_item(db, data)
    if not result.success:
        raise_for_result(result, "Failed to create menu item")
    return result.value


@router.patch("/menu-items/{item_id}", response_model=MenuItemResponse)
async def update_menu_item(
    item_id: int,
    data: MenuItemUpdate,
    db: AsyncSession = Depends(get_db),
    _: AdminUserInfo = Depends(require_admin),
) -> MenuItemResponse:
    result = await catalog.update_menu_item(db, item_id, data)
    if not result.success:
        raise_for_result(result, "Failed to update menu item")
    return result.value


@router.delete("/menu-items/{item_id}")
async def delete_menu_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    _: AdminUserInfo = Depends(require_admin),
) -> dict[str, bool]:
    result = await catalog.delete_menu_item(db, item_id)
    if not result.success:
        raise_for_result(result, "Failed to delete menu item")
    return {"success": True}


@router.post("/menu-items/{item_id}/availability/toggle", response_model=MenuItemResponse)
async def toggle_availability(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    _: AdminUserInfo = Depends(require_admin),
) -> MenuItemResponse:
    result = await catalog.toggle_menu_item_availability(db, item_id)
    if not result.success:
        raise_for_result(result, "Failed to update availability")
    return result.value


@router.post("/menu-items/{item_id}/image", response_model=ImageUploadResponse)
async def upload_menu_item_image(
    item_id: int,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    images: BaseImageStorage = Depends(get_images),
    _: AdminUserInfo = Depends(require_admin),
) -> ImageUploadResponse:
    """
    Upload a photo for a menu item.

    If the upload fails the item keeps its previous image and the
    response says so; the item itself is never left half-updated.
    """
    existing = await catalog.get_menu_item(db, item_id)
    if not existing.success:
        raise_for_result(existing, "Failed to load menu item")

    content = await file.read()
    upload = await images.upload(file.filename, content, file.content_type)
    if not upload.success:
        logger.warning(f"Image upload for menu item {item_id} failed: {upload.error_message}")
        return ImageUploadResponse(
            success=False,
            image=existing.value.image,
            message="Image upload failed, the previous image was kept",
        )

    result = await catalog.update_menu_item(db, item_id, MenuItemUpdate(image=upload.value))
    if not result.success:
        raise_for_result(result, "Failed to save menu item image")
    return ImageUploadResponse(success=True, image=result.value.image, message="Image uploaded")


# =============================================================================
# ORDERS
# =============================================================================

@router.get("/orders", response_model=AdminOrderListResponse)
async def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    _: AdminUserInfo = Depends(require_admin),
) -> AdminOrderListResponse:
    """All orders newest first, optionally filtered by status."""
    result = await orders.get_orders(db, status=status_filter)
    if not result.success:
        raise_for_result(result, "Failed to load orders")
    return AdminOrderListResponse(
        total=len(result.value),
        orders=[admin_order(o) for o in result.value],
    )


@router.get("/orders/{order_id}", response_model=AdminOrderView)
async def get_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    _: AdminUserInfo = Depends(require_admin),
) -> AdminOrderView:
    result = await orders.get_order_by_id(db, order_id)
    if not result.success:
        raise_for_result(result, "Failed to load order")
    return admin_order(result.value)


@router.patch("/orders/{order_id}/status", response_model=AdminOrderView)
async def update_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    bus: OrderEventBus = Depends(get_event_bus),
    _: AdminUserInfo = Depends(require_admin),
) -> AdminOrderView:
    result = await orders.update_order_status(db, order_id, data.status, events=bus)
    if not result.success:
        raise_for_result(result, "Failed to update order status")
    return admin_order(result.value)


@router.delete("/orders/{order_id}")
async def delete_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    bus: OrderEventBus = Depends(get_event_bus),
    _: AdminUserInfo = Depends(require_admin),
) -> dict[str, bool]:
    result = await orders.delete_order(db, order_id, events=bus)
    if not result.success:
        raise_for_result(result, "Failed to delete order")
    return {"success": True}


@router.get("/dashboard-data", response_model=DashboardData)
async def dashboard_data(
    db: AsyncSession = Depends(get_db),
    _: AdminUserInfo = Depends(require_admin),
) -> DashboardData:
    result = await orders.get_dashboard_data(db)
    if not result.success:
        raise_for_result(result, "Failed to load dashboard")
    return result.value


# =============================================================================
# LIVE ORDER FEED
# =============================================================================

@router.websocket("/ws/orders")
async def order_feed(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    auth: AuthService = Depends(get_auth),
    bus: OrderEventBus = Depends(get_event_bus),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """
    Push the full order list on connect and again after every order
    insert, update or delete.
    """
    token = token or websocket.cookies.get(get_settings().admin_cookie_name)
    user = await auth.get_current_user(token)
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    feed = AdminOrderFeed(session_factory, bus, websocket.send_json)
    logger.info(f"📡 Order feed opened for {user.email} ({bus.subscriber_count + 1} listeners)")
    pump: Optional[asyncio.Task] = None
    try:
        await feed.start()
        pump = asyncio.create_task(feed.run())
        # Inbound messages are ignored; receiving detects the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        feed.close()
        if pump is not None:
            pump.cancel()
            try:
                await pump
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(f"Order feed for {user.email} stopped: {e}")
        logger.info(f"📡 Order feed closed for {user.email}")
