"""
HTML pages: the customer menu, the admin dashboard and its sign-in page,
and the QR generator. Data is fetched by the pages from the JSON API;
the server only renders the first view.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from qrmenu.api.deps import get_admin_token, get_auth, get_storage, set_session_cookie
from qrmenu.core.config import get_settings
from qrmenu.core.currency import format_price
from qrmenu.database import get_db
from qrmenu.qr import build_table_link
from qrmenu.services import catalog
from qrmenu.services.auth import AuthService
from qrmenu.services.state import BaseStateStorage
from qrmenu.stores.session import CustomerSession, new_session_id

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"], include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.filters["price"] = format_price


@router.get("/", response_class=HTMLResponse)
async def menu_page(
    request: Request,
    table: Optional[str] = Query(None, max_length=20),
    db: AsyncSession = Depends(get_db),
    storage: BaseStateStorage = Depends(get_storage),
) -> HTMLResponse:
    """
    Customer menu. A ?table= link from a QR code fills in the table number
    unless this visitor already has one.
    """
    settings = get_settings()
    session_id = request.cookies.get(settings.session_cookie_name) or new_session_id()
    session = await CustomerSession.load(storage, session_id)
    if session.table.populate_from_link((table or "").strip()):
        await session.save(storage)
        logger.info(f"Table {session.table.table_number} set from QR link")

    categories = (await catalog.get_categories(db)).unwrap_or([])
    selected = categories[0].id if categories else None
    items = (await catalog.get_menu_items(db, category=selected)).unwrap_or([]) if selected else []

    response = templates.TemplateResponse(
        request,
        "menu.html",
        {
            "restaurant_name": settings.restaurant_name,
            "categories": categories,
            "selected_category": selected,
            "items": items,
            "table_number": session.table.table_number,
            "cart_count": session.cart.get_item_count(),
            "poll_interval_ms": int(settings.history_poll_interval_seconds * 1000),
        },
    )
    set_session_cookie(response, session_id)
    return response


@router.get("/admin/login", response_class=HTMLResponse)
async def admin_login_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "login.html",
        {"restaurant_name": get_settings().restaurant_name},
    )


@router.get("/admin", response_class=HTMLResponse)
async def admin_page(
    request: Request,
    token: Optional[str] = Depends(get_admin_token),
    auth: AuthService = Depends(get_auth),
):
    """Order dashboard; unauthenticated visitors are sent to the sign-in page."""
    user = await auth.get_current_user(token)
    if user is None:
        return RedirectResponse(url="/admin/login", status_code=303)

    return templates.TemplateResponse(
        request,
        "admin.html",
        {"restaurant_name": get_settings().restaurant_name, "user": user},
    )


@router.get("/qr", response_class=HTMLResponse)
async def qr_page(request: Request, table: Optional[str] = Query(None, max_length=20)) -> HTMLResponse:
    settings = get_settings()
    return templates.TemplateResponse(
        request,
        "qr.html",
        {
            "restaurant_name": settings.restaurant_name,
            "base_url": settings.app_base_url,
            "table": table or "",
            "link": build_table_link(settings.app_base_url, table),
        },
    )
