"""
Shared FastAPI dependencies: visitor session, admin authentication,
service lookups and ServiceResult → HTTP error translation.
"""

import logging
from typing import NoReturn, Optional

from fastapi import Depends, HTTPException, Request, Response, status

from qrmenu.core.config import get_settings
from qrmenu.schemas import AdminUserInfo
from qrmenu.services.auth import AuthService, get_auth_service
from qrmenu.services.realtime import OrderEventBus, get_order_event_bus
from qrmenu.services.result import CONFLICT, INVALID, NOT_FOUND, ServiceResult
from qrmenu.services.state import BaseStateStorage, get_state_storage
from qrmenu.services.storage import BaseImageStorage, get_image_storage
from qrmenu.stores.session import CustomerSession, new_session_id

logger = logging.getLogger(__name__)


def get_storage() -> BaseStateStorage:
    return get_state_storage()


def get_images() -> BaseImageStorage:
    return get_image_storage()


def get_auth() -> AuthService:
    return get_auth_service()


def get_event_bus() -> OrderEventBus:
    return get_order_event_bus()


# =============================================================================
# VISITOR SESSION
# =============================================================================

def set_session_cookie(response: Response, session_id: str) -> None:
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
    )


async def get_customer_session(
    request: Request,
    response: Response,
    storage: BaseStateStorage = Depends(get_storage),
) -> CustomerSession:
    """
    Load the visitor's stores, starting a new session when the cookie is
    missing. Routes must call session.save() after changing anything.
    """
    settings = get_settings()
    session_id = request.cookies.get(settings.session_cookie_name)
    if not session_id:
        session_id = new_session_id()
        logger.debug(f"New visitor session {session_id[:8]}…")
    set_session_cookie(response, session_id)
    return await CustomerSession.load(storage, session_id)


# =============================================================================
# ADMIN AUTHENTICATION
# =============================================================================

def get_admin_token(request: Request) -> Optional[str]:
    """Session token from the Authorization header or the admin cookie."""
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(get_settings().admin_cookie_name)


async def require_admin(
    token: Optional[str] = Depends(get_admin_token),
    auth: AuthService = Depends(get_auth),
) -> AdminUserInfo:
    user = await auth.get_current_user(token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


# =============================================================================
# RESULT TRANSLATION
# =============================================================================

def raise_for_result(result: ServiceResult, message: str) -> NoReturn:
    """
    Turn a failed ServiceResult into an HTTPException.

    Backend failures only expose the generic message; not-found and
    conflict failures carry their own description.
    """
    if result.error_code == NOT_FOUND:
        raise HTTPException(status_code=404, detail=result.error_message)
    if result.error_code == CONFLICT:
        raise HTTPException(status_code=409, detail=result.error_message)
    if result.error_code == INVALID:
        raise HTTPException(status_code=400, detail=result.error_message)
    raise HTTPException(status_code=500, detail=message)
