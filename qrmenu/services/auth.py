"""
Admin Authentication Service

Email/password sign-in for staff. Passwords are stored as werkzeug
hashes; sessions are opaque random tokens kept in the state storage
with an expiry, so they work the same with memory or Redis storage.

Usage:
    from qrmenu.services.auth import get_auth_service

    auth = get_auth_service()
    result = await auth.sign_in(db, "staff@example.com", "secret")
    if result.success:
        token = result.token
"""

import logging
import secrets
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from qrmenu.core.config import get_settings
from qrmenu.models import AdminUser
from qrmenu.schemas import AdminUserInfo
from qrmenu.services.realtime import Subscription
from qrmenu.services.result import CONFLICT, ServiceResult
from qrmenu.services.state import BaseStateStorage, get_state_storage

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"

AuthStateCallback = Callable[[Optional[AdminUserInfo]], None]


@dataclass
class AuthResult:
    """
    Outcome of a sign-in attempt.

    Attributes:
        success: Whether the credentials were accepted
        token: Session token to present on later requests
        user: The signed-in user
        error_message: Why sign-in failed
    """
    success: bool
    token: Optional[str] = None
    user: Optional[AdminUserInfo] = None
    error_message: Optional[str] = None


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Sign-in, sign-out, session lookup and auth state notifications."""

    def __init__(self, storage: BaseStateStorage, session_ttl: int, key_prefix: str = "qrmenu"):
        self.storage = storage
        self.session_ttl = session_ttl
        self.key_prefix = key_prefix
        self._listeners: list[AuthStateCallback] = []

    def _session_key(self, token: str) -> str:
        return f"{self.key_prefix}:auth:session:{token}"

    def _notify(self, user: Optional[AdminUserInfo]) -> None:
        for callback in list(self._listeners):
            try:
                callback(user)
            except Exception:
                logger.exception("Auth state listener failed")

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        """
        Register a callback run with the user on sign-in and with None on
        sign-out.
        """
        self._listeners.append(callback)
        return Subscription(self._listeners, callback)

    async def sign_in(self, db: AsyncSession, email: str, password: str) -> AuthResult:
        try:
            result = await db.execute(select(AdminUser).where(AdminUser.email == _normalize_email(email)))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error signing in {email}: {e}")
            return AuthResult(success=False, error_message="Sign-in is temporarily unavailable")

        if user is None or not user.is_active or not check_password_hash(user.password_hash, password):
            logger.warning(f"Failed sign-in for {email}")
            return AuthResult(success=False, error_message=INVALID_CREDENTIALS)

        info = AdminUserInfo.model_validate(user)
        token = secrets.token_urlsafe(32)
        await self.storage.set(self._session_key(token), info.model_dump(), ttl=self.session_ttl)

        logger.info(f"Admin {info.email} signed in")
        self._notify(info)
        return AuthResult(success=True, token=token, user=info)

    async def sign_out(self, token: Optional[str]) -> bool:
        if not token:
            return False
        key = self._session_key(token)
        if await self.storage.get(key) is None:
            return False
        await self.storage.delete(key)
        logger.info("Admin signed out")
        self._notify(None)
        return True

    async def get_current_user(self, token: Optional[str]) -> Optional[AdminUserInfo]:
        if not token:
            return None
        data = await self.storage.get(self._session_key(token))
        if data is None:
            return None
        return AdminUserInfo.model_validate(data)


# =============================================================================
# ACCOUNT MANAGEMENT
# =============================================================================

async def create_admin_user(db: AsyncSession, email: str, password: str) -> ServiceResult[AdminUserInfo]:
    user = AdminUser(email=_normalize_email(email), password_hash=generate_password_hash(password))
    db.add(user)
    try:
        await db.commit()
        await db.refresh(user)
    except IntegrityError:
        await db.rollback()
        return ServiceResult.fail(f"Admin {email} already exists", code=CONFLICT)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error creating admin {email}: {e}")
        return ServiceResult.fail("Failed to create admin user")

    logger.info(f"Admin account {user.email} created")
    return ServiceResult.ok(AdminUserInfo.model_validate(user))


async def ensure_admin_user(db: AsyncSession, email: Optional[str], password: Optional[str]) -> bool:
    """
    Create the bootstrap admin account if configured and missing.

    Returns:
        True if an account was created
    """
    if not email or not password:
        return False
    existing = await db.execute(select(AdminUser.id).where(AdminUser.email == _normalize_email(email)))
    if existing.scalar_one_or_none() is not None:
        return False
    return (await create_admin_user(db, email, password)).success


@lru_cache()
def get_auth_service() -> AuthService:
    settings = get_settings()
    return AuthService(
        storage=get_state_storage(),
        session_ttl=settings.admin_session_ttl_seconds,
        key_prefix=settings.state_key_prefix,
    )


def reset_auth_service() -> None:
    get_auth_service.cache_clear()
