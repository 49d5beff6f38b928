"""
Catalog Data Access

Categories and menu items. Each function wraps one database round trip
and returns a ServiceResult; database errors are logged and returned as
failures, missing rows as not_found failures.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from qrmenu.models import Category, MenuItem
from qrmenu.schemas import (
    CategoryCreate,
    CategoryInfo,
    CategoryUpdate,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
)
from qrmenu.services.result import CONFLICT, NOT_FOUND, ServiceResult

logger = logging.getLogger(__name__)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# =============================================================================
# CATEGORIES
# =============================================================================

async def get_categories(db: AsyncSession) -> ServiceResult[list[CategoryInfo]]:
    """All categories in display order (sort_order ascending)."""
    try:
        result = await db.execute(select(Category).order_by(Category.sort_order.asc(), Category.id.asc()))
        categories = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching categories: {e}")
        return ServiceResult.fail("Failed to load categories")
    return ServiceResult.ok([CategoryInfo.model_validate(c) for c in categories])


async def get_category(db: AsyncSession, category_id: str) -> ServiceResult[CategoryInfo]:
    try:
        category = await db.get(Category, category_id)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching category {category_id}: {e}")
        return ServiceResult.fail("Failed to load category")
    if category is None:
        return ServiceResult.fail(f"Category '{category_id}' not found", code=NOT_FOUND)
    return ServiceResult.ok(CategoryInfo.model_validate(category))


async def create_category(db: AsyncSession, data: CategoryCreate) -> ServiceResult[CategoryInfo]:
    category = Category(**data.model_dump())
    db.add(category)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Category '{data.id}' already exists: {e.orig}")
        return ServiceResult.fail(f"Category '{data.id}' already exists", code=CONFLICT)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error creating category: {e}")
        return ServiceResult.fail("Failed to create category")

    logger.info(f"Category '{category.id}' created")
    return ServiceResult.ok(CategoryInfo.model_validate(category))


async def update_category(db: AsyncSession, category_id: str, data: CategoryUpdate) -> ServiceResult[CategoryInfo]:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    try:
        category = await db.get(Category, category_id)
        if category is None:
            return ServiceResult.fail(f"Category '{category_id}' not found", code=NOT_FOUND)
        for field_name, value in changes.items():
            setattr(category, field_name, value)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error updating category {category_id}: {e}")
        return ServiceResult.fail("Failed to update category")
    return ServiceResult.ok(CategoryInfo.model_validate(category))


async def delete_category(db: AsyncSession, category_id: str) -> ServiceResult[bool]:
    """
    Delete a category.

    Menu items that reference it are left untouched and keep pointing at
    the removed slug.
    """
    try:
        category = await db.get(Category, category_id)
        if category is None:
            return ServiceResult.fail(f"Category '{category_id}' not found", code=NOT_FOUND)
        await db.delete(category)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error deleting category {category_id}: {e}")
        return ServiceResult.fail("Failed to delete category")

    logger.info(f"Category '{category_id}' deleted")
    return ServiceResult.ok(True)


# =============================================================================
# MENU ITEMS
# =============================================================================

async def get_menu_items(
    db: AsyncSession,
    category: Optional[str] = None,
    search: Optional[str] = None,
    available_only: bool = False,
) -> ServiceResult[list[MenuItemResponse]]:
    """
    List menu items.

    Args:
        category: Only items of this category slug
        search: Case-insensitive substring of name or description
        available_only: Hide items marked unavailable
    """
    query = select(MenuItem)

    if category:
        query = query.where(MenuItem.category_id == category)

    term = (search or "").strip()
    if term:
        pattern = f"%{_escape_like(term)}%"
        query = query.where(
            or_(
                MenuItem.name.ilike(pattern, escape="\\"),
                MenuItem.description.ilike(pattern, escape="\\"),
            )
        )

    if available_only:
        query = query.where(MenuItem.available.is_(True))

    query = query.order_by(MenuItem.id.asc())

    try:
        result = await db.execute(query)
        items = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching menu items: {e}")
        return ServiceResult.fail("Failed to load menu")
    return ServiceResult.ok([MenuItemResponse.model_validate(item) for item in items])


async def get_menu_item(db: AsyncSession, item_id: int) -> ServiceResult[MenuItemResponse]:
    try:
        item = await db.get(MenuItem, item_id)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching menu item {item_id}: {e}")
        return ServiceResult.fail("Failed to load menu item")
    if item is None:
        return ServiceResult.fail(f"Menu item #{item_id} not found", code=NOT_FOUND)
    return ServiceResult.ok(MenuItemResponse.model_validate(item))


async def create_menu_item(db: AsyncSession, data: MenuItemCreate) -> ServiceResult[MenuItemResponse]:
    item = MenuItem(**data.model_dump())
    db.add(item)
    try:
        await db.commit()
        await db.refresh(item)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error creating menu item: {e}")
        return ServiceResult.fail("Failed to create menu item")

    logger.info(f"Menu item #{item.id} '{item.name}' created")
    return ServiceResult.ok(MenuItemResponse.model_validate(item))


async def update_menu_item(db: AsyncSession, item_id: int, data: MenuItemUpdate) -> ServiceResult[MenuItemResponse]:
    """
    Patch a menu item.

    Only fields present in the request are written; updated_at is
    always refreshed.
    """
    changes = data.model_dump(exclude_unset=True)
    # name/price/category can't be cleared, only replaced
    for required in ("name", "price", "category_id", "available"):
        if changes.get(required, ...) is None:
            changes.pop(required)

    try:
        item = await db.get(MenuItem, item_id)
        if item is None:
            return ServiceResult.fail(f"Menu item #{item_id} not found", code=NOT_FOUND)
        for field_name, value in changes.items():
            setattr(item, field_name, value)
        item.updated_at = datetime.now(timezone.utc)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error updating menu item {item_id}: {e}")
        return ServiceResult.fail("Failed to update menu item")
    return ServiceResult.ok(MenuItemResponse.model_validate(item))


async def set_menu_item_availability(db: AsyncSession, item_id: int, available: bool) -> ServiceResult[MenuItemResponse]:
    return await update_menu_item(db, item_id, MenuItemUpdate(available=available))


async def toggle_menu_item_availability(db: AsyncSession, item_id: int) -> ServiceResult[MenuItemResponse]:
    """Flip the available flag, leaving every other field as it is."""
    current = await get_menu_item(db, item_id)
    if not current.success:
        return current
    return await set_menu_item_availability(db, item_id, not current.value.available)


async def delete_menu_item(db: AsyncSession, item_id: int) -> ServiceResult[bool]:
    try:
        item = await db.get(MenuItem, item_id)
        if item is None:
            return ServiceResult.fail(f"Menu item #{item_id} not found", code=NOT_FOUND)
        await db.delete(item)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error deleting menu item {item_id}: {e}")
        return ServiceResult.fail("Failed to delete menu item")

    logger.info(f"Menu item #{item_id} deleted")
    return ServiceResult.ok(True)
