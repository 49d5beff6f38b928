"""
Default Menu

Starter catalog for a new installation: six categories of Padang dishes
priced in rupiah. Seeding is idempotent; categories and items that
already exist (by slug / by name) are left alone.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from qrmenu.models import Category, MenuItem

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"id": "ayam", "label": "Ayam", "emoji": "🍗", "sort_order": 1},
    {"id": "daging", "label": "Daging", "emoji": "🥩", "sort_order": 2},
    {"id": "ikan", "label": "Ikan", "emoji": "🐟", "sort_order": 3},
    {"id": "minuman", "label": "Minuman", "emoji": "🥤", "sort_order": 4},
    {"id": "nasi", "label": "Nasi", "emoji": "🍚", "sort_order": 5},
    {"id": "sambal", "label": "Sambal", "emoji": "🌶️", "sort_order": 6},
]

DEFAULT_MENU_ITEMS = [
    ("ayam", "Ayam Goreng", 15000, "Fried chicken in turmeric spices, crisp outside and tender inside"),
    ("ayam", "Ayam Bakar", 18000, "Grilled chicken with hot and fragrant rica-rica spices"),
    ("ayam", "Ayam Pop", 20000, "Padang-style steamed then fried chicken with pale golden skin"),
    ("ayam", "Ayam Rendang", 22000, "Chicken slow-cooked in rich rendang spices"),
    ("ayam", "Ayam Gulai", 19000, "Chicken in thick, aromatic yellow curry"),
    ("daging", "Rendang Daging", 28000, "The classic Padang beef rendang"),
    ("daging", "Dendeng Balado", 30000, "Thin crispy beef with spicy balado chili"),
    ("daging", "Gulai Daging", 25000, "Beef in yellow curry sauce"),
    ("daging", "Kalio Daging", 26000, "Beef in a medium-dry coconut sauce"),
    ("daging", "Daging Bakar", 27000, "Grilled beef with smoky Padang seasoning"),
    ("ikan", "Ikan Goreng", 18000, "Crispy fried fish with yellow spices"),
    ("ikan", "Ikan Bakar", 22000, "Grilled fish with fresh hot sambal"),
    ("ikan", "Gulai Ikan", 24000, "Fish in savory yellow curry"),
    ("ikan", "Ikan Asam Padeh", 26000, "Fish in sour and spicy Minang broth"),
    ("ikan", "Ikan Balado", 25000, "Fried fish topped with red balado chili"),
    ("minuman", "Es Teh Manis", 5000, "Iced sweet tea"),
    ("minuman", "Teh Tawar Hangat", 3000, "Hot unsweetened tea"),
    ("minuman", "Es Jeruk", 8000, "Fresh squeezed iced orange"),
    ("minuman", "Kelapa Muda", 12000, "Young coconut water served in the shell"),
    ("minuman", "Es Campur", 15000, "Shaved ice with mixed toppings"),
    ("nasi", "Nasi Putih", 5000, "Warm steamed white rice"),
    ("nasi", "Nasi Uduk", 8000, "Rice cooked in coconut milk and spices"),
    ("sambal", "Sambal Hijau", 5000, "Fresh green chili sambal"),
    ("sambal", "Sambal Merah", 5000, "Red chili sambal with shallots"),
    ("sambal", "Sambal Lado", 6000, "Lado sambal with stink beans"),
]


async def seed_menu(db: AsyncSession) -> dict[str, int]:
    """
    Insert the default categories and menu items that are missing.

    Returns:
        Counts of inserted categories and items
    """
    existing_categories = set((await db.execute(select(Category.id))).scalars().all())
    existing_items = set((await db.execute(select(MenuItem.name))).scalars().all())

    categories = [Category(**c) for c in DEFAULT_CATEGORIES if c["id"] not in existing_categories]
    items = [
        MenuItem(category_id=category, name=name, price=price, description=description, available=True)
        for category, name, price, description in DEFAULT_MENU_ITEMS
        if name not in existing_items
    ]

    db.add_all(categories + items)
    await db.commit()

    logger.info(f"🌱 Seeded {len(categories)} categories and {len(items)} menu items")
    return {"categories": len(categories), "menu_items": len(items)}
