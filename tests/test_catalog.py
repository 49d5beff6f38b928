from sqlalchemy.exc import OperationalError

from qrmenu.schemas import CategoryCreate, CategoryUpdate, MenuItemCreate, MenuItemUpdate
from qrmenu.seed import DEFAULT_CATEGORIES, DEFAULT_MENU_ITEMS, seed_menu
from qrmenu.services import catalog
from qrmenu.services.result import BACKEND_ERROR, CONFLICT, NOT_FOUND


async def test_seed_is_idempotent(db):
    first = await seed_menu(db)
    second = await seed_menu(db)

    assert first == {"categories": len(DEFAULT_CATEGORIES), "menu_items": len(DEFAULT_MENU_ITEMS)}
    assert second == {"categories": 0, "menu_items": 0}


async def test_categories_in_display_order(seeded_db):
    await catalog.create_category(seeded_db, CategoryCreate(id="promo", label="Promo", emoji="🔥", sort_order=0))

    result = await catalog.get_categories(seeded_db)

    assert result.success
    assert [c.id for c in result.value] == ["promo", "ayam", "daging", "ikan", "minuman", "nasi", "sambal"]


async def test_duplicate_category_is_a_conflict(seeded_db):
    result = await catalog.create_category(seeded_db, CategoryCreate(id="ayam", label="Ayam lagi"))
    assert not result.success
    assert result.error_code == CONFLICT


async def test_update_and_delete_category(seeded_db):
    updated = await catalog.update_category(seeded_db, "nasi", CategoryUpdate(label="Rice"))
    assert updated.value.label == "Rice"
    assert updated.value.emoji == "🍚"

    assert (await catalog.delete_category(seeded_db, "nasi")).success
    assert (await catalog.get_category(seeded_db, "nasi")).is_not_found


async def test_deleting_category_leaves_its_items(seeded_db):
    await catalog.delete_category(seeded_db, "sambal")
    items = await catalog.get_menu_items(seeded_db, category="sambal")
    assert len(items.value) == 3


async def test_category_filter_orders_by_id(seeded_db):
    result = await catalog.get_menu_items(seeded_db, category="ayam")
    ids = [item.id for item in result.value]
    assert ids == sorted(ids)
    assert [item.name for item in result.value] == [
        "Ayam Goreng",
        "Ayam Bakar",
        "Ayam Pop",
        "Ayam Rendang",
        "Ayam Gulai",
    ]


async def test_search_matches_description_only_text(seeded_db):
    result = await catalog.get_menu_items(seeded_db, search="turmeric")
    assert [item.name for item in result.value] == ["Ayam Goreng"]


async def test_search_is_case_insensitive_and_spans_categories(seeded_db):
    result = await catalog.get_menu_items(seeded_db, search="BAKAR")
    assert {item.name for item in result.value} == {"Ayam Bakar", "Ikan Bakar", "Daging Bakar"}


async def test_search_treats_wildcards_literally(seeded_db):
    result = await catalog.get_menu_items(seeded_db, search="%")
    assert result.success
    assert result.value == []


async def test_available_only_hides_sold_out(seeded_db):
    teh = (await catalog.get_menu_items(seeded_db, search="Es Teh")).value[0]
    await catalog.set_menu_item_availability(seeded_db, teh.id, False)

    visible = await catalog.get_menu_items(seeded_db, category="minuman", available_only=True)
    assert teh.id not in [item.id for item in visible.value]


async def test_toggle_availability_changes_only_the_flag(seeded_db):
    before = (await catalog.get_menu_items(seeded_db, search="Rendang Daging")).value[0]

    toggled = await catalog.toggle_menu_item_availability(seeded_db, before.id)

    after = toggled.value
    assert after.available is (not before.available)
    assert after.model_dump(exclude={"available"}) == before.model_dump(exclude={"available"})

    again = await catalog.toggle_menu_item_availability(seeded_db, before.id)
    assert again.value.available == before.available


async def test_create_update_delete_menu_item(db):
    created = await catalog.create_menu_item(
        db, MenuItemCreate(name="Sate Padang", price=25000, category_id="daging", description="Beef satay")
    )
    assert created.success
    item_id = created.value.id

    patched = await catalog.update_menu_item(db, item_id, MenuItemUpdate(price=27000, name=None))
    assert patched.value.price == 27000
    assert patched.value.name == "Sate Padang"
    assert patched.value.description == "Beef satay"

    assert (await catalog.delete_menu_item(db, item_id)).success
    missing = await catalog.get_menu_item(db, item_id)
    assert missing.error_code == NOT_FOUND


async def test_missing_item_operations_report_not_found(db):
    assert (await catalog.update_menu_item(db, 404, MenuItemUpdate(price=1))).is_not_found
    assert (await catalog.toggle_menu_item_availability(db, 404)).is_not_found
    assert (await catalog.delete_menu_item(db, 404)).is_not_found


async def test_backend_failure_is_not_an_empty_menu(db, monkeypatch):
    async def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(db, "execute", broken_execute)
    result = await catalog.get_menu_items(db)

    assert not result.success
    assert result.error_code == BACKEND_ERROR
    assert result.error_message == "Failed to load menu"
    assert result.unwrap_or([]) == []
