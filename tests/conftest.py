"""
Shared fixtures.

Settings are read from the environment on first import, so the test
environment is fixed here before anything from qrmenu is imported.
"""

import os
import tempfile

os.environ["ENV_MODE"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["IMAGE_STORAGE_BACKEND"] = "memory"
os.environ["MEDIA_DIRECTORY"] = tempfile.mkdtemp(prefix="qrmenu-media-")
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

import httpx
import pytest
import pytest_asyncio

from qrmenu.api.deps import get_auth, get_event_bus, get_images, get_storage
from qrmenu.database import build_engine, build_session_maker, get_db, get_session_factory, init_db
from qrmenu.seed import seed_menu
from qrmenu.services.auth import AuthService, create_admin_user, reset_auth_service
from qrmenu.services.realtime import get_order_event_bus, reset_order_event_bus
from qrmenu.services.state import MemoryStateStorage, reset_state_storage
from qrmenu.services.storage import MockImageStorage, reset_image_storage

ADMIN_EMAIL = "staff@parmato.test"
ADMIN_PASSWORD = "rendang-2024"


@pytest.fixture(autouse=True)
def fresh_singletons():
    reset_order_event_bus()
    reset_auth_service()
    reset_state_storage()
    reset_image_storage()
    yield
    reset_order_event_bus()
    reset_auth_service()
    reset_state_storage()
    reset_image_storage()


@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_maker(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_db(db):
    await seed_menu(db)
    return db


@pytest.fixture
def storage():
    return MemoryStateStorage()


@pytest.fixture
def images():
    return MockImageStorage(bucket="menu-images", public_base_url="http://test/media/menu-images")


@pytest.fixture
def bus():
    # Order writes without an explicit bus publish on this same instance
    return get_order_event_bus()


@pytest.fixture
def auth(storage):
    return AuthService(storage=storage, session_ttl=3600, key_prefix="test")


@pytest_asyncio.fixture
async def admin_user(db):
    result = await create_admin_user(db, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert result.success
    return result.value


@pytest_asyncio.fixture
async def client(session_factory, storage, images, auth, bus):
    from qrmenu.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_images] = lambda: images
    app.dependency_overrides[get_auth] = lambda: auth
    app.dependency_overrides[get_event_bus] = lambda: bus

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_client(client, admin_user):
    response = await client.post("/api/admin/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client
