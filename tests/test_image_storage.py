import re

from qrmenu.services.storage import LocalImageStorage, MockImageStorage, build_object_name
from qrmenu.services.result import INVALID


def test_object_name_keeps_extension():
    name = build_object_name("Rendang Photo.JPG")
    assert re.fullmatch(r"[0-9a-f]{12}_\d{13}\.jpg", name)


def test_object_name_without_extension():
    assert build_object_name(None).endswith(".bin")
    assert build_object_name("photo").endswith(".bin")


def test_object_names_do_not_collide():
    assert len({build_object_name("a.png") for _ in range(50)}) == 50


async def test_mock_upload_returns_public_url(images):
    result = await images.upload("ayam.png", b"\x89PNG...", "image/png")

    assert result.success
    assert result.value.startswith("http://test/media/menu-images/")
    object_name = result.value.rsplit("/", 1)[-1]
    assert images.objects[object_name] == b"\x89PNG..."


async def test_empty_upload_is_invalid(images):
    result = await images.upload("ayam.png", b"", "image/png")
    assert result.error_code == INVALID
    assert images.objects == {}


async def test_storage_failure_is_a_result_not_an_exception():
    storage = MockImageStorage(bucket="menu-images", public_base_url="http://test/media/menu-images", failure_rate=1.0)
    result = await storage.upload("ayam.png", b"data", "image/png")

    assert not result.success
    assert "Simulated storage failure" in result.error_message


async def test_local_storage_writes_into_bucket(tmp_path):
    storage = LocalImageStorage(str(tmp_path), "menu-images", "http://test/media/menu-images")

    result = await storage.upload("ikan.webp", b"fish", "image/webp")

    object_name = result.value.rsplit("/", 1)[-1]
    assert (tmp_path / "menu-images" / object_name).read_bytes() == b"fish"
    assert await storage.health_check()
