import base64

import pytest

from qrmenu.qr import build_table_link, generate_qr_png, qr_data_url, qr_download_filename

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.mark.parametrize(
    "base,table,expected",
    [
        ("https://menu.parmato.id", "A1", "https://menu.parmato.id?table=A1"),
        ("https://menu.parmato.id/", "A 1", "https://menu.parmato.id/?table=A+1"),
        ("https://menu.parmato.id/?lang=id", "B2", "https://menu.parmato.id/?lang=id&table=B2"),
        ("https://menu.parmato.id/?table=old", "C3", "https://menu.parmato.id/?table=C3"),
        ("https://menu.parmato.id", "", "https://menu.parmato.id"),
        ("https://menu.parmato.id", None, "https://menu.parmato.id"),
    ],
)
def test_build_table_link(base, table, expected):
    assert build_table_link(base, table) == expected


def test_table_value_is_url_encoded():
    assert build_table_link("http://x", "Teras&1") == "http://x?table=Teras%261"


def test_generate_png():
    png = generate_qr_png("https://menu.parmato.id?table=A1")
    assert png.startswith(PNG_SIGNATURE)


def test_data_url_wraps_png():
    png = generate_qr_png("hello")
    data_url = qr_data_url(png)
    assert data_url.startswith("data:image/png;base64,")
    assert base64.b64decode(data_url.split(",", 1)[1]) == png


@pytest.mark.parametrize(
    "table,expected",
    [(None, "menu-qr.png"), ("A1", "menu-qr-table-A1.png"), ("Teras 2/B", "menu-qr-table-Teras-2-B.png")],
)
def test_download_filename(table, expected):
    assert qr_download_filename(table) == expected
