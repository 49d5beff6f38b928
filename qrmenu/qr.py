"""
Table QR Codes

Builds the link printed on each table and renders it as a PNG. Pure
computation; nothing here touches the database.
"""

import base64
import re
from io import BytesIO
from typing import Optional
from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qsl

import qrcode
from qrcode.constants import ERROR_CORRECT_H

QR_DARK = "#1F2937"
QR_LIGHT = "#FFFFFF"
TABLE_PARAM = "table"


def build_table_link(base_url: str, table: Optional[str] = None) -> str:
    """
    Link a customer lands on after scanning.

    >>> build_table_link("https://menu.example.com", "A 1")
    'https://menu.example.com?table=A+1'
    """
    base_url = base_url.strip()
    table = (table or "").strip()
    if not table:
        return base_url

    scheme, netloc, path, query, fragment = urlsplit(base_url)
    params = [(k, v) for k, v in parse_qsl(query, keep_blank_values=True) if k != TABLE_PARAM]
    params.append((TABLE_PARAM, table))
    return urlunsplit((scheme, netloc, path, urlencode(params), fragment))


def generate_qr_png(data: str, box_size: int = 10, border: int = 2) -> bytes:
    """Render data as a high error-correction QR code PNG."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_H,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color=QR_DARK, back_color=QR_LIGHT)

    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def qr_data_url(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def qr_download_filename(table: Optional[str] = None, prefix: str = "menu-qr") -> str:
    table = (table or "").strip()
    if not table:
        return f"{prefix}.png"
    safe = re.sub(r"[^A-Za-z0-9_-]+", "-", table).strip("-") or "table"
    return f"{prefix}-table-{safe}.png"
