"""QR code endpoints for printing table cards."""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import Response

from qrmenu.core.config import get_settings
from qrmenu.qr import build_table_link, generate_qr_png, qr_data_url, qr_download_filename
from qrmenu.schemas import QrLinkResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["QR"])


def _resolve(base_url: Optional[str], table: Optional[str]) -> str:
    return build_table_link(base_url or get_settings().app_base_url, table)


@router.get("/qr", response_model=QrLinkResponse)
async def qr_link(
    table: Optional[str] = Query(None, max_length=20),
    base_url: Optional[str] = Query(None, max_length=500),
) -> QrLinkResponse:
    """The link for a table and its QR code as a data URL."""
    url = _resolve(base_url, table)
    return QrLinkResponse(
        url=url,
        table=(table or "").strip() or None,
        data_url=qr_data_url(generate_qr_png(url)),
        filename=qr_download_filename(table),
    )


@router.get("/qr.png", response_class=Response)
async def qr_png(
    table: Optional[str] = Query(None, max_length=20),
    base_url: Optional[str] = Query(None, max_length=500),
) -> Response:
    """Downloadable PNG of a table's QR code."""
    url = _resolve(base_url, table)
    filename = qr_download_filename(table)
    logger.info(f"QR code generated for {url}")
    return Response(
        content=generate_qr_png(url),
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
