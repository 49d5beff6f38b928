"""HTTP routers: customer API, admin API, QR codes and HTML pages."""

from qrmenu.api.admin import router as admin_router
from qrmenu.api.customer import router as customer_router
from qrmenu.api.pages import router as pages_router
from qrmenu.api.qr import router as qr_router

__all__ = ["admin_router", "customer_router", "pages_router", "qr_router"]
