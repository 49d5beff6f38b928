"""
FastAPI Application Entry Point

QR table menu: customers scan a table's QR code, browse the menu, fill a
cart and place an order; staff follow orders live on the admin dashboard.

Endpoints:
    - GET  /: Customer menu page (reads ?table= from the QR link)
    - /api/...: Menu, cart, table, checkout and order history
    - /api/admin/...: Sign-in, catalog management, orders, live feed
    - GET  /api/qr, /api/qr.png: Table QR codes
    - GET  /admin: Order dashboard
    - GET  /health: System health check

Version: 1.0.0
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

# Windows-specific event loop policy
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Internal imports
from qrmenu.api import admin_router, customer_router, pages_router, qr_router
from qrmenu.api.deps import get_images, get_storage
from qrmenu.core.config import get_settings, setup_logging
from qrmenu.database import async_session_maker, engine, get_db, init_db
from qrmenu.schemas import HealthResponse
from qrmenu.services.auth import ensure_admin_user
from qrmenu.services.state import BaseStateStorage, get_state_storage
from qrmenu.services.storage import BaseImageStorage, get_image_storage

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    # Initialize database
    await init_db()
    logger.info("✅ Database initialized")

    async with async_session_maker() as session:
        if await ensure_admin_user(session, settings.admin_email, settings.admin_password):
            logger.info(f"✅ Bootstrap admin {settings.admin_email} created")

    # Log service configuration
    state_storage = get_state_storage()
    image_storage = get_image_storage()
    logger.info(f"✅ State Storage: {state_storage.provider_name}")
    logger.info(f"✅ Image Storage: {image_storage.provider_name}")

    # Validate production config
    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await state_storage.close()
    await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "QR table menu and ordering. Customers order from their table; "
        "staff manage the menu and follow orders live."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded menu images
Path(settings.media_directory).mkdir(parents=True, exist_ok=True)
app.mount(
    "/" + settings.media_url_prefix.strip("/"),
    StaticFiles(directory=settings.media_directory),
    name="media",
)

app.include_router(customer_router)
app.include_router(admin_router)
app.include_router(qr_router)
app.include_router(pages_router)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/api", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"🍛 Welcome to {settings.restaurant_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "menu": "/",
        "dashboard": "/admin",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    storage: BaseStateStorage = Depends(get_storage),
    images: BaseImageStorage = Depends(get_images),
) -> HealthResponse:
    """Verify all system components are operational."""

    # Check database
    db_status = "healthy"
    try:
        await db.execute(select(1))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    # Check session state storage
    state_status = "healthy" if await storage.health_check() else "unhealthy"

    # Check image storage
    image_status = "healthy" if await images.health_check() else "unhealthy"

    overall = "operational" if all(
        s == "healthy" for s in [db_status, state_status, image_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        state_storage=state_status,
        image_storage=image_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "qrmenu.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    run()
