"""
Main FastAPI application
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import logging

from app.core.config import settings
from app.core.database import init_db, close_db, async_session_maker
from app.api import orders as orders_api
from app.api import settings as settings_api
from app.api import stock as stock_api
from app.services import app_settings
from app.services.entitlements import EntitlementService
from app.services.preference_store import migrate_legacy_preferences
from app.services.reminders import ReminderScheduler
from app.services.sample_data import DemoDataService

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def _load_stored_state() -> bool:
    """Migrate legacy preferences and read the persisted demo mode flag."""
    demo_enabled = settings.DEMO_MODE_DEFAULT
    try:
        async with async_session_maker() as db:
            migrated = await migrate_legacy_preferences(db)
            if migrated:
                logger.info("Migrated legacy field preferences: %s", ", ".join(migrated))
            demo_enabled = await app_settings.get_demo_mode(db)
    except SQLAlchemyError:
        logger.exception("Could not read stored settings; using defaults")
    return demo_enabled


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifecycle manager for the application.
    Builds the shared services on startup and closes them on shutdown.
    """
    # Startup
    logger.info("Starting Ordernise application...")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    # Initialize database (in production, use Alembic migrations instead)
    if settings.DEBUG:
        logger.warning("Debug mode: Auto-creating database tables")
        await init_db()

    demo_enabled = await _load_stored_state()
    app.state.demo_data = DemoDataService(enabled=demo_enabled, seed=settings.SAMPLE_DATA_SEED)
    app.state.reminders = ReminderScheduler(authorized=settings.NOTIFICATIONS_AUTHORIZED)
    app.state.entitlements = EntitlementService(
        is_subscribed=settings.IS_SUBSCRIBED,
        stock_limit=settings.FREE_TIER_STOCK_LIMIT,
        category_limit=settings.FREE_TIER_CATEGORY_LIMIT,
    )
    logger.info("Demo mode: %s", demo_enabled)

    yield

    # Shutdown
    logger.info("Shutting down Ordernise application...")
    app.state.demo_data.close()
    app.state.reminders.close()
    app.state.entitlements.close()
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Order & Inventory Management for Small Sellers",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request, exc: Exception):
    """
    Global exception handler - never expose internal errors to clients.
    Log details server-side, return generic message to client.
    """
    logger.error(f"Unhandled error: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "detail": "An internal error occurred. Please try again later."
        }
    )


# Include routers
app.include_router(
    settings_api.router,
    prefix="/api/settings",
    tags=["settings"]
)
app.include_router(
    stock_api.router,
    prefix="/api/stock",
    tags=["stock"]
)
app.include_router(
    orders_api.router,
    prefix="/api/orders",
    tags=["orders"]
)


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "app": settings.APP_NAME,
        "version": settings.VERSION,
        "status": "healthy"
    }


@app.get("/health")
async def health_check():
    """Detailed health check"""
    return {
        "status": "healthy",
        "database": "connected",
        "debug_mode": settings.DEBUG
    }
