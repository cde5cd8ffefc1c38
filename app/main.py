from fastapi import FastAPI
from contextlib import asynccontextmanager, suppress
import asyncio
import logging

import uvicorn

from app.config import get_settings
from app.database import get_engine, pool_status, warm_pool
from app.errors import register_exception_handlers
from app.middleware import setup_middleware
from app.services.health_service import HealthService
from app.api import products, health

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.is_release else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Starting up application...")

    # Resolve through dependency overrides like the request handlers do
    engine = app.dependency_overrides.get(get_engine, get_engine)()
    target = f"{engine.url.host}:{engine.url.port}/{engine.url.database}"
    try:
        warm_pool(engine, settings.DB_POOL_MIN_CONNS)
    except Exception as e:
        logger.error(f"Could not connect to database {target}: {e}")
        raise

    logger.info(f"Connected to database {target}")
    logger.info(
        "Database pool: max_conns=%d min_conns=%d (%s)",
        settings.DB_POOL_MAX_CONNS, settings.DB_POOL_MIN_CONNS, pool_status(engine)
    )

    probe = asyncio.create_task(
        HealthService(engine).probe_forever(
            settings.DB_HEALTH_CHECK_PERIOD, settings.HEALTH_CHECK_TIMEOUT
        )
    )

    yield

    # Shutdown
    logger.info("Shutting down application...")
    probe.cancel()
    with suppress(asyncio.CancelledError):
        await probe
    engine.dispose()
    logger.info("Database connections closed")


# Create FastAPI application
app = FastAPI(
    title="Products Catalog API",
    description="""
    Read-only catalog API over the products table:

    - **Products**: Filtered, paginated listing
    - **Categories**: Distinct category names
    - **Stats**: Price and stock aggregates
    - **Health**: Database connectivity check
    """,
    version=API_VERSION,
    docs_url=None if settings.is_release else "/docs",
    redoc_url=None if settings.is_release else "/redoc",
    lifespan=lifespan
)

setup_middleware(app, settings)
register_exception_handlers(app)

# Include API routers
app.include_router(health.router, prefix="/api")
app.include_router(products.router, prefix="/api")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "message": "Products Catalog API",
        "version": API_VERSION,
        "endpoints": {
            "health": "/api/health",
            "products": "/api/products",
            "categories": "/api/categories",
            "stats": "/api/stats"
        }
    }


def run():
    """
    Serve the app with uvicorn.

    On SIGINT/SIGTERM uvicorn stops accepting connections and gives
    in-flight requests SHUTDOWN_GRACE_PERIOD seconds to finish.
    """
    logger.info(f"Serving on http://0.0.0.0:{settings.PORT} (mode={settings.APP_MODE})")
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.PORT,
        timeout_graceful_shutdown=settings.SHUTDOWN_GRACE_PERIOD,
        access_log=False,
        log_level="info" if settings.is_release else "debug",
    )


if __name__ == "__main__":
    run()
