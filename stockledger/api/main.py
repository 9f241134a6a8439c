"""
FastAPI application factory.

Creates and configures the main application instance.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from stockledger.api.middleware.error_handler import setup_exception_handlers
from stockledger.api.routes import (
    forecasts_router,
    health_router,
    inventory_router,
    movements_router,
    suppliers_router,
)
from stockledger.config import configure_logging, get_logger, get_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Migrates the database and opens the connection pool on startup,
    closes the pool on shutdown.
    """
    settings = get_settings()
    configure_logging()

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        db_path=str(settings.storage.db_path),
        negative_stock_policy=settings.ledger.negative_stock_policy,
    )

    try:
        from stockledger.infrastructure.storage.sqlite import get_pool
        from stockledger.infrastructure.storage.sqlite.migrations import run_migrations

        await run_migrations()
        logger.info("database_initialized")

        await get_pool()
        logger.info("connection_pool_ready")

    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    logger.info("application_started")

    yield

    logger.info("application_stopping")

    try:
        from stockledger.infrastructure.storage.sqlite import close_pool

        await close_pool()

    except Exception as e:
        logger.warning("connection_pool_close_failed", error=str(e))

    logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Inventory stock ledger with status tracking and depletion forecasting",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Add middleware
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    # CORS
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Register routers
    app.include_router(health_router)
    app.include_router(inventory_router)
    app.include_router(movements_router)
    app.include_router(forecasts_router)
    app.include_router(suppliers_router)

    # Root health endpoint (for k8s/docker health checks)
    @app.get("/health")
    async def root_health() -> dict[str, str]:
        """Simple health check at root level."""
        return {
            "status": "healthy",
            "version": settings.app_version,
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "stockledger.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
