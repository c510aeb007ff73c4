"""
Saved Searches - Main FastAPI Application
"""

import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI

from saved_searches.api import create_api_router
from saved_searches.core.config import get_settings
from saved_searches.core.logging import configure_logging
from saved_searches.infrastructure.providers.database_provider import (
    get_database_manager,
    reset_database_manager,
)
from saved_searches.infrastructure.providers.saved_search_provider import (
    get_mail_transport,
    get_periodic_check,
    get_saved_search_service,
    reset_saved_search_services,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    settings = get_settings()
    configure_logging(settings)
    logger.info("Starting Saved Searches API", version=app.version)

    # Initialize database first
    try:
        db_manager = await get_database_manager()
        await db_manager.create_tables()
        db_health = await db_manager.health_check()
        logger.info("Database initialized successfully", status=db_health["status"])
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        if settings.is_production():
            sys.exit(1)

    try:
        saved_search_service = await get_saved_search_service()
        await saved_search_service.ensure_default_type(settings.DEFAULT_SEARCH_TYPE)

        periodic_check = await get_periodic_check()
        if settings.CHECKS_ENABLED:
            periodic_check.start()

        mail_health = await get_mail_transport().check_health()
        logger.info(
            "All services initialized successfully",
            mail_transport=mail_health["service"],
            periodic_check=periodic_check.get_status()["status"],
        )
    except Exception as e:
        logger.error("Failed to initialize services", error=str(e))
        if settings.is_production():
            sys.exit(1)

    yield

    # Cleanup
    logger.info("Shutting down Saved Searches API")
    try:
        await reset_saved_search_services()
        await reset_database_manager()
        logger.info("Service cleanup completed")
    except Exception as e:
        logger.error("Cleanup error", error=str(e))


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Stored queries that are re-run periodically to notify their owners of new results",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url="/redoc" if not settings.is_production() else None,
        openapi_url="/openapi.json" if not settings.is_production() else None,
        lifespan=lifespan,
    )

    app.include_router(create_api_router())

    # Basic health check endpoint
    @app.get("/health")
    async def health_check():
        """Basic health check endpoint"""
        return {
            "status": "healthy",
            "version": app.version,
            "environment": settings.ENVIRONMENT,
        }

    @app.get("/health/detailed")
    async def detailed_health_check():
        """Detailed health check including database and the periodic check"""
        health_status = {
            "status": "healthy",
            "version": app.version,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "services": {}
        }

        try:
            db_manager = await get_database_manager()
            db_health = await db_manager.health_check()
            health_status["services"]["database"] = db_health
            if db_health["status"] != "healthy":
                health_status["status"] = "unhealthy"
        except Exception as e:
            health_status["services"]["database"] = {
                "status": "unhealthy",
                "error": str(e)
            }
            health_status["status"] = "unhealthy"

        periodic_check = await get_periodic_check()
        health_status["services"]["periodic_check"] = periodic_check.get_status()
        health_status["services"]["mail"] = await get_mail_transport().check_health()

        return health_status

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "saved_searches.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_config=None,  # Use our structured logging
    )
