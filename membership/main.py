"""
Membership Accounts - FastAPI Application
Main entry point for the membership account store service.
Exposes user account registration, lookup, update, deletion and search.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from membership.core.config import is_development, is_production, settings
from membership.core.logging import get_logger, setup_logging
from membership.infrastructure.database.mongo_client import mongo_client

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    setup_logging()
    if settings.MONGODB_CREATE_INDEXES:
        await mongo_client.ensure_indexes()
    yield
    # Shutdown
    mongo_client.disconnect()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Membership account store backed by MongoDB",
        debug=settings.DEBUG,
        version="1.0.0",
        docs_url="/docs" if not is_production() else None,
        redoc_url="/redoc" if not is_production() else None,
        openapi_url="/openapi.json" if not is_production() else None,
        lifespan=lifespan,
    )

    logger.info(f"CORS configured with origins: {settings.ALLOWED_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from membership.api.routers import account_router

    app.include_router(
        account_router.router, prefix="/api/v1/accounts", tags=["Accounts"]
    )

    @app.get("/")
    async def root():
        """Root endpoint for health check."""
        return {
            "message": "Membership Accounts API",
            "version": "1.0.0",
            "status": "healthy",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "accounts_collection": settings.ACCOUNTS_COLLECTION,
            "require_unique_email": settings.REQUIRE_UNIQUE_EMAIL,
        }

    return app


# Create the FastAPI app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "membership.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=is_development(),
        log_level="info",
    )
