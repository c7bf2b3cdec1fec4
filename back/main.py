# Standard library imports
from contextlib import asynccontextmanager

# Third-party imports
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

# Local application imports
from civiclink.api import router as api_router
from civiclink.api.internal.utils.exceptions import register_exception_handlers
from civiclink.core.db import async_engine
from civiclink.core.monitoring.logging import get_logger
from civiclink.dependancies.common import get_enrichment, get_geocoding
from civiclink.models import Base
from civiclink.settings import settings

# Set up the main application logger
logger = get_logger("civiclink")


if settings.ENVIRONMENT == "production" and settings.SENTRY_DSN:
    logger.info(f"Initializing Sentry in {settings.ENVIRONMENT} environment")
    # The logging integration may already have initialised the client in
    # core/monitoring/sentry.py; re-init with the FastAPI integration added
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[FastApiIntegration()],
        environment=settings.ENVIRONMENT,
        traces_sample_rate=1.0,  # tweak for performance
    )


# ---- FASTAPI APP CREATION ----
def custom_generate_unique_id(route: APIRoute) -> str:
    # Handle routes without tags
    if route.tags and len(route.tags) > 0:
        return f"{route.tags[0]}-{route.name}"
    else:
        return route.name or "unnamed_route"


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        # Startup
        logger.info("Starting up FastAPI application")

        if settings.STORAGE_BACKEND == "database" and settings.SQLALCHEMY_ASYNC_DATABASE_URI.startswith("sqlite"):
            # SQLite has no migration step; create the schema in place
            async with async_engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("SQLite schema ready")

        yield

        # Shutdown
        logger.info("Shutting down FastAPI application")
        await get_enrichment().close()
        await get_geocoding().close()
        await async_engine.dispose()

    # Create FastAPI app
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Civic issue reporting: reports, community votes and moderation",
        openapi_url=f"{settings.API_V1_STR}/openapi.json" if settings.ENVIRONMENT != "production" else None,
        docs_url=f"{settings.API_V1_STR}/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url=f"{settings.API_V1_STR}/redoc" if settings.ENVIRONMENT != "production" else None,
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": "1.0.0", "storage": settings.STORAGE_BACKEND}

    app.include_router(api_router)

    return app


# Create the app instance
app = create_app()
