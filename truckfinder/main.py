"""truckfinder — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from truckfinder.config import settings
from truckfinder.infrastructure.api.dependencies import get_geocoder
from truckfinder.infrastructure.api.routes_health import router as health_router
from truckfinder.infrastructure.api.routes_location import router as location_router
from truckfinder.infrastructure.api.routes_suggestions import router as suggestions_router
from truckfinder.infrastructure.api.routes_trucks import router as trucks_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Location service starting (geocoder: %s)", get_geocoder().name)
    yield
    logger.info("Location service stopped")


def create_app() -> FastAPI:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
    )

    app = FastAPI(
        title="truckfinder — Location Service",
        description="Address resolution, live suggestions and nearby food truck search",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS for the React frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(location_router, prefix="/api")
    app.include_router(suggestions_router, prefix="/api")
    app.include_router(trucks_router, prefix="/api")

    return app


app = create_app()
