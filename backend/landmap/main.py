"""FastAPI application entrypoint and configuration.

This module provides the application factory that wires one feature store,
the Overpass and isochrone clients, and the accessibility analyzer into
``app.state``, includes the API routers, and exposes a health check. When
``fetch_on_startup`` is set the store is populated from Overpass during
application startup.

Example:
    The application can be run with uvicorn:
        $ uvicorn landmap.main:app --reload

    Or imported and used programmatically:
        >>> from landmap.main import create_app
        >>> app = create_app()
        >>> app.state.feature_store.all_parcels()
        []
"""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING

import fastapi
from fastapi.middleware import cors

from landmap.api import accessibility as api_accessibility
from landmap.api import data, parcels, stations
from landmap.core import config, logging_config
from landmap.services import accessibility, ingest_overpass, isochrone, overpass
from landmap.store import feature_store

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def _lifespan(app: fastapi.FastAPI) -> AsyncIterator[None]:
    """Load data on startup and close HTTP clients on shutdown.

    A failed initial load is logged and the application starts with empty
    collections; ``/api/data/refresh`` can retry it.
    """
    settings = config.get_settings()
    if settings.fetch_on_startup:
        try:
            await ingest_overpass.refresh_store(
                app.state.feature_store,
                app.state.overpass_client,
                settings.bbox,
                settings.tag_defaults,
            )
        except overpass.OverpassError:
            logger.exception("Initial Overpass load failed")

    try:
        yield
    finally:
        await app.state.overpass_client.close()
        await app.state.accessibility_analyzer.client.close()


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application.

    Sets up logging, builds a fresh FeatureStore and its collaborators,
    subscribes the accessibility analyzer to selection changes, adds CORS
    middleware and includes the API routers.

    Returns:
        Configured FastAPI application instance ready for ASGI server.

    Example:
        Each call builds an independent store:
            >>> first, second = create_app(), create_app()
            >>> first.state.feature_store is second.state.feature_store
            False
    """
    settings = config.get_settings()
    logging_config.setup_logging(settings.log_level)

    app = fastapi.FastAPI(
        title="Brownfield Land Map",
        version="0.1.0",
        lifespan=_lifespan,
    )

    store = feature_store.FeatureStore()
    analyzer = accessibility.AccessibilityAnalyzer(
        isochrone.IsochroneClient.from_settings(settings)
    )
    store.subscribe(analyzer.on_selection_change)

    app.state.feature_store = store
    app.state.overpass_client = overpass.OverpassClient.from_settings(settings)
    app.state.accessibility_analyzer = analyzer

    app.include_router(parcels.router)
    app.include_router(stations.router)
    app.include_router(api_accessibility.router)
    app.include_router(data.router)

    app.add_middleware(
        cors.CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:  # type: ignore[misc]
        """Health check endpoint for monitoring and load balancers.

        Returns:
            Dictionary with status "ok" if the service is running.
        """
        return {"status": "ok"}

    return app


app = create_app()
