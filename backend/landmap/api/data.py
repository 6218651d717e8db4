"""Data loading and map configuration endpoints.

``/api/data/refresh`` refetches parcels and stations from Overpass and
replaces the store's collections; a failed fetch answers 502 and keeps the
previous collections. ``/api/map`` tells the client where to center the
map and which isochrone travel time is in use.

Example:
    >>> client.post("/api/data/refresh").json()
    >>> # Returns: {"parcels": 182, "stations": 47}
"""

from __future__ import annotations

from typing import Any

import fastapi

from landmap.core import config
from landmap.services import ingest_overpass, overpass
from landmap.store import feature_store

router = fastapi.APIRouter(prefix="/api", tags=["data"])


def _get_store(request: fastapi.Request) -> feature_store.FeatureStore:
    """Resolve the application's feature store."""
    return request.app.state.feature_store


def _get_overpass(request: fastapi.Request) -> overpass.OverpassClient:
    """Resolve the application's Overpass client."""
    return request.app.state.overpass_client


@router.post("/data/refresh")
async def refresh_data(
    store: feature_store.FeatureStore = fastapi.Depends(_get_store),  # noqa: B008
    client: overpass.OverpassClient = fastapi.Depends(_get_overpass),  # noqa: B008
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
) -> dict[str, int]:
    """Reload parcels and stations from Overpass.

    Replacing the parcels clears the current selection.

    Returns:
        Number of parcels and stations now in the store.

    Raises:
        HTTPException: 502 if an Overpass query fails.
    """
    try:
        result = await ingest_overpass.refresh_store(
            store,
            client,
            settings.bbox,
            settings.tag_defaults,
        )
    except overpass.OverpassError as exc:
        raise fastapi.HTTPException(status_code=502, detail=str(exc)) from exc

    return result._asdict()


@router.get("/map")
async def map_config(
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
) -> dict[str, Any]:
    """Initial view and isochrone settings for the map client."""
    return {
        "center": list(settings.map_center),
        "zoom": settings.map_zoom,
        "isochrone_minutes": settings.isochrone_minutes,
    }
