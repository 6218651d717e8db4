"""Railway station API endpoint.

Stations are served as a GeoJSON FeatureCollection of Point features whose
``name`` property labels the map symbol and whose ``description`` fills the
popup shown on click.

Example:
    >>> response = client.get("/api/stations")
    >>> response.json()["features"][0]["properties"]["description"]
    'Glasgow Central (station)'
"""

from __future__ import annotations

from typing import Any

import fastapi

from landmap.store import feature_store, models

router = fastapi.APIRouter(prefix="/api/stations", tags=["stations"])


def _get_store(request: fastapi.Request) -> feature_store.FeatureStore:
    """Resolve the application's feature store."""
    return request.app.state.feature_store


@router.get("")
async def list_stations(
    store: feature_store.FeatureStore = fastapi.Depends(_get_store),  # noqa: B008
) -> dict[str, Any]:
    """List every station as a GeoJSON FeatureCollection."""
    return models.feature_collection(
        [station.to_feature() for station in store.all_stations()]
    )
