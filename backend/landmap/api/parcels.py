"""Parcel query and selection API endpoints.

This module exposes the feature store's parcels to the map client as
GeoJSON and drives the single-selection state machine. Parcel features
carry ``id``, ``owner``, ``area``, ``description``, ``selected`` and
``center`` properties, which the client uses for fill styling, the info
panel and camera movement.

Example:
    Search parcels and select one:
        >>> response = client.get("/api/parcels", params={"q": "network rail"})
        >>> parcel_id = response.json()["features"][0]["properties"]["id"]
        >>> client.post(f"/api/parcels/{parcel_id}/select").json()
        >>> # Returns the selected parcel feature with "selected": true

    Toggle the same parcel off again:
        >>> client.post(f"/api/parcels/{parcel_id}/toggle").json()
        >>> # Returns: {"is_selected": false, "parcel": {...}}
"""

from __future__ import annotations

from typing import Any

import fastapi

from landmap.store import feature_store, models

router = fastapi.APIRouter(prefix="/api/parcels", tags=["parcels"])


def _get_store(request: fastapi.Request) -> feature_store.FeatureStore:
    """Resolve the application's feature store.

    Args:
        request: Incoming request; the store lives on ``app.state``.

    Returns:
        The FeatureStore created by the application factory.
    """
    return request.app.state.feature_store


def _not_found(parcel_id: str) -> fastapi.HTTPException:
    return fastapi.HTTPException(
        status_code=404,
        detail=f"Parcel {parcel_id} not found",
    )


@router.get("")
async def list_parcels(
    q: str | None = None,
    store: feature_store.FeatureStore = fastapi.Depends(_get_store),  # noqa: B008
) -> dict[str, Any]:
    """List parcels as a GeoJSON FeatureCollection.

    Args:
        q: Optional case-insensitive search over description and owner.
            Empty or missing returns every parcel.
        store: Feature store (injected via FastAPI Depends).

    Returns:
        FeatureCollection of parcel Polygon features.
    """
    return models.feature_collection(
        [parcel.to_feature() for parcel in store.search(q)]
    )


@router.get("/selected")
async def get_selected_parcel(
    store: feature_store.FeatureStore = fastapi.Depends(_get_store),  # noqa: B008
) -> dict[str, Any]:
    """Return the currently selected parcel.

    Raises:
        HTTPException: 404 when no parcel is selected.
    """
    parcel = store.selected()
    if parcel is None:
        raise fastapi.HTTPException(
            status_code=404,
            detail="No parcel selected",
        )
    return parcel.to_feature()


@router.post("/deselect")
async def deselect_parcel(
    store: feature_store.FeatureStore = fastapi.Depends(_get_store),  # noqa: B008
) -> dict[str, Any]:
    """Clear the selection.

    Deselecting when nothing is selected is a no-op and answers with a null
    parcel.

    Returns:
        ``{"is_selected": false, "parcel": <feature or null>}`` where
        ``parcel`` is the parcel that was just deselected.
    """
    parcel = store.deselect()
    return {
        "is_selected": False,
        "parcel": parcel.to_feature() if parcel is not None else None,
    }


@router.get("/{parcel_id}")
async def get_parcel(
    parcel_id: str,
    store: feature_store.FeatureStore = fastapi.Depends(_get_store),  # noqa: B008
) -> dict[str, Any]:
    """Return a single parcel feature.

    Raises:
        HTTPException: 404 if the parcel is not in the store.
    """
    parcel = store.get(parcel_id)
    if parcel is None:
        raise _not_found(parcel_id)
    return parcel.to_feature()


@router.post("/{parcel_id}/select")
async def select_parcel(
    parcel_id: str,
    store: feature_store.FeatureStore = fastapi.Depends(_get_store),  # noqa: B008
) -> dict[str, Any]:
    """Select a parcel, deselecting any other.

    Raises:
        HTTPException: 404 if the parcel is not in the store. The current
            selection is left unchanged.
    """
    parcel = store.select(parcel_id)
    if parcel is None:
        raise _not_found(parcel_id)
    return parcel.to_feature()


@router.post("/{parcel_id}/toggle")
async def toggle_parcel(
    parcel_id: str,
    store: feature_store.FeatureStore = fastapi.Depends(_get_store),  # noqa: B008
) -> dict[str, Any]:
    """Toggle a parcel's selection, as a click on the map does.

    Returns:
        ``{"is_selected": bool, "parcel": <feature>}``; ``parcel`` is the
        affected parcel with its new ``selected`` flag.

    Raises:
        HTTPException: 404 if the parcel is not in the store.
    """
    if store.get(parcel_id) is None:
        raise _not_found(parcel_id)

    parcel = store.toggle(parcel_id)
    if parcel is None:
        raise _not_found(parcel_id)
    return {"is_selected": parcel.selected, "parcel": parcel.to_feature()}
