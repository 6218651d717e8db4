"""Accessibility analysis API endpoints.

An analysis fetches the isochrone around a parcel's centroid and scores the
reachable area from 1 to 100. The latest analysis is kept until it is
cleared, superseded by another request, or invalidated by a selection
change.

Example:
    Analyse a parcel:
        >>> response = client.post("/api/parcels/123/accessibility")
        >>> response.json()
        >>> # Returns: {"parcel_id": "123", "minutes": 8, "score": 42,
        >>> #           "color": "#ff9800", "isochrone": {...}, ...}

    Hide the isochrone again:
        >>> client.delete("/api/accessibility")
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

import fastapi

from landmap.services import accessibility, isochrone
from landmap.store import feature_store

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(tags=["accessibility"])


def _get_store(request: fastapi.Request) -> feature_store.FeatureStore:
    """Resolve the application's feature store."""
    return request.app.state.feature_store


def _get_analyzer(
    request: fastapi.Request,
) -> accessibility.AccessibilityAnalyzer:
    """Resolve the application's accessibility analyzer."""
    return request.app.state.accessibility_analyzer


@router.post("/api/parcels/{parcel_id}/accessibility")
async def analyze_parcel(
    parcel_id: str,
    store: feature_store.FeatureStore = fastapi.Depends(_get_store),  # noqa: B008
    analyzer: accessibility.AccessibilityAnalyzer = fastapi.Depends(  # noqa: B008
        _get_analyzer
    ),
) -> dict[str, Any]:
    """Fetch an isochrone for a parcel and score it.

    Only the selected parcel can be analysed. The score is null when the
    isochrone came back empty. The feature store is never modified by
    this endpoint.

    Args:
        parcel_id: Parcel to analyse.
        store: Feature store (injected via FastAPI Depends).
        analyzer: Accessibility analyzer (injected via FastAPI Depends).

    Returns:
        The analysis result as a dictionary.

    Raises:
        HTTPException: 404 if the parcel is unknown, 409 if it is not the
            selected parcel or a newer request superseded this one, 502 if
            the isochrone service fails.
    """
    parcel = store.get(parcel_id)
    if parcel is None:
        raise fastapi.HTTPException(
            status_code=404,
            detail=f"Parcel {parcel_id} not found",
        )
    if store.selected_id != parcel_id:
        raise fastapi.HTTPException(
            status_code=409,
            detail=f"Parcel {parcel_id} is not selected",
        )

    try:
        result = await analyzer.analyze(parcel)
    except isochrone.IsochroneError as exc:
        raise fastapi.HTTPException(status_code=502, detail=str(exc)) from exc
    except accessibility.AnalysisSupersededError as exc:
        raise fastapi.HTTPException(status_code=409, detail=str(exc)) from exc

    return dataclasses.asdict(result)


@router.get("/api/accessibility")
async def current_analysis(
    analyzer: accessibility.AccessibilityAnalyzer = fastapi.Depends(  # noqa: B008
        _get_analyzer
    ),
) -> dict[str, Any] | None:
    """Return the current analysis, or null when none is shown."""
    if analyzer.current is None:
        return None
    return dataclasses.asdict(analyzer.current)


@router.delete("/api/accessibility", status_code=204)
async def clear_analysis(
    analyzer: accessibility.AccessibilityAnalyzer = fastapi.Depends(  # noqa: B008
        _get_analyzer
    ),
) -> None:
    """Drop the current analysis."""
    analyzer.clear()
