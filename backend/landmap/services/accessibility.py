"""Public-transport accessibility scoring from isochrone polygons.

The score is a coarse, monotonic proxy for how much ground is reachable
from a parcel within the isochrone travel time:

    score = clamp(round(sqrt(area_m2) / 100), 1, 100)

Isochrone polygons are measured with the planar shoelace formula on raw
degrees, converted to square meters with a per-ring equirectangular scale.
This is deliberately cheaper than the spherical formula used for parcel
boundaries in ``landmap.utils.geometry``; the two are kept separate.

``AccessibilityAnalyzer`` owns the isochrone client and the most recent
analysis. Overlapping requests resolve last-writer-wins: each request takes
a generation number, and a result whose generation is no longer current is
discarded with ``AnalysisSupersededError``.

Example:
    Score an isochrone FeatureCollection directly:
        >>> from landmap.services import accessibility
        >>> accessibility.accessibility_score({"features": []}) is None
        True
"""

from __future__ import annotations

import dataclasses
import logging
import math
from typing import TYPE_CHECKING, Any

from landmap.utils import geometry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from landmap.services import isochrone
    from landmap.store import models

logger = logging.getLogger(__name__)

METERS_PER_DEGREE = geometry.EARTH_RADIUS_M * math.pi / 180
MIN_SCORE = 1
MAX_SCORE = 100


class AnalysisSupersededError(RuntimeError):
    """Raised when a newer request or a selection change replaced this one."""


def planar_ring_area(ring: Sequence[Sequence[float]]) -> float:
    """Approximate area of a (lon, lat) ring in square meters.

    Shoelace sum over raw degrees, scaled by meters per degree of latitude
    and by meters per degree of longitude at the ring's mean vertex
    latitude. Rings with fewer than four points measure zero.
    """
    if not ring or len(ring) < geometry.MIN_RING_POINTS:
        return 0.0

    cross = 0.0
    for p1, p2 in zip(ring, ring[1:]):
        cross += p1[0] * p2[1] - p2[0] * p1[1]

    mean_lat = sum(point[1] for point in ring) / len(ring)
    meters_per_lon = METERS_PER_DEGREE * math.cos(math.radians(mean_lat))

    return abs(cross) * METERS_PER_DEGREE * meters_per_lon / 2


def polygon_area(polygon: Sequence[Sequence[Sequence[float]]]) -> float:
    """Area of a GeoJSON polygon's outer ring; holes are ignored."""
    if not polygon:
        return 0.0
    return planar_ring_area(polygon[0])


def feature_area(feature: dict[str, Any] | None) -> float:
    """Area of a Polygon or MultiPolygon feature in square meters.

    Other geometry types, and features without coordinates, measure zero.
    """
    geom = (feature or {}).get("geometry") or {}
    coordinates = geom.get("coordinates")
    if not coordinates:
        return 0.0

    match geom.get("type"):
        case "Polygon":
            return polygon_area(coordinates)
        case "MultiPolygon":
            return sum(polygon_area(polygon) for polygon in coordinates)
        case _:
            return 0.0


def isochrone_area(collection: dict[str, Any]) -> float:
    """Total area of every feature in an isochrone FeatureCollection."""
    features = collection.get("features") or []
    return sum(feature_area(feature) for feature in features)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def accessibility_score(collection: dict[str, Any] | None) -> int | None:
    """Score the reachable area of an isochrone on a 1-100 scale.

    Args:
        collection: Isochrone FeatureCollection.

    Returns:
        Integer score between 1 and 100, or None when the collection is
        missing or has no features. None means "no score", not zero.
    """
    if not collection or not collection.get("features"):
        return None

    area = isochrone_area(collection)
    score = min(MAX_SCORE, max(MIN_SCORE, math.sqrt(area) / 100))
    return _round_half_up(score)


def score_color(score: int) -> str:
    """Red below 30, orange below 60, green otherwise."""
    if score < 30:
        return "#f44336"
    if score < 60:
        return "#ff9800"
    return "#4caf50"


@dataclasses.dataclass(frozen=True)
class AccessibilityResult:
    """Outcome of one accessibility analysis for a parcel.

    Attributes:
        parcel_id: Id of the analysed parcel.
        description: Parcel description, for display next to the score.
        minutes: Travel time of the isochrone.
        area_square_meters: Reachable area used for the score.
        score: 1-100 score, or None when the isochrone was empty.
        color: Display color for the score band, None without a score.
        isochrone: The FeatureCollection returned by the isochrone API.
    """

    parcel_id: str
    description: str
    minutes: int
    area_square_meters: float
    score: int | None
    color: str | None
    isochrone: dict[str, Any]


class AccessibilityAnalyzer:
    """Fetches isochrones for parcels and keeps the latest analysis."""

    def __init__(self, client: isochrone.IsochroneClient) -> None:
        self.client = client
        self._generation = 0
        self._target_id: str | None = None
        self._current: AccessibilityResult | None = None

    @property
    def current(self) -> AccessibilityResult | None:
        return self._current

    async def analyze(self, parcel: models.Parcel) -> AccessibilityResult:
        """Fetch the isochrone for ``parcel`` and score it.

        The result becomes the current analysis unless another analysis,
        a clear, or a selection change happened while the fetch was in
        flight.

        An analysis of a different parcel stops being current as soon as
        the request starts, so a failed fetch never leaves it attached to
        the new target.

        Raises:
            IsochroneError: If the isochrone fetch fails. A current analysis
                of the same parcel is left unchanged.
            AnalysisSupersededError: If the request was superseded.
        """
        self._generation += 1
        generation = self._generation
        if self._current is not None and self._current.parcel_id != parcel.id:
            self._current = None
        self._target_id = parcel.id

        collection = await self.client.fetch(parcel.centroid)

        if generation != self._generation:
            logger.info("Discarding superseded analysis for parcel %s", parcel.id)
            raise AnalysisSupersededError(
                f"Analysis for parcel {parcel.id} was superseded"
            )

        score = accessibility_score(collection)
        result = AccessibilityResult(
            parcel_id=parcel.id,
            description=parcel.description,
            minutes=self.client.minutes,
            area_square_meters=isochrone_area(collection),
            score=score,
            color=score_color(score) if score is not None else None,
            isochrone=collection,
        )
        self._current = result
        return result

    def clear(self) -> None:
        """Drop the current analysis and invalidate in-flight requests."""
        self._generation += 1
        self._target_id = None
        self._current = None

    def on_selection_change(self, change: models.SelectionChange) -> None:
        """Invalidate the analysis unless the same parcel stays selected."""
        if change.parcel is not None and change.parcel.id == self._target_id:
            return
        self.clear()
