"""Spherical geometry helpers for land parcel boundaries.

Coordinates are ``(lon, lat)`` pairs in WGS84 degrees, the order used by
GeoJSON and by Overpass ``out geom`` output once converted.

Example:
    Close a ring and measure it:
        >>> from landmap.utils import geometry
        >>> ring = geometry.close_ring([(0, 0), (0, 1), (1, 1), (1, 0)])
        >>> len(ring)
        5
        >>> geometry.spherical_area(ring)  # doctest: +ELLIPSIS
        61818...
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

EARTH_RADIUS_M = 6371000.0
MIN_RING_POINTS = 4

LonLat = tuple[float, float]


def close_ring(points: Sequence[LonLat]) -> list[LonLat]:
    """Return the vertices with the first one appended if the ring is open.

    Lines of two points or fewer are returned unchanged; they can never
    become a valid polygon.

    Args:
        points: Boundary vertices as (lon, lat) pairs.

    Returns:
        New list of vertices whose last point equals the first one whenever
        more than two vertices were given.
    """
    ring = [(float(lon), float(lat)) for lon, lat in points]
    if len(ring) > 2 and ring[0] != ring[-1]:
        ring.append(ring[0])
    return ring


def is_valid_ring(ring: Sequence[LonLat]) -> bool:
    """Check that a ring is closed and has at least four points."""
    return len(ring) >= MIN_RING_POINTS and ring[0] == ring[-1]


def spherical_area(ring: Sequence[LonLat]) -> float:
    """Area enclosed by a ring on the sphere, in square meters.

    Accumulates the spherical excess term
    ``(lon2 - lon1) * sin((lat1 + lat2) / 2)`` over consecutive vertex pairs
    in radians, scales by ``R**2 / 2`` and returns the absolute value.
    Rings with fewer than three points have no area.

    Args:
        ring: Closed ring of (lon, lat) pairs in degrees.

    Returns:
        Non-negative area in square meters.
    """
    if len(ring) < 3:
        return 0.0

    radians = [(math.radians(lon), math.radians(lat)) for lon, lat in ring]

    total = 0.0
    for (lon1, lat1), (lon2, lat2) in zip(radians, radians[1:]):
        total += (lon2 - lon1) * math.sin((lat1 + lat2) / 2)

    return abs(total * EARTH_RADIUS_M * EARTH_RADIUS_M / 2)


def vertex_centroid(ring: Sequence[LonLat]) -> LonLat:
    """Arithmetic mean of every vertex, the closing vertex included.

    This is not the area-weighted centroid; map clients center the camera
    on this value.

    Raises:
        ValueError: If the ring has no vertices.
    """
    if not ring:
        raise ValueError("Cannot compute the centroid of an empty ring")

    sum_lon = sum(lon for lon, _ in ring)
    sum_lat = sum(lat for _, lat in ring)
    return (sum_lon / len(ring), sum_lat / len(ring))
