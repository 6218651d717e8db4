"""Data models for land parcels, railway stations, and selection events.

This module defines the core data structures held by the feature store.
Parcels are candidate vacant or brownfield sites derived from closed
OpenStreetMap ways; stations are railway nodes. Both render to GeoJSON
features whose properties match what the map client styles and labels.

Example:
    Creating a Parcel from a closed ring:
        >>> from landmap.store.models import GeoPoint, Parcel
        >>> ring = (
        ...     GeoPoint(-4.25, 55.86), GeoPoint(-4.25, 55.87),
        ...     GeoPoint(-4.24, 55.87), GeoPoint(-4.25, 55.86),
        ... )
        >>> parcel = Parcel(
        ...     id="123",
        ...     boundary=ring,
        ...     area_square_meters=1000.0,
        ...     centroid=GeoPoint(-4.2475, 55.865),
        ...     owner="Network Rail",
        ...     description="Land use: brownfield. ",
        ... )
        >>> parcel.to_feature()["properties"]["selected"]
        False
"""

from __future__ import annotations

import dataclasses
from typing import Any, NamedTuple


class GeoPoint(NamedTuple):
    """A WGS84 position in degrees, longitude first."""

    lon: float
    lat: float


Ring = tuple[GeoPoint, ...]


@dataclasses.dataclass
class Parcel:
    """A candidate development site bounded by a single closed ring.

    Only ``selected`` changes after ingestion, and only through the
    feature store's selection operations.

    Attributes:
        id: Source way id, or ``land-<index>`` when the source has none.
            Positional ids are not stable across refetches.
        boundary: Outer ring, closed, at least four points. Holes are not
            represented.
        area_square_meters: Spherical area of the boundary.
        centroid: Unweighted mean of the boundary vertices.
        owner: Owner or operator tag, or the configured default.
        description: Text assembled from the source tags.
        selected: Whether this parcel is the store's current selection.
    """

    id: str
    boundary: Ring
    area_square_meters: float
    centroid: GeoPoint
    owner: str
    description: str
    selected: bool = False

    def to_feature(self) -> dict[str, Any]:
        """Render the parcel as a GeoJSON Polygon feature."""
        return {
            "type": "Feature",
            "geometry": {
                "type": "Polygon",
                "coordinates": [[list(point) for point in self.boundary]],
            },
            "properties": {
                "id": self.id,
                "owner": self.owner,
                "area": self.area_square_meters,
                "description": self.description,
                "selected": self.selected,
                "center": list(self.centroid),
            },
        }


@dataclasses.dataclass(frozen=True)
class Station:
    """A railway, subway or tram stop node."""

    id: str
    coordinate: GeoPoint
    name: str
    kind: str
    operator: str
    description: str

    def to_feature(self) -> dict[str, Any]:
        """Render the station as a GeoJSON Point feature."""
        return {
            "type": "Feature",
            "geometry": {
                "type": "Point",
                "coordinates": list(self.coordinate),
            },
            "properties": {
                "id": self.id,
                "name": self.name,
                "type": self.kind,
                "operator": self.operator,
                "description": self.description,
            },
        }


@dataclasses.dataclass(frozen=True)
class SelectionChange:
    """Payload delivered to selection observers.

    ``parcel`` is the newly selected parcel, or None after a deselection.
    """

    is_selected: bool
    parcel: Parcel | None


def feature_collection(features: list[dict[str, Any]]) -> dict[str, Any]:
    """Wrap features in a GeoJSON FeatureCollection."""
    return {"type": "FeatureCollection", "features": features}
