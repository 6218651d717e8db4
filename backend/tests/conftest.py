"""Shared fixtures: Overpass-shaped elements and populated stores."""

from __future__ import annotations

from typing import Any

import pytest

from landmap.services import ingest_overpass
from landmap.store import feature_store


def way(
    way_id: int | None,
    vertices: list[tuple[float, float]],
    **tags: str,
) -> dict[str, Any]:
    """Build an Overpass ``out geom`` way element from (lon, lat) pairs."""
    element: dict[str, Any] = {
        "type": "way",
        "geometry": [{"lon": lon, "lat": lat} for lon, lat in vertices],
        "tags": tags,
    }
    if way_id is not None:
        element["id"] = way_id
    return element


def node(
    node_id: int | None,
    lon: float,
    lat: float,
    **tags: str,
) -> dict[str, Any]:
    """Build an Overpass node element."""
    element: dict[str, Any] = {"type": "node", "lon": lon, "lat": lat, "tags": tags}
    if node_id is not None:
        element["id"] = node_id
    return element


SQUARE = [(-4.26, 55.86), (-4.26, 55.861), (-4.259, 55.861), (-4.259, 55.86)]


@pytest.fixture
def parcel_elements() -> list[dict[str, Any]]:
    return [
        way(1, SQUARE, landuse="brownfield", name="Old Goods Yard"),
        way(2, SQUARE, landuse="railway", disused="yes", operator="Network Rail"),
        way(3, SQUARE, owner="Glasgow City Council", landuse="vacant"),
    ]


@pytest.fixture
def station_elements() -> list[dict[str, Any]]:
    return [
        node(10, -4.2577, 55.8591, name="Glasgow Central", railway="station"),
        node(11, -4.2508, 55.8625, railway="subway_entrance"),
    ]


@pytest.fixture
def store(
    parcel_elements: list[dict[str, Any]],
    station_elements: list[dict[str, Any]],
) -> feature_store.FeatureStore:
    store = feature_store.FeatureStore()
    store.replace_parcels(ingest_overpass.parcels_from_elements(parcel_elements))
    store.replace_stations(ingest_overpass.stations_from_elements(station_elements))
    return store


@pytest.fixture
def make_way():
    return way


@pytest.fixture
def make_node():
    return node
