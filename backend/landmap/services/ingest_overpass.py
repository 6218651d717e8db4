"""Normalization of Overpass elements into parcels and stations.

Overpass ``out geom`` responses carry a list of elements. Ways come with a
``geometry`` list of ``{"lat": ..., "lon": ...}`` vertices and become
Parcels when they form a valid closed ring; nodes carry ``lat``/``lon`` and
always become Stations. Missing tags are filled from the configured
``tag_defaults`` mapping rather than rejected, since OpenStreetMap tagging is
routinely incomplete.

Example:
    Normalize a small response and load it into a store:
        >>> from landmap.services import ingest_overpass
        >>> elements = [{
        ...     "type": "way",
        ...     "id": 42,
        ...     "tags": {"landuse": "brownfield"},
        ...     "geometry": [
        ...         {"lon": -4.25, "lat": 55.86},
        ...         {"lon": -4.25, "lat": 55.87},
        ...         {"lon": -4.24, "lat": 55.87},
        ...     ],
        ... }]
        >>> parcels = ingest_overpass.parcels_from_elements(elements)
        >>> parcels[0].description
        'Land use: brownfield. '
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, NamedTuple

from landmap.core import config
from landmap.store import models
from landmap.utils import geometry

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from landmap.services import overpass
    from landmap.store import feature_store

logger = logging.getLogger(__name__)

# (tag, label) in output order; a None label prints the bare value.
DESCRIPTION_TAGS: tuple[tuple[str, str | None], ...] = (
    ("name", None),
    ("landuse", "Land use"),
    ("railway", "Railway"),
    ("disused", "Disused"),
)


class RefreshResult(NamedTuple):
    parcels: int
    stations: int


def describe(tags: Mapping[str, Any], fallback: str) -> str:
    """Assemble a parcel description from its tags.

    Args:
        tags: OpenStreetMap tags of the way.
        fallback: Text returned when no tag contributes.

    Returns:
        Concatenated ``"<name>: "`` and ``"Label: value. "`` fragments, or
        the fallback.
    """
    description = ""
    for tag, label in DESCRIPTION_TAGS:
        value = tags.get(tag)
        if not value:
            continue
        if label is None:
            description += f"{value}: "
        else:
            description += f"{label}: {value}. "
    return description or fallback


def _element_id(element: Mapping[str, Any], prefix: str, index: int) -> str:
    raw = element.get("id")
    # OSM ids start at 1; a zero id counts as missing.
    if not raw:
        return f"{prefix}-{index}"
    return str(raw)


def _way_vertices(element: Mapping[str, Any]) -> list[geometry.LonLat]:
    return [
        (float(node["lon"]), float(node["lat"]))
        for node in element.get("geometry") or []
        if node
    ]


def parcels_from_elements(
    elements: Iterable[Mapping[str, Any]],
    tag_defaults: Mapping[str, str] | None = None,
) -> list[models.Parcel]:
    """Build Parcels from the way elements of an Overpass response.

    Ways are closed when their last vertex differs from the first. Ways
    that still have fewer than four points, or that carry no geometry, are
    dropped without raising. Nodes and other element types are ignored.
    Synthetic ids use the number of parcels accepted so far, and a repeated
    source id keeps its first occurrence.

    Args:
        elements: Raw Overpass elements.
        tag_defaults: Defaults for missing tags; the built-in mapping is
            used when omitted.

    Returns:
        Parcels in source order, all unselected.
    """
    defaults = {**config.DEFAULT_TAG_DEFAULTS, **(tag_defaults or {})}
    parcels: list[models.Parcel] = []
    seen: set[str] = set()
    dropped = 0

    for element in elements:
        if element.get("type") != "way" or not element.get("geometry"):
            continue

        ring = geometry.close_ring(_way_vertices(element))
        if not geometry.is_valid_ring(ring):
            dropped += 1
            logger.debug(
                "Dropping way %s with %d vertices",
                element.get("id"),
                len(ring),
            )
            continue

        parcel_id = _element_id(element, "land", len(parcels))
        if parcel_id in seen:
            continue
        seen.add(parcel_id)

        tags = element.get("tags") or {}
        boundary = tuple(models.GeoPoint(lon, lat) for lon, lat in ring)
        parcels.append(
            models.Parcel(
                id=parcel_id,
                boundary=boundary,
                area_square_meters=geometry.spherical_area(ring),
                centroid=models.GeoPoint(*geometry.vertex_centroid(ring)),
                owner=(
                    tags.get("owner")
                    or tags.get("operator")
                    or defaults["owner"]
                ),
                description=describe(tags, defaults["description"]),
            )
        )

    if dropped:
        logger.info("Dropped %d malformed ways during ingestion", dropped)
    return parcels


def stations_from_elements(
    elements: Iterable[Mapping[str, Any]],
    tag_defaults: Mapping[str, str] | None = None,
) -> list[models.Station]:
    """Build Stations from the node elements of an Overpass response.

    Every node is accepted; ``name``, ``railway`` and ``operator`` tags fall
    back to the configured defaults.
    """
    defaults = {**config.DEFAULT_TAG_DEFAULTS, **(tag_defaults or {})}
    stations: list[models.Station] = []

    for element in elements:
        if element.get("type") != "node":
            continue

        tags = element.get("tags") or {}
        kind = tags.get("railway") or defaults["station_kind"]
        label = tags.get("name") or defaults["station_label"]
        stations.append(
            models.Station(
                id=_element_id(element, "station", len(stations)),
                coordinate=models.GeoPoint(
                    float(element["lon"]),
                    float(element["lat"]),
                ),
                name=tags.get("name") or defaults["station_name"],
                kind=kind,
                operator=tags.get("operator") or defaults["station_operator"],
                description=f"{label} ({kind})",
            )
        )

    return stations


async def refresh_store(
    store: feature_store.FeatureStore,
    client: overpass.OverpassClient,
    bbox: config.BBox,
    tag_defaults: Mapping[str, str] | None = None,
) -> RefreshResult:
    """Fetch parcels and stations and replace the store's collections.

    Both queries complete before either collection is replaced, so a
    failed fetch leaves the store exactly as it was.

    Raises:
        OverpassError: If either query fails.
    """
    parcel_elements = await client.fetch_parcel_elements(bbox)
    station_elements = await client.fetch_station_elements(bbox)

    parcels = parcels_from_elements(parcel_elements, tag_defaults)
    stations = stations_from_elements(station_elements, tag_defaults)

    store.replace_parcels(parcels)
    store.replace_stations(stations)
    logger.info(
        "Loaded %d parcels and %d stations",
        len(parcels),
        len(stations),
    )
    return RefreshResult(parcels=len(parcels), stations=len(stations))
