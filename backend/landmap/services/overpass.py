"""Overpass API client for candidate land parcels and railway stations.

Two Overpass QL queries populate the feature store: one for ways that may
be vacant or disused railway land, one for railway station nodes. Both are
bounded by a ``(south, west, north, east)`` box and return elements with
inline geometry (``out geom``).

Example:
    Fetch the raw elements for Glasgow:
        >>> client = OverpassClient("https://overpass-api.de/api/interpreter")
        >>> try:
        ...     ways = await client.fetch_parcel_elements((55.8, -4.4, 55.9, -4.1))
        ... finally:
        ...     await client.close()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from landmap.core import config

logger = logging.getLogger(__name__)

PARCEL_FILTERS = (
    'way["railway"]["disused"="yes"]',
    'way["landuse"="railway"]',
    'way["landuse"="brownfield"]',
    'way["landuse"="vacant"]',
    'way["operator"~"Network Rail|network rail"]',
    'way["owner"~"Network Rail|network rail"]',
)

STATION_FILTERS = (
    'node["railway"="station"]',
    'node["railway"="subway_entrance"]',
    'node["railway"="halt"]',
    'node["railway"="tram_stop"]',
)


class OverpassError(RuntimeError):
    """Raised when an Overpass query cannot be completed.

    Covers transport failures, HTTP error statuses, and bodies that are not
    an Overpass JSON document.
    """


def build_query(filters: tuple[str, ...], bbox: config.BBox) -> str:
    """Union the filters over a bounding box into one Overpass QL query.

    Args:
        filters: Element selectors such as ``way["landuse"="vacant"]``.
        bbox: (south, west, north, east) in degrees.

    Returns:
        Query text requesting JSON output with inline geometry.
    """
    box = ",".join(f"{value:g}" for value in bbox)
    clauses = "\n".join(f"  {selector}({box});" for selector in filters)
    return f"[out:json];\n(\n{clauses}\n);\nout geom;"


class OverpassClient:
    """Async client posting Overpass QL to an interpreter endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: config.Settings) -> OverpassClient:
        return cls(str(settings.overpass_url), settings.http_timeout_seconds)

    async def query(self, overpass_ql: str) -> list[dict[str, Any]]:
        """Run a query and return its ``elements`` list.

        Raises:
            OverpassError: On transport errors, HTTP status >= 400, or a
                response that is not JSON with an ``elements`` list.
        """
        try:
            resp = await self._http.post(self.base_url, data={"data": overpass_ql})
        except httpx.HTTPError as exc:
            logger.warning("Overpass request failed: %s", exc)
            raise OverpassError(f"Overpass request failed: {exc}") from exc

        if resp.status_code >= 400:
            logger.warning("Overpass returned HTTP %d", resp.status_code)
            raise OverpassError(f"Overpass HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise OverpassError("Overpass returned a non-JSON response") from exc

        elements = data.get("elements") if isinstance(data, dict) else None
        if not isinstance(elements, list):
            raise OverpassError("Overpass response has no elements list")
        return elements

    async def fetch_parcel_elements(
        self,
        bbox: config.BBox,
    ) -> list[dict[str, Any]]:
        return await self.query(build_query(PARCEL_FILTERS, bbox))

    async def fetch_station_elements(
        self,
        bbox: config.BBox,
    ) -> list[dict[str, Any]]:
        return await self.query(build_query(STATION_FILTERS, bbox))

    async def close(self) -> None:
        await self._http.aclose()
