"""Mapbox Isochrone API client.

Fetches the area reachable from a point within a travel time as a GeoJSON
FeatureCollection of polygons. Mapbox has no public-transport profile;
``driving-traffic`` is used as the urban stand-in by default.

Example:
    >>> client = IsochroneClient(
    ...     "https://api.mapbox.com", token="pk.xxx", minutes=8,
    ... )
    >>> collection = await client.fetch((-4.2518, 55.8642))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from landmap.core import config
    from landmap.store import models

logger = logging.getLogger(__name__)


class IsochroneError(RuntimeError):
    """Raised when an isochrone cannot be fetched."""


class IsochroneClient:
    """Async client for ``/isochrone/v1/mapbox/{profile}``."""

    def __init__(
        self,
        base_url: str,
        token: str,
        profile: str = "driving-traffic",
        minutes: int = 8,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = token
        self.profile = profile
        self.minutes = minutes
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: config.Settings) -> IsochroneClient:
        return cls(
            str(settings.mapbox_base_url),
            token=settings.mapbox_token,
            profile=settings.isochrone_profile,
            minutes=settings.isochrone_minutes,
            timeout_seconds=settings.http_timeout_seconds,
        )

    def build_path(self, center: models.GeoPoint | tuple[float, float]) -> str:
        lon, lat = center
        return f"/isochrone/v1/mapbox/{self.profile}/{lon},{lat}"

    async def fetch(
        self,
        center: models.GeoPoint | tuple[float, float],
    ) -> dict[str, Any]:
        """Fetch the isochrone polygon(s) around ``center``.

        Args:
            center: Origin as (lon, lat).

        Returns:
            The decoded FeatureCollection.

        Raises:
            IsochroneError: If no token is configured, the request fails,
                or the body is not a FeatureCollection.
        """
        if not self.token:
            raise IsochroneError("Mapbox token is not configured")

        params = {
            "contours_minutes": str(self.minutes),
            "polygons": "true",
            "generalize": "0",
            "access_token": self.token,
        }
        try:
            resp = await self._http.get(self.build_path(center), params=params)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("Isochrone request failed: %s", exc)
            raise IsochroneError(f"Isochrone request failed: {exc}") from exc
        except ValueError as exc:
            raise IsochroneError("Isochrone response is not JSON") from exc

        if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
            raise IsochroneError("Isochrone response is not a FeatureCollection")
        return data

    async def close(self) -> None:
        await self._http.aclose()
