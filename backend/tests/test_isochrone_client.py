"""Tests for the Mapbox isochrone client."""

from __future__ import annotations

import re

import httpx
import pytest

from landmap.core import config
from landmap.services import isochrone

BASE = "https://api.mapbox.com"
ISO_URL = re.compile(r"https://api\.mapbox\.com/isochrone/v1/mapbox/.*")
COLLECTION = {"type": "FeatureCollection", "features": []}


def test_build_path() -> None:
    """Test the profile and lon,lat origin are placed in the path."""
    client = isochrone.IsochroneClient(BASE, token="pk.test", profile="walking")
    assert client.build_path((-4.25, 55.86)) == (
        "/isochrone/v1/mapbox/walking/-4.25,55.86"
    )


def test_from_settings() -> None:
    """Test the client picks up profile, minutes and token from settings."""
    settings = config.Settings(
        mapbox_token="pk.abc",
        isochrone_profile="cycling",
        isochrone_minutes=12,
    )
    client = isochrone.IsochroneClient.from_settings(settings)
    assert client.token == "pk.abc"
    assert client.profile == "cycling"
    assert client.minutes == 12


@pytest.mark.asyncio
async def test_fetch(httpx_mock) -> None:
    """Test a successful fetch sends the expected query parameters."""
    httpx_mock.add_response(url=ISO_URL, method="GET", json=COLLECTION)
    client = isochrone.IsochroneClient(BASE, token="pk.test", minutes=8)
    try:
        result = await client.fetch((-4.25, 55.86))
    finally:
        await client.close()

    assert result == COLLECTION
    request = httpx_mock.get_request()
    assert request.url.path == "/isochrone/v1/mapbox/driving-traffic/-4.25,55.86"
    assert request.url.params["contours_minutes"] == "8"
    assert request.url.params["polygons"] == "true"
    assert request.url.params["generalize"] == "0"
    assert request.url.params["access_token"] == "pk.test"


@pytest.mark.asyncio
async def test_fetch_without_token() -> None:
    """Test a missing token fails before any request is made."""
    client = isochrone.IsochroneClient(BASE, token="")
    try:
        with pytest.raises(isochrone.IsochroneError, match="token"):
            await client.fetch((0.0, 0.0))
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_fetch_http_error(httpx_mock) -> None:
    """Test an error status raises IsochroneError."""
    httpx_mock.add_response(url=ISO_URL, method="GET", status_code=401)
    client = isochrone.IsochroneClient(BASE, token="pk.bad")
    try:
        with pytest.raises(isochrone.IsochroneError, match="request failed"):
            await client.fetch((0.0, 0.0))
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_fetch_transport_error(httpx_mock) -> None:
    """Test timeouts surface as IsochroneError."""
    httpx_mock.add_exception(httpx.ReadTimeout("timed out"))
    client = isochrone.IsochroneClient(BASE, token="pk.test")
    try:
        with pytest.raises(isochrone.IsochroneError):
            await client.fetch((0.0, 0.0))
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_fetch_wrong_shape(httpx_mock) -> None:
    """Test a body that is not a FeatureCollection is rejected."""
    httpx_mock.add_response(url=ISO_URL, method="GET", json={"message": "nope"})
    client = isochrone.IsochroneClient(BASE, token="pk.test")
    try:
        with pytest.raises(isochrone.IsochroneError, match="FeatureCollection"):
            await client.fetch((0.0, 0.0))
    finally:
        await client.close()
