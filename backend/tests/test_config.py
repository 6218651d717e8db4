"""Tests for application configuration and settings.

This module contains unit tests for the Settings Pydantic model in
landmap.core.config. It ensures that default values, tag default merging,
and get_settings caching work as expected.
"""

from __future__ import annotations

import pydantic
import pytest

from landmap.core import config


def test_settings_defaults() -> None:
    """Test that Settings has expected default values."""
    settings = config.Settings()
    assert str(settings.overpass_url) == "https://overpass-api.de/api/interpreter"
    assert settings.bbox == (55.8, -4.4, 55.9, -4.1)
    assert settings.isochrone_profile == "driving-traffic"
    assert settings.isochrone_minutes == 8
    assert settings.allow_origins == ["*"]
    assert settings.map_center == (-4.2518, 55.8642)


def test_tag_defaults_default_mapping() -> None:
    """Test the built-in tag defaults."""
    defaults = config.Settings().tag_defaults
    assert defaults["owner"] == "Network Rail"
    assert defaults["description"] == "Potential development site"
    assert defaults["station_name"] == "Unnamed Station"
    assert defaults["station_kind"] == "station"
    assert defaults["station_operator"] == "Unknown"


def test_tag_defaults_partial_override() -> None:
    """Test overriding one tag default keeps the others."""
    settings = config.Settings(tag_defaults={"owner": "Unknown"})
    assert settings.tag_defaults["owner"] == "Unknown"
    assert settings.tag_defaults["station_name"] == "Unnamed Station"


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test environment variables override defaults."""
    monkeypatch.setenv("MAPBOX_TOKEN", "pk.env")
    monkeypatch.setenv("ISOCHRONE_MINUTES", "15")
    monkeypatch.setenv("BBOX", "[1, 2, 3, 4]")
    settings = config.Settings()
    assert settings.mapbox_token == "pk.env"
    assert settings.isochrone_minutes == 15
    assert settings.bbox == (1.0, 2.0, 3.0, 4.0)


def test_isochrone_minutes_must_be_positive() -> None:
    """Test an invalid travel time is rejected."""
    with pytest.raises(pydantic.ValidationError):
        config.Settings(isochrone_minutes=0)


def test_get_settings_cached() -> None:
    """Test that get_settings returns cached instance."""
    config.get_settings.cache_clear()
    settings1 = config.get_settings()
    settings2 = config.get_settings()
    assert settings1 is settings2
    config.get_settings.cache_clear()
