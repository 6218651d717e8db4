"""Application settings and configuration management.

This module provides Pydantic-based settings management that loads
configuration from environment variables or a .env file. Settings include
the Overpass endpoint and bounding box used to populate the feature store,
Mapbox isochrone parameters, CORS origins, logging level, and the mapping of
default values substituted for missing OpenStreetMap tags.

Example:
    Settings can be accessed via the cached get_settings() function:
        >>> from landmap.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.overpass_url)

    Environment variables can override defaults:
        >>> MAPBOX_TOKEN=pk.xxx
        >>> ISOCHRONE_MINUTES=15
        >>> BBOX='[55.8, -4.4, 55.9, -4.1]'
"""

import functools

import pydantic
import pydantic_settings

BBox = tuple[float, float, float, float]
LonLat = tuple[float, float]

DEFAULT_TAG_DEFAULTS: dict[str, str] = {
    "owner": "Network Rail",
    "description": "Potential development site",
    "station_name": "Unnamed Station",
    "station_kind": "station",
    "station_operator": "Unknown",
    "station_label": "Railway Station",
}


class Settings(pydantic_settings.BaseSettings):
    """Runtime configuration pulled from environment variables or defaults.

    All settings can be overridden via environment variables or .env file.

    Attributes:
        overpass_url: Overpass API interpreter endpoint.
        bbox: Query bounding box as (south, west, north, east) in degrees.
        mapbox_base_url: Base URL of the Mapbox REST API.
        mapbox_token: Mapbox access token for the isochrone API.
        isochrone_profile: Mapbox routing profile used for isochrones.
        isochrone_minutes: Travel time of the isochrone contour.
        http_timeout_seconds: Timeout applied to outgoing HTTP requests.
        allow_origins: List of allowed CORS origins (["*"] allows all).
        fetch_on_startup: Load Overpass data when the application starts.
        log_level: Root logging level name.
        map_center: Initial map center as (lon, lat) for the client.
        map_zoom: Initial map zoom for the client.
        tag_defaults: Values substituted for missing source tags.

    Example:
        Create settings with custom values:
            >>> settings = Settings(
            ...     mapbox_token="pk.test",
            ...     isochrone_minutes=15,
            ...     fetch_on_startup=False,
            ... )
    """

    overpass_url: pydantic.AnyHttpUrl | str = (
        "https://overpass-api.de/api/interpreter"
    )
    bbox: BBox = (55.8, -4.4, 55.9, -4.1)
    mapbox_base_url: pydantic.AnyHttpUrl | str = "https://api.mapbox.com"
    mapbox_token: str = ""
    isochrone_profile: str = "driving-traffic"
    isochrone_minutes: int = pydantic.Field(default=8, gt=0, le=60)
    http_timeout_seconds: float = 30.0
    allow_origins: list[str] = ["*"]
    fetch_on_startup: bool = True
    log_level: str = "INFO"
    map_center: LonLat = (-4.2518, 55.8642)
    map_zoom: int = 12
    tag_defaults: dict[str, str] = pydantic.Field(
        default_factory=lambda: dict(DEFAULT_TAG_DEFAULTS),
    )

    model_config = pydantic_settings.SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @pydantic.field_validator("tag_defaults")
    @classmethod
    def _fill_tag_defaults(cls, value: dict[str, str]) -> dict[str, str]:
        """Merge partial overrides onto the built-in tag defaults."""
        return {**DEFAULT_TAG_DEFAULTS, **value}


@functools.lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables or .env file and cached
    for the lifetime of the application. Subsequent calls return the same
    cached instance.

    Returns:
        Settings instance with all configuration values populated.

    Example:
        The settings are cached, so multiple calls return the same instance:
            >>> settings1 = get_settings()
            >>> settings2 = get_settings()
            >>> assert settings1 is settings2  # Same instance
    """
    return Settings()
