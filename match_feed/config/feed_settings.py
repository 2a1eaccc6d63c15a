"""
Feed Settings Configuration

This module loads configuration from the packaged YAML file.
It serves as the SINGLE SOURCE OF TRUTH for all feed constants in Python.

WARNING: DO NOT hardcode the API URL, the earth radius or the distance
sentinel in other files. Always import from here.

Usage:
    from match_feed.config.feed_settings import FEED_SETTINGS

    radius = FEED_SETTINGS.geo.earth_radius_km

Environment overrides:
    FEED_SETTINGS_PATH: alternate YAML file
    MATCH_API_URL: base URL of the remote match API
"""

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parent / "feed-settings.yaml"


def _load_yaml_config() -> Dict[str, Any]:
    """Load configuration from the YAML file."""
    yaml_path = Path(os.getenv("FEED_SETTINGS_PATH", DEFAULT_SETTINGS_PATH))

    if not yaml_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {yaml_path}\n"
            "Set FEED_SETTINGS_PATH or reinstall the package."
        )

    with open(yaml_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f)


@dataclass(frozen=True)
class ApiEndpoints:
    """Remote API routes, relative to base_url."""
    matches: str
    join: str
    leave: str
    delete: str
    create: str
    players: str


@dataclass(frozen=True)
class ApiConfig:
    """Remote match API."""
    base_url: str
    timeout_seconds: float
    endpoints: ApiEndpoints

    def url(self, endpoint: str) -> str:
        """Build the absolute URL of a named endpoint."""
        return self.base_url.rstrip('/') + getattr(self.endpoints, endpoint)


@dataclass(frozen=True)
class GeoConfig:
    """Distance computation."""
    earth_radius_km: float
    distance_sentinel_km: float  # 99999


@dataclass(frozen=True)
class MatchRulesConfig:
    """Match formats and calendar window."""
    capacities: Dict[int, str]  # {8: "4v4", 10: "5v5", 12: "6v6"}
    calendar_days: int
    currency: str


@dataclass(frozen=True)
class CacheConfig:
    enabled: bool


@dataclass(frozen=True)
class FeedSettings:
    """Complete feed configuration."""
    version: str
    last_updated: str
    api: ApiConfig
    geo: GeoConfig
    matches: MatchRulesConfig
    cache: CacheConfig


def _build_config(raw_config: Dict[str, Any]) -> FeedSettings:
    """Build typed configuration from raw YAML dict."""
    endpoints = raw_config['api']['endpoints']
    return FeedSettings(
        version=str(raw_config['version']),
        last_updated=str(raw_config['last_updated']),
        api=ApiConfig(
            base_url=os.getenv("MATCH_API_URL", raw_config['api']['base_url']),
            timeout_seconds=raw_config['api']['timeout_seconds'],
            endpoints=ApiEndpoints(
                matches=endpoints['matches'],
                join=endpoints['join'],
                leave=endpoints['leave'],
                delete=endpoints['delete'],
                create=endpoints['create'],
                players=endpoints['players']
            )
        ),
        geo=GeoConfig(
            earth_radius_km=float(raw_config['geo']['earth_radius_km']),
            distance_sentinel_km=float(raw_config['geo']['distance_sentinel_km'])
        ),
        matches=MatchRulesConfig(
            capacities={int(k): str(v) for k, v in raw_config['matches']['capacities'].items()},
            calendar_days=raw_config['matches']['calendar_days'],
            currency=raw_config['matches']['currency']
        ),
        cache=CacheConfig(
            enabled=bool(raw_config['cache']['enabled'])
        )
    )


# =============================================================================
# GLOBAL CONFIGURATION INSTANCE
# =============================================================================

# Load configuration at module import time
# YAML syntax errors surface immediately
_raw_config = _load_yaml_config()
FEED_SETTINGS: FeedSettings = _build_config(_raw_config)


def get_setting(path: str) -> Union[float, int, str, bool, Dict]:
    """
    Get a setting value by dot-notation path.

    Args:
        path: Dot-notation path (e.g., 'geo.earth_radius_km')

    Returns:
        The setting value

    Example:
        >>> get_setting('geo.distance_sentinel_km')
        99999.0
    """
    keys = path.split('.')
    value: Any = FEED_SETTINGS

    for key in keys:
        if isinstance(value, dict):
            value = value[int(key)] if key.isdigit() else value[key]
        else:
            value = getattr(value, key)

    return value


def reload_settings() -> FeedSettings:
    """
    Reload configuration from YAML file.

    Useful for testing or when FEED_SETTINGS_PATH changes at runtime.

    Only this module's FEED_SETTINGS and get_setting() see the new values.
    Modules that did `from ... import FEED_SETTINGS` keep the old instance;
    pass the returned settings explicitly (FeedEngine(settings), enrich_match(...,
    settings), MatchApiClient(api=settings.api)).

    Returns:
        Updated FeedSettings instance
    """
    global FEED_SETTINGS
    raw = _load_yaml_config()
    FEED_SETTINGS = _build_config(raw)
    validate_settings(FEED_SETTINGS)
    return FEED_SETTINGS


# =============================================================================
# VALIDATION
# =============================================================================

def validate_settings(settings: Optional[FeedSettings] = None) -> None:
    """
    Validate that all required settings are present and valid.

    Raises:
        ValueError: If any setting is invalid
    """
    settings = settings or FEED_SETTINGS
    errors = []

    if not settings.api.base_url.startswith(("http://", "https://")):
        errors.append("api.base_url must be an http(s) URL")

    if settings.api.timeout_seconds <= 0:
        errors.append("api.timeout_seconds must be positive")

    if settings.geo.earth_radius_km <= 0:
        errors.append("geo.earth_radius_km must be positive")

    # The sentinel has to sort after any real great-circle distance
    max_distance = math.pi * settings.geo.earth_radius_km
    if settings.geo.distance_sentinel_km <= max_distance:
        errors.append("geo.distance_sentinel_km must exceed half the earth circumference")

    if not settings.matches.capacities:
        errors.append("matches.capacities must list at least one format")

    for capacity in settings.matches.capacities:
        if capacity <= 0 or capacity % 2:
            errors.append(f"matches.capacities: {capacity} must be a positive even number")

    if settings.matches.calendar_days < 1:
        errors.append("matches.calendar_days must be at least 1")

    if errors:
        raise ValueError("Configuration validation failed:\n" + "\n".join(errors))


# Validate on import
validate_settings()
