"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

The Config model is defined in src/core/config.py.
"""

import logging
import os
from datetime import tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from src.core.config import Config, USGS_FEED_URL, validate_config
from src.core.filters import FilterParams, parse_threshold
from src.core.presentation import RECENT_COUNT, parse_sort_key


logger = logging.getLogger(__name__)


def _resolve_value(value: Any) -> Any:
    """Resolve a ${VAR} environment placeholder.

    Non-string values and plain strings are returned unchanged; unset
    variables leave the placeholder in place.
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        env_value = os.environ.get(value[2:-1])
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", value[2:-1])

    return value


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def _parse_filters(data: dict[str, Any]) -> FilterParams:
    """Parse default filter parameters from config data."""
    defaults = FilterParams()
    return FilterParams(
        min_magnitude=parse_threshold(data.get("min_magnitude", defaults.min_magnitude), "min_magnitude"),
        max_depth_km=parse_threshold(data.get("max_depth_km", defaults.max_depth_km), "max_depth_km"),
        query=str(data.get("query") or ""),
    )


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Look up a display timezone by IANA name.

    Args:
        name: Timezone name such as "America/Los_Angeles", or None

    Returns:
        tzinfo, or None for host local time

    Raises:
        ValueError: If the timezone name is unknown
    """
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {name}") from None


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object

    Raises:
        ValueError: If a value has the wrong type or an unknown sort key
    """
    feed = data.get("feed", {}) or {}
    refresh = data.get("refresh", {}) or {}
    map_data = data.get("map", {}) or {}
    initial_view = map_data.get("initial_view", {}) or {}

    return Config(
        feed_url=_resolve_value(feed.get("url", USGS_FEED_URL)),
        request_timeout_seconds=_optional_float(feed.get("timeout_seconds")),
        refresh_interval_seconds=int(refresh.get("interval_seconds", 300)),
        discard_stale_responses=bool(refresh.get("discard_stale_responses", True)),
        recent_count=int(data.get("recent_count", RECENT_COUNT)),
        locate_zoom=int(map_data.get("locate_zoom", 5)),
        layout_refresh_delay_seconds=float(map_data.get("layout_refresh_delay_seconds", 0.3)),
        initial_latitude=float(initial_view.get("latitude", 20.0)),
        initial_longitude=float(initial_view.get("longitude", 0.0)),
        initial_zoom=int(initial_view.get("zoom", 2)),
        default_filters=_parse_filters(data.get("filters", {}) or {}),
        default_sort_key=parse_sort_key(data.get("sort", "time")),
        display_timezone=data.get("display_timezone"),
    )


def _log_validation(config: Config) -> None:
    """Log configuration problems without rejecting the config."""
    result = validate_config(config)
    for error in result.critical_errors:
        logger.error("Config error in %s: %s", error.field, error.message)
    for warning in result.warnings:
        logger.warning("Config warning in %s: %s", warning.field, warning.message)


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: feed %s, refresh every %ds",
        config.feed_url,
        config.refresh_interval_seconds,
    )

    _log_validation(config)

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for container deployments without a YAML file.

    Environment variables:
        FEED_URL: GeoJSON feed URL
        REQUEST_TIMEOUT: Feed request timeout in seconds
        REFRESH_INTERVAL_SECONDS: Automatic refresh period
        MIN_MAGNITUDE: Default minimum magnitude filter
        MAX_DEPTH_KM: Default maximum depth filter
        DISPLAY_TIMEZONE: IANA timezone for timestamps

    Returns:
        Config object from environment
    """
    defaults = FilterParams()

    config = Config(
        feed_url=os.environ.get("FEED_URL", USGS_FEED_URL),
        request_timeout_seconds=_optional_float(os.environ.get("REQUEST_TIMEOUT")),
        refresh_interval_seconds=int(os.environ.get("REFRESH_INTERVAL_SECONDS", "300")),
        default_filters=FilterParams(
            min_magnitude=parse_threshold(os.environ.get("MIN_MAGNITUDE", defaults.min_magnitude), "MIN_MAGNITUDE"),
            max_depth_km=parse_threshold(os.environ.get("MAX_DEPTH_KM", defaults.max_depth_km), "MAX_DEPTH_KM"),
        ),
        display_timezone=os.environ.get("DISPLAY_TIMEZONE") or None,
    )

    _log_validation(config)

    return config
