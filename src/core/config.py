"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field

from src.core.filters import FilterParams
from src.core.presentation import RECENT_COUNT, SortKey


# USGS summary feed with every event from the past day
USGS_FEED_URL = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/all_day.geojson"


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        feed_url: GeoJSON feed to fetch snapshots from
        request_timeout_seconds: Feed request timeout, None to wait indefinitely
        refresh_interval_seconds: Period of the automatic refresh timer
        recent_count: Entries in the summary panel
        locate_zoom: Zoom level used when an entry is selected
        layout_refresh_delay_seconds: Delay before the map recomputes its size
        initial_latitude: Initial map center latitude
        initial_longitude: Initial map center longitude
        initial_zoom: Initial map zoom level
        default_filters: Filters in effect at startup
        default_sort_key: List ordering in effect at startup
        display_timezone: IANA timezone for timestamps, None for host local time
        discard_stale_responses: Drop responses older than the newest render
    """
    feed_url: str = USGS_FEED_URL
    request_timeout_seconds: float | None = None
    refresh_interval_seconds: int = 300
    recent_count: int = RECENT_COUNT
    locate_zoom: int = 5
    layout_refresh_delay_seconds: float = 0.3
    initial_latitude: float = 20.0
    initial_longitude: float = 0.0
    initial_zoom: int = 2
    default_filters: FilterParams = field(default_factory=FilterParams)
    default_sort_key: SortKey = SortKey.TIME
    display_timezone: str | None = None
    discard_stale_responses: bool = True


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lon: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lon: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lon <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lon} out of range [-180, 180]",
        ))

    return errors


def validate_zoom(zoom: int, field_name: str) -> list[ValidationError]:
    """Validate a map zoom level.

    Pure function.
    """
    if not 0 <= zoom <= 18:
        return [ValidationError(
            field=field_name,
            message=f"Zoom {zoom} out of range [0, 18]",
        )]
    return []


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if not config.feed_url.startswith(("http://", "https://")):
        errors.append(ValidationError(
            field="feed_url",
            message=f"Feed URL must be http(s), got '{config.feed_url}'",
        ))

    if config.refresh_interval_seconds <= 0:
        errors.append(ValidationError(
            field="refresh_interval_seconds",
            message=f"Refresh interval must be positive, got {config.refresh_interval_seconds}",
        ))
    elif config.refresh_interval_seconds < 60:
        # USGS regenerates summary feeds once a minute
        errors.append(ValidationError(
            field="refresh_interval_seconds",
            message="Refresh interval under 60s polls faster than the feed updates",
            severity="warning",
        ))

    if config.request_timeout_seconds is not None and config.request_timeout_seconds <= 0:
        errors.append(ValidationError(
            field="request_timeout_seconds",
            message=f"Request timeout must be positive, got {config.request_timeout_seconds}",
        ))

    if config.recent_count < 1:
        errors.append(ValidationError(
            field="recent_count",
            message=f"Recent count must be at least 1, got {config.recent_count}",
        ))

    if config.layout_refresh_delay_seconds < 0:
        errors.append(ValidationError(
            field="layout_refresh_delay_seconds",
            message="Layout refresh delay cannot be negative",
        ))

    errors.extend(validate_coordinates(
        config.initial_latitude, config.initial_longitude,
        "initial_view",
    ))
    errors.extend(validate_zoom(config.initial_zoom, "initial_zoom"))
    errors.extend(validate_zoom(config.locate_zoom, "locate_zoom"))

    if config.default_filters.max_depth_km < 0:
        errors.append(ValidationError(
            field="default_filters.max_depth_km",
            message="Maximum depth below zero excludes every earthquake",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
