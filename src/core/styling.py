"""Magnitude styling and static map configuration - Pure functions.

This module maps magnitudes to the colors, sizes and labels used by the
map markers, list badges and legend, and provides configuration for a
static rendering of the marker layer. Image generation (I/O) is handled
by the shell layer.
"""

from dataclasses import dataclass


# Marker radius per unit of magnitude
MARKER_RADIUS_SCALE = 3

# Badges switch to light text above this magnitude
LIGHT_TEXT_THRESHOLD = 5.0


@dataclass(frozen=True)
class MagnitudeBand:
    """One step of the magnitude color scale.

    Attributes:
        lower: Inclusive lower bound, None for the open-ended bottom band
        color: Hex color
        label: Severity label
        range_text: Legend text for the band
    """
    lower: float | None
    color: str
    label: str
    range_text: str


# Ordered from strongest to weakest for lookup
MAGNITUDE_BANDS: tuple[MagnitudeBand, ...] = (
    MagnitudeBand(7.0, "#9C27B0", "Major", "7.0+"),
    MagnitudeBand(6.0, "#F44336", "Strong", "6.0 - 7.0"),
    MagnitudeBand(5.0, "#FF9800", "Moderate", "5.0 - 6.0"),
    MagnitudeBand(4.0, "#FFEB3B", "Light", "4.0 - 5.0"),
    MagnitudeBand(None, "#4CAF50", "Minor", "< 4.0"),
)


def get_magnitude_band(magnitude: float) -> MagnitudeBand:
    """Get the color band for a magnitude.

    Pure function. Lower bounds are inclusive, so 4.0 is Light, not Minor.
    """
    for band in MAGNITUDE_BANDS:
        if band.lower is None or magnitude >= band.lower:
            return band
    return MAGNITUDE_BANDS[-1]


def get_magnitude_color(magnitude: float) -> str:
    """Get hex color for magnitude visualization.

    Pure function.

    Args:
        magnitude: Earthquake magnitude

    Returns:
        Hex color string (e.g., "#FF9800")
    """
    return get_magnitude_band(magnitude).color


def get_severity_label(magnitude: float) -> str:
    """Get a human-readable severity label.

    Pure function.
    """
    return get_magnitude_band(magnitude).label


def get_marker_radius(magnitude: float) -> float:
    """Determine marker radius based on magnitude.

    Pure function. Linear in magnitude.
    """
    return magnitude * MARKER_RADIUS_SCALE


def get_badge_text_color(magnitude: float) -> str:
    """Text color for a magnitude badge, light on the darker colors."""
    return "white" if magnitude > LIGHT_TEXT_THRESHOLD else "black"


def get_legend() -> list[MagnitudeBand]:
    """Legend entries from weakest to strongest.

    Pure function.
    """
    return list(reversed(MAGNITUDE_BANDS))


@dataclass(frozen=True)
class MapConfig:
    """Immutable configuration for a static map image.

    Attributes:
        latitude: Center latitude
        longitude: Center longitude
        zoom: Zoom level (0-18)
        width: Image width in pixels
        height: Image height in pixels
    """
    latitude: float
    longitude: float
    zoom: int
    width: int
    height: int


def create_map_config(
    latitude: float,
    longitude: float,
    zoom: int,
    width: int = 800,
    height: int = 400,
) -> MapConfig:
    """Create map configuration for the current viewport.

    Pure function. Clamps zoom to the range tile servers accept.

    Args:
        latitude: Center latitude
        longitude: Center longitude
        zoom: Requested zoom level
        width: Image width in pixels (default: 800)
        height: Image height in pixels (default: 400)

    Returns:
        MapConfig with all parameters set
    """
    return MapConfig(
        latitude=latitude,
        longitude=longitude,
        zoom=max(0, min(int(zoom), 18)),
        width=width,
        height=height,
    )
