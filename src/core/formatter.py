"""Display text formatting - Pure functions.

This module formats earthquake data into the strings shown in popups,
list entries and the stats bar. All functions are pure with no side effects.

Timestamps are shown in a display timezone; passing None uses the host's
local zone.
"""

from datetime import datetime, tzinfo

from src.core.earthquake import Earthquake
from src.core.styling import get_severity_label


def _localize(moment: datetime, tz: tzinfo | None) -> datetime:
    return moment.astimezone(tz) if tz is not None else moment.astimezone()


def format_magnitude(magnitude: float) -> str:
    """Format a magnitude with one decimal place."""
    return f"{magnitude:.1f}"


def format_depth(depth_km: float) -> str:
    """Format a depth in kilometers."""
    return f"{depth_km:g} km"


def format_event_time(earthquake: Earthquake, tz: tzinfo | None = None) -> str:
    """Format the event time as a human-readable local timestamp.

    Pure function.

    Args:
        earthquake: Earthquake to format
        tz: Display timezone, None for host local time

    Returns:
        Timestamp like "2023-12-19 04:00:00 PST"
    """
    local_time = _localize(earthquake.time, tz)
    return local_time.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def format_refresh_time(now: datetime, tz: tzinfo | None = None) -> str:
    """Format the wall-clock time of a render."""
    return _localize(now, tz).strftime("%H:%M:%S")


def format_match_count(count: int) -> str:
    """Format the number of earthquakes in the list view."""
    return f"{count} earthquakes"


def format_popup(earthquake: Earthquake, tz: tzinfo | None = None) -> str:
    """Format the popup text for a map marker.

    Pure function.

    Args:
        earthquake: Earthquake to describe
        tz: Display timezone

    Returns:
        Multi-line popup text
    """
    return "\n".join([
        earthquake.place,
        f"Magnitude: {format_magnitude(earthquake.magnitude)}",
        f"Depth: {format_depth(earthquake.depth_km)}",
        f"Time: {format_event_time(earthquake, tz)}",
    ])


def format_earthquake_summary(earthquake: Earthquake, tz: tzinfo | None = None) -> str:
    """Format a one-line summary of an earthquake.

    Pure function.

    Args:
        earthquake: Earthquake to summarize
        tz: Display timezone

    Returns:
        One-line summary string
    """
    return (
        f"M{format_magnitude(earthquake.magnitude)} "
        f"({get_severity_label(earthquake.magnitude)}) - {earthquake.place} "
        f"at {format_event_time(earthquake, tz)} "
        f"(depth: {format_depth(earthquake.depth_km)})"
    )
