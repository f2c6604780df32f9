"""Presentation selection - Pure functions.

This module orders filtered earthquakes for display: the most recent few
for the summary panel and the full list in the user's chosen order.
Every function returns a new list and leaves its input untouched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from src.core.earthquake import Earthquake


# Number of entries in the summary panel
RECENT_COUNT = 5


class SortKey(str, Enum):
    """Field used to order the full list view."""
    TIME = "time"
    MAGNITUDE = "magnitude"
    DEPTH = "depth"


@dataclass(frozen=True)
class Presentation:
    """Display orderings derived from one filtered set.

    Attributes:
        recent: Most recent earthquakes, newest first
        ordered: All filtered earthquakes in sort-key order
    """
    recent: tuple[Earthquake, ...]
    ordered: tuple[Earthquake, ...]


def parse_sort_key(value: str | SortKey) -> SortKey:
    """Parse a sort key name.

    Raises:
        ValueError: If the name is not a known sort key
    """
    if isinstance(value, SortKey):
        return value
    try:
        return SortKey(value.strip().lower())
    except ValueError:
        valid = ", ".join(k.value for k in SortKey)
        raise ValueError(f"Unknown sort key '{value}'. Choose from: {valid}") from None


def select_recent(
    earthquakes: Sequence[Earthquake],
    count: int = RECENT_COUNT,
) -> list[Earthquake]:
    """Select the most recent earthquakes.

    Pure function. Ties keep input order.

    Args:
        earthquakes: Filtered earthquakes
        count: Maximum number to return

    Returns:
        Up to `count` earthquakes, newest first
    """
    newest_first = sorted(earthquakes, key=lambda e: e.time_ms, reverse=True)
    return newest_first[:count]


def sort_earthquakes(
    earthquakes: Sequence[Earthquake],
    sort_key: SortKey,
) -> list[Earthquake]:
    """Order earthquakes for the list view.

    Pure function. Time and magnitude sort descending, depth ascending.
    Ties keep input order.
    """
    if sort_key == SortKey.MAGNITUDE:
        return sorted(earthquakes, key=lambda e: e.magnitude, reverse=True)
    if sort_key == SortKey.DEPTH:
        return sorted(earthquakes, key=lambda e: e.depth_km)
    return sorted(earthquakes, key=lambda e: e.time_ms, reverse=True)


def present(
    earthquakes: Sequence[Earthquake],
    sort_key: SortKey,
    recent_count: int = RECENT_COUNT,
) -> Presentation:
    """Build both display orderings from a filtered set.

    Pure function.
    """
    return Presentation(
        recent=tuple(select_recent(earthquakes, recent_count)),
        ordered=tuple(sort_earthquakes(earthquakes, sort_key)),
    )
