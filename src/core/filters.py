"""Filter engine - Pure functions.

This module selects the earthquakes that pass the user's current filters
and computes the unfiltered aggregates shown in the stats bar.
All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass
from typing import Any, Sequence

from src.core.earthquake import Earthquake


@dataclass(frozen=True)
class FilterParams:
    """Current filter thresholds.

    Attributes:
        min_magnitude: Minimum magnitude (inclusive)
        max_depth_km: Maximum depth in km (inclusive)
        query: Free-text place search, blank matches everything
    """
    min_magnitude: float = 0.0
    max_depth_km: float = 700.0
    query: str = ""


@dataclass(frozen=True)
class FilterResult:
    """Result of filtering a snapshot.

    Attributes:
        earthquakes: Records passing every filter, in input order
        total_count: Number of records before filtering
        max_magnitude: Largest magnitude before filtering (0.0 floor)
    """
    earthquakes: tuple[Earthquake, ...]
    total_count: int
    max_magnitude: float

    @property
    def match_count(self) -> int:
        return len(self.earthquakes)


def parse_threshold(value: Any, field_name: str) -> float:
    """Parse a filter threshold.

    Pure function.

    Args:
        value: Raw value from a request or config
        field_name: Name of the field for error messages

    Returns:
        The threshold as a finite float

    Raises:
        ValueError: If the value is not a number or is infinite or NaN
    """
    threshold = float(value)
    if not math.isfinite(threshold):
        raise ValueError(f"{field_name} must be a finite number, got {value!r}")
    return threshold


def matches_query(earthquake: Earthquake, query: str) -> bool:
    """Check if the place description contains the query.

    Pure function. Case-insensitive; a blank query matches everything.
    """
    needle = query.strip().lower()
    if not needle:
        return True
    return needle in earthquake.place.lower()


def matches_filters(earthquake: Earthquake, params: FilterParams) -> bool:
    """Check if an earthquake passes all filter predicates.

    Pure function.

    Args:
        earthquake: Earthquake to check
        params: Current filter parameters

    Returns:
        True if magnitude, depth and query predicates all pass
    """
    if earthquake.magnitude < params.min_magnitude:
        return False

    if earthquake.depth_km > params.max_depth_km:
        return False

    return matches_query(earthquake, params.query)


def max_magnitude(earthquakes: Sequence[Earthquake]) -> float:
    """Largest magnitude in the set, never below 0.0.

    Pure function.
    """
    return max(0.0, max((e.magnitude for e in earthquakes), default=0.0))


def filter_earthquakes(
    earthquakes: Sequence[Earthquake],
    params: FilterParams,
    total_count: int | None = None,
) -> FilterResult:
    """Filter earthquakes by the current parameters.

    Pure function. Order-preserving; aggregates are computed over the
    unfiltered input.

    Args:
        earthquakes: Snapshot records in feed order
        params: Current filter parameters
        total_count: Size of the unfiltered feed when it differs from
                     len(earthquakes), e.g. features without a magnitude

    Returns:
        FilterResult with matching records and unfiltered aggregates
    """
    matched = tuple(e for e in earthquakes if matches_filters(e, params))

    return FilterResult(
        earthquakes=matched,
        total_count=len(earthquakes) if total_count is None else total_count,
        max_magnitude=max_magnitude(earthquakes),
    )
