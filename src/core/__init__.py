"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Feed parsing into snapshots
- Filtering and unfiltered aggregates
- Recent and sorted orderings
- Magnitude styling and display text
- View models for markers, panel, list and stats
- View mode transitions

All functions here are deterministic and have no I/O.
"""

from src.core.earthquake import Earthquake, Snapshot, FeedFormatError, parse_snapshot
from src.core.filters import FilterParams, FilterResult, filter_earthquakes
from src.core.presentation import SortKey, Presentation, present, select_recent, sort_earthquakes
from src.core.styling import get_magnitude_color, get_marker_radius, get_legend
from src.core.view import build_markers, build_panel, build_list, build_stats
from src.core.view_mode import ViewMode, transition

__all__ = [
    # Earthquake
    "Earthquake",
    "Snapshot",
    "FeedFormatError",
    "parse_snapshot",
    # Filters
    "FilterParams",
    "FilterResult",
    "filter_earthquakes",
    # Presentation
    "SortKey",
    "Presentation",
    "present",
    "select_recent",
    "sort_earthquakes",
    # Styling
    "get_magnitude_color",
    "get_marker_radius",
    "get_legend",
    # Views
    "build_markers",
    "build_panel",
    "build_list",
    "build_stats",
    # View mode
    "ViewMode",
    "transition",
]
