"""View models - Pure data structures and builders.

This module projects filtered and ordered earthquakes onto what each display
sink shows: map markers, the summary panel, the full list and the stats bar.
Renderers only draw these; they make no decisions of their own.
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Sequence

from src.core.earthquake import Earthquake
from src.core.filters import FilterResult
from src.core.formatter import (
    format_depth,
    format_event_time,
    format_magnitude,
    format_match_count,
    format_popup,
    format_refresh_time,
)
from src.core.styling import (
    get_badge_text_color,
    get_magnitude_color,
    get_marker_radius,
)


NO_RESULTS_MESSAGE = "No earthquakes match the current filters"
FAILURE_MESSAGE = "Failed to load earthquake data"

MARKER_FILL_OPACITY = 0.7


@dataclass(frozen=True)
class Marker:
    """A circle marker on the map.

    Attributes:
        id: Earthquake ID
        latitude: Marker latitude
        longitude: Marker longitude
        color: Stroke color
        fill_color: Fill color
        fill_opacity: Fill opacity (0-1)
        radius: Circle radius
        popup: Popup text
    """
    id: str
    latitude: float
    longitude: float
    color: str
    fill_color: str
    fill_opacity: float
    radius: float
    popup: str


@dataclass(frozen=True)
class Entry:
    """One row in the summary panel or list view.

    Attributes:
        id: Earthquake ID, emitted on selection
        magnitude_text: Badge text
        badge_color: Badge background color
        text_color: Badge text color
        place: Location description
        depth_text: Formatted depth
        time_text: Formatted local event time
    """
    id: str
    magnitude_text: str
    badge_color: str
    text_color: str
    place: str
    depth_text: str
    time_text: str


@dataclass(frozen=True)
class PanelView:
    """Content of the summary panel.

    Attributes:
        entries: Panel rows, newest first
        placeholder: Message shown instead of rows, or None
    """
    entries: tuple[Entry, ...]
    placeholder: str | None = None


@dataclass(frozen=True)
class ListView:
    """Content of the full list view.

    Attributes:
        entries: List rows in sort-key order
        placeholder: Message shown instead of rows, or None
    """
    entries: tuple[Entry, ...]
    placeholder: str | None = None


@dataclass(frozen=True)
class Stats:
    """Aggregate stats shown above the views.

    Attributes:
        total_count: Unfiltered earthquake count
        max_magnitude_text: Unfiltered maximum magnitude, one decimal
        last_updated_text: Wall-clock time of the render
        match_count: Earthquakes passing the filters
        match_count_text: Formatted match count
    """
    total_count: int
    max_magnitude_text: str
    last_updated_text: str
    match_count: int
    match_count_text: str


def build_marker(earthquake: Earthquake, tz: tzinfo | None = None) -> Marker:
    """Build the map marker for one earthquake.

    Pure function.
    """
    color = get_magnitude_color(earthquake.magnitude)
    return Marker(
        id=earthquake.id,
        latitude=earthquake.latitude,
        longitude=earthquake.longitude,
        color=color,
        fill_color=color,
        fill_opacity=MARKER_FILL_OPACITY,
        radius=get_marker_radius(earthquake.magnitude),
        popup=format_popup(earthquake, tz),
    )


def build_markers(
    earthquakes: Sequence[Earthquake],
    tz: tzinfo | None = None,
) -> tuple[Marker, ...]:
    """Build markers for every filtered earthquake, in input order."""
    return tuple(build_marker(e, tz) for e in earthquakes)


def build_entry(earthquake: Earthquake, tz: tzinfo | None = None) -> Entry:
    """Build a panel or list row.

    Pure function.
    """
    return Entry(
        id=earthquake.id,
        magnitude_text=format_magnitude(earthquake.magnitude),
        badge_color=get_magnitude_color(earthquake.magnitude),
        text_color=get_badge_text_color(earthquake.magnitude),
        place=earthquake.place,
        depth_text=format_depth(earthquake.depth_km),
        time_text=format_event_time(earthquake, tz),
    )


def build_panel(
    recent: Sequence[Earthquake],
    tz: tzinfo | None = None,
) -> PanelView:
    """Build the summary panel, or the no-results placeholder when empty.

    Pure function.
    """
    if not recent:
        return PanelView(entries=(), placeholder=NO_RESULTS_MESSAGE)
    return PanelView(entries=tuple(build_entry(e, tz) for e in recent))


def build_list(
    ordered: Sequence[Earthquake],
    tz: tzinfo | None = None,
) -> ListView:
    """Build the list view, or the no-results placeholder when empty.

    Pure function.
    """
    if not ordered:
        return ListView(entries=(), placeholder=NO_RESULTS_MESSAGE)
    return ListView(entries=tuple(build_entry(e, tz) for e in ordered))


def failure_panel() -> PanelView:
    """Summary panel shown when the feed could not be loaded."""
    return PanelView(entries=(), placeholder=FAILURE_MESSAGE)


def failure_list() -> ListView:
    """List view shown when the feed could not be loaded."""
    return ListView(entries=(), placeholder=FAILURE_MESSAGE)


def build_stats(
    result: FilterResult,
    now: datetime,
    tz: tzinfo | None = None,
) -> Stats:
    """Build the stats bar.

    Pure function. Totals and maximum come from the unfiltered snapshot;
    the timestamp is the render time, not the data time.

    Args:
        result: Filter result holding unfiltered aggregates
        now: Current wall-clock time
        tz: Display timezone

    Returns:
        Stats for the stats bar
    """
    return Stats(
        total_count=result.total_count,
        max_magnitude_text=format_magnitude(result.max_magnitude),
        last_updated_text=format_refresh_time(now, tz),
        match_count=result.match_count,
        match_count_text=format_match_count(result.match_count),
    )
