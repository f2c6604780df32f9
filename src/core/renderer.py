"""Display surface capabilities.

The pipeline draws through these protocols so it can run against any
surface: the in-memory view state served by the API, or a recording
double in tests.
"""

from typing import Protocol, Sequence

from src.core.view import ListView, Marker, PanelView, Stats


class ViewRenderer(Protocol):
    """Sinks for the rendered views.

    Each method fully replaces the previous output of its sink, so calling
    it again with the same input is harmless.
    """

    def render_markers(self, markers: Sequence[Marker]) -> None: ...

    def render_panel(self, panel: PanelView) -> None: ...

    def render_list(self, list_view: ListView) -> None: ...

    def render_stats(self, stats: Stats) -> None: ...


class MapWidget(Protocol):
    """The interactive map the markers are drawn on."""

    def set_view(self, latitude: float, longitude: float, zoom: int) -> None: ...

    def invalidate_size(self) -> None:
        """Recompute layout after the map was hidden or resized."""
        ...
