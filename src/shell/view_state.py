"""In-memory display surface - Imperative Shell.

Holds the latest rendered views so the HTTP service can serve them.
Implements the ViewRenderer and MapWidget capabilities from core.renderer.
"""

import logging
from dataclasses import asdict
from typing import Any, Sequence

from src.core.view import ListView, Marker, PanelView, Stats


logger = logging.getLogger(__name__)


class ViewStateRenderer:
    """Keeps the most recent output of each display sink."""

    def __init__(self) -> None:
        self.markers: tuple[Marker, ...] = ()
        self.panel: PanelView | None = None
        self.list_view: ListView | None = None
        self.stats: Stats | None = None

    def render_markers(self, markers: Sequence[Marker]) -> None:
        self.markers = tuple(markers)
        logger.debug("Rendered %d markers", len(self.markers))

    def render_panel(self, panel: PanelView) -> None:
        self.panel = panel

    def render_list(self, list_view: ListView) -> None:
        self.list_view = list_view

    def render_stats(self, stats: Stats) -> None:
        self.stats = stats

    def to_dict(self) -> dict[str, Any]:
        """Serialize the rendered views for a JSON response."""
        return {
            "markers": [asdict(m) for m in self.markers],
            "panel": asdict(self.panel) if self.panel else None,
            "list": asdict(self.list_view) if self.list_view else None,
            "stats": asdict(self.stats) if self.stats else None,
        }


class MapViewport:
    """Tracks the map's center, zoom and layout recomputations.

    Attributes:
        latitude: Center latitude
        longitude: Center longitude
        zoom: Zoom level
        layout_revision: Incremented every time the layout is recomputed
    """

    def __init__(self, latitude: float = 20.0, longitude: float = 0.0, zoom: int = 2) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self.zoom = zoom
        self.layout_revision = 0

    def set_view(self, latitude: float, longitude: float, zoom: int) -> None:
        logger.info("Map centered on (%.4f, %.4f) at zoom %d", latitude, longitude, zoom)
        self.latitude = latitude
        self.longitude = longitude
        self.zoom = zoom

    def invalidate_size(self) -> None:
        self.layout_revision += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "zoom": self.zoom,
            "layout_revision": self.layout_revision,
        }
