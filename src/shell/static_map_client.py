"""Static Map Client - Imperative Shell.

This module renders the current marker layer as a static image using
OpenStreetMap tiles. All I/O is contained here; marker styling and map
configuration are in the core module.
"""

import io
import logging
from dataclasses import dataclass
from typing import Sequence

from staticmap import StaticMap, CircleMarker

from src.core.styling import MapConfig
from src.core.view import Marker


logger = logging.getLogger(__name__)


# Smallest marker drawn, so micro-quakes stay visible
MIN_MARKER_PIXELS = 2


@dataclass
class MapImageResult:
    """Result of map image generation.

    Attributes:
        success: Whether the image was generated successfully
        image_bytes: PNG image data if successful
        error: Error message if failed
    """
    success: bool
    image_bytes: bytes | None = None
    error: str | None = None


class StaticMapClient:
    """Client for generating static map images.

    This is part of the imperative shell - it handles I/O (fetching map tiles
    and rendering images).
    """

    def __init__(self, tile_url: str | None = None) -> None:
        """Initialize static map client.

        Args:
            tile_url: Custom tile URL template. Defaults to OpenStreetMap.
        """
        self.tile_url = tile_url or "https://tile.openstreetmap.org/{z}/{x}/{y}.png"

    def render_markers(self, markers: Sequence[Marker], config: MapConfig) -> MapImageResult:
        """Render markers on a static map image.

        This method performs I/O (fetches map tiles from tile server).

        Args:
            markers: Markers to draw, in drawing order
            config: Map center, zoom and size

        Returns:
            MapImageResult with image bytes or error
        """
        logger.info(
            "Rendering %d markers around (%.4f, %.4f) at zoom %d",
            len(markers),
            config.latitude,
            config.longitude,
            config.zoom,
        )

        try:
            static_map = StaticMap(
                config.width,
                config.height,
                url_template=self.tile_url,
            )

            for marker in markers:
                static_map.add_marker(CircleMarker(
                    (marker.longitude, marker.latitude),  # (lon, lat) order for staticmap
                    marker.fill_color,
                    max(MIN_MARKER_PIXELS, int(round(marker.radius))),
                ))

            # staticmap centers on the markers unless a center is given
            image = static_map.render(
                zoom=config.zoom,
                center=(config.longitude, config.latitude),
            )

            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
            image_bytes = buffer.getvalue()

            logger.info("Generated map image: %d bytes", len(image_bytes))

            return MapImageResult(success=True, image_bytes=image_bytes)

        except Exception as e:
            logger.error("Failed to generate map: %s", str(e))
            return MapImageResult(success=False, error=str(e))
