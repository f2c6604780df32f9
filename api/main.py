"""Earthquake Map API - FastAPI service for the interactive dashboard.

Serves the rendered map markers, summary panel, list view and stats, and
accepts the user's filter, sort, view mode and selection actions. The refresh
timer runs on the same event loop as the request handlers.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from src.core.presentation import SortKey
from src.core.styling import create_map_config, get_legend
from src.core.view_mode import ViewMode
from src.dashboard import Dashboard, RefreshResult
from src.shell.config_loader import load_config
from src.shell.static_map_client import StaticMapClient
from src.shell.view_state import MapViewport, ViewStateRenderer

log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]


# ===== Request Models =====

class FilterUpdate(BaseModel):
    min_magnitude: float | None = Field(default=None, allow_inf_nan=False)
    max_depth_km: float | None = Field(default=None, allow_inf_nan=False)
    query: str | None = None


class SortUpdate(BaseModel):
    sort_key: SortKey


class ModeUpdate(BaseModel):
    mode: ViewMode


# ===== Response Helpers =====

def _refresh_to_dict(result: RefreshResult) -> dict[str, Any]:
    return {
        "trigger": result.trigger,
        "success": result.success,
        "stale": result.stale,
        "earthquakes_fetched": result.earthquakes_fetched,
        "earthquakes_matched": result.earthquakes_matched,
        "error": result.error,
        "summary": result.summary,
    }


def _build_view_response(
    dashboard: Dashboard,
    renderer: ViewStateRenderer,
    viewport: MapViewport,
) -> dict[str, Any]:
    """Build the full view state for a response."""
    return {
        "mode": dashboard.state.mode.value,
        "filters": asdict(dashboard.state.filters),
        "sort_key": dashboard.state.sort_key.value,
        "viewport": viewport.to_dict(),
        **renderer.to_dict(),
    }


def create_app(
    dashboard: Dashboard | None = None,
    start_scheduler: bool = True,
    static_map_client: StaticMapClient | None = None,
) -> FastAPI:
    """Create the API application.

    Args:
        dashboard: Dashboard to serve; built from CONFIG_PATH if not provided.
                   A provided dashboard must use ViewStateRenderer and MapViewport.
        start_scheduler: Start the refresh timer with the application
        static_map_client: Client for map snapshots (created if not provided)

    Returns:
        FastAPI application
    """
    if dashboard is None:
        config = load_config()
        dashboard = Dashboard(
            config,
            renderer=ViewStateRenderer(),
            map_widget=MapViewport(
                config.initial_latitude,
                config.initial_longitude,
                config.initial_zoom,
            ),
        )

    renderer = dashboard.renderer
    viewport = dashboard.map_widget
    map_client = static_map_client or StaticMapClient()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if start_scheduler:
            dashboard.start()
        yield
        await dashboard.stop()

    app = FastAPI(
        title="Earthquake Map API",
        description="Near-real-time earthquake map, summary panel and list views",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["GET", "PUT", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/api/view")
    async def get_view():
        """Get the currently rendered views."""
        return _build_view_response(dashboard, renderer, viewport)

    @app.put("/api/filters")
    async def update_filters(update: FilterUpdate):
        """Change filters and refresh."""
        result = await dashboard.update_filters(
            min_magnitude=update.min_magnitude,
            max_depth_km=update.max_depth_km,
            query=update.query,
        )
        return {
            "refresh": _refresh_to_dict(result),
            **_build_view_response(dashboard, renderer, viewport),
        }

    @app.put("/api/sort")
    async def update_sort(update: SortUpdate):
        """Change the list ordering and refresh."""
        result = await dashboard.set_sort_key(update.sort_key)
        return {
            "refresh": _refresh_to_dict(result),
            **_build_view_response(dashboard, renderer, viewport),
        }

    @app.put("/api/mode")
    async def update_mode(update: ModeUpdate):
        """Switch between the map and list surfaces."""
        dashboard.set_mode(update.mode)
        return _build_view_response(dashboard, renderer, viewport)

    @app.post("/api/select/{earthquake_id}")
    async def select_earthquake(earthquake_id: str):
        """Center the map on an earthquake from the panel or list."""
        if not dashboard.select(earthquake_id):
            raise HTTPException(
                status_code=404,
                detail=f"Earthquake {earthquake_id} is not currently shown",
            )
        return _build_view_response(dashboard, renderer, viewport)

    @app.post("/api/refresh")
    async def refresh():
        """Fetch the feed again and re-render."""
        result = await dashboard.refresh()
        return {
            "refresh": _refresh_to_dict(result),
            **_build_view_response(dashboard, renderer, viewport),
        }

    @app.get("/api/legend")
    async def legend():
        """Magnitude color legend."""
        return {"legend": [asdict(band) for band in get_legend()]}

    @app.get("/api/map.png")
    async def map_image(
        width: int = Query(default=800, ge=100, le=2000),
        height: int = Query(default=400, ge=100, le=2000),
    ):
        """Static image of the current marker layer and viewport."""
        config = create_map_config(
            viewport.latitude,
            viewport.longitude,
            viewport.zoom,
            width=width,
            height=height,
        )
        result = await asyncio.to_thread(map_client.render_markers, renderer.markers, config)
        if not result.success:
            raise HTTPException(status_code=502, detail="Failed to render map image")
        return Response(content=result.image_bytes, media_type="image/png")

    @app.get("/health")
    async def health_check():
        """Health check endpoint for Cloud Run."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8080")))
