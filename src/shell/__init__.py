"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- USGS feed client (HTTP)
- Static map rendering (tile HTTP + image encoding)
- In-memory display surface
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from src.shell.usgs_client import USGSClient, FetchFailure
from src.shell.static_map_client import StaticMapClient
from src.shell.view_state import ViewStateRenderer, MapViewport
from src.shell.config_loader import load_config, Config

__all__ = [
    "USGSClient",
    "FetchFailure",
    "StaticMapClient",
    "ViewStateRenderer",
    "MapViewport",
    "load_config",
    "Config",
]
