"""Cloud Function Entry Point.

This module provides an HTTP entry point for Google Cloud Functions.
It runs one stateless pipeline pass with filters taken from the query
string and returns the rendered views.
"""

import asyncio
import dataclasses
import logging
import os
import json
from typing import Any

import functions_framework
from flask import Request

from src.core.filters import parse_threshold
from src.core.presentation import parse_sort_key
from src.dashboard import Dashboard, TRIGGER_MANUAL
from src.shell.config_loader import load_config, load_config_from_env
from src.shell.view_state import ViewStateRenderer


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _get_config():
    """Load configuration from file or environment."""
    if os.environ.get("CONFIG_PATH"):
        return load_config(os.environ["CONFIG_PATH"])
    elif os.environ.get("FEED_URL"):
        return load_config_from_env()
    else:
        return load_config()


def _apply_request_args(dashboard: Dashboard, args: Any) -> None:
    """Apply filter and sort query parameters to the dashboard state.

    Raises:
        ValueError: If a parameter cannot be parsed
    """
    changes = {}
    if args.get("min_magnitude"):
        changes["min_magnitude"] = parse_threshold(args["min_magnitude"], "min_magnitude")
    if args.get("max_depth_km"):
        changes["max_depth_km"] = parse_threshold(args["max_depth_km"], "max_depth_km")
    if args.get("q") is not None:
        changes["query"] = args["q"]

    dashboard.state.filters = dataclasses.replace(dashboard.state.filters, **changes)

    if args.get("sort"):
        dashboard.state.sort_key = parse_sort_key(args["sort"])


@functions_framework.http
def earthquake_view(request: Request) -> tuple[dict[str, Any], int]:
    """HTTP Cloud Function entry point.

    Query parameters:
        min_magnitude: Minimum magnitude filter
        max_depth_km: Maximum depth filter
        q: Place search text
        sort: time, magnitude or depth

    Args:
        request: Flask request object

    Returns:
        Tuple of (response dict, HTTP status code)
    """
    logger.info("Rendering earthquake view")

    try:
        config = _get_config()
        renderer = ViewStateRenderer()
        dashboard = Dashboard(config, renderer=renderer)

        try:
            _apply_request_args(dashboard, request.args)
        except ValueError as e:
            return {"status": "error", "message": str(e)}, 400

        result = asyncio.run(dashboard.refresh(TRIGGER_MANUAL))

        response = {
            "status": "success" if result.success else "error",
            "summary": result.summary,
            "filters": dataclasses.asdict(dashboard.state.filters),
            "sort_key": dashboard.state.sort_key.value,
            **renderer.to_dict(),
        }

        if result.error:
            response["error"] = result.error

        logger.info("Completed: %s", result.summary)

        return response, 200 if result.success else 502

    except Exception as e:
        logger.exception("Unexpected error rendering earthquake view")
        return {
            "status": "error",
            "message": str(e),
        }, 500


# For local testing
if __name__ == "__main__":
    # Mock request for local testing
    class MockRequest:
        args: dict[str, str] = {}

    response, status = earthquake_view(MockRequest())
    print(f"\nResponse ({status}):")
    print(json.dumps(response, indent=2))
