"""USGS Feed Client - Imperative Shell.

This module handles HTTP communication with the USGS summary GeoJSON feeds.
All I/O is contained here; parsing is in the core module.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import requests

from src.core.config import USGS_FEED_URL
from src.core.earthquake import Snapshot, parse_snapshot


logger = logging.getLogger(__name__)


USGS_FEED_BASE = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary"

FEEDS = {
    "hour": f"{USGS_FEED_BASE}/all_hour.geojson",
    "day": USGS_FEED_URL,
    "week": f"{USGS_FEED_BASE}/all_week.geojson",
    "significant": f"{USGS_FEED_BASE}/significant_month.geojson",
}


@dataclass(frozen=True)
class FetchFailure:
    """A snapshot could not be fetched or parsed.

    Attributes:
        reason: Human-readable description of what went wrong
        error_type: Name of the underlying exception class
    """
    reason: str
    error_type: str


def feed_url_for(period: str) -> str:
    """Look up a named USGS summary feed.

    Raises:
        ValueError: If the period is not a known feed
    """
    url = FEEDS.get(period)
    if url is None:
        raise ValueError(f"Unknown feed '{period}'. Choose from: {list(FEEDS.keys())}")
    return url


class USGSClient:
    """Client for fetching earthquake snapshots from a USGS feed.

    This is part of the imperative shell - it handles HTTP I/O.
    One attempt per call; retrying is left to the next refresh.
    """

    def __init__(
        self,
        feed_url: str = USGS_FEED_URL,
        timeout: float | None = None,
    ) -> None:
        """Initialize USGS client.

        Args:
            feed_url: GeoJSON feed URL
            timeout: Request timeout in seconds, None to wait indefinitely
        """
        self.feed_url = feed_url
        self.timeout = timeout

    def fetch_snapshot(self) -> Snapshot | FetchFailure:
        """Fetch and parse the current feed snapshot.

        This method performs HTTP I/O. Errors are returned as a
        FetchFailure, never raised.

        Returns:
            Snapshot on success, FetchFailure otherwise
        """
        logger.info("Fetching earthquake feed from %s", self.feed_url)

        try:
            response = requests.get(self.feed_url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
            snapshot = parse_snapshot(data, fetched_at=datetime.now(timezone.utc))
        except (requests.RequestException, ValueError) as e:
            # ValueError covers invalid JSON and FeedFormatError
            return self._failure(e)

        logger.info("Fetched %d earthquakes from USGS", len(snapshot))

        return snapshot

    def _failure(self, error: Exception) -> FetchFailure:
        logger.error(
            "Failed to fetch earthquake feed %s: %s",
            self.feed_url,
            error,
        )
        return FetchFailure(
            reason=str(error) or type(error).__name__,
            error_type=type(error).__name__,
        )
