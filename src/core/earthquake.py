"""Earthquake data models and parsing - Pure functions.

This module handles parsing USGS GeoJSON feed documents into typed
Earthquake objects and Snapshots. All functions are pure with no side effects.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


class FeedFormatError(ValueError):
    """Raised when a feed document is not a GeoJSON FeatureCollection."""


@dataclass(frozen=True)
class Earthquake:
    """Immutable earthquake data model.

    Attributes:
        id: USGS event ID (assumed unique within a snapshot)
        magnitude: Earthquake magnitude, may be zero or negative
        place: Human-readable location description
        time_ms: Event timestamp in epoch milliseconds
        latitude: Epicenter latitude
        longitude: Epicenter longitude
        depth_km: Depth in kilometers
    """
    id: str
    magnitude: float
    place: str
    time_ms: int
    latitude: float
    longitude: float
    depth_km: float

    @property
    def time(self) -> datetime:
        """Event time as a UTC datetime."""
        return datetime.fromtimestamp(self.time_ms / 1000, tz=timezone.utc)

    @property
    def coordinates(self) -> tuple[float, float]:
        """Return (latitude, longitude) tuple."""
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class Snapshot:
    """One complete fetch result.

    A snapshot replaces any previous one wholesale; there is no merging.

    Attributes:
        earthquakes: Parsed events in feed order
        fetched_at: When the feed was fetched (UTC)
        feature_count: Features in the feed document, including any that
                       could not be parsed; None means len(earthquakes)
    """
    earthquakes: tuple[Earthquake, ...]
    fetched_at: datetime
    feature_count: int | None = None

    @property
    def total_count(self) -> int:
        """Number of events the feed reported."""
        if self.feature_count is None:
            return len(self.earthquakes)
        return self.feature_count

    def __len__(self) -> int:
        return len(self.earthquakes)


def parse_earthquake(feature: dict[str, Any]) -> Earthquake | None:
    """Parse a single GeoJSON feature into an Earthquake.

    Pure function: takes raw dict, returns typed Earthquake or None if invalid.

    Args:
        feature: GeoJSON feature dict from the USGS feed

    Returns:
        Earthquake object or None if parsing fails
    """
    try:
        props = feature.get("properties") or {}
        geometry = feature.get("geometry") or {}
        coords = geometry.get("coordinates") or []

        if len(coords) < 3:
            return None

        time_ms = props.get("time")
        if time_ms is None:
            return None

        # USGS publishes the occasional event before a magnitude is assigned
        magnitude = props.get("mag")
        if magnitude is None:
            return None

        return Earthquake(
            id=str(feature.get("id", "")),
            magnitude=float(magnitude),
            place=props.get("place") or "Unknown location",
            time_ms=int(time_ms),
            longitude=float(coords[0]),
            latitude=float(coords[1]),
            depth_km=float(coords[2]),
        )
    except (AttributeError, TypeError, ValueError):
        return None


def parse_earthquakes(geojson: dict[str, Any]) -> list[Earthquake]:
    """Parse a USGS GeoJSON document into a list of Earthquakes.

    Pure function: drops invalid features and keeps feed order.

    Args:
        geojson: Full GeoJSON FeatureCollection from the USGS feed

    Returns:
        List of valid Earthquake objects in feed order

    Raises:
        FeedFormatError: If the document has no features sequence
    """
    if not isinstance(geojson, dict):
        raise FeedFormatError(f"Expected a JSON object, got {type(geojson).__name__}")

    features = geojson.get("features")
    if not isinstance(features, list):
        raise FeedFormatError("Feed document has no 'features' list")

    earthquakes = []
    for feature in features:
        if not isinstance(feature, dict):
            continue
        earthquake = parse_earthquake(feature)
        if earthquake is not None:
            earthquakes.append(earthquake)

    return earthquakes


def parse_snapshot(geojson: dict[str, Any], fetched_at: datetime) -> Snapshot:
    """Parse a feed document into a Snapshot.

    Pure function.

    Args:
        geojson: Full GeoJSON FeatureCollection
        fetched_at: Fetch timestamp to record on the snapshot

    Returns:
        Snapshot holding the parsed earthquakes in feed order

    Raises:
        FeedFormatError: If the document has no features sequence
    """
    earthquakes = parse_earthquakes(geojson)

    return Snapshot(
        earthquakes=tuple(earthquakes),
        fetched_at=fetched_at,
        feature_count=len(geojson["features"]),
    )
