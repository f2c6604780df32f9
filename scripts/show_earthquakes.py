#!/usr/bin/env python3
"""Print the earthquake views for one feed snapshot.

Fetches the USGS feed once and prints the stats bar, the recent-events
panel and the full list, using the same filtering and ordering as the
dashboard.

Usage:
    # Past day, everything
    python scripts/show_earthquakes.py

    # Past week, M4.5+, shallower than 70 km, strongest first
    python scripts/show_earthquakes.py --feed week --min-magnitude 4.5 \\
        --max-depth 70 --sort magnitude

    # Only events in Alaska
    python scripts/show_earthquakes.py --query alaska

Environment:
    DISPLAY_TIMEZONE: IANA timezone for timestamps (default: host local)
"""

import argparse
import logging
import os
import sys
from datetime import datetime, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.filters import FilterParams, filter_earthquakes
from src.core.formatter import format_earthquake_summary
from src.core.presentation import SortKey, present
from src.core.view import Entry, build_list, build_panel, build_stats
from src.shell.config_loader import resolve_timezone
from src.shell.usgs_client import FEEDS, FetchFailure, USGSClient, feed_url_for

logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def format_entry(entry: Entry) -> str:
    return f"  M{entry.magnitude_text:>4}  {entry.place}  ({entry.depth_text}, {entry.time_text})"


def main():
    parser = argparse.ArgumentParser(
        description="Print earthquake views for the current USGS feed",
    )
    parser.add_argument(
        "--feed",
        choices=sorted(FEEDS.keys()),
        default="day",
        help="USGS summary feed (default: day)",
    )
    parser.add_argument(
        "--min-magnitude",
        type=float,
        default=0.0,
        help="Minimum magnitude (default: 0.0)",
    )
    parser.add_argument(
        "--max-depth",
        type=float,
        default=700.0,
        help="Maximum depth in km (default: 700)",
    )
    parser.add_argument(
        "--query",
        type=str,
        default="",
        help="Only places containing this text",
    )
    parser.add_argument(
        "--sort",
        choices=[k.value for k in SortKey],
        default=SortKey.TIME.value,
        help="List ordering (default: time)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum list rows to print, 0 for all (default: 20)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log HTTP activity",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    tz = resolve_timezone(os.environ.get("DISPLAY_TIMEZONE"))

    client = USGSClient(feed_url=feed_url_for(args.feed), timeout=30)
    snapshot = client.fetch_snapshot()

    if isinstance(snapshot, FetchFailure):
        logger.error("✗ Failed to load earthquake data: %s", snapshot.reason)
        sys.exit(1)

    params = FilterParams(
        min_magnitude=args.min_magnitude,
        max_depth_km=args.max_depth,
        query=args.query,
    )
    result = filter_earthquakes(snapshot.earthquakes, params, total_count=snapshot.total_count)
    presentation = present(result.earthquakes, SortKey(args.sort))
    stats = build_stats(result, datetime.now(timezone.utc), tz)

    print(
        f"Total: {stats.total_count}  Max: M{stats.max_magnitude_text}  "
        f"Matching: {stats.match_count_text}  Updated: {stats.last_updated_text}"
    )

    if presentation.recent:
        print(f"\nLatest: {format_earthquake_summary(presentation.recent[0], tz)}")

    print("\nRecent earthquakes")
    panel = build_panel(presentation.recent, tz)
    if panel.placeholder:
        print(f"  {panel.placeholder}")
    for entry in panel.entries:
        print(format_entry(entry))

    print(f"\nAll earthquakes by {args.sort}")
    list_view = build_list(presentation.ordered, tz)
    if list_view.placeholder:
        print(f"  {list_view.placeholder}")
    entries = list_view.entries[:args.limit] if args.limit else list_view.entries
    for entry in entries:
        print(format_entry(entry))
    if len(entries) < len(list_view.entries):
        print(f"  ...and {len(list_view.entries) - len(entries)} more")


if __name__ == "__main__":
    main()
