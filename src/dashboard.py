"""Dashboard - Wires Functional Core and Imperative Shell.

This module owns the application state and drives the pipeline

    feed client -> filter -> presentation -> renderer

on the initial load, on a fixed timer and on every filter or sort change.
Everything runs on one asyncio event loop; the feed fetch runs in a worker
thread and is the only point where other events are processed.
"""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable

from src.core.config import Config
from src.core.earthquake import Earthquake, Snapshot
from src.core.filters import FilterParams, filter_earthquakes, parse_threshold
from src.core.presentation import SortKey, parse_sort_key, present
from src.core.renderer import MapWidget, ViewRenderer
from src.core.view import (
    build_list,
    build_markers,
    build_panel,
    build_stats,
    failure_list,
    failure_panel,
)
from src.core.view_mode import INITIAL_MODE, ModeTransition, ViewMode, transition
from src.shell.config_loader import resolve_timezone
from src.shell.usgs_client import FetchFailure, USGSClient
from src.shell.view_state import MapViewport, ViewStateRenderer


logger = logging.getLogger(__name__)


TRIGGER_INITIAL = "initial"
TRIGGER_TIMER = "timer"
TRIGGER_FILTER = "filter"
TRIGGER_SORT = "sort"
TRIGGER_MANUAL = "manual"


@dataclass
class AppState:
    """Mutable state owned by the dashboard.

    Attributes:
        filters: Current filter parameters
        sort_key: Current list ordering
        mode: Visible display surface
        request_seq: Sequence number of the latest refresh started
        selectable: Earthquakes currently shown, by ID, for selection
    """
    filters: FilterParams = field(default_factory=FilterParams)
    sort_key: SortKey = SortKey.TIME
    mode: ViewMode = INITIAL_MODE
    request_seq: int = 0
    selectable: dict[str, Earthquake] = field(default_factory=dict)


@dataclass
class RefreshResult:
    """Result of one pipeline run.

    Attributes:
        trigger: What started the refresh
        success: Whether a snapshot was fetched and rendered
        stale: Whether the response was discarded as outdated
        earthquakes_fetched: Records in the snapshot
        earthquakes_matched: Records passing the filters
        error: Fetch failure reason, if any
    """
    trigger: str
    success: bool
    stale: bool = False
    earthquakes_fetched: int = 0
    earthquakes_matched: int = 0
    error: str | None = None

    @property
    def summary(self) -> str:
        """Human-readable summary of the refresh."""
        if self.stale:
            return f"Discarded stale {self.trigger} refresh"
        if not self.success:
            return f"{self.trigger.capitalize()} refresh failed: {self.error}"
        return (
            f"{self.trigger.capitalize()} refresh: "
            f"{self.earthquakes_fetched} earthquakes, "
            f"{self.earthquakes_matched} match filters"
        )


class Dashboard:
    """Drives the earthquake views.

    This class wires together:
    - USGS feed client (fetches snapshots)
    - Core functions (filtering, ordering, view models)
    - Renderer (draws markers, panel, list, stats)
    - Map widget (centering and layout)
    """

    def __init__(
        self,
        config: Config,
        feed_client: USGSClient | None = None,
        renderer: ViewRenderer | None = None,
        map_widget: MapWidget | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize dashboard with configuration.

        Args:
            config: Application configuration
            feed_client: Feed client (created if not provided)
            renderer: Display surface (in-memory view state if not provided)
            map_widget: Map widget (viewport at the initial view if not provided)
            clock: Source of the render wall-clock time
        """
        self.config = config
        self.feed_client = feed_client or USGSClient(
            feed_url=config.feed_url,
            timeout=config.request_timeout_seconds,
        )
        self.renderer = renderer or ViewStateRenderer()
        self.map_widget = map_widget or MapViewport(
            config.initial_latitude,
            config.initial_longitude,
            config.initial_zoom,
        )
        self.tz = resolve_timezone(config.display_timezone)
        self.state = AppState(
            filters=config.default_filters,
            sort_key=config.default_sort_key,
        )
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._last_rendered_seq = 0
        self._timer_task: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

    async def _fetch(self) -> Snapshot | FetchFailure:
        """Fetch a snapshot without blocking the event loop."""
        return await asyncio.to_thread(self.feed_client.fetch_snapshot)

    def _render_snapshot(self, snapshot: Snapshot, trigger: str) -> RefreshResult:
        """Run filter, presentation and rendering for a snapshot.

        The snapshot is not kept; only the shown records are remembered
        for selection.
        """
        result = filter_earthquakes(
            snapshot.earthquakes,
            self.state.filters,
            total_count=snapshot.total_count,
        )
        presentation = present(
            result.earthquakes,
            self.state.sort_key,
            self.config.recent_count,
        )

        self.renderer.render_markers(build_markers(result.earthquakes, self.tz))
        self.renderer.render_panel(build_panel(presentation.recent, self.tz))
        self.renderer.render_list(build_list(presentation.ordered, self.tz))
        self.renderer.render_stats(build_stats(result, self._clock(), self.tz))

        self.state.selectable = {e.id: e for e in result.earthquakes}

        return RefreshResult(
            trigger=trigger,
            success=True,
            earthquakes_fetched=result.total_count,
            earthquakes_matched=result.match_count,
        )

    def _render_failure(self, failure: FetchFailure, trigger: str) -> RefreshResult:
        """Show failure placeholders; markers and stats keep their last state."""
        self.renderer.render_panel(failure_panel())
        self.renderer.render_list(failure_list())

        return RefreshResult(
            trigger=trigger,
            success=False,
            error=failure.reason,
        )

    async def refresh(self, trigger: str = TRIGGER_MANUAL) -> RefreshResult:
        """Run the full pipeline once.

        Overlapping refreshes are not cancelled or queued. When
        discard_stale_responses is set, a response that completes after a
        newer one has already been rendered is dropped.

        Args:
            trigger: What started the refresh

        Returns:
            RefreshResult describing what was rendered
        """
        self.state.request_seq += 1
        seq = self.state.request_seq

        response = await self._fetch()

        if self.config.discard_stale_responses and seq < self._last_rendered_seq:
            logger.info(
                "Discarding %s refresh #%d, #%d already rendered",
                trigger,
                seq,
                self._last_rendered_seq,
            )
            return RefreshResult(trigger=trigger, success=False, stale=True)

        self._last_rendered_seq = max(self._last_rendered_seq, seq)

        if isinstance(response, FetchFailure):
            result = self._render_failure(response, trigger)
        else:
            result = self._render_snapshot(response, trigger)

        logger.info("%s", result.summary)
        return result

    async def update_filters(
        self,
        min_magnitude: float | None = None,
        max_depth_km: float | None = None,
        query: str | None = None,
    ) -> RefreshResult:
        """Change filter values and refresh.

        Args:
            min_magnitude: New minimum magnitude, None to keep
            max_depth_km: New maximum depth, None to keep
            query: New place search, None to keep

        Returns:
            RefreshResult of the triggered refresh

        Raises:
            ValueError: If a threshold is not a finite number; the
                        filters are left unchanged
        """
        changes = {}
        if min_magnitude is not None:
            changes["min_magnitude"] = parse_threshold(min_magnitude, "min_magnitude")
        if max_depth_km is not None:
            changes["max_depth_km"] = parse_threshold(max_depth_km, "max_depth_km")
        if query is not None:
            changes["query"] = query

        self.state.filters = dataclasses.replace(self.state.filters, **changes)
        return await self.refresh(TRIGGER_FILTER)

    async def set_sort_key(self, sort_key: str | SortKey) -> RefreshResult:
        """Change the list ordering and refresh.

        Raises:
            ValueError: If the sort key is unknown
        """
        self.state.sort_key = parse_sort_key(sort_key)
        return await self.refresh(TRIGGER_SORT)

    def _set_mode(self, target: ViewMode) -> ModeTransition:
        change = transition(self.state.mode, target)
        self.state.mode = change.mode

        if change.needs_layout_refresh:
            # Let the surface switch take effect before the map measures itself
            loop = asyncio.get_running_loop()
            loop.call_later(
                self.config.layout_refresh_delay_seconds,
                self.map_widget.invalidate_size,
            )

        return change

    def show_map(self) -> ModeTransition:
        """Switch to the map surface. Must be called from the event loop."""
        return self._set_mode(ViewMode.MAP)

    def show_list(self) -> ModeTransition:
        """Switch to the list surface."""
        return self._set_mode(ViewMode.LIST)

    def set_mode(self, mode: ViewMode) -> ModeTransition:
        """Switch to the given surface. Must be called from the event loop."""
        if mode == ViewMode.MAP:
            return self.show_map()
        return self.show_list()

    def select(self, earthquake_id: str) -> bool:
        """Center the map on a shown earthquake and switch to the map.

        Handles selection from both the summary panel and the list view.
        Must be called from the event loop.

        Args:
            earthquake_id: ID emitted by the selected entry

        Returns:
            True if the earthquake was found
        """
        earthquake = self.state.selectable.get(earthquake_id)
        if earthquake is None:
            logger.warning("Selected earthquake %s is not shown", earthquake_id)
            return False

        self.map_widget.set_view(
            earthquake.latitude,
            earthquake.longitude,
            self.config.locate_zoom,
        )
        self.show_map()
        return True

    def _spawn(self, coro: Awaitable[RefreshResult]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Refresh failed", exc_info=task.exception())

    async def _run_timer(self) -> None:
        # Errors are logged by _task_done and must not stop the timer
        await asyncio.wait({self._spawn(self.refresh(TRIGGER_INITIAL))})

        # Fixed period; manual refreshes do not reset it
        while True:
            await asyncio.sleep(self.config.refresh_interval_seconds)
            self._spawn(self.refresh(TRIGGER_TIMER))

    def start(self) -> asyncio.Task:
        """Start the initial load and the refresh timer.

        Must be called from the event loop.
        """
        if self._timer_task is None or self._timer_task.done():
            logger.info(
                "Starting refresh timer every %ds",
                self.config.refresh_interval_seconds,
            )
            self._timer_task = asyncio.create_task(self._run_timer())
        return self._timer_task

    async def stop(self) -> None:
        """Stop the timer and cancel refreshes still in flight."""
        tasks = list(self._tasks)
        if self._timer_task is not None:
            tasks.append(self._timer_task)
            self._timer_task = None

        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def run_forever(self) -> None:
        """Run the timer until cancelled."""
        await self.start()
