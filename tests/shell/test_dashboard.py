"""Tests for the Dashboard module.

Tests the coordination between functional core and imperative shell.
Uses mocks for the feed client and recording doubles for the display
surface to test the refresh pipeline.
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from src.core.config import Config
from src.core.earthquake import Earthquake, Snapshot
from src.core.filters import FilterParams
from src.core.presentation import SortKey
from src.core.view import FAILURE_MESSAGE, NO_RESULTS_MESSAGE
from src.core.view_mode import ViewMode
from src.dashboard import (
    AppState,
    Dashboard,
    RefreshResult,
    TRIGGER_FILTER,
    TRIGGER_INITIAL,
    TRIGGER_MANUAL,
    TRIGGER_SORT,
    TRIGGER_TIMER,
)
from src.shell.usgs_client import FetchFailure
from src.shell.view_state import ViewStateRenderer


FIXED_NOW = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


def make_earthquake(
    event_id: str,
    magnitude: float,
    depth_km: float,
    time_ms: int,
    place: str | None = None,
) -> Earthquake:
    return Earthquake(
        id=event_id,
        magnitude=magnitude,
        place=place or f"Place {event_id}",
        time_ms=time_ms,
        latitude=10.0 + magnitude,
        longitude=-100.0 - depth_km,
        depth_km=depth_km,
    )


def make_snapshot(*earthquakes: Earthquake) -> Snapshot:
    return Snapshot(earthquakes=tuple(earthquakes), fetched_at=FIXED_NOW)


def run(coro):
    return asyncio.run(coro)


class RecordingRenderer:
    """Display surface double that records every call."""

    def __init__(self):
        self.calls = []

    def render_markers(self, markers):
        self.calls.append(("markers", tuple(markers)))

    def render_panel(self, panel):
        self.calls.append(("panel", panel))

    def render_list(self, list_view):
        self.calls.append(("list", list_view))

    def render_stats(self, stats):
        self.calls.append(("stats", stats))

    def last(self, sink):
        matching = [arg for name, arg in self.calls if name == sink]
        return matching[-1] if matching else None

    def count(self, sink):
        return sum(1 for name, _ in self.calls if name == sink)


class RecordingMap:
    """Map widget double."""

    def __init__(self):
        self.views = []
        self.invalidations = 0

    def set_view(self, latitude, longitude, zoom):
        self.views.append((latitude, longitude, zoom))

    def invalidate_size(self):
        self.invalidations += 1


@pytest.fixture
def sample_snapshot():
    """Snapshot with magnitudes 3.5, 4.0, 6.2 and depths 5, 10, 15."""
    return make_snapshot(
        make_earthquake("a", 3.5, 5.0, 1000, "5km N of Anza, CA"),
        make_earthquake("b", 4.0, 10.0, 3000, "Central Alaska"),
        make_earthquake("c", 6.2, 15.0, 2000, "Southern Alaska"),
    )


@pytest.fixture
def mock_feed_client(sample_snapshot):
    """Create a mock feed client."""
    client = Mock()
    client.fetch_snapshot.return_value = sample_snapshot
    return client


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def map_widget():
    return RecordingMap()


@pytest.fixture
def config():
    return Config(
        layout_refresh_delay_seconds=0.01,
        display_timezone="UTC",
    )


@pytest.fixture
def dashboard(config, mock_feed_client, renderer, map_widget):
    return Dashboard(
        config,
        feed_client=mock_feed_client,
        renderer=renderer,
        map_widget=map_widget,
        clock=lambda: FIXED_NOW,
    )


class TestRefreshResult:
    """Tests for RefreshResult dataclass."""

    def test_success_summary(self):
        result = RefreshResult(
            trigger=TRIGGER_TIMER,
            success=True,
            earthquakes_fetched=10,
            earthquakes_matched=3,
        )
        assert result.summary == "Timer refresh: 10 earthquakes, 3 match filters"

    def test_failure_summary(self):
        result = RefreshResult(trigger=TRIGGER_MANUAL, success=False, error="timed out")
        assert result.summary == "Manual refresh failed: timed out"

    def test_stale_summary(self):
        result = RefreshResult(trigger=TRIGGER_FILTER, success=False, stale=True)
        assert "stale" in result.summary


class TestDashboardInit:
    """Tests for Dashboard initialization."""

    def test_state_starts_from_config(self, mock_feed_client):
        config = Config(
            default_filters=FilterParams(min_magnitude=2.5),
            default_sort_key=SortKey.DEPTH,
        )

        dashboard = Dashboard(config, feed_client=mock_feed_client)

        assert dashboard.state == AppState(
            filters=FilterParams(min_magnitude=2.5),
            sort_key=SortKey.DEPTH,
            mode=ViewMode.MAP,
        )

    def test_creates_default_collaborators(self):
        config = Config(feed_url="https://example.com/feed.geojson", request_timeout_seconds=5)

        dashboard = Dashboard(config)

        assert dashboard.feed_client.feed_url == "https://example.com/feed.geojson"
        assert dashboard.feed_client.timeout == 5
        assert isinstance(dashboard.renderer, ViewStateRenderer)
        assert dashboard.map_widget.zoom == config.initial_zoom

    def test_rejects_unknown_timezone(self):
        with pytest.raises(ValueError):
            Dashboard(Config(display_timezone="Nowhere/Special"))


class TestRefresh:
    """Tests for Dashboard.refresh()."""

    def test_renders_every_sink(self, dashboard, renderer):
        result = run(dashboard.refresh())

        assert result.success is True
        assert result.earthquakes_fetched == 3
        assert result.earthquakes_matched == 3
        assert [name for name, _ in renderer.calls] == ["markers", "panel", "list", "stats"]

    def test_markers_panel_and_list_content(self, dashboard, renderer):
        run(dashboard.refresh())

        assert [m.id for m in renderer.last("markers")] == ["a", "b", "c"]
        assert [e.id for e in renderer.last("panel").entries] == ["b", "c", "a"]
        assert [e.id for e in renderer.last("list").entries] == ["b", "c", "a"]

    def test_stats(self, dashboard, renderer):
        run(dashboard.refresh())

        stats = renderer.last("stats")
        assert stats.total_count == 3
        assert stats.max_magnitude_text == "6.2"
        assert stats.last_updated_text == "10:30:00"
        assert stats.match_count == 3

    def test_applies_current_filters(self, dashboard, renderer):
        dashboard.state.filters = FilterParams(min_magnitude=4.0, max_depth_km=10.0)

        result = run(dashboard.refresh())

        assert result.earthquakes_matched == 1
        assert [m.id for m in renderer.last("markers")] == ["b"]

    def test_empty_result_shows_placeholders(self, dashboard, renderer):
        dashboard.state.filters = FilterParams(min_magnitude=9.0)

        run(dashboard.refresh())

        assert renderer.last("markers") == ()
        assert renderer.last("panel").placeholder == NO_RESULTS_MESSAGE
        assert renderer.last("list").placeholder == NO_RESULTS_MESSAGE
        stats = renderer.last("stats")
        assert stats.total_count == 3
        assert stats.max_magnitude_text == "6.2"
        assert stats.match_count_text == "0 earthquakes"

    def test_each_refresh_fetches_once(self, dashboard, mock_feed_client):
        run(dashboard.refresh())
        run(dashboard.refresh())

        assert mock_feed_client.fetch_snapshot.call_count == 2

    def test_new_snapshot_replaces_old(self, dashboard, renderer, mock_feed_client):
        run(dashboard.refresh())
        mock_feed_client.fetch_snapshot.return_value = make_snapshot(
            make_earthquake("z", 5.0, 1.0, 9000),
        )

        run(dashboard.refresh())

        assert [m.id for m in renderer.last("markers")] == ["z"]
        assert set(dashboard.state.selectable) == {"z"}


class TestFetchFailure:
    """Tests for refresh when the feed cannot be loaded."""

    def test_shows_failure_placeholders(self, dashboard, renderer, mock_feed_client):
        mock_feed_client.fetch_snapshot.return_value = FetchFailure(
            reason="503 Server Error",
            error_type="HTTPError",
        )

        result = run(dashboard.refresh())

        assert result.success is False
        assert result.error == "503 Server Error"
        assert renderer.last("panel").placeholder == FAILURE_MESSAGE
        assert renderer.last("list").placeholder == FAILURE_MESSAGE
        assert renderer.count("markers") == 0
        assert renderer.count("stats") == 0

    def test_previous_markers_are_kept(self, config, mock_feed_client, sample_snapshot):
        view_state = ViewStateRenderer()
        dashboard = Dashboard(config, feed_client=mock_feed_client, renderer=view_state)
        run(dashboard.refresh())
        markers_before = view_state.markers
        stats_before = view_state.stats

        mock_feed_client.fetch_snapshot.return_value = FetchFailure("boom", "ConnectionError")
        run(dashboard.refresh())

        assert view_state.markers == markers_before
        assert len(view_state.markers) == 3
        assert view_state.stats == stats_before
        assert view_state.panel.placeholder == FAILURE_MESSAGE

    def test_recovers_on_next_refresh(self, dashboard, renderer, mock_feed_client, sample_snapshot):
        mock_feed_client.fetch_snapshot.return_value = FetchFailure("boom", "ConnectionError")
        run(dashboard.refresh())

        mock_feed_client.fetch_snapshot.return_value = sample_snapshot
        result = run(dashboard.refresh())

        assert result.success is True
        assert renderer.last("panel").placeholder is None


class TestUserControls:
    """Tests for filter and sort changes."""

    def test_update_filters_refreshes(self, dashboard, renderer, mock_feed_client):
        result = run(dashboard.update_filters(min_magnitude=4.0))

        assert result.trigger == TRIGGER_FILTER
        assert dashboard.state.filters == FilterParams(min_magnitude=4.0)
        assert mock_feed_client.fetch_snapshot.call_count == 1
        assert [m.id for m in renderer.last("markers")] == ["b", "c"]

    def test_update_filters_keeps_unchanged_values(self, dashboard):
        run(dashboard.update_filters(max_depth_km=12.0))
        run(dashboard.update_filters(query="alaska"))

        assert dashboard.state.filters == FilterParams(max_depth_km=12.0, query="alaska")

    @pytest.mark.parametrize("field", ["min_magnitude", "max_depth_km"])
    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "inf"])
    def test_update_filters_rejects_non_finite(self, dashboard, mock_feed_client, field, value):
        run(dashboard.update_filters(min_magnitude=2.0))
        mock_feed_client.fetch_snapshot.reset_mock()

        with pytest.raises(ValueError, match=field):
            run(dashboard.update_filters(**{field: value}))

        assert dashboard.state.filters == FilterParams(min_magnitude=2.0)
        mock_feed_client.fetch_snapshot.assert_not_called()

    def test_stats_total_counts_unparsed_features(self, dashboard, renderer, mock_feed_client):
        mock_feed_client.fetch_snapshot.return_value = Snapshot(
            earthquakes=(make_earthquake("a", 3.5, 5.0, 1000),),
            fetched_at=FIXED_NOW,
            feature_count=4,
        )

        result = run(dashboard.refresh())

        assert result.earthquakes_fetched == 4
        assert renderer.last("stats").total_count == 4
        assert renderer.last("stats").match_count == 1

    def test_query_filters_places(self, dashboard, renderer):
        run(dashboard.update_filters(query="Alaska"))

        assert [e.id for e in renderer.last("list").entries] == ["b", "c"]

    def test_set_sort_key_refreshes(self, dashboard, renderer):
        result = run(dashboard.set_sort_key("magnitude"))

        assert result.trigger == TRIGGER_SORT
        assert dashboard.state.sort_key == SortKey.MAGNITUDE
        assert [e.id for e in renderer.last("list").entries] == ["c", "b", "a"]
        # Panel stays newest first regardless of sort key
        assert [e.id for e in renderer.last("panel").entries] == ["b", "c", "a"]

    def test_sort_by_depth(self, dashboard, renderer):
        run(dashboard.set_sort_key(SortKey.DEPTH))

        assert [e.id for e in renderer.last("list").entries] == ["a", "b", "c"]

    def test_unknown_sort_key_does_not_fetch(self, dashboard, mock_feed_client):
        with pytest.raises(ValueError):
            run(dashboard.set_sort_key("distance"))

        mock_feed_client.fetch_snapshot.assert_not_called()


class TestViewMode:
    """Tests for map/list switching."""

    def test_starts_on_map(self, dashboard):
        assert dashboard.state.mode == ViewMode.MAP

    def test_show_list_does_not_touch_map(self, dashboard, map_widget):
        async def scenario():
            dashboard.show_list()
            await asyncio.sleep(0.05)

        run(scenario())

        assert dashboard.state.mode == ViewMode.LIST
        assert map_widget.invalidations == 0

    def test_show_map_defers_layout_refresh(self, dashboard, map_widget):
        async def scenario():
            dashboard.show_list()
            dashboard.show_map()
            before = map_widget.invalidations
            await asyncio.sleep(0.05)
            return before

        before = run(scenario())

        assert dashboard.state.mode == ViewMode.MAP
        assert before == 0
        assert map_widget.invalidations == 1

    def test_mode_change_does_not_refresh(self, dashboard, mock_feed_client, renderer):
        async def scenario():
            dashboard.set_mode(ViewMode.LIST)
            dashboard.set_mode(ViewMode.MAP)

        run(scenario())

        mock_feed_client.fetch_snapshot.assert_not_called()
        assert renderer.calls == []


class TestSelect:
    """Tests for Dashboard.select()."""

    def test_centers_map_and_switches_to_map(self, dashboard, map_widget):
        async def scenario():
            await dashboard.refresh()
            dashboard.show_list()
            found = dashboard.select("c")
            await asyncio.sleep(0.05)
            return found

        found = run(scenario())

        assert found is True
        assert map_widget.views == [(pytest.approx(16.2), -115.0, 5)]
        assert dashboard.state.mode == ViewMode.MAP
        assert map_widget.invalidations == 1

    def test_unknown_id_is_ignored(self, dashboard, map_widget):
        async def scenario():
            await dashboard.refresh()
            dashboard.show_list()
            return dashboard.select("missing")

        assert run(scenario()) is False
        assert map_widget.views == []
        assert dashboard.state.mode == ViewMode.LIST

    def test_filtered_out_earthquake_is_not_selectable(self, dashboard):
        async def scenario():
            await dashboard.update_filters(min_magnitude=5.0)
            return dashboard.select("a")

        assert run(scenario()) is False


class BlockingFeedDashboard(Dashboard):
    """Dashboard whose fetches complete when the test releases them."""

    def __init__(self, *args, responses, **kwargs):
        super().__init__(*args, **kwargs)
        self.responses = responses
        self.gates: list[asyncio.Event] = []

    async def _fetch(self):
        gate = asyncio.Event()
        index = len(self.gates)
        self.gates.append(gate)
        await gate.wait()
        return self.responses[index]


class TestOverlappingRefreshes:
    """Tests for refreshes that complete out of order."""

    def _scenario(self, dashboard):
        async def scenario():
            older = asyncio.create_task(dashboard.refresh(TRIGGER_FILTER))
            newer = asyncio.create_task(dashboard.refresh(TRIGGER_FILTER))
            await asyncio.sleep(0)
            dashboard.gates[1].set()
            await asyncio.sleep(0.01)
            dashboard.gates[0].set()
            return await older, await newer

        return run(scenario())

    def _responses(self):
        return [
            make_snapshot(make_earthquake("old", 3.0, 5.0, 1000)),
            make_snapshot(make_earthquake("new", 4.0, 5.0, 2000)),
        ]

    def test_stale_response_is_discarded(self, config, renderer):
        dashboard = BlockingFeedDashboard(
            config,
            feed_client=Mock(),
            renderer=renderer,
            responses=self._responses(),
        )

        older, newer = self._scenario(dashboard)

        assert newer.success is True
        assert older.stale is True
        assert [m.id for m in renderer.last("markers")] == ["new"]
        assert renderer.count("markers") == 1

    def test_last_to_complete_wins_without_guard(self, renderer):
        config = Config(discard_stale_responses=False)
        dashboard = BlockingFeedDashboard(
            config,
            feed_client=Mock(),
            renderer=renderer,
            responses=self._responses(),
        )

        older, newer = self._scenario(dashboard)

        assert older.success is True
        assert newer.success is True
        assert [m.id for m in renderer.last("markers")] == ["old"]


class TestTimer:
    """Tests for the periodic refresh timer."""

    def test_initial_load_then_periodic(self, mock_feed_client, renderer):
        config = Config(refresh_interval_seconds=0.02)
        dashboard = Dashboard(config, feed_client=mock_feed_client, renderer=renderer)
        triggers = []
        original_refresh = dashboard.refresh

        async def tracking_refresh(trigger=TRIGGER_MANUAL):
            triggers.append(trigger)
            return await original_refresh(trigger)

        dashboard.refresh = tracking_refresh

        async def scenario():
            dashboard.start()
            await asyncio.sleep(0.15)
            await dashboard.stop()

        run(scenario())

        assert triggers[0] == TRIGGER_INITIAL
        assert TRIGGER_TIMER in triggers[1:]
        assert mock_feed_client.fetch_snapshot.call_count >= 2

    def test_errors_do_not_stop_timer(self, renderer):
        feed_client = Mock()
        feed_client.fetch_snapshot.side_effect = RuntimeError("unexpected")
        config = Config(refresh_interval_seconds=0.02)
        dashboard = Dashboard(config, feed_client=feed_client, renderer=renderer)

        async def scenario():
            dashboard.start()
            await asyncio.sleep(0.15)
            await dashboard.stop()

        run(scenario())

        assert feed_client.fetch_snapshot.call_count >= 2

    def test_start_is_idempotent(self, dashboard):
        async def scenario():
            first = dashboard.start()
            second = dashboard.start()
            await dashboard.stop()
            return first is second

        assert run(scenario()) is True

    def test_run_forever_until_cancelled(self, mock_feed_client, renderer):
        config = Config(refresh_interval_seconds=0.02)
        dashboard = Dashboard(config, feed_client=mock_feed_client, renderer=renderer)

        async def scenario():
            task = asyncio.create_task(dashboard.run_forever())
            await asyncio.sleep(0.1)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            await dashboard.stop()

        run(scenario())

        assert mock_feed_client.fetch_snapshot.call_count >= 2
