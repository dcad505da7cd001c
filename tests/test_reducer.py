"""Tests for the state reducer transitions."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from lazyactions.core.events import (
    EventBus,
    FetchCompleted,
    FetchStarted,
    Intent,
    KeyPress,
    NavigationIntent,
    RawInput,
)
from lazyactions.core.models import Category, FetchResult, WorkflowSnapshot
from lazyactions.core.reducer import (
    STATUS_FETCHING,
    STATUS_INITIAL,
    STATUS_UPDATED,
    Reducer,
)

from conftest import build_job


def _pump(reducer: Reducer) -> None:
    """Apply everything queued on the reducer's bus, like the UI loop does."""

    while True:
        event = reducer.bus.next(timeout=0)
        if event is None:
            return
        reducer.handle(event)


def _press(reducer: Reducer, code: str, **modifiers: bool) -> None:
    reducer.handle(RawInput(KeyPress(code, **modifiers)))
    _pump(reducer)


def _loaded(snapshot: WorkflowSnapshot, **kwargs: object) -> Reducer:
    reducer = Reducer(EventBus(), **kwargs)  # type: ignore[arg-type]
    reducer.handle(FetchCompleted(FetchResult.ok(snapshot), generation=1))
    return reducer


class TestFetchTransitions:
    def test_initial_state(self) -> None:
        state = Reducer(EventBus()).state

        assert state.status_text == STATUS_INITIAL
        assert state.running
        assert len(state.store) == 0

    def test_fetch_started_only_changes_status(self) -> None:
        reducer = Reducer(EventBus())

        reducer.handle(FetchStarted(1))

        assert reducer.state.status_text == STATUS_FETCHING
        assert len(reducer.state.store) == 0

    def test_successful_fetch_rebuilds_model(self, three_job_snapshot: WorkflowSnapshot) -> None:
        reducer = _loaded(three_job_snapshot)
        state = reducer.state

        assert state.status_text == STATUS_UPDATED
        assert len(state.store) == 3
        assert list(state.presentation.groups(Category.IN_PROGRESS)) == ["Build"]
        assert list(state.presentation.groups(Category.SUCCESS)) == ["Build"]
        assert list(state.presentation.groups(Category.FAILURE)) == ["Deploy"]
        assert reducer.selected_job() == three_job_snapshot.jobs[0]

    def test_failed_fetch_keeps_previous_data(self, three_job_snapshot: WorkflowSnapshot) -> None:
        reducer = _loaded(three_job_snapshot)
        presentation = reducer.state.presentation

        reducer.handle(FetchCompleted(FetchResult.failed("network down"), generation=2))
        reducer.handle(FetchCompleted(FetchResult.failed("still down"), generation=3))

        assert reducer.state.status_text == "Error: still down"
        assert len(reducer.state.store) == 3
        assert reducer.state.presentation is presentation

    def test_row_is_clamped_when_category_shrinks(self) -> None:
        jobs = tuple(build_job(f"Build / {idx}") for idx in range(4))
        reducer = _loaded(WorkflowSnapshot(jobs=jobs))
        for _ in range(3):
            _press(reducer, "down")
        assert reducer.state.nav.row_index == 3

        reducer.handle(FetchCompleted(FetchResult.ok(WorkflowSnapshot(jobs=jobs[:2])), generation=2))

        assert reducer.state.nav.row_index == 1
        assert reducer.selected_job() == jobs[1]

    def test_older_result_arriving_late_is_still_applied(self, caplog: pytest.LogCaptureFixture) -> None:
        newer = WorkflowSnapshot(jobs=(build_job("New / job"),))
        older = WorkflowSnapshot(jobs=(build_job("Old / job"),))
        reducer = Reducer(EventBus())

        reducer.handle(FetchCompleted(FetchResult.ok(newer), generation=2))
        with caplog.at_level(logging.WARNING, logger="lazyactions"):
            reducer.handle(FetchCompleted(FetchResult.ok(older), generation=1))

        assert list(reducer.state.store) == list(older.jobs)
        assert reducer.state.last_applied_generation == 2
        assert any(record.getMessage() == "stale_fetch_applied" for record in caplog.records)

    def test_capacity_is_honoured(self) -> None:
        jobs = tuple(build_job(f"Tool / {idx}") for idx in range(5))

        reducer = _loaded(WorkflowSnapshot(jobs=jobs), capacity=3)

        assert list(reducer.state.store) == list(jobs[2:])


class TestKeyBindings:
    @pytest.mark.parametrize(
        "key",
        [KeyPress("escape"), KeyPress("q"), KeyPress("c", ctrl=True)],
    )
    def test_quit_keys_stop_running(self, key: KeyPress) -> None:
        reducer = Reducer(EventBus())

        reducer.handle(RawInput(key))

        assert not reducer.state.running

    def test_navigation_key_is_requeued_as_intent(self) -> None:
        bus = EventBus()
        reducer = Reducer(bus)

        reducer.handle(RawInput(KeyPress("right")))

        assert bus.next(timeout=0) == NavigationIntent(Intent.NAVIGATE_RIGHT)
        assert reducer.state.nav.category_index == 0

    def test_unknown_key_is_ignored(self) -> None:
        bus = EventBus()
        reducer = Reducer(bus)

        reducer.handle(RawInput(KeyPress("x")))
        reducer.handle(RawInput(KeyPress("")))

        assert bus.next(timeout=0) is None
        assert reducer.state.running

    def test_plain_c_does_not_quit(self) -> None:
        reducer = Reducer(EventBus())

        reducer.handle(RawInput(KeyPress("c")))

        assert reducer.state.running

    def test_unknown_event_type_is_rejected(self) -> None:
        with pytest.raises(TypeError):
            Reducer(EventBus()).handle("tick")  # type: ignore[arg-type]


class TestNavigationIntents:
    def test_column_and_row_navigation(self, three_job_snapshot: WorkflowSnapshot) -> None:
        reducer = _loaded(three_job_snapshot)

        _press(reducer, "right")
        assert reducer.state.nav.category is Category.SUCCESS
        assert reducer.selected_job() == three_job_snapshot.jobs[1]

        _press(reducer, "left")
        _press(reducer, "left")
        assert reducer.state.nav.category is Category.FAILURE
        assert reducer.selected_job() == three_job_snapshot.jobs[2]

        _press(reducer, "up")
        assert reducer.state.nav.row_index == 0

    def test_page_keys_scroll_by_page_size(self) -> None:
        reducer = Reducer(EventBus(), page_size=25)

        _press(reducer, "pagedown")
        _press(reducer, "pagedown")
        _press(reducer, "pageup")

        assert reducer.state.nav.scroll_offset == 25

        _press(reducer, "pageup")
        _press(reducer, "pageup")
        assert reducer.state.nav.scroll_offset == 0

    def test_details_toggle_freezes_navigation(self, three_job_snapshot: WorkflowSnapshot) -> None:
        reducer = _loaded(three_job_snapshot)

        _press(reducer, "enter")
        _press(reducer, "right")

        assert reducer.state.nav.show_details
        assert reducer.state.nav.category is Category.IN_PROGRESS

        _press(reducer, "enter")
        assert not reducer.state.nav.show_details

    def test_open_url_uses_selected_job(self, three_job_snapshot: WorkflowSnapshot) -> None:
        opener = MagicMock()
        reducer = _loaded(three_job_snapshot, opener=opener)

        _press(reducer, "right")
        _press(reducer, "backspace")

        opener.assert_called_once_with(three_job_snapshot.jobs[1].html_url)

    def test_open_url_without_selection_is_noop(self) -> None:
        opener = MagicMock()
        reducer = Reducer(EventBus(), opener=opener)

        reducer.handle(NavigationIntent(Intent.OPEN_URL))

        opener.assert_not_called()

    def test_open_url_failure_is_not_fatal(self, three_job_snapshot: WorkflowSnapshot) -> None:
        opener = MagicMock(side_effect=OSError("no browser"))
        reducer = _loaded(three_job_snapshot, opener=opener)

        reducer.handle(NavigationIntent(Intent.OPEN_URL))

        assert reducer.state.running

    def test_skipped_job_is_unreachable(self) -> None:
        skipped = build_job("Build / Docs", status="completed", conclusion="skipped")
        reducer = _loaded(WorkflowSnapshot(jobs=(skipped,)))

        for key in ("down", "right", "down", "right", "down", "right"):
            _press(reducer, key)
            assert reducer.selected_job() is None

        assert list(reducer.state.store) == [skipped]
