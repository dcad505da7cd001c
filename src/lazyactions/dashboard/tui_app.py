"""Textual front end that renders the dashboard state and feeds key presses."""

from __future__ import annotations

from concurrent.futures import Executor
import sys
from typing import Callable

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Header, Static
from textual.worker import get_current_worker

from lazyactions.config.schema import DashboardConfig
from lazyactions.core.events import Event, EventBus, KeyPress
from lazyactions.core.models import Category
from lazyactions.core.reducer import Reducer
from lazyactions.core.ticker import FetchFn, QueueInputReader, Ticker
from lazyactions.observability.logging import get_logger, log_event
from lazyactions.workers.pool import create_fetch_executor

from .tui_render import column_panel, details_panel, header_text


_LOGGER = get_logger("lazyactions.dashboard")

_DRAIN_POLL_SEC = 0.25

_COLUMN_IDS: dict[Category, str] = {
    Category.IN_PROGRESS: "column_in_progress",
    Category.SUCCESS: "column_success",
    Category.FAILURE: "column_failure",
}


class LazyActionsApp(App[None]):
    """Three-column GitHub Actions job monitor."""

    TITLE = "lazyactions"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header_bar {
        height: 6;
        padding: 0 1;
        border: round magenta;
    }

    #columns {
        height: 1fr;
    }

    .job_column {
        width: 1fr;
        height: 1fr;
    }

    #details_panel {
        height: 30%;
        display: none;
    }

    #details_panel.visible {
        display: block;
    }
    """

    # Ctrl+C is claimed by Textual itself; route it through the input reader
    # like every other quit key.
    BINDINGS = [
        Binding("ctrl+c", "forward_key('ctrl+c')", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        *,
        config: DashboardConfig,
        fetch: FetchFn,
        opener: Callable[[str], object] | None = None,
        executor: Executor | None = None,
    ) -> None:
        super().__init__()
        self.config = config
        self.bus = EventBus()
        self.input_reader = QueueInputReader()
        reducer_options: dict[str, object] = {}
        if opener is not None:
            reducer_options["opener"] = opener
        self.reducer = Reducer(
            self.bus,
            capacity=config.max_displayed_jobs,
            page_size=config.page_size,
            **reducer_options,
        )
        self.executor = executor or create_fetch_executor(config.fetch_workers)
        self.ticker = Ticker(
            self.bus,
            fetch,
            self.input_reader,
            executor=self.executor,
            rate=config.refresh_rate,
        )

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Static(id="header_bar")
        with Vertical(id="body"):
            with Horizontal(id="columns"):
                for category in Category:
                    yield Static(id=_COLUMN_IDS[category], classes="job_column")
            yield Static(id="details_panel")

    def on_mount(self) -> None:
        log_event(
            _LOGGER,
            "dashboard_started",
            refresh_period=round(self.config.refresh_period, 3),
            filters=repr(self.config.filters),
        )
        self._render_state()
        self.ticker.start()
        self.run_worker(self._drain_events, name="event-drain", thread=True, exclusive=True)

    def on_unmount(self) -> None:
        self._stop_engine()

    def on_resize(self, _event: events.Resize) -> None:
        self.call_after_refresh(self._render_state)

    def on_key(self, event: events.Key) -> None:
        self.input_reader.feed(KeyPress.parse(event.key))
        event.stop()

    def action_forward_key(self, key: str) -> None:
        self.input_reader.feed(KeyPress.parse(key))

    def _drain_events(self) -> None:
        worker = get_current_worker()
        while not worker.is_cancelled:
            event = self.bus.next(timeout=_DRAIN_POLL_SEC)
            if event is None:
                continue
            if worker.is_cancelled or self.bus.closed:
                return
            self.call_from_thread(self._apply_event, event)
            if not self.reducer.state.running:
                return

    def _apply_event(self, event: Event) -> None:
        self.reducer.handle(event)
        if not self.reducer.state.running:
            self._stop_engine()
            self.exit()
            return
        self._render_state()

    def _stop_engine(self) -> None:
        if self.bus.closed:
            return
        self.ticker.stop()
        self.bus.close()
        self.executor.shutdown(wait=False, cancel_futures=True)
        log_event(_LOGGER, "dashboard_stopped", generation=self.ticker.generation)

    def _render_state(self) -> None:
        state = self.reducer.state
        self.query_one("#header_bar", Static).update(
            header_text(state, refresh_period=self.config.refresh_period)
        )
        for category in Category:
            column = self.query_one(f"#{_COLUMN_IDS[category]}", Static)
            height = column.size.height or None
            column.update(column_panel(state, category, height=height))

        details = self.query_one("#details_panel", Static)
        details.set_class(state.nav.show_details, "visible")
        if state.nav.show_details:
            details.update(details_panel(state))


def run_dashboard(config: DashboardConfig, fetch: FetchFn) -> None:
    """Run the interactive dashboard until the user quits."""

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise SystemExit("lazyactions watch requires an interactive terminal")

    app = LazyActionsApp(config=config, fetch=fetch)
    app.run()
