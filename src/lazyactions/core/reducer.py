"""Single-threaded reducer that owns all mutable dashboard state."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Callable
import webbrowser

from lazyactions.core.events import (
    Event,
    EventBus,
    FetchCompleted,
    FetchStarted,
    Intent,
    KeyPress,
    NavigationIntent,
    RawInput,
)
from lazyactions.core.grouping import PresentationModel, build_presentation
from lazyactions.core.models import Job, MAX_DISPLAYED_JOBS
from lazyactions.core.navigation import (
    NavigationState,
    change_category,
    change_row,
    change_scroll,
    clamp_to_model,
    toggle_details,
)
from lazyactions.core.store import JobStore
from lazyactions.observability.logging import get_logger, log_event


_LOGGER = get_logger("lazyactions.reducer")

DEFAULT_PAGE_SIZE = 25

STATUS_INITIAL = "Initializing..."
STATUS_FETCHING = "Fetching data..."
STATUS_UPDATED = "Data updated."

QUIT_KEYS: frozenset[KeyPress] = frozenset(
    {
        KeyPress("escape"),
        KeyPress("q"),
        KeyPress("c", ctrl=True),
        KeyPress("C", ctrl=True),
    }
)

KEY_BINDINGS: dict[KeyPress, Intent] = {
    KeyPress("left"): Intent.NAVIGATE_LEFT,
    KeyPress("h"): Intent.NAVIGATE_LEFT,
    KeyPress("right"): Intent.NAVIGATE_RIGHT,
    KeyPress("l"): Intent.NAVIGATE_RIGHT,
    KeyPress("up"): Intent.NAVIGATE_UP,
    KeyPress("k"): Intent.NAVIGATE_UP,
    KeyPress("down"): Intent.NAVIGATE_DOWN,
    KeyPress("j"): Intent.NAVIGATE_DOWN,
    KeyPress("pageup"): Intent.PAGE_UP,
    KeyPress("pagedown"): Intent.PAGE_DOWN,
    KeyPress("enter"): Intent.TOGGLE_DETAILS,
    KeyPress("backspace"): Intent.OPEN_URL,
    KeyPress("o"): Intent.OPEN_URL,
}


@dataclass(slots=True)
class AppState:
    """Everything the renderer may read; only the reducer writes it."""

    store: JobStore = field(default_factory=JobStore)
    presentation: PresentationModel = field(default_factory=PresentationModel.empty)
    nav: NavigationState = field(default_factory=NavigationState)
    status_text: str = STATUS_INITIAL
    running: bool = True
    last_applied_generation: int = 0

    def selected_job(self) -> Job | None:
        return self.store.get(self.nav.selected_position)


class Reducer:
    """Apply bus events to :class:`AppState`, one at a time, in order."""

    def __init__(
        self,
        bus: EventBus,
        *,
        capacity: int = MAX_DISPLAYED_JOBS,
        page_size: int = DEFAULT_PAGE_SIZE,
        opener: Callable[[str], object] = webbrowser.open,
    ) -> None:
        self.bus = bus
        self.page_size = page_size
        self.opener = opener
        self.state = AppState(store=JobStore(capacity))

    def handle(self, event: Event) -> None:
        if isinstance(event, FetchStarted):
            self.state.status_text = STATUS_FETCHING
            return
        if isinstance(event, FetchCompleted):
            self._apply_fetch(event)
            return
        if isinstance(event, RawInput):
            self._apply_key(event.key)
            return
        if isinstance(event, NavigationIntent):
            self._apply_intent(event.intent)
            return
        raise TypeError(f"Unsupported event type: {type(event).__name__}")

    def quit(self) -> None:
        self.state.running = False

    def selected_job(self) -> Job | None:
        return self.state.selected_job()

    def _apply_fetch(self, event: FetchCompleted) -> None:
        result = event.result
        if result.snapshot is None:
            self.state.status_text = f"Error: {result.error or 'unknown error'}"
            return

        state = self.state
        if event.generation < state.last_applied_generation:
            # Results are applied in arrival order, even when a newer tick
            # already landed.
            log_event(
                _LOGGER,
                "stale_fetch_applied",
                level=logging.WARNING,
                generation=event.generation,
                last_applied_generation=state.last_applied_generation,
            )
        state.store.replace(result.snapshot.jobs)
        state.presentation = build_presentation(state.store)
        state.nav = clamp_to_model(state.nav, state.presentation)
        state.last_applied_generation = max(state.last_applied_generation, event.generation)
        state.status_text = STATUS_UPDATED

    def _apply_key(self, key: KeyPress) -> None:
        if key in QUIT_KEYS:
            self.quit()
            return
        intent = KEY_BINDINGS.get(key)
        if intent is not None:
            self.bus.send(NavigationIntent(intent))

    def _apply_intent(self, intent: Intent) -> None:
        state = self.state
        model = state.presentation
        if intent is Intent.NAVIGATE_LEFT:
            state.nav = change_category(state.nav, model, -1)
        elif intent is Intent.NAVIGATE_RIGHT:
            state.nav = change_category(state.nav, model, 1)
        elif intent is Intent.NAVIGATE_UP:
            state.nav = change_row(state.nav, model, -1)
        elif intent is Intent.NAVIGATE_DOWN:
            state.nav = change_row(state.nav, model, 1)
        elif intent is Intent.PAGE_UP:
            state.nav = change_scroll(state.nav, -self.page_size)
        elif intent is Intent.PAGE_DOWN:
            state.nav = change_scroll(state.nav, self.page_size)
        elif intent is Intent.TOGGLE_DETAILS:
            state.nav = toggle_details(state.nav)
        elif intent is Intent.OPEN_URL:
            self._open_selected()

    def _open_selected(self) -> None:
        job = self.selected_job()
        if job is None or not job.html_url:
            return
        try:
            self.opener(job.html_url)
        except Exception as exc:
            log_event(
                _LOGGER,
                "open_url_failed",
                level=logging.WARNING,
                url=job.html_url,
                error=f"{type(exc).__name__}: {exc}",
            )
