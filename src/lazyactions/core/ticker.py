"""Periodic fetch scheduling, background fetch workers and input polling."""

from __future__ import annotations

from concurrent.futures import Executor
import queue
import threading
import time
from typing import Callable, Protocol

from lazyactions.core.events import (
    EventBus,
    FetchCompleted,
    FetchStarted,
    KeyPress,
    RawInput,
)
from lazyactions.core.models import FetchResult, WorkflowSnapshot
from lazyactions.observability.logging import get_logger, log_event


_LOGGER = get_logger("lazyactions.ticker")

DEFAULT_REFRESH_RATE = 0.15

FetchFn = Callable[[], WorkflowSnapshot]


class InputReader(Protocol):
    def read(self, timeout: float) -> KeyPress | None:
        """Wait up to ``timeout`` seconds for one key press."""


class QueueInputReader:
    """Input source fed by a UI toolkit that owns the real terminal."""

    def __init__(self) -> None:
        self._keys: queue.Queue[KeyPress] = queue.Queue()

    def feed(self, key: KeyPress) -> None:
        self._keys.put_nowait(key)

    def read(self, timeout: float) -> KeyPress | None:
        try:
            if timeout <= 0:
                return self._keys.get_nowait()
            return self._keys.get(timeout=timeout)
        except queue.Empty:
            return None


def run_fetch(fetch: FetchFn, bus: EventBus, generation: int) -> None:
    """Run one blocking fetch and report its outcome on the bus.

    Any failure of the collaborator becomes a ``FetchCompleted`` carrying an
    error message; nothing is retried and nothing propagates to the caller.
    """

    started = time.monotonic()
    try:
        snapshot = fetch()
    except Exception as exc:
        message = f"Error fetching GitHub data via gh CLI: {type(exc).__name__}: {exc}"
        log_event(
            _LOGGER,
            "fetch_failed",
            generation=generation,
            error=message,
            elapsed_sec=round(time.monotonic() - started, 3),
        )
        bus.send(FetchCompleted(FetchResult.failed(message), generation))
        return

    log_event(
        _LOGGER,
        "fetch_succeeded",
        generation=generation,
        jobs=len(snapshot.jobs),
        runs=len(snapshot.runs),
        elapsed_sec=round(time.monotonic() - started, 3),
    )
    bus.send(FetchCompleted(FetchResult.ok(snapshot), generation))


class Ticker:
    """Fire a fetch at a fixed rate and poll input while waiting.

    One loop iteration decides whether a fetch is due and then waits on the
    input reader for exactly the time left until the next one, so neither
    concern starves the other.
    """

    def __init__(
        self,
        bus: EventBus,
        fetch: FetchFn,
        input_reader: InputReader,
        *,
        executor: Executor,
        rate: float = DEFAULT_REFRESH_RATE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if rate <= 0:
            raise ValueError(f"Refresh rate must be positive, got {rate}")
        self.bus = bus
        self.fetch = fetch
        self.input_reader = input_reader
        self.executor = executor
        self.period = 1.0 / rate
        self._clock = clock
        self._generation = 0
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def generation(self) -> int:
        return self._generation

    def fire(self) -> None:
        """Announce a fetch and hand it to the executor without waiting."""

        self._generation += 1
        generation = self._generation
        self.bus.send(FetchStarted(generation))
        log_event(_LOGGER, "fetch_started", generation=generation)
        try:
            self.executor.submit(run_fetch, self.fetch, self.bus, generation)
        except RuntimeError:
            # Executor already shut down: the dashboard is exiting.
            self._stop_event.set()

    def run(self, stop_event: threading.Event | None = None) -> None:
        stop = stop_event or self._stop_event
        last_tick = self._clock()
        first = True

        while not stop.is_set() and not self._stop_event.is_set():
            remaining = max(0.0, self.period - (self._clock() - last_tick))
            if remaining == 0.0 or first:
                last_tick = self._clock()
                first = False
                self.fire()

            key = self.input_reader.read(remaining)
            if key is not None:
                self.bus.send(RawInput(key))

    def start(self) -> threading.Thread:
        thread = threading.Thread(target=self.run, name="lazyactions-ticker", daemon=True)
        self._thread = thread
        thread.start()
        return thread

    def stop(self) -> None:
        self._stop_event.set()
