"""Event types and the ordered bus that carries them to the reducer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import queue
import threading

from lazyactions.core.models import FetchResult


@dataclass(frozen=True, slots=True)
class KeyPress:
    """Terminal-independent key press: a key code plus modifier flags."""

    code: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False

    @classmethod
    def parse(cls, text: str) -> "KeyPress":
        """Parse ``"ctrl+c"`` style key names, as Textual reports them."""

        parts = [part for part in text.strip().split("+") if part]
        if not parts:
            # A bare "+" keystroke splits into nothing.
            return cls(code="+" if "+" in text else "")
        modifiers = {part.lower() for part in parts[:-1]}
        return cls(
            code=parts[-1],
            ctrl="ctrl" in modifiers,
            alt="alt" in modifiers or "meta" in modifiers,
            shift="shift" in modifiers,
        )


class Intent(Enum):
    """Navigation and action requests decoded from key presses."""

    NAVIGATE_LEFT = "navigate_left"
    NAVIGATE_RIGHT = "navigate_right"
    NAVIGATE_UP = "navigate_up"
    NAVIGATE_DOWN = "navigate_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    TOGGLE_DETAILS = "toggle_details"
    OPEN_URL = "open_url"


@dataclass(frozen=True, slots=True)
class FetchStarted:
    generation: int


@dataclass(frozen=True, slots=True)
class FetchCompleted:
    result: FetchResult
    generation: int


@dataclass(frozen=True, slots=True)
class RawInput:
    key: KeyPress


@dataclass(frozen=True, slots=True)
class NavigationIntent:
    intent: Intent


Event = FetchStarted | FetchCompleted | RawInput | NavigationIntent


class EventBus:
    """Many-producer, single-consumer FIFO of dashboard events.

    Producers never block. Once closed, sends are dropped without error so
    background threads can outlive the consumer during shutdown.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[Event] = queue.Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, event: Event) -> None:
        if self._closed.is_set():
            return
        self._queue.put_nowait(event)

    def next(self, timeout: float | None = None) -> Event | None:
        """Block until an event arrives; ``None`` after ``timeout`` seconds."""

        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self) -> None:
        self._closed.set()

    def __len__(self) -> int:
        return self._queue.qsize()
