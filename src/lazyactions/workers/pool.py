"""Thread helpers for background fetches."""

from __future__ import annotations

from concurrent.futures import Executor, Future
import os
import threading
from typing import Any, Callable


def normalize_worker_count(requested: int | None) -> int:
    """Return a safe number of concurrent fetch threads."""

    if requested is None:
        return 1
    workers = max(1, int(requested))
    # Fetches are I/O bound, so allow a few more threads than cores.
    ceiling = max(4, (os.cpu_count() or 1) * 2)
    return min(workers, ceiling)


class DaemonThreadExecutor(Executor):
    """Run each submitted call on its own daemon thread.

    Unlike ``ThreadPoolExecutor``, nothing joins these threads at interpreter
    exit, so a ``gh`` call still in flight never holds the process open after
    the user quits. At most ``max_workers`` calls run at once; the rest wait
    inside their own thread, so ``submit`` never blocks the caller.
    """

    def __init__(self, max_workers: int = 1, *, thread_name_prefix: str = "worker") -> None:
        self._slots = threading.BoundedSemaphore(max_workers)
        self._prefix = thread_name_prefix
        self._lock = threading.Lock()
        self._closed = False
        self._counter = 0

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        with self._lock:
            if self._closed:
                raise RuntimeError("cannot schedule new futures after shutdown")
            self._counter += 1
            name = f"{self._prefix}_{self._counter}"

        future: Future = Future()
        thread = threading.Thread(
            target=self._run,
            args=(future, fn, args, kwargs),
            name=name,
            daemon=True,
        )
        thread.start()
        return future

    def _run(
        self,
        future: Future,
        fn: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        with self._slots:
            if self._closed or not future.set_running_or_notify_cancel():
                future.cancel()
                return
            try:
                result = fn(*args, **kwargs)
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        # Running calls are never joined; waiting ones see the closed flag.
        with self._lock:
            self._closed = True


def create_fetch_executor(requested: int | None) -> DaemonThreadExecutor:
    return DaemonThreadExecutor(
        max_workers=normalize_worker_count(requested),
        thread_name_prefix="lazyactions-fetch",
    )
