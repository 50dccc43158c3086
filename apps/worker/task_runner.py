from __future__ import annotations

import logging
import threading
import traceback
from concurrent.futures import Future
from typing import Any, Callable

logger = logging.getLogger(__name__)

TRACEBACK_FRAMES = 5


def _log_job_error(exc: BaseException) -> None:
    frames = traceback.format_tb(exc.__traceback__)[:TRACEBACK_FRAMES]
    logger.error(
        "Error in async job",
        extra={"error": f"{type(exc).__name__}: {exc}", "backtrace": "".join(frames)},
    )


def _run_isolated(future: Future, fn: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
    if not future.set_running_or_notify_cancel():
        return
    try:
        result = fn(*args, **kwargs)
    except Exception as exc:  # noqa: BLE001
        _log_job_error(exc)
        future.set_result(None)
        return
    future.set_result(result)


class ThreadTaskRunner:
    """Runs each dispatched unit on its own daemon thread.

    No pool, queue or retry. A unit that raises is logged and its future
    resolves to ``None``; the dispatcher never sees the exception.
    """

    def __init__(self, *, name_prefix: str = "meet-job") -> None:
        self._name_prefix = name_prefix
        self._counter = 0
        self._lock = threading.Lock()

    def dispatch(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        with self._lock:
            self._counter += 1
            name = f"{self._name_prefix}-{self._counter}"
        future: Future = Future()
        thread = threading.Thread(target=_run_isolated, args=(future, fn, args, kwargs), name=name, daemon=True)
        thread.start()
        return future


class InlineTaskRunner:
    """Runs the unit immediately on the calling thread with the same isolation."""

    def dispatch(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        _run_isolated(future, fn, args, kwargs)
        return future
