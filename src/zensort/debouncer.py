"""Turns noisy create/rename notifications into one stabilized event per file.

Every notification for a path starts (or restarts) a settle window. When the
window expires the path is checked again: if it is gone, no longer a regular
file, or still carries an ignored extension (a download still in progress),
it is dropped. Otherwise the dispatch callback runs exactly once for that
window. Notifications that arrive while a path is settling are coalesced.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from .file_discovery import should_ignore
from .logging_utils import render_fields_block

LOGGER = logging.getLogger(__name__)

DEFAULT_SETTLE_SECONDS = 0.5


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def start_thread_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Default timer factory: a daemon ``threading.Timer`` that is already running."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class ChangeDebouncer:
    """Debounces filesystem notifications for a single watched directory.

    ``timer_factory`` receives the settle delay and the expiry callback and
    returns something with a ``cancel()`` method. It must not invoke the
    callback synchronously.
    """

    def __init__(
        self,
        dispatch: Callable[[Path], None],
        *,
        settle_seconds: float = DEFAULT_SETTLE_SECONDS,
        timer_factory: TimerFactory = start_thread_timer,
    ) -> None:
        if settle_seconds < 0:
            raise ValueError("settle_seconds must be greater than or equal to 0")
        self._dispatch = dispatch
        self._settle_seconds = settle_seconds
        self._timer_factory = timer_factory
        self._pending: dict[Path, tuple[int, TimerHandle]] = {}
        self._tokens = itertools.count(1)
        self._lock = threading.RLock()
        self._closed = False

    @property
    def settle_seconds(self) -> float:
        return self._settle_seconds

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def is_settling(self, path: Path | str) -> bool:
        with self._lock:
            return Path(path) in self._pending

    def notify(self, path: Path | str) -> None:
        """Record a created/renamed notification and (re)start its settle window."""
        path = Path(path)
        with self._lock:
            if self._closed:
                return
            token = next(self._tokens)
            previous = self._pending.get(path)
            if previous is not None:
                previous[1].cancel()
            timer = self._timer_factory(self._settle_seconds, lambda: self._settle(path, token))
            self._pending[path] = (token, timer)

    def _settle(self, path: Path, token: int) -> None:
        with self._lock:
            entry = self._pending.get(path)
            if self._closed or entry is None or entry[0] != token:
                return
            del self._pending[path]

            reason = self._drop_reason(path)
            if reason:
                LOGGER.debug(render_fields_block("Dropped Notification", {"Path": path, "Reason": reason}))
                return
            self._dispatch(path)

    @staticmethod
    def _drop_reason(path: Path) -> str | None:
        if should_ignore(path):
            return "ignored extension"
        try:
            if not path.is_file():
                return "missing or not a regular file"
        except OSError as exc:
            return str(exc)
        return None

    def cancel_all(self) -> None:
        """Cancel every settle window; nothing pending will dispatch afterwards."""
        with self._lock:
            self._closed = True
            pending = list(self._pending.values())
            self._pending.clear()
        for _, timer in pending:
            timer.cancel()
        if pending:
            LOGGER.debug("Cancelled %d pending settle timer(s)", len(pending))
