from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from queue import Queue

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .debouncer import DEFAULT_SETTLE_SECONDS, ChangeDebouncer, TimerFactory, start_thread_timer
from .errors import WatchSetupError
from .logging_utils import render_fields_block

LOGGER = logging.getLogger(__name__)


def validate_watch_root(root: Path) -> None:
    """Raise ``WatchSetupError`` unless ``root`` is a readable directory."""
    if not root.exists():
        raise WatchSetupError(root, "directory does not exist")
    if not root.is_dir():
        raise WatchSetupError(root, "not a directory")
    if not os.access(root, os.R_OK | os.X_OK):
        raise WatchSetupError(root, "permission denied")


class _RootEventHandler(FileSystemEventHandler):
    """Forwards file creations and renames landing directly in ``root``."""

    def __init__(self, root: Path, notify: Callable[[Path], None]) -> None:
        super().__init__()
        self._root = root
        self._real_root = Path(os.path.realpath(root))
        self._notify = notify

    def on_created(self, event) -> None:  # type: ignore[override]
        if getattr(event, "is_directory", False):
            return
        self._emit(event.src_path)

    def on_moved(self, event) -> None:  # type: ignore[override]
        if getattr(event, "is_directory", False):
            return
        self._emit(event.dest_path)

    def _emit(self, raw_path: str | bytes) -> None:
        path = Path(os.fsdecode(raw_path))
        # files moved into sub-folders (including our own moves) are not ours to handle
        if path.parent != self._root and Path(os.path.realpath(path.parent)) != self._real_root:
            return
        self._notify(path)


class DirectoryWatcher:
    """Watches one directory (non-recursively) and feeds stabilized files to ``handle``.

    Notifications go through a ``ChangeDebouncer``; stabilized paths are queued
    and consumed by a single worker thread, so ``handle`` is never called
    concurrently and runs in settle-expiry order.
    """

    def __init__(
        self,
        root: Path | str,
        handle: Callable[[Path], object],
        *,
        settle_seconds: float = DEFAULT_SETTLE_SECONDS,
        timer_factory: TimerFactory = start_thread_timer,
        observer_factory: Callable[[], object] = Observer,
    ) -> None:
        self.root = Path(root).expanduser().absolute()
        self._handle = handle
        self._queue: Queue[Path | None] = Queue()
        self._debouncer = ChangeDebouncer(self._queue.put, settle_seconds=settle_seconds, timer_factory=timer_factory)
        self._handler = _RootEventHandler(self.root, self._debouncer.notify)
        self._observer_factory = observer_factory
        self._observer = None
        self._worker: threading.Thread | None = None
        self._stopped = threading.Event()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def event_handler(self) -> FileSystemEventHandler:
        return self._handler

    @property
    def debouncer(self) -> ChangeDebouncer:
        return self._debouncer

    def start(self) -> None:
        if self._running:
            return
        if self._stopped.is_set():
            raise RuntimeError("A stopped DirectoryWatcher cannot be restarted")
        validate_watch_root(self.root)

        observer = self._observer_factory()
        try:
            observer.schedule(self._handler, str(self.root), recursive=False)
            observer.start()
        except OSError as exc:
            raise WatchSetupError(self.root, str(exc)) from exc

        self._observer = observer
        self._worker = threading.Thread(target=self._run_worker, name="zensort-watch-worker", daemon=True)
        self._worker.start()
        self._running = True
        LOGGER.info(
            render_fields_block(
                "Watching Directory",
                {"Root": self.root, "Settle Delay": f"{self._debouncer.settle_seconds:g}s"},
            )
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Stop watching; pending settle windows and queued paths are discarded."""
        if not self._running:
            return
        self._running = False
        self._stopped.set()
        self._debouncer.cancel_all()

        observer = self._observer
        if observer is not None:
            observer.stop()
            observer.join(timeout=timeout)

        self._queue.put(None)
        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=timeout)
        LOGGER.info(render_fields_block("Stopped Watching", {"Root": self.root}))

    def _run_worker(self) -> None:
        while True:
            path = self._queue.get()
            try:
                if path is None:
                    return
                if self._stopped.is_set():
                    LOGGER.debug("Discarding queued path after stop: %s", path)
                    continue
                try:
                    self._handle(path)
                except Exception:  # noqa: BLE001
                    LOGGER.exception("Error organizing %s", path)
            finally:
                self._queue.task_done()


__all__ = ["DirectoryWatcher", "validate_watch_root"]
