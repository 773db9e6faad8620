from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable, Mapping
from pathlib import Path

from .classifier import target_folder
from .debouncer import DEFAULT_SETTLE_SECONDS, TimerFactory, start_thread_timer
from .errors import InvalidRootError
from .file_discovery import gather_root_files, read_file_record, should_ignore, skip_reason_for_entry
from .logging_utils import render_fields_block
from .models import (
    FileOutcome,
    MoveError,
    MoveErrorKind,
    OrganizerState,
    OutcomeStatus,
    PreviewEntry,
    Strategy,
    SweepReport,
)
from .mover import CollisionSafeMover
from .watcher import DirectoryWatcher, validate_watch_root

LOGGER = logging.getLogger(__name__)

OutcomeListener = Callable[[FileOutcome], None]

NO_ROOT_STATUS = "Select a folder to watch and organise."


class Organizer:
    """Sweeps, watches and previews one directory under the current strategy.

    All classify-and-move cycles, whether they come from a sweep or from the
    watcher, run under one lock so collision checks never race. ``preview``
    takes no lock and is safe to call at any time.
    """

    def __init__(
        self,
        state: OrganizerState | None = None,
        *,
        mover: CollisionSafeMover | None = None,
        settle_seconds: float = DEFAULT_SETTLE_SECONDS,
        timer_factory: TimerFactory = start_thread_timer,
        observer_factory: Callable[[], object] | None = None,
    ) -> None:
        self._state = state or OrganizerState()
        self._mover = mover or CollisionSafeMover()
        self._settle_seconds = settle_seconds
        self._timer_factory = timer_factory
        self._observer_factory = observer_factory
        self._cycle_lock = threading.RLock()
        self._state_lock = threading.Lock()
        self._watcher: DirectoryWatcher | None = None
        self._listeners: list[OutcomeListener] = []

    def __enter__(self) -> Organizer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop_watching()

    @staticmethod
    def _format_log(event: str, fields: Mapping[str, object] | None = None) -> str:
        return render_fields_block(event, fields or {}, pad_top=True)

    @property
    def state(self) -> OrganizerState:
        with self._state_lock:
            return self._state

    @property
    def watching(self) -> bool:
        with self._state_lock:
            return self._watcher is not None and self._watcher.running

    # Configuration -----------------------------------------------------------------

    def set_strategy(self, strategy: Strategy | str) -> None:
        resolved = Strategy.parse(strategy)
        with self._state_lock:
            self._state = self._state.with_strategy(resolved)
        LOGGER.info(self._format_log("Strategy Selected", {"Strategy": resolved.label}))

    def set_watched_root(self, path: Path | str, *, watch: bool = True) -> None:
        """Replace the watched directory, cancelling the previous watch.

        The previous watch is only stopped once the new one is running, so a
        failure leaves the current root and watch in place.

        Raises:
            WatchSetupError: If the directory cannot be watched.
        """
        root = Path(path).expanduser().absolute()
        validate_watch_root(root)

        watcher: DirectoryWatcher | None = None
        if watch:
            kwargs: dict[str, object] = {}
            if self._observer_factory is not None:
                kwargs["observer_factory"] = self._observer_factory
            watcher = DirectoryWatcher(
                root,
                self._on_stabilized,
                settle_seconds=self._settle_seconds,
                timer_factory=self._timer_factory,
                **kwargs,
            )
            watcher.start()

        with self._state_lock:
            self._state = self._state.with_root(root)
            previous, self._watcher = self._watcher, watcher
        if previous is not None:
            previous.stop()

    def stop_watching(self) -> None:
        with self._state_lock:
            watcher, self._watcher = self._watcher, None
        if watcher is not None:
            watcher.stop()

    def subscribe(self, listener: OutcomeListener) -> Callable[[], None]:
        """Register a callback for outcomes of watcher-driven moves; returns an unsubscribe function."""
        with self._state_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._state_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # Operations --------------------------------------------------------------------

    def _resolve(self, root: Path | str | None, strategy: Strategy | str | None) -> tuple[Path, Strategy]:
        state = self.state
        resolved_strategy = Strategy.parse(strategy) if strategy is not None else state.strategy
        resolved_root = Path(root).expanduser() if root is not None else state.root
        if resolved_root is None:
            raise InvalidRootError("No root directory selected")
        if not resolved_root.is_dir():
            raise InvalidRootError(f"'{resolved_root}' is not a valid directory")
        return resolved_root, resolved_strategy

    def run_full_sweep(
        self,
        root: Path | str | None = None,
        strategy: Strategy | str | None = None,
    ) -> SweepReport:
        """Organize every file currently at the top level of ``root``.

        Individual failures are recorded in the returned report and never
        abort the sweep.
        """
        resolved_root, resolved_strategy = self._resolve(root, strategy)
        report = SweepReport(root=resolved_root)
        started = time.perf_counter()

        with self._cycle_lock:
            for path in gather_root_files(resolved_root):
                report.register(self._organize(path, resolved_root, resolved_strategy))

        LOGGER.info(
            self._format_log(
                "Sweep Complete",
                {
                    "Root": resolved_root,
                    "Strategy": resolved_strategy.label,
                    "Moved": report.moved,
                    "Ignored": report.ignored,
                    "Failed": report.failed,
                    "Duration": f"{time.perf_counter() - started:.2f}s",
                },
            )
        )
        return report

    def handle_single_file(self, path: Path | str, strategy: Strategy | str | None = None) -> FileOutcome:
        """Classify and move one file into a sub-folder of its own directory."""
        source = Path(path).expanduser().absolute()
        resolved_strategy = Strategy.parse(strategy) if strategy is not None else self.state.strategy
        with self._cycle_lock:
            return self._organize(source, source.parent, resolved_strategy)

    def preview(
        self,
        root: Path | str | None = None,
        strategy: Strategy | str | None = None,
    ) -> list[PreviewEntry]:
        """Where each non-ignored file would go, without moving anything."""
        resolved_root, resolved_strategy = self._resolve(root, strategy)
        entries: list[PreviewEntry] = []
        for path in gather_root_files(resolved_root):
            if should_ignore(path):
                continue
            try:
                record = read_file_record(path)
            except OSError:
                # moved or deleted since listing
                continue
            entries.append(PreviewEntry(file_name=record.name, target_folder=target_folder(record, resolved_strategy)))
        return entries

    def status_line(self, entries: list[PreviewEntry]) -> str:
        if self.state.root is None:
            return NO_ROOT_STATUS
        return f"{len(entries)} file(s) in folder."

    # Internals ---------------------------------------------------------------------

    def _on_stabilized(self, path: Path) -> None:
        outcome = self.handle_single_file(path)
        with self._state_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(outcome)
            except Exception:  # noqa: BLE001
                LOGGER.exception("Outcome listener %r failed for %s", listener, path)

    def _organize(self, path: Path, root: Path, strategy: Strategy) -> FileOutcome:
        if should_ignore(path):
            LOGGER.debug(self._format_log("Ignoring File", {"Path": path, "Reason": "ignored extension"}))
            return FileOutcome(source=path, status=OutcomeStatus.IGNORED)

        try:
            skip_reason = skip_reason_for_entry(path)
            record = read_file_record(path) if skip_reason is None else None
        except FileNotFoundError as exc:
            return self._failed(path, None, MoveError(MoveErrorKind.SOURCE_MISSING, str(exc)))
        except OSError as exc:
            return self._failed(path, None, MoveError(MoveErrorKind.UNKNOWN, str(exc)))

        if record is None:
            if not path.exists() and not path.is_symlink():
                return self._failed(path, None, MoveError(MoveErrorKind.SOURCE_MISSING, f"{path} no longer exists"))
            LOGGER.debug(self._format_log("Ignoring File", {"Path": path, "Reason": skip_reason}))
            return FileOutcome(source=path, status=OutcomeStatus.IGNORED)

        folder = target_folder(record, strategy)
        if os.path.normcase(record.name) == os.path.normcase(folder):
            # a file named like its own folder ("A", "NOEXT") can never be moved into it
            LOGGER.debug(
                self._format_log("Ignoring File", {"Path": path, "Reason": f"name matches target folder '{folder}'"})
            )
            return FileOutcome(source=path, status=OutcomeStatus.IGNORED, target_folder=folder)

        result = self._mover.move(record.path, root / folder)
        if not result.ok:
            return self._failed(path, folder, result.error)

        LOGGER.info(
            self._format_log(
                "Moved File",
                {"Source": record.name, "Destination": result.final_path},
            )
        )
        return FileOutcome(source=path, status=OutcomeStatus.MOVED, target_folder=folder, final_path=result.final_path)

    def _failed(self, path: Path, folder: str | None, error: MoveError | None) -> FileOutcome:
        LOGGER.warning(
            self._format_log(
                "Move Failed",
                {"Source": path, "Target Folder": folder or "(unclassified)", "Error": error},
            )
        )
        return FileOutcome(source=path, status=OutcomeStatus.FAILED, target_folder=folder, error=error)


__all__ = ["Organizer", "OutcomeListener", "NO_ROOT_STATUS"]
