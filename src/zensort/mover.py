"""Collision-safe moves into a destination folder.

A move never overwrites an existing entry. When the file's name is taken the
mover tries ``"<stem> (1)<ext>"``, ``"<stem> (2)<ext>"`` and so on. Picking
the name and renaming happen under one lock per destination folder, and the
rename itself is no-replace: the file is hard-linked under its new name
(which fails if the name already exists) and the old name is then removed.
On filesystems without hard links the mover checks for the name and renames
while still holding the folder lock.
"""

from __future__ import annotations

import errno
import logging
import os
import threading
from collections.abc import Iterator
from pathlib import Path

from .logging_utils import render_fields_block
from .models import MoveError, MoveErrorKind, MoveResult

LOGGER = logging.getLogger(__name__)

MAX_NAME_ATTEMPTS = 10_000

# errno values meaning "this filesystem cannot hard link", not "you may not"
_LINK_UNSUPPORTED = frozenset(
    code
    for code in (
        getattr(errno, "EPERM", None),
        getattr(errno, "EOPNOTSUPP", None),
        getattr(errno, "ENOTSUP", None),
        getattr(errno, "ENOSYS", None),
        getattr(errno, "EMLINK", None),
        getattr(errno, "EINVAL", None),
    )
    if code is not None
)


def candidate_names(file_name: str) -> Iterator[str]:
    """Yield ``file_name`` followed by its numbered alternatives."""
    yield file_name
    path = Path(file_name)
    stem, suffix = path.stem, path.suffix
    counter = 1
    while True:
        yield f"{stem} ({counter}){suffix}"
        counter += 1


def rename_no_replace(source: Path, destination: Path) -> None:
    """Rename ``source`` to ``destination``, failing if ``destination`` exists.

    Raises:
        FileExistsError: If ``destination`` is already taken.
        OSError: For any other failure; ``source`` is left in place.
    """
    try:
        os.link(source, destination)
    except OSError as exc:
        if exc.errno not in _LINK_UNSUPPORTED:
            raise
        if os.path.lexists(destination):
            raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), str(destination)) from exc
        os.rename(source, destination)
        return

    try:
        os.unlink(source)
    except OSError:
        os.unlink(destination)
        raise


def _error_kind(exc: OSError, source: Path) -> MoveErrorKind:
    if isinstance(exc, FileNotFoundError) and not os.path.lexists(source):
        return MoveErrorKind.SOURCE_MISSING
    if isinstance(exc, PermissionError) or exc.errno in {errno.EACCES, errno.EPERM}:
        return MoveErrorKind.PERMISSION_DENIED
    if exc.errno == errno.ENAMETOOLONG:
        return MoveErrorKind.PATH_TOO_LONG
    if exc.errno == errno.EXDEV:
        return MoveErrorKind.CROSS_DEVICE
    if exc.errno in {errno.EROFS, errno.ENOSPC}:
        return MoveErrorKind.DESTINATION_UNWRITABLE
    return MoveErrorKind.UNKNOWN


class CollisionSafeMover:
    """Moves single files into folders without ever replacing an existing entry."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, folder: Path) -> threading.Lock:
        key = os.path.normcase(os.path.abspath(folder))
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @staticmethod
    def _failure(source: Path, kind: MoveErrorKind, message: str) -> MoveResult:
        return MoveResult(source=source, error=MoveError(kind=kind, message=message))

    def move(self, source: Path | str, destination_folder: Path | str) -> MoveResult:
        """Move ``source`` into ``destination_folder`` under a free name.

        Returns:
            A ``MoveResult`` whose ``final_path`` is set on success and whose
            ``error`` describes the cause otherwise.
        """
        source = Path(source)
        folder = Path(destination_folder)

        try:
            folder.mkdir(parents=True, exist_ok=True)
        except FileExistsError:
            return self._failure(source, MoveErrorKind.DESTINATION_UNWRITABLE, f"{folder} exists and is not a folder")
        except OSError as exc:
            kind = _error_kind(exc, source)
            if kind in {MoveErrorKind.UNKNOWN, MoveErrorKind.SOURCE_MISSING}:
                kind = MoveErrorKind.DESTINATION_UNWRITABLE
            return self._failure(source, kind, str(exc))

        names = candidate_names(source.name)
        with self._lock_for(folder):
            for attempt in range(MAX_NAME_ATTEMPTS):
                candidate = folder / next(names)
                if os.path.lexists(candidate):
                    continue
                try:
                    rename_no_replace(source, candidate)
                except FileExistsError:
                    # taken by another program between the check and the link
                    continue
                except OSError as exc:
                    return self._failure(source, _error_kind(exc, source), str(exc))
                if attempt:
                    LOGGER.debug(
                        render_fields_block(
                            "Name Collision Resolved",
                            {"Source": source, "Destination": candidate},
                        )
                    )
                return MoveResult(source=source, final_path=candidate)

        return self._failure(source, MoveErrorKind.UNKNOWN, f"no free name after {MAX_NAME_ATTEMPTS} attempts in {folder}")
