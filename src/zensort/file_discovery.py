"""Root directory listing, ignore filtering, and file snapshots.

This module owns everything that looks at the watched directory before a file
is classified: deciding which entries must never be touched (in-progress
downloads and temp files), listing the immediate regular files of a root, and
reading the metadata snapshot (``FileRecord``) the classifier works from.
"""

from __future__ import annotations

import datetime as dt
import logging
import os
import sys
from collections.abc import Iterator
from pathlib import Path

from .logging_utils import render_fields_block
from .models import FileRecord

LOGGER = logging.getLogger(__name__)

IGNORED_EXTENSIONS = frozenset({".crdownload", ".tmp"})


def should_ignore(path: Path | str) -> bool:
    """Return True when the file must never be touched.

    The check is purely name based and case-insensitive, so ``a.CRDOWNLOAD``
    and ``a.crdownload`` are both ignored.
    """
    return Path(path).suffix.lower() in IGNORED_EXTENSIONS


def skip_reason_for_entry(path: Path) -> str | None:
    """Return why a directory entry is not a candidate for organizing, or None."""
    if path.is_symlink():
        return "symlink"
    if not path.is_file():
        return "not a regular file"
    return None


def creation_time(stat_result: os.stat_result) -> dt.datetime:
    """Best available creation timestamp as a naive local datetime.

    ``st_birthtime`` is used where the platform reports it, ``st_ctime`` on
    Windows (where it is the creation time), and ``st_mtime`` otherwise.
    """
    timestamp = getattr(stat_result, "st_birthtime", None)
    if timestamp is None:
        timestamp = stat_result.st_ctime if sys.platform == "win32" else stat_result.st_mtime
    return dt.datetime.fromtimestamp(timestamp)


def read_file_record(path: Path) -> FileRecord:
    """Snapshot a file's metadata.

    Raises:
        FileNotFoundError: If the file vanished since it was listed.
    """
    absolute = path if path.is_absolute() else path.absolute()
    stat_result = absolute.stat()
    return FileRecord(
        path=absolute,
        name=absolute.name,
        extension=absolute.suffix.lower(),
        created=creation_time(stat_result),
    )


def gather_root_files(root: Path) -> Iterator[Path]:
    """Yield the immediate regular files of ``root`` (no recursion).

    Ignored files are still yielded; callers decide how to report them.
    """
    try:
        entries = sorted(root.iterdir(), key=lambda entry: entry.name.lower())
    except FileNotFoundError:
        LOGGER.warning(render_fields_block("Root Directory Missing", {"Path": root}))
        return

    for path in entries:
        try:
            reason = skip_reason_for_entry(path)
        except OSError as exc:
            reason = str(exc)
        if reason:
            if reason != "not a regular file":
                LOGGER.debug(render_fields_block("Skipping Entry", {"Path": path, "Reason": reason}))
            continue
        yield path
