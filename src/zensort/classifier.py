"""Folder assignment for the four organizing strategies.

``target_folder`` is a pure function of a ``FileRecord`` and a ``Strategy``:
it never touches the filesystem and never fails. Inputs that match nothing
resolve to a documented fallback label.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from .models import FileRecord, Strategy

FALLBACK_CATEGORY = "Others"
NO_EXTENSION_LABEL = "NOEXT"
UNNAMED_LABEL = "Misc"

_CATEGORY_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "Images": (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff"),
    # .m4a stays with the video containers
    "Videos": (".mp4", ".mov", ".avi", ".mkv", ".wmv", ".m4a"),
    "Documents": (".doc", ".docx", ".pdf", ".txt", ".xls", ".xlsx", ".ppt", ".pptx"),
    "Audio": (".mp3", ".wav", ".flac", ".aac", ".ogg"),
    "Archives": (".zip", ".rar", ".7z", ".tar", ".gz"),
    "Code": (".cs", ".js", ".py", ".java", ".html", ".css", ".cpp", ".json", ".xml"),
    "Torrents": (".torrent",),
    "Executables": (".exe", ".msi", ".bat", ".cmd"),
}

CATEGORY_TABLE: Mapping[str, str] = MappingProxyType(
    {extension: category for category, extensions in _CATEGORY_EXTENSIONS.items() for extension in extensions}
)

CATEGORIES: tuple[str, ...] = (*_CATEGORY_EXTENSIONS, FALLBACK_CATEGORY)


def category_for_extension(extension: str) -> str:
    """Look up the category label for an extension such as ``.JPG`` or ``.pdf``."""
    return CATEGORY_TABLE.get(extension.lower(), FALLBACK_CATEGORY)


def _by_extension(record: FileRecord) -> str:
    stripped = record.extension.lstrip(".")
    return stripped.upper() if stripped else NO_EXTENSION_LABEL


def _by_first_letter(record: FileRecord) -> str:
    first = record.name[:1]
    upper = first.upper()
    # keep single-character labels when case mapping expands (e.g. "ß" -> "SS")
    return upper if len(upper) == 1 else first


def target_folder(record: FileRecord, strategy: Strategy) -> str:
    """Return the sub-folder name ``record`` belongs to under ``strategy``."""
    if strategy is Strategy.BY_EXTENSION:
        label = _by_extension(record)
    elif strategy is Strategy.BY_CATEGORY:
        label = category_for_extension(record.extension)
    elif strategy is Strategy.BY_CREATION_DATE:
        label = record.created.strftime("%Y-%m")
    elif strategy is Strategy.BY_FIRST_LETTER:
        label = _by_first_letter(record)
    else:
        label = UNNAMED_LABEL

    if label in {"", ".", ".."}:
        return UNNAMED_LABEL
    return label
