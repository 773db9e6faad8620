from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Union

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LABEL_WIDTH = 18
DEFAULT_INDENT = "    "
FILE_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

FieldMapping = Union[Mapping[str, object], Sequence[tuple[str, object]]]


def _stringify(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return ", ".join(_stringify(item) for item in value)
    return str(value).strip()


def render_fields_block(title: str, fields: FieldMapping | None = None, *, pad_top: bool = True) -> str:
    """Render a titled block of aligned ``Label: value`` rows for log output."""
    items = list(fields.items()) if isinstance(fields, Mapping) else list(fields or [])
    lines: list[str] = [""] if pad_top else []
    lines.append(title)
    lines.append("-" * len(title))
    if items:
        label_width = max(min(max(len(str(key)) for key, _ in items), DEFAULT_LABEL_WIDTH), 6)
        for key, value in items:
            lines.append(f"{DEFAULT_INDENT}{str(key):<{label_width}}: {_stringify(value)}")
    return "\n".join(lines).rstrip()


def configure_logging(
    level: int | str = logging.INFO,
    *,
    log_file: Path | None = None,
    console: Console | None = None,
) -> None:
    """Install a rich console handler (and optionally a file handler) on the root logger."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level '{level}'")
        level = resolved

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console_handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        root.addHandler(file_handler)

    root.setLevel(level)
    # watchdog's inotify backend is chatty at DEBUG
    logging.getLogger("watchdog").setLevel(max(level, logging.INFO))
