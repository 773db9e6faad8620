from __future__ import annotations

from pathlib import Path


class WatchSetupError(RuntimeError):
    """Raised when a directory cannot be watched (missing, not a directory, no permission)."""

    def __init__(self, root: Path | str, reason: str) -> None:
        super().__init__(f"Cannot watch {root}: {reason}")
        self.root = Path(root)
        self.reason = reason


class InvalidRootError(ValueError):
    """Raised when a sweep or preview is requested without a usable root directory."""


__all__ = ["InvalidRootError", "WatchSetupError"]
