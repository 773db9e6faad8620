"""Zen Sort core package.

The package keeps a single folder organized into sub-folders:

- **file_discovery**: Root listing, ignore filtering, and ``FileRecord`` snapshots
- **classifier**: Pure folder assignment for the four strategies
- **mover**: Collision-safe, never-overwriting moves
- **debouncer**: Settle-window debouncing of filesystem notifications
- **watcher**: watchdog-based directory watching feeding a single worker
- **organizer**: Sweep, single-file handling, preview, and watch orchestration
- **cli**: Command-line shell (``zensort preview|sweep|watch``)

The main entry point for embedding is the ``Organizer`` class.
"""

from .errors import InvalidRootError, WatchSetupError
from .models import FileOutcome, OutcomeStatus, PreviewEntry, Strategy, SweepReport
from .organizer import Organizer
from .version import __version__

__all__ = [
    "__version__",
    "FileOutcome",
    "InvalidRootError",
    "Organizer",
    "OutcomeStatus",
    "PreviewEntry",
    "Strategy",
    "SweepReport",
    "WatchSetupError",
]
