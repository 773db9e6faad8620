from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import List, Optional


class Strategy(Enum):
    BY_EXTENSION = "extension"
    BY_CATEGORY = "category"
    BY_CREATION_DATE = "creation_date"
    BY_FIRST_LETTER = "first_letter"

    @classmethod
    def parse(cls, value: "str | Strategy") -> "Strategy":
        """Resolve a strategy from its config/CLI spelling."""
        if isinstance(value, Strategy):
            return value
        key = str(value).strip().lower().replace("-", "_")
        key = _STRATEGY_ALIASES.get(key, key)
        for member in cls:
            if member.value == key or member.name.lower() == key:
                return member
        choices = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown strategy '{value}'. Expected one of: {choices}")

    @property
    def label(self) -> str:
        return _STRATEGY_LABELS[self]


_STRATEGY_ALIASES = {
    "ext": "extension",
    "date": "creation_date",
    "created": "creation_date",
    "letter": "first_letter",
}

_STRATEGY_LABELS = {
    Strategy.BY_EXTENSION: "By Extension",
    Strategy.BY_CATEGORY: "By Category",
    Strategy.BY_CREATION_DATE: "By Creation Date (YYYY-MM)",
    Strategy.BY_FIRST_LETTER: "By First Letter",
}

DEFAULT_STRATEGY = Strategy.BY_CATEGORY


@dataclass(slots=True, frozen=True)
class FileRecord:
    """Read-only snapshot of one directory entry."""

    path: Path
    name: str
    extension: str
    created: dt.datetime


@dataclass(slots=True, frozen=True)
class PreviewEntry:
    file_name: str
    target_folder: str


class MoveErrorKind(Enum):
    PERMISSION_DENIED = "permission-denied"
    PATH_TOO_LONG = "path-too-long"
    SOURCE_MISSING = "source-missing"
    CROSS_DEVICE = "cross-device"
    DESTINATION_UNWRITABLE = "destination-unwritable"
    UNKNOWN = "unknown"


@dataclass(slots=True, frozen=True)
class MoveError:
    kind: MoveErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass(slots=True)
class MoveResult:
    source: Path
    final_path: Optional[Path] = None
    error: Optional[MoveError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.final_path is not None


class OutcomeStatus(Enum):
    MOVED = "moved"
    IGNORED = "ignored"
    FAILED = "failed"


@dataclass(slots=True)
class FileOutcome:
    source: Path
    status: OutcomeStatus
    target_folder: Optional[str] = None
    final_path: Optional[Path] = None
    error: Optional[MoveError] = None

    @property
    def detail(self) -> str:
        if self.status is OutcomeStatus.MOVED and self.final_path is not None:
            return f"{self.source.name} -> {self.target_folder}/{self.final_path.name}"
        if self.status is OutcomeStatus.FAILED:
            return f"{self.source.name}: {self.error}"
        return f"{self.source.name} (ignored)"


@dataclass(slots=True)
class SweepReport:
    root: Path
    outcomes: List[FileOutcome] = field(default_factory=list)
    moved: int = 0
    ignored: int = 0
    failed: int = 0

    def register(self, outcome: FileOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status is OutcomeStatus.MOVED:
            self.moved += 1
        elif outcome.status is OutcomeStatus.IGNORED:
            self.ignored += 1
        else:
            self.failed += 1

    @property
    def errors(self) -> List[str]:
        return [outcome.detail for outcome in self.outcomes if outcome.status is OutcomeStatus.FAILED]

    @property
    def total(self) -> int:
        return len(self.outcomes)


@dataclass(slots=True, frozen=True)
class OrganizerState:
    """Configuration snapshot handed to each sweep/classify/move call."""

    root: Optional[Path] = None
    strategy: Strategy = DEFAULT_STRATEGY

    def with_root(self, root: Optional[Path]) -> "OrganizerState":
        return replace(self, root=root)

    def with_strategy(self, strategy: Strategy) -> "OrganizerState":
        return replace(self, strategy=strategy)
