from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from rich.console import Console
from rich.table import Table

from .models import OutcomeStatus

if TYPE_CHECKING:  # pragma: no cover
    from .models import FileOutcome, PreviewEntry, SweepReport


SUCCESS_COLOR = "green"
ERROR_COLOR = "red"
DIM_COLOR = "dim"

SUCCESS_SYMBOL = "✓"
ERROR_SYMBOL = "✗"
IGNORE_SYMBOL = "○"

_STATUS_STYLES = {
    OutcomeStatus.MOVED: (SUCCESS_COLOR, SUCCESS_SYMBOL),
    OutcomeStatus.IGNORED: (DIM_COLOR, IGNORE_SYMBOL),
    OutcomeStatus.FAILED: (ERROR_COLOR, ERROR_SYMBOL),
}


class SummaryTableRenderer:
    """Renders previews and sweep reports as Rich Tables."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    @staticmethod
    def _colorize_count(value: int, *, is_error: bool = False) -> str:
        if value == 0:
            return f"[{DIM_COLOR}]{value}[/{DIM_COLOR}]"
        color = ERROR_COLOR if is_error else SUCCESS_COLOR
        return f"[{color}]{value}[/{color}]"

    @staticmethod
    def _status_cell(outcome: FileOutcome) -> str:
        color, symbol = _STATUS_STYLES[outcome.status]
        return f"[{color}]{symbol} {outcome.status.value}[/{color}]"

    def render_preview_table(self, entries: List[PreviewEntry], *, title: str = "Preview") -> Table:
        table = Table(title=title, show_header=True, header_style="bold")
        table.add_column("Filename", style="white", overflow="fold")
        table.add_column("Target Folder", style="cyan", no_wrap=True)
        for entry in entries:
            table.add_row(entry.file_name, entry.target_folder)
        return table

    def render_outcomes_table(self, report: SweepReport) -> Optional[Table]:
        """One row per file that was not ignored; None when there is nothing to show."""
        rows = [outcome for outcome in report.outcomes if outcome.status is not OutcomeStatus.IGNORED]
        if not rows:
            return None
        table = Table(title="Files", show_header=True, header_style="bold")
        table.add_column("Filename", overflow="fold")
        table.add_column("Status", no_wrap=True)
        table.add_column("Destination", style="cyan", overflow="fold")
        for outcome in rows:
            if outcome.status is OutcomeStatus.MOVED and outcome.final_path is not None:
                destination = f"{outcome.target_folder}/{outcome.final_path.name}"
            else:
                destination = f"[{ERROR_COLOR}]{outcome.error}[/{ERROR_COLOR}]"
            table.add_row(outcome.source.name, self._status_cell(outcome), destination)
        return table

    def render_sweep_summary_table(self, report: SweepReport) -> Table:
        table = Table(title="Sweep Summary", show_header=True, header_style="bold")
        table.add_column("Metric", style="cyan", no_wrap=True)
        table.add_column("Count", justify="right")
        table.add_row("Moved", self._colorize_count(report.moved))
        table.add_row("Ignored", f"[{DIM_COLOR}]{report.ignored}[/{DIM_COLOR}]")
        table.add_row("Failed", self._colorize_count(report.failed, is_error=True))
        return table

    def print_preview(self, entries: List[PreviewEntry], status: str) -> None:
        self.console.print(self.render_preview_table(entries))
        self.console.print(status)

    def print_sweep(self, report: SweepReport) -> None:
        outcomes = self.render_outcomes_table(report)
        if outcomes is not None:
            self.console.print(outcomes)
        self.console.print(self.render_sweep_summary_table(report))
