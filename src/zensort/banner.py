from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .debouncer import DEFAULT_SETTLE_SECONDS
from .models import Strategy
from .version import __version__


@dataclass
class BannerInfo:
    version: str
    root: str
    strategy: str
    sweep_on_start: bool
    settle_seconds: float
    verbose: bool


def build_banner_info(
    root: str,
    strategy: Strategy,
    *,
    sweep_on_start: bool,
    verbose: bool = False,
    settle_seconds: float = DEFAULT_SETTLE_SECONDS,
) -> BannerInfo:
    return BannerInfo(
        version=__version__,
        root=root,
        strategy=strategy.label,
        sweep_on_start=sweep_on_start,
        settle_seconds=settle_seconds,
        verbose=verbose,
    )


def print_startup_banner(info: BannerInfo, console: Console) -> None:
    """Print a styled startup banner for watch mode."""
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Key", style="cyan bold", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Version", f"[bold]{info.version}[/bold]")

    mode_parts = ["[cyan]WATCH[/cyan]"]
    if info.verbose:
        mode_parts.append("[cyan]VERBOSE[/cyan]")
    table.add_row("Mode", " ".join(mode_parts))

    table.add_row("Folder", info.root)
    table.add_row("Strategy", f"[bold]{info.strategy}[/bold]")
    table.add_row("Initial Sweep", "yes" if info.sweep_on_start else "no")
    table.add_row("Settle Delay", f"{info.settle_seconds:g}s")

    panel = Panel(
        table,
        title="[bold white]ZEN SORT[/bold white]",
        border_style="blue",
        padding=(1, 2),
    )

    console.print()
    console.print(panel)
    console.print()
