"""Command-line shell around the organizer: preview, sweep and watch."""

from __future__ import annotations

import argparse
import sys
import threading
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from .banner import build_banner_info, print_startup_banner
from .config import CONFIG_ENV_VAR, AppConfig, load_app_config
from .errors import WatchSetupError
from .logging_utils import configure_logging
from .models import FileOutcome, Strategy
from .organizer import Organizer
from .summary_table import SummaryTableRenderer
from .version import __version__


def _strategy_arg(value: str) -> Strategy:
    try:
        return Strategy.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zensort",
        description="Organize the files of one folder into sub-folders and keep it organized.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"YAML config file (default: ${CONFIG_ENV_VAR} when set)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-level", default=None, help="Log level name (overrides the config file)")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")

    strategies = ", ".join(member.value for member in Strategy)
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("root", nargs="?", type=Path, default=None, help="Folder to organize (default: settings.root)")
    common.add_argument(
        "--strategy",
        "-s",
        type=_strategy_arg,
        default=None,
        help=f"Folder assignment strategy: {strategies}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("preview", parents=[common], help="Show where each file would go without moving it")
    subparsers.add_parser("sweep", parents=[common], help="Organize every file currently in the folder")
    watch = subparsers.add_parser("watch", parents=[common], help="Sweep, then keep the folder organized")
    watch.add_argument(
        "--no-sweep",
        dest="sweep",
        action="store_false",
        default=None,
        help="Skip the initial sweep when watching starts",
    )
    return parser


def _setup(args: argparse.Namespace, console: Console) -> tuple[AppConfig, Path, Strategy]:
    config = load_app_config(args.config)
    settings = config.settings

    if args.verbose:
        level = "DEBUG"
    else:
        level = args.log_level or settings.log_level
    configure_logging(level, log_file=args.log_file or settings.log_file, console=console)

    root = args.root or settings.root
    if root is None:
        raise ValueError("No folder given; pass one on the command line or set 'settings.root'")
    strategy = args.strategy or settings.strategy
    return config, Path(root).expanduser(), strategy


def run_preview(args: argparse.Namespace, *, console: Optional[Console] = None) -> int:
    console = console or Console()
    _, root, strategy = _setup(args, console)
    organizer = Organizer()
    organizer.set_watched_root(root, watch=False)
    organizer.set_strategy(strategy)
    entries = organizer.preview()
    SummaryTableRenderer(console).print_preview(entries, organizer.status_line(entries))
    return 0


def run_sweep(args: argparse.Namespace, *, console: Optional[Console] = None) -> int:
    console = console or Console()
    _, root, strategy = _setup(args, console)
    organizer = Organizer()
    report = organizer.run_full_sweep(root, strategy)
    SummaryTableRenderer(console).print_sweep(report)
    return 1 if report.failed else 0


def run_watch(
    args: argparse.Namespace,
    *,
    console: Optional[Console] = None,
    organizer: Optional[Organizer] = None,
    stop_event: Optional[threading.Event] = None,
) -> int:
    console = console or Console()
    config, root, strategy = _setup(args, console)
    sweep_on_start = config.settings.sweep_on_start if args.sweep is None else args.sweep
    organizer = organizer or Organizer()
    stop_event = stop_event or threading.Event()

    print_startup_banner(
        build_banner_info(str(root), strategy, sweep_on_start=sweep_on_start, verbose=args.verbose),
        console,
    )

    def _report(outcome: FileOutcome) -> None:
        if outcome.error is not None:
            console.print(f"[red]✗ {outcome.detail}[/red]")

    organizer.set_strategy(strategy)
    with organizer:
        organizer.set_watched_root(root)
        organizer.subscribe(_report)
        if sweep_on_start:
            SummaryTableRenderer(console).print_sweep(organizer.run_full_sweep())
        console.print("[dim]Watching for new files. Press Ctrl+C to stop.[/dim]")
        try:
            while not stop_event.wait(timeout=1.0):
                pass
        except KeyboardInterrupt:
            console.print("\n[dim]Stopping watcher...[/dim]")
    return 0


_COMMANDS = {
    "preview": run_preview,
    "sweep": run_sweep,
    "watch": run_watch,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    console = Console()
    try:
        return _COMMANDS[args.command](args, console=console)
    except (ValueError, WatchSetupError, OSError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
