"""Console reporting for export runs.

Progress, warnings, errors and the closing tables go to stderr. Notices
go to stdout, next to the summary lines printed by the CLI.
"""
from __future__ import annotations

import sys
from typing import Any, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table
from rich.text import Text

from ..core.models import ExportStats


class AssetRateColumn(ProgressColumn):
    """Assets per second, from Rich's own speed estimate."""

    def render(self, task: Task) -> Text:
        speed = task.finished_speed or task.speed
        if not speed:
            return Text("-- a/s", style="magenta")
        return Text(f"{speed:.1f} a/s", style="magenta")


def _stats_rows(stats: ExportStats) -> list[tuple[str, str]]:
    rows = [
        ("Assets Found", stats.total_assets),
        ("Fully Exported", stats.exported),
        ("Partially Exported", stats.partial),
        ("Skipped", stats.skipped),
        ("Resources Written", stats.resources_written),
        ("Resources Already Present", stats.resources_skipped_existing),
        ("Resources Failed", stats.resources_failed),
    ]
    out = [(label, str(value)) for label, value in rows]
    if stats.elapsed_seconds > 0:
        out.append(("Time Elapsed", f"{stats.elapsed_seconds:.1f}s"))
        out.append(("Export Rate", f"{stats.processed / stats.elapsed_seconds:.1f} assets/sec"))
    return out


class RichProgressReporter:
    """Progress bar and styled notices on a Rich console.

    Implements the ProgressReporter protocol.
    """

    def __init__(self, console: Optional[Console] = None, out: Optional[Console] = None):
        self._console = console or Console(stderr=True)
        self._out = out or Console()
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    @property
    def console(self) -> Console:
        return self._console

    def start_phase(self, name: str, total: int) -> None:
        self.end_phase()
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=32),
            MofNCompleteColumn(),
            TextColumn("[cyan]•"),
            AssetRateColumn(),
            TextColumn("[cyan]•"),
            TimeElapsedColumn(),
            TextColumn("[cyan]/"),
            TimeRemainingColumn(),
            console=self._console,
        )
        self._progress.start()
        self._task = self._progress.add_task(name, total=max(1, total))

    def advance_phase(self, amount: int = 1, description: Optional[str] = None) -> None:
        if self._progress is None or self._task is None:
            return
        fields: dict[str, Any] = {"advance": amount}
        if description:
            fields["description"] = description
        self._progress.update(self._task, **fields)

    def end_phase(self) -> None:
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task = None

    # Messages are built with Text so brackets in paths are never markup.

    def info(self, message: str) -> None:
        self._out.print(Text.assemble(("ℹ ", "blue"), message))

    def warning(self, message: str) -> None:
        self._console.print(Text.assemble(("⚠ Warning: ", "yellow"), message))

    def error(self, message: str) -> None:
        self._console.print(Text(f"✗ Error: {message}", style="red"))

    def print_config(self, settings: dict) -> None:
        """Print the run settings as a two-column table."""
        table = Table(title="Configuration", header_style="bold")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        for key, value in settings.items():
            table.add_row(key, str(value))
        self._console.print(table)

    def print_stats(self, stats: ExportStats) -> None:
        table = Table(title="Export Complete", show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Count", style="green", justify="right")
        for label, value in _stats_rows(stats):
            table.add_row(label, value)
        self._console.print(table)


class QuietProgressReporter:
    """Reporter for ``--quiet``: no progress or tables.

    Notices go to stdout, warnings and errors to stderr, as plain lines.
    """

    def start_phase(self, name: str, total: int) -> None:
        pass

    def advance_phase(self, amount: int = 1, description: Optional[str] = None) -> None:
        pass

    def end_phase(self) -> None:
        pass

    def info(self, message: str) -> None:
        print(message)

    def warning(self, message: str) -> None:
        print(f"Warning: {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)

    def print_config(self, settings: dict) -> None:
        pass

    def print_stats(self, stats: ExportStats) -> None:
        pass
