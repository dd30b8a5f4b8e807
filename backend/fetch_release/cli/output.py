"""
Installer output console using Rich.
"""
import os
from contextlib import contextmanager
from typing import Iterator, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TransferSpeedColumn,
)
from rich.table import Table

from fetch_release.core.installer import InstallResult, ProgressCallback


class FetchConsole:
    """
    Centralized console for installer output.

    Provides stage lines, download progress, listings, failure summaries and
    the completion panel while respecting --plain mode and NO_COLOR.
    """

    SIGILS = {
        "platform": "⌬",
        "resolve": "⊢",
        "download": "⇩",
        "chmod": "◇",
        "list": "≡",
        "verify": "✓",
    }

    def __init__(self, plain: bool = False):
        """
        Initialize FetchConsole.

        Args:
            plain: If True, disable colors and progress bars (for CI/logs)
        """
        self.plain = plain or os.getenv("NO_COLOR", "").lower() in ("1", "true", "yes")

        self.console = Console(no_color=self.plain, highlight=not self.plain)
        self.err_console = Console(stderr=True, no_color=self.plain, highlight=not self.plain)

        self.colors = {
            "success": "green" if not self.plain else None,
            "processing": "cyan" if not self.plain else None,
            "warning": "yellow" if not self.plain else None,
            "error": "bold red" if not self.plain else None,
        }

    def print_stage(self, stage: str, message: str, style: Optional[str] = None) -> None:
        """
        Print stage message with sigil.

        Args:
            stage: Stage name (e.g., "resolve", "download")
            message: Message text
            style: Optional style (success, processing, warning, error)
        """
        sigil = self.SIGILS.get(stage, ">>")
        text = f"{sigil} {stage} | {message}"
        style_val = self.colors.get(style) if style else None
        # URLs are printed verbatim: no markup parsing, no folding
        self.console.print(text, style=style_val, markup=False, soft_wrap=True)

    def stage_ok(self, stage: str, message: str) -> None:
        """Print a stage success line with uniform alignment."""
        sigil = self.SIGILS.get(stage, "")

        t = Table.grid(padding=(0, 1))
        t.add_column(width=2, style="bold")
        t.add_column(width=10, style="bold")
        t.add_column()
        mark = "✓" if self.plain else "[green]✓[/green]"
        t.add_row(sigil, stage, f"{mark} {message}")

        self.console.print(t)

    def print_listing(self, line: str) -> None:
        """Print an `ls -l`-style line for an installed file."""
        self.console.print(
            f"{self.SIGILS['list']} {line}", markup=False, highlight=False, soft_wrap=True
        )

    @contextmanager
    def download_progress(self, label: str) -> Iterator[Optional[ProgressCallback]]:
        """
        Progress bar for one download, yielding a callback for download().

        Plain mode yields None so nothing is drawn.
        """
        if self.plain:
            yield None
            return

        progress = Progress(
            TextColumn(f"[bold]{self.SIGILS['download']} {escape(label)}[/bold]"),
            BarColumn(bar_width=None),
            DownloadColumn(),
            TransferSpeedColumn(),
            console=self.console,
            transient=True,
        )
        task_id = progress.add_task("download", total=None)

        def callback(done: int, total: Optional[int]) -> None:
            progress.update(task_id, completed=done, total=total)

        with progress:
            yield callback

    def print_failure(self, stage: str, cause: str) -> None:
        """
        Print a one-line failure summary to stderr.

        Args:
            stage: Stage name where the error occurred
            cause: Error cause/message
        """
        self.err_console.print(
            f"<x> {stage} | failed", style=self.colors["error"], markup=False
        )
        self.err_console.print(
            f"    └─ cause: {cause}", style=self.colors["error"], markup=False, soft_wrap=True
        )

    def print_complete(self, results: List[InstallResult]) -> None:
        """Print completion panel listing installed binaries."""
        lines = [
            f"[bold]{escape(r.binary_name)}[/bold] [dim]{escape(str(r.path))}[/dim]"
            for r in results
        ]
        panel_style = self.colors["success"] or "default"
        self.console.print(
            Panel.fit(
                "\n".join(lines) if lines else "nothing installed",
                title="INSTALL COMPLETE",
                border_style=panel_style,
                padding=(0, 1),
            )
        )
