"""Terminal User Interface for dirscope reports.

This module provides the ReportTUI class, a Rich-based TUI that renders
comparison findings, disk usage trees and copy results, shows live progress
while a tree is analyzed, and asks for confirmation before copying.

Example:
    from dirscope.ui import ReportTUI

    tui = ReportTUI()
    tui.display_findings(findings, root_a="/backup/a", root_b="/backup/b")
    tui.display_usage("/data", analysis)
"""

import os
from typing import Callable, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.prompt import Confirm
from rich.table import Table

from dirscope.models import (
    AnalysisResult,
    ComparisonFinding,
    CopyError,
    DifferingContent,
    DirEntry,
    ErrorEntry,
    MissingInA,
    MissingInB,
    ProgressPayload,
    TypeMismatch,
    entry_name,
)


class ReportTUI:
    """Rich-based Terminal User Interface for dirscope commands.

    Args:
        console: Optional Rich Console instance for output. If None, creates
            a new Console. Pass a custom Console for testing (e.g., with
            StringIO file for output capture).

    Attributes:
        console: The Rich Console instance used for all output.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def display_findings(
        self,
        findings: Sequence[ComparisonFinding],
        root_a: Optional[str] = None,
        root_b: Optional[str] = None,
    ) -> None:
        """Display comparison findings in a Path / A / B table.

        Args:
            findings: Sorted findings of a comparison.
            root_a: Root of tree A, shown in the header and used to place
                error findings (which carry full paths) in the right column.
            root_b: Root of tree B.
        """
        fixable = sum(1 for f in findings if f.auto_fixable)
        header_text = (
            f"Tree A: {root_a or '-'}\n"
            f"Tree B: {root_b or '-'}\n"
            f"Findings: {len(findings):,} ({fixable:,} fixable by copying)"
        )
        self.console.print(Panel(header_text, title="Comparison Results", border_style="blue"))

        if not findings:
            self.console.print("[green]The trees are identical.[/green]")
            return

        table = Table(title="Differences")
        table.add_column("Path", style="white")
        table.add_column("A", justify="center")
        table.add_column("B", justify="center")

        for finding in findings:
            cell_a, cell_b = self._finding_cells(finding, root_a, root_b)
            table.add_row(self._truncate_name(finding.path, max_length=80), cell_a, cell_b)

        self.console.print(table)

    def display_usage(self, root: str, analysis: AnalysisResult) -> None:
        """Display a disk usage tree: totals and its content, largest first.

        Args:
            root: Directory that was analyzed.
            analysis: Outcome of the analysis (flattened tree).
        """
        result = analysis.result
        duration = self._format_duration(analysis.duration_ms)

        if isinstance(result, ErrorEntry):
            if analysis.aborted:
                self.console.print(f"[yellow]Analysis aborted after {duration}.[/yellow]")
            else:
                self.console.print(f"[red]Could not analyze {root}: {result.reason}[/red]")
            return

        header_text = (
            f"Root: {root}\n"
            f"Total size: {self._format_size(result.size)}\n"
            f"Files: {result.number_of_files:,}\n"
            f"Duration: {duration}"
        )
        self.console.print(Panel(header_text, title="Disk Usage", border_style="blue"))

        if not isinstance(result, DirEntry) or not result.content:
            return

        table = Table(title=entry_name(result, root_label=root))
        table.add_column("Name", style="white")
        table.add_column("Size", justify="right")
        table.add_column("# files", justify="right")

        for child in sorted(result.content, key=lambda c: c.size, reverse=True):
            name = self._truncate_name(entry_name(child))
            if isinstance(child, ErrorEntry):
                table.add_row(f"[red]{name}[/red]", f"[red]{child.reason}[/red]", "")
            elif isinstance(child, DirEntry):
                table.add_row(
                    f"[cyan]{name}/[/cyan]",
                    self._format_size(child.size),
                    f"{child.number_of_files:,}",
                )
            else:
                table.add_row(name, self._format_size(child.size), "1")

        self.console.print(table)

    def display_copy_summary(
        self,
        copied: int,
        errors: List[CopyError],
        dry_run: bool,
    ) -> None:
        """Display the outcome of a copy step.

        Args:
            copied: Number of paths copied successfully.
            errors: Paths that failed.
            dry_run: If True, displays "[DRY RUN]" indicator.
        """
        title = "Copy Summary"
        if dry_run:
            title += " [yellow][DRY RUN][/yellow]"

        border = "yellow" if dry_run else ("red" if errors else "green")
        self.console.print(
            Panel(f"Paths copied: {copied:,}\nErrors: {len(errors):,}", title=title, border_style=border)
        )

        if errors:
            self._display_errors([f"{e.path}: {e.message}" for e in errors])

    def create_progress_callback(
        self, root: str
    ) -> Tuple[Progress, Callable[[ProgressPayload], None]]:
        """Create a live progress display fed by analysis progress payloads.

        The caller must use the returned Progress as a context manager around
        the analysis so the display renders and cleans up properly.

        Args:
            root: Directory being analyzed (for display).

        Returns:
            Tuple of (Progress, callback). The callback accepts a
            ProgressPayload and updates the display.

        Example:
            progress, callback = tui.create_progress_callback("/data")
            with progress:
                session.analyze_disk_usage("/data", on_progress=callback)
        """
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        task_id = progress.add_task(f"Analyzing {root}...", total=None)

        def callback(payload: ProgressPayload) -> None:
            progress.update(
                task_id,
                description=(
                    f"{payload.number_of_files_found:,} files, "
                    f"{self._format_size(payload.total_size_found)} - "
                    f"{self._truncate_name(payload.path, max_length=50)}"
                ),
            )

        return progress, callback

    def confirm_copy(
        self,
        source_root: str,
        destination_root: str,
        relative_paths: Sequence[str],
    ) -> bool:
        """Show the paths about to be copied and ask for confirmation.

        Returns:
            True if the user confirms, False otherwise.
        """
        max_display = 10
        listed = "\n".join(f"  - {p}" for p in relative_paths[:max_display])
        remaining = len(relative_paths) - max_display
        if remaining > 0:
            listed += f"\n  ... and {remaining} more"

        summary_text = (
            f"[bold]From:[/bold] {source_root}\n"
            f"[bold]To:[/bold] {destination_root}\n\n"
            f"[bold]Paths ({len(relative_paths)}):[/bold]\n{listed}\n\n"
            f"[yellow]Existing entries in the destination will be overwritten.[/yellow]"
        )
        self.console.print(Panel(summary_text, title="Copy Confirmation", border_style="yellow"))

        return Confirm.ask("Proceed with copy?", default=False, console=self.console)

    def _finding_cells(
        self,
        finding: ComparisonFinding,
        root_a: Optional[str],
        root_b: Optional[str],
    ) -> Tuple[str, str]:
        """Return the A and B column text for a finding."""
        if isinstance(finding, MissingInA):
            return "[red]missing[/red]", "[green]present[/green]"
        if isinstance(finding, MissingInB):
            return "[green]present[/green]", "[red]missing[/red]"
        if isinstance(finding, DifferingContent):
            newer = finding.newer_side
            if newer is None:
                return "[yellow]differs[/yellow]", "[yellow]differs[/yellow]"
            if newer == "A":
                return "[green](newer)[/green]", "[dim](older)[/dim]"
            return "[dim](older)[/dim]", "[green](newer)[/green]"
        if isinstance(finding, TypeMismatch):
            return finding.type_in_a.value, finding.type_in_b.value

        # Error kinds carry the full path of the failing side
        message = f"[red]{getattr(finding, 'message', finding.KIND)}[/red]"
        side = self._side_of(finding.path, root_a, root_b)
        if side == "A":
            return message, ""
        if side == "B":
            return "", message
        return message, message

    def _side_of(
        self, path: str, root_a: Optional[str], root_b: Optional[str]
    ) -> Optional[str]:
        candidates = [(root, side) for root, side in ((root_a, "A"), (root_b, "B")) if root]
        # Longest root first, so a tree nested inside the other wins
        for root, side in sorted(candidates, key=lambda c: len(c[0]), reverse=True):
            if path == root or path.startswith(root.rstrip(os.sep) + os.sep):
                return side
        return None

    def _display_errors(self, errors: List[str]) -> None:
        """Display error messages in a separate panel."""
        max_display = 10
        displayed_errors = errors[:max_display]
        remaining = len(errors) - max_display

        error_text = "\n".join(f"- {e}" for e in displayed_errors)
        if remaining > 0:
            error_text += f"\n\n... and {remaining} more errors"

        self.console.print(Panel(error_text, title=f"Errors ({len(errors)})", border_style="red"))

    def _format_size(self, bytes_size: int) -> str:
        """Convert bytes to human-readable format (e.g., "10.5 MB")."""
        if bytes_size < 1024:
            return f"{bytes_size} B"
        elif bytes_size < 1024 * 1024:
            return f"{bytes_size / 1024:.1f} KB"
        elif bytes_size < 1024 * 1024 * 1024:
            return f"{bytes_size / (1024 * 1024):.1f} MB"
        else:
            return f"{bytes_size / (1024 * 1024 * 1024):.1f} GB"

    def _format_duration(self, milliseconds: int) -> str:
        """Convert milliseconds to "850 ms", "12.3s" or "5m 23s"."""
        if milliseconds < 1000:
            return f"{max(milliseconds, 0)} ms"
        seconds = milliseconds / 1000
        if seconds < 60:
            return f"{seconds:.1f}s"
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"

    def _truncate_name(self, name: str, max_length: int = 60) -> str:
        if len(name) > max_length:
            return name[: max_length - 3] + "..."
        return name
