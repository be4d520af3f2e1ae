"""
dirscope - CLI Interface.

A command-line interface for comparing two directory trees, copying their
differences from one to the other, and analyzing the disk usage of a tree.

Usage Examples:
    # Compare two trees (exit code 1 when they differ)
    python -m dirscope compare /backup/a /backup/b

    # Same, as JSON, with a report log
    python -m dirscope compare /backup/a /backup/b --json --log-file report.log

    # Copy selected entries from one tree to the other
    python -m dirscope copy /backup/a /backup/b notes.txt photos

    # Bring B up to date with A (preview first)
    python -m dirscope sync /backup/a /backup/b --direction a-to-b --dry-run

    # Disk usage, two levels deep, then zoom into a subdirectory
    python -m dirscope usage /data --depth 2
    python -m dirscope usage /data --subtree photos/2024
"""

import concurrent.futures
import errno
import json
import logging
import os
import time
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from dirscope import __version__
from dirscope.models import (
    AnalysisResult,
    ComparisonFinding,
    DifferingContent,
    ErrorEntry,
    MissingInA,
    MissingInB,
    ProgressPayload,
)
from dirscope.orchestration import DEFAULT_VIEW_DEPTH, DirscopeSession, ReportLogger
from dirscope.scanning import DEFAULT_MAX_DEPTH
from dirscope.ui import ReportTUI

# Initialize Typer app
app = typer.Typer(
    name="dirscope",
    help="Compare directory trees and analyze disk usage.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for consistent output formatting
console = Console()


class Direction(str, Enum):
    """Which tree is brought up to date by sync."""
    A_TO_B = "a-to-b"
    B_TO_A = "b-to-a"


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"dirscope v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route the package loggers to stderr through Rich.

    Args:
        verbose: Show debug messages; otherwise only warnings and errors.
    """
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger = logging.getLogger("dirscope")
    package_logger.handlers = [handler]
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


def validate_root(path: Path, label: str = "Path") -> None:
    """
    Validate that a tree root exists and is a readable directory.

    Args:
        path: Path to validate.
        label: Name used for the path in error messages.

    Raises:
        typer.Exit: If validation fails with descriptive error message.
    """
    if not path.exists():
        console.print(f"[red]Error:[/red] {label} does not exist: {path}")
        raise typer.Exit(1)

    if not path.is_dir():
        console.print(f"[red]Error:[/red] {label} is not a directory: {path}")
        raise typer.Exit(1)

    if not os.access(path, os.R_OK):
        console.print(f"[red]Error:[/red] Permission denied - cannot read: {path}")
        raise typer.Exit(1)


def select_copy_paths(findings: List[ComparisonFinding], direction: Direction) -> List[str]:
    """Relative paths whose copy in the given direction resolves a finding.

    Copying A to B fixes entries missing in B and files whose content
    differs; entries missing in A would need B to A.
    """
    missing_kind = MissingInB if direction is Direction.A_TO_B else MissingInA
    return [
        finding.path
        for finding in findings
        if finding.auto_fixable and isinstance(finding, (missing_kind, DifferingContent))
    ]


def normalize_subtree(subtree: str) -> str:
    """Turn a --subtree value into a root-relative path ("" for the root)."""
    normalized = os.path.normpath(subtree.strip(os.sep)) if subtree else os.curdir
    return "" if normalized == os.curdir else normalized


def open_report(log_file: Optional[Path], command: str, dry_run: bool = False) -> Optional[ReportLogger]:
    """Create a ReportLogger for --log-file, warning (not failing) if impossible."""
    if log_file is None:
        return None
    try:
        return ReportLogger(log_file, dry_run=dry_run, command=command)
    except OSError as e:
        console.print(
            f"[yellow]Warning:[/yellow] Failed to create log file: {e}. "
            "Continuing without logging."
        )
        return None


def run_analysis(
    session: DirscopeSession,
    root: str,
    on_progress: Optional[Callable[[ProgressPayload], None]],
) -> AnalysisResult:
    """Run an analysis on a worker thread so Ctrl+C can abort it.

    Raises:
        KeyboardInterrupt: After the interrupted analysis has stopped.
    """
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(session.analyze_disk_usage, root, on_progress)
        try:
            return future.result()
        except KeyboardInterrupt:
            session.abort_current_analysis()
            future.result()
            raise


def _report_disk_full() -> None:
    console.print("[red]Error:[/red] Disk full - copy aborted.")
    console.print(
        "[dim]Some files may have been partially copied. "
        "Please free up disk space and retry.[/dim]"
    )


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """dirscope - Compare directory trees and analyze disk usage."""
    pass


@app.command()
def compare(
    root_a: Path = typer.Argument(..., help="Root of tree A."),
    root_b: Path = typer.Argument(..., help="Root of tree B."),
    as_json: bool = typer.Option(False, "--json", help="Print findings as JSON."),
    max_depth: int = typer.Option(
        DEFAULT_MAX_DEPTH,
        "--max-depth",
        min=0,
        help="Deepest directory level to enter.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output."),
) -> None:
    """
    Compare two directory trees.

    Reports entries missing on either side, entries that are a file on one
    side and a directory on the other, files whose content differs, and
    anything that could not be read. Exits with code 1 when differences are
    found.
    """
    configure_logging(verbose)
    validate_root(root_a, "Tree A")
    validate_root(root_b, "Tree B")

    started = time.perf_counter()
    report = open_report(log_file, "compare")
    session = DirscopeSession(max_depth=max_depth)

    try:
        findings = session.compare(str(root_a), str(root_b))
    except KeyboardInterrupt:
        console.print("\n[yellow]Comparison interrupted by user.[/yellow]")
        raise typer.Exit(130)

    if as_json:
        typer.echo(json.dumps([f.to_dict() for f in findings], indent=2))
    else:
        ReportTUI(console).display_findings(findings, str(root_a), str(root_b))

    if report is not None:
        with report:
            report.log_header()
            report.log_comparison(str(root_a), str(root_b), findings)
            report.log_summary(time.perf_counter() - started, total_findings=len(findings))
        if verbose:
            console.print(f"[dim]Log written to: {report.get_log_path()}[/dim]")

    if findings:
        raise typer.Exit(1)


@app.command()
def copy(
    source_root: Path = typer.Argument(..., help="Tree to copy from."),
    destination_root: Path = typer.Argument(..., help="Tree to copy into."),
    paths: List[str] = typer.Argument(..., help="Paths relative to both roots."),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show what would be copied without making changes.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output."),
) -> None:
    """
    Copy entries from one tree to the same relative paths in another.

    Files and whole directories are copied, overwriting what is already in
    the destination. Exits with code 1 if any path could not be copied.
    """
    configure_logging(verbose)
    validate_root(source_root, "Source")
    validate_root(destination_root, "Destination")

    started = time.perf_counter()
    report = open_report(log_file, "copy", dry_run=dry_run)
    session = DirscopeSession()

    if dry_run:
        console.print("[yellow][DRY RUN MODE][/yellow] No files will be modified.\n")

    try:
        errors = session.apply_copy(str(source_root), str(destination_root), paths, dry_run=dry_run)
    except OSError as e:
        if e.errno == errno.ENOSPC:
            _report_disk_full()
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    ReportTUI(console).display_copy_summary(len(paths) - len(errors), errors, dry_run)

    if report is not None:
        with report:
            report.log_header()
            report.log_copy(str(source_root), str(destination_root), paths, errors)
            report.log_summary(
                time.perf_counter() - started,
                paths_copied=len(paths) - len(errors),
                copy_errors=errors,
            )

    if errors:
        raise typer.Exit(1)


@app.command()
def sync(
    root_a: Path = typer.Argument(..., help="Root of tree A."),
    root_b: Path = typer.Argument(..., help="Root of tree B."),
    direction: Direction = typer.Option(
        Direction.A_TO_B,
        "--direction",
        "-d",
        case_sensitive=False,
        help="Copy from A to B or from B to A.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show what would be copied without making changes.",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Copy without asking for confirmation."),
    max_depth: int = typer.Option(
        DEFAULT_MAX_DEPTH,
        "--max-depth",
        min=0,
        help="Deepest directory level to enter.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output."),
) -> None:
    """
    Compare two trees and copy the fixable differences in one direction.

    Entries missing on the destination side and files with differing
    content are copied from the source side. Type mismatches and read errors
    are left for manual review. The trees are compared again afterwards to
    show what remains.
    """
    configure_logging(verbose)
    validate_root(root_a, "Tree A")
    validate_root(root_b, "Tree B")

    if direction is Direction.A_TO_B:
        source_root, destination_root = str(root_a), str(root_b)
    else:
        source_root, destination_root = str(root_b), str(root_a)

    tui = ReportTUI(console)
    started = time.perf_counter()
    session = DirscopeSession(max_depth=max_depth)

    try:
        findings = session.compare(str(root_a), str(root_b))
        tui.display_findings(findings, str(root_a), str(root_b))

        paths = select_copy_paths(findings, direction)
        if not paths:
            console.print("[green]Nothing to copy.[/green]")
            return

        if dry_run:
            console.print("[yellow][DRY RUN MODE][/yellow] No files will be modified.\n")
        elif not yes and not tui.confirm_copy(source_root, destination_root, paths):
            console.print("[yellow]Copy cancelled.[/yellow]")
            return

        errors = session.apply_copy(source_root, destination_root, paths, dry_run=dry_run)
    except KeyboardInterrupt:
        console.print("\n[yellow]Sync interrupted by user.[/yellow]")
        raise typer.Exit(130)
    except OSError as e:
        if e.errno == errno.ENOSPC:
            _report_disk_full()
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    tui.display_copy_summary(len(paths) - len(errors), errors, dry_run)

    remaining = findings
    if not dry_run:
        remaining = session.compare(str(root_a), str(root_b))
        if remaining:
            console.print(f"\n[yellow]{len(remaining)} finding(s) remain:[/yellow]")
            tui.display_findings(remaining, str(root_a), str(root_b))
        else:
            console.print("\n[green]The trees are now identical.[/green]")

    report = open_report(log_file, "sync", dry_run=dry_run)
    if report is not None:
        with report:
            report.log_header()
            report.log_comparison(str(root_a), str(root_b), findings)
            report.log_copy(source_root, destination_root, paths, errors)
            report.log_summary(
                time.perf_counter() - started,
                total_findings=len(findings),
                remaining_findings=len(remaining),
                paths_copied=len(paths) - len(errors),
                copy_errors=errors,
            )

    if errors:
        raise typer.Exit(1)


@app.command()
def usage(
    root: Path = typer.Argument(..., help="Directory to analyze."),
    depth: int = typer.Option(
        DEFAULT_VIEW_DEPTH,
        "--depth",
        min=0,
        help="Levels of directory content to show.",
    ),
    subtree: Optional[str] = typer.Option(
        None,
        "--subtree",
        "-s",
        help="Show this directory (relative to ROOT) instead of the root.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the usage tree as JSON."),
    max_depth: int = typer.Option(
        DEFAULT_MAX_DEPTH,
        "--max-depth",
        min=0,
        help="Deepest directory level to enter.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output."),
) -> None:
    """
    Analyze the disk usage of a directory tree.

    Shows the total size and file count of the tree and of every entry down
    to --depth levels. Press Ctrl+C to abort a long analysis.
    """
    configure_logging(verbose)
    validate_root(root, "Root")

    report = open_report(log_file, "usage")
    tui = ReportTUI(console)
    session = DirscopeSession(max_depth=max_depth, view_depth=depth)

    try:
        if as_json:
            analysis = run_analysis(session, str(root), None)
        else:
            progress, callback = tui.create_progress_callback(str(root))
            with progress:
                analysis = run_analysis(session, str(root), callback)
    except KeyboardInterrupt:
        console.print("\n[yellow]Analysis aborted by user.[/yellow]")
        raise typer.Exit(130)

    if subtree is not None and not analysis.aborted:
        view = session.get_subtree(normalize_subtree(subtree))
        if view is None:
            console.print(f"[red]Error:[/red] No directory '{subtree}' in {root}")
            raise typer.Exit(1)
        analysis = AnalysisResult(result=view, duration_ms=analysis.duration_ms)

    if as_json:
        typer.echo(json.dumps(analysis.to_dict(), indent=2))
    else:
        tui.display_usage(str(root), analysis)

    if report is not None:
        with report:
            report.log_header()
            report.log_disk_usage(str(root), analysis)
            report.log_summary(analysis.duration_ms / 1000)

    if isinstance(analysis.result, ErrorEntry):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
