"""ReportLogger for writing comparison, disk usage and copy reports.

This module provides the ReportLogger class that writes a sectioned plain-text
log of a dirscope command to a file: a header, one section per phase that ran
(COMPARISON, DISK USAGE, COPY) and a closing SUMMARY.
"""

import sys
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

from dirscope.models import (
    AnalysisResult,
    ComparisonFinding,
    CopyError,
    DifferingContent,
    DirEntry,
    ErrorEntry,
    TypeMismatch,
    entry_name,
)


class ReportLogger:
    """Logger for dirscope commands with structured output format.

    Usage:
        with ReportLogger(log_file_path, dry_run=True, command="sync") as report:
            report.log_header()
            report.log_comparison(root_a, root_b, findings)
            report.log_copy(source_root, destination_root, paths, errors)
            report.log_summary(duration_seconds, total_findings=len(findings))

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(
        self,
        log_file_path: Optional[Path] = None,
        dry_run: bool = False,
        command: str = "compare",
    ) -> None:
        """Initialize the ReportLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                generates a timestamped filename in the current directory.
            dry_run: Whether copies are simulated (shown in the header).
            command: Name of the command being logged (shown in the header).

        Raises:
            OSError: If the log file's parent directory is missing or not
                writable.
        """
        self._dry_run = dry_run
        self._command = command
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"dirscope_{command}_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")

    def __enter__(self) -> "ReportLogger":
        """Open the log file.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        try:
            self._file_handle = open(self._log_file_path, "w", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}") from e
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                print(f"Warning: Error closing log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        return self._log_file_path

    def log_header(self) -> None:
        """Write the title, timestamp, command and mode."""
        self._write_separator()
        self._write_line("dirscope - Report Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        self._write_line(f"Command: {self._command}")
        mode = "DRY RUN" if self._dry_run else "LIVE"
        self._write_line(f"Mode: {mode}")
        self._write_line("")

    def log_comparison(
        self,
        root_a: str,
        root_b: str,
        findings: List[ComparisonFinding],
    ) -> None:
        """Write the comparison section.

        Args:
            root_a: Root of tree A.
            root_b: Root of tree B.
            findings: Sorted findings of the comparison.
        """
        self._write_separator()
        self._write_line("COMPARISON")
        self._write_separator()
        self._write_line(f"Tree A: {root_a}")
        self._write_line(f"Tree B: {root_b}")
        self._write_line(f"Findings: {len(findings)}")

        # Counter keeps first-seen order, which is the sort order of findings
        counts = Counter(finding.KIND for finding in findings)
        for kind, count in counts.items():
            self._write_line(f"{kind}: {count}", indent=2)
        self._write_line("")

        for finding in findings:
            self._write_line(f"[{finding.KIND}] {self._describe_finding(finding)}")
        if findings:
            self._write_line("")

    def log_disk_usage(self, root: str, analysis: AnalysisResult) -> None:
        """Write the disk usage section.

        Lists the top-level content of the analyzed directory, largest first.

        Args:
            root: Directory that was analyzed.
            analysis: Outcome of the analysis.
        """
        self._write_separator()
        self._write_line("DISK USAGE")
        self._write_separator()
        self._write_line(f"Root: {root}")

        result = analysis.result
        if isinstance(result, ErrorEntry):
            status = "Aborted" if analysis.aborted else f"Failed - {result.reason}"
            self._write_line(f"Status: {status}")
        else:
            self._write_line(f"Total size: {result.size:,} bytes")
            self._write_line(f"Files: {result.number_of_files:,}")
        self._write_line(f"Duration: {analysis.duration_ms} ms")
        self._write_line("")

        if isinstance(result, DirEntry) and result.content:
            self._write_line("Content:")
            for child in sorted(result.content, key=lambda c: c.size, reverse=True):
                label = entry_name(child)
                if isinstance(child, ErrorEntry):
                    self._write_line(f"! {label} - {child.reason}", indent=2)
                elif isinstance(child, DirEntry):
                    self._write_line(
                        f"{label}/ - {child.size:,} bytes, {child.number_of_files:,} files",
                        indent=2,
                    )
                else:
                    self._write_line(f"{label} - {child.size:,} bytes", indent=2)
            self._write_line("")

    def log_copy(
        self,
        source_root: str,
        destination_root: str,
        relative_paths: Iterable[str],
        errors: List[CopyError],
    ) -> None:
        """Write a copy step entry.

        Args:
            source_root: Tree the entries were copied from.
            destination_root: Tree the entries were copied into.
            relative_paths: Paths that were requested.
            errors: Paths that failed, with their messages.
        """
        self._write_separator()
        self._write_line("COPY")
        self._write_separator()
        self._write_line(
            f"[{self._format_timestamp(datetime.now())}] Copying {source_root} -> {destination_root}"
        )

        failed = {error.path for error in errors}
        for path in relative_paths:
            marker = "!" if path in failed else "-"
            self._write_line(f"{marker} {path}", indent=2)

        if errors:
            self._write_line("Errors:", indent=2)
            for error in errors:
                self._write_line(f"- {error.path}: {error.message}", indent=4)

        self._write_line(f"[{self._format_timestamp(datetime.now())}] Completed copy")
        self._write_line("")

    def log_summary(
        self,
        duration_seconds: float,
        total_findings: Optional[int] = None,
        remaining_findings: Optional[int] = None,
        paths_copied: Optional[int] = None,
        copy_errors: Optional[List[CopyError]] = None,
    ) -> None:
        """Write the summary section.

        Only the totals that apply to the logged command are passed in; the
        others are left out of the log.
        """
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        if total_findings is not None:
            self._write_line(f"Findings: {total_findings}")
        if remaining_findings is not None:
            self._write_line(f"Findings remaining: {remaining_findings}")
        if paths_copied is not None:
            self._write_line(f"Paths copied: {paths_copied}")
        if copy_errors:
            self._write_line(f"Total errors: {len(copy_errors)}")
        self._write_line(f"Duration: {self._format_duration(duration_seconds)}")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _describe_finding(self, finding: ComparisonFinding) -> str:
        if isinstance(finding, TypeMismatch):
            return f"{finding.path} (A: {finding.type_in_a.value}, B: {finding.type_in_b.value})"
        if isinstance(finding, DifferingContent):
            newer = finding.newer_side
            return f"{finding.path} (newer in {newer})" if newer else finding.path
        message = getattr(finding, "message", None)
        return f"{finding.path} - {message}" if message else finding.path

    def _format_duration(self, seconds: float) -> str:
        """Format duration like "45s", "5m 23s" or "1h 5m 30s"."""
        total_seconds = int(seconds)

        if total_seconds < 60:
            return f"{total_seconds}s"

        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        secs = total_seconds % 60

        if hours > 0:
            return f"{hours}h {minutes}m {secs}s"
        return f"{minutes}m {secs}s"

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the log file with optional indentation.

        Args:
            text: The text to write.
            indent: Number of spaces to indent the line.
        """
        if self._file_handle is None:
            print(
                f"Warning: Attempted to write to closed log file: {text}",
                file=sys.stderr,
            )
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            print(f"Warning: Error writing to log file: {e}", file=sys.stderr)
