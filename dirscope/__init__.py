"""dirscope - Directory comparison and disk usage tool.

A Python application that reports the structural and content differences
between two directory trees, copies selected differences across, and
analyzes how disk space is distributed inside a tree.
"""

__version__ = "0.1.0"

from .models import (
    AnalysisResult,
    ComparisonFinding,
    CopyError,
    DirEntry,
    EntryType,
    ErrorEntry,
    FileEntry,
)
from .orchestration import DirscopeSession

__all__ = [
    "__version__",
    "AnalysisResult",
    "ComparisonFinding",
    "CopyError",
    "DirEntry",
    "DirscopeSession",
    "EntryType",
    "ErrorEntry",
    "FileEntry",
]


def main() -> None:
    """Entry point for the dirscope CLI application.

    This function is called when the `dirscope` command is invoked after
    package installation via pip. It imports and runs the Typer app
    from the dirscope.cli module.
    """
    from dirscope.cli import app
    app()
