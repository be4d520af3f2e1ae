"""Workflow orchestration package for dirscope.

This package contains the components that hold state across calls:
- DirscopeSession: Entry point for comparisons, analyses and copies.
- ResultCache: Keeps the latest disk usage tree for path-scoped views.
- ReportLogger: Structured logging of a command to a report file.
"""

from dirscope.orchestration.report_logger import ReportLogger
from dirscope.orchestration.result_cache import ResultCache, lookup_and_flatten
from dirscope.orchestration.session import DEFAULT_VIEW_DEPTH, DirscopeSession

__all__ = [
    "DEFAULT_VIEW_DEPTH",
    "DirscopeSession",
    "ReportLogger",
    "ResultCache",
    "lookup_and_flatten",
]
