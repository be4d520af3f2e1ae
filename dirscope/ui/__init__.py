"""Terminal user interface package for dirscope."""

from dirscope.ui.report_tui import ReportTUI

__all__ = ["ReportTUI"]
