"""Report rendering, persistence and run comparison."""

from projaudit.reporting.codec import load_report, report_from_dict, report_to_json
from projaudit.reporting.comparison import ReportComparison, compare_reports, format_comparison
from projaudit.reporting.formatter import (
    ReportFormat,
    ReportFormatter,
    format_report,
    format_timestamp,
    overall_status,
)
from projaudit.reporting.output import ReportStore

__all__ = [
    "ReportComparison",
    "ReportFormat",
    "ReportFormatter",
    "ReportStore",
    "compare_reports",
    "format_comparison",
    "format_report",
    "format_timestamp",
    "load_report",
    "overall_status",
    "report_from_dict",
    "report_to_json",
]
