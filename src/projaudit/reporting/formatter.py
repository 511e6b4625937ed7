"""Report rendering.

Every renderer is a read-only projection of a ValidationReport: counts and
scores are printed as stored, never recomputed, so all formats agree on
every number they show.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from projaudit.aggregation import classify_report, sort_recommendations
from projaudit.models import CategorySummary, Severity, ValidationReport
from projaudit.reporting.codec import report_to_json

WIDTH = 78
RULE = "-" * WIDTH
DOUBLE_RULE = "=" * WIDTH


class ReportFormat(str, Enum):
    CONSOLE = "console"
    MARKDOWN = "markdown"
    JSON = "json"
    SUMMARY = "summary"


def format_timestamp(timestamp_ms: int) -> str:
    """Render an epoch-milliseconds timestamp as UTC text."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S UTC")


def overall_status(score: int, critical_issues: int) -> str:
    """Label a score. Any critical issue forces CRITICAL."""
    if critical_issues > 0:
        return "CRITICAL"
    if score >= 90:
        return "EXCELLENT"
    if score >= 75:
        return "GOOD"
    if score >= 60:
        return "FAIR"
    if score >= 40:
        return "POOR"
    return "CRITICAL"


def _percentage(value: int, total: int) -> int:
    return (value * 100) // total if total > 0 else 0


def _category_marker(category: CategorySummary) -> str:
    if category.critical_issues > 0:
        return "FAIL"
    if category.warning_issues > 0:
        return "WARN"
    if category.total_issues > 0:
        return "INFO"
    return " OK "


class ReportFormatter:
    """Renders reports as console text, Markdown, JSON or a short summary.

    Args:
        include_info: List info-level findings in Markdown issue lists. Counts
            and scores always include them.
    """

    def __init__(self, include_info: bool = True) -> None:
        self.include_info = include_info

    def format(self, report: ValidationReport, fmt: ReportFormat) -> str:
        """Render a report in the requested format."""
        if fmt is ReportFormat.CONSOLE:
            return self.format_console(report)
        if fmt is ReportFormat.MARKDOWN:
            return self.format_markdown(report)
        if fmt is ReportFormat.JSON:
            return self.format_json(report)
        if fmt is ReportFormat.SUMMARY:
            return self.format_summary(report)
        raise ValueError(f"Unsupported report format: {fmt!r}")

    # -------------------------------------------------------------------------
    # Console
    # -------------------------------------------------------------------------

    def format_console(self, report: ValidationReport) -> str:
        """Render a fixed-width console report.

        Sections: executive header, one block per category, then numbered
        recommendations ordered by priority and category name.
        """
        s = report.summary
        lines = [
            DOUBLE_RULE,
            "PROJECT VALIDATION REPORT".center(WIDTH).rstrip(),
            DOUBLE_RULE,
            f"Generated: {format_timestamp(report.timestamp)}",
            f"Project:   {report.project_path}",
            "",
            "SUMMARY",
            RULE,
            f"  Overall Score:  {s.overall_score}/100",
            f"  Status:         {overall_status(s.overall_score, s.critical_issues)}",
            f"  Total Issues:   {s.total_issues}",
            f"  Critical:       {s.critical_issues}",
            f"  Warning:        {s.warning_issues}",
            f"  Info:           {s.info_issues}",
            "",
            "CATEGORIES",
            RULE,
        ]

        for category in s.categories:
            lines.append(
                f"  [{_category_marker(category)}] {category.category_name:<32} "
                f"Score: {category.score:>3}/100"
            )
            lines.append(
                f"         Total: {category.total_issues}  "
                f"Critical: {category.critical_issues}  "
                f"Warning: {category.warning_issues}  "
                f"Info: {category.info_issues}"
            )

        lines += ["", "RECOMMENDATIONS", RULE]
        recommendations = sort_recommendations(report.recommendations)
        if not recommendations:
            lines.append("  No recommendations.")
        for index, rec in enumerate(recommendations, start=1):
            lines.append(f"  {index}. [{rec.priority.value.upper()}] {rec.title} ({rec.category})")
            lines.append(f"     {rec.description}")
            if rec.estimated_effort:
                lines.append(f"     Effort: {rec.estimated_effort}")

        lines.append(DOUBLE_RULE)
        return "\n".join(lines) + "\n"

    # -------------------------------------------------------------------------
    # Markdown
    # -------------------------------------------------------------------------

    def format_markdown(self, report: ValidationReport) -> str:
        """Render a Markdown report with issue lists and a recommendation checklist."""
        s = report.summary
        lines = [
            "# Project Validation Report",
            "",
            f"**Generated:** {format_timestamp(report.timestamp)}",
            f"**Project:** `{report.project_path}`",
            "",
            "## Executive Summary",
            "",
            f"- **Overall Score:** {s.overall_score}/100",
            f"- **Status:** {overall_status(s.overall_score, s.critical_issues)}",
            f"- **Total Issues:** {s.total_issues}",
            f"- **Critical Issues:** {s.critical_issues}",
            "",
            "## Summary Statistics",
            "",
            "| Metric | Count | Percentage |",
            "|--------|-------|------------|",
            f"| Total Issues | {s.total_issues} | 100% |",
            f"| Critical | {s.critical_issues} "
            f"| {_percentage(s.critical_issues, s.total_issues)}% |",
            f"| Warning | {s.warning_issues} | {_percentage(s.warning_issues, s.total_issues)}% |",
            f"| Info | {s.info_issues} | {_percentage(s.info_issues, s.total_issues)}% |",
            "",
            "## Category Breakdown",
            "",
            "| Category | Score | Critical | Warning | Info | Total |",
            "|----------|-------|----------|---------|------|-------|",
        ]
        for c in s.categories:
            lines.append(
                f"| {c.category_name} | {c.score}/100 | {c.critical_issues} | {c.warning_issues} "
                f"| {c.info_issues} | {c.total_issues} |"
            )

        lines += ["", "## Issues", ""]
        findings = classify_report(report)
        for c in s.categories:
            name = c.category_name
            lines += [f"### {name}", ""]
            category_findings = [
                f
                for f in findings.get(name, [])
                if self.include_info or f.severity is not Severity.INFO
            ]
            if not category_findings:
                lines.append("- No issues found.")
            for finding in category_findings:
                location = f" (`{', '.join(finding.files)}`)" if finding.files else ""
                lines.append(
                    f"- **[{finding.severity.value.upper()}] {finding.finding_type}:** "
                    f"{finding.description}{location}"
                )
            lines.append("")

        lines += ["## Recommendations", ""]
        recommendations = sort_recommendations(report.recommendations)
        if not recommendations:
            lines.append("No recommendations.")
        for rec in recommendations:
            lines.append(
                f"- [ ] **{rec.priority.value.capitalize()}:** {rec.title} ({rec.category})"
            )
            lines.append(f"  - {rec.description}")
            for item in rec.action_items:
                lines.append(f"  - [ ] {item}")
            if rec.affected_files:
                files = ", ".join(f"`{path}`" for path in rec.affected_files)
                lines.append(f"  - Affected files: {files}")
            if rec.estimated_effort:
                lines.append(f"  - Estimated effort: {rec.estimated_effort}")

        lines += ["", "---", "*Report generated by projaudit*"]
        return "\n".join(lines) + "\n"

    # -------------------------------------------------------------------------
    # JSON and summary
    # -------------------------------------------------------------------------

    def format_json(self, report: ValidationReport) -> str:
        """Render the full report as indented JSON."""
        return report_to_json(report)

    def format_summary(self, report: ValidationReport) -> str:
        """Render a short plain-text overview."""
        s = report.summary
        lines = [
            "VALIDATION SUMMARY",
            "==================",
            f"Score: {s.overall_score}/100",
            f"Issues: {s.total_issues} ({s.critical_issues} critical)",
            f"Status: {overall_status(s.overall_score, s.critical_issues)}",
        ]
        if s.critical_issues > 0:
            lines += ["", "CRITICAL ISSUES REQUIRE IMMEDIATE ATTENTION"]
        return "\n".join(lines) + "\n"


def format_report(report: ValidationReport, fmt: ReportFormat | str) -> str:
    """Render a report with a default formatter.

    Args:
        report: Report to render.
        fmt: ReportFormat member or its value ("console", "markdown", "json", "summary").
    """
    return ReportFormatter().format(report, ReportFormat(fmt))


__all__ = [
    "ReportFormat",
    "ReportFormatter",
    "format_report",
    "format_timestamp",
    "overall_status",
]
