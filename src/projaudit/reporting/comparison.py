"""Comparison of two validation runs.

Findings are matched by category, type, severity and description. File
paths take no part in the match, so a finding that moves to another file
is unchanged.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from projaudit.aggregation import ClassifiedFinding, classify_report
from projaudit.models import ValidationReport
from projaudit.reporting.formatter import format_timestamp


@dataclass(frozen=True)
class ReportComparison:
    """Differences between a previous and a current report.

    Attributes:
        previous_timestamp: Previous run time in epoch milliseconds.
        current_timestamp: Current run time in epoch milliseconds.
        previous_score: Overall score of the previous run.
        current_score: Overall score of the current run.
        score_change: current_score - previous_score.
        previous_issues: Total issues of the previous run.
        current_issues: Total issues of the current run.
        issue_change: current_issues - previous_issues.
        improved_categories: Categories whose score went up.
        regressed_categories: Categories whose score went down.
        new_issues: Findings present only in the current run.
        resolved_issues: Findings present only in the previous run.
    """

    previous_timestamp: int
    current_timestamp: int
    previous_score: int
    current_score: int
    score_change: int
    previous_issues: int
    current_issues: int
    issue_change: int
    improved_categories: tuple[str, ...] = ()
    regressed_categories: tuple[str, ...] = ()
    new_issues: tuple[str, ...] = ()
    resolved_issues: tuple[str, ...] = ()


def _label(finding: ClassifiedFinding) -> str:
    return (
        f"[{finding.severity.value.upper()}] {finding.category}: "
        f"{finding.finding_type}: {finding.description}"
    )


def _finding_counts(report: ValidationReport) -> Counter[str]:
    return Counter(
        _label(finding)
        for findings in classify_report(report).values()
        for finding in findings
    )


def compare_reports(previous: ValidationReport, current: ValidationReport) -> ReportComparison:
    """Compare two reports of the same project.

    Categories missing from either report are skipped. Repeated findings are
    compared by count, so two identical findings reduced to one leave one
    resolved entry.
    """
    previous_scores = {c.category_name: c.score for c in previous.summary.categories}
    improved: list[str] = []
    regressed: list[str] = []
    for category in current.summary.categories:
        before = previous_scores.get(category.category_name)
        if before is None:
            continue
        if category.score > before:
            improved.append(category.category_name)
        elif category.score < before:
            regressed.append(category.category_name)

    previous_findings = _finding_counts(previous)
    current_findings = _finding_counts(current)

    return ReportComparison(
        previous_timestamp=previous.timestamp,
        current_timestamp=current.timestamp,
        previous_score=previous.summary.overall_score,
        current_score=current.summary.overall_score,
        score_change=current.summary.overall_score - previous.summary.overall_score,
        previous_issues=previous.summary.total_issues,
        current_issues=current.summary.total_issues,
        issue_change=current.summary.total_issues - previous.summary.total_issues,
        improved_categories=tuple(improved),
        regressed_categories=tuple(regressed),
        new_issues=tuple(sorted((current_findings - previous_findings).elements())),
        resolved_issues=tuple(sorted((previous_findings - current_findings).elements())),
    )


def _signed(value: int) -> str:
    return f"+{value}" if value >= 0 else str(value)


def format_comparison(comparison: ReportComparison) -> str:
    """Render a comparison as Markdown."""
    c = comparison
    lines = [
        "# Validation Comparison Report",
        "",
        f"**Previous run:** {format_timestamp(c.previous_timestamp)}",
        f"**Current run:** {format_timestamp(c.current_timestamp)}",
        "",
        "## Score Comparison",
        "",
        f"- **Previous Score:** {c.previous_score}/100",
        f"- **Current Score:** {c.current_score}/100",
        f"- **Change:** {_signed(c.score_change)}",
        "",
        "## Issue Count Comparison",
        "",
        f"- **Previous Issues:** {c.previous_issues}",
        f"- **Current Issues:** {c.current_issues}",
        f"- **Change:** {_signed(c.issue_change)}",
    ]

    sections = (
        ("Improved Categories", c.improved_categories),
        ("Regressed Categories", c.regressed_categories),
        ("New Issues", c.new_issues),
        ("Resolved Issues", c.resolved_issues),
    )
    for title, entries in sections:
        if entries:
            lines += ["", f"## {title}", ""]
            lines += [f"- {entry}" for entry in entries]

    if not c.new_issues and not c.resolved_issues:
        lines += ["", "No findings changed between the two runs."]

    return "\n".join(lines) + "\n"
