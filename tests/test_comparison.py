"""Tests for projaudit.reporting.comparison module."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from projaudit.models import ValidationReport
from projaudit.orchestrator import ValidationOrchestrator
from projaudit.reporting import ReportComparison, compare_reports, format_comparison
from projaudit.validators.fixture import validators_from_dict

UNUSED_OS = {"file_path": "app/ui/home.py", "import_statement": "import os", "line_number": 3}
UNUSED_SYS = {"file_path": "app/ui/home.py", "import_statement": "import sys", "line_number": 4}

PREVIOUS: dict[str, Any] = {
    "imports": {"unused_imports": [UNUSED_OS, UNUSED_SYS]},
    "webhook": {
        "network_config": {
            "issues": [{"component": "HttpClient", "issue": "No timeout", "severity": "warning"}]
        }
    },
}

CURRENT: dict[str, Any] = {
    "imports": {
        "unused_imports": [UNUSED_OS],
        "architectural_violations": [
            {"file_path": "app/domain/user.py", "violation_type": "layer_dependency_violation",
             "description": "Domain imports data layer", "suggestion": "Invert it"},
        ],
    },
}


def run_fixture(tmp_path: Path, findings: dict[str, Any], clock: float) -> ValidationReport:
    validators = validators_from_dict(findings)
    return ValidationOrchestrator(*validators, clock=lambda: clock).run(tmp_path)


@pytest.fixture
def comparison(tmp_path: Path) -> ReportComparison:
    previous = run_fixture(tmp_path, PREVIOUS, 1_700_000_000.0)
    current = run_fixture(tmp_path, CURRENT, 1_700_086_400.0)
    return compare_reports(previous, current)


class TestCompareReports:
    """Tests for compare_reports."""

    def test_scores_and_counts(self, comparison: ReportComparison) -> None:
        """Test overall score and issue count changes."""
        assert comparison.previous_score == 95
        assert comparison.current_score == 89
        assert comparison.score_change == -6
        assert comparison.previous_issues == 3
        assert comparison.current_issues == 2
        assert comparison.issue_change == -1
        assert comparison.current_timestamp - comparison.previous_timestamp == 86_400_000

    def test_categories(self, comparison: ReportComparison) -> None:
        """Test categories are split by score movement."""
        assert comparison.improved_categories == ("Webhook Validation",)
        assert comparison.regressed_categories == ("Import Validation",)

    def test_new_and_resolved_findings(self, comparison: ReportComparison) -> None:
        """Test findings are matched across runs."""
        assert comparison.new_issues == (
            "[CRITICAL] Import Validation: Architectural Violation: Domain imports data layer",
        )
        assert comparison.resolved_issues == (
            "[INFO] Import Validation: Unused Import: Import 'import sys' is not used",
            "[WARNING] Webhook Validation: Network Configuration Issue: HttpClient: No timeout",
        )

    def test_repeated_finding_counted(self, tmp_path: Path) -> None:
        """Test a duplicated finding reduced to one leaves one resolved entry."""
        twice = {"imports": {"unused_imports": [UNUSED_OS, UNUSED_OS]}}
        once = {"imports": {"unused_imports": [UNUSED_OS]}}
        result = compare_reports(run_fixture(tmp_path, twice, 0), run_fixture(tmp_path, once, 1))

        assert result.new_issues == ()
        assert result.resolved_issues == (
            "[INFO] Import Validation: Unused Import: Import 'import os' is not used",
        )

    def test_identical_runs(self, tmp_path: Path) -> None:
        """Test comparing a run with itself reports no change."""
        report = run_fixture(tmp_path, CURRENT, 0)
        result = compare_reports(report, report)

        assert result.score_change == 0
        assert result.issue_change == 0
        assert result.improved_categories == ()
        assert result.regressed_categories == ()
        assert result.new_issues == ()
        assert result.resolved_issues == ()


class TestFormatComparison:
    """Tests for format_comparison."""

    def test_sections(self, comparison: ReportComparison) -> None:
        """Test the Markdown layout of a changed run."""
        text = format_comparison(comparison)

        assert text.startswith("# Validation Comparison Report\n")
        assert "- **Previous Score:** 95/100" in text
        assert "- **Current Score:** 89/100" in text
        assert "- **Change:** -6" in text
        assert "- **Change:** -1" in text
        assert "## Improved Categories\n\n- Webhook Validation" in text
        assert "## Regressed Categories\n\n- Import Validation" in text
        assert "## New Issues" in text
        assert "## Resolved Issues" in text
        assert "No findings changed" not in text

    def test_unchanged_run(self, tmp_path: Path) -> None:
        """Test a run without changes says so and omits empty sections."""
        report = run_fixture(tmp_path, {}, 0)
        text = format_comparison(compare_reports(report, report))

        assert "- **Change:** +0" in text
        assert "## New Issues" not in text
        assert "## Improved Categories" not in text
        assert text.endswith("No findings changed between the two runs.\n")
