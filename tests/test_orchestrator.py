"""Tests for projaudit.orchestrator module."""

from __future__ import annotations

import dataclasses
import subprocess
import sys
import textwrap
import threading
from pathlib import Path
from typing import Any

import pytest

from projaudit.aggregation import (
    DI_CATEGORY,
    IMPORT_CATEGORY,
    UI_CATEGORY,
    WEBHOOK_CATEGORY,
)
from projaudit.error_handler import SUGGESTED_FIXES
from projaudit.errors import InvalidProjectPathError, OrchestrationError
from projaudit.models import (
    ArchitecturalViolation,
    BindingIssue,
    ConnectivityResult,
    ErrorKind,
    ErrorResult,
    HiltValidationResult,
    ImportValidationResult,
    Priority,
    StateFlowIssue,
    UnusedImport,
    ViewModelValidationResult,
    ViolationType,
    WebhookValidationResult,
)
from projaudit.orchestrator import (
    OrchestratorState,
    RunCancelledError,
    ValidationOrchestrator,
    normalize_project_path,
)
from projaudit.validators.fixture import (
    FixtureDIValidator,
    FixtureImportValidator,
    FixtureUIDataFlowValidator,
    FixtureWebhookValidator,
)

FIXED_CLOCK = 1_700_000_000.0

HUNG_WEBHOOK_SCRIPT = textwrap.dedent(
    """
    import time

    from projaudit.models import WebhookValidationResult
    from projaudit.orchestrator import ValidationOrchestrator
    from projaudit.validators.fixture import FixtureWebhookValidator, empty_validators


    class HungWebhookValidator(FixtureWebhookValidator):
        def validate_make_service(self):
            time.sleep(120)
            return WebhookValidationResult()


    validators = empty_validators()._replace(webhook_validator=HungWebhookValidator())
    report = ValidationOrchestrator(*validators, webhook_timeout=0.2).run(".")
    print(report.webhook_validation.connectivity.error_message)
    """
)


def make_orchestrator(**overrides: Any) -> ValidationOrchestrator:
    """Build an orchestrator over clean fixture validators, with overrides."""
    kwargs: dict[str, Any] = {
        "import_validator": FixtureImportValidator(),
        "webhook_validator": FixtureWebhookValidator(),
        "ui_validator": FixtureUIDataFlowValidator(),
        "di_validator": FixtureDIValidator(),
        "clock": lambda: FIXED_CLOCK,
    }
    kwargs.update(overrides)
    return ValidationOrchestrator(**kwargs)


def one_unused_one_violation() -> FixtureImportValidator:
    return FixtureImportValidator(
        ImportValidationResult(
            unused_imports=(UnusedImport("app/ui/home.py", "import os", 3),),
            architectural_violations=(
                ArchitecturalViolation(
                    "app/domain/user.py",
                    ViolationType.LAYER_DEPENDENCY_VIOLATION,
                    "Domain layer imports data layer",
                    "Depend on a repository interface",
                ),
            ),
        )
    )


class RaisingWebhookValidator(FixtureWebhookValidator):
    def validate_make_service(self) -> WebhookValidationResult:
        raise RuntimeError("connection pool exhausted")


class RaisingImportValidator(FixtureImportValidator):
    def validate_imports(self, project_path: str) -> ImportValidationResult:
        raise ValueError("cannot parse build file")


class StallingWebhookValidator(FixtureWebhookValidator):
    """Blocks until released, standing in for a hung network call."""

    def __init__(self) -> None:
        super().__init__()
        self.release = threading.Event()
        self.thread: threading.Thread | None = None

    def validate_make_service(self) -> WebhookValidationResult:
        self.thread = threading.current_thread()
        self.release.wait(timeout=10)
        return WebhookValidationResult()


class CancellingDIValidator(FixtureDIValidator):
    """Cancels the run it is part of while it executes."""

    orchestrator: ValidationOrchestrator | None = None

    def validate_hilt_modules(self) -> HiltValidationResult:
        assert self.orchestrator is not None
        self.orchestrator.cancel()
        return HiltValidationResult()


# -----------------------------------------------------------------------------
# End-to-end scenarios
# -----------------------------------------------------------------------------


class TestRunScenarios:
    """End-to-end runs over fixture validators."""

    @pytest.mark.parametrize("parallel", [True, False])
    def test_all_clean(self, tmp_path: Path, parallel: bool) -> None:
        """Test four clean validators give a perfect report."""
        report = make_orchestrator(parallel=parallel).run(tmp_path)

        assert report.summary.overall_score == 100
        assert report.summary.total_issues == 0
        assert report.recommendations == ()
        assert report.project_path == str(tmp_path)
        assert report.timestamp == int(FIXED_CLOCK * 1000)

    def test_single_category_penalty(self, tmp_path: Path) -> None:
        """Test one info and one critical import finding score 89."""
        report = make_orchestrator(import_validator=one_unused_one_violation()).run(tmp_path)

        imports = report.summary.category(IMPORT_CATEGORY)
        assert imports.critical_issues == 1
        assert imports.info_issues == 1
        assert imports.score == 89
        assert report.summary.overall_score == 89
        for name in (WEBHOOK_CATEGORY, UI_CATEGORY, DI_CATEGORY):
            assert report.summary.category(name).score == 100
        # 89 is above the recommendation threshold
        assert report.recommendations == ()

    def test_family_results_are_carried_through(self, tmp_path: Path) -> None:
        """Test each family's result lands in its report slot."""
        ui_result = ViewModelValidationResult(
            state_flow_issues=(StateFlowIssue("HomeVM", "state", "mutable", "expose read-only"),)
        )
        report = make_orchestrator(
            ui_validator=FixtureUIDataFlowValidator(ui_result)
        ).run(tmp_path)
        assert report.ui_validation == ui_result
        assert report.import_validation == ImportValidationResult()

    def test_parallel_and_sequential_reports_match(self, tmp_path: Path) -> None:
        """Test execution mode does not change report content."""
        di = FixtureDIValidator(
            HiltValidationResult(binding_issues=(BindingIssue("Repo", None, "not bound"),) * 4)
        )
        parallel = make_orchestrator(
            import_validator=one_unused_one_violation(), di_validator=di, parallel=True
        ).run(tmp_path)
        sequential = make_orchestrator(
            import_validator=one_unused_one_violation(), di_validator=di, parallel=False
        ).run(tmp_path)
        assert parallel == sequential

    def test_recommendation_order_is_by_category_name(self, tmp_path: Path) -> None:
        """Test equal-priority recommendations are ordered by category name."""
        violations = tuple(
            ArchitecturalViolation(f"f{i}.py", ViolationType.IMPROPER_IMPORT, "bad", "fix")
            for i in range(4)
        )
        di = FixtureDIValidator(
            HiltValidationResult(binding_issues=(BindingIssue("Repo", None, "not bound"),) * 4)
        )
        report = make_orchestrator(
            import_validator=FixtureImportValidator(
                ImportValidationResult(architectural_violations=violations)
            ),
            di_validator=di,
        ).run(tmp_path)

        assert [(r.category, r.priority) for r in report.recommendations] == [
            (DI_CATEGORY, Priority.HIGH),
            (IMPORT_CATEGORY, Priority.HIGH),
        ]


# -----------------------------------------------------------------------------
# Failure isolation
# -----------------------------------------------------------------------------


class TestBulkhead:
    """Tests that one failing family cannot affect the others."""

    @pytest.mark.parametrize("parallel", [True, False])
    def test_webhook_failure_is_folded(self, tmp_path: Path, parallel: bool) -> None:
        """Test a raising webhook validator becomes one critical finding."""
        report = make_orchestrator(
            import_validator=one_unused_one_violation(),
            webhook_validator=RaisingWebhookValidator(),
            parallel=parallel,
        ).run(tmp_path)

        errors = report.webhook_validation.operational_errors
        assert len(errors) == 1
        assert isinstance(errors[0], ErrorResult)
        assert errors[0].message.startswith(
            "Network Configuration Issue: Error in FixtureWebhookValidator:"
        )
        assert "connection pool exhausted" in errors[0].message
        assert "RuntimeError" in errors[0].details

        assert report.summary.category(WEBHOOK_CATEGORY).critical_issues == 1
        # The other families still contribute
        assert len(report.import_validation.unused_imports) == 1
        assert report.summary.category(IMPORT_CATEGORY).total_issues == 2
        assert report.ui_validation == ViewModelValidationResult()
        assert report.di_validation == HiltValidationResult()

    def test_import_failure_carries_suggested_fix(self, tmp_path: Path) -> None:
        """Test a folded import failure carries the canned fix."""
        report = make_orchestrator(import_validator=RaisingImportValidator()).run(tmp_path)

        error = report.import_validation.operational_errors[0]
        assert isinstance(error, ErrorResult)
        assert error.message == "Error in FixtureImportValidator: cannot parse build file"
        assert error.fix == SUGGESTED_FIXES[ErrorKind.COMPILATION_ERROR]
        assert report.summary.overall_score == 90


class TestWebhookTimeout:
    """Tests for the bounded webhook family."""

    @pytest.mark.parametrize("parallel", [True, False])
    def test_stalled_webhook_degrades_to_timeout(self, tmp_path: Path, parallel: bool) -> None:
        """Test a stalled webhook call yields a timeout connectivity result."""
        webhook = StallingWebhookValidator()
        try:
            report = make_orchestrator(
                webhook_validator=webhook,
                import_validator=one_unused_one_violation(),
                webhook_timeout=0.2,
                parallel=parallel,
            ).run(tmp_path)
        finally:
            webhook.release.set()

        assert report.webhook_validation.connectivity == ConnectivityResult(
            is_connected=False, response_time=None, error_message="timeout"
        )
        assert report.summary.category(WEBHOOK_CATEGORY).critical_issues == 1
        assert report.summary.category(IMPORT_CATEGORY).total_issues == 2

    def test_stalled_call_runs_on_daemon_thread(self, tmp_path: Path) -> None:
        """Test an abandoned webhook call cannot keep the process alive."""
        webhook = StallingWebhookValidator()
        try:
            make_orchestrator(webhook_validator=webhook, webhook_timeout=0.2).run(tmp_path)
            assert webhook.thread is not None
            assert webhook.thread.daemon
            assert webhook.thread is not threading.main_thread()
        finally:
            webhook.release.set()

    def test_process_exits_after_timeout(self, tmp_path: Path) -> None:
        """Test a process whose webhook call hangs exits once the run returns."""
        result = subprocess.run(
            [sys.executable, "-c", HUNG_WEBHOOK_SCRIPT],
            cwd=tmp_path,
            capture_output=True,
            text=True,
            timeout=30,
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == "timeout"

    def test_timeout_must_be_positive(self) -> None:
        """Test a non-positive webhook timeout is rejected."""
        with pytest.raises(ValueError, match="webhook_timeout"):
            make_orchestrator(webhook_timeout=0)

    def test_workers_must_be_positive(self) -> None:
        """Test max_workers below one is rejected."""
        with pytest.raises(ValueError, match="max_workers"):
            make_orchestrator(max_workers=0)


# -----------------------------------------------------------------------------
# State machine
# -----------------------------------------------------------------------------


class TestStateMachine:
    """Tests for orchestrator states."""

    def test_idle_then_completed(self, tmp_path: Path) -> None:
        """Test a successful run ends COMPLETED and keeps the report."""
        orchestrator = make_orchestrator()
        assert orchestrator.state is OrchestratorState.IDLE
        assert orchestrator.last_report is None

        report = orchestrator.run(tmp_path)
        assert orchestrator.state is OrchestratorState.COMPLETED
        assert orchestrator.last_report is report

    @pytest.mark.parametrize("bad_path", ["", "   ", "a\x00b", 42, None])
    def test_invalid_path_raises_before_running(self, bad_path: Any) -> None:
        """Test malformed paths raise and leave the orchestrator IDLE."""
        orchestrator = make_orchestrator()
        with pytest.raises(InvalidProjectPathError):
            orchestrator.run(bad_path)
        assert orchestrator.state is OrchestratorState.IDLE

    def test_missing_directory_is_not_malformed(self) -> None:
        """Test a well-formed path that does not exist is accepted."""
        assert normalize_project_path(Path("/no/such/project")) == "/no/such/project"

    @pytest.mark.parametrize("parallel", [True, False])
    def test_cancel_discards_results(self, tmp_path: Path, parallel: bool) -> None:
        """Test cancelling mid-run raises and returns to IDLE with no report."""
        di = CancellingDIValidator()
        orchestrator = make_orchestrator(di_validator=di, parallel=parallel)
        di.orchestrator = orchestrator

        with pytest.raises(RunCancelledError):
            orchestrator.run(tmp_path)
        assert orchestrator.state is OrchestratorState.IDLE
        assert orchestrator.last_report is None

    def test_run_after_cancel_succeeds(self, tmp_path: Path) -> None:
        """Test the cancel flag is cleared by the next run."""
        orchestrator = make_orchestrator()
        orchestrator.cancel()
        report = orchestrator.run(tmp_path)
        assert report.summary.overall_score == 100

    def test_invariant_failure_sets_failed(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test an aggregation invariant violation is surfaced as FAILED."""

        def broken_summary(findings: Any) -> Any:
            raise OrchestrationError("Negative issue count in overall")

        monkeypatch.setattr("projaudit.orchestrator.build_summary", broken_summary)
        orchestrator = make_orchestrator()

        with pytest.raises(OrchestrationError):
            orchestrator.run(tmp_path)
        assert orchestrator.state is OrchestratorState.FAILED


class TestRunCategory:
    """Tests for single-family runs."""

    def test_runs_one_family(self, tmp_path: Path) -> None:
        """Test the named family's result is returned."""
        result = make_orchestrator(import_validator=one_unused_one_violation()).run_category(
            tmp_path, IMPORT_CATEGORY
        )
        assert len(result.architectural_violations) == 1

    def test_failure_is_folded(self, tmp_path: Path) -> None:
        """Test a raising family is folded, not raised."""
        result = make_orchestrator(webhook_validator=RaisingWebhookValidator()).run_category(
            tmp_path, WEBHOOK_CATEGORY
        )
        assert len(result.operational_errors) == 1

    def test_unknown_category(self, tmp_path: Path) -> None:
        """Test an unknown category name is rejected."""
        with pytest.raises(ValueError, match="Unknown validation category"):
            make_orchestrator().run_category(tmp_path, "Styling")


class TestReportValue:
    """Tests that a completed report is an immutable value."""

    def test_report_is_hashable(self, tmp_path: Path) -> None:
        """Test equal reports hash equal and can key a dict."""
        report = make_orchestrator(import_validator=one_unused_one_violation()).run(tmp_path)
        copy = dataclasses.replace(report)
        assert hash(report) == hash(copy)
        assert {report: "seen"}[copy] == "seen"

    def test_summary_cannot_be_changed(self, tmp_path: Path) -> None:
        """Test neither the summary nor its categories can be modified."""
        report = make_orchestrator().run(tmp_path)
        categories = report.summary.categories
        assert isinstance(categories, tuple)
        with pytest.raises(dataclasses.FrozenInstanceError):
            report.summary.categories = ()  # type: ignore[misc]
        with pytest.raises(dataclasses.FrozenInstanceError):
            categories[0].score = 0  # type: ignore[misc]
        assert report.summary.category(IMPORT_CATEGORY).score == 100

    def test_unknown_category_lookup(self, tmp_path: Path) -> None:
        """Test looking up a missing category raises KeyError."""
        with pytest.raises(KeyError):
            make_orchestrator().run(tmp_path).summary.category("Styling")
