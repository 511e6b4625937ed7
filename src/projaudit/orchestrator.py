"""Validation orchestrator.

Runs the four validator families, isolates their failures from each other,
and aggregates their findings into an immutable ValidationReport.
Supports parallel or sequential execution; both produce identical report
content for the same validator outputs.
"""

from __future__ import annotations

import concurrent.futures
import logging
import os
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from projaudit.aggregation import (
    DI_CATEGORY,
    IMPORT_CATEGORY,
    UI_CATEGORY,
    WEBHOOK_CATEGORY,
    ClassifiedFinding,
    build_summary,
    classify_di_result,
    classify_import_result,
    classify_ui_result,
    classify_webhook_result,
    derive_recommendations,
)
from projaudit.error_handler import ValidationErrorHandler
from projaudit.errors import (
    InvalidProjectPathError,
    OrchestrationError,
    ValidationSystemError,
)
from projaudit.models import (
    ConnectivityResult,
    ErrorKind,
    HiltValidationResult,
    ImportValidationResult,
    ValidationReport,
    ViewModelValidationResult,
    WebhookValidationResult,
)
from projaudit.validators.base import (
    DIValidator,
    ImportValidator,
    UIDataFlowValidator,
    WebhookValidator,
)

logger = logging.getLogger(__name__)

DEFAULT_WEBHOOK_TIMEOUT = 30.0
DEFAULT_MAX_WORKERS = 4

TIMEOUT_MESSAGE = "timeout"


class OrchestratorState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RunCancelledError(ValidationSystemError):
    """Raised by run() when cancel() was called while it was in flight."""


@dataclass(frozen=True)
class _Family:
    """One validator family as the orchestrator sees it.

    Attributes:
        category: Report category name.
        validator_name: Name reported by the validator.
        error_kind: Kind used to classify operational failures.
        call: Invokes the family's primary aggregate method.
        on_failure: Builds an empty family result holding the failure.
        classify: Flattens a family result into classified findings.
        timeout: Seconds allowed for the call, None for no limit.
        on_timeout: Builds the degraded result used when the call times out.
    """

    category: str
    validator_name: str
    error_kind: ErrorKind
    call: Callable[[], Any]
    on_failure: Callable[[Any], Any]
    classify: Callable[[Any], list[ClassifiedFinding]]
    timeout: float | None = None
    on_timeout: Callable[[], Any] | None = None


class ValidationOrchestrator:
    """Runs every validator family and assembles the report.

    States: IDLE (constructed) -> RUNNING -> COMPLETED, or FAILED when an
    aggregation invariant breaks. A validator raising is never fatal: the
    failure is projected through the error handler and folded into that
    family's result.

    Attributes:
        state: Current orchestrator state.
        last_report: Report from the last completed run, if any.
    """

    def __init__(
        self,
        import_validator: ImportValidator,
        webhook_validator: WebhookValidator,
        ui_validator: UIDataFlowValidator,
        di_validator: DIValidator,
        error_handler: ValidationErrorHandler | None = None,
        parallel: bool = True,
        max_workers: int = DEFAULT_MAX_WORKERS,
        webhook_timeout: float = DEFAULT_WEBHOOK_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            import_validator: Import family implementation.
            webhook_validator: Webhook family implementation.
            ui_validator: UI data-flow family implementation.
            di_validator: Dependency-injection family implementation.
            error_handler: Projects operational failures onto results.
            parallel: Whether to run families concurrently.
            max_workers: Worker threads for the non-webhook families.
            webhook_timeout: Seconds the webhook family may take before its
                connectivity check degrades to a timeout result.
            clock: Returns the current time in seconds, for report timestamps.
        """
        if webhook_timeout <= 0:
            raise ValueError("webhook_timeout must be positive")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.import_validator = import_validator
        self.webhook_validator = webhook_validator
        self.ui_validator = ui_validator
        self.di_validator = di_validator
        self.error_handler = error_handler or ValidationErrorHandler()
        self.parallel = parallel
        self.max_workers = max_workers
        self.webhook_timeout = webhook_timeout
        self.clock = clock

        self.state = OrchestratorState.IDLE
        self.last_report: ValidationReport | None = None
        self._cancelled = threading.Event()
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def run(self, project_path: str | os.PathLike[str]) -> ValidationReport:
        """Run all validator families against a project.

        Args:
            project_path: Path of the project to inspect.

        Returns:
            The assembled ValidationReport.

        Raises:
            InvalidProjectPathError: If project_path is malformed.
            OrchestrationError: If aggregation breaks an invariant, or a run
                is already in progress.
            RunCancelledError: If cancel() was called during the run.
        """
        path = normalize_project_path(project_path)

        with self._lock:
            if self.state is OrchestratorState.RUNNING:
                raise OrchestrationError("A validation run is already in progress")
            self.state = OrchestratorState.RUNNING
            self._cancelled.clear()

        logger.info("Starting validation of %s", path)
        try:
            families = self._families(path)
            if self.parallel:
                results = self._run_parallel(families)
            else:
                results = self._run_sequential(families)

            if self._cancelled.is_set():
                raise RunCancelledError("Validation run was cancelled")

            report = self._assemble(path, families, results)
        except RunCancelledError:
            logger.info("Validation of %s cancelled, discarding partial results", path)
            self.state = OrchestratorState.IDLE
            raise
        except Exception:
            logger.exception("Validation of %s failed during aggregation", path)
            self.state = OrchestratorState.FAILED
            raise

        self.last_report = report
        self.state = OrchestratorState.COMPLETED
        logger.info(
            "Validation of %s completed: %d issue(s), score %d",
            path,
            report.summary.total_issues,
            report.summary.overall_score,
        )
        return report

    def cancel(self) -> None:
        """Cancel the in-flight run. Its partial results are discarded."""
        self._cancelled.set()

    def run_category(self, project_path: str | os.PathLike[str], category: str) -> Any:
        """Run a single validator family and return its family result.

        Failures are folded the same way as in run(). The orchestrator state
        is not changed.

        Raises:
            InvalidProjectPathError: If project_path is malformed.
            ValueError: If category is not a known category name.
        """
        path = normalize_project_path(project_path)
        for family in self._families(path):
            if family.category == category:
                return self._run_family(family)
        raise ValueError(f"Unknown validation category: {category!r}")

    # -------------------------------------------------------------------------
    # Family wiring
    # -------------------------------------------------------------------------

    def _families(self, project_path: str) -> list[_Family]:
        return [
            _Family(
                category=IMPORT_CATEGORY,
                validator_name=validator_name(self.import_validator),
                error_kind=ErrorKind.COMPILATION_ERROR,
                call=lambda: self.import_validator.validate_imports(project_path),
                on_failure=lambda r: ImportValidationResult(operational_errors=(r,)),
                classify=classify_import_result,
            ),
            _Family(
                category=WEBHOOK_CATEGORY,
                validator_name=validator_name(self.webhook_validator),
                error_kind=ErrorKind.NETWORK_CONFIGURATION,
                call=self.webhook_validator.validate_make_service,
                on_failure=lambda r: WebhookValidationResult(operational_errors=(r,)),
                classify=classify_webhook_result,
                timeout=self.webhook_timeout,
                on_timeout=lambda: WebhookValidationResult(
                    connectivity=ConnectivityResult(
                        is_connected=False,
                        response_time=None,
                        error_message=TIMEOUT_MESSAGE,
                    )
                ),
            ),
            _Family(
                category=UI_CATEGORY,
                validator_name=validator_name(self.ui_validator),
                error_kind=ErrorKind.COMPILATION_ERROR,
                call=self.ui_validator.validate_view_models,
                on_failure=lambda r: ViewModelValidationResult(operational_errors=(r,)),
                classify=classify_ui_result,
            ),
            _Family(
                category=DI_CATEGORY,
                validator_name=validator_name(self.di_validator),
                error_kind=ErrorKind.DEPENDENCY_INJECTION,
                call=self.di_validator.validate_hilt_modules,
                on_failure=lambda r: HiltValidationResult(operational_errors=(r,)),
                classify=classify_di_result,
            ),
        ]

    def _fold_failure(self, family: _Family, exc: BaseException) -> Any:
        """Convert a validator failure into that family's result."""
        logger.warning(
            "Validator %s failed: %s", family.validator_name, exc, exc_info=exc
        )
        error = self.error_handler.create_validation_error(
            exc, family.error_kind, family.validator_name
        )
        return family.on_failure(self.error_handler.handle_validation_error(error))

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def _run_sequential(self, families: list[_Family]) -> dict[str, Any]:
        results: dict[str, Any] = {}

        for family in families:
            if self._cancelled.is_set():
                break
            results[family.category] = self._run_family(family)
            logger.debug("Validator family %s finished", family.category)

        return results

    def _run_family(self, family: _Family) -> Any:
        if family.timeout is not None:
            return self._run_with_timeout(family)
        try:
            return family.call()
        except Exception as e:
            return self._fold_failure(family, e)

    def _run_parallel(self, families: list[_Family]) -> dict[str, Any]:
        results: dict[str, Any] = {}
        timed = [f for f in families if f.timeout is not None]
        untimed = [f for f in families if f.timeout is None]

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=min(self.max_workers, max(len(untimed), 1))
        ) as executor:
            future_to_family: dict[concurrent.futures.Future[Any], _Family] = {
                executor.submit(family.call): family for family in untimed
            }

            # Timed families run on their own executor while the pool works.
            for family in timed:
                results[family.category] = self._run_with_timeout(family)

            for future in concurrent.futures.as_completed(future_to_family):
                family = future_to_family[future]
                try:
                    results[family.category] = future.result()
                except Exception as e:
                    results[family.category] = self._fold_failure(family, e)
                logger.debug("Validator family %s finished", family.category)

        return results

    def _run_with_timeout(self, family: _Family) -> Any:
        """Run a family call, degrading to its timeout result if it stalls.

        The call runs on a daemon thread. A stalled call is abandoned on that
        thread and its eventual result ignored.
        """
        future: concurrent.futures.Future[Any] = concurrent.futures.Future()

        def work() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(family.call())
            except BaseException as e:
                future.set_exception(e)

        worker = threading.Thread(
            target=work, name=f"projaudit-{family.validator_name}", daemon=True
        )
        worker.start()
        done, _ = concurrent.futures.wait([future], timeout=family.timeout)
        if not done:
            logger.warning(
                "Validator %s timed out after %.1fs",
                family.validator_name,
                family.timeout,
            )
            if family.on_timeout is None:
                return self._fold_failure(
                    family, TimeoutError(f"no result within {family.timeout}s")
                )
            return family.on_timeout()

        try:
            return future.result()
        except Exception as e:
            return self._fold_failure(family, e)

    # -------------------------------------------------------------------------
    # Aggregation
    # -------------------------------------------------------------------------

    def _assemble(
        self, project_path: str, families: list[_Family], results: dict[str, Any]
    ) -> ValidationReport:
        findings_by_category = {
            family.category: family.classify(results[family.category])
            for family in families
        }
        summary = build_summary(findings_by_category)
        recommendations = derive_recommendations(findings_by_category, summary)

        return ValidationReport(
            timestamp=int(self.clock() * 1000),
            project_path=project_path,
            summary=summary,
            import_validation=results[IMPORT_CATEGORY],
            webhook_validation=results[WEBHOOK_CATEGORY],
            ui_validation=results[UI_CATEGORY],
            di_validation=results[DI_CATEGORY],
            recommendations=recommendations,
        )


def normalize_project_path(project_path: object) -> str:
    """Check a project path is well formed and return it as a string.

    The path does not have to exist; validators decide what to do with it.

    Raises:
        InvalidProjectPathError: If the path is not a string or path-like,
            is blank, or contains a NUL byte.
    """
    if isinstance(project_path, os.PathLike):
        text = os.fspath(project_path)
    elif isinstance(project_path, str):
        text = project_path
    else:
        raise InvalidProjectPathError(project_path, "expected a string or path")

    if not isinstance(text, str):
        raise InvalidProjectPathError(project_path, "expected a text path")
    if not text.strip():
        raise InvalidProjectPathError(project_path, "path is empty")
    if "\x00" in text:
        raise InvalidProjectPathError(project_path, "path contains a NUL byte")
    return text


def validator_name(validator: Any) -> str:
    """Return a validator's name, falling back to its class name."""
    try:
        return str(validator.get_validator_name())
    except Exception:
        logger.warning("Could not read name of %s", type(validator).__name__, exc_info=True)
        return type(validator).__name__
