"""Validation system facade.

The single entry point a host application uses: run every validator
family, run one family, render reports, and probe the system status.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path
from typing import Any

from projaudit import __version__
from projaudit.aggregation import (
    DI_CATEGORY,
    IMPORT_CATEGORY,
    UI_CATEGORY,
    WEBHOOK_CATEGORY,
    ClassifiedFinding,
    classify_di_result,
    classify_import_result,
    classify_ui_result,
    classify_webhook_result,
)
from projaudit.config import AuditConfig
from projaudit.error_handler import ValidationErrorHandler
from projaudit.models import SuccessResult, SystemStatus, ValidationReport, ValidationResult
from projaudit.orchestrator import ValidationOrchestrator, validator_name
from projaudit.reporting import (
    ReportComparison,
    ReportFormat,
    ReportFormatter,
    ReportStore,
    compare_reports,
    load_report,
)
from projaudit.validators.base import (
    DIValidator,
    ImportValidator,
    UIDataFlowValidator,
    WebhookValidator,
)
from projaudit.validators.fixture import empty_validators, load_fixture_validators

logger = logging.getLogger(__name__)


class ValidationCategory(str, Enum):
    IMPORTS = "imports"
    WEBHOOK = "webhook"
    UI = "ui"
    DI = "di"

    @property
    def category_name(self) -> str:
        """Report category name for this family."""
        return _CATEGORY_NAMES[self]


_CATEGORY_NAMES = {
    ValidationCategory.IMPORTS: IMPORT_CATEGORY,
    ValidationCategory.WEBHOOK: WEBHOOK_CATEGORY,
    ValidationCategory.UI: UI_CATEGORY,
    ValidationCategory.DI: DI_CATEGORY,
}

_CLASSIFIERS: dict[ValidationCategory, Callable[[Any], list[ClassifiedFinding]]] = {
    ValidationCategory.IMPORTS: classify_import_result,
    ValidationCategory.WEBHOOK: classify_webhook_result,
    ValidationCategory.UI: classify_ui_result,
    ValidationCategory.DI: classify_di_result,
}


class ValidationSystem:
    """Facade over the orchestrator, formatter and optional report store.

    Attributes:
        orchestrator: Runs the validator families.
        formatter: Renders reports.
        report_store: Saves rendered reports, if configured.
        is_initialized: True once the system is wired and usable.
    """

    def __init__(
        self,
        orchestrator: ValidationOrchestrator,
        formatter: ReportFormatter | None = None,
        report_store: ReportStore | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.formatter = formatter or ReportFormatter()
        self.report_store = report_store
        self.is_initialized = True

    def execute_comprehensive_validation(
        self, project_path: str | os.PathLike[str]
    ) -> ValidationReport:
        """Run every validator family and return the aggregated report.

        Validator failures are folded into the report. Only a malformed
        project path, a cancelled run, or a broken aggregation invariant
        raise.
        """
        return self.orchestrator.run(project_path)

    def execute_validation_by_category(
        self,
        project_path: str | os.PathLike[str],
        category: ValidationCategory | str,
    ) -> ValidationResult:
        """Run one validator family.

        Args:
            project_path: Path of the project to inspect.
            category: Family to run, as a ValidationCategory or its value.

        Returns:
            A one-line SuccessResult with the finding count, or the error
            handler's projection of the family's operational failure.

        Raises:
            ValueError: If category is not a known family.
        """
        category = ValidationCategory(category)
        result = self.orchestrator.run_category(project_path, category.category_name)
        if result.operational_errors:
            return result.operational_errors[0]

        findings = _CLASSIFIERS[category](result)
        return SuccessResult(
            f"{category.category_name}: completed with {len(findings)} finding(s)"
        )

    def format_report(self, report: ValidationReport, fmt: ReportFormat | str) -> str:
        """Render a report; fmt is a ReportFormat or its value."""
        return self.formatter.format(report, ReportFormat(fmt))

    def save_report(
        self, report: ValidationReport, formats: Iterable[ReportFormat | str]
    ) -> list[Path]:
        """Write a report in each format to the configured report store.

        Raises:
            RuntimeError: If no report store is configured.
        """
        if self.report_store is None:
            raise RuntimeError("No report directory configured")
        return self.report_store.save(report, [ReportFormat(f) for f in formats])

    def load_report(self, path: Path) -> ValidationReport:
        """Read a saved JSON report, from the report store if one is configured.

        Raises:
            ReportLoadError: If the file does not hold a report.
        """
        if self.report_store is not None:
            return self.report_store.load(path)
        return load_report(path)

    def compare_reports(
        self, previous: ValidationReport, current: ValidationReport
    ) -> ReportComparison:
        """Compare a previous run with the current one."""
        return compare_reports(previous, current)

    def get_system_status(self) -> SystemStatus:
        o = self.orchestrator
        validators = (o.import_validator, o.webhook_validator, o.ui_validator, o.di_validator)
        return SystemStatus(
            is_initialized=self.is_initialized,
            version=__version__,
            available_validators=tuple(validator_name(v) for v in validators),
        )

    def cancel(self) -> None:
        """Cancel the in-flight comprehensive validation, if any."""
        self.orchestrator.cancel()


def create_validation_system(
    import_validator: ImportValidator | None = None,
    webhook_validator: WebhookValidator | None = None,
    ui_validator: UIDataFlowValidator | None = None,
    di_validator: DIValidator | None = None,
    config: AuditConfig | None = None,
    base_path: Path | None = None,
) -> ValidationSystem:
    """Wire a ValidationSystem from validators and configuration.

    Validators not supplied come from the configured fixture file, or report
    no findings when no fixture is configured.

    Args:
        import_validator: Import family implementation.
        webhook_validator: Webhook family implementation.
        ui_validator: UI data-flow family implementation.
        di_validator: Dependency-injection family implementation.
        config: Run configuration. Defaults to AuditConfig().
        base_path: Base for relative fixture and report paths. Defaults to cwd.

    Returns:
        A ready ValidationSystem.

    Raises:
        FixtureError: If the configured fixture file cannot be loaded.
    """
    config = config or AuditConfig()

    fixtures_path = config.get_fixtures_path(base_path)
    if fixtures_path is not None:
        defaults = load_fixture_validators(fixtures_path)
    else:
        defaults = empty_validators()

    error_handler = ValidationErrorHandler()
    orchestrator = ValidationOrchestrator(
        import_validator=import_validator or defaults.import_validator,
        webhook_validator=webhook_validator or defaults.webhook_validator,
        ui_validator=ui_validator or defaults.ui_validator,
        di_validator=di_validator or defaults.di_validator,
        error_handler=error_handler,
        parallel=config.parallel,
        max_workers=config.max_workers,
        webhook_timeout=config.webhook_timeout,
    )

    formatter = ReportFormatter(include_info=config.include_info)
    report_path = config.get_report_path(base_path)
    store = ReportStore(report_path, formatter) if report_path is not None else None

    logger.debug(
        "Validation system ready (parallel=%s, fixtures=%s)", config.parallel, fixtures_path
    )
    return ValidationSystem(orchestrator, formatter=formatter, report_store=store)
