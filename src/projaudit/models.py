"""Shared vocabulary for the validation framework.

Defines the severity/priority taxonomy, the Success/Warning/Error result
sum type, the category-specific finding records produced by each validator
family, and the immutable report model assembled by the orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Union


class Severity(str, Enum):
    """Severity of a finding. Drives score penalties and report grouping."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class Priority(str, Enum):
    """Priority of a recommendation, independent of severity."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank, lowest first (HIGH sorts before LOW)."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class ErrorKind(str, Enum):
    """Closed taxonomy of validator-level errors."""

    COMPILATION_ERROR = "compilation_error"
    RUNTIME_RISK = "runtime_risk"
    CODE_QUALITY = "code_quality"
    ARCHITECTURAL_VIOLATION = "architectural_violation"
    NETWORK_CONFIGURATION = "network_configuration"
    DATA_BINDING = "data_binding"
    DEPENDENCY_INJECTION = "dependency_injection"


class ViolationType(str, Enum):
    """Kinds of architectural violation reported by import validators."""

    LAYER_DEPENDENCY_VIOLATION = "layer_dependency_violation"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    IMPROPER_IMPORT = "improper_import"
    SCOPE_VIOLATION = "scope_violation"


# -----------------------------------------------------------------------------
# ValidationResult sum type
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SuccessResult:
    """Non-blocking outcome."""

    message: str
    kind: Literal["success"] = field(default="success", init=False)


@dataclass(frozen=True)
class WarningResult:
    """Outcome that should be reviewed but does not block."""

    message: str
    details: str
    kind: Literal["warning"] = field(default="warning", init=False)


@dataclass(frozen=True)
class ErrorResult:
    """Blocking outcome, optionally carrying a suggested fix."""

    message: str
    details: str
    fix: str | None = None
    kind: Literal["error"] = field(default="error", init=False)


ValidationResult = Union[SuccessResult, WarningResult, ErrorResult]


@dataclass(frozen=True)
class ValidationError:
    """A raw validator-level error before it is projected to a result.

    Attributes:
        type: Error kind from the closed ErrorKind taxonomy.
        message: Human-readable description.
        details: Extended diagnostic text (e.g. a formatted traceback).
        suggested_fix: Remediation hint, if any.
    """

    type: ErrorKind
    message: str
    details: str
    suggested_fix: str | None = None


# -----------------------------------------------------------------------------
# Import family
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class UnusedImport:
    file_path: str
    import_statement: str
    line_number: int


@dataclass(frozen=True)
class MissingImport:
    file_path: str
    missing_class: str
    suggested_import: str | None
    line_number: int


@dataclass(frozen=True)
class ArchitecturalViolation:
    file_path: str
    violation_type: ViolationType
    description: str
    suggestion: str


@dataclass(frozen=True)
class CircularDependency:
    file_paths: tuple[str, ...]
    description: str


@dataclass(frozen=True)
class ImportValidationResult:
    """Aggregate result of the import validator family."""

    unused_imports: tuple[UnusedImport, ...] = ()
    missing_imports: tuple[MissingImport, ...] = ()
    architectural_violations: tuple[ArchitecturalViolation, ...] = ()
    circular_dependencies: tuple[CircularDependency, ...] = ()
    operational_errors: tuple[ValidationResult, ...] = ()


# -----------------------------------------------------------------------------
# Webhook family
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class NetworkConfigIssue:
    component: str
    issue: str
    severity: Severity
    fix: str | None = None


@dataclass(frozen=True)
class ApiEndpointIssue:
    endpoint: str
    method: str
    issue: str
    expected_format: str | None = None


@dataclass(frozen=True)
class NetworkConfigResult:
    issues: tuple[NetworkConfigIssue, ...] = ()
    is_valid: bool = True


@dataclass(frozen=True)
class ApiEndpointResult:
    issues: tuple[ApiEndpointIssue, ...] = ()
    valid_endpoints: int = 0
    total_endpoints: int = 0


@dataclass(frozen=True)
class ConnectivityResult:
    """Outcome of a webhook connectivity probe.

    Attributes:
        is_connected: Whether the endpoint answered.
        response_time: Elapsed time in milliseconds, None if no answer.
        error_message: Failure description ("timeout" when the probe ran out
            of time).
    """

    is_connected: bool
    response_time: int | None = None
    error_message: str | None = None

    @property
    def is_successful(self) -> bool:
        return self.is_connected


@dataclass(frozen=True)
class SerializationResult:
    issues: tuple[str, ...] = ()
    is_valid: bool = True


@dataclass(frozen=True)
class WebhookValidationResult:
    """Aggregate result of the webhook validator family."""

    network_config: NetworkConfigResult = field(default_factory=NetworkConfigResult)
    api_endpoints: ApiEndpointResult = field(default_factory=ApiEndpointResult)
    connectivity: ConnectivityResult = field(
        default_factory=lambda: ConnectivityResult(is_connected=True)
    )
    json_serialization: SerializationResult = field(default_factory=SerializationResult)
    operational_errors: tuple[ValidationResult, ...] = ()


# -----------------------------------------------------------------------------
# UI data-flow family
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class StateFlowIssue:
    view_model_class: str
    state_property: str
    issue: str
    recommendation: str


@dataclass(frozen=True)
class DataBindingIssue:
    component_file: str
    binding_property: str
    issue: str
    fix: str | None = None


@dataclass(frozen=True)
class DataBindingResult:
    issues: tuple[DataBindingIssue, ...] = ()
    is_valid: bool = True


@dataclass(frozen=True)
class StateManagementResult:
    issues: tuple[StateFlowIssue, ...] = ()
    is_valid: bool = True


@dataclass(frozen=True)
class UIComponentResult:
    issues: tuple[str, ...] = ()
    valid_count: int = 0
    total_count: int = 0


@dataclass(frozen=True)
class ViewModelValidationResult:
    """Aggregate result of the UI data-flow validator family."""

    state_flow_issues: tuple[StateFlowIssue, ...] = ()
    data_binding_issues: tuple[DataBindingIssue, ...] = ()
    lifecycle_issues: tuple[str, ...] = ()
    operational_errors: tuple[ValidationResult, ...] = ()


# -----------------------------------------------------------------------------
# Dependency-injection family
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ModuleIssue:
    module_name: str
    issue: str
    severity: Severity
    fix: str | None = None


@dataclass(frozen=True)
class BindingIssue:
    interface_name: str
    implementation_name: str | None
    issue: str
    fix: str | None = None


@dataclass(frozen=True)
class ScopeIssue:
    component_name: str
    scope_issue: str
    recommendation: str


@dataclass(frozen=True)
class DependencyGraphResult:
    circular_deps: tuple[str, ...] = ()
    missing_deps: tuple[str, ...] = ()
    is_valid: bool = True


@dataclass(frozen=True)
class ScopeValidationResult:
    issues: tuple[ScopeIssue, ...] = ()
    is_valid: bool = True


@dataclass(frozen=True)
class HiltValidationResult:
    """Aggregate result of the dependency-injection validator family."""

    module_issues: tuple[ModuleIssue, ...] = ()
    binding_issues: tuple[BindingIssue, ...] = ()
    scope_issues: tuple[ScopeIssue, ...] = ()
    operational_errors: tuple[ValidationResult, ...] = ()


# -----------------------------------------------------------------------------
# Report model
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class CategorySummary:
    """Issue counts and score for one validator family.

    Invariant: total_issues == critical_issues + warning_issues + info_issues.
    """

    category_name: str
    total_issues: int
    critical_issues: int
    warning_issues: int
    info_issues: int
    score: int


@dataclass(frozen=True)
class ValidationSummary:
    """Report-wide issue counts, overall score and per-category summaries.

    Categories are kept in report order.
    """

    total_issues: int
    critical_issues: int
    warning_issues: int
    info_issues: int
    overall_score: int
    categories: tuple[CategorySummary, ...] = ()

    def category(self, name: str) -> CategorySummary:
        """Return the summary for a category name.

        Raises:
            KeyError: If the report has no such category.
        """
        for category in self.categories:
            if category.category_name == name:
                return category
        raise KeyError(name)


@dataclass(frozen=True)
class Recommendation:
    """Actionable recommendation derived from category findings."""

    category: str
    priority: Priority
    title: str
    description: str
    action_items: tuple[str, ...] = ()
    affected_files: tuple[str, ...] = ()
    estimated_effort: str | None = None


@dataclass(frozen=True)
class ValidationReport:
    """Immutable snapshot of one orchestration run.

    Attributes:
        timestamp: Run time in epoch milliseconds.
        project_path: Path of the inspected project.
        summary: Aggregated counts and scores.
        import_validation: Import family result.
        webhook_validation: Webhook family result.
        ui_validation: UI data-flow family result.
        di_validation: Dependency-injection family result.
        recommendations: Derived recommendations, ordered by priority then
            category name.
    """

    timestamp: int
    project_path: str
    summary: ValidationSummary
    import_validation: ImportValidationResult
    webhook_validation: WebhookValidationResult
    ui_validation: ViewModelValidationResult
    di_validation: HiltValidationResult
    recommendations: tuple[Recommendation, ...] = ()


@dataclass(frozen=True)
class SystemStatus:
    is_initialized: bool
    version: str
    available_validators: tuple[str, ...]
