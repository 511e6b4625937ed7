"""Severity classification, scoring and recommendation derivation.

Every validator family result is flattened into a list of
ClassifiedFinding records. Counts by severity feed the score:

    score = max(0, 100 - critical * 10 - warning * 3 - info * 1)

applied per category and to the report-wide totals. Categories scoring
below RECOMMENDATION_THRESHOLD get one recommendation per distinct finding
type.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from projaudit.errors import OrchestrationError
from projaudit.models import (
    CategorySummary,
    HiltValidationResult,
    ImportValidationResult,
    Priority,
    Recommendation,
    Severity,
    ValidationReport,
    ValidationResult,
    ValidationSummary,
    ViewModelValidationResult,
    WebhookValidationResult,
)

CRITICAL_WEIGHT = 10
WARNING_WEIGHT = 3
INFO_WEIGHT = 1

RECOMMENDATION_THRESHOLD = 70

IMPORT_CATEGORY = "Import Validation"
WEBHOOK_CATEGORY = "Webhook Validation"
UI_CATEGORY = "UI Data Flow"
DI_CATEGORY = "Dependency Injection"

CATEGORIES = (IMPORT_CATEGORY, WEBHOOK_CATEGORY, UI_CATEGORY, DI_CATEGORY)

OPERATIONAL_ERROR = "Operational Error"


@dataclass(frozen=True)
class ClassifiedFinding:
    """A finding reduced to what aggregation needs.

    Attributes:
        category: Report category the finding belongs to.
        finding_type: Kind of finding (e.g. "Unused Import").
        severity: Severity assigned by the classification policy.
        description: One-line description for reports.
        files: Files the finding touches, if known.
    """

    category: str
    finding_type: str
    severity: Severity
    description: str
    files: tuple[str, ...] = ()


@dataclass(frozen=True)
class _RecommendationTemplate:
    title: str
    action_items: tuple[str, ...]
    estimated_effort: str


_TEMPLATES: dict[str, _RecommendationTemplate] = {
    "Unused Import": _RecommendationTemplate(
        "Remove Unused Imports",
        ("Remove unused import statements", "Enforce import cleanup in CI"),
        "15 minutes",
    ),
    "Missing Import": _RecommendationTemplate(
        "Fix Missing Imports",
        ("Add the missing import statements", "Check the classes exist in dependencies"),
        "30 minutes",
    ),
    "Architectural Violation": _RecommendationTemplate(
        "Fix Architectural Violations",
        ("Review dependency directions between layers", "Invert cross-layer dependencies"),
        "2-4 hours",
    ),
    "Circular Dependency": _RecommendationTemplate(
        "Break Circular Dependencies",
        ("Extract the shared abstraction of each cycle into a lower layer",),
        "2-4 hours",
    ),
    "Network Configuration Issue": _RecommendationTemplate(
        "Fix Network Configuration",
        ("Review HTTP client, timeout and interceptor settings",),
        "1-2 hours",
    ),
    "API Endpoint Issue": _RecommendationTemplate(
        "Fix API Endpoint Definitions",
        ("Match methods and payload formats to the service contract",),
        "1 hour",
    ),
    "Connectivity Failure": _RecommendationTemplate(
        "Fix Webhook Connectivity",
        ("Verify webhook endpoint URLs", "Handle unreachable endpoints"),
        "1 hour",
    ),
    "JSON Serialization Issue": _RecommendationTemplate(
        "Fix JSON Serialization Issues",
        ("Review field annotations and naming", "Test serialization round trips"),
        "30-60 minutes",
    ),
    "StateFlow Issue": _RecommendationTemplate(
        "Improve State Flow Usage",
        ("Mutate state only through the owning view model", "Add explicit error states"),
        "1-2 hours",
    ),
    "Data Binding Issue": _RecommendationTemplate(
        "Fix Data Binding Issues",
        ("Review binding expressions, null safety and bound types",),
        "1 hour",
    ),
    "Lifecycle Issue": _RecommendationTemplate(
        "Fix Lifecycle Handling",
        ("Scope collectors to the component lifecycle",),
        "1 hour",
    ),
    "Module Issue": _RecommendationTemplate(
        "Fix Injection Module Issues",
        ("Review module annotations and provider methods",),
        "1-3 hours",
    ),
    "Binding Issue": _RecommendationTemplate(
        "Fix Dependency Bindings",
        ("Bind every interface to exactly one implementation",),
        "1-2 hours",
    ),
    "Scope Issue": _RecommendationTemplate(
        "Fix Scope Configuration",
        ("Keep long-lived components off short-lived dependencies",),
        "1 hour",
    ),
    OPERATIONAL_ERROR: _RecommendationTemplate(
        "Repair Failing Validator",
        ("Inspect the captured traceback", "Fix the validator or its configuration"),
        "Varies by issue",
    ),
}


# -----------------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------------


def _classify_operational(
    category: str, results: Iterable[ValidationResult]
) -> list[ClassifiedFinding]:
    severity_by_kind = {
        "error": Severity.CRITICAL,
        "warning": Severity.WARNING,
        "success": Severity.INFO,
    }
    return [
        ClassifiedFinding(category, OPERATIONAL_ERROR, severity_by_kind[r.kind], r.message)
        for r in results
    ]


def classify_import_result(result: ImportValidationResult) -> list[ClassifiedFinding]:
    """Classify import findings.

    Architectural violations and circular dependencies are critical; unused
    and missing imports are informational.
    """
    cat = IMPORT_CATEGORY
    findings: list[ClassifiedFinding] = []
    for unused in result.unused_imports:
        findings.append(
            ClassifiedFinding(
                cat,
                "Unused Import",
                Severity.INFO,
                f"Import '{unused.import_statement}' is not used",
                (unused.file_path,),
            )
        )
    for missing in result.missing_imports:
        findings.append(
            ClassifiedFinding(
                cat,
                "Missing Import",
                Severity.INFO,
                f"Missing import for '{missing.missing_class}'",
                (missing.file_path,),
            )
        )
    for violation in result.architectural_violations:
        findings.append(
            ClassifiedFinding(
                cat,
                "Architectural Violation",
                Severity.CRITICAL,
                violation.description,
                (violation.file_path,),
            )
        )
    for cycle in result.circular_dependencies:
        findings.append(
            ClassifiedFinding(
                cat, "Circular Dependency", Severity.CRITICAL, cycle.description, cycle.file_paths
            )
        )
    findings.extend(_classify_operational(cat, result.operational_errors))
    return findings


def classify_webhook_result(result: WebhookValidationResult) -> list[ClassifiedFinding]:
    """Classify webhook findings.

    Network issues keep the severity their validator attached; a failed
    connectivity probe is critical; endpoint and serialization issues are
    warnings.
    """
    cat = WEBHOOK_CATEGORY
    findings: list[ClassifiedFinding] = []
    for net in result.network_config.issues:
        findings.append(
            ClassifiedFinding(
                cat, "Network Configuration Issue", net.severity, f"{net.component}: {net.issue}"
            )
        )
    for endpoint in result.api_endpoints.issues:
        findings.append(
            ClassifiedFinding(
                cat,
                "API Endpoint Issue",
                Severity.WARNING,
                f"{endpoint.method} {endpoint.endpoint}: {endpoint.issue}",
            )
        )
    if not result.connectivity.is_connected:
        reason = result.connectivity.error_message or "endpoint unreachable"
        findings.append(
            ClassifiedFinding(
                cat, "Connectivity Failure", Severity.CRITICAL, f"Webhook not reachable: {reason}"
            )
        )
    for issue in result.json_serialization.issues:
        findings.append(
            ClassifiedFinding(cat, "JSON Serialization Issue", Severity.WARNING, issue)
        )
    findings.extend(_classify_operational(cat, result.operational_errors))
    return findings


def classify_ui_result(result: ViewModelValidationResult) -> list[ClassifiedFinding]:
    """Classify UI data-flow findings. All of them are warnings."""
    cat = UI_CATEGORY
    findings: list[ClassifiedFinding] = []
    for flow in result.state_flow_issues:
        findings.append(
            ClassifiedFinding(
                cat,
                "StateFlow Issue",
                Severity.WARNING,
                f"{flow.view_model_class}.{flow.state_property}: {flow.issue}",
            )
        )
    for binding in result.data_binding_issues:
        findings.append(
            ClassifiedFinding(
                cat,
                "Data Binding Issue",
                Severity.WARNING,
                f"{binding.binding_property}: {binding.issue}",
                (binding.component_file,),
            )
        )
    for lifecycle in result.lifecycle_issues:
        findings.append(ClassifiedFinding(cat, "Lifecycle Issue", Severity.WARNING, lifecycle))
    findings.extend(_classify_operational(cat, result.operational_errors))
    return findings


def classify_di_result(result: HiltValidationResult) -> list[ClassifiedFinding]:
    """Classify dependency-injection findings.

    Bindings with no implementation are critical, other binding issues are
    warnings. Module issues keep their own severity.
    """
    cat = DI_CATEGORY
    findings: list[ClassifiedFinding] = []
    for module in result.module_issues:
        findings.append(
            ClassifiedFinding(
                cat, "Module Issue", module.severity, f"{module.module_name}: {module.issue}"
            )
        )
    for binding in result.binding_issues:
        severity = (
            Severity.CRITICAL if binding.implementation_name is None else Severity.WARNING
        )
        findings.append(
            ClassifiedFinding(
                cat, "Binding Issue", severity, f"{binding.interface_name}: {binding.issue}"
            )
        )
    for scope in result.scope_issues:
        findings.append(
            ClassifiedFinding(
                cat, "Scope Issue", Severity.WARNING, f"{scope.component_name}: {scope.scope_issue}"
            )
        )
    findings.extend(_classify_operational(cat, result.operational_errors))
    return findings


def classify_report(report: ValidationReport) -> dict[str, list[ClassifiedFinding]]:
    """Classify every family result of a report, keyed by category name."""
    return {
        IMPORT_CATEGORY: classify_import_result(report.import_validation),
        WEBHOOK_CATEGORY: classify_webhook_result(report.webhook_validation),
        UI_CATEGORY: classify_ui_result(report.ui_validation),
        DI_CATEGORY: classify_di_result(report.di_validation),
    }


# -----------------------------------------------------------------------------
# Scoring and summaries
# -----------------------------------------------------------------------------


def compute_score(critical: int, warning: int, info: int) -> int:
    """Score issue counts on a 0-100 scale.

    Example:
        >>> compute_score(2, 1, 5)
        72
    """
    penalty = critical * CRITICAL_WEIGHT + warning * WARNING_WEIGHT + info * INFO_WEIGHT
    return max(0, 100 - penalty)


def _count(findings: list[ClassifiedFinding], severity: Severity) -> int:
    return sum(1 for f in findings if f.severity is severity)


def summarize_category(name: str, findings: list[ClassifiedFinding]) -> CategorySummary:
    critical = _count(findings, Severity.CRITICAL)
    warning = _count(findings, Severity.WARNING)
    info = _count(findings, Severity.INFO)
    return CategorySummary(
        category_name=name,
        total_issues=len(findings),
        critical_issues=critical,
        warning_issues=warning,
        info_issues=info,
        score=compute_score(critical, warning, info),
    )


def build_summary(findings_by_category: dict[str, list[ClassifiedFinding]]) -> ValidationSummary:
    """Build the report-wide summary.

    Categories are summarized in CATEGORIES order so the result does not
    depend on the order families finished in.

    Raises:
        OrchestrationError: If the aggregated counts break an invariant.
    """
    categories = tuple(
        summarize_category(name, findings_by_category.get(name, [])) for name in CATEGORIES
    )
    critical = sum(c.critical_issues for c in categories)
    warning = sum(c.warning_issues for c in categories)
    info = sum(c.info_issues for c in categories)
    summary = ValidationSummary(
        total_issues=sum(c.total_issues for c in categories),
        critical_issues=critical,
        warning_issues=warning,
        info_issues=info,
        overall_score=compute_score(critical, warning, info),
        categories=categories,
    )
    check_summary_invariants(summary)
    return summary


def check_summary_invariants(summary: ValidationSummary) -> None:
    """Verify count and score invariants.

    Raises:
        OrchestrationError: On a negative count, a total that does not equal
            the sum of its severity counts, or a score outside 0-100.
    """
    rows: list[tuple[str, int, int, int, int, int]] = [
        (
            "overall",
            summary.total_issues,
            summary.critical_issues,
            summary.warning_issues,
            summary.info_issues,
            summary.overall_score,
        )
    ]
    rows.extend(
        (
            c.category_name,
            c.total_issues,
            c.critical_issues,
            c.warning_issues,
            c.info_issues,
            c.score,
        )
        for c in summary.categories
    )
    for name, total, critical, warning, info, score in rows:
        if min(total, critical, warning, info) < 0:
            raise OrchestrationError(f"Negative issue count in {name}")
        if total != critical + warning + info:
            raise OrchestrationError(
                f"Issue total mismatch in {name}: {total} != "
                f"{critical} + {warning} + {info}"
            )
        if not 0 <= score <= 100:
            raise OrchestrationError(f"Score out of range in {name}: {score}")


# -----------------------------------------------------------------------------
# Recommendations
# -----------------------------------------------------------------------------


def derive_recommendations(
    findings_by_category: dict[str, list[ClassifiedFinding]],
    summary: ValidationSummary,
) -> tuple[Recommendation, ...]:
    """Derive recommendations for low-scoring categories.

    One recommendation is emitted per distinct finding type in each category
    scoring below RECOMMENDATION_THRESHOLD. Priority is HIGH when the
    category holds any critical finding, MEDIUM otherwise.

    Returns:
        Recommendations ordered by priority, then category name, then title.
    """
    recommendations: list[Recommendation] = []

    for category in summary.categories:
        name = category.category_name
        if category.score >= RECOMMENDATION_THRESHOLD:
            continue
        priority = Priority.HIGH if category.critical_issues > 0 else Priority.MEDIUM

        by_type: dict[str, list[ClassifiedFinding]] = {}
        for finding in findings_by_category.get(name, []):
            by_type.setdefault(finding.finding_type, []).append(finding)

        for finding_type, findings in by_type.items():
            template = _TEMPLATES[finding_type]
            files = sorted({path for f in findings for path in f.files})
            recommendations.append(
                Recommendation(
                    category=name,
                    priority=priority,
                    title=template.title,
                    description=(
                        f"Resolve {len(findings)} {finding_type.lower()} finding(s) "
                        f"in {name}"
                    ),
                    action_items=template.action_items,
                    affected_files=tuple(files),
                    estimated_effort=template.estimated_effort,
                )
            )

    return tuple(sort_recommendations(recommendations))


def sort_recommendations(recommendations: Iterable[Recommendation]) -> list[Recommendation]:
    """Order recommendations by priority, then category name, then title."""
    return sorted(recommendations, key=lambda r: (r.priority.rank, r.category, r.title))
