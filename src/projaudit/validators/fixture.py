"""Fixture-backed validators.

Implements all four validator contracts from pre-recorded findings, either
built in code or loaded from a YAML file. Useful for CI dry runs, demos and
tests, and as the default validators when a host supplies none.

YAML layout (every section and key is optional)::

    imports:
      unused_imports:
        - {file_path: app/ui.py, import_statement: import os, line_number: 3}
      missing_imports: []
      architectural_violations:
        - file_path: app/domain/user.py
          violation_type: layer_dependency_violation
          description: Domain imports data layer
          suggestion: Depend on a repository interface
      circular_dependencies:
        - {file_paths: [a.py, b.py], description: a <-> b}
    webhook:
      url: https://hooks.example.com/ping   # probed live when set
      network_config: {issues: [], is_valid: true}
      api_endpoints: {issues: [], valid_endpoints: 2, total_endpoints: 2}
      connectivity: {is_connected: true, response_time: 120}
      json_serialization: {issues: [], is_valid: true}
      error_handling: []
    ui:
      state_flow_issues: []
      data_binding_issues: []
      lifecycle_issues: []
      ui_components: {issues: [], valid_count: 4, total_count: 4}
      data_mappers: []
    di:
      module_issues: []
      binding_issues: []
      scope_issues: []
      circular_deps: []
      missing_deps: []
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, NamedTuple

import yaml

from projaudit.error_handler import ValidationErrorHandler
from projaudit.errors import FixtureError
from projaudit.models import (
    ApiEndpointIssue,
    ApiEndpointResult,
    ArchitecturalViolation,
    BindingIssue,
    CircularDependency,
    ConnectivityResult,
    DataBindingIssue,
    DataBindingResult,
    DependencyGraphResult,
    ErrorKind,
    HiltValidationResult,
    ImportValidationResult,
    MissingImport,
    ModuleIssue,
    NetworkConfigIssue,
    NetworkConfigResult,
    ScopeIssue,
    ScopeValidationResult,
    SerializationResult,
    Severity,
    StateFlowIssue,
    StateManagementResult,
    SuccessResult,
    UIComponentResult,
    UnusedImport,
    ValidationError,
    ValidationResult,
    ViewModelValidationResult,
    ViolationType,
    WebhookValidationResult,
)
from projaudit.validators.base import (
    DIValidator,
    ImportValidator,
    UIDataFlowValidator,
    WebhookValidator,
)
from projaudit.validators.connectivity import DEFAULT_PROBE_TIMEOUT, probe_webhook

logger = logging.getLogger(__name__)


def _project(
    name: str, errors: list[ValidationError], handler: ValidationErrorHandler
) -> list[ValidationResult]:
    """Project findings-as-errors to results, or a single success if clean."""
    if not errors:
        return [SuccessResult(f"{name}: no issues found")]
    return handler.handle_validation_errors(errors)


# -----------------------------------------------------------------------------
# Validators
# -----------------------------------------------------------------------------


class FixtureImportValidator(ImportValidator):
    """Import validator serving recorded findings."""

    def __init__(
        self,
        result: ImportValidationResult | None = None,
        error_handler: ValidationErrorHandler | None = None,
    ) -> None:
        self.result = result or ImportValidationResult()
        self.error_handler = error_handler or ValidationErrorHandler()

    def get_validator_name(self) -> str:
        return "FixtureImportValidator"

    def get_category(self) -> str:
        return "Import Validation"

    def validate(self) -> list[ValidationResult]:
        r = self.result
        errors = [
            ValidationError(
                ErrorKind.CODE_QUALITY,
                f"Remove unused import '{u.import_statement}'",
                f"{u.file_path}:{u.line_number}",
            )
            for u in r.unused_imports
        ]
        errors += [
            ValidationError(
                ErrorKind.COMPILATION_ERROR,
                f"Missing import for '{m.missing_class}'",
                f"{m.file_path}:{m.line_number}",
                m.suggested_import,
            )
            for m in r.missing_imports
        ]
        errors += [
            ValidationError(
                ErrorKind.ARCHITECTURAL_VIOLATION, v.description, v.file_path, v.suggestion
            )
            for v in r.architectural_violations
        ]
        errors += [
            ValidationError(
                ErrorKind.ARCHITECTURAL_VIOLATION,
                c.description,
                " -> ".join(c.file_paths),
                "Refactor to break the circular dependency",
            )
            for c in r.circular_dependencies
        ]
        return _project(self.get_validator_name(), errors, self.error_handler)

    def validate_imports(self, project_path: str) -> ImportValidationResult:
        return self.result

    def find_unused_imports(self, file_path: str) -> list[UnusedImport]:
        return [u for u in self.result.unused_imports if u.file_path == file_path]

    def find_missing_imports(self, file_path: str) -> list[MissingImport]:
        return [m for m in self.result.missing_imports if m.file_path == file_path]

    def validate_architectural_dependencies(
        self, file_path: str
    ) -> list[ArchitecturalViolation]:
        return [v for v in self.result.architectural_violations if v.file_path == file_path]

    def detect_circular_dependencies(self, project_path: str) -> list[CircularDependency]:
        return list(self.result.circular_dependencies)


class FixtureWebhookValidator(WebhookValidator):
    """Webhook validator serving recorded findings.

    When a URL is given, test_webhook_connectivity probes it live with a
    bounded timeout instead of serving the recorded connectivity result.
    """

    def __init__(
        self,
        result: WebhookValidationResult | None = None,
        error_handling: tuple[str, ...] = (),
        url: str | None = None,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        error_handler: ValidationErrorHandler | None = None,
    ) -> None:
        self.result = result or WebhookValidationResult()
        self.error_handling = error_handling
        self.url = url
        self.probe_timeout = probe_timeout
        self.error_handler = error_handler or ValidationErrorHandler()

    def get_validator_name(self) -> str:
        return "FixtureWebhookValidator"

    def get_category(self) -> str:
        return "Webhook Validation"

    def validate(self) -> list[ValidationResult]:
        r = self.validate_make_service()
        errors = [
            ValidationError(
                ErrorKind.NETWORK_CONFIGURATION,
                f"{n.component}: {n.issue}",
                n.severity.value,
                n.fix,
            )
            for n in r.network_config.issues
        ]
        errors += [
            ValidationError(
                ErrorKind.NETWORK_CONFIGURATION,
                f"{e.method} {e.endpoint}: {e.issue}",
                e.expected_format or "",
            )
            for e in r.api_endpoints.issues
        ]
        if not r.connectivity.is_connected:
            errors.append(
                ValidationError(
                    ErrorKind.RUNTIME_RISK,
                    "Webhook endpoint is not reachable",
                    r.connectivity.error_message or "",
                )
            )
        errors += [
            ValidationError(ErrorKind.RUNTIME_RISK, issue, "JSON serialization")
            for issue in r.json_serialization.issues
        ]
        return _project(self.get_validator_name(), errors, self.error_handler)

    def validate_make_service(self) -> WebhookValidationResult:
        if self.url is None:
            return self.result
        return WebhookValidationResult(
            network_config=self.result.network_config,
            api_endpoints=self.result.api_endpoints,
            connectivity=self.test_webhook_connectivity(),
            json_serialization=self.result.json_serialization,
        )

    def validate_network_configuration(self) -> NetworkConfigResult:
        return self.result.network_config

    def validate_api_endpoints(self) -> ApiEndpointResult:
        return self.result.api_endpoints

    def test_webhook_connectivity(self) -> ConnectivityResult:
        if self.url is None:
            return self.result.connectivity
        return probe_webhook(self.url, timeout=self.probe_timeout)

    def validate_json_serialization(self) -> SerializationResult:
        return self.result.json_serialization

    def validate_error_handling(self) -> list[str]:
        return list(self.error_handling)


class FixtureUIDataFlowValidator(UIDataFlowValidator):
    """UI data-flow validator serving recorded findings."""

    def __init__(
        self,
        result: ViewModelValidationResult | None = None,
        ui_components: UIComponentResult | None = None,
        data_mappers: tuple[str, ...] = (),
        error_handler: ValidationErrorHandler | None = None,
    ) -> None:
        self.result = result or ViewModelValidationResult()
        self.ui_components = ui_components or UIComponentResult()
        self.data_mappers = data_mappers
        self.error_handler = error_handler or ValidationErrorHandler()

    def get_validator_name(self) -> str:
        return "FixtureUIDataFlowValidator"

    def get_category(self) -> str:
        return "UI Data Flow"

    def validate(self) -> list[ValidationResult]:
        r = self.result
        errors = [
            ValidationError(
                ErrorKind.RUNTIME_RISK,
                f"{s.view_model_class}.{s.state_property}: {s.issue}",
                s.recommendation,
            )
            for s in r.state_flow_issues
        ]
        errors += [
            ValidationError(
                ErrorKind.DATA_BINDING,
                f"{b.binding_property}: {b.issue}",
                b.component_file,
                b.fix,
            )
            for b in r.data_binding_issues
        ]
        errors += [
            ValidationError(ErrorKind.RUNTIME_RISK, issue, "lifecycle")
            for issue in r.lifecycle_issues
        ]
        return _project(self.get_validator_name(), errors, self.error_handler)

    def validate_view_models(self) -> ViewModelValidationResult:
        return self.result

    def validate_data_binding(self) -> DataBindingResult:
        issues = self.result.data_binding_issues
        return DataBindingResult(issues=issues, is_valid=not issues)

    def validate_state_management(self) -> StateManagementResult:
        issues = self.result.state_flow_issues
        return StateManagementResult(issues=issues, is_valid=not issues)

    def validate_ui_components(self) -> UIComponentResult:
        return self.ui_components

    def validate_data_mappers(self) -> list[str]:
        return list(self.data_mappers)


class FixtureDIValidator(DIValidator):
    """Dependency-injection validator serving recorded findings."""

    def __init__(
        self,
        result: HiltValidationResult | None = None,
        graph: DependencyGraphResult | None = None,
        error_handler: ValidationErrorHandler | None = None,
    ) -> None:
        self.result = result or HiltValidationResult()
        self.graph = graph or DependencyGraphResult()
        self.error_handler = error_handler or ValidationErrorHandler()

    def get_validator_name(self) -> str:
        return "FixtureDIValidator"

    def get_category(self) -> str:
        return "Dependency Injection"

    def validate(self) -> list[ValidationResult]:
        r = self.result
        errors = [
            ValidationError(
                ErrorKind.DEPENDENCY_INJECTION,
                f"{m.module_name}: {m.issue}",
                m.severity.value,
                m.fix,
            )
            for m in r.module_issues
        ]
        errors += [
            ValidationError(
                ErrorKind.DEPENDENCY_INJECTION,
                f"{b.interface_name}: {b.issue}",
                b.implementation_name or "no implementation bound",
                b.fix,
            )
            for b in r.binding_issues
        ]
        errors += [
            ValidationError(
                ErrorKind.DEPENDENCY_INJECTION,
                f"{s.component_name}: {s.scope_issue}",
                s.recommendation,
            )
            for s in r.scope_issues
        ]
        return _project(self.get_validator_name(), errors, self.error_handler)

    def validate_hilt_modules(self) -> HiltValidationResult:
        return self.result

    def validate_dependency_graph(self) -> DependencyGraphResult:
        return self.graph

    def validate_scopes(self) -> ScopeValidationResult:
        issues = self.result.scope_issues
        return ScopeValidationResult(issues=issues, is_valid=not issues)

    def validate_bindings(self) -> list[BindingIssue]:
        return list(self.result.binding_issues)

    def detect_circular_dependencies(self) -> list[str]:
        return list(self.graph.circular_deps)


# -----------------------------------------------------------------------------
# YAML loading
# -----------------------------------------------------------------------------


class FixtureValidators(NamedTuple):
    """One validator per family, in orchestrator argument order."""

    import_validator: FixtureImportValidator
    webhook_validator: FixtureWebhookValidator
    ui_validator: FixtureUIDataFlowValidator
    di_validator: FixtureDIValidator


def _records(data: dict[str, Any], key: str, cls: Any, **converters: Any) -> tuple[Any, ...]:
    items = data.get(key) or []
    if not isinstance(items, list):
        raise FixtureError(f"'{key}' must be a list")
    records = []
    for item in items:
        if not isinstance(item, dict):
            raise FixtureError(f"Entries of '{key}' must be mappings")
        values = dict(item)
        for field_name, convert in converters.items():
            if field_name in values:
                values[field_name] = convert(values[field_name])
        try:
            records.append(cls(**values))
        except (TypeError, ValueError) as e:
            raise FixtureError(f"Invalid entry in '{key}': {e}") from e
    return tuple(records)


def _strings(data: dict[str, Any], key: str) -> tuple[str, ...]:
    items = data.get(key) or []
    if not isinstance(items, list):
        raise FixtureError(f"'{key}' must be a list")
    return tuple(str(item) for item in items)


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise FixtureError(f"'{key}' must be a mapping")
    return section


def _severity(value: Any) -> Severity:
    try:
        return Severity(str(value).lower())
    except ValueError as e:
        raise FixtureError(f"Unknown severity: {value!r}") from e


def _violation_type(value: Any) -> ViolationType:
    try:
        return ViolationType(str(value).lower())
    except ValueError as e:
        raise FixtureError(f"Unknown violation type: {value!r}") from e


def validators_from_dict(data: dict[str, Any]) -> FixtureValidators:
    """Build fixture validators from parsed fixture data.

    Raises:
        FixtureError: If the data does not match the fixture layout.
    """
    if not isinstance(data, dict):
        raise FixtureError("Fixture root must be a mapping")

    imports = _section(data, "imports")
    import_result = ImportValidationResult(
        unused_imports=_records(imports, "unused_imports", UnusedImport),
        missing_imports=_records(imports, "missing_imports", MissingImport),
        architectural_violations=_records(
            imports, "architectural_violations", ArchitecturalViolation,
            violation_type=_violation_type,
        ),
        circular_dependencies=_records(
            imports, "circular_dependencies", CircularDependency, file_paths=tuple
        ),
    )

    webhook = _section(data, "webhook")
    network = _section(webhook, "network_config")
    endpoints = _section(webhook, "api_endpoints")
    serialization = _section(webhook, "json_serialization")
    connectivity = _section(webhook, "connectivity")
    network_issues = _records(network, "issues", NetworkConfigIssue, severity=_severity)
    serialization_issues = _strings(serialization, "issues")
    try:
        webhook_result = WebhookValidationResult(
            network_config=NetworkConfigResult(
                issues=network_issues,
                is_valid=bool(network.get("is_valid", not network_issues)),
            ),
            api_endpoints=ApiEndpointResult(
                issues=_records(endpoints, "issues", ApiEndpointIssue),
                valid_endpoints=int(endpoints.get("valid_endpoints", 0)),
                total_endpoints=int(endpoints.get("total_endpoints", 0)),
            ),
            connectivity=ConnectivityResult(
                is_connected=bool(connectivity.get("is_connected", True)),
                response_time=connectivity.get("response_time"),
                error_message=connectivity.get("error_message"),
            ),
            json_serialization=SerializationResult(
                issues=serialization_issues,
                is_valid=bool(serialization.get("is_valid", not serialization_issues)),
            ),
        )
        probe_timeout = float(webhook.get("probe_timeout", DEFAULT_PROBE_TIMEOUT))
    except (TypeError, ValueError) as e:
        raise FixtureError(f"Invalid webhook section: {e}") from e

    ui = _section(data, "ui")
    components = _section(ui, "ui_components")
    ui_result = ViewModelValidationResult(
        state_flow_issues=_records(ui, "state_flow_issues", StateFlowIssue),
        data_binding_issues=_records(ui, "data_binding_issues", DataBindingIssue),
        lifecycle_issues=_strings(ui, "lifecycle_issues"),
    )
    try:
        ui_components = UIComponentResult(
            issues=_strings(components, "issues"),
            valid_count=int(components.get("valid_count", 0)),
            total_count=int(components.get("total_count", 0)),
        )
    except (TypeError, ValueError) as e:
        raise FixtureError(f"Invalid ui_components section: {e}") from e

    di = _section(data, "di")
    di_result = HiltValidationResult(
        module_issues=_records(di, "module_issues", ModuleIssue, severity=_severity),
        binding_issues=_records(di, "binding_issues", BindingIssue),
        scope_issues=_records(di, "scope_issues", ScopeIssue),
    )
    circular = _strings(di, "circular_deps")
    missing = _strings(di, "missing_deps")
    graph = DependencyGraphResult(
        circular_deps=circular,
        missing_deps=missing,
        is_valid=not circular and not missing,
    )

    return FixtureValidators(
        import_validator=FixtureImportValidator(import_result),
        webhook_validator=FixtureWebhookValidator(
            webhook_result,
            error_handling=_strings(webhook, "error_handling"),
            url=webhook.get("url"),
            probe_timeout=probe_timeout,
        ),
        ui_validator=FixtureUIDataFlowValidator(
            ui_result,
            ui_components=ui_components,
            data_mappers=_strings(ui, "data_mappers"),
        ),
        di_validator=FixtureDIValidator(di_result, graph=graph),
    )


def load_fixture_validators(path: Path) -> FixtureValidators:
    """Load fixture validators from a YAML file.

    Args:
        path: Path to the fixture file.

    Returns:
        FixtureValidators built from the file.

    Raises:
        FixtureError: If the file cannot be read or parsed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise FixtureError(f"Cannot read fixture file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise FixtureError(f"Invalid YAML in fixture file {path}: {e}") from e

    logger.debug("Loaded findings fixture %s", path)
    return validators_from_dict(data or {})


def empty_validators() -> FixtureValidators:
    """Validators that report no findings for any family."""
    return validators_from_dict({})
