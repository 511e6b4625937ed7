"""Validator contracts for the projaudit validation framework.

Every validator implements BaseValidator. Each of the four validator
families (import, webhook, UI data flow, dependency injection) extends it
with analysis-specific queries and one primary aggregate method that the
orchestrator calls.

All methods are read-only inspections of the target project. A method
either returns a complete result or raises; an empty collection means
"nothing found" and is distinct from failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from projaudit.models import (
    ApiEndpointResult,
    ArchitecturalViolation,
    BindingIssue,
    CircularDependency,
    ConnectivityResult,
    DataBindingResult,
    DependencyGraphResult,
    HiltValidationResult,
    ImportValidationResult,
    MissingImport,
    NetworkConfigResult,
    ScopeValidationResult,
    SerializationResult,
    StateManagementResult,
    UIComponentResult,
    UnusedImport,
    ValidationResult,
    ViewModelValidationResult,
    WebhookValidationResult,
)


class BaseValidator(ABC):
    """Abstract base class for all validators."""

    @abstractmethod
    def validate(self) -> list[ValidationResult]:
        """Run the validator's checks and return coarse results."""

    @abstractmethod
    def get_validator_name(self) -> str:
        """Name used in reports and the status probe."""

    @abstractmethod
    def get_category(self) -> str:
        """Report category this validator contributes to."""


class ImportValidator(BaseValidator):
    """Import and module-dependency inspection."""

    @abstractmethod
    def validate_imports(self, project_path: str) -> ImportValidationResult:
        """Validate all imports in the project."""

    @abstractmethod
    def find_unused_imports(self, file_path: str) -> list[UnusedImport]:
        """Find unused imports in a single file."""

    @abstractmethod
    def find_missing_imports(self, file_path: str) -> list[MissingImport]:
        """Find unresolved references in a single file."""

    @abstractmethod
    def validate_architectural_dependencies(
        self, file_path: str
    ) -> list[ArchitecturalViolation]:
        """Check a file's imports against the layering rules."""

    @abstractmethod
    def detect_circular_dependencies(self, project_path: str) -> list[CircularDependency]:
        """Detect import cycles between files."""


class WebhookValidator(BaseValidator):
    """Network and webhook configuration inspection.

    test_webhook_connectivity must apply a bounded timeout and report the
    elapsed time in ConnectivityResult.response_time.
    """

    @abstractmethod
    def validate_make_service(self) -> WebhookValidationResult:
        """Validate the webhook service end to end."""

    @abstractmethod
    def validate_network_configuration(self) -> NetworkConfigResult:
        """Validate HTTP client configuration."""

    @abstractmethod
    def validate_api_endpoints(self) -> ApiEndpointResult:
        """Validate API endpoint definitions."""

    @abstractmethod
    def test_webhook_connectivity(self) -> ConnectivityResult:
        """Probe the webhook endpoint within a bounded time."""

    @abstractmethod
    def validate_json_serialization(self) -> SerializationResult:
        """Validate request/response serialization."""

    @abstractmethod
    def validate_error_handling(self) -> list[str]:
        """Report gaps in network error handling."""


class UIDataFlowValidator(BaseValidator):
    """UI state and data-binding inspection."""

    @abstractmethod
    def validate_view_models(self) -> ViewModelValidationResult:
        """Validate view models for state-flow, binding and lifecycle issues."""

    @abstractmethod
    def validate_data_binding(self) -> DataBindingResult:
        """Validate bindings between UI components and state."""

    @abstractmethod
    def validate_state_management(self) -> StateManagementResult:
        """Validate state management patterns."""

    @abstractmethod
    def validate_ui_components(self) -> UIComponentResult:
        """Validate UI components for proper data flow."""

    @abstractmethod
    def validate_data_mappers(self) -> list[str]:
        """Validate data mappers for correct transformations."""


class DIValidator(BaseValidator):
    """Dependency-injection graph inspection."""

    @abstractmethod
    def validate_hilt_modules(self) -> HiltValidationResult:
        """Validate injection modules, bindings and scopes."""

    @abstractmethod
    def validate_dependency_graph(self) -> DependencyGraphResult:
        """Validate the dependency graph for completeness."""

    @abstractmethod
    def validate_scopes(self) -> ScopeValidationResult:
        """Validate scope configuration."""

    @abstractmethod
    def validate_bindings(self) -> list[BindingIssue]:
        """Validate interface to implementation bindings."""

    @abstractmethod
    def detect_circular_dependencies(self) -> list[str]:
        """Detect cycles in the injection graph."""
