"""Projection of validator-level errors onto ValidationResult variants."""

from __future__ import annotations

import traceback

from projaudit.models import (
    ErrorKind,
    ErrorResult,
    SuccessResult,
    ValidationError,
    ValidationResult,
    WarningResult,
)

# One canned remediation hint per error kind.
SUGGESTED_FIXES: dict[ErrorKind, str] = {
    ErrorKind.COMPILATION_ERROR: "Check for missing imports or syntax errors",
    ErrorKind.RUNTIME_RISK: "Review the code for potential runtime issues",
    ErrorKind.CODE_QUALITY: "Consider refactoring for better code quality",
    ErrorKind.ARCHITECTURAL_VIOLATION: (
        "Ensure proper layer separation according to Clean Architecture"
    ),
    ErrorKind.NETWORK_CONFIGURATION: "Check network module configuration and dependencies",
    ErrorKind.DATA_BINDING: "Verify data binding setup and state management",
    ErrorKind.DEPENDENCY_INJECTION: "Check injection module configuration and bindings",
}


class ValidationErrorHandler:
    """Translates ValidationError records into ValidationResult variants.

    The mapping is total over ErrorKind:

    - COMPILATION_ERROR -> Error, fix carried verbatim
    - RUNTIME_RISK -> Warning
    - CODE_QUALITY -> Success, message prefixed "Suggestion: "
    - ARCHITECTURAL_VIOLATION -> Error, prefixed "Architectural Violation: "
    - NETWORK_CONFIGURATION -> Error, prefixed "Network Configuration Issue: "
    - DATA_BINDING -> Warning, prefixed "Data Binding Issue: "
    - DEPENDENCY_INJECTION -> Error, prefixed "DI Configuration Issue: "
    """

    def handle_validation_error(self, error: ValidationError) -> ValidationResult:
        """Project a single error onto its result variant.

        Args:
            error: The error to project.

        Returns:
            The ValidationResult variant for the error's kind.
        """
        kind = error.type
        if kind is ErrorKind.COMPILATION_ERROR:
            return ErrorResult(error.message, error.details, error.suggested_fix)
        if kind is ErrorKind.RUNTIME_RISK:
            return WarningResult(error.message, error.details)
        if kind is ErrorKind.CODE_QUALITY:
            return SuccessResult(f"Suggestion: {error.message}")
        if kind is ErrorKind.ARCHITECTURAL_VIOLATION:
            return ErrorResult(
                f"Architectural Violation: {error.message}",
                error.details,
                error.suggested_fix,
            )
        if kind is ErrorKind.NETWORK_CONFIGURATION:
            return ErrorResult(
                f"Network Configuration Issue: {error.message}",
                error.details,
                error.suggested_fix,
            )
        if kind is ErrorKind.DATA_BINDING:
            return WarningResult(f"Data Binding Issue: {error.message}", error.details)
        if kind is ErrorKind.DEPENDENCY_INJECTION:
            return ErrorResult(
                f"DI Configuration Issue: {error.message}",
                error.details,
                error.suggested_fix,
            )
        raise TypeError(f"Unhandled error kind: {kind!r}")

    def handle_validation_errors(
        self, errors: list[ValidationError]
    ) -> list[ValidationResult]:
        """Project a batch of errors, preserving input order."""
        return [self.handle_validation_error(error) for error in errors]

    def create_validation_error(
        self, cause: BaseException, kind: ErrorKind, context: str
    ) -> ValidationError:
        """Wrap a failure captured during a validator call.

        Args:
            cause: The exception raised by the validator.
            kind: Error kind to classify the failure under.
            context: Where the failure happened (e.g. the validator name).

        Returns:
            ValidationError carrying the formatted traceback as details and
            the canned remediation hint for the kind.
        """
        details = "".join(
            traceback.format_exception(type(cause), cause, cause.__traceback__)
        )
        return ValidationError(
            type=kind,
            message=f"Error in {context}: {cause}",
            details=details,
            suggested_fix=SUGGESTED_FIXES[kind],
        )
