"""Tests for projaudit.error_handler module."""

from __future__ import annotations

import pytest

from projaudit.error_handler import SUGGESTED_FIXES, ValidationErrorHandler
from projaudit.models import (
    ErrorKind,
    ErrorResult,
    SuccessResult,
    ValidationError,
    WarningResult,
)


@pytest.fixture
def handler() -> ValidationErrorHandler:
    return ValidationErrorHandler()


class TestHandleValidationError:
    """Tests for the error kind to result projection."""

    def test_compilation_error_keeps_fix(self, handler: ValidationErrorHandler) -> None:
        """Test COMPILATION_ERROR becomes an Error with the fix carried over."""
        error = ValidationError(ErrorKind.COMPILATION_ERROR, "Missing X", "a.py:3", "import X")
        assert handler.handle_validation_error(error) == ErrorResult(
            "Missing X", "a.py:3", "import X"
        )

    def test_runtime_risk_is_warning(self, handler: ValidationErrorHandler) -> None:
        """Test RUNTIME_RISK becomes a Warning."""
        error = ValidationError(ErrorKind.RUNTIME_RISK, "Leak", "details")
        assert handler.handle_validation_error(error) == WarningResult("Leak", "details")

    def test_code_quality_is_suggestion(self, handler: ValidationErrorHandler) -> None:
        """Test CODE_QUALITY becomes a Success prefixed with Suggestion."""
        error = ValidationError(ErrorKind.CODE_QUALITY, "Remove import", "a.py:1")
        assert handler.handle_validation_error(error) == SuccessResult(
            "Suggestion: Remove import"
        )

    @pytest.mark.parametrize(
        ("kind", "prefix"),
        [
            (ErrorKind.ARCHITECTURAL_VIOLATION, "Architectural Violation: "),
            (ErrorKind.NETWORK_CONFIGURATION, "Network Configuration Issue: "),
            (ErrorKind.DEPENDENCY_INJECTION, "DI Configuration Issue: "),
        ],
    )
    def test_prefixed_errors(
        self, handler: ValidationErrorHandler, kind: ErrorKind, prefix: str
    ) -> None:
        """Test blocking kinds become prefixed Errors keeping the fix."""
        error = ValidationError(kind, "boom", "details", "fix it")
        assert handler.handle_validation_error(error) == ErrorResult(
            f"{prefix}boom", "details", "fix it"
        )

    def test_data_binding_is_prefixed_warning(self, handler: ValidationErrorHandler) -> None:
        """Test DATA_BINDING becomes a prefixed Warning."""
        error = ValidationError(ErrorKind.DATA_BINDING, "title", "screen.py")
        assert handler.handle_validation_error(error) == WarningResult(
            "Data Binding Issue: title", "screen.py"
        )

    def test_every_kind_is_handled(self, handler: ValidationErrorHandler) -> None:
        """Test the mapping covers every error kind."""
        expected = {
            ErrorKind.COMPILATION_ERROR: "error",
            ErrorKind.RUNTIME_RISK: "warning",
            ErrorKind.CODE_QUALITY: "success",
            ErrorKind.ARCHITECTURAL_VIOLATION: "error",
            ErrorKind.NETWORK_CONFIGURATION: "error",
            ErrorKind.DATA_BINDING: "warning",
            ErrorKind.DEPENDENCY_INJECTION: "error",
        }
        for kind in ErrorKind:
            result = handler.handle_validation_error(ValidationError(kind, "m", "d"))
            assert result.kind == expected[kind], kind


class TestHandleValidationErrors:
    """Tests for batch projection."""

    def test_preserves_order(self, handler: ValidationErrorHandler) -> None:
        """Test results come back in input order."""
        errors = [
            ValidationError(ErrorKind.CODE_QUALITY, "first", ""),
            ValidationError(ErrorKind.RUNTIME_RISK, "second", ""),
            ValidationError(ErrorKind.COMPILATION_ERROR, "third", ""),
        ]
        results = handler.handle_validation_errors(errors)
        assert [r.kind for r in results] == ["success", "warning", "error"]
        assert results[1].message == "second"

    def test_empty(self, handler: ValidationErrorHandler) -> None:
        """Test an empty batch gives no results."""
        assert handler.handle_validation_errors([]) == []


class TestCreateValidationError:
    """Tests for wrapping captured exceptions."""

    def test_wraps_exception(self, handler: ValidationErrorHandler) -> None:
        """Test message, traceback details and canned fix."""
        try:
            raise RuntimeError("disk on fire")
        except RuntimeError as e:
            error = handler.create_validation_error(
                e, ErrorKind.DEPENDENCY_INJECTION, "FixtureDIValidator"
            )

        assert error.type is ErrorKind.DEPENDENCY_INJECTION
        assert error.message == "Error in FixtureDIValidator: disk on fire"
        assert "Traceback" in error.details
        assert "RuntimeError: disk on fire" in error.details
        assert error.suggested_fix == SUGGESTED_FIXES[ErrorKind.DEPENDENCY_INJECTION]

    def test_every_kind_has_a_fix(self) -> None:
        """Test each kind has a canned remediation hint."""
        assert set(SUGGESTED_FIXES) == set(ErrorKind)
