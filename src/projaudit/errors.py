"""Exceptions raised by projaudit.

Findings are never raised. These exceptions cover the few conditions that
abort a run or reject input before a run starts.
"""

from __future__ import annotations


class ValidationSystemError(Exception):
    """Base class for projaudit errors."""


class InvalidProjectPathError(ValidationSystemError):
    """Raised when the project path handed to a run is malformed."""

    def __init__(self, project_path: object, reason: str) -> None:
        self.project_path = project_path
        self.reason = reason
        super().__init__(f"Invalid project path {project_path!r}: {reason}")


class OrchestrationError(ValidationSystemError):
    """Raised when aggregation breaks an internal invariant."""


class FixtureError(ValidationSystemError):
    """Raised when a findings fixture file cannot be loaded."""


class ReportLoadError(ValidationSystemError):
    """Raised when a saved report cannot be read back."""
