"""projaudit - project health validation with scored, multi-format reports."""

__version__ = "1.0.0"

from projaudit.models import (  # noqa: E402
    Priority,
    Severity,
    SystemStatus,
    ValidationReport,
)
from projaudit.reporting import ReportFormat  # noqa: E402
from projaudit.system import (  # noqa: E402
    ValidationCategory,
    ValidationSystem,
    create_validation_system,
)

__all__ = [
    "Priority",
    "ReportFormat",
    "Severity",
    "SystemStatus",
    "ValidationCategory",
    "ValidationReport",
    "ValidationSystem",
    "__version__",
    "create_validation_system",
]
