"""JSON encoding and decoding of validation reports.

Reports are encoded from their dataclasses with enums as values and tuples
as lists. Decoding walks the dataclass type hints to rebuild the same
frozen objects, so a saved JSON report compares equal to the original.
"""

from __future__ import annotations

import dataclasses
import json
import types
import typing
from enum import Enum
from pathlib import Path
from typing import Any, Union

from projaudit.aggregation import check_summary_invariants
from projaudit.errors import OrchestrationError, ReportLoadError
from projaudit.models import (
    ErrorResult,
    SuccessResult,
    ValidationReport,
    ValidationResult,
    WarningResult,
)

_RESULT_TYPES: dict[str, type] = {
    "success": SuccessResult,
    "warning": WarningResult,
    "error": ErrorResult,
}


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, enums and tuples into JSON-ready values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def report_to_json(report: ValidationReport) -> str:
    return json.dumps(to_jsonable(report), indent=2)


def report_from_dict(data: dict[str, Any]) -> ValidationReport:
    """Rebuild a ValidationReport from its JSON form.

    Raises:
        ReportLoadError: If a field is missing or has the wrong shape, or
            the decoded summary breaks a count or score invariant.
    """
    try:
        report = _decode(ValidationReport, data, "report")
        check_summary_invariants(report.summary)
    except (KeyError, TypeError, ValueError) as e:
        raise ReportLoadError(f"Malformed report: {e}") from e
    except OrchestrationError as e:
        raise ReportLoadError(f"Inconsistent report: {e}") from e
    return report


def load_report(path: Path) -> ValidationReport:
    """Read a report saved in JSON format.

    Raises:
        ReportLoadError: If the file cannot be read, is not JSON, or does not
            hold a report.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ReportLoadError(f"Cannot read report {path}: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReportLoadError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ReportLoadError(f"Malformed report in {path}: expected an object")
    return report_from_dict(data)


# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------


def _decode(tp: Any, value: Any, where: str) -> Any:
    if tp == ValidationResult:
        if not isinstance(value, dict) or value.get("kind") not in _RESULT_TYPES:
            raise ValueError(f"{where}: unknown result kind")
        return _decode(_RESULT_TYPES[value["kind"]], value, where)

    origin = typing.get_origin(tp)
    if origin in (Union, types.UnionType):
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if value is None:
            if len(args) < len(typing.get_args(tp)):
                return None
            raise TypeError(f"{where}: value is required")
        return _decode(args[0], value, where)

    if origin is tuple:
        if not isinstance(value, list):
            raise TypeError(f"{where}: expected a list")
        item_type = typing.get_args(tp)[0]
        return tuple(_decode(item_type, item, f"{where}[{i}]") for i, item in enumerate(value))

    if isinstance(tp, type) and issubclass(tp, Enum):
        return tp(value)

    if dataclasses.is_dataclass(tp):
        if not isinstance(value, dict):
            raise TypeError(f"{where}: expected an object")
        hints = typing.get_type_hints(tp)
        kwargs = {
            f.name: _decode(hints[f.name], value[f.name], f"{where}.{f.name}")
            for f in dataclasses.fields(tp)
            if f.init and (f.name in value or _is_required(f))
        }
        return tp(**kwargs)

    if tp is bool:
        if not isinstance(value, bool):
            raise TypeError(f"{where}: expected a boolean")
        return value
    if tp in (int, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{where}: expected a number")
        return tp(value)
    if tp is str:
        if not isinstance(value, str):
            raise TypeError(f"{where}: expected a string")
        return value
    return value


def _is_required(f: dataclasses.Field[Any]) -> bool:
    return f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
