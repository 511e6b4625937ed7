"""Persist rendered reports to disk and read saved ones back."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from projaudit.models import ValidationReport
from projaudit.reporting.codec import load_report
from projaudit.reporting.formatter import ReportFormat, ReportFormatter

logger = logging.getLogger(__name__)

REPORT_NAME = re.compile(r"^validation_report_(\d{8}_\d{6}_\d{3})(?:_(\d+))?\.")

EXTENSIONS = {
    ReportFormat.CONSOLE: ".txt",
    ReportFormat.MARKDOWN: ".md",
    ReportFormat.JSON: ".json",
    ReportFormat.SUMMARY: ".summary.txt",
}


class ReportStore:
    """Writes reports into a directory, one file per format.

    Files share a base name derived from the report timestamp, e.g.
    ``validation_report_20260101_120000_250.md``. A base name already in use
    gets a numeric suffix, so no save overwrites an earlier one.
    """

    def __init__(self, directory: Path, formatter: ReportFormatter | None = None) -> None:
        self.directory = directory
        self.formatter = formatter or ReportFormatter()

    def base_name(self, report: ValidationReport) -> str:
        moment = datetime.fromtimestamp(report.timestamp / 1000, tz=timezone.utc)
        millis = report.timestamp % 1000
        return f"validation_report_{moment.strftime('%Y%m%d_%H%M%S')}_{millis:03d}"

    def _free_base_name(self, report: ValidationReport, formats: list[ReportFormat]) -> str:
        base = self.base_name(report)
        candidate = base
        counter = 1
        while any((self.directory / f"{candidate}{EXTENSIONS[f]}").exists() for f in formats):
            candidate = f"{base}_{counter}"
            counter += 1
        return candidate

    def save(
        self,
        report: ValidationReport,
        formats: Iterable[ReportFormat] = (ReportFormat.MARKDOWN,),
    ) -> list[Path]:
        """Render and write the report in each requested format.

        Args:
            report: Report to write.
            formats: Formats to write; duplicates are written once.

        Returns:
            Paths of the written files, in the order requested.

        Raises:
            OSError: If the directory cannot be created or a file written.
        """
        self.directory.mkdir(parents=True, exist_ok=True)
        unique = list(dict.fromkeys(ReportFormat(f) for f in formats))
        base = self._free_base_name(report, unique)
        written: list[Path] = []
        for fmt in unique:
            path = self.directory / f"{base}{EXTENSIONS[fmt]}"
            path.write_text(self.formatter.format(report, fmt), encoding="utf-8")
            logger.info("Wrote %s report to %s", fmt.value, path)
            written.append(path)
        return written

    def list_reports(self) -> list[Path]:
        """Return saved report files, oldest first."""
        if not self.directory.is_dir():
            return []
        suffixes = {ext[ext.rindex("."):] for ext in EXTENSIONS.values()}
        return sorted(
            (
                p
                for p in self.directory.glob("validation_report_*")
                if p.is_file() and p.suffix in suffixes
            ),
            key=_saved_order,
        )

    def load(self, path: Path) -> ValidationReport:
        """Read back a report saved in JSON format.

        Relative paths are taken from the store directory.

        Raises:
            ReportLoadError: If the file is missing or does not hold a report.
        """
        return load_report(path if path.is_absolute() else self.directory / path)

    def latest(self) -> ValidationReport | None:
        """Return the most recently saved JSON report, or None if there is none."""
        saved = [p for p in self.list_reports() if p.suffix == ".json"]
        if not saved:
            return None
        return self.load(saved[-1])


def _saved_order(path: Path) -> tuple[str, int, str]:
    match = REPORT_NAME.match(path.name)
    if match is None:
        return (path.name, 0, path.name)
    return (match.group(1), int(match.group(2) or 0), path.name)
