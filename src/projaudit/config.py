"""Configuration management for projaudit.

Handles configuration loading from multiple sources with precedence:
CLI args > environment variables > .projauditrc > pyproject.toml > defaults
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

OUTPUT_FORMATS = ("console", "markdown", "json", "summary")

RC_FILENAME = ".projauditrc"
ENV_PREFIX = "PROJAUDIT_"


@dataclass
class AuditConfig:
    """Configuration for a validation run.

    Attributes:
        parallel: Run validator families concurrently (default: True)
        webhook_timeout: Seconds the webhook family may take (default: 30.0)
        max_workers: Worker threads for concurrent runs (default: 4)
        output_format: One of console, markdown, json, summary (default: "console")
        fixtures: YAML findings fixture to validate with (default: None)
        report_dir: Directory rendered reports are saved to (default: None)
        include_info: List info-level findings in reports (default: True)
    """

    parallel: bool = True
    webhook_timeout: float = 30.0
    max_workers: int = 4
    output_format: str = "console"
    fixtures: str | None = None
    report_dir: str | None = None
    include_info: bool = True

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any configuration value is invalid.
        """
        if not isinstance(self.parallel, bool):
            raise ValueError("parallel must be a boolean")
        if not isinstance(self.include_info, bool):
            raise ValueError("include_info must be a boolean")

        if isinstance(self.webhook_timeout, bool) or not isinstance(
            self.webhook_timeout, (int, float)
        ):
            raise ValueError("webhook_timeout must be a number")
        if self.webhook_timeout <= 0:
            raise ValueError("webhook_timeout must be positive")

        if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int):
            raise ValueError("max_workers must be an integer")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"output_format must be one of: {', '.join(OUTPUT_FORMATS)}")

        if self.fixtures is not None and (not isinstance(self.fixtures, str) or not self.fixtures):
            raise ValueError("fixtures must be a non-empty string")
        if self.report_dir is not None and (
            not isinstance(self.report_dir, str) or not self.report_dir
        ):
            raise ValueError("report_dir must be a non-empty string")

    @classmethod
    def for_ci(cls) -> AuditConfig:
        """Preset for CI: console output without info findings, 60s webhook budget."""
        return cls(output_format="console", include_info=False, webhook_timeout=60.0)

    @classmethod
    def for_development(cls) -> AuditConfig:
        """Preset for local work: Markdown output, 120s webhook budget."""
        return cls(output_format="markdown", webhook_timeout=120.0)

    def get_fixtures_path(self, base_path: Path | None = None) -> Path | None:
        """Get the full path to the fixture file, if one is configured."""
        if self.fixtures is None:
            return None
        base = base_path or Path.cwd()
        return base / self.fixtures

    def get_report_path(self, base_path: Path | None = None) -> Path | None:
        """Get the full path to the report directory, if one is configured."""
        if self.report_dir is None:
            return None
        base = base_path or Path.cwd()
        return base / self.report_dir


PRESETS = {
    "default": AuditConfig,
    "ci": AuditConfig.for_ci,
    "development": AuditConfig.for_development,
}


def _get_config_field_names() -> set[str]:
    return {f.name for f in fields(AuditConfig)}


def find_config_file(filename: str = RC_FILENAME, start_dir: Path | None = None) -> Path | None:
    """Find a configuration file by traversing up the directory tree.

    Args:
        filename: Name of the config file to find.
        start_dir: Directory to start searching from. Defaults to current directory.

    Returns:
        Path to the config file if found, None otherwise.
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        config_path = current / filename
        if config_path.is_file():
            return config_path

        parent = current.parent
        if parent == current:
            return None
        current = parent


def _load_toml_file(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        result: dict[str, Any] = tomllib.load(f)
        return result


def _load_from_rc(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from the .projauditrc file, or {} if there is none."""
    config_path = find_config_file(RC_FILENAME, start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
    except (tomllib.TOMLDecodeError, OSError):
        return {}
    valid_fields = _get_config_field_names()
    return {k: v for k, v in data.items() if k in valid_fields}


def _load_from_pyproject(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from the pyproject.toml [tool.projaudit] section."""
    config_path = find_config_file("pyproject.toml", start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
    except (tomllib.TOMLDecodeError, OSError):
        return {}
    section = data.get("tool", {}).get("projaudit", {})
    valid_fields = _get_config_field_names()
    return {k: v for k, v in section.items() if k in valid_fields}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _parse_number(name: str, value: str, kind: type, label: str) -> Any:
    try:
        return kind(value)
    except ValueError:
        raise ValueError(f"{name} must be {label}, got {value!r}") from None


def _load_from_env() -> dict[str, Any]:
    """Load configuration from environment variables.

    Variables are prefixed with PROJAUDIT_ and use uppercase names, for
    example PROJAUDIT_WEBHOOK_TIMEOUT or PROJAUDIT_OUTPUT_FORMAT.

    Raises:
        ValueError: If a variable cannot be converted to its field type.
    """
    result: dict[str, Any] = {}
    for key in sorted(_get_config_field_names()):
        env_var = f"{ENV_PREFIX}{key.upper()}"
        value = os.environ.get(env_var)
        if value is None:
            continue
        if key in ("parallel", "include_info"):
            result[key] = _parse_bool(env_var, value)
        elif key == "webhook_timeout":
            result[key] = _parse_number(env_var, value, float, "a number")
        elif key == "max_workers":
            result[key] = _parse_number(env_var, value, int, "an integer")
        else:
            result[key] = value
    return result


def _merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge configuration dictionaries; later ones win, None values are skipped."""
    result: dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            if value is not None:
                result[key] = value
    return result


def load_config(
    cli_overrides: dict[str, Any] | None = None,
    start_dir: Path | None = None,
) -> AuditConfig:
    """Load configuration with full precedence chain.

    Precedence (highest to lowest):
    1. CLI arguments (cli_overrides)
    2. Environment variables (PROJAUDIT_*)
    3. .projauditrc file
    4. pyproject.toml [tool.projaudit] section
    5. Default values

    Args:
        cli_overrides: Configuration overrides from CLI arguments.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved AuditConfig instance.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    pyproject_config = _load_from_pyproject(start_dir)
    rc_config = _load_from_rc(start_dir)
    env_config = _load_from_env()

    valid_fields = _get_config_field_names()
    cli_config = {
        k: v for k, v in (cli_overrides or {}).items() if k in valid_fields and v is not None
    }

    merged = _merge_configs(pyproject_config, rc_config, env_config, cli_config)
    return AuditConfig(**merged)
