"""CLI utility functions for projaudit.

Provides helper functions for:
- Config wiring: Extracting Typer CLI options and passing to load_config
- Path resolution: Resolving the project path argument
- Error formatting: Consistent user-friendly error messages with exit codes
- Logging setup for the command line
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, NoReturn

import typer

from projaudit.config import OUTPUT_FORMATS, AuditConfig, load_config

# Exit code conventions
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Bad path, config or fixture
EXIT_VALIDATION_FAILURE = 2  # Score below --fail-under

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


# -----------------------------------------------------------------------------
# Error Formatting Helpers
# -----------------------------------------------------------------------------


def error(msg: str, *, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Print an error message and exit with the given exit code.

    Raises:
        typer.Exit: Always raises to exit the program.
    """
    styled_prefix = typer.style("Error:", fg=typer.colors.RED, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)
    raise typer.Exit(code=exit_code)


def warning(msg: str) -> None:
    """Print a warning message to stderr."""
    styled_prefix = typer.style("Warning:", fg=typer.colors.YELLOW, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)


def success(msg: str) -> None:
    """Print a success message to stdout."""
    styled_prefix = typer.style("Success:", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"{styled_prefix} {msg}")


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure root logging for a CLI invocation.

    INFO with --verbose, ERROR with --quiet, WARNING otherwise. Log records
    go to stderr so rendered reports on stdout stay clean.
    """
    if verbose:
        level = logging.INFO
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


# -----------------------------------------------------------------------------
# Path Resolution Helper
# -----------------------------------------------------------------------------


def resolve_path(
    path: str | Path,
    base_path: Path | None = None,
) -> Path:
    """Resolve a path relative to a base path.

    Absolute paths are resolved as-is, relative paths against base_path
    (or cwd). Symlinks are resolved to their target.
    """
    p = Path(path)
    base = base_path or Path.cwd()
    return p.resolve() if p.is_absolute() else (base / p).resolve()


def ensure_path_exists(
    path: Path,
    path_type: str = "path",
    must_be_dir: bool = False,
    must_be_file: bool = False,
) -> Path:
    """Ensure a path exists and optionally check its type.

    Raises:
        typer.Exit: If the path doesn't exist or is the wrong type.
    """
    if not path.exists():
        error(f"{path_type} does not exist: {path}")

    if must_be_dir and not path.is_dir():
        error(f"{path_type} is not a directory: {path}")

    if must_be_file and not path.is_file():
        error(f"{path_type} is not a file: {path}")

    return path


# -----------------------------------------------------------------------------
# Config Wiring Helper
# -----------------------------------------------------------------------------


def wire_config(
    parallel: bool | None = None,
    webhook_timeout: float | None = None,
    output_format: str | None = None,
    fixtures: str | None = None,
    report_dir: str | None = None,
    start_dir: Path | None = None,
) -> AuditConfig:
    """Wire CLI options to load_config with appropriate overrides.

    Options left as None fall through to the environment, config files and
    defaults.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    cli_overrides: dict[str, Any] = {
        "parallel": parallel,
        "webhook_timeout": webhook_timeout,
        "output_format": output_format,
        "fixtures": fixtures,
        "report_dir": report_dir,
    }

    try:
        return load_config(cli_overrides=cli_overrides, start_dir=start_dir)
    except ValueError as e:
        error(f"Invalid configuration: {e}", exit_code=EXIT_USER_ERROR)


# -----------------------------------------------------------------------------
# Typer Option Factory Functions
# -----------------------------------------------------------------------------
# Typer consumes Option objects when decorating commands, so each command
# needs a fresh instance.


def fixtures_option() -> Any:
    return typer.Option(
        None,
        "--fixtures",
        "-f",
        help="YAML findings fixture to validate with.",
    )


def format_option() -> Any:
    return typer.Option(
        None,
        "--format",
        help=f"Report format: {', '.join(OUTPUT_FORMATS)} (default: console).",
    )


def timeout_option() -> Any:
    return typer.Option(
        None,
        "--timeout",
        "-t",
        help="Seconds the webhook check may take (default: 30).",
    )
