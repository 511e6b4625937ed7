"""projaudit CLI - Main entry point."""

from __future__ import annotations

import dataclasses
import json

import typer
from rich.console import Console
from rich.table import Table

from projaudit import __version__
from projaudit.cli_utils import (
    EXIT_USER_ERROR,
    EXIT_VALIDATION_FAILURE,
    configure_logging,
    ensure_path_exists,
    error,
    fixtures_option,
    format_option,
    resolve_path,
    success,
    timeout_option,
    warning,
    wire_config,
)
from projaudit.errors import FixtureError, ReportLoadError, ValidationSystemError
from projaudit.reporting import ReportFormat, format_comparison
from projaudit.reporting.codec import to_jsonable
from projaudit.system import create_validation_system

app = typer.Typer(
    name="projaudit",
    help="Project health validation with scored reports.",
    add_completion=False,
)

console = Console()


# -----------------------------------------------------------------------------
# Version and Main Callbacks
# -----------------------------------------------------------------------------


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"projaudit version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Project health validation - scored reports across imports, webhooks, UI data flow and DI."""
    pass


# -----------------------------------------------------------------------------
# Run Command
# -----------------------------------------------------------------------------


@app.command()
def run(
    path: str = typer.Argument(
        ".",
        help="Project directory to validate. Defaults to current directory.",
    ),
    fixtures: str | None = fixtures_option(),
    output_format: str | None = format_option(),
    sequential: bool = typer.Option(
        False,
        "--sequential",
        help="Run validator families one at a time.",
    ),
    timeout: float | None = timeout_option(),
    output_dir: str | None = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Also save the rendered report to this directory.",
    ),
    compare_with: str | None = typer.Option(
        None,
        "--compare-with",
        "-c",
        help="Saved JSON report of an earlier run to compare against.",
    ),
    fail_under: int | None = typer.Option(
        None,
        "--fail-under",
        min=0,
        max=100,
        help="Exit with code 2 if the overall score is below this value.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only print errors.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log validator progress to stderr.",
    ),
) -> None:
    """Run every validator family and print the report.

    Exit codes:
      0 - Validation ran (and met --fail-under, if given)
      1 - Bad project path, configuration, fixture or earlier report
      2 - Overall score is below --fail-under

    With --compare-with, a comparison against the earlier run follows the
    report. JSON output then becomes {"report": ..., "comparison": ...}.
    """
    configure_logging(verbose=verbose, quiet=quiet)

    project_root = ensure_path_exists(
        resolve_path(path), path_type="Project directory", must_be_dir=True
    )
    config = wire_config(
        parallel=False if sequential else None,
        webhook_timeout=timeout,
        output_format=output_format,
        fixtures=str(resolve_path(fixtures)) if fixtures else None,
        report_dir=str(resolve_path(output_dir)) if output_dir else None,
        start_dir=project_root,
    )

    try:
        system = create_validation_system(config=config, base_path=project_root)
        previous = system.load_report(resolve_path(compare_with)) if compare_with else None
    except (FixtureError, ReportLoadError) as e:
        error(str(e))

    try:
        report = system.execute_comprehensive_validation(project_root)
    except ValidationSystemError as e:
        error(f"Validation failed: {e}")

    comparison = system.compare_reports(previous, report) if previous is not None else None
    fmt = ReportFormat(config.output_format)
    if not quiet:
        rendered = system.format_report(report, fmt)
        if fmt is ReportFormat.JSON and comparison is not None:
            console.print_json(
                json.dumps({"report": to_jsonable(report), "comparison": to_jsonable(comparison)})
            )
        elif fmt is ReportFormat.JSON:
            console.print_json(rendered)
        else:
            typer.echo(rendered, nl=False)
            if comparison is not None:
                typer.echo("")
                typer.echo(format_comparison(comparison), nl=False)

    if system.report_store is not None:
        try:
            written = system.save_report(report, [fmt])
        except OSError as e:
            error(f"Could not save report: {e}")
        if not quiet:
            for report_path in written:
                success(f"Report saved to {report_path}")

    score = report.summary.overall_score
    if fail_under is not None and score < fail_under:
        if not quiet:
            warning(f"Overall score {score} is below the required {fail_under}")
        raise typer.Exit(code=EXIT_VALIDATION_FAILURE)


# -----------------------------------------------------------------------------
# Status Command
# -----------------------------------------------------------------------------


@app.command()
def status(
    fixtures: str | None = fixtures_option(),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
) -> None:
    """Show the validation system status and available validators."""
    config = wire_config(fixtures=str(resolve_path(fixtures)) if fixtures else None)
    try:
        system = create_validation_system(config=config)
    except FixtureError as e:
        error(str(e), exit_code=EXIT_USER_ERROR)

    system_status = system.get_system_status()

    if json_output:
        console.print_json(json.dumps(dataclasses.asdict(system_status)))
        return

    table = Table(title="projaudit status")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Initialized", "yes" if system_status.is_initialized else "no")
    table.add_row("Version", system_status.version)
    table.add_row("Validators", "\n".join(system_status.available_validators))
    console.print(table)


if __name__ == "__main__":
    app()
