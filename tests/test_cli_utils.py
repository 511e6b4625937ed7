"""Tests for projaudit CLI utility functions."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from projaudit.cli_utils import (
    EXIT_SUCCESS,
    EXIT_USER_ERROR,
    EXIT_VALIDATION_FAILURE,
    configure_logging,
    ensure_path_exists,
    error,
    resolve_path,
    success,
    warning,
    wire_config,
)

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in list(os.environ):
        if var.startswith("PROJAUDIT_"):
            monkeypatch.delenv(var)


class TestMessages:
    """Tests for the styled message helpers."""

    def test_exit_codes_are_distinct(self) -> None:
        """Test success, user error and validation failure differ."""
        assert len({EXIT_SUCCESS, EXIT_USER_ERROR, EXIT_VALIDATION_FAILURE}) == 3

    def test_error_exits_with_user_error_code_by_default(self) -> None:
        """Test that error() exits with EXIT_USER_ERROR by default."""
        app = typer.Typer()

        @app.command()
        def cmd() -> None:
            error("Test error message")

        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_USER_ERROR
        assert "Test error message" in result.output

    def test_error_custom_exit_code(self) -> None:
        """Test that error() can use a custom exit code."""
        app = typer.Typer()

        @app.command()
        def cmd() -> None:
            error("Below threshold", exit_code=EXIT_VALIDATION_FAILURE)

        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_VALIDATION_FAILURE

    def test_success_and_warning(self) -> None:
        """Test success and warning print their messages without exiting."""
        app = typer.Typer()

        @app.command()
        def cmd() -> None:
            success("saved")
            warning("careful")

        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_SUCCESS
        assert "Success: saved" in result.output
        assert "Warning: careful" in result.output


class TestLogging:
    """Tests for configure_logging."""

    @pytest.mark.parametrize(
        ("verbose", "quiet", "level"),
        [
            (False, False, logging.WARNING),
            (True, False, logging.INFO),
            (False, True, logging.ERROR),
            (True, True, logging.INFO),
        ],
    )
    def test_levels(self, verbose: bool, quiet: bool, level: int) -> None:
        """Test --verbose and --quiet select the root level."""
        configure_logging(verbose=verbose, quiet=quiet)
        assert logging.getLogger().level == level


class TestPathResolution:
    """Tests for resolve_path and ensure_path_exists."""

    def test_relative_to_base(self, tmp_path: Path) -> None:
        """Test relative paths resolve against the base path."""
        assert resolve_path("sub/dir", tmp_path) == (tmp_path / "sub" / "dir").resolve()

    def test_absolute_kept(self, tmp_path: Path) -> None:
        """Test absolute paths ignore the base path."""
        assert resolve_path(tmp_path, Path("/elsewhere")) == tmp_path.resolve()

    def test_existing_dir(self, tmp_path: Path) -> None:
        """Test an existing directory is returned unchanged."""
        assert ensure_path_exists(tmp_path, must_be_dir=True) == tmp_path

    def test_missing_path_exits(self, tmp_path: Path) -> None:
        """Test a missing path exits with EXIT_USER_ERROR."""
        with pytest.raises(typer.Exit) as exc_info:
            ensure_path_exists(tmp_path / "missing", path_type="Project directory")
        assert exc_info.value.exit_code == EXIT_USER_ERROR

    def test_file_is_not_dir(self, tmp_path: Path) -> None:
        """Test a file fails must_be_dir."""
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(typer.Exit):
            ensure_path_exists(path, must_be_dir=True)

    def test_dir_is_not_file(self, tmp_path: Path) -> None:
        """Test a directory fails must_be_file."""
        with pytest.raises(typer.Exit):
            ensure_path_exists(tmp_path, must_be_file=True)


class TestConfigWiring:
    """Tests for wire_config."""

    def test_cli_values_override(self, tmp_path: Path) -> None:
        """Test explicit options win over the rc file."""
        (tmp_path / ".projauditrc").write_text('output_format = "markdown"\nwebhook_timeout = 9\n')
        config = wire_config(output_format="json", parallel=False, start_dir=tmp_path)
        assert config.output_format == "json"
        assert config.parallel is False
        assert config.webhook_timeout == 9

    def test_none_falls_through(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test unset options fall through to the environment."""
        monkeypatch.setenv("PROJAUDIT_FIXTURES", "findings.yaml")
        assert wire_config(start_dir=tmp_path).fixtures == "findings.yaml"

    def test_invalid_config_exits(self, tmp_path: Path) -> None:
        """Test an invalid value exits with EXIT_USER_ERROR."""
        with pytest.raises(typer.Exit) as exc_info:
            wire_config(webhook_timeout=-1.0, start_dir=tmp_path)
        assert exc_info.value.exit_code == EXIT_USER_ERROR
