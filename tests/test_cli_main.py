"""Tests for the top-level CLI group."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

import dentbooks
from dentbooks.cli.main import cli


def test_help_does_not_open_database(cli_runner, tmp_path, monkeypatch):
    db_path = tmp_path / "never.db"
    monkeypatch.setenv("DENTBOOKS_DB_PATH", str(db_path))

    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "bookkeeping for S-Corp dental contractors" in result.output
    assert not db_path.exists()


def test_init_is_idempotent(cli_runner, temp_db):
    args = ["--db-path", temp_db.database_path, "init"]

    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "Created 12 default categories." in result.output
    assert "Wrote default settings." in result.output

    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "Categories already exist." in result.output
    assert "Setup already complete." in result.output


def test_db_path_from_environment(cli_runner, tmp_path):
    db_path = tmp_path / "books.db"
    env = {"DENTBOOKS_DB_PATH": str(db_path)}

    result = cli_runner.invoke(cli, ["init"], env=env)
    assert result.exit_code == 0
    assert db_path.exists()

    result = cli_runner.invoke(cli, ["category", "list", "--type", "income"], env=env)
    assert "Clinical Income" in result.output
    assert "Rent" not in result.output


def test_invalid_log_level(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "--log-level", "LOUD", "init"]
    )

    assert result.exit_code == 2
    assert "Invalid value for '--log-level'" in result.output


def test_debug_logging_goes_to_stderr(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "--log-level", "debug", "--log-json", "init"]
    )

    assert result.exit_code == 0
    assert '"event": "database_opened"' in result.output


def test_unknown_command(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "frobnicate"])

    assert result.exit_code == 2


@pytest.mark.parametrize(
    "module",
    [
        "dentbooks.cli.main",
        "dentbooks.database",
        "dentbooks.domain.transaction",
        "dentbooks.utils",
    ],
)
def test_module_imports_in_fresh_interpreter(module):
    src_dir = str(Path(dentbooks.__file__).resolve().parents[1])
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [src_dir, env.get("PYTHONPATH")]))

    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        capture_output=True,
        text=True,
        env=env,
    )

    assert result.returncode == 0, result.stderr


def test_domain_exports_services_lazily():
    from dentbooks import domain
    from dentbooks.domain.report import ReportService

    assert domain.ReportService is ReportService
    with pytest.raises(AttributeError):
        domain.NoSuchService
