"""Integration tests for CLI commands.

Each test points the CLI at a SQLite file through a TOML config and
invokes commands with Typer's CliRunner.
"""

from __future__ import annotations

import json
from pathlib import Path
from uuid import uuid4

import pytest
from typer.testing import CliRunner

from contentreview.main import app


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """TOML config using a throwaway SQLite database."""
    path = tmp_path / "contentreview.toml"
    path.write_text(
        "[database]\n"
        f'url = "sqlite+aiosqlite:///{tmp_path / "cms.db"}"\n'
        "\n"
        "[logging]\n"
        'level = "WARNING"\n'
    )
    return path


@pytest.fixture
def installed(cli_runner: CliRunner, config_file: Path) -> Path:
    result = cli_runner.invoke(app, ["--config", str(config_file), "install"])
    assert result.exit_code == 0, result.output
    return config_file


class TestInstall:
    def test_install_creates_schema_and_job(self, cli_runner, config_file) -> None:
        result = cli_runner.invoke(app, ["--config", str(config_file), "install"])

        assert result.exit_code == 0, result.output
        assert "Schema installed" in result.output
        assert "Notification job runs after" in result.output

    def test_install_twice(self, cli_runner, installed) -> None:
        result = cli_runner.invoke(app, ["--config", str(installed), "install"])

        assert result.exit_code == 0, result.output

    def test_missing_config_file(self, cli_runner, tmp_path) -> None:
        result = cli_runner.invoke(app, ["--config", str(tmp_path / "missing.toml"), "install"])

        assert result.exit_code != 0


class TestReportCommand:
    def test_empty_report_as_json(self, cli_runner, installed) -> None:
        result = cli_runner.invoke(app, ["--config", str(installed), "report", "--format", "json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == []

    def test_empty_report_as_table(self, cli_runner, installed) -> None:
        result = cli_runner.invoke(app, ["--config", str(installed), "report"])

        assert result.exit_code == 0, result.output
        assert "No pages are due for review" in result.output

    def test_invalid_format(self, cli_runner, installed) -> None:
        result = cli_runner.invoke(app, ["--config", str(installed), "report", "--format", "xml"])

        assert result.exit_code == 1
        assert "Invalid format" in result.output

    def test_unknown_owner(self, cli_runner, installed) -> None:
        result = cli_runner.invoke(
            app, ["--config", str(installed), "report", "--owner", str(uuid4())]
        )

        assert result.exit_code == 1
        assert "Error building report" in result.output


class TestReviewCommands:
    def test_schedule(self, cli_runner, config_file) -> None:
        result = cli_runner.invoke(app, ["--config", str(config_file), "review", "schedule"])

        assert result.exit_code == 0, result.output
        assert "12 months" in result.output
        assert "No automatic review date" in result.output

    def test_status_unknown_page(self, cli_runner, installed) -> None:
        result = cli_runner.invoke(
            app, ["--config", str(installed), "review", "status", str(uuid4())]
        )

        assert result.exit_code == 1
        assert "Error reading review state" in result.output

    def test_mark_unknown_page(self, cli_runner, installed) -> None:
        result = cli_runner.invoke(
            app, ["--config", str(installed), "review", "mark", str(uuid4()), str(uuid4())]
        )

        assert result.exit_code == 1
        assert "Error marking page reviewed" in result.output


    def test_publish_unknown_page(self, cli_runner, installed) -> None:
        result = cli_runner.invoke(
            app, ["--config", str(installed), "review", "publish", str(uuid4())]
        )

        assert result.exit_code == 1
        assert "Error publishing page" in result.output

    def test_unpublish_unknown_page(self, cli_runner, installed) -> None:
        result = cli_runner.invoke(
            app, ["--config", str(installed), "review", "unpublish", str(uuid4())]
        )

        assert result.exit_code == 1
        assert "Error unpublishing page" in result.output


class TestJobsCommand:
    def test_run_notifications(self, cli_runner, installed) -> None:
        result = cli_runner.invoke(
            app, ["--config", str(installed), "jobs", "run-notifications"]
        )

        assert result.exit_code == 0, result.output
        assert "No owners have pages due for review" in result.output
