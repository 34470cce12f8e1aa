"""Tests for the Collectra command-line interface."""

from unittest.mock import MagicMock, patch

import pytest
import structlog
from click.testing import CliRunner

from collectra.cli import cli, format_amount, run_with_service
from collectra.core.config import get_settings
from collectra.infrastructure.persistence import database


def mock_server_settings() -> MagicMock:
    settings = MagicMock()
    settings.database_url = "sqlite+aiosqlite:///./collectra_data/collectra.db"
    settings.host = "0.0.0.0"
    settings.port = 8000
    settings.workers = 1
    settings.is_development = True
    settings.log_level = "INFO"
    settings.environment = "development"
    return settings


@pytest.fixture
def cli_database(tmp_path, monkeypatch):
    """Point the CLI at a fresh SQLite file."""
    monkeypatch.setenv("COLLECTRA_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/cli.db")
    monkeypatch.setenv("COLLECTRA_ENVIRONMENT", "development")
    monkeypatch.setenv("COLLECTRA_LOG_FORMAT", "console")
    get_settings.cache_clear()
    monkeypatch.setattr(database, "_db_manager", None)
    yield
    get_settings.cache_clear()


@pytest.fixture
def created_session(cli_database, create_input, actor):
    return run_with_service(lambda service: service.create_session(create_input, actor), commit=True)


def test_serve_invalid_workers_sqlite():
    runner = CliRunner()
    with patch("collectra.cli.get_settings", return_value=mock_server_settings()), patch("uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve", "--workers", "2"])

    assert result.exit_code == 1
    assert "Error: SQLite does not support multiple worker processes" in result.output
    mock_run.assert_not_called()


def test_serve_runs_uvicorn_with_overrides():
    runner = CliRunner()
    with patch("collectra.cli.get_settings", return_value=mock_server_settings()), patch("uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve", "--host", "127.0.0.1", "--port", "9000", "--no-reload"])

    assert result.exit_code == 0
    mock_run.assert_called_once()
    args, kwargs = mock_run.call_args
    assert args[0] == "collectra.infrastructure.api.app:app"
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9000
    assert kwargs["reload"] is False
    assert kwargs["log_level"] == "info"


def test_serve_reloads_in_development_by_default():
    runner = CliRunner()
    with patch("collectra.cli.get_settings", return_value=mock_server_settings()), patch("uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve"])

    assert result.exit_code == 0
    assert mock_run.call_args.kwargs["reload"] is True
    assert mock_run.call_args.kwargs["workers"] == 1


def test_format_amount():
    assert format_amount(None) == "-"
    assert format_amount(1234.5) == "1,234.5 kg"


def test_init_db_with_force(cli_database, tmp_path):
    result = CliRunner().invoke(cli, ["init-db", "--force"])

    assert result.exit_code == 0
    assert "Database initialized successfully." in result.output
    assert (tmp_path / "cli.db").exists()


def test_init_db_aborts_without_confirmation(cli_database):
    result = CliRunner().invoke(cli, ["init-db"], input="n\n")

    assert result.exit_code == 1
    assert "Database initialized successfully." not in result.output


def test_list_when_empty(cli_database):
    result = CliRunner().invoke(cli, ["list"])

    assert result.exit_code == 0
    assert "No collection sessions found." in result.output


def test_show_unknown_session(cli_database):
    result = CliRunner().invoke(cli, ["show", "missing"])

    assert result.exit_code == 1
    assert "Error: Collection session not found" in result.output


def test_list_and_show_session(created_session):
    runner = CliRunner()

    listed = runner.invoke(cli, ["list"])
    assert listed.exit_code == 0
    assert created_session.session_number in listed.output
    assert "Green Paper Mill" in listed.output

    filtered = runner.invoke(cli, ["list", "--status", "completed"])
    assert "No collection sessions found." in filtered.output

    shown = runner.invoke(cli, ["show", created_session.id])
    assert shown.exit_code == 0
    assert "Status:       planned" in shown.output
    assert "Estimated:    500.0 kg" in shown.output
    assert "Version:      1" in shown.output


def test_transition_and_report(created_session):
    runner = CliRunner()

    started = runner.invoke(
        cli, ["transition", created_session.id, "in-progress", "--actor-id", "user-1", "--expected-version", "1"]
    )
    assert started.exit_code == 0
    assert f"{created_session.session_number} is now in-progress (version 2)." in started.output

    report = runner.invoke(cli, ["report", created_session.id])
    assert report.exit_code == 0
    assert f"Session Report: {created_session.session_number}" in report.output
    assert "Status:           in-progress" in report.output


def test_transition_rejects_stale_version(created_session):
    result = CliRunner().invoke(
        cli, ["transition", created_session.id, "in-progress", "--expected-version", "7"]
    )

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_transition_rejects_invalid_edge(created_session):
    result = CliRunner().invoke(cli, ["transition", created_session.id, "completed"])

    assert result.exit_code == 1
    assert "Cannot transition session from 'planned' to 'completed'" in result.output


def test_run_with_service_binds_one_correlation_id_per_run(cli_database):
    async def read_context(service):
        return structlog.contextvars.get_contextvars()

    first = run_with_service(read_context)
    second = run_with_service(read_context)

    assert first["correlation_id"].startswith("cid_")
    assert second["correlation_id"].startswith("cid_")
    assert first["correlation_id"] != second["correlation_id"]
    assert "correlation_id" not in structlog.contextvars.get_contextvars()
