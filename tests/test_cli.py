"""Tests for the click CLI."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from timeblock.cli import main

BAD_WORK_HOURS = {"WORK_HOURS": "nine-five", "WORK_START_HOUR": "8"}


@pytest.fixture(autouse=True)
def no_config_file(tmp_path):
    with patch("timeblock.config.CONFIG_FILE", tmp_path / "timeblock.conf"):
        yield


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def payload_file(tmp_path):
    path = tmp_path / "task.json"
    path.write_text("{}")
    return path


class TestConfigurationErrors:
    @patch("uvicorn.run")
    def test_serve_reports_bad_work_hours(self, mock_run, runner):
        result = runner.invoke(main, ["serve"], env=BAD_WORK_HOURS)

        assert result.exit_code == 1
        assert "Configuration error" in result.output
        mock_run.assert_not_called()

    def test_check_store_reports_bad_work_hours(self, runner):
        result = runner.invoke(main, ["check-store"], env=BAD_WORK_HOURS)

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_schedule_reports_bad_work_hours(self, runner, payload_file):
        result = runner.invoke(main, ["schedule", str(payload_file), "--dry-run"], env=BAD_WORK_HOURS)

        assert result.exit_code == 1
        assert "Configuration error" in result.output


class TestServe:
    @patch("uvicorn.run")
    def test_starts_app_factory(self, mock_run, runner):
        result = runner.invoke(main, ["serve", "--port", "8080"])

        assert result.exit_code == 0
        mock_run.assert_called_once_with("timeblock.api:create_app", factory=True, host="0.0.0.0", port=8080)
