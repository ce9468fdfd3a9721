"""Tests for the command-line interface."""

import json
from unittest.mock import patch

from click.testing import CliRunner

from testlauncher import __version__
from testlauncher.cli import main


class TestRunCommand:
    """Tests for `testlauncher run`."""

    def test_passing_run_exits_zero(self, python_command):
        """Test a passing suite exits with 0."""
        result = CliRunner().invoke(main, ["run", "--command", python_command("print('suite ok')")])

        assert result.exit_code == 0
        assert "suite ok" in result.output

    def test_failing_run_exits_one(self, python_command):
        """Test a failing suite exits with 1."""
        result = CliRunner().invoke(main, ["run", "--command", python_command("raise SystemExit(4)")])

        assert result.exit_code == 1

    def test_bad_option_exits_one(self):
        """Test an unknown launcher option is reported."""
        result = CliRunner().invoke(main, ["run", "--no-such-option"])

        assert result.exit_code == 1

    def test_missing_command_exits_one(self):
        """Test a command that cannot start is reported."""
        result = CliRunner().invoke(main, ["run", "--command", "nonexistentcommand123"])

        assert result.exit_code == 1

    def test_launcher_help(self):
        """Test --help after run shows the launcher options."""
        result = CliRunner().invoke(main, ["run", "--help"])

        assert result.exit_code == 0
        assert "--remote" in result.output


class TestServeCommand:
    """Tests for `testlauncher serve`."""

    def test_serve_passes_host_and_port(self):
        """Test serve starts the server with the given address."""
        with patch("testlauncher.remote.server.serve") as serve:
            result = CliRunner().invoke(main, ["serve", "--port", "9100"])

        assert result.exit_code == 0
        serve.assert_called_once_with(host="127.0.0.1", port=9100, log_level="warning")


class TestInitCommand:
    """Tests for `testlauncher init`."""

    def test_creates_config(self, isolated_cwd):
        """Test init writes an example configuration."""
        result = CliRunner().invoke(main, ["init"])

        assert result.exit_code == 0
        data = json.loads((isolated_cwd / "testlauncher.json").read_text())
        assert data["test"]["command"] == "pytest"

    def test_refuses_to_overwrite(self, isolated_cwd):
        """Test init keeps an existing file without --force."""
        (isolated_cwd / "testlauncher.json").write_text("{}")

        result = CliRunner().invoke(main, ["init"])

        assert result.exit_code == 1
        assert (isolated_cwd / "testlauncher.json").read_text() == "{}"

    def test_force_overwrites(self, isolated_cwd):
        """Test init --force replaces an existing file."""
        (isolated_cwd / "testlauncher.json").write_text("{}")

        result = CliRunner().invoke(main, ["init", "--force"])

        assert result.exit_code == 0
        assert "test" in json.loads((isolated_cwd / "testlauncher.json").read_text())


def test_version():
    """Test the version option."""
    result = CliRunner().invoke(main, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
