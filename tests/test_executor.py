"""
Tests for command execution (dev_inventory/executor.py).
"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from dev_inventory.common import first_token, strip_ansi
from dev_inventory.executor import EXIT_NOT_STARTED, EXIT_TIMED_OUT, CommandExecutor


def completed(returncode=0, stdout="", stderr=""):
    proc = MagicMock()
    proc.returncode = returncode
    proc.stdout = stdout
    proc.stderr = stderr
    return proc


class TestExecuteSafe:
    """execute_safe never raises."""

    @patch("dev_inventory.executor.subprocess.run")
    def test_success(self, mock_run):
        mock_run.return_value = completed(0, "v18.17.0\n")
        result = CommandExecutor(timeout=5).execute_safe("node --version")
        assert result.success
        assert result.stdout == "v18.17.0\n"
        assert result.exit_code == 0
        args, kwargs = mock_run.call_args
        assert args[0] == "node --version"
        assert kwargs["shell"] is True
        assert kwargs["timeout"] == 5
        assert kwargs["stdin"] == subprocess.DEVNULL

    @patch("dev_inventory.executor.subprocess.run")
    def test_non_zero_exit(self, mock_run):
        mock_run.return_value = completed(127, "", "node: not found")
        result = CommandExecutor().execute_safe("node --version")
        assert not result.success
        assert result.exit_code == 127
        assert result.stderr == "node: not found"

    @patch("dev_inventory.executor.subprocess.run")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="slow", timeout=2)
        result = CommandExecutor(timeout=2).execute_safe("slow --version")
        assert not result.success
        assert result.timed_out
        assert result.exit_code == EXIT_TIMED_OUT
        assert result.stderr == "Command timed out after 2s"

    @patch("dev_inventory.executor.subprocess.run")
    def test_os_error(self, mock_run):
        mock_run.side_effect = OSError("no shell")
        result = CommandExecutor().execute_safe("anything")
        assert not result.success
        assert result.exit_code == EXIT_NOT_STARTED
        assert "no shell" in result.stderr

    @patch("dev_inventory.executor.subprocess.run")
    def test_strips_ansi(self, mock_run):
        mock_run.return_value = completed(0, "\x1b[32m1.2.3\x1b[0m")
        assert CommandExecutor().execute_safe("x --version").stdout == "1.2.3"

    @patch("dev_inventory.executor.subprocess.run")
    def test_no_color_env(self, mock_run):
        mock_run.return_value = completed()
        CommandExecutor().execute_safe("x")
        env = mock_run.call_args.kwargs["env"]
        assert env["NO_COLOR"] == "1"
        assert env["TERM"] == "dumb"

    def test_empty_command(self):
        result = CommandExecutor().execute_safe("   ")
        assert not result.success
        assert result.exit_code == EXIT_NOT_STARTED

    def test_invalid_timeout(self):
        with pytest.raises(ValueError):
            CommandExecutor(timeout=0)

    def test_result_to_dict(self):
        result = CommandExecutor().execute_safe("")
        assert result.to_dict()["success"] is False


class TestGetToolPath:
    """Executable resolution."""

    @patch("dev_inventory.executor.shutil.which", return_value="/usr/bin/python3")
    def test_uses_first_token(self, mock_which):
        assert CommandExecutor().get_tool_path("python3 -m pip") == "/usr/bin/python3"
        mock_which.assert_called_once_with("python3")

    @patch("dev_inventory.executor.shutil.which", return_value=None)
    def test_not_found(self, mock_which):
        assert CommandExecutor().get_tool_path("nothing") is None

    def test_absolute_path(self, tmp_path):
        exe = tmp_path / "tool"
        exe.write_text("")
        assert CommandExecutor().get_tool_path(f'"{exe}" --version') == str(exe)

    def test_absolute_missing(self, tmp_path):
        assert CommandExecutor().get_tool_path(str(tmp_path / "missing")) is None

    def test_blank(self):
        assert CommandExecutor().get_tool_path("") is None


class TestCommonHelpers:
    """Helpers in dev_inventory/common.py."""

    def test_strip_ansi_empty(self):
        assert strip_ansi("") == ""

    def test_first_token_quoted(self):
        assert first_token('"C:\\Program Files\\Python\\python.exe" --version') == "C:\\Program Files\\Python\\python.exe"

    def test_first_token_plain(self):
        assert first_token("py -m pip") == "py"

    def test_first_token_blank(self):
        assert first_token("  ") == ""


class TestTimeoutFromEnv:
    """DEV_INVENTORY_TIMEOUT_SECONDS is read when an executor is built."""

    def test_unset(self, monkeypatch):
        monkeypatch.delenv("DEV_INVENTORY_TIMEOUT_SECONDS", raising=False)
        assert CommandExecutor().timeout == 10

    def test_set(self, monkeypatch):
        monkeypatch.setenv("DEV_INVENTORY_TIMEOUT_SECONDS", "2.5")
        assert CommandExecutor().timeout == 2.5

    def test_explicit_timeout_wins(self, monkeypatch):
        monkeypatch.setenv("DEV_INVENTORY_TIMEOUT_SECONDS", "2.5")
        assert CommandExecutor(timeout=7).timeout == 7

    def test_not_a_number(self, monkeypatch):
        monkeypatch.setenv("DEV_INVENTORY_TIMEOUT_SECONDS", "soon")
        with pytest.raises(ValueError, match="DEV_INVENTORY_TIMEOUT_SECONDS"):
            CommandExecutor()
