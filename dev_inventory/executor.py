"""
Command execution for tool probes.

The executor is the only place that spawns processes. ``execute_safe`` never
raises: every failure mode (non-zero exit, timeout, missing shell, OS error)
comes back as a ``CommandResult`` with ``success=False``.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from dataclasses import dataclass

from .common import first_token, strip_ansi

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
TIMEOUT_ENV_VAR = "DEV_INVENTORY_TIMEOUT_SECONDS"

# Exit code reported when the process could not be started at all
EXIT_NOT_STARTED = 127
EXIT_TIMED_OUT = -1


def timeout_from_env() -> float:
    """
    Timeout from DEV_INVENTORY_TIMEOUT_SECONDS, or the built-in default.

    Raises:
        ValueError: If the variable is set but not a number
    """
    raw = os.environ.get(TIMEOUT_ENV_VAR, "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid {TIMEOUT_ENV_VAR}: {raw!r}. Must be a number of seconds")


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of one shell command.

    Attributes:
        success: True iff the command exited with code 0
        stdout: Standard output, ANSI sequences removed
        stderr: Standard error, ANSI sequences removed
        exit_code: Process exit code (-1 on timeout, 127 if not started)
        timed_out: Whether the command was killed by the timeout
        duration_seconds: Wall time spent waiting for the command
    """
    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    timed_out: bool = False
    duration_seconds: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "exit_code": self.exit_code,
            "timed_out": self.timed_out,
            "duration_seconds": self.duration_seconds,
        }


class CommandExecutor:
    """
    Run shell command strings with an enforced timeout.

    Attributes:
        timeout: Seconds before a command is killed (DEV_INVENTORY_TIMEOUT_SECONDS
            when not given)
    """

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout if timeout is not None else timeout_from_env()
        if self.timeout <= 0:
            raise ValueError(f"Invalid timeout: {self.timeout}. Must be positive")

    def execute_safe(self, command: str) -> CommandResult:
        """
        Execute a command string through the shell.

        Args:
            command: Full command line, e.g. 'node --version'

        Returns:
            CommandResult; never raises
        """
        if not command or not command.strip():
            return CommandResult(success=False, stderr="Empty command", exit_code=EXIT_NOT_STARTED)

        start = time.monotonic()
        try:
            proc = subprocess.run(
                command,
                shell=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,  # Probes must never wait for input
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
                env={**os.environ, "TERM": "dumb", "NO_COLOR": "1"},
            )
        except subprocess.TimeoutExpired:
            duration = time.monotonic() - start
            logger.debug(f"Command timed out after {self.timeout}s: {command}")
            return CommandResult(
                success=False,
                stderr=f"Command timed out after {self.timeout:g}s",
                exit_code=EXIT_TIMED_OUT,
                timed_out=True,
                duration_seconds=duration,
            )
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            duration = time.monotonic() - start
            logger.debug(f"Command could not be started: {command}: {e}")
            return CommandResult(
                success=False,
                stderr=str(e),
                exit_code=EXIT_NOT_STARTED,
                duration_seconds=duration,
            )

        duration = time.monotonic() - start
        logger.debug(f"'{command}' exited {proc.returncode} in {duration:.2f}s")
        return CommandResult(
            success=proc.returncode == 0,
            stdout=strip_ansi(proc.stdout or ""),
            stderr=strip_ansi(proc.stderr or ""),
            exit_code=proc.returncode,
            duration_seconds=duration,
        )

    def get_tool_path(self, command: str) -> str | None:
        """
        Find the absolute path of the executable a command would run.

        Args:
            command: Bare executable name or a full command ('py -m pip' -> py)

        Returns:
            Absolute path, or None when not on PATH
        """
        executable = first_token(command)
        if not executable:
            return None
        if os.path.isabs(executable):
            return executable if os.path.isfile(executable) else None
        path = shutil.which(executable)
        return os.path.abspath(path) if path else None
