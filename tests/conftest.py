"""
Shared fixtures: a scripted executor so no test spawns real processes.
"""

import threading
import time

import pytest

from dev_inventory.common import first_token
from dev_inventory.environment import HostEnvironment
from dev_inventory.executor import CommandResult
from dev_inventory.package_managers import clear_availability_cache


def ok(stdout="", stderr=""):
    return CommandResult(success=True, stdout=stdout, stderr=stderr, exit_code=0)


def fail(stderr="command not found", exit_code=127):
    return CommandResult(success=False, stderr=stderr, exit_code=exit_code)


class FakeExecutor:
    """
    Executor double.

    Commands listed in ``responses`` return the given CommandResult; anything
    else fails like a missing binary. ``delays`` maps commands to seconds of
    sleep before answering. ``paths`` maps executables to get_tool_path results.
    """

    def __init__(self, responses=None, paths=None, delays=None, raises=None):
        self.responses = dict(responses or {})
        self.paths = dict(paths or {})
        self.delays = dict(delays or {})
        self.raises = dict(raises or {})
        self.calls = []
        self._lock = threading.Lock()

    def execute_safe(self, command):
        with self._lock:
            self.calls.append(command)
        if command in self.delays:
            time.sleep(self.delays[command])
        if command in self.raises:
            raise self.raises[command]
        return self.responses.get(command, fail())

    def get_tool_path(self, command):
        return self.paths.get(first_token(command))

    def count(self, command):
        with self._lock:
            return self.calls.count(command)


@pytest.fixture
def linux_host():
    return HostEnvironment(os_family="linux", env={"HOME": "/home/dev"})


@pytest.fixture
def windows_host(tmp_path):
    return HostEnvironment(
        os_family="win32",
        env={
            "LOCALAPPDATA": str(tmp_path / "Local"),
            "APPDATA": str(tmp_path / "Roaming"),
            "ProgramFiles": str(tmp_path / "Program Files"),
            "USERPROFILE": str(tmp_path),
        },
    )


@pytest.fixture(autouse=True)
def _fresh_package_manager_cache():
    clear_availability_cache()
    yield
    clear_availability_cache()
