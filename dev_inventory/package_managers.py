"""
Package manager command templates.

Used for tools whose lifecycle (install, update, uninstall) goes through a
language package manager rather than a system installer, such as the AI
coding-assistant CLIs.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from .common import vlog
from .executor import CommandExecutor

# Managers found usable are remembered for the lifetime of the process.
# Failed checks are not cached.
_PM_CACHE: dict[str, bool] = {}
_PM_CACHE_LOCK = threading.Lock()


@dataclass(frozen=True)
class PackageManager:
    """
    Package manager definition.

    Attributes:
        name: Identifier ('npm', 'pipx')
        display_name: Human-readable name
        check_command: Command that succeeds when the manager is usable
        install_template: Install command, ``{package}`` placeholder
        update_template: Update command, ``{package}`` placeholder
        uninstall_template: Uninstall command, ``{package}`` placeholder
    """
    name: str
    display_name: str
    check_command: str
    install_template: str
    update_template: str
    uninstall_template: str

    def install_command(self, package: str) -> str:
        return self.install_template.format(package=package)

    def update_command(self, package: str) -> str:
        return self.update_template.format(package=package)

    def uninstall_command(self, package: str) -> str:
        return self.uninstall_template.format(package=package)

    def is_available(self, executor: CommandExecutor, verbose: bool = False) -> bool:
        """
        Check whether this package manager can be run.

        Args:
            executor: Executor used for the check command
            verbose: Enable verbose logging

        Returns:
            True if the check command succeeded (only successes are cached)
        """
        with _PM_CACHE_LOCK:
            if _PM_CACHE.get(self.name):
                return True

        available = executor.execute_safe(self.check_command).success
        vlog(f"Package manager {self.name}: {'available' if available else 'not available'}", verbose)

        if available:
            with _PM_CACHE_LOCK:
                _PM_CACHE[self.name] = True
        return available


PACKAGE_MANAGERS: tuple[PackageManager, ...] = (
    PackageManager(
        name="npm",
        display_name="npm",
        check_command="npm --version",
        install_template="npm install -g {package}",
        update_template="npm update -g {package}",
        uninstall_template="npm uninstall -g {package}",
    ),
    PackageManager(
        name="pipx",
        display_name="pipx",
        check_command="pipx --version",
        install_template="pipx install {package}",
        update_template="pipx upgrade {package}",
        uninstall_template="pipx uninstall {package}",
    ),
    PackageManager(
        name="brew",
        display_name="Homebrew",
        check_command="brew --version",
        install_template="brew install {package}",
        update_template="brew upgrade {package}",
        uninstall_template="brew uninstall {package}",
    ),
)

PACKAGE_MANAGER_MAP: dict[str, PackageManager] = {pm.name: pm for pm in PACKAGE_MANAGERS}


def get_package_manager(name: str) -> PackageManager | None:
    """Look up a package manager by name."""
    return PACKAGE_MANAGER_MAP.get(name)


def clear_availability_cache() -> None:
    """Forget cached availability checks."""
    with _PM_CACHE_LOCK:
        _PM_CACHE.clear()
