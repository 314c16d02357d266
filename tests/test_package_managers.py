"""
Tests for package manager definitions (dev_inventory/package_managers.py).
"""

from conftest import FakeExecutor, ok
from dev_inventory.package_managers import (
    PACKAGE_MANAGERS,
    clear_availability_cache,
    get_package_manager,
)


class TestCommands:
    """Command templates."""

    def test_npm(self):
        npm = get_package_manager("npm")
        assert npm.install_command("@openai/codex") == "npm install -g @openai/codex"
        assert npm.update_command("@openai/codex") == "npm update -g @openai/codex"
        assert npm.uninstall_command("@openai/codex") == "npm uninstall -g @openai/codex"

    def test_pipx(self):
        pipx = get_package_manager("pipx")
        assert pipx.update_command("aider-chat") == "pipx upgrade aider-chat"

    def test_unknown(self):
        assert get_package_manager("apt") is None

    def test_names_unique(self):
        names = [pm.name for pm in PACKAGE_MANAGERS]
        assert len(names) == len(set(names))


class TestAvailability:
    """Availability checks and their cache."""

    def test_available(self):
        executor = FakeExecutor(responses={"npm --version": ok("10.2.0")})
        assert get_package_manager("npm").is_available(executor)

    def test_not_available(self):
        assert not get_package_manager("pipx").is_available(FakeExecutor())

    def test_cached(self):
        executor = FakeExecutor(responses={"npm --version": ok("10.2.0")})
        npm = get_package_manager("npm")
        npm.is_available(executor)
        npm.is_available(executor)
        assert executor.count("npm --version") == 1

    def test_missing_manager_rechecked(self):
        executor = FakeExecutor()
        npm = get_package_manager("npm")
        assert not npm.is_available(executor)
        executor.responses["npm --version"] = ok("10.2.0")
        assert npm.is_available(executor)
        assert executor.count("npm --version") == 2

    def test_clear(self):
        executor = FakeExecutor(responses={"npm --version": ok("10.2.0")})
        npm = get_package_manager("npm")
        npm.is_available(executor)
        clear_availability_cache()
        npm.is_available(executor)
        assert executor.count("npm --version") == 2
