"""
Tests for host environment handling (dev_inventory/environment.py).
"""

from unittest.mock import patch

import pytest

from dev_inventory.environment import (
    HostEnvironment,
    detect_host,
    expand_env_template,
    normalize_os_family,
)


class TestNormalizeOsFamily:
    """Tests for sys.platform normalisation."""

    @pytest.mark.parametrize("platform,expected", [
        ("win32", "win32"),
        ("cygwin", "win32"),
        ("darwin", "darwin"),
        ("linux", "linux"),
        ("freebsd13", "linux"),
        ("", "linux"),
        (None, "linux"),
    ])
    def test_mapping(self, platform, expected):
        assert normalize_os_family(platform) == expected


class TestHostEnvironment:
    """Tests for HostEnvironment."""

    def test_defaults(self):
        host = HostEnvironment()
        assert host.os_family == "linux"
        assert not host.is_windows

    def test_invalid_family(self):
        with pytest.raises(ValueError):
            HostEnvironment(os_family="beos")

    def test_immutable(self):
        host = HostEnvironment()
        with pytest.raises(AttributeError):
            host.os_family = "win32"

    def test_env_is_read_only_copy(self):
        source = {"HOME": "/home/dev"}
        host = HostEnvironment(env=source)
        source["HOME"] = "/elsewhere"
        assert host.getenv("HOME") == "/home/dev"
        with pytest.raises(TypeError):
            host.env["HOME"] = "x"

    def test_windows_lookup_case_insensitive(self):
        host = HostEnvironment(os_family="win32", env={"ProgramFiles": "C:\\Program Files"})
        assert host.getenv("PROGRAMFILES") == "C:\\Program Files"

    def test_posix_lookup_case_sensitive(self):
        host = HostEnvironment(os_family="linux", env={"Home": "/x"})
        assert host.getenv("HOME", "missing") == "missing"

    def test_str(self):
        assert "win32" in str(HostEnvironment(os_family="win32"))


class TestDetectHost:
    """Tests for detect_host."""

    def test_override(self):
        assert detect_host("darwin").os_family == "darwin"

    def test_auto(self):
        with patch("dev_inventory.environment.sys.platform", "win32"):
            assert detect_host("auto").os_family == "win32"

    def test_invalid_override(self):
        with pytest.raises(ValueError):
            detect_host("plan9")

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("DEV_INVENTORY_TEST_VAR", "yes")
        assert detect_host().getenv("DEV_INVENTORY_TEST_VAR") == "yes"


class TestExpandEnvTemplate:
    """Tests for %VAR% expansion."""

    def test_expands(self):
        host = HostEnvironment(os_family="win32", env={"LOCALAPPDATA": "C:\\Users\\dev\\AppData\\Local"})
        assert expand_env_template("%LOCALAPPDATA%", host) == "C:\\Users\\dev\\AppData\\Local"

    def test_parenthesised_name(self):
        host = HostEnvironment(os_family="win32", env={"PROGRAMFILES(X86)": "C:\\Program Files (x86)"})
        assert expand_env_template("%PROGRAMFILES(x86)%", host) == "C:\\Program Files (x86)"

    def test_missing_leading_variable(self):
        assert expand_env_template("%LOCALAPPDATA%", HostEnvironment(os_family="win32")) is None

    def test_plain_text(self):
        assert expand_env_template("C:\\Tools", HostEnvironment()) == "C:\\Tools"

    def test_blank(self):
        assert expand_env_template("  ", HostEnvironment()) is None
