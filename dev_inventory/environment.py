"""
Host environment abstraction.

Detection never reads ``sys.platform`` or ``os.environ`` directly; it asks a
``HostEnvironment`` so tests (and hosts) can describe a Windows machine from a
Linux box and vice versa.
"""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .common import vlog

OS_FAMILIES = ("win32", "darwin", "linux")

ENV_TEMPLATE_RE = re.compile(r"%([^%]+)%")


def normalize_os_family(platform: str | None) -> str:
    """
    Map a ``sys.platform`` style string onto win32/darwin/linux.

    Unrecognised families (freebsd, aix, ...) fall back to linux.
    """
    value = (platform or "").lower()
    if value.startswith("win") or value == "cygwin":
        return "win32"
    if value.startswith("darwin") or value == "macos":
        return "darwin"
    return "linux"


@dataclass(frozen=True)
class HostEnvironment:
    """
    Operating system family plus an immutable view of environment variables.

    Attributes:
        os_family: 'win32', 'darwin' or 'linux'
        env: Environment variables used for path-template expansion
    """
    os_family: str = "linux"
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.os_family not in OS_FAMILIES:
            raise ValueError(
                f"Invalid os_family: {self.os_family}. "
                f"Must be one of: {', '.join(OS_FAMILIES)}"
            )
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    @property
    def is_windows(self) -> bool:
        return self.os_family == "win32"

    def getenv(self, name: str, default: str = "") -> str:
        """Look up a variable; Windows names are matched case-insensitively."""
        if name in self.env:
            return self.env[name]
        if self.is_windows:
            upper = name.upper()
            for key, value in self.env.items():
                if key.upper() == upper:
                    return value
        return default

    def __str__(self) -> str:
        return f"{self.os_family} ({len(self.env)} env vars)"


def detect_host(override: str | None = None, verbose: bool = False) -> HostEnvironment:
    """
    Build the environment of the running process.

    Args:
        override: Force an OS family ('win32', 'darwin', 'linux'); None or 'auto' detects
        verbose: Enable verbose logging

    Returns:
        HostEnvironment snapshot of the current process

    Raises:
        ValueError: If override is not a known OS family
    """
    if override and override != "auto":
        if override not in OS_FAMILIES:
            raise ValueError(
                f"Invalid platform override: {override}. "
                f"Must be one of: auto, {', '.join(OS_FAMILIES)}"
            )
        vlog(f"Platform explicitly set to: {override}", verbose)
        return HostEnvironment(os_family=override, env=dict(os.environ))

    family = normalize_os_family(sys.platform)
    vlog(f"Detected platform: {family} (sys.platform={sys.platform})", verbose)
    return HostEnvironment(os_family=family, env=dict(os.environ))


def expand_env_template(template: str, host: HostEnvironment) -> str | None:
    """
    Expand ``%VAR%`` references using the host environment.

    Unset variables expand to an empty string. A template that starts with a
    variable which expands to nothing yields None, so a missing LOCALAPPDATA
    never turns into a path relative to the working directory.

    Args:
        template: String such as '%LOCALAPPDATA%' or '%PROGRAMFILES(x86)%'
        host: Environment to read variables from

    Returns:
        Expanded string, or None if the leading root is empty
    """
    leading = ENV_TEMPLATE_RE.match(template)
    if leading and not host.getenv(leading.group(1), ""):
        return None
    expanded = ENV_TEMPLATE_RE.sub(lambda m: host.getenv(m.group(1), ""), template)
    return expanded if expanded.strip() else None
