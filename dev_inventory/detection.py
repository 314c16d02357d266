"""
Detection results and version extraction.

Pure helpers used by the engine: version parsing, stdout/stderr selection,
install-method inference and the result value types.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from .executor import CommandResult

CATEGORIES = ("runtime", "package-manager", "tool", "other")

INSTALL_METHODS = ("manual", "homebrew", "chocolatey", "apt", "npm", "pip", "unknown")

DETECTION_METHODS = ("primary", "fallback")

DEFAULT_ERROR_REASON = "Tool not found"

# Optional 'v' + three numeric groups + optional pre-release (v18.17.0, 3.11.4-rc1)
SEMVER_RE = re.compile(r"v?(\d+\.\d+\.\d+(?:-[a-zA-Z0-9.]+)?)", re.IGNORECASE)
# Two or three numeric groups anywhere (9.8, 5.4.6)
SHORT_VERSION_RE = re.compile(r"(\d+\.\d+(?:\.\d+)?)")


class ParsedVersion(NamedTuple):
    """Version token found in command output, plus the trimmed text it came from."""
    version: str | None
    raw: str


def parse_version(text: str | None) -> ParsedVersion:
    """Extract the first version-shaped token from arbitrary command output.

    Handles the formats seen across tools:
    - v18.17.0 (Node.js)
    - Python 3.11.4
    - Composer version 2.5.8 2023-06-09 17:13:21
    - pip 23.2.1 from /usr/lib/python3/dist-packages/pip (python 3.11)
    - 9.8.1 (npm)

    Args:
        text: Raw stdout or stderr of a version command

    Returns:
        ParsedVersion(version, raw); version is None if nothing matched
    """
    if not text or not isinstance(text, str):
        return ParsedVersion(None, "")

    trimmed = text.strip()
    if not trimmed:
        return ParsedVersion(None, "")

    match = SEMVER_RE.search(trimmed)
    if match:
        return ParsedVersion(match.group(1), trimmed)

    match = SHORT_VERSION_RE.search(trimmed)
    if match:
        return ParsedVersion(match.group(1), trimmed)

    return ParsedVersion(None, trimmed)


def select_version_output(result: CommandResult, prefer: str = "stdout") -> str:
    """Pick the stream that carries the version banner.

    stdout wins unless it is blank; then stderr. Tools such as ``java -version``
    write only to stderr and declare ``prefer="stderr"``.

    Args:
        result: Completed command
        prefer: 'stdout' or 'stderr'

    Returns:
        The chosen stream's text, or empty string if both are blank
    """
    streams = (result.stdout, result.stderr)
    if prefer == "stderr":
        streams = (result.stderr, result.stdout)
    for text in streams:
        if text and text.strip():
            return text
    return ""


def detect_install_method(path: str | None, os_family: str = "linux") -> str:
    """Infer how a tool was installed from its executable path.

    Args:
        path: Absolute path of the resolved executable
        os_family: 'win32', 'darwin' or 'linux'

    Returns:
        One of INSTALL_METHODS (never 'unknown' here; that is reserved for
        tools that were not found)
    """
    if not path:
        return "manual"

    lower_path = path.lower().replace("\\", "/")

    if "homebrew" in lower_path or "/cellar/" in lower_path or "linuxbrew" in lower_path:
        return "homebrew"
    if "chocolatey" in lower_path or "choco" in lower_path:
        return "chocolatey"
    if os_family == "linux" and ("/usr/bin" in lower_path or "/usr/local/bin" in lower_path):
        return "apt"
    if "npm" in lower_path or "node_modules" in lower_path:
        return "npm"
    if "pip" in lower_path or "site-packages" in lower_path:
        return "pip"

    return "manual"


@dataclass(frozen=True)
class ToolInfo:
    """
    One detection result.

    Attributes:
        name: Canonical lowercase identifier
        display_name: Human label
        version: Parsed version, None if unparsable or not installed
        path: Absolute path of the resolved executable, None if not installed
        is_installed: True iff at least one command variant succeeded
        install_method: One of INSTALL_METHODS
        category: One of CATEGORIES
        error_reason: Why detection failed (only when not installed)
        detection_method: 'primary' (PATH probe) or 'fallback' (filesystem search)
    """
    name: str
    display_name: str
    version: str | None = None
    path: str | None = None
    is_installed: bool = False
    install_method: str = "unknown"
    category: str = "tool"
    error_reason: str | None = None
    detection_method: str = "primary"

    def __post_init__(self):
        if not self.is_installed and (self.version is not None or self.path is not None):
            raise ValueError(f"{self.name}: a tool that is not installed cannot carry a version or path")
        if self.is_installed and self.error_reason is not None:
            raise ValueError(f"{self.name}: an installed tool cannot carry an error reason")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "display_name": self.display_name,
            "version": self.version,
            "path": self.path,
            "is_installed": self.is_installed,
            "install_method": self.install_method,
            "category": self.category,
            "error_reason": self.error_reason,
            "detection_method": self.detection_method,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolInfo":
        """Create from dictionary."""
        return cls(
            name=data.get("name", ""),
            display_name=data.get("display_name", data.get("name", "")),
            version=data.get("version"),
            path=data.get("path"),
            is_installed=bool(data.get("is_installed", False)),
            install_method=data.get("install_method", "unknown"),
            category=data.get("category", "tool"),
            error_reason=data.get("error_reason"),
            detection_method=data.get("detection_method", "primary"),
        )


def unavailable_tool(
    name: str,
    display_name: str,
    category: str,
    error_reason: str | None = None,
) -> ToolInfo:
    """Build the 'not installed' value: no version, no path, always a reason."""
    return ToolInfo(
        name=name,
        display_name=display_name,
        version=None,
        path=None,
        is_installed=False,
        install_method="unknown",
        category=category,
        error_reason=error_reason or DEFAULT_ERROR_REASON,
    )


def failure_reason(result: CommandResult) -> str:
    """Turn a failed probe into a short error reason."""
    if result.timed_out:
        return result.stderr or "Timed out"
    return DEFAULT_ERROR_REASON


@dataclass(frozen=True)
class DetectionFailure:
    """Entry of DetectionSummary.errors."""
    tool_name: str
    error_reason: str

    def to_dict(self) -> dict[str, str]:
        return {"tool_name": self.tool_name, "error_reason": self.error_reason}


@dataclass(frozen=True)
class DetectionSummary:
    """
    Aggregate over one batch run.

    Attributes:
        total_tools: Number of results returned by the batch
        success_count: Results with is_installed=True
        failure_count: Results with is_installed=False
        total_time_ms: Wall time of the batch in milliseconds
        errors: (tool_name, error_reason) for each failed result, in result order
    """
    total_tools: int
    success_count: int
    failure_count: int
    total_time_ms: float
    errors: tuple[DetectionFailure, ...] = field(default_factory=tuple)

    @classmethod
    def from_results(cls, tools: list[ToolInfo], total_time_ms: float) -> "DetectionSummary":
        """Derive counts and the error list from batch results."""
        errors = tuple(
            DetectionFailure(tool_name=t.name, error_reason=t.error_reason)
            for t in tools
            if not t.is_installed and t.error_reason
        )
        success = sum(1 for t in tools if t.is_installed)
        return cls(
            total_tools=len(tools),
            success_count=success,
            failure_count=len(tools) - success,
            total_time_ms=total_time_ms,
            errors=errors,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_tools": self.total_tools,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "total_time_ms": self.total_time_ms,
            "errors": [e.to_dict() for e in self.errors],
        }

    def summary(self) -> str:
        """Human-readable one-liner."""
        return (
            f"{self.total_tools} tools, {self.success_count} installed, "
            f"{self.failure_count} missing, {self.total_time_ms:.0f} ms"
        )
