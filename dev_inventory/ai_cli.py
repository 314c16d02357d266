"""
AI coding-assistant CLIs.

Detection works like any other tool (``<command> --version``). Install,
update and uninstall go through the tool's package manager, and every
successful change invalidates the tool's cache entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .cache import DetectionCache
from .detection import parse_version, select_version_output
from .environment import HostEnvironment
from .executor import CommandExecutor
from .package_managers import get_package_manager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AICLIDefinition:
    """Static description of an AI CLI tool."""
    name: str
    display_name: str
    command: str
    package_name: str
    package_manager: str
    provider: str
    homepage: str
    description: str
    config_dir: str  # Directory name under the user's home, e.g. '.codex'

    def config_path(self, host: HostEnvironment) -> str:
        if host.is_windows:
            return f"%USERPROFILE%\\{self.config_dir}"
        return f"~/{self.config_dir}"


AI_CLI_TOOLS: tuple[AICLIDefinition, ...] = (
    AICLIDefinition(
        name="codex",
        display_name="OpenAI Codex",
        command="codex",
        package_name="@openai/codex",
        package_manager="npm",
        provider="openai",
        homepage="https://github.com/openai/codex",
        description="AI coding agent from OpenAI that runs locally",
        config_dir=".codex",
    ),
    AICLIDefinition(
        name="claude",
        display_name="Claude Code",
        command="claude",
        package_name="@anthropic-ai/claude-code",
        package_manager="npm",
        provider="anthropic",
        homepage="https://github.com/anthropics/claude-code",
        description="Agentic coding tool from Anthropic",
        config_dir=".claude",
    ),
    AICLIDefinition(
        name="gemini",
        display_name="Gemini CLI",
        command="gemini",
        package_name="@google/gemini-cli",
        package_manager="npm",
        provider="google",
        homepage="https://github.com/google-gemini/gemini-cli",
        description="AI agent from Google that brings Gemini to your terminal",
        config_dir=".gemini",
    ),
    AICLIDefinition(
        name="opencode",
        display_name="OpenCode",
        command="opencode",
        package_name="opencode",
        package_manager="npm",
        provider="sst",
        homepage="https://opencode.ai",
        description="Open source AI coding agent by SST",
        config_dir=".opencode",
    ),
    AICLIDefinition(
        name="aider",
        display_name="Aider",
        command="aider",
        package_name="aider-chat",
        package_manager="pipx",
        provider="aider",
        homepage="https://aider.chat",
        description="AI pair programming in your terminal",
        config_dir=".aider",
    ),
)

AI_CLI_MAP: dict[str, AICLIDefinition] = {d.name: d for d in AI_CLI_TOOLS}

_FAILURE_MESSAGES = {
    "install": "Installation failed",
    "update": "Update failed",
    "uninstall": "Uninstallation failed",
}


@dataclass(frozen=True)
class AICLITool:
    """
    Detection result for an AI CLI tool.

    Attributes:
        name: Identifier ('claude')
        display_name: Human label
        command: Executable name
        version: Parsed version, None if not installed or unparsable
        path: Resolved executable path
        is_installed: Whether the version command succeeded
        install_method: 'npm', 'homebrew', 'script' or 'unknown'
        package_name: Package used for install/update/uninstall
        config_path: Where the tool keeps its configuration
        provider: Vendor identifier
        homepage: Project URL
        description: One-line description
    """
    name: str
    display_name: str
    command: str
    version: str | None
    path: str | None
    is_installed: bool
    install_method: str
    package_name: str
    config_path: str
    provider: str
    homepage: str
    description: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "display_name": self.display_name,
            "command": self.command,
            "version": self.version,
            "path": self.path,
            "is_installed": self.is_installed,
            "install_method": self.install_method,
            "package_name": self.package_name,
            "config_path": self.config_path,
            "provider": self.provider,
            "homepage": self.homepage,
            "description": self.description,
        }


@dataclass(frozen=True)
class AICLIActionResult:
    """Outcome of install/update/uninstall."""
    success: bool
    error: str | None = None
    command: str | None = None
    new_version: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "error": self.error,
            "command": self.command,
            "new_version": self.new_version,
        }


def classify_ai_install_method(path: str | None) -> str:
    """npm / homebrew / script / unknown from the executable path."""
    if not path:
        return "unknown"
    normalized = path.replace("\\", "/")
    if "npm" in normalized or "node_modules" in normalized:
        return "npm"
    if "homebrew" in normalized or "Cellar" in normalized:
        return "homebrew"
    if ".opencode" in normalized or "/bin" in normalized:
        return "script"
    return "unknown"


def detect_ai_cli_tool(
    definition: AICLIDefinition,
    executor: CommandExecutor,
    host: HostEnvironment,
) -> AICLITool:
    """Probe one AI CLI tool; never raises."""
    version = path = None
    installed = False
    try:
        result = executor.execute_safe(f"{definition.command} --version")
        if result.success:
            installed = True
            version = parse_version(select_version_output(result)).version
            path = executor.get_tool_path(definition.command)
    except Exception as e:
        logger.debug(f"AI CLI probe for {definition.name} raised: {e}")
        installed = False
        version = path = None

    return AICLITool(
        name=definition.name,
        display_name=definition.display_name,
        command=definition.command,
        version=version,
        path=path,
        is_installed=installed,
        install_method=classify_ai_install_method(path) if installed else "unknown",
        package_name=definition.package_name,
        config_path=definition.config_path(host),
        provider=definition.provider,
        homepage=definition.homepage,
        description=definition.description,
    )


def detect_ai_cli_tools(executor: CommandExecutor, host: HostEnvironment) -> list[AICLITool]:
    """Detect every known AI CLI tool, in definition order."""
    return [detect_ai_cli_tool(d, executor, host) for d in AI_CLI_TOOLS]


def _run_package_action(
    tool_name: str,
    action: str,
    executor: CommandExecutor,
    cache: DetectionCache | None,
) -> AICLIActionResult:
    definition = AI_CLI_MAP.get((tool_name or "").strip().lower())
    if definition is None:
        return AICLIActionResult(success=False, error=f"Unknown AI CLI tool: {tool_name}")

    manager = get_package_manager(definition.package_manager)
    if manager is None:
        return AICLIActionResult(
            success=False,
            error=f"Package manager {definition.package_manager} is not supported",
        )

    if not manager.is_available(executor):
        return AICLIActionResult(
            success=False,
            error=f"{manager.display_name} is not available on this system",
        )

    command = {
        "install": manager.install_command,
        "update": manager.update_command,
        "uninstall": manager.uninstall_command,
    }[action](definition.package_name)

    logger.info(f"{action.capitalize()} {definition.display_name}: {command}")
    result = executor.execute_safe(command)
    if not result.success:
        return AICLIActionResult(
            success=False,
            error=result.stderr.strip() or _FAILURE_MESSAGES[action],
            command=command,
        )

    if cache is not None:
        cache.invalidate(definition.name)
    return AICLIActionResult(success=True, command=command)


def install_ai_cli_tool(
    tool_name: str,
    executor: CommandExecutor,
    cache: DetectionCache | None = None,
) -> AICLIActionResult:
    """Install through the tool's package manager."""
    return _run_package_action(tool_name, "install", executor, cache)


def uninstall_ai_cli_tool(
    tool_name: str,
    executor: CommandExecutor,
    cache: DetectionCache | None = None,
) -> AICLIActionResult:
    """Uninstall through the tool's package manager."""
    return _run_package_action(tool_name, "uninstall", executor, cache)


def update_ai_cli_tool(
    tool_name: str,
    executor: CommandExecutor,
    host: HostEnvironment,
    cache: DetectionCache | None = None,
) -> AICLIActionResult:
    """Update through the tool's package manager and report the version now installed."""
    result = _run_package_action(tool_name, "update", executor, cache)
    if not result.success:
        return result
    tool = detect_ai_cli_tool(AI_CLI_MAP[tool_name.strip().lower()], executor, host)
    return AICLIActionResult(success=True, command=result.command, new_version=tool.version)
