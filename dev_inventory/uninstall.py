"""
Uninstall command lookup.

A static (tool, platform) table. Tools or platforms without an entry are
reported as "uninstall manually"; no command is ever synthesized for a
combination that is not listed here.
"""

from __future__ import annotations

from dataclasses import dataclass

from .tools import get_tool


@dataclass(frozen=True)
class UninstallEntry:
    """Per-platform uninstall commands for one tool. Empty string = not automatable."""
    win32: str = ""
    darwin: str = ""
    linux: str = ""
    warning: str | None = None

    def command_for(self, os_family: str) -> str:
        return getattr(self, os_family, "") if os_family in ("win32", "darwin", "linux") else ""


def _same(command: str, warning: str | None = None) -> UninstallEntry:
    return UninstallEntry(win32=command, darwin=command, linux=command, warning=warning)


_NODE_WARNING = "This will remove Node.js and may affect npm packages"
_PYTHON_WARNING = "This will remove Python and may affect pip packages"
_RUST_WARNING = "This will remove Rust and Cargo"

UNINSTALL_COMMANDS: dict[str, UninstallEntry] = {
    # Installed through npm
    "yarn": _same("npm uninstall -g yarn"),
    "pnpm": _same("npm uninstall -g pnpm"),
    "typescript": _same("npm uninstall -g typescript"),
    "ts-node": _same("npm uninstall -g ts-node"),
    # Runtimes
    "node": UninstallEntry(
        win32="winget uninstall --id OpenJS.NodeJS -e --silent",
        darwin="brew uninstall node",
        linux="sudo apt remove -y nodejs",
        warning=_NODE_WARNING,
    ),
    "python": UninstallEntry(
        win32="winget uninstall --name Python -e --silent",
        darwin="brew uninstall python",
        linux="sudo apt remove -y python3",
        warning=_PYTHON_WARNING,
    ),
    "python3": UninstallEntry(
        win32="winget uninstall --name Python -e --silent",
        darwin="brew uninstall python",
        linux="sudo apt remove -y python3",
        warning=_PYTHON_WARNING,
    ),
    "php": UninstallEntry(
        win32="winget uninstall --name PHP -e --silent",
        darwin="brew uninstall php",
        linux="sudo apt remove -y php",
        warning="This will remove PHP and may affect Composer packages",
    ),
    "java": UninstallEntry(
        win32='winget uninstall --name "Java" -e --silent',
        darwin="brew uninstall openjdk",
        linux="sudo apt remove -y default-jdk",
        warning="This will remove Java JDK",
    ),
    "go": UninstallEntry(
        win32="winget uninstall --id GoLang.Go -e --silent",
        darwin="brew uninstall go",
        linux="sudo apt remove -y golang-go",
    ),
    "rust": _same("rustup self uninstall -y", _RUST_WARNING),
    "rustc": _same("rustup self uninstall -y", _RUST_WARNING),
    "cargo": _same("rustup self uninstall -y", _RUST_WARNING),
    "ruby": UninstallEntry(
        win32="winget uninstall --name Ruby -e --silent",
        darwin="brew uninstall ruby",
        linux="sudo apt remove -y ruby",
    ),
    "deno": UninstallEntry(
        win32="irm https://deno.land/uninstall.ps1 | iex",
        darwin="rm -rf ~/.deno",
        linux="rm -rf ~/.deno",
    ),
    "bun": UninstallEntry(
        win32='powershell -c "Remove-Item -Recurse -Force $env:USERPROFILE\\.bun"',
        darwin="rm -rf ~/.bun",
        linux="rm -rf ~/.bun",
    ),
    "dotnet": UninstallEntry(
        win32="winget uninstall --id Microsoft.DotNet.SDK.8 -e --silent",
        darwin="brew uninstall dotnet",
        linux="sudo apt remove -y dotnet-sdk-8.0",
    ),
    # Dev tools
    "git": UninstallEntry(
        win32="winget uninstall --id Git.Git -e --silent",
        darwin="brew uninstall git",
        linux="sudo apt remove -y git",
        warning="This will remove Git version control",
    ),
    "docker": UninstallEntry(
        win32="winget uninstall --id Docker.DockerDesktop -e --silent",
        darwin="brew uninstall --cask docker",
        linux="sudo apt remove -y docker.io",
        warning="This will remove Docker and all containers",
    ),
    # Cloud tools
    "aws": UninstallEntry(
        win32="winget uninstall --id Amazon.AWSCLI -e --silent",
        darwin="brew uninstall awscli",
        linux="sudo apt remove -y awscli",
    ),
    "az": UninstallEntry(
        win32="winget uninstall --id Microsoft.AzureCLI -e --silent",
        darwin="brew uninstall azure-cli",
        linux="sudo apt remove -y azure-cli",
    ),
    "gcloud": UninstallEntry(
        win32="winget uninstall --id Google.CloudSDK -e --silent",
        darwin="brew uninstall google-cloud-sdk",
        linux="sudo apt remove -y google-cloud-sdk",
    ),
    "kubectl": UninstallEntry(
        win32="winget uninstall --id Kubernetes.kubectl -e --silent",
        darwin="brew uninstall kubectl",
        linux="sudo apt remove -y kubectl",
    ),
    "helm": UninstallEntry(
        win32="winget uninstall --id Helm.Helm -e --silent",
        darwin="brew uninstall helm",
        linux="sudo snap remove helm",
    ),
    # Version managers
    "nvm": UninstallEntry(
        win32='winget uninstall --name "NVM for Windows" -e --silent',
        darwin="rm -rf ~/.nvm",
        linux="rm -rf ~/.nvm",
        warning="This will remove nvm and all Node.js versions managed by it",
    ),
    "pyenv": UninstallEntry(
        win32="winget uninstall --name pyenv -e --silent",
        darwin="brew uninstall pyenv",
        linux="rm -rf ~/.pyenv",
        warning="This will remove pyenv and all Python versions managed by it",
    ),
    "rbenv": UninstallEntry(
        win32="",
        darwin="brew uninstall rbenv",
        linux="rm -rf ~/.rbenv",
        warning="This will remove rbenv and all Ruby versions managed by it",
    ),
}


@dataclass(frozen=True)
class UninstallInfo:
    """
    What the UI may offer for a tool.

    Attributes:
        can_uninstall: Whether an automated command exists for this platform
        command: The command that would run
        warning: Consequences to show before running it
        manual_instructions: Guidance when no command exists
    """
    can_uninstall: bool
    command: str | None = None
    warning: str | None = None
    manual_instructions: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "can_uninstall": self.can_uninstall,
            "command": self.command,
            "warning": self.warning,
            "manual_instructions": self.manual_instructions,
        }


@dataclass(frozen=True)
class UninstallResult:
    """Outcome of running an uninstall command."""
    success: bool
    error: str | None = None
    command: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"success": self.success, "error": self.error, "command": self.command}


def lookup_entry(tool_name: str) -> UninstallEntry | None:
    """Table entry for a tool name, trying the exact name before the registry's canonical name."""
    lower = (tool_name or "").strip().lower()
    entry = UNINSTALL_COMMANDS.get(lower)
    if entry is None:
        spec = get_tool(lower)
        if spec is not None:
            entry = UNINSTALL_COMMANDS.get(spec.name)
    return entry


def manual_instructions(tool_name: str, os_family: str) -> str:
    if os_family == "win32":
        return f"Please uninstall {tool_name} through Windows Settings > Apps > Installed Apps"
    return f"Please uninstall {tool_name} manually."


def get_uninstall_info(tool_name: str, os_family: str) -> UninstallInfo:
    """Describe how a tool can be uninstalled on a platform, without running anything.

    Args:
        tool_name: Tool name or alias
        os_family: 'win32', 'darwin' or 'linux'

    Returns:
        UninstallInfo with either a command or manual instructions
    """
    entry = lookup_entry(tool_name)
    command = entry.command_for(os_family) if entry else ""
    if not command:
        return UninstallInfo(
            can_uninstall=False,
            manual_instructions=manual_instructions(tool_name, os_family),
        )
    return UninstallInfo(can_uninstall=True, command=command, warning=entry.warning)


def unsupported_reason(tool_name: str, os_family: str) -> str | None:
    """Error message when no command exists for the tool/platform, else None."""
    entry = lookup_entry(tool_name)
    if entry is None:
        return f"Uninstall not supported for {tool_name}. Please uninstall manually."
    if not entry.command_for(os_family):
        return (
            f"Automatic uninstall not available for {tool_name} on {os_family}. "
            "Please uninstall manually."
        )
    return None
