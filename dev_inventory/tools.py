"""
Tool registry and platform command resolution.

Every detectable tool is one ``ToolSpec``. The engine applies the same probe
strategy to any spec, so adding a tool means adding a registry entry, not a
new code path. Registration order is the batch order.
"""

from __future__ import annotations

from dataclasses import dataclass

from .detection import CATEGORIES


@dataclass(frozen=True)
class ToolSpec:
    """
    Detection recipe for one tool.

    Attributes:
        name: Canonical lowercase identifier (cache key)
        display_name: Human label
        category: One of detection.CATEGORIES
        command: Executable probed when no platform variants exist
        version_flag: Arguments appended to the command ('--version', '-version', 'version --client')
        aliases: Other names that route to this spec ('nodejs', 'node.js')
        variants_key: Key into PLATFORM_COMMANDS when the command differs per OS
        prefer_stream: 'stdout' or 'stderr', stream parsed first for the version
        fallback_key: Key into WINDOWS_FALLBACK_PATHS for the filesystem search
    """
    name: str
    display_name: str
    category: str
    command: str
    version_flag: str = "--version"
    aliases: tuple[str, ...] = ()
    variants_key: str | None = None
    prefer_stream: str = "stdout"
    fallback_key: str | None = None

    def __post_init__(self):
        if self.category not in CATEGORIES:
            raise ValueError(f"Invalid category for {self.name}: {self.category}")
        if self.prefer_stream not in ("stdout", "stderr"):
            raise ValueError(f"Invalid prefer_stream for {self.name}: {self.prefer_stream}")

    @property
    def fallback_executable(self) -> str:
        """File name searched for by the Windows fallback ('python.exe')."""
        return f"{self.fallback_key or self.command}.exe"

    def matches(self, name: str) -> bool:
        lower = name.strip().lower()
        return lower == self.name or lower in self.aliases


# Ordered command variants per OS family; linux doubles as the default bucket
PLATFORM_COMMANDS: dict[str, dict[str, tuple[str, ...]]] = {
    "python": {
        # py is the Windows launcher and works without 'Add to PATH'
        "win32": ("py", "python", "python3"),
        "darwin": ("python3", "python"),
        "linux": ("python3", "python"),
    },
    "pip": {
        "win32": ("py -m pip", "pip3", "pip"),
        "darwin": ("pip3", "pip"),
        "linux": ("pip3", "pip"),
    },
}

# Windows install roots searched when no PATH variant works. The first part is
# an environment template; the rest are joined with os.path.join.
WINDOWS_FALLBACK_PATHS: dict[str, tuple[tuple[str, ...], ...]] = {
    "python": (
        ("%LOCALAPPDATA%", "Programs", "Python"),
        ("%PROGRAMFILES%", "Python"),
        ("%PROGRAMFILES(x86)%", "Python"),
        ("%APPDATA%", "Python"),
    ),
    "node": (
        ("%PROGRAMFILES%", "nodejs"),
        ("%APPDATA%", "nvm"),
        ("%LOCALAPPDATA%", "nvm"),
    ),
    "git": (
        ("%PROGRAMFILES%", "Git"),
        ("%PROGRAMFILES(x86)%", "Git"),
    ),
}


def get_command_variants(spec: ToolSpec, os_family: str) -> list[str]:
    """Commands to try, in order, for the given OS family.

    Args:
        spec: Tool to probe
        os_family: 'win32', 'darwin' or 'linux'; anything else uses linux

    Returns:
        New list of base commands (without the version flag)
    """
    if spec.variants_key and spec.variants_key in PLATFORM_COMMANDS:
        by_os = PLATFORM_COMMANDS[spec.variants_key]
        return list(by_os.get(os_family) or by_os["linux"])
    return [spec.command]


def get_fallback_roots(spec: ToolSpec) -> tuple[tuple[str, ...], ...]:
    """Windows fallback roots for a tool (empty if it has none)."""
    if not spec.fallback_key:
        return ()
    return WINDOWS_FALLBACK_PATHS.get(spec.fallback_key, ())


def _runtime(name, display, command=None, flag="--version", **kw) -> ToolSpec:
    return ToolSpec(name, display, "runtime", command or name, flag, **kw)


def _pkg(name, display, command=None, flag="--version", **kw) -> ToolSpec:
    return ToolSpec(name, display, "package-manager", command or name, flag, **kw)


def _tool(name, display, command=None, flag="--version", **kw) -> ToolSpec:
    return ToolSpec(name, display, "tool", command or name, flag, **kw)


TOOLS: tuple[ToolSpec, ...] = (
    # Runtimes
    _runtime("node", "Node.js", aliases=("nodejs", "node.js"), fallback_key="node"),
    _runtime("python", "Python", aliases=("python3", "py"), variants_key="python", fallback_key="python"),
    _runtime("php", "PHP"),
    # java -version prints its banner on stderr
    _runtime("java", "Java", flag="-version", prefer_stream="stderr"),
    _runtime("go", "Go", flag="version", aliases=("golang",)),
    _runtime("rustc", "Rust", aliases=("rust",)),
    _runtime("ruby", "Ruby"),
    _runtime("dotnet", ".NET"),
    _runtime("deno", "Deno"),
    _runtime("bun", "Bun"),
    _runtime("perl", "Perl"),
    _runtime("lua", "Lua", flag="-v"),
    # Language package managers
    _pkg("npm", "npm"),
    _pkg("pip", "pip", aliases=("pip3",), variants_key="pip"),
    _pkg("composer", "Composer"),
    _pkg("yarn", "Yarn"),
    _pkg("pnpm", "pnpm"),
    _pkg("cargo", "Cargo"),
    _pkg("gem", "RubyGems"),
    # System package managers
    _pkg("brew", "Homebrew", aliases=("homebrew",)),
    _pkg("choco", "Chocolatey", aliases=("chocolatey",)),
    _pkg("scoop", "Scoop"),
    _pkg("winget", "winget"),
    # Version control and dev tools
    _tool("git", "Git", fallback_key="git"),
    _tool("docker", "Docker"),
    _tool("kubectl", "Kubernetes CLI", flag="version --client"),
    _tool("terraform", "Terraform"),
    _tool("mvn", "Maven", flag="-version", aliases=("maven",)),
    _tool("svn", "SVN"),
    # Cloud tools
    _tool("aws", "AWS CLI"),
    _tool("az", "Azure CLI"),
    _tool("gcloud", "Google Cloud SDK"),
    _tool("helm", "Helm", flag="version"),
    _tool("ansible", "Ansible"),
    # Version managers
    _tool("nvm", "nvm"),
    _tool("pyenv", "pyenv"),
    _tool("rbenv", "rbenv"),
    _tool("sdk", "SDKMAN", flag="version", aliases=("sdkman",)),
    _tool("uv", "uv"),
)

# Canonical name and every alias -> spec
TOOL_MAP: dict[str, ToolSpec] = {}
for _spec in TOOLS:
    for _key in (_spec.name, *_spec.aliases):
        TOOL_MAP[_key] = _spec

# Category hints for commands outside the registry
_CATEGORY_HINTS: dict[str, str] = {
    **{cmd: "runtime" for cmd in (
        "kotlin", "scala", "elixir", "erl", "julia", "swift", "R", "Rscript",
        "ghc", "clojure", "dart", "zig", "nim", "crystal", "pwsh",
    )},
    **{cmd: "package-manager" for cmd in (
        "poetry", "pipenv", "pipx", "conda", "mamba", "apt", "apt-get", "dnf",
        "yum", "pacman", "zypper", "port", "snap", "flatpak", "nuget", "gradle",
        "bundle", "hex", "pub", "vcpkg", "conan",
    )},
}


def get_tool(name: str) -> ToolSpec | None:
    """Resolve a canonical name or alias (case-insensitive)."""
    return TOOL_MAP.get((name or "").strip().lower())


def canonical_name(name: str) -> str:
    """Canonical registry name for a tool, or the lowercased input if unknown."""
    spec = get_tool(name)
    return spec.name if spec else (name or "").strip().lower()


def all_tools() -> list[ToolSpec]:
    """All registered tools in registration (batch) order."""
    return list(TOOLS)


def filter_tools(names: list[str]) -> list[ToolSpec]:
    """Registered tools matching any of the names or aliases, in registry order."""
    wanted = {canonical_name(n) for n in names}
    return [t for t in TOOLS if t.name in wanted]


def infer_category(command: str) -> str:
    """Best-effort category for a command outside the registry."""
    spec = get_tool(command)
    if spec:
        return spec.category
    base = (command or "").strip().split(" ")[0]
    return _CATEGORY_HINTS.get(base, _CATEGORY_HINTS.get(base.lower(), "tool"))


def infer_display_name(command: str) -> str:
    """Display label for a command outside the registry (the command itself)."""
    spec = get_tool(command)
    return spec.display_name if spec else (command or "").strip()
