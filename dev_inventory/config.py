"""
Configuration file parsing and management.

YAML configuration files (``.json`` files are read as JSON), merged from
multiple sources: custom path -> project -> user -> system -> defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .common import vlog
from .detection import CATEGORIES
from .environment import OS_FAMILIES
from .tools import ToolSpec, all_tools, canonical_name

logger = logging.getLogger(__name__)

# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".dev-inventory.yml",                                      # Project root (highest priority)
    ".dev-inventory.yaml",
    os.path.expanduser("~/.config/dev-inventory/config.yml"),  # User global
    os.path.expanduser("~/.config/dev-inventory/config.yaml"),
    "/etc/dev-inventory/config.yml",                           # System global
    "/etc/dev-inventory/config.yaml",
]

DEFAULT_TIMEOUT_SECONDS = 10
DEFAULT_CONCURRENCY = 3
DEFAULT_CACHE_TTL_SECONDS = 300


@dataclass(frozen=True)
class CustomTool:
    """
    A user-declared tool probed by the generic detector.

    Attributes:
        name: Command to run (also the tool name)
        display_name: Label shown in output (defaults to name)
        version_flag: Arguments that print the version
        category: One of runtime, package-manager, tool, other
    """
    name: str
    display_name: str = ""
    version_flag: str = "--version"
    category: str = "tool"

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Custom tool requires a name")
        if self.category not in CATEGORIES:
            raise ValueError(
                f"Invalid category for custom tool {self.name}: {self.category}. "
                f"Must be one of: {', '.join(CATEGORIES)}"
            )

    @staticmethod
    def from_dict(data: dict[str, Any] | str) -> CustomTool:
        """Create CustomTool from a mapping or a bare command name."""
        if isinstance(data, str):
            return CustomTool(name=data)
        if not isinstance(data, dict):
            raise ValueError(
                f"Invalid custom_tools entry: {data!r}. Must be a command name or a mapping"
            )
        return CustomTool(
            name=str(data.get("name", "")),
            display_name=data.get("display_name", ""),
            version_flag=data.get("version_flag", "--version"),
            category=data.get("category", "tool"),
        )

    def to_spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name.strip().lower(),
            display_name=self.display_name or self.name,
            category=self.category,
            command=self.name.strip(),
            version_flag=self.version_flag,
        )


@dataclass(frozen=True)
class Preferences:
    """
    Detection preferences.

    Attributes:
        timeout_seconds: Per-command timeout for version probes
        concurrency: Detectors run simultaneously per batch
        cache_ttl_seconds: How long a detection result stays fresh
        max_cache_entries: Cache size bound (0 = unbounded)
    """
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    concurrency: int = DEFAULT_CONCURRENCY
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    max_cache_entries: int = 0

    def __post_init__(self):
        """Validate preferences after initialization."""
        if self.timeout_seconds < 1 or self.timeout_seconds > 120:
            raise ValueError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be between 1 and 120"
            )

        if self.concurrency < 1 or self.concurrency > 16:
            raise ValueError(
                f"Invalid concurrency: {self.concurrency}. "
                "Must be between 1 and 16"
            )

        if self.cache_ttl_seconds < 1 or self.cache_ttl_seconds > 86400:
            raise ValueError(
                f"Invalid cache_ttl_seconds: {self.cache_ttl_seconds}. "
                "Must be between 1 and 86400 (1 second to 1 day)"
            )

        if self.max_cache_entries < 0:
            raise ValueError(
                f"Invalid max_cache_entries: {self.max_cache_entries}. "
                "Must be 0 (unbounded) or positive"
            )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Preferences:
        """Create Preferences from dictionary."""
        if not isinstance(data, dict):
            raise ValueError(f"Invalid preferences: {data!r}. Must be a mapping")
        return Preferences(
            timeout_seconds=int(data.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
            concurrency=int(data.get("concurrency", DEFAULT_CONCURRENCY)),
            cache_ttl_seconds=int(data.get("cache_ttl_seconds", DEFAULT_CACHE_TTL_SECONDS)),
            max_cache_entries=int(data.get("max_cache_entries", 0)),
        )


@dataclass(frozen=True)
class Config:
    """
    Complete configuration.

    Attributes:
        version: Config schema version
        platform: OS family override ('auto', 'win32', 'darwin', 'linux')
        preferences: Detection preferences
        custom_tools: Extra tools appended to the batch registry
        disabled_tools: Registry tools left out of batch detection
        source: Path to the configuration file that was loaded
    """
    version: int = 1
    platform: str = "auto"
    preferences: Preferences = field(default_factory=Preferences)
    custom_tools: tuple[CustomTool, ...] = ()
    disabled_tools: tuple[str, ...] = ()
    source: str = ""

    def __post_init__(self):
        """Validate config after initialization."""
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

        valid_platforms = {"auto", *OS_FAMILIES}
        if self.platform not in valid_platforms:
            raise ValueError(
                f"Invalid platform: {self.platform}. "
                f"Must be one of: {', '.join(sorted(valid_platforms))}"
            )

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        custom_tools = data.get("custom_tools") or ()
        disabled_tools = data.get("disabled_tools") or ()
        for key, value in (("custom_tools", custom_tools), ("disabled_tools", disabled_tools)):
            if not isinstance(value, (list, tuple)):
                raise ValueError(f"Invalid {key}: {value!r}. Must be a list")

        return Config(
            version=data.get("version", 1),
            platform=data.get("platform", "auto"),
            preferences=Preferences.from_dict(data.get("preferences") or {}),
            custom_tools=tuple(CustomTool.from_dict(t) for t in custom_tools),
            disabled_tools=tuple(str(t).lower() for t in disabled_tools),
            source=source,
        )

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        defaults = Preferences()
        mine, theirs = self.preferences, other.preferences

        def pick(name: str):
            value = getattr(mine, name)
            return value if value != getattr(defaults, name) else getattr(theirs, name)

        merged_preferences = Preferences(
            timeout_seconds=pick("timeout_seconds"),
            concurrency=pick("concurrency"),
            cache_ttl_seconds=pick("cache_ttl_seconds"),
            max_cache_entries=pick("max_cache_entries"),
        )

        # Custom tools: this config wins on name clashes
        merged_custom = {t.name.lower(): t for t in other.custom_tools}
        merged_custom.update({t.name.lower(): t for t in self.custom_tools})

        merged_disabled = tuple(dict.fromkeys((*self.disabled_tools, *other.disabled_tools)))

        return Config(
            version=self.version,
            platform=self.platform if self.platform != "auto" else other.platform,
            preferences=merged_preferences,
            custom_tools=tuple(merged_custom.values()),
            disabled_tools=merged_disabled,
            source=self.source or other.source,
        )

    def build_registry(self) -> list[ToolSpec]:
        """Default registry minus disabled tools, plus custom tools (not already registered)."""
        disabled = {canonical_name(name) for name in self.disabled_tools}
        registry = [spec for spec in all_tools() if spec.name not in disabled]
        known = {spec.name for spec in registry}
        for custom in self.custom_tools:
            spec = custom.to_spec()
            if spec.name not in known and spec.name not in disabled:
                registry.append(spec)
                known.add(spec.name)
        return registry


def _read_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


_READERS = {".json": _read_json}


def read_config_mapping(path: Path) -> dict[str, Any] | None:
    """
    Parse one configuration file into a mapping.

    ``.json`` files go through json, everything else through PyYAML's
    ``safe_load``. An empty document counts as an empty mapping.

    Returns:
        The mapping, or None when the file cannot be read or parsed
    """
    reader = _READERS.get(path.suffix.lower(), _read_yaml)
    try:
        data = reader(path)
    except (OSError, UnicodeDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        logger.debug(f"Cannot parse {path}: {e}")
        return None
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Build a Config from one file.

    Args:
        file_path: .yml, .yaml or .json file
        verbose: Enable verbose logging

    Returns:
        Config, or None if the file is absent, unparsable or holds invalid values
    """
    path = Path(file_path)
    if not path.is_file():
        return None

    data = read_config_mapping(path)
    if data is None:
        vlog(f"Skipping unparsable config {path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=str(path))
    except (ValueError, TypeError) as e:
        vlog(f"Skipping config {path}: {e}", verbose)
        return None

    vlog(f"Using config {path}", verbose)
    return config


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
    locations: list[str] | None = None,
) -> Config:
    """
    Merge every configuration layer that exists, highest priority first:
    the explicit path, then the project, user and system files, then defaults.

    Args:
        custom_path: File given on the command line; must load if set
        verbose: Enable verbose logging
        locations: Search list replacing CONFIG_LOCATIONS

    Returns:
        Merged Config (defaults when no file applies)

    Raises:
        ValueError: If custom_path is set but does not yield a valid config,
            or a file found in the search list cannot be parsed or validated
    """
    layers: list[Config] = []

    if custom_path:
        explicit = load_config_file(custom_path, verbose)
        if explicit is None:
            raise ValueError(f"Invalid or unreadable config file: {custom_path}")
        layers.append(explicit)

    search = CONFIG_LOCATIONS if locations is None else locations
    for location in search:
        if not Path(location).is_file():
            continue
        found = load_config_file(location, verbose)
        if found is None:
            raise ValueError(f"Invalid or unreadable config file: {location}")
        layers.append(found)

    if not layers:
        vlog("No config file applies; built-in defaults in effect", verbose)
        return Config()

    result = layers[0]
    for lower in layers[1:]:
        result = result.merge_with(lower)
    vlog(f"Config assembled from {len(layers)} layer(s)", verbose)
    return result


def validate_config(config: Config) -> list[str]:
    """
    Validate configuration and return list of warnings.

    Args:
        config: Config object to validate

    Returns:
        List of validation warning messages (empty if valid)
    """
    warnings = []
    known = {spec.name for spec in all_tools()}

    for name in config.disabled_tools:
        if canonical_name(name) not in known:
            warnings.append(f"Disabled tool '{name}' is not a registered tool")

    seen: set[str] = set()
    for custom in config.custom_tools:
        key = custom.name.lower()
        if canonical_name(key) in known:
            warnings.append(
                f"Custom tool '{custom.name}' shadows a registered tool and will be ignored"
            )
        if key in seen:
            warnings.append(f"Custom tool '{custom.name}' is declared more than once")
        seen.add(key)

    if config.preferences.concurrency > 8:
        warnings.append(
            f"concurrency={config.preferences.concurrency} spawns many processes at once; "
            "values above 8 can overload small machines"
        )

    return warnings
