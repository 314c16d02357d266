"""
Dev Inventory - detection and caching of installed developer tools.

Core Modules:
- Detection: Command execution, version parsing, platform command variants, Windows fallback search
- Caching: In-memory TTL cache shared across engine calls
- Engine: Single-tool detection, bounded-concurrency batches, summaries
- Uninstall: Static per-platform uninstall command table
- AI CLIs: Detection and package-manager lifecycle of AI coding assistants
- Foundation: Host environment, configuration, logging, snapshots
"""

__version__ = "1.0.0"
__author__ = "Dev Inventory Contributors"

VERSION = __version__

# Detection
from .executor import CommandExecutor, CommandResult
from .detection import (
    ToolInfo,
    ParsedVersion,
    DetectionFailure,
    DetectionSummary,
    parse_version,
    select_version_output,
    detect_install_method,
    unavailable_tool,
)
from .tools import ToolSpec, all_tools, filter_tools, get_tool, canonical_name, get_command_variants

# Caching
from .cache import DetectionCache, CacheEntry, CacheStats

# Engine
from .engine import DetectionEngine, DetectionOutcome, BatchResult, run_guarded

# Uninstall
from .uninstall import UninstallInfo, UninstallResult, get_uninstall_info

# AI CLIs
from .ai_cli import (
    AICLITool,
    AICLIActionResult,
    detect_ai_cli_tools,
    install_ai_cli_tool,
    update_ai_cli_tool,
    uninstall_ai_cli_tool,
)

# Foundation
from .environment import HostEnvironment, detect_host
from .config import Config, Preferences, CustomTool, load_config, load_config_file, validate_config
from .snapshot import load_snapshot, write_snapshot
from .logging_config import setup_logging, get_logger

__all__ = [
    "__version__",
    # Detection
    "CommandExecutor",
    "CommandResult",
    "ToolInfo",
    "ParsedVersion",
    "DetectionFailure",
    "DetectionSummary",
    "parse_version",
    "select_version_output",
    "detect_install_method",
    "unavailable_tool",
    "ToolSpec",
    "all_tools",
    "filter_tools",
    "get_tool",
    "canonical_name",
    "get_command_variants",
    # Caching
    "DetectionCache",
    "CacheEntry",
    "CacheStats",
    # Engine
    "DetectionEngine",
    "DetectionOutcome",
    "BatchResult",
    "run_guarded",
    # Uninstall
    "UninstallInfo",
    "UninstallResult",
    "get_uninstall_info",
    # AI CLIs
    "AICLITool",
    "AICLIActionResult",
    "detect_ai_cli_tools",
    "install_ai_cli_tool",
    "update_ai_cli_tool",
    "uninstall_ai_cli_tool",
    # Foundation
    "HostEnvironment",
    "detect_host",
    "Config",
    "Preferences",
    "CustomTool",
    "load_config",
    "load_config_file",
    "validate_config",
    "load_snapshot",
    "write_snapshot",
    "setup_logging",
    "get_logger",
]
