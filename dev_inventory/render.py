"""
Output rendering and formatting.

Tools are printed as a pipe-delimited table (icon|name|version|method|path),
grouped by category, followed by a one-line summary on stderr.
"""

from __future__ import annotations

import os
import sys
from typing import TextIO

from .detection import DetectionSummary, ToolInfo
from .uninstall import UninstallInfo

# ANSI color codes
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
BOLD = "\033[1m"
RESET = "\033[0m"

CATEGORY_ORDER = {"runtime": 1, "package-manager": 2, "tool": 3, "other": 4}
CATEGORY_ICON = {"runtime": "⚙️", "package-manager": "📦", "tool": "🔧", "other": "🔨"}
CATEGORY_DESC = {
    "runtime": "Runtimes",
    "package-manager": "Package Managers",
    "tool": "Developer Tools",
    "other": "Other",
}


def use_emoji() -> bool:
    return os.environ.get("DEV_INVENTORY_EMOJI", "1") == "1"


def use_color() -> bool:
    return os.environ.get("DEV_INVENTORY_COLOR", "1") == "1"


def status_icon(tool: ToolInfo) -> str:
    """Get status icon for a tool.

    Args:
        tool: Detection result

    Returns:
        Icon for installed, installed-without-version or missing
    """
    if not use_emoji():
        if not tool.is_installed:
            return "x"
        return "✓" if tool.version else "?"

    if not tool.is_installed:
        return "❌"
    return "✅" if tool.version else "❓"


def colorize(text: str, color: str) -> str:
    """Apply color to text, or return it unchanged when colors are disabled."""
    if not use_color() or not text:
        return text
    return f"{color}{text}{RESET}"


def format_row(tool: ToolInfo) -> str:
    if tool.is_installed:
        version = colorize(tool.version or "unknown", GREEN if tool.version else YELLOW)
        method = tool.install_method
        if tool.detection_method == "fallback":
            method = f"{method} (fallback)"
        location = tool.path or ""
    else:
        version = colorize("not installed", RED)
        method = ""
        location = tool.error_reason or ""
    return "|".join((status_icon(tool), tool.display_name, version, method, location))


def render_table(tools: list[ToolInfo], out: TextIO | None = None, group: bool = True) -> None:
    """Render tools as a pipe-delimited table.

    Args:
        tools: Detection results in registry order
        out: Stream to write to (stdout by default)
        group: Print a header per category, categories in CATEGORY_ORDER
    """
    out = out or sys.stdout
    print("state|tool|version|method|path", file=out)

    if not group:
        for tool in tools:
            print(format_row(tool), file=out)
        return

    by_category: dict[str, list[ToolInfo]] = {}
    for tool in tools:
        by_category.setdefault(tool.category, []).append(tool)

    for category in sorted(by_category, key=lambda c: CATEGORY_ORDER.get(c, 99)):
        title = CATEGORY_DESC.get(category, category)
        if use_emoji():
            title = f"{CATEGORY_ICON.get(category, '')} {title}".strip()
        print(f"\n{colorize(title, BOLD)}", file=out)
        for tool in by_category[category]:
            print(format_row(tool), file=out)


def print_summary(summary: DetectionSummary, out: TextIO | None = None) -> None:
    """Print the batch summary line (stderr by default)."""
    out = out or sys.stderr
    print(f"\nInventory: {summary.summary()}", file=out)


def render_uninstall_info(tool_name: str, info: UninstallInfo, out: TextIO | None = None) -> None:
    """Describe what uninstalling a tool would do, without running anything."""
    out = out or sys.stdout
    if not info.can_uninstall:
        print(info.manual_instructions, file=out)
        return
    print(f"{tool_name}: {info.command}", file=out)
    if info.warning:
        print(colorize(f"Warning: {info.warning}", YELLOW), file=out)
