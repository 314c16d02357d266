"""
Common utilities shared across dev_inventory modules.
"""

from __future__ import annotations

import os
import re

from .logging_config import get_logger

ANSI_ESCAPE_RE = re.compile(r'\x1b\[[0-9;]*[A-Za-z]|\x1b\][^\x07]*\x07')


def strip_ansi(text: str) -> str:
    """Remove ANSI color/control sequences from command output."""
    if not text:
        return ""
    return ANSI_ESCAPE_RE.sub("", text)


def first_token(command: str) -> str:
    """
    Get the executable part of a command string.

    'py -m pip' -> 'py', '"C:\\Python\\python.exe" --version' -> the quoted path.

    Args:
        command: Shell command string

    Returns:
        First token, or empty string for a blank command
    """
    command = (command or "").strip()
    if not command:
        return ""
    if command[0] in ('"', "'"):
        quote = command[0]
        end = command.find(quote, 1)
        if end > 0:
            return command[1:end]
    return command.split()[0]


def debug_enabled() -> bool:
    """DEV_INVENTORY_DEBUG=1 turns every vlog call on."""
    return os.environ.get("DEV_INVENTORY_DEBUG", "0") == "1"


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Emit a progress message through the package logger when verbose output is on.

    Args:
        msg: Message to log
        verbose: Caller's verbose flag
    """
    if not (verbose or debug_enabled()):
        return
    get_logger().info(msg)
