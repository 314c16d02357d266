#!/usr/bin/env python3
"""
Dev Inventory - which developer tools are installed on this machine, at what
version, and from where.

Usage:
    inventory.py                          # Detect every registered tool
    inventory.py node python git          # Detect only these tools
    inventory.py --json                   # Machine-readable output
    inventory.py --ai                     # AI coding-assistant CLIs
    inventory.py --uninstall-info docker  # Show the uninstall command, run nothing
    inventory.py --uninstall yarn --yes   # Run the uninstall command
"""

import argparse
import json
import logging
import sys
from functools import partial

from dev_inventory.ai_cli import detect_ai_cli_tools
from dev_inventory.cache import DetectionCache
from dev_inventory.config import DEFAULT_TIMEOUT_SECONDS, load_config, validate_config
from dev_inventory.engine import MAX_CONCURRENCY, DetectionEngine
from dev_inventory.environment import detect_host
from dev_inventory.executor import CommandExecutor
from dev_inventory.logging_config import setup_logging
from dev_inventory.render import print_summary, render_table, render_uninstall_info
from dev_inventory.snapshot import write_snapshot

logger = logging.getLogger("dev_inventory.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def concurrency_arg(value: str) -> int:
    """argparse type for --concurrency (1..MAX_CONCURRENCY)."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}")
    if not 1 <= number <= MAX_CONCURRENCY:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_CONCURRENCY}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Dev Inventory - detect installed developer tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "tools",
        nargs="*",
        help="Specific tools to detect (names or aliases); default is every registered tool",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Ignore cached detections",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of a table",
    )
    parser.add_argument(
        "--ai",
        action="store_true",
        help="Detect AI coding-assistant CLIs instead of the tool registry",
    )
    parser.add_argument(
        "--uninstall-info",
        metavar="NAME",
        help="Show how a tool would be uninstalled on this platform",
    )
    parser.add_argument(
        "--uninstall",
        metavar="NAME",
        help="Uninstall a tool (requires --yes)",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm a destructive action",
    )
    parser.add_argument(
        "--snapshot",
        metavar="PATH",
        help="Also write the detection results to a JSON snapshot",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--concurrency",
        type=concurrency_arg,
        metavar="N",
        help=f"Detections run at once (1-{MAX_CONCURRENCY}); overrides the config file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only warnings and errors",
    )
    return parser


def build_engine(args: argparse.Namespace) -> DetectionEngine:
    """Engine wired from the config file and command-line overrides.

    Raises:
        ValueError: On invalid configuration
    """
    config = load_config(args.config, verbose=args.verbose)
    for warning in validate_config(config):
        logger.warning(f"Config: {warning}")

    prefs = config.preferences
    # A config value wins over DEV_INVENTORY_TIMEOUT_SECONDS; the default does not
    timeout = None
    if prefs.timeout_seconds != DEFAULT_TIMEOUT_SECONDS:
        timeout = prefs.timeout_seconds
    return DetectionEngine(
        executor=CommandExecutor(timeout=timeout),
        cache=DetectionCache(ttl=prefs.cache_ttl_seconds, max_entries=prefs.max_cache_entries),
        host=detect_host(config.platform, verbose=args.verbose),
        registry=config.build_registry(),
        concurrency=args.concurrency or prefs.concurrency,
    )


def cmd_uninstall_info(engine: DetectionEngine, args: argparse.Namespace) -> int:
    info = engine.get_uninstall_info(args.uninstall_info)
    if args.json:
        print(json.dumps(info.to_dict(), indent=2))
    else:
        render_uninstall_info(args.uninstall_info, info)
    return EXIT_OK


def cmd_uninstall(engine: DetectionEngine, args: argparse.Namespace) -> int:
    if not args.yes:
        render_uninstall_info(args.uninstall, engine.get_uninstall_info(args.uninstall))
        print("Refusing to uninstall without --yes", file=sys.stderr)
        return EXIT_FAILURE

    result = engine.uninstall_tool(args.uninstall)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.success:
        print(f"Uninstalled {args.uninstall} ({result.command})")
    else:
        print(f"Uninstall failed: {result.error}", file=sys.stderr)
    return EXIT_OK if result.success else EXIT_FAILURE


def cmd_ai(engine: DetectionEngine, args: argparse.Namespace) -> int:
    tools = detect_ai_cli_tools(engine.executor, engine.host)
    if args.json:
        print(json.dumps([t.to_dict() for t in tools], indent=2))
        return EXIT_OK

    print("state|tool|version|method|package")
    for tool in tools:
        state = "✓" if tool.is_installed else "x"
        version = tool.version or ("unknown" if tool.is_installed else "not installed")
        print("|".join((state, tool.display_name, version, tool.install_method, tool.package_name)))
    return EXIT_OK


def cmd_detect(engine: DetectionEngine, args: argparse.Namespace) -> int:
    detectors = None
    if args.tools:
        detectors = [partial(engine.detect_tool, name, args.refresh) for name in args.tools]
    batch = engine.detect_all_tools_with_summary(force_refresh=args.refresh, detectors=detectors)

    if args.snapshot:
        try:
            write_snapshot(batch.tools, path=args.snapshot, summary=batch.summary)
        except OSError as e:
            logger.error(str(e))
            return EXIT_FAILURE

    if args.json:
        doc = {"tools": [t.to_dict() for t in batch.tools], "summary": batch.summary.to_dict()}
        print(json.dumps(doc, indent=2, ensure_ascii=False))
    else:
        render_table(batch.tools)
        if not args.quiet:
            print_summary(batch.summary)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(verbose=args.verbose, quiet=args.quiet)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        engine = build_engine(args)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE

    if args.uninstall_info:
        return cmd_uninstall_info(engine, args)
    if args.uninstall:
        return cmd_uninstall(engine, args)
    if args.ai:
        return cmd_ai(engine, args)
    return cmd_detect(engine, args)


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
