"""
JSON snapshots of detection results.

Detection caching is in memory only; a snapshot is the explicit, host-chosen
way to keep an inventory across runs.
"""

from __future__ import annotations

import datetime
import json
import logging
import os
from pathlib import Path
from typing import Any

from .detection import DetectionSummary, ToolInfo

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# Default snapshot file location
DEFAULT_SNAPSHOT_FILE = "inventory_snapshot.json"


def get_snapshot_path() -> Path:
    """Snapshot path from DEV_INVENTORY_SNAPSHOT_FILE, relative to the working directory unless absolute."""
    snapshot_file = os.environ.get("DEV_INVENTORY_SNAPSHOT_FILE", DEFAULT_SNAPSHOT_FILE)
    if os.path.isabs(snapshot_file):
        return Path(snapshot_file)
    return Path.cwd() / snapshot_file


def _utc_now() -> str:
    now = datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)
    return now.isoformat().replace("+00:00", "Z")


def write_snapshot(
    tools: list[ToolInfo],
    path: Path | None = None,
    summary: DetectionSummary | None = None,
    extra_meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Write detection results to a JSON file.

    The document is written to a temporary file next to the target and then
    renamed over it, so readers never see a half-written snapshot.

    Args:
        tools: Detection results
        path: Target file (uses get_snapshot_path() if None)
        summary: Batch summary stored in the metadata when given
        extra_meta: Additional metadata to include

    Returns:
        Metadata dictionary

    Raises:
        OSError: If the snapshot cannot be written
    """
    if path is None:
        path = get_snapshot_path()
    path = Path(path)

    meta: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "created_at": _utc_now(),
        "count": len(tools),
        "installed": sum(1 for t in tools if t.is_installed),
    }
    if summary is not None:
        meta["summary"] = summary.to_dict()
    if extra_meta:
        meta.update(extra_meta)

    doc = {"__meta__": meta, "tools": [t.to_dict() for t in tools]}

    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(doc, f, indent=2, ensure_ascii=False, sort_keys=True)
        temp_path.replace(path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        raise OSError(f"Failed to write snapshot {path}: {e}") from e

    logger.debug(f"Wrote snapshot with {len(tools)} tools to {path}")
    return meta


def load_snapshot(path: Path | None = None) -> tuple[dict[str, Any], list[ToolInfo]]:
    """Load a snapshot written by write_snapshot.

    Missing or unreadable files yield an empty snapshot. Individual tool
    entries that do not form a valid ToolInfo are skipped.

    Returns:
        (metadata, tools)
    """
    if path is None:
        path = get_snapshot_path()
    path = Path(path)

    if not path.exists():
        return {}, []

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable snapshot {path}: {e}")
        return {}, []

    if not isinstance(data, dict):
        return {}, []

    meta = data.get("__meta__")
    if not isinstance(meta, dict):
        meta = {}

    tools: list[ToolInfo] = []
    for entry in data.get("tools") or []:
        if not isinstance(entry, dict):
            continue
        try:
            tools.append(ToolInfo.from_dict(entry))
        except (ValueError, TypeError) as e:
            logger.debug(f"Skipping invalid snapshot entry {entry.get('name')}: {e}")
    return meta, tools
