"""
Detection engine: probe tools, cache results, run batches under a concurrency cap.

Per-tool flow:
1. Cache lookup (unless force_refresh)
2. Try each platform command variant in order; first success wins
3. Parse the version, resolve the executable path, infer the install method
4. Windows only: search well-known install roots when every variant failed
5. Otherwise return a 'not installed' value

Failures are values. A detector that raises is converted into a failed
``DetectionOutcome`` at its own boundary, so one broken detector never stops
the rest of the batch.
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from typing import Callable, NamedTuple, Sequence

from .cache import DetectionCache
from .detection import (
    DetectionSummary,
    ToolInfo,
    detect_install_method,
    failure_reason,
    parse_version,
    select_version_output,
    unavailable_tool,
)
from .environment import HostEnvironment, detect_host, expand_env_template
from .executor import CommandExecutor, CommandResult
from .tools import (
    ToolSpec,
    all_tools,
    get_command_variants,
    get_fallback_roots,
    infer_category,
    infer_display_name,
)
from .uninstall import UninstallInfo, UninstallResult, get_uninstall_info, unsupported_reason

logger = logging.getLogger(__name__)

# Simultaneous probes per batch; bounded to keep process spawning in check
DEFAULT_CONCURRENCY = 3
MAX_CONCURRENCY = 16

Detector = Callable[[], ToolInfo]


@dataclass(frozen=True)
class DetectionOutcome:
    """Tagged result of running one detector: a ToolInfo or an error message."""
    label: str
    tool: ToolInfo | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.tool is not None


class BatchResult(NamedTuple):
    tools: list[ToolInfo]
    summary: DetectionSummary


def _detector_label(detector: Detector) -> str:
    if isinstance(detector, partial) and detector.args:
        return str(detector.args[0])
    return getattr(detector, "__name__", repr(detector))


def run_guarded(detector: Detector) -> DetectionOutcome:
    """Run one detector and capture its result or failure as a value."""
    label = _detector_label(detector)
    try:
        tool = detector()
    except Exception as e:
        logger.warning(f"Detector {label} failed: {e}")
        return DetectionOutcome(label=label, error=str(e) or e.__class__.__name__)
    if not isinstance(tool, ToolInfo):
        return DetectionOutcome(label=label, error=f"Detector returned {type(tool).__name__}, not ToolInfo")
    return DetectionOutcome(label=label, tool=tool)


class DetectionEngine:
    """
    Detects installed developer tools.

    The engine owns no global state: executor, cache, host and registry are
    injected. Hosts that want one shared cache per session construct it once
    and pass it in.

    Attributes:
        executor: Runs probe commands
        cache: Detection result cache
        host: OS family and environment used for variants and fallbacks
        registry: Tool specs in batch order
        concurrency: Detectors run simultaneously per batch
    """

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        cache: DetectionCache | None = None,
        host: HostEnvironment | None = None,
        registry: Sequence[ToolSpec] | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ):
        if not 1 <= concurrency <= MAX_CONCURRENCY:
            raise ValueError(
                f"Invalid concurrency: {concurrency}. Must be between 1 and {MAX_CONCURRENCY}"
            )
        self.executor = executor if executor is not None else CommandExecutor()
        self.cache = cache if cache is not None else DetectionCache()
        self.host = host if host is not None else detect_host()
        self.registry: tuple[ToolSpec, ...] = tuple(registry if registry is not None else all_tools())
        self.concurrency = concurrency

        self._by_name: dict[str, ToolSpec] = {}
        for spec in self.registry:
            for key in (spec.name, *spec.aliases):
                self._by_name.setdefault(key, spec)

    # -- lookup -----------------------------------------------------------

    def resolve_spec(self, tool_name: str) -> ToolSpec | None:
        """Registry entry for a name or alias (case-insensitive)."""
        return self._by_name.get((tool_name or "").strip().lower())

    def cache_key(self, tool_name: str) -> str:
        spec = self.resolve_spec(tool_name)
        return spec.name if spec else (tool_name or "").strip().lower()

    # -- cache ------------------------------------------------------------

    def invalidate_cache(self) -> None:
        """Forget every cached detection."""
        self.cache.invalidate_all()

    def invalidate_cache_for(self, tool_name: str) -> None:
        """Forget one tool, under both the given name and its canonical key."""
        lower = (tool_name or "").strip().lower()
        self.cache.invalidate(lower)
        key = self.cache_key(tool_name)
        if key != lower:
            self.cache.invalidate(key)

    # -- single tool ------------------------------------------------------

    def detect_spec(self, spec: ToolSpec) -> ToolInfo:
        """Probe one registry entry; never raises."""
        try:
            return self._probe(spec)
        except Exception as e:
            logger.debug(f"Probe for {spec.name} raised: {e}")
            return unavailable_tool(spec.name, spec.display_name, spec.category, f"Detection failed: {e}")

    def _probe(self, spec: ToolSpec) -> ToolInfo:
        last_result: CommandResult | None = None

        for variant in get_command_variants(spec, self.host.os_family):
            command = f"{variant} {spec.version_flag}".strip()
            result = self.executor.execute_safe(command)
            if result.success:
                logger.debug(f"{spec.name}: resolved via '{variant}'")
                return self._installed(spec, variant, result)
            last_result = result

        if self.host.is_windows:
            found = self.search_windows_fallback(spec)
            if found is not None:
                return found

        reason = failure_reason(last_result) if last_result is not None else None
        return unavailable_tool(spec.name, spec.display_name, spec.category, reason)

    def _installed(self, spec: ToolSpec, variant: str, result: CommandResult) -> ToolInfo:
        version = parse_version(select_version_output(result, spec.prefer_stream)).version
        path = self.executor.get_tool_path(variant)
        return ToolInfo(
            name=spec.name,
            display_name=spec.display_name,
            version=version,
            path=path,
            is_installed=True,
            install_method=detect_install_method(path, self.host.os_family),
            category=spec.category,
        )

    def search_windows_fallback(self, spec: ToolSpec) -> ToolInfo | None:
        """Look for the executable under well-known Windows install roots.

        Each root is checked directly, then one level of subdirectories
        (e.g. ``%LOCALAPPDATA%\\Programs\\Python\\Python311\\python.exe``).
        The first executable whose version command succeeds wins.

        Returns:
            Installed ToolInfo with detection_method='fallback', or None
        """
        if not self.host.is_windows:
            return None

        exe_name = spec.fallback_executable
        for root_parts in get_fallback_roots(spec):
            root = expand_env_template(root_parts[0], self.host)
            if not root:
                continue
            base = os.path.join(root, *root_parts[1:])
            if not os.path.isdir(base):
                continue

            for candidate in _fallback_candidates(base, exe_name):
                result = self.executor.execute_safe(f'"{candidate}" {spec.version_flag}'.strip())
                if not result.success:
                    continue
                logger.debug(f"{spec.name}: found by fallback search at {candidate}")
                version = parse_version(select_version_output(result, spec.prefer_stream)).version
                return ToolInfo(
                    name=spec.name,
                    display_name=spec.display_name,
                    version=version,
                    path=candidate,
                    is_installed=True,
                    install_method="manual",
                    category=spec.category,
                    detection_method="fallback",
                )
        return None

    def detect_custom_tool(
        self,
        command: str,
        display_name: str | None = None,
        version_flag: str = "--version",
        category: str | None = None,
    ) -> ToolInfo:
        """Generic detector: run ``<command> <version_flag>``.

        Display name and category are inferred from the command when not given.
        """
        command = (command or "").strip()
        spec = ToolSpec(
            name=command.lower(),
            display_name=display_name or infer_display_name(command),
            category=category or infer_category(command),
            command=command,
            version_flag=version_flag,
        )
        return self.detect_spec(spec)

    def detect_tool(self, tool_name: str, force_refresh: bool = False) -> ToolInfo:
        """Detect one tool by name or alias, using the cache unless force_refresh.

        Unregistered names go through the generic detector. Results, including
        'not installed' ones, are written back to the cache.
        """
        key = self.cache_key(tool_name)
        if not key:
            return unavailable_tool("", "", "other", "No tool name given")

        if not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"{key}: cache hit")
                return cached

        spec = self.resolve_spec(tool_name)
        if spec is not None:
            result = self.detect_spec(spec)
        else:
            result = self.detect_custom_tool(tool_name)

        self.cache.set(key, result)
        return result

    # -- batches ----------------------------------------------------------

    def default_detectors(self, force_refresh: bool = False) -> list[Detector]:
        """One detector per registry entry, in registry order."""
        return [partial(self.detect_tool, spec.name, force_refresh) for spec in self.registry]

    def run_detectors(self, detectors: Sequence[Detector]) -> list[DetectionOutcome]:
        """Run detectors in sequential batches of ``concurrency``.

        Outcomes are collected positionally, so the returned list follows the
        detector order regardless of which probe finishes first.
        """
        detectors = list(detectors)
        if not detectors:
            return []

        outcomes: list[DetectionOutcome] = []
        width = self.concurrency
        with ThreadPoolExecutor(max_workers=min(width, len(detectors)), thread_name_prefix="detect") as pool:
            for start in range(0, len(detectors), width):
                batch = detectors[start:start + width]
                futures = [pool.submit(run_guarded, detector) for detector in batch]
                outcomes.extend(future.result() for future in futures)
        return outcomes

    def detect_all_tools(
        self,
        force_refresh: bool = False,
        detectors: Sequence[Detector] | None = None,
    ) -> list[ToolInfo]:
        """Detect every registered tool (or the given detectors).

        A detector that fails outright is omitted from the result; all others
        are returned in registration order.
        """
        if detectors is None:
            detectors = self.default_detectors(force_refresh)
        outcomes = self.run_detectors(detectors)
        failed = [o.label for o in outcomes if not o.ok]
        if failed:
            logger.info(f"{len(failed)} detector(s) failed and were skipped: {', '.join(failed)}")
        return [o.tool for o in outcomes if o.tool is not None]

    def detect_all_tools_with_summary(
        self,
        force_refresh: bool = False,
        detectors: Sequence[Detector] | None = None,
    ) -> BatchResult:
        """detect_all_tools plus timing and a success/failure breakdown."""
        start = time.perf_counter()
        tools = self.detect_all_tools(force_refresh=force_refresh, detectors=detectors)
        elapsed_ms = (time.perf_counter() - start) * 1000
        summary = DetectionSummary.from_results(tools, elapsed_ms)
        logger.info(f"Detection finished: {summary.summary()}")
        return BatchResult(tools=tools, summary=summary)

    # -- uninstall --------------------------------------------------------

    def get_uninstall_info(self, tool_name: str) -> UninstallInfo:
        """Uninstall command (or manual instructions) for this host; runs nothing."""
        return get_uninstall_info(tool_name, self.host.os_family)

    def uninstall_tool(self, tool_name: str) -> UninstallResult:
        """Run the table-listed uninstall command for this host.

        Unlisted tools or platforms fail with a 'please uninstall manually'
        message. A successful run invalidates the tool's cache entry.
        """
        reason = unsupported_reason(tool_name, self.host.os_family)
        if reason is not None:
            return UninstallResult(success=False, error=reason)

        command = get_uninstall_info(tool_name, self.host.os_family).command
        logger.warning(f"Uninstalling {tool_name}: {command}")
        try:
            result = self.executor.execute_safe(command)
        except Exception as e:
            return UninstallResult(success=False, error=str(e) or "Unknown error", command=command)

        if result.success:
            self.invalidate_cache_for(tool_name)
            return UninstallResult(success=True, command=command)
        return UninstallResult(
            success=False,
            error=result.stderr.strip() or "Uninstallation failed",
            command=command,
        )


def _fallback_candidates(base: str, exe_name: str) -> list[str]:
    """``base/exe`` followed by ``base/<subdir>/exe`` for each subdirectory, existing files only."""
    candidates = []
    direct = os.path.join(base, exe_name)
    if os.path.isfile(direct):
        candidates.append(direct)
    try:
        with os.scandir(base) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError:
        return candidates
    for entry in entries:
        try:
            if not entry.is_dir():
                continue
        except OSError:
            continue
        exe_path = os.path.join(entry.path, exe_name)
        if os.path.isfile(exe_path):
            candidates.append(exe_path)
    return candidates
