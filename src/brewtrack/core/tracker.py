"""Run coordinator: snapshot, refresh, diff, report and upgrade."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from rich.console import Console

from brewtrack.analysis.diff import compute_diff
from brewtrack.analysis.enrich import SECTIONS, EnrichmentReporter
from brewtrack.analysis.gate import UpgradeGate
from brewtrack.analysis.snapshot import InventorySnapshot
from brewtrack.cli import renderers
from brewtrack.core.config import TrackerConfig
from brewtrack.core.errors import EXIT_SUCCESS, BrewError, MissingToolError
from brewtrack.core.logging import get_logger
from brewtrack.core.models import (
    DiffResult,
    Inventory,
    PackageKind,
    PackageRecord,
    UpgradeDecision,
)
from brewtrack.core.runlog import RunLog, RunLogEntry
from brewtrack.core.shell import command_exists
from brewtrack.providers.base import MetadataSource, PackageManager
from brewtrack.providers.metadata import MetadataLookup

log = get_logger(__name__)

INSTALL_HINTS = {
    "brew": "Install Homebrew from https://brew.sh",
}


@dataclass
class RunSummary:
    """Everything a completed run produced."""

    before: Inventory
    after: Inventory
    diff: DiffResult
    records: Dict[str, List[PackageRecord]] = field(default_factory=dict)
    decision: UpgradeDecision = UpgradeDecision.NONE_AVAILABLE
    log_path: Optional[Path] = None
    error_count: int = 0
    exit_code: int = EXIT_SUCCESS

    @property
    def outdated_count(self) -> int:
        return self.diff.outdated_count


class UpdateTracker:
    """Drives one tracker run from preflight to run log cleanup.

    Individual external calls may fail without stopping the run; such
    failures are recorded in the run log. Only missing tools are fatal.
    """

    def __init__(
        self,
        config: TrackerConfig,
        manager: PackageManager,
        metadata: MetadataSource,
        confirm: Callable[[], bool],
        console: Console = renderers.console,
        tool_exists: Optional[Callable[[str], bool]] = None,
    ) -> None:
        self.config = config
        self.manager = manager
        self.metadata = metadata
        self.confirm = confirm
        self.console = console
        self.tool_exists = tool_exists or command_exists

    def preflight(self) -> None:
        """Check that every required executable is installed.

        Raises:
            MissingToolError: For the first missing executable.
        """
        for tool in self.config.required_tools:
            if not self.tool_exists(tool):
                log.error("preflight_failed", tool=tool)
                raise MissingToolError(tool=tool, hint=INSTALL_HINTS.get(Path(tool).name))
        log.debug("preflight_ok", tools=self.config.required_tools)

    def _notify(self, run_log: RunLog) -> Callable[[RunLogEntry], None]:
        def notify(entry: RunLogEntry) -> None:
            renderers.warning(self.console, entry, run_log.path)
        return notify

    async def _outdated(self, kind: PackageKind, run_log: RunLog) -> tuple[str, ...]:
        try:
            return tuple(await self.manager.list_outdated(kind))
        except BrewError as e:
            run_log.append(
                "outdated",
                f"Could not list outdated {kind.plural}; assuming none",
                error=str(e),
            )
            return ()

    async def report(self, diff: DiffResult, run_log: RunLog) -> Dict[str, List[PackageRecord]]:
        """Render the four report sections in their fixed order.

        Args:
            diff: The run's diff.
            run_log: Receives metadata lookup failures.

        Returns:
            Records per section key.
        """
        reporter = EnrichmentReporter(
            MetadataLookup(self.metadata),
            self.console,
            run_log,
            concurrency=self.config.concurrency,
        )
        names = {
            "outdated_formulae": diff.outdated_formulae,
            "outdated_casks": diff.outdated_casks,
            "new_formulae": diff.new_formulae,
            "new_casks": diff.new_casks,
        }

        records: Dict[str, List[PackageRecord]] = {}
        for section in SECTIONS:
            renderers.step(self.console, section.progress)
            records[section.key] = await reporter.render(section, names[section.key])
        return records

    async def _gate(self, diff: DiffResult, run_log: RunLog) -> UpgradeDecision:
        count = diff.outdated_count

        def confirm() -> bool:
            renderers.upgrade_summary(self.console, count)
            return self.confirm()

        errors_before = run_log.count
        decision = await UpgradeGate(self.manager, run_log).decide(
            count,
            confirm,
            on_upgrade_start=lambda: renderers.upgrade_started(self.console),
        )

        if decision is UpgradeDecision.NONE_AVAILABLE:
            renderers.nothing_to_upgrade(self.console)
        elif decision is UpgradeDecision.SKIPPED:
            renderers.upgrade_skipped(self.console)
        elif run_log.count == errors_before:
            renderers.upgrade_completed(self.console)
        return decision

    async def run(self) -> RunSummary:
        """Run the whole tracker pipeline.

        Returns:
            The run's summary. Its exit code is 0 for every completed run.

        Raises:
            MissingToolError: If brew (or the metadata tool) is missing.
        """
        self.preflight()

        start = time.perf_counter()
        run_log = RunLog.open(self.config.log_dir)
        run_log.notify = self._notify(run_log)
        log.info("run_start", log_path=str(run_log.path) if run_log.path else None)

        try:
            snapshot = InventorySnapshot(self.manager, run_log)
            renderers.banner(self.console)
            if run_log.open_error is not None:
                renderers.run_log_unavailable(self.console, run_log.open_error)

            renderers.step(self.console, "📋 Recording current package lists...")
            before = await snapshot.capture("before")

            renderers.step(self.console, "🔄 Updating Homebrew...")
            try:
                await self.manager.refresh_index()
            except BrewError as e:
                run_log.append("refresh", "Updating the package index failed", error=str(e))

            after = await snapshot.capture("after")

            renderers.step(self.console, "🔍 Finding outdated packages...")
            outdated_formulae, outdated_casks = await asyncio.gather(
                self._outdated(PackageKind.FORMULA, run_log),
                self._outdated(PackageKind.CASK, run_log),
            )

            renderers.step(self.console, "🆕 Finding new packages in repositories...")
            diff = compute_diff(before, after, outdated_formulae, outdated_casks, run_log)

            records = await self.report(diff, run_log)
            decision = await self._gate(diff, run_log)
        finally:
            log_path = run_log.finalize()

        if log_path is not None:
            renderers.run_log_notice(self.console, log_path, run_log.count)
        elif not run_log.is_empty:
            renderers.run_log_unsaved(self.console, run_log.count)
        renderers.finished(self.console)

        summary = RunSummary(
            before=before,
            after=after,
            diff=diff,
            records=records,
            decision=decision,
            log_path=log_path,
            error_count=run_log.count,
        )
        log.info(
            "run_complete",
            decision=decision.value,
            outdated=summary.outdated_count,
            errors=summary.error_count,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return summary
