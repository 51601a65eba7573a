"""Annotate reported packages with metadata and render them."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Iterable, List

from rich.console import Console

from brewtrack.cli import renderers
from brewtrack.core.logging import get_logger
from brewtrack.core.models import PackageKind, PackageRecord
from brewtrack.core.runlog import RunLog
from brewtrack.providers.metadata import MetadataLookup

log = get_logger(__name__)


@dataclass(frozen=True)
class ReportSection:
    """One of the four report sections."""

    key: str
    kind: PackageKind
    progress: str
    heading: str
    empty_message: str


OUTDATED_FORMULAE = ReportSection(
    key="outdated_formulae",
    kind=PackageKind.FORMULA,
    progress="📊 Processing updated formulae...",
    heading="📦 Updated Formulae:",
    empty_message="No formula updates available.",
)
OUTDATED_CASKS = ReportSection(
    key="outdated_casks",
    kind=PackageKind.CASK,
    progress="📊 Processing updated casks...",
    heading="📦 Updated Casks:",
    empty_message="No cask updates available.",
)
NEW_FORMULAE = ReportSection(
    key="new_formulae",
    kind=PackageKind.FORMULA,
    progress="📊 Processing new formulae in repositories...",
    heading="🆕 New Formulae:",
    empty_message="No new formulae available.",
)
NEW_CASKS = ReportSection(
    key="new_casks",
    kind=PackageKind.CASK,
    progress="📊 Processing new casks in repositories...",
    heading="🆕 New Casks:",
    empty_message="No new casks available.",
)

SECTIONS = (OUTDATED_FORMULAE, OUTDATED_CASKS, NEW_FORMULAE, NEW_CASKS)


class EnrichmentReporter:
    """Looks up metadata for each package in a section and prints it.

    Lookups within a section run concurrently, bounded by ``concurrency``.
    Blocks are printed in input order once every lookup has finished.
    """

    def __init__(
        self,
        lookup: MetadataLookup,
        console: Console,
        run_log: RunLog,
        concurrency: int = 8,
    ) -> None:
        self.lookup = lookup
        self.console = console
        self.run_log = run_log
        self.concurrency = max(1, concurrency)

    async def _lookup_all(self, names: List[str], kind: PackageKind) -> List[PackageRecord]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(name: str) -> PackageRecord:
            async with semaphore:
                return await self.lookup.lookup(name, kind)

        return list(await asyncio.gather(*(bounded(name) for name in names)))

    async def render(self, section: ReportSection, names: Iterable[str]) -> List[PackageRecord]:
        """Render one report section.

        Args:
            section: Which section is being reported.
            names: Package names, already deduplicated, in report order.

        Returns:
            One PackageRecord per name, in input order.
        """
        names = list(names)
        if not names:
            renderers.status_line(self.console, section.empty_message)
            log.debug("report_section_empty", section=section.key)
            return []

        start = time.perf_counter()
        records = await self._lookup_all(names, section.kind)

        for record in records:
            if record.lookup_failed:
                self.run_log.append(
                    "metadata",
                    f"Could not retrieve info for {section.kind.value} '{record.name}'",
                    error=record.error,
                )

        renderers.section_heading(self.console, section.heading)
        for record in records:
            renderers.package_block(self.console, record)

        log.info(
            "report_section_complete",
            section=section.key,
            count=len(records),
            failed=sum(1 for r in records if r.lookup_failed),
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return records
