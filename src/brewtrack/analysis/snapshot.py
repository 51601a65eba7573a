"""Capture point-in-time inventories of installed and available packages."""

from __future__ import annotations

import asyncio
import time

from brewtrack.core.errors import BrewError
from brewtrack.core.logging import get_logger
from brewtrack.core.models import Inventory, InventoryScope, PackageKind
from brewtrack.core.runlog import RunLog
from brewtrack.providers.base import PackageManager

log = get_logger(__name__)


class InventorySnapshot:
    """Queries the package manager for the four inventory sets.

    A failed query leaves its set empty, marks it incomplete, and is
    recorded in the run log.
    """

    def __init__(self, manager: PackageManager, run_log: RunLog) -> None:
        self.manager = manager
        self.run_log = run_log

    async def _query(
        self, kind: PackageKind, scope: InventoryScope, label: str
    ) -> tuple[str, ...] | None:
        if scope is InventoryScope.INSTALLED:
            query = self.manager.list_installed
        else:
            query = self.manager.list_available

        try:
            return tuple(await query(kind))
        except BrewError as e:
            self.run_log.append(
                "snapshot",
                f"Could not list {scope.value} {kind.plural}; the {label} set is incomplete",
                error=str(e),
            )
            return None

    async def capture(self, label: str = "snapshot") -> Inventory:
        """Capture an inventory.

        Args:
            label: Name of this snapshot in log messages ("before"/"after").

        Returns:
            A fully populated Inventory, with empty sets for failed queries.
        """
        start = time.perf_counter()
        log.info("snapshot_capture_start", label=label)

        pairs = [
            (PackageKind.FORMULA, InventoryScope.INSTALLED),
            (PackageKind.CASK, InventoryScope.INSTALLED),
            (PackageKind.FORMULA, InventoryScope.AVAILABLE),
            (PackageKind.CASK, InventoryScope.AVAILABLE),
        ]
        results = await asyncio.gather(
            *(self._query(kind, scope, label) for kind, scope in pairs)
        )

        incomplete = frozenset(pair for pair, names in zip(pairs, results) if names is None)
        sets = [names or () for names in results]
        inventory = Inventory(
            installed_formulae=sets[0],
            installed_casks=sets[1],
            available_formulae=sets[2],
            available_casks=sets[3],
            incomplete=incomplete,
        )

        log.info(
            "snapshot_capture_complete",
            label=label,
            installed_formulae=len(inventory.installed_formulae),
            installed_casks=len(inventory.installed_casks),
            available_formulae=len(inventory.available_formulae),
            available_casks=len(inventory.available_casks),
            incomplete=len(incomplete),
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return inventory
