"""Confirmation gate in front of the upgrade action."""

from __future__ import annotations

from typing import Callable

from brewtrack.core.errors import BrewError
from brewtrack.core.logging import get_logger
from brewtrack.core.models import UpgradeDecision
from brewtrack.core.runlog import RunLog
from brewtrack.providers.base import PackageManager

log = get_logger(__name__)


def is_affirmative(answer: str | None) -> bool:
    """Whether a prompt answer is a single 'y' or 'Y'."""
    return (answer or "").strip().lower() == "y"


class UpgradeGate:
    """Asks for confirmation and delegates the upgrade to the manager.

    The upgrade is attempted once. Its failure is recorded in the run log
    but does not change the decision.
    """

    def __init__(self, manager: PackageManager, run_log: RunLog) -> None:
        self.manager = manager
        self.run_log = run_log

    async def decide(
        self,
        outdated_count: int,
        confirm: Callable[[], bool],
        on_upgrade_start: Callable[[], None] | None = None,
    ) -> UpgradeDecision:
        """Decide whether to upgrade and run the upgrade if confirmed.

        Args:
            outdated_count: Number of packages that can be upgraded.
            confirm: Asks the operator; called only when there is work to do.
            on_upgrade_start: Called right before the upgrade runs.

        Returns:
            The gate's terminal state.
        """
        if outdated_count <= 0:
            log.info("upgrade_gate", decision=UpgradeDecision.NONE_AVAILABLE.value)
            return UpgradeDecision.NONE_AVAILABLE

        if not confirm():
            log.info("upgrade_gate", decision=UpgradeDecision.SKIPPED.value, count=outdated_count)
            return UpgradeDecision.SKIPPED

        if on_upgrade_start is not None:
            on_upgrade_start()

        try:
            await self.manager.perform_upgrade()
        except BrewError as e:
            self.run_log.append("upgrade", "The upgrade did not complete successfully", error=str(e))

        log.info("upgrade_gate", decision=UpgradeDecision.UPGRADED.value, count=outdated_count)
        return UpgradeDecision.UPGRADED
