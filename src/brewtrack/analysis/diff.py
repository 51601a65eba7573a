"""Derive new and outdated package sets from two inventories."""

from __future__ import annotations

from typing import Optional

from brewtrack.core.logging import get_logger
from brewtrack.core.models import DiffResult, Inventory, InventoryScope, PackageKind
from brewtrack.core.runlog import RunLog

log = get_logger(__name__)


def diff_new(
    before: Optional[Inventory],
    after: Optional[Inventory],
    kind: PackageKind,
    run_log: Optional[RunLog] = None,
) -> tuple[str, ...]:
    """Packages available after the refresh that were not available before.

    Only the available sets are compared. Packages that disappeared are
    not reported. When an operand set is incomplete the result may
    overstate what is new; a warning is recorded but the result stands.

    Args:
        before: Inventory captured before the refresh.
        after: Inventory captured after the refresh.
        kind: Formula or cask.
        run_log: Receives degraded-input warnings.

    Returns:
        New names in the order of the after listing.
    """
    if before is None or after is None:
        missing = "before" if before is None else "after"
        log.warning("diff_missing_inventory", kind=kind.value, missing=missing)
        if run_log is not None:
            run_log.append(
                "diff",
                f"No {missing} inventory; new {kind.plural} cannot be determined",
            )
        return ()

    degraded = [
        label
        for label, inventory in (("before", before), ("after", after))
        if not inventory.is_complete(kind, InventoryScope.AVAILABLE)
    ]
    if degraded:
        log.warning("diff_degraded_input", kind=kind.value, incomplete=degraded)
        if run_log is not None:
            run_log.append(
                "diff",
                f"Available {kind.plural} list incomplete ({', '.join(degraded)}); "
                f"new {kind.plural} may be overstated",
            )

    known = set(before.available(kind))
    return tuple(name for name in after.available(kind) if name not in known)


def compute_diff(
    before: Optional[Inventory],
    after: Optional[Inventory],
    outdated_formulae: tuple[str, ...] = (),
    outdated_casks: tuple[str, ...] = (),
    run_log: Optional[RunLog] = None,
) -> DiffResult:
    """Combine the manager's outdated sets with the new-package diffs.

    Args:
        before: Inventory captured before the refresh.
        after: Inventory captured after the refresh.
        outdated_formulae: Outdated formulae as reported by the manager.
        outdated_casks: Outdated casks as reported by the manager.
        run_log: Receives degraded-input warnings.

    Returns:
        The run's DiffResult.
    """
    result = DiffResult(
        outdated_formulae=tuple(dict.fromkeys(outdated_formulae)),
        outdated_casks=tuple(dict.fromkeys(outdated_casks)),
        new_formulae=diff_new(before, after, PackageKind.FORMULA, run_log),
        new_casks=diff_new(before, after, PackageKind.CASK, run_log),
    )
    log.info(
        "diff_complete",
        outdated_formulae=len(result.outdated_formulae),
        outdated_casks=len(result.outdated_casks),
        new_formulae=len(result.new_formulae),
        new_casks=len(result.new_casks),
    )
    return result
