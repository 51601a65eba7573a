"""Data models for package snapshots, diffs and enrichment records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_HOMEPAGE = "Unable to retrieve homepage"
DEFAULT_DESCRIPTION = "Unable to retrieve description"


class PackageKind(Enum):
    """Enumeration of package kinds."""

    FORMULA = "formula"
    CASK = "cask"

    @property
    def plural(self) -> str:
        """Plural noun, also the key of the kind's entries in brew's JSON."""
        return "formulae" if self is PackageKind.FORMULA else "casks"


class InventoryScope(Enum):
    """Which listing a set of names came from."""

    INSTALLED = "installed"
    AVAILABLE = "available"


class UpgradeDecision(Enum):
    """Terminal states of the upgrade gate."""

    NONE_AVAILABLE = "none_available"
    UPGRADED = "upgraded"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Inventory:
    """Point-in-time snapshot of installed and available package names.

    Each set keeps the manager's listing order. ``incomplete`` names the
    (kind, scope) pairs whose query failed and were recorded as empty.
    """

    installed_formulae: tuple[str, ...] = ()
    installed_casks: tuple[str, ...] = ()
    available_formulae: tuple[str, ...] = ()
    available_casks: tuple[str, ...] = ()
    incomplete: frozenset[tuple[PackageKind, InventoryScope]] = frozenset()

    def names(self, kind: PackageKind, scope: InventoryScope) -> tuple[str, ...]:
        """Names for one kind and scope."""
        if scope is InventoryScope.INSTALLED:
            return self.installed_formulae if kind is PackageKind.FORMULA else self.installed_casks
        return self.available_formulae if kind is PackageKind.FORMULA else self.available_casks

    def installed(self, kind: PackageKind) -> tuple[str, ...]:
        return self.names(kind, InventoryScope.INSTALLED)

    def available(self, kind: PackageKind) -> tuple[str, ...]:
        return self.names(kind, InventoryScope.AVAILABLE)

    def is_complete(self, kind: PackageKind, scope: InventoryScope) -> bool:
        """Whether the query for this kind and scope succeeded."""
        return (kind, scope) not in self.incomplete


@dataclass(frozen=True)
class DiffResult:
    """Outdated and newly available packages for one run."""

    outdated_formulae: tuple[str, ...] = ()
    outdated_casks: tuple[str, ...] = ()
    new_formulae: tuple[str, ...] = ()
    new_casks: tuple[str, ...] = ()

    def outdated(self, kind: PackageKind) -> tuple[str, ...]:
        return self.outdated_formulae if kind is PackageKind.FORMULA else self.outdated_casks

    def new(self, kind: PackageKind) -> tuple[str, ...]:
        return self.new_formulae if kind is PackageKind.FORMULA else self.new_casks

    @property
    def outdated_count(self) -> int:
        """Total number of packages the manager can upgrade."""
        return len(self.outdated_formulae) + len(self.outdated_casks)


@dataclass(frozen=True)
class PackageRecord:
    """Descriptive metadata for one reported package.

    ``homepage`` and ``description`` always hold a real value or the
    default text. ``error`` is set when the metadata query itself failed.
    """

    name: str
    kind: PackageKind
    homepage: str = DEFAULT_HOMEPAGE
    description: str = DEFAULT_DESCRIPTION
    error: str | None = field(default=None, compare=False)

    @property
    def lookup_failed(self) -> bool:
        return self.error is not None
