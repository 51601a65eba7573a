"""Protocol definitions for the package manager and metadata source."""

from __future__ import annotations

from typing import Any, List, Protocol

from brewtrack.core.models import PackageKind


class PackageManager(Protocol):
    """Capabilities the tracker needs from a package manager.

    Implementations raise ``TransientError`` subclasses when a call fails.
    """

    async def list_installed(self, kind: PackageKind) -> List[str]:
        """List installed package names."""
        ...

    async def list_available(self, kind: PackageKind) -> List[str]:
        """List every package name the manager can install."""
        ...

    async def list_outdated(self, kind: PackageKind) -> List[str]:
        """List installed packages with a newer version available."""
        ...

    async def refresh_index(self) -> None:
        """Refresh the manager's package index."""
        ...

    async def perform_upgrade(self) -> None:
        """Upgrade every outdated package."""
        ...


class MetadataSource(Protocol):
    """Lookup of descriptive metadata for one package."""

    async def query_metadata(self, kind: PackageKind, name: str) -> Any:
        """Return the raw metadata document for a package."""
        ...
