"""Homebrew provider."""

from __future__ import annotations

import time
from typing import List

from brewtrack.core.config import TrackerConfig
from brewtrack.core.errors import BrewCommandError
from brewtrack.core.logging import get_logger
from brewtrack.core.models import PackageKind
from brewtrack.core.shell import run_capture, run_lines, run_passthrough

log = get_logger(__name__)

KIND_FLAGS = {
    PackageKind.FORMULA: "--formula",
    PackageKind.CASK: "--cask",
}


class Homebrew:
    """Homebrew implementation of PackageManager and MetadataSource."""

    def __init__(self, config: TrackerConfig) -> None:
        self.config = config
        self.brew = config.brew

    async def _list(self, kind: PackageKind, *args: str, timeout: int | None) -> List[str]:
        start = time.perf_counter()
        names = await run_lines(self.brew, *args, KIND_FLAGS[kind], timeout=timeout)
        log.debug(
            "brew_list_complete",
            command=args[0],
            kind=kind.value,
            count=len(names),
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return names

    async def list_installed(self, kind: PackageKind) -> List[str]:
        """List installed formulae or casks.

        Args:
            kind: Formula or cask.

        Returns:
            Installed names in brew's listing order.
        """
        return await self._list(kind, "list", timeout=self.config.list_timeout)

    async def list_available(self, kind: PackageKind) -> List[str]:
        """List all formulae or casks known to the enabled taps.

        Args:
            kind: Formula or cask.

        Returns:
            Available names in brew's listing order.
        """
        start = time.perf_counter()
        names = await run_lines(
            self.brew, "search", KIND_FLAGS[kind], "", timeout=self.config.search_timeout
        )
        log.debug(
            "brew_list_complete",
            command="search",
            kind=kind.value,
            count=len(names),
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return names

    async def list_outdated(self, kind: PackageKind) -> List[str]:
        """List outdated formulae or casks.

        Args:
            kind: Formula or cask.

        Returns:
            Names brew reports as upgradable.
        """
        return await self._list(kind, "outdated", "--quiet", timeout=self.config.list_timeout)

    async def refresh_index(self) -> None:
        """Run ``brew update`` attached to the terminal.

        Raises:
            BrewCommandError: If the update exits non-zero.
        """
        code = await run_passthrough(self.brew, "update", timeout=self.config.update_timeout)
        if code != 0:
            raise BrewCommandError(command=f"{self.brew} update", returncode=code)

    async def perform_upgrade(self) -> None:
        """Run ``brew upgrade`` attached to the terminal.

        Raises:
            BrewCommandError: If the upgrade exits non-zero.
        """
        code = await run_passthrough(self.brew, "upgrade", timeout=self.config.upgrade_timeout)
        if code != 0:
            raise BrewCommandError(command=f"{self.brew} upgrade", returncode=code)

    async def query_metadata(self, kind: PackageKind, name: str) -> str:
        """Get the raw ``brew info --json=v2`` document for a package.

        The document is returned unparsed so the caller can sanitise it.

        Args:
            kind: Formula or cask.
            name: Package name.

        Returns:
            The command's standard output.

        Raises:
            BrewCommandError: If the command exits non-zero.
            BrewTimeoutError: If the command times out.
        """
        cmd = (self.config.metadata_executable, "info", "--json=v2", KIND_FLAGS[kind], name)
        out, err, code = await run_capture(*cmd, timeout=self.config.info_timeout)
        if code != 0:
            raise BrewCommandError(
                command=" ".join(cmd),
                returncode=code,
                error=err or out,
                context={"package": name, "kind": kind.value},
            )
        return out
