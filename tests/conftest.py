"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import io
import json
import os
import tempfile

# Diagnostic logs go to a throwaway directory instead of ~/.brewtrack.
os.environ.setdefault("BREWTRACK_HOME", tempfile.mkdtemp(prefix="brewtrack-tests-"))

import pytest
from rich.console import Console

from brewtrack.core.config import TrackerConfig
from brewtrack.core.errors import BrewCommandError
from brewtrack.core.models import PackageKind
from brewtrack.core.runlog import RunLog


class FakeBrew:
    """In-memory package manager and metadata source.

    ``failures`` holds the names of calls that should fail, e.g.
    ``"installed:formula"``, ``"available:cask:after"``, ``"outdated:formula"``,
    ``"refresh"``, ``"upgrade"`` or ``"info:<name>"``.
    """

    def __init__(
        self,
        installed=None,
        available_before=None,
        available_after=None,
        outdated=None,
        metadata=None,
        failures=(),
        raw_metadata=None,
    ):
        self.installed = installed or {}
        self.available_before = available_before or {}
        self.available_after = (
            available_after if available_after is not None else self.available_before
        )
        self.outdated = outdated or {}
        self.metadata = metadata or {}
        self.raw_metadata = raw_metadata or {}
        self.failures = set(failures)
        self.refreshed = False
        self.upgrades = 0
        self.metadata_calls = []

    def _fail(self, key):
        if key in self.failures:
            raise BrewCommandError(command=f"brew {key}", returncode=1, error="boom")

    async def list_installed(self, kind):
        self._fail(f"installed:{kind.value}")
        return list(self.installed.get(kind, []))

    async def list_available(self, kind):
        stage = "after" if self.refreshed else "before"
        self._fail(f"available:{kind.value}")
        self._fail(f"available:{kind.value}:{stage}")
        source = self.available_after if self.refreshed else self.available_before
        return list(source.get(kind, []))

    async def list_outdated(self, kind):
        self._fail(f"outdated:{kind.value}")
        return list(self.outdated.get(kind, []))

    async def refresh_index(self):
        self.refreshed = True
        self._fail("refresh")

    async def perform_upgrade(self):
        self.upgrades += 1
        self._fail("upgrade")

    async def query_metadata(self, kind, name):
        self.metadata_calls.append((kind, name))
        self._fail(f"info:{name}")
        if name in self.raw_metadata:
            return self.raw_metadata[name]
        entries = []
        if name in self.metadata:
            homepage, desc = self.metadata[name]
            entries.append({"name": name, "homepage": homepage, "desc": desc})
        return json.dumps({kind.plural: entries})


def make_console() -> Console:
    """Plain, wide console writing to a string buffer."""
    return Console(
        file=io.StringIO(),
        width=200,
        color_system=None,
        force_terminal=False,
        highlight=False,
    )


def output(console: Console) -> str:
    return console.file.getvalue()


@pytest.fixture
def console() -> Console:
    """Console capturing output for assertions."""
    return make_console()


@pytest.fixture
def run_log(tmp_path) -> RunLog:
    """Open run log in a temporary directory."""
    return RunLog.open(tmp_path)


@pytest.fixture
def config(tmp_path) -> TrackerConfig:
    """Tracker configuration writing run logs to a temporary directory."""
    return TrackerConfig(log_dir=tmp_path / "logs", concurrency=4)


@pytest.fixture
def fake_brew() -> FakeBrew:
    """A small Homebrew installation."""
    return FakeBrew(
        installed={PackageKind.FORMULA: ["a", "b"], PackageKind.CASK: ["firefox"]},
        available_before={PackageKind.FORMULA: ["a", "b"], PackageKind.CASK: ["firefox"]},
        available_after={
            PackageKind.FORMULA: ["a", "b", "c"],
            PackageKind.CASK: ["firefox"],
        },
        outdated={PackageKind.FORMULA: ["a"]},
        metadata={
            "a": ("https://a.example.org", "Formula a"),
            "c": ("https://c.example.org", "Formula c"),
        },
    )
