"""Unit tests for the async shell helpers.

These run the current Python interpreter as a stand-in for brew.
"""

import asyncio
import sys

import pytest

from brewtrack.core.errors import BrewCommandError, BrewTimeoutError
from brewtrack.core.shell import (
    command_env,
    command_exists,
    run_capture,
    run_lines,
)

PY = sys.executable


def py(code: str) -> tuple[str, str, str]:
    return (PY, "-c", code)


class TestRunCapture:
    """Tests for run_capture."""

    def test_returns_output_and_code(self) -> None:
        """stdout, stderr and the exit code are returned stripped."""
        out, err, code = asyncio.run(
            run_capture(*py("import sys; print(' hi '); print('oops', file=sys.stderr); sys.exit(2)"))
        )
        assert out == "hi"
        assert err == "oops"
        assert code == 2

    def test_timeout_raises(self) -> None:
        """A command running past its timeout raises BrewTimeoutError."""
        with pytest.raises(BrewTimeoutError) as exc:
            asyncio.run(run_capture(*py("import time; time.sleep(5)"), timeout=0.2))
        assert exc.value.context["timeout"] == 0.2

    def test_missing_executable_raises(self) -> None:
        """An executable that cannot be started raises BrewCommandError."""
        with pytest.raises(BrewCommandError):
            asyncio.run(run_capture("brewtrack-no-such-binary-xyz"))

    def test_environment_overrides(self) -> None:
        """Subprocesses never auto-update or colourise."""
        env = command_env()
        assert env["HOMEBREW_NO_AUTO_UPDATE"] == "1"
        assert env["HOMEBREW_NO_COLOR"] == "1"


class TestRunLines:
    """Tests for run_lines."""

    def test_blank_lines_and_duplicates_dropped(self) -> None:
        """Output is split, stripped and deduplicated in order."""
        lines = asyncio.run(run_lines(*py("print('b\\n\\n a \\nb\\nc')")))
        assert lines == ["b", "a", "c"]

    def test_non_zero_exit_raises(self) -> None:
        """A failing command raises BrewCommandError with its exit code."""
        with pytest.raises(BrewCommandError) as exc:
            asyncio.run(run_lines(*py("import sys; sys.exit(3)")))
        assert exc.value.context["returncode"] == 3


def test_command_exists() -> None:
    """command_exists finds the interpreter and rejects nonsense."""
    assert command_exists(PY) is True
    assert command_exists("brewtrack-no-such-binary-xyz") is False
