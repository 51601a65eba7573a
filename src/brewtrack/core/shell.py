"""Asynchronous shell command execution with timeouts."""

from __future__ import annotations

import asyncio
import os
import shutil
import time
from typing import Optional

from brewtrack.core.errors import BrewCommandError, BrewTimeoutError
from brewtrack.core.logging import get_logger

log = get_logger(__name__)

ENV_OVERRIDES = {
    "LANG": "C",
    "HOMEBREW_NO_COLOR": "1",
    "HOMEBREW_NO_AUTO_UPDATE": "1",
}


def command_env() -> dict[str, str]:
    """Environment for brew subprocesses.

    Returns:
        A copy of the current environment with brewtrack's overrides applied.
    """
    env = os.environ.copy()
    env.update(ENV_OVERRIDES)
    return env


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name or path to check.

    Returns:
        True if the command exists, False otherwise.
    """
    return shutil.which(name) is not None


async def run_capture(
    *cmd: str, timeout: Optional[int] = 30
) -> tuple[str, str, int]:
    """Run a shell command asynchronously with optional timeout

    Args:
        *cmd: Command and its arguments to run.
        timeout: Timeout in seconds.

    Returns:
        A tuple of (stdout, stderr, returncode).

    Raises:
        BrewTimeoutError: If the command times out.
        BrewCommandError: If the executable cannot be started.
    """
    start = time.perf_counter()
    log.debug("command_start", command=" ".join(cmd), timeout=timeout)

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=command_env(),
        )
    except OSError as e:
        log.error("command_spawn_failed", command=" ".join(cmd), error=str(e))
        raise BrewCommandError(
            "Failed to start command",
            command=" ".join(cmd),
            error=str(e),
        ) from e

    try:
        out, err = await asyncio.wait_for(process.communicate(), timeout)
        duration_ms = int((time.perf_counter() - start) * 1000)
        log.info(
            "command_complete",
            command=" ".join(cmd),
            returncode=process.returncode,
            duration_ms=duration_ms
        )

    except asyncio.TimeoutError as e:
        duration_ms = int((time.perf_counter() - start) * 1000)
        log.error(
            "command_timeout",
            command=" ".join(cmd),
            timeout=timeout,
            duration_ms=duration_ms
        )
        try:
            process.kill()
        finally:
            raise BrewTimeoutError(
                f"Command timed out after {timeout}s",
                command=" ".join(cmd),
                timeout=timeout,
                context={"duration_ms": duration_ms}
            ) from e

    return (
        out.decode(errors="replace").strip(),
        err.decode(errors="replace").strip(),
        process.returncode,
    )


async def run_lines(*cmd: str, timeout: Optional[int] = 30) -> list[str]:
    """Run a shell command and return its non-blank output lines.

    Lines are stripped and deduplicated, keeping first-seen order.

    Args:
        *cmd: Command and its arguments to run.
        timeout: Timeout in seconds.

    Returns:
        Output lines in command order.

    Raises:
        BrewCommandError: If the command exits non-zero.
        BrewTimeoutError: If the command times out.
    """
    out, err, code = await run_capture(*cmd, timeout=timeout)

    if code != 0:
        log.error(
            "command_failed",
            command=" ".join(cmd),
            error=err or out,
            returncode=code
        )
        raise BrewCommandError(
            command=" ".join(cmd),
            returncode=code,
            error=err or out,
        )

    lines = (line.strip() for line in out.splitlines())
    return list(dict.fromkeys(line for line in lines if line))


async def run_passthrough(*cmd: str, timeout: Optional[int] = None) -> int:
    """Run a command attached to the current terminal.

    Used for long-running commands whose progress the operator should see.

    Args:
        *cmd: Command and its arguments to run.
        timeout: Optional timeout in seconds.

    Returns:
        The command's exit code.

    Raises:
        BrewTimeoutError: If the command times out.
        BrewCommandError: If the executable cannot be started.
    """
    start = time.perf_counter()
    log.debug("command_start", command=" ".join(cmd), timeout=timeout, passthrough=True)

    env = os.environ.copy()
    env["LANG"] = ENV_OVERRIDES["LANG"]
    try:
        process = await asyncio.create_subprocess_exec(*cmd, env=env)
    except OSError as e:
        log.error("command_spawn_failed", command=" ".join(cmd), error=str(e))
        raise BrewCommandError(
            "Failed to start command",
            command=" ".join(cmd),
            error=str(e),
        ) from e

    try:
        returncode = await asyncio.wait_for(process.wait(), timeout)
    except asyncio.TimeoutError as e:
        log.error("command_timeout", command=" ".join(cmd), timeout=timeout)
        try:
            process.kill()
        finally:
            raise BrewTimeoutError(command=" ".join(cmd), timeout=timeout) from e

    duration_ms = int((time.perf_counter() - start) * 1000)
    log.info(
        "command_complete",
        command=" ".join(cmd),
        returncode=returncode,
        duration_ms=duration_ms
    )
    return returncode
