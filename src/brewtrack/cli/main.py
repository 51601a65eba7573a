"""CLI entry point for the Brew Update Tracker."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console

from brewtrack.analysis.gate import is_affirmative
from brewtrack.cli import renderers
from brewtrack.cli.renderers import console
from brewtrack.core.config import load_config
from brewtrack.core.errors import (
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    BrewError,
    format_error_message,
)
from brewtrack.core.logging import configure_logging, get_logger
from brewtrack.core.tracker import UpdateTracker
from brewtrack.providers.homebrew import Homebrew

log = get_logger(__name__)

EXIT_INTERRUPTED = 130

app = typer.Typer(
    help="Brew Update Tracker: see what 'brew update' brought in before upgrading.",
    add_completion=False,
)


def handle_error(error: Exception) -> int:
    """Handle errors and return appropriate exit codes.

    Args:
        error: The exception to handle.

    Returns:
        An integer exit code.
    """
    if isinstance(error, BrewError):
        log.error(
            "cli_error",
            error_type=type(error).__name__,
            message=error.message,
            context=error.context,
        )
        console.print(f"\n{format_error_message(error)}\n", style="bold red", markup=False)
        return EXIT_USER_ERROR
    else:
        log.error(
            "unexpected_error",
            error=str(error),
            exc_info=True
        )
        console.print(
            f"\n⚠️ Unexpected error occurred: {error}\n",
            style="bold red",
            markup=False,
        )
        return EXIT_SYSTEM_ERROR


def make_confirm(out: Console, assume_yes: bool = False) -> Callable[[], bool]:
    """Build the confirmation callback for the upgrade gate.

    Args:
        out: Console used for the prompt.
        assume_yes: Answer 'y' without reading standard input.

    Returns:
        A callable returning True when the operator agreed.
    """
    def confirm() -> bool:
        prompt = renderers.upgrade_prompt()
        if assume_yes:
            out.print(f"{prompt}y")
            return True
        try:
            answer = out.input(prompt)
        except (EOFError, KeyboardInterrupt):
            out.print()
            return False
        return is_affirmative(answer)

    return confirm


@app.command()
def run(
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Upgrade without asking for confirmation"
    ),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-j", min=1, help="Parallel metadata lookups"
    ),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", help="Directory for the run's error log"
    ),
    log_level: str = typer.Option("INFO", "--log-level", help="Diagnostic log level"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Echo diagnostics to stderr"),
) -> None:
    """Record packages, update Homebrew, report what changed and offer to upgrade."""
    try:
        config = load_config(concurrency=concurrency, log_dir=log_dir)
        configure_logging(
            level=log_level,
            log_dir=config.app_dir / "logs",
            enable_console=verbose,
            force=True,
        )
        brew = Homebrew(config)
        tracker = UpdateTracker(
            config,
            manager=brew,
            metadata=brew,
            confirm=make_confirm(console, assume_yes=yes),
            console=console,
        )
        summary = asyncio.run(tracker.run())
    except KeyboardInterrupt:
        console.print("\n✋ Interrupted.", style="yellow")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        sys.exit(handle_error(e))

    sys.exit(summary.exit_code)


if __name__ == "__main__":
    app()
