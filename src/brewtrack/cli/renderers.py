"""Renderers for the tracker's console report using Rich."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

from brewtrack.core.models import PackageRecord
from brewtrack.core.runlog import RunLogEntry

console = Console(highlight=False)

TITLE = "🍺 Brew Update Tracker"


def banner(out: Console) -> None:
    """Print the run banner."""
    out.print(TITLE, style="bold green")
    out.print("=" * 23, style="bold green")


def step(out: Console, text: str) -> None:
    """Print a progress line for a pipeline step."""
    out.print(f"\n{text}", style="cyan")


def section_heading(out: Console, text: str) -> None:
    """Print the heading above a list of package blocks."""
    out.print(f"\n{text}", style="bold green")


def status_line(out: Console, text: str) -> None:
    """Print a single 'nothing to report' line."""
    out.print(f"  {text}", style="green")


def package_block(out: Console, record: PackageRecord) -> None:
    """Print the three-line block for one package.

    Args:
        out: Console to print to.
        record: The package to describe.
    """
    out.print(f"  - {escape(record.name)}:", soft_wrap=True, emoji=False)
    out.print(f"      Homepage: {escape(record.homepage)}", soft_wrap=True, emoji=False)
    out.print(f"      Description: {escape(record.description)}", soft_wrap=True, emoji=False)


def warning(out: Console, entry: RunLogEntry, path: Optional[Path]) -> None:
    """Print the one-line notice for a non-fatal failure."""
    details = f" (details in {escape(str(path))})" if path is not None else ""
    out.print(
        f"  ⚠️ {escape(entry.message)}{details}",
        style="yellow",
        soft_wrap=True,
    )


def upgrade_summary(out: Console, count: int) -> None:
    out.print(f"\n🚀 Found {count} package(s) that can be upgraded.", style="bold green")


def upgrade_prompt() -> str:
    return "[yellow]Do you want to perform 'brew upgrade' now? (y/n): [/yellow]"


def upgrade_started(out: Console) -> None:
    out.print("\n⬆️ Running 'brew upgrade'...", style="cyan")


def upgrade_completed(out: Console) -> None:
    out.print("✅ Upgrade completed!", style="green")


def upgrade_skipped(out: Console) -> None:
    out.print("\n✋ Upgrade skipped.", style="yellow")


def nothing_to_upgrade(out: Console) -> None:
    out.print("\n✅ No packages to upgrade!", style="green")


def run_log_notice(out: Console, path: Path, count: int) -> None:
    """Point the operator at the run log when errors were recorded."""
    out.print(
        f"\n⚠️ {count} error(s) occurred during this run. See {escape(str(path))}",
        style="bold yellow",
        soft_wrap=True,
    )


def run_log_unavailable(out: Console, reason: str) -> None:
    out.print(
        f"⚠️ Could not create the run log ({escape(reason)}); errors will only be shown here.",
        style="yellow",
        soft_wrap=True,
    )


def run_log_unsaved(out: Console, count: int) -> None:
    out.print(
        f"\n⚠️ {count} error(s) occurred during this run. No run log could be saved.",
        style="bold yellow",
    )


def finished(out: Console) -> None:
    out.print(f"\n{TITLE} completed!", style="bold green")
