"""Configuration module for the Brew Update Tracker."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

_DEF_APP_DIR = Path.home() / ".brewtrack"


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to default."""
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class TrackerConfig:
    """Configuration for a tracker run."""
    brew: str = "brew"
    metadata_tool: Optional[str] = None
    list_timeout: Optional[int] = 60
    search_timeout: Optional[int] = 300
    info_timeout: Optional[int] = 30
    update_timeout: Optional[int] = None
    upgrade_timeout: Optional[int] = None
    concurrency: int = 8
    log_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    app_dir: Path = _DEF_APP_DIR

    @property
    def metadata_executable(self) -> str:
        """The executable answering metadata queries (defaults to brew)."""
        return self.metadata_tool or self.brew

    @property
    def required_tools(self) -> list[str]:
        """Executables that must exist before a run may start."""
        tools = [self.brew]
        if self.metadata_executable not in tools:
            tools.append(self.metadata_executable)
        return tools


def load_config(**overrides: Any) -> TrackerConfig:
    """Build a TrackerConfig from the environment and explicit overrides.

    Environment variables:
        BREWTRACK_BREW: Path or name of the brew executable.
        BREWTRACK_CONCURRENCY: Parallel metadata lookups.
        BREWTRACK_LOG_DIR: Directory that receives run logs.
        BREWTRACK_HOME: Application directory (diagnostic logs).

    Args:
        **overrides: Field values that take precedence over the environment.
            ``None`` values are ignored.

    Returns:
        The resolved configuration.
    """
    config = TrackerConfig(
        brew=os.environ.get("BREWTRACK_BREW") or "brew",
        concurrency=_env_int("BREWTRACK_CONCURRENCY", 8),
    )
    if log_dir := os.environ.get("BREWTRACK_LOG_DIR"):
        config = replace(config, log_dir=Path(log_dir))
    if app_dir := os.environ.get("BREWTRACK_HOME"):
        config = replace(config, app_dir=Path(app_dir))

    explicit = {k: v for k, v in overrides.items() if v is not None}
    return replace(config, **explicit)


def app_dir() -> Path:
    """Application directory used before a TrackerConfig is loaded."""
    return Path(os.environ.get("BREWTRACK_HOME") or _DEF_APP_DIR)
