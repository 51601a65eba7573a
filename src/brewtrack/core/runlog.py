"""Run-scoped error log surfaced to the operator when anything went wrong."""

from __future__ import annotations

import errno
import os
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from brewtrack.core.logging import get_logger

log = get_logger(__name__)

LOG_PREFIX = "brew-update-tracker"
LOG_MODE = 0o644


@dataclass(frozen=True)
class RunLogEntry:
    """A single timestamped failure recorded during a run."""

    timestamp: datetime
    step: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    def format(self) -> str:
        """Render the entry as one log line."""
        line = f"[{self.timestamp.isoformat(timespec='seconds')}] {self.step}: {self.message}"
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items() if v is not None)
            if details:
                line += f" ({details})"
        return line


class RunLog:
    """Append-only error log for one run.

    The file is created when the log is opened and every entry is written
    through immediately. ``finalize`` deletes the file when nothing was
    recorded and returns its path otherwise. When no file could be
    created, ``path`` is None and entries are only kept in memory.
    """

    def __init__(
        self,
        path: Optional[Path],
        notify: Optional[Callable[[RunLogEntry], None]] = None,
    ) -> None:
        self.path = path
        self.notify = notify
        self._entries: list[RunLogEntry] = []
        self._lock = threading.Lock()
        self._closed = False
        self.open_error: Optional[str] = None

    @classmethod
    def open(
        cls,
        log_dir: Path,
        notify: Optional[Callable[[RunLogEntry], None]] = None,
        now: Optional[datetime] = None,
    ) -> RunLog:
        """Create the run log file in ``log_dir``.

        The file is created exclusively, so two runs started within the
        same second get separate files.

        Args:
            log_dir: Directory that receives the log file.
            notify: Called with every entry after it is written.
            now: Timestamp used for the file name (defaults to now).

        Returns:
            An open RunLog. If the file cannot be created, the returned log
            has no path and keeps its entries in memory only.
        """
        stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
        path = log_dir / f"{LOG_PREFIX}-{stamp}.log"
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            path = _create_exclusive(path)
            path.chmod(LOG_MODE)
        except OSError as e:
            log.warning("run_log_unavailable", path=str(path), error=str(e))
            run_log = cls(None, notify=notify)
            run_log.open_error = f"{path}: {e.strerror or e}"
            return run_log

        log.debug("run_log_opened", path=str(path))
        return cls(path, notify=notify)

    @property
    def entries(self) -> list[RunLogEntry]:
        with self._lock:
            return list(self._entries)

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def append(self, step: str, message: str, **context: Any) -> RunLogEntry:
        """Record a non-fatal failure.

        Args:
            step: Short name of the pipeline step that failed.
            message: Human readable description of the failure.
            **context: Extra key/value details written after the message.

        Returns:
            The recorded entry.
        """
        entry = RunLogEntry(
            timestamp=datetime.now(),
            step=step,
            message=message,
            context=context,
        )
        with self._lock:
            self._entries.append(entry)
            if self.path is not None and not self._closed:
                try:
                    with self.path.open("a", encoding="utf-8") as fh:
                        fh.write(entry.format() + "\n")
                except OSError as e:
                    log.error("run_log_write_failed", path=str(self.path), error=str(e))

        log.warning("run_log_entry", step=step, message=message, **context)
        if self.notify is not None:
            self.notify(entry)
        return entry

    def finalize(self) -> Optional[Path]:
        """Close the log, deleting the file when it holds no entries.

        Returns:
            The log path when errors were recorded to a file,
            otherwise None.
        """
        with self._lock:
            if self._closed or self.path is None:
                self._closed = True
                return self.path if self._entries else None
            self._closed = True
            empty = not self._entries

        if empty:
            self.path.unlink(missing_ok=True)
            log.debug("run_log_discarded", path=str(self.path))
            return None

        log.info("run_log_kept", path=str(self.path), entries=self.count)
        return self.path


def _create_exclusive(path: Path) -> Path:
    """Create ``path``, adding a numeric suffix while the name is taken."""
    candidate = path
    for attempt in range(1, 100):
        try:
            with candidate.open("x", encoding="utf-8"):
                return candidate
        except FileExistsError:
            candidate = path.with_name(f"{path.stem}-{os.getpid()}-{attempt}{path.suffix}")
    raise FileExistsError(errno.EEXIST, "No free run log name", str(path))
