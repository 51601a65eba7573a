"""Unit tests for RunLog."""

import stat
from datetime import datetime

from brewtrack.core.runlog import RunLog, RunLogEntry


class TestRunLogOpen:
    """Tests for creating the run log."""

    def test_file_name_is_timestamped(self, tmp_path) -> None:
        """The file name carries the run's start time."""
        run_log = RunLog.open(tmp_path, now=datetime(2026, 10, 18, 9, 5, 7))
        assert run_log.path == tmp_path / "brew-update-tracker-20261018-090507.log"
        assert run_log.path.exists()

    def test_file_is_world_readable(self, tmp_path) -> None:
        """The log can be read by anyone on the machine."""
        run_log = RunLog.open(tmp_path)
        mode = run_log.path.stat().st_mode
        assert mode & stat.S_IROTH
        assert mode & stat.S_IRGRP

    def test_creates_missing_directory(self, tmp_path) -> None:
        """The log directory is created when missing."""
        run_log = RunLog.open(tmp_path / "nested" / "dir")
        assert run_log.path.parent.is_dir()

    def test_unwritable_location_keeps_entries_in_memory(self, tmp_path) -> None:
        """A log directory below a regular file gives a file-less log."""
        blocker = tmp_path / "file"
        blocker.write_text("x")
        seen = []

        run_log = RunLog.open(blocker / "sub", notify=seen.append)
        assert run_log.path is None
        assert "file" in run_log.open_error

        entry = run_log.append("refresh", "Updating the package index failed")
        assert seen == [entry]
        assert run_log.entries == [entry]
        assert run_log.finalize() is None
        assert blocker.read_text() == "x"

    def test_same_second_runs_get_separate_files(self, tmp_path) -> None:
        """A second log opened in the same second does not reuse the first file."""
        now = datetime(2026, 10, 18, 9, 5, 7)
        first = RunLog.open(tmp_path, now=now)
        second = RunLog.open(tmp_path, now=now)
        assert first.path != second.path
        assert second.path.name.startswith("brew-update-tracker-20261018-090507-")

        first.append("refresh", "Updating the package index failed")
        assert first.finalize() == first.path
        assert second.finalize() is None

        assert first.path.exists()
        assert "refresh: Updating the package index failed" in first.path.read_text()
        assert not second.path.exists()

    def test_existing_file_is_not_truncated(self, tmp_path) -> None:
        """A leftover file with the same name keeps its contents."""
        now = datetime(2026, 10, 18, 9, 5, 7)
        leftover = tmp_path / "brew-update-tracker-20261018-090507.log"
        leftover.write_text("earlier run\n")

        run_log = RunLog.open(tmp_path, now=now)
        assert run_log.path != leftover
        assert leftover.read_text() == "earlier run\n"


class TestRunLogAppend:
    """Tests for recording entries."""

    def test_entries_written_through(self, run_log: RunLog) -> None:
        """Each entry reaches the file as one timestamped line."""
        run_log.append("snapshot", "Could not list installed casks", error="boom")
        run_log.append("metadata", "Could not retrieve info for formula 'x'")

        lines = run_log.path.read_text().splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("[")
        assert "] snapshot: Could not list installed casks (error=boom)" in lines[0]
        assert lines[1].endswith("metadata: Could not retrieve info for formula 'x'")
        assert run_log.count == 2

    def test_notify_called_per_entry(self, tmp_path) -> None:
        """The notifier receives every appended entry."""
        seen = []
        run_log = RunLog.open(tmp_path, notify=seen.append)
        entry = run_log.append("refresh", "Updating the package index failed")
        assert seen == [entry]

    def test_entry_format_skips_none_context(self) -> None:
        """None values are left out of the rendered context."""
        entry = RunLogEntry(
            timestamp=datetime(2026, 1, 2, 3, 4, 5),
            step="diff",
            message="degraded",
            context={"error": None},
        )
        assert entry.format() == "[2026-01-02T03:04:05] diff: degraded"


class TestRunLogFinalize:
    """Tests for the keep-or-delete decision."""

    def test_empty_log_is_deleted(self, run_log: RunLog) -> None:
        """A log without entries is removed and no path is returned."""
        path = run_log.path
        assert run_log.finalize() is None
        assert not path.exists()

    def test_log_with_entries_is_kept(self, run_log: RunLog) -> None:
        """A log with entries stays on disk and its path is returned."""
        run_log.append("outdated", "Could not list outdated casks")
        assert run_log.finalize() == run_log.path
        assert run_log.path.exists()

    def test_finalize_twice(self, run_log: RunLog) -> None:
        """Finalizing again gives the same answer."""
        assert run_log.finalize() is None
        assert run_log.finalize() is None
