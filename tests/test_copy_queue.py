#!/usr/bin/env python3
"""
Tests for the copy orchestrator.

Tests cover:
- Ordered copy into several destinations
- Progress events and percentages
- Completion callback and summary
- Per-destination failures, aborts and cancellation
- Fatal source errors
"""

import shutil
import sys
import tempfile
import threading
from pathlib import Path

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from decopy.copier import TransitResult
from decopy.copy_queue import CopyQueue, CopySummary, compute_percentage
from decopy.errors import SourceUnreadable


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def queue_env():
    """Create a source tree of known size and two destination paths."""
    test_dir = tempfile.mkdtemp()
    test_path = Path(test_dir)

    source = test_path / "site"
    (source / "static").mkdir(parents=True)
    (source / "index.html").write_bytes(b"i" * 3000)
    (source / "static" / "bundle.js").write_bytes(b"b" * 7000)
    total = 10000

    yield test_path, source, total, test_path / "dest1", test_path / "dest2"
    shutil.rmtree(test_dir)


class Recorder:
    """Collect callback invocations."""

    def __init__(self, answer=None):
        self.answer = answer
        self.events = []
        self.failures = []
        self.completed = []

    def on_progress(self, percentage, bytes_copied, destination):
        self.events.append((percentage, bytes_copied, destination))
        return self.answer

    def on_failure(self, destination, error):
        self.failures.append((destination, error))

    def on_complete(self, summary):
        self.completed.append(summary)

    def events_for(self, destination):
        return [e for e in self.events if e[2] == destination]


# ============================================================================
# Data Model
# ============================================================================


def test_queue_is_immutable(queue_env) -> None:
    """Test that a queue cannot be changed after construction."""
    _, source, _, dest1, dest2 = queue_env
    queue = CopyQueue(source, [dest1, dest2])

    assert queue.destinations == (dest1, dest2)
    with pytest.raises(AttributeError):
        queue.source = dest1


def test_queue_accepts_strings(queue_env) -> None:
    """Test that string paths are converted to Path objects."""
    _, source, _, dest1, _ = queue_env
    queue = CopyQueue(str(source), [str(dest1)])

    assert queue.source == source
    assert queue.destinations == (dest1,)
    assert queue.source_name == "site"


@pytest.mark.parametrize(
    "copied, total, expected",
    [(0, 100, 0), (50, 100, 50), (99, 100, 99), (100, 100, 100), (150, 100, 100), (1, 3, 33), (0, 0, 100)],
)
def test_compute_percentage(copied, total, expected) -> None:
    """Test floored, capped percentages."""
    assert compute_percentage(copied, total) == expected


def test_summary_partitions_results() -> None:
    """Test succeeded/failed views of a summary."""
    from decopy.copy_queue import DestinationResult

    summary = CopySummary(
        source_path=Path("/src"),
        source_size=10,
        destinations=[
            DestinationResult(Path("/a"), True, 10),
            DestinationResult(Path("/b"), False, 3, "disk full"),
        ],
    )

    assert not summary.success
    assert [d.path for d in summary.succeeded] == [Path("/a")]
    assert [d.path for d in summary.failed] == [Path("/b")]


# ============================================================================
# Copying
# ============================================================================


def test_copies_destinations_in_order(queue_env) -> None:
    """Test destination 1 finishes before destination 2 starts at 0."""
    _, source, total, dest1, dest2 = queue_env
    recorder = Recorder()
    queue = CopyQueue(source, [dest1, dest2])

    summary = queue.start_copy(
        recorder.on_progress, recorder.on_complete, buffer_size=1024
    )

    first = recorder.events_for(dest1)
    second = recorder.events_for(dest2)
    assert recorder.events == first + second

    for events in (first, second):
        assert events[0][:2] == (0, 0)
        assert events[-1][:2] == (100, total)
        percentages = [e[0] for e in events]
        assert percentages == sorted(percentages)
        assert all(0 <= p <= 100 for p in percentages)

    assert len(recorder.completed) == 1
    assert recorder.completed[0] is summary
    assert summary.success
    assert summary.source_size == total
    assert [d.path for d in summary.destinations] == [dest1, dest2]
    assert all(d.bytes_written == total for d in summary.destinations)

    for dest in (dest1, dest2):
        assert (dest / "index.html").read_bytes() == b"i" * 3000
        assert (dest / "static" / "bundle.js").read_bytes() == b"b" * 7000


def test_percentage_matches_bytes(queue_env) -> None:
    """Test every event's percentage is derived from its byte count."""
    _, source, total, dest1, _ = queue_env
    recorder = Recorder()

    CopyQueue(source, [dest1]).start_copy(
        recorder.on_progress, recorder.on_complete, buffer_size=512
    )

    for percentage, bytes_copied, _ in recorder.events:
        assert percentage == min(100, bytes_copied * 100 // total)


def test_failed_destination_does_not_stop_queue(queue_env) -> None:
    """Test an unusable destination is recorded and the next one still runs."""
    test_path, source, total, _, dest2 = queue_env
    blocker = test_path / "blocker"
    blocker.write_text("a file where a directory should be")
    bad_dest = blocker / "dest"
    recorder = Recorder()

    summary = CopyQueue(source, [bad_dest, dest2]).start_copy(
        recorder.on_progress,
        recorder.on_complete,
        on_failure=recorder.on_failure,
    )

    assert len(recorder.completed) == 1
    assert not summary.success
    assert [d.path for d in summary.failed] == [bad_dest]
    assert [d.path for d in summary.succeeded] == [dest2]
    assert summary.failed[0].error
    assert len(recorder.failures) == 1
    assert recorder.failures[0][0] == bad_dest
    assert (dest2 / "static" / "bundle.js").exists()
    assert recorder.events_for(dest2)[-1][0] == 100


def test_destination_inside_source_fails(queue_env) -> None:
    """Test copying a source into itself is refused for that destination."""
    _, source, _, dest1, _ = queue_env
    recorder = Recorder()

    summary = CopyQueue(source, [source / "nested", dest1]).start_copy(
        recorder.on_progress, recorder.on_complete, on_failure=recorder.on_failure
    )

    assert [d.path for d in summary.failed] == [source / "nested"]
    assert not (source / "nested").exists()
    assert summary.destinations[1].success


def test_abort_from_progress_handler(queue_env) -> None:
    """Test that answering ABORT stops each destination but not the queue."""
    _, source, _, dest1, dest2 = queue_env
    recorder = Recorder(answer=TransitResult.ABORT)

    summary = CopyQueue(source, [dest1, dest2]).start_copy(
        recorder.on_progress, recorder.on_complete
    )

    assert len(recorder.completed) == 1
    assert [d.error for d in summary.destinations] == ["aborted", "aborted"]
    assert [e[2] for e in recorder.events] == [dest1, dest2]


def test_cancel_skips_remaining_destinations(queue_env) -> None:
    """Test the cancellation token stops mid-destination and skips the rest."""
    _, source, _, dest1, dest2 = queue_env
    cancel_event = threading.Event()
    recorder = Recorder()

    def on_progress(percentage, bytes_copied, destination):
        recorder.on_progress(percentage, bytes_copied, destination)
        if bytes_copied > 0:
            cancel_event.set()

    summary = CopyQueue(source, [dest1, dest2]).start_copy(
        on_progress, recorder.on_complete, cancel_event=cancel_event, buffer_size=1024
    )

    assert summary.cancelled
    assert summary.destinations[0].error == "cancelled"
    assert summary.destinations[0].bytes_written == 1024
    assert summary.destinations[1].error == "skipped: copy cancelled"
    assert recorder.events_for(dest2) == []
    assert len(recorder.completed) == 1


def test_empty_source_completes_at_100(queue_env) -> None:
    """Test copying an empty directory."""
    test_path, _, _, dest1, _ = queue_env
    empty = test_path / "empty"
    empty.mkdir()
    recorder = Recorder()

    summary = CopyQueue(empty, [dest1]).start_copy(recorder.on_progress, recorder.on_complete)

    assert summary.success
    assert summary.source_size == 0
    assert recorder.events == [(100, 0, dest1)]
    assert dest1.is_dir()


def test_unreadable_source_is_fatal(queue_env) -> None:
    """Test a missing source fails before any destination is touched."""
    test_path, _, _, dest1, dest2 = queue_env
    recorder = Recorder()

    with pytest.raises(SourceUnreadable):
        CopyQueue(test_path / "missing", [dest1, dest2]).start_copy(
            recorder.on_progress, recorder.on_complete
        )

    assert recorder.events == []
    assert recorder.completed == []
    assert not dest1.exists()
    assert not dest2.exists()


@pytest.mark.skipif(not Path("/dev/full").exists(), reason="needs /dev/full")
def test_full_disk_on_close_does_not_stop_queue(queue_env) -> None:
    """Test a write error reported on close fails only that destination."""
    test_path, _, _, _, dest2 = queue_env
    source = test_path / "small"
    source.mkdir()
    (source / "a.txt").write_bytes(b"a" * 100)
    full = test_path / "full"
    full.mkdir()
    (full / "a.txt").symlink_to("/dev/full")
    recorder = Recorder()

    summary = CopyQueue(source, [full, dest2]).start_copy(
        recorder.on_progress, recorder.on_complete, on_failure=recorder.on_failure
    )

    assert len(recorder.completed) == 1
    assert [d.path for d in summary.failed] == [full]
    assert [d.path for d in summary.succeeded] == [dest2]
    assert [f[0] for f in recorder.failures] == [full]
    assert (dest2 / "a.txt").read_bytes() == b"a" * 100
