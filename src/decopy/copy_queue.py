"""
Copy orchestration: one source, an ordered queue of destinations.

The queue measures the source once, then copies it into every destination in
order, reporting progress through plain callbacks. It never touches the
terminal; the worker thread turns the callbacks into channel messages.
"""

import asyncio
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from .copier import BUFFER_SIZE, TransitResult, copy_directory_contents, get_size
from .errors import CopyAborted, CopyCancelled, DestinationCopyError

logger = logging.getLogger(__name__)

ProgressHandler = Callable[[int, int, Path], "TransitResult | None"]
FailureHandler = Callable[[Path, DestinationCopyError], None]


# ============================================================================
# Data Models
# ============================================================================


@dataclass
class DestinationResult:
    """
    Result for a single destination.

    Attributes
    ----------
    path : Path
        Destination directory
    success : bool
        Whether the whole source tree was copied
    bytes_written : int, default=0
        Bytes written into this destination
    error : str | None, default=None
        Error message if the copy failed, was aborted or skipped
    """

    path: Path
    success: bool
    bytes_written: int = 0
    error: str | None = None


@dataclass
class CopySummary:
    """
    Outcome of a whole queue run.

    Attributes
    ----------
    source_path : Path
        Source directory
    source_size : int
        Total size of the source tree in bytes
    destinations : list[DestinationResult], default=[]
        One result per destination, in queue order
    duration : float, default=0.0
        Total run time in seconds
    cancelled : bool, default=False
        Whether the run's cancellation token was set
    """

    source_path: Path
    source_size: int
    destinations: list[DestinationResult] = field(default_factory=list)
    duration: float = 0.0
    cancelled: bool = False

    @property
    def success(self) -> bool:
        """True if every destination succeeded."""
        return all(d.success for d in self.destinations)

    @property
    def succeeded(self) -> list[DestinationResult]:
        return [d for d in self.destinations if d.success]

    @property
    def failed(self) -> list[DestinationResult]:
        return [d for d in self.destinations if not d.success]


def compute_percentage(bytes_copied: int, total_bytes: int) -> int:
    """
    Percentage of total_bytes copied, floored and capped at 100.

    An empty source counts as fully copied.
    """
    if total_bytes <= 0:
        return 100
    return min(100, bytes_copied * 100 // total_bytes)


def _is_inside(path: Path, parent: Path) -> bool:
    path, parent = path.resolve(), parent.resolve()
    return path == parent or parent in path.parents


# ============================================================================
# Copy Queue
# ============================================================================


@dataclass(frozen=True)
class CopyQueue:
    """
    A source directory and the ordered destinations it is copied to.

    Parameters
    ----------
    source : Path
        Source directory; its contents are copied
    destinations : tuple[Path, ...]
        Destination directories, copied to in this order
    """

    source: Path
    destinations: tuple[Path, ...] = ()

    def __post_init__(self):
        # Accept any iterable of paths but store an immutable tuple
        object.__setattr__(self, "source", Path(self.source))
        object.__setattr__(
            self, "destinations", tuple(Path(d) for d in self.destinations)
        )

    @property
    def source_name(self) -> str:
        """Display name of the source (the full path for roots like ``/``)."""
        return self.source.name or str(self.source)

    def start_copy(
        self,
        on_progress: ProgressHandler,
        on_complete: Callable[[CopySummary], None],
        on_failure: FailureHandler | None = None,
        cancel_event: threading.Event | None = None,
        buffer_size: int = BUFFER_SIZE,
    ) -> CopySummary:
        """
        Copy the source into every destination, in order.

        Parameters
        ----------
        on_progress : Callable[[int, int, Path], TransitResult | None]
            Called as ``on_progress(percentage, bytes_copied, destination)``
            once when a destination starts and after every copied chunk.
            Returning ``TransitResult.ABORT`` stops the current destination.
        on_complete : Callable[[CopySummary], None]
            Called exactly once, after every destination was attempted
        on_failure : Callable[[Path, DestinationCopyError], None] | None
            Called when a destination fails with an I/O error
        cancel_event : threading.Event | None, default=None
            Stops the run between chunks and between destinations
        buffer_size : int, default=BUFFER_SIZE
            Chunk size in bytes

        Returns
        -------
        CopySummary
            The same summary passed to on_complete

        Raises
        ------
        SourceUnreadable
            If the source cannot be sized (before any destination is touched)
            or read while copying
        """
        return asyncio.run(
            self._copy_all(on_progress, on_complete, on_failure, cancel_event, buffer_size)
        )

    async def _copy_all(
        self,
        on_progress: ProgressHandler,
        on_complete: Callable[[CopySummary], None],
        on_failure: FailureHandler | None,
        cancel_event: threading.Event | None,
        buffer_size: int,
    ) -> CopySummary:
        start_time = time.time()
        total_bytes = get_size(self.source)
        summary = CopySummary(source_path=self.source, source_size=total_bytes)
        logger.debug(
            f"copying {total_bytes} bytes from {self.source} "
            f"to {len(self.destinations)} destination(s)"
        )

        for dest in self.destinations:
            if cancel_event is not None and cancel_event.is_set():
                summary.destinations.append(
                    DestinationResult(path=dest, success=False, error="skipped: copy cancelled")
                )
                continue

            result = await self._copy_one(
                dest, total_bytes, on_progress, on_failure, cancel_event, buffer_size
            )
            summary.destinations.append(result)

        summary.cancelled = cancel_event is not None and cancel_event.is_set()
        summary.duration = time.time() - start_time
        on_complete(summary)
        return summary

    async def _copy_one(
        self,
        dest: Path,
        total_bytes: int,
        on_progress: ProgressHandler,
        on_failure: FailureHandler | None,
        cancel_event: threading.Event | None,
        buffer_size: int,
    ) -> DestinationResult:
        """Copy into a single destination and record what happened."""
        copied = 0

        def on_chunk(bytes_copied: int) -> TransitResult | None:
            nonlocal copied
            copied = bytes_copied
            return on_progress(compute_percentage(bytes_copied, total_bytes), bytes_copied, dest)

        logger.debug(f"starting copy to {dest}")
        try:
            if _is_inside(dest, self.source):
                raise DestinationCopyError(dest, "destination is inside the source directory")
            if on_chunk(0) is TransitResult.ABORT:
                raise CopyAborted("Copy aborted by progress handler")
            copied = await copy_directory_contents(
                self.source, dest, on_chunk, cancel_event, buffer_size
            )
        except CopyCancelled:
            logger.debug(f"copy to {dest} cancelled after {copied} bytes")
            return DestinationResult(path=dest, success=False, bytes_written=copied, error="cancelled")
        except CopyAborted:
            logger.debug(f"copy to {dest} aborted after {copied} bytes")
            return DestinationResult(path=dest, success=False, bytes_written=copied, error="aborted")
        except DestinationCopyError as e:
            logger.debug(f"copy to {dest} failed: {e.reason}")
            if on_failure is not None:
                on_failure(dest, e)
            return DestinationResult(path=dest, success=False, bytes_written=copied, error=e.reason)

        logger.debug(f"finished copy to {dest} ({copied} bytes)")
        return DestinationResult(path=dest, success=True, bytes_written=copied)
