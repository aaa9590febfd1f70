"""Background thread that runs a CopyQueue and feeds a ProgressChannel."""

import logging
import threading
from pathlib import Path

from .channel import CopyFinished, CopyingState, DestinationFailed, ProgressChannel
from .copier import BUFFER_SIZE, TransitResult
from .copy_queue import CopyQueue, CopySummary
from .errors import DestinationCopyError

logger = logging.getLogger(__name__)


class CopyWorker(threading.Thread):
    """
    Run ``CopyQueue.start_copy`` off the render thread.

    The channel is always closed when the thread ends, so the consumer never
    waits forever. A fatal error is kept in ``error`` for the caller to
    re-raise after ``join()``.

    Parameters
    ----------
    queue : CopyQueue
        Queue to copy
    channel : ProgressChannel
        Channel receiving progress, failure and completion messages
    cancel_event : threading.Event | None, default=None
        Cancellation token shared with the caller
    buffer_size : int, default=BUFFER_SIZE
        Chunk size in bytes
    """

    def __init__(
        self,
        queue: CopyQueue,
        channel: ProgressChannel,
        cancel_event: threading.Event | None = None,
        buffer_size: int = BUFFER_SIZE,
    ):
        super().__init__(name="decopy-worker", daemon=True)
        self.queue = queue
        self.channel = channel
        self.cancel_event = cancel_event if cancel_event is not None else threading.Event()
        self.buffer_size = buffer_size
        self.summary: CopySummary | None = None
        self.error: BaseException | None = None

    def cancel(self) -> None:
        """Ask the copy to stop at the next chunk."""
        self.cancel_event.set()

    def _on_progress(self, percentage: int, bytes_copied: int, destination: Path) -> TransitResult:
        self.channel.send(CopyingState(percentage, bytes_copied, destination))
        return TransitResult.CONTINUE

    def _on_failure(self, destination: Path, error: DestinationCopyError) -> None:
        self.channel.send(DestinationFailed(destination, error.reason))

    def _on_complete(self, summary: CopySummary) -> None:
        self.summary = summary
        self.channel.send(CopyFinished(summary))

    def run(self) -> None:
        try:
            self.queue.start_copy(
                on_progress=self._on_progress,
                on_complete=self._on_complete,
                on_failure=self._on_failure,
                cancel_event=self.cancel_event,
                buffer_size=self.buffer_size,
            )
        except Exception as e:
            logger.debug(f"copy worker stopped: {e}")
            self.error = e
        finally:
            self.channel.close()
