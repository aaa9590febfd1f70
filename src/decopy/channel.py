"""
Progress channel between the copy worker and the renderer.

A bounded single-producer/single-consumer stream. Redrawing the terminal is
slower than copying, so progress messages are coalesced: a new
``CopyingState`` for the same destination replaces the pending one, and when
the channel is full the oldest pending progress message is dropped.
``DestinationFailed`` and ``CopyFinished`` are never dropped.
"""

import threading
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .copy_queue import CopySummary

DEFAULT_CAPACITY = 64


# ============================================================================
# Messages
# ============================================================================


@dataclass(frozen=True)
class CopyingState:
    """
    Progress of the destination currently being written.

    Attributes
    ----------
    percentage : int
        0-100, floored
    bytes_copied : int
        Bytes copied into this destination so far
    destination : Path
        Destination being written
    """

    percentage: int
    bytes_copied: int
    destination: Path


@dataclass(frozen=True)
class DestinationFailed:
    """A destination failed; the queue carries on with the next one."""

    destination: Path
    error: str


@dataclass(frozen=True)
class CopyFinished:
    """Every destination was attempted."""

    summary: CopySummary


Message = CopyingState | DestinationFailed | CopyFinished


class ChannelClosed(Exception):
    """Raised when sending on a closed channel."""


# ============================================================================
# Channel
# ============================================================================


class ProgressChannel:
    """
    Bounded latest-value channel.

    Parameters
    ----------
    capacity : int, default=DEFAULT_CAPACITY
        Maximum number of pending messages
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Channel capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.dropped = 0
        self._pending: deque[Message] = deque()
        self._closed = False
        self._cond = threading.Condition()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def send(self, message: Message) -> None:
        """
        Queue a message for the consumer.

        Raises
        ------
        ChannelClosed
            If the channel was already closed
        """
        with self._cond:
            if self._closed:
                raise ChannelClosed("send on closed channel")

            if isinstance(message, CopyingState):
                self._send_progress(message)
            else:
                while len(self._pending) >= self.capacity and not self._drop_oldest_progress():
                    self._cond.wait()
                    if self._closed:
                        raise ChannelClosed("send on closed channel")
                self._pending.append(message)

            self._cond.notify_all()

    def _send_progress(self, message: CopyingState) -> None:
        if self._pending:
            last = self._pending[-1]
            if isinstance(last, CopyingState) and last.destination == message.destination:
                self._pending[-1] = message
                self.dropped += 1
                return

        if len(self._pending) >= self.capacity and not self._drop_oldest_progress():
            # Only control messages pending; this update is stale by the time
            # they are consumed
            self.dropped += 1
            return
        self._pending.append(message)

    def _drop_oldest_progress(self) -> bool:
        for index, pending in enumerate(self._pending):
            if isinstance(pending, CopyingState):
                del self._pending[index]
                self.dropped += 1
                return True
        return False

    def recv(self, timeout: float | None = None) -> Message | None:
        """
        Wait for the next message.

        Parameters
        ----------
        timeout : float | None, default=None
            Seconds to wait; None blocks until a message arrives or the
            channel is closed

        Returns
        -------
        Message | None
            The next message, or None once the channel is closed and drained
            (or the timeout expired)
        """
        with self._cond:
            if not self._cond.wait_for(lambda: self._pending or self._closed, timeout):
                return None
            if not self._pending:
                return None
            message = self._pending.popleft()
            self._cond.notify_all()
            return message

    def close(self) -> None:
        """Close the channel; pending messages can still be received."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[Message]:
        while True:
            message = self.recv()
            if message is None:
                return
            yield message
