"""
Deployment copy terminal UI.

The UI is a small state machine holding exactly one of ``PreCopy``,
``Copying`` or ``Completed``. The caller moves it forward with the
``with_*`` methods; ``render()`` only draws whatever the current state is::

    ╭───────────────────────────────────────────────────╮
    │ Deployment Copy                                   │
    ├───────────────────────────────────────────────────┤
    │ Do you want to copy to these directories?         │
    │ Press [Y] or [N] on your keyboard                 │
    ╰───────────────────────────────────────────────────╯

While copying, the line under the header is redrawn in place for every
progress message; everything below it is redrawn with it so the boxes stay
closed on screen at all times.
"""

import sys
from dataclasses import dataclass
from typing import TextIO

from colorama import Cursor, Fore
from colorama.ansi import clear_line, clear_screen

from .channel import CopyFinished, CopyingState, DestinationFailed, ProgressChannel
from .copy_queue import CopyQueue, CopySummary
from .errors import RenderIOError
from .formatting import format_bytes, truncate, visible_length
from .layout import (
    BOX_WIDTH,
    bottom_border,
    content_line,
    divider,
    key_hint,
    queue_box,
    title_line,
    top_border,
)
from .logs import format_log_line

TITLE = "Deployment Copy"


# ============================================================================
# States
# ============================================================================


@dataclass(frozen=True)
class PreCopy:
    """Nothing copied yet; the queue is shown for confirmation."""

    queue: CopyQueue


@dataclass(frozen=True)
class Copying:
    """Copy in progress; progress is read from the channel."""

    channel: ProgressChannel
    queue: CopyQueue | None = None


@dataclass(frozen=True)
class Completed:
    """Every destination was attempted."""

    queue: CopyQueue
    summary: CopySummary | None = None


UIState = PreCopy | Copying | Completed

_STATE_ORDER = {PreCopy: 0, Copying: 1, Completed: 2}


def _mark(success: bool) -> str:
    if success:
        return f"{Fore.GREEN}✓{Fore.RESET}"
    return f"{Fore.RED}✗{Fore.RESET}"


# ============================================================================
# Renderer
# ============================================================================


class UserInterface:
    """
    Render state machine writing to an explicit output sink.

    Parameters
    ----------
    output : TextIO | None, default=None
        Terminal stream (stdout by default)
    """

    def __init__(self, output: TextIO | None = None):
        self.output = output if output is not None else sys.stdout
        self.state: UIState | None = None
        self.last_progress: CopyingState | None = None
        self.summary: CopySummary | None = None
        self._tail_height = 0

    # ------------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------------

    def with_pre_copy(self, queue: CopyQueue) -> "UserInterface":
        return self._transition(PreCopy(queue))

    def with_copying(
        self, channel: ProgressChannel, queue: CopyQueue | None = None
    ) -> "UserInterface":
        return self._transition(Copying(channel, queue))

    def with_completed(
        self, queue: CopyQueue, summary: CopySummary | None = None
    ) -> "UserInterface":
        return self._transition(Completed(queue, summary if summary is not None else self.summary))

    def _transition(self, state: UIState) -> "UserInterface":
        """
        Move to a new state.

        Raises
        ------
        ValueError
            If the new state does not come after the current one
        """
        if self.state is not None and _STATE_ORDER[type(state)] <= _STATE_ORDER[type(self.state)]:
            raise ValueError(
                f"Cannot go from {type(self.state).__name__} to {type(state).__name__}"
            )
        self.state = state
        self._tail_height = 0
        return self

    # ------------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------------

    def write(self, *parts: str) -> None:
        """
        Write raw text to the output sink.

        Raises
        ------
        RenderIOError
            If the sink rejects the write
        """
        try:
            self.output.write("".join(parts))
        except (OSError, ValueError) as e:
            raise RenderIOError(f"Cannot write to terminal: {e}") from e

    def flush(self) -> None:
        try:
            self.output.flush()
        except (OSError, ValueError) as e:
            raise RenderIOError(f"Cannot write to terminal: {e}") from e

    def log(self, message: str) -> None:
        """Write a ``[decopy]`` line below the boxes."""
        self.write(format_log_line(message), "\n")
        self.flush()

    def _write_lines(self, lines: list[str]) -> None:
        self.write(*(line + "\n" for line in lines))

    @staticmethod
    def _home() -> str:
        return clear_screen(2) + Cursor.POS(1, 1)

    @staticmethod
    def _header() -> list[str]:
        return [top_border(), title_line(TITLE), divider()]

    # ------------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------------

    def render(self) -> None:
        """
        Draw the current state.

        Rendering ``Copying`` consumes the channel and returns once it is
        closed and drained.

        Raises
        ------
        RenderIOError
            If the output sink rejects a write
        """
        state = self.state
        if state is None:
            return

        if isinstance(state, PreCopy):
            self._render_pre_copy(state)
        elif isinstance(state, Copying):
            self._render_copying(state)
        elif isinstance(state, Completed):
            self._render_completed(state)
        else:
            raise TypeError(f"Unknown UI state: {state!r}")

        self.flush()

    def _render_pre_copy(self, state: PreCopy) -> None:
        lines = self._header()
        lines.append(content_line("Do you want to copy to these directories?"))
        lines.append(content_line(f"Press {key_hint('Y')} or {key_hint('N')} on your keyboard"))
        lines.append(bottom_border())
        lines.extend(queue_box(state.queue))

        self.write(self._home())
        self._write_lines(lines)

    def _progress_text(self) -> str:
        progress = self.last_progress
        if progress is None:
            return "Preparing copy..."

        prefix = f"{progress.percentage:>3}% {format_bytes(progress.bytes_copied)} copied --> "
        room = BOX_WIDTH - 1 - visible_length(prefix)
        return prefix + truncate(str(progress.destination), room)

    def _tail(self, state: Copying) -> list[str]:
        lines = [content_line(self._progress_text()), bottom_border()]
        if state.queue is not None:
            lines.extend(queue_box(state.queue))
        return lines

    def _draw_tail(self, state: Copying, permanent: str | None = None, lead: str = "") -> None:
        """
        Redraw the live line and everything below it.

        Parameters
        ----------
        permanent : str | None
            Line inserted above the live line, which is not redrawn again
        lead : str
            Text written before the first redraw (the header on first draw)
        """
        parts = [lead]
        if self._tail_height:
            parts.append(Cursor.UP(self._tail_height))
        parts.append("\r")

        if permanent is not None:
            parts.extend((clear_line(2), permanent, "\n"))

        tail = self._tail(state)
        for line in tail:
            parts.extend((clear_line(2), line, "\n"))

        self._tail_height = len(tail)
        self.write(*parts)

    def _render_copying(self, state: Copying) -> None:
        header = "".join(line + "\n" for line in self._header())
        self._draw_tail(state, lead=self._home() + header)
        self.flush()

        for message in state.channel:
            if isinstance(message, CopyingState):
                self.last_progress = message
                self._draw_tail(state)
            elif isinstance(message, DestinationFailed):
                text = truncate(f"{message.destination}: {message.error}", BOX_WIDTH - 3)
                self._draw_tail(state, permanent=content_line(f"{_mark(False)} {text}"))
            elif isinstance(message, CopyFinished):
                self.summary = message.summary
            self.flush()

    def abandon(self, reason: str) -> None:
        """
        Close the copying display after a fatal error.

        The reason is written inside the box so it is never left without its
        bottom border.
        """
        state = self.state
        if isinstance(state, Copying) and self._tail_height:
            text = truncate(reason, BOX_WIDTH - 3)
            self._draw_tail(state, permanent=content_line(f"{_mark(False)} {text}"))
            self.flush()
            self._tail_height = 0

    def _render_completed(self, state: Completed) -> None:
        summary = state.summary
        if summary is not None:
            total = summary.source_size
        elif self.last_progress is not None:
            total = self.last_progress.bytes_copied
        else:
            total = 0

        lines = self._header()
        lines.append(content_line("Finished Copying"))
        lines.append(content_line(f"{format_bytes(total)} copied (100%)"))
        if summary is not None:
            for result in summary.destinations:
                text = str(result.path)
                if result.error:
                    text = f"{text}: {result.error}"
                lines.append(content_line(f"{_mark(result.success)} {truncate(text, BOX_WIDTH - 3)}"))
        lines.append(bottom_border())
        lines.extend(queue_box(state.queue))

        self.write(self._home())
        self._write_lines(lines)

        if summary is not None and summary.cancelled:
            self.log("Copy cancelled")
        elif summary is not None and summary.failed:
            self.log(
                f"Files finished copying "
                f"({len(summary.failed)} of {len(summary.destinations)} destinations failed)"
            )
        else:
            self.log("Files finished copying")
