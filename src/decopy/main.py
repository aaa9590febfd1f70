"""
decopy - Deployment copy of one directory into several destinations.

Copies the contents of a source directory into every destination in turn,
showing the queue and live progress as boxes in the terminal.

Architecture:
- CopyQueue does the copying and only reports through callbacks
- A worker thread turns the callbacks into ProgressChannel messages
- UserInterface renders the channel; it never drives the copy
- Per-destination errors are collected; source and terminal errors are fatal
"""

import argparse
import logging
import threading
from collections.abc import Callable
from enum import IntEnum
from pathlib import Path
from typing import TextIO

import colorama
from colorama import Fore

from .channel import ProgressChannel
from .copier import BUFFER_SIZE, list_entries
from .copy_queue import CopyQueue, CopySummary
from .config import CopyConfig
from .errors import ArgumentError, RenderIOError, SourceUnreadable
from .logs import setup_logging
from .ui import UserInterface
from .worker import CopyWorker

logger = logging.getLogger(__name__)

CONFIRM_PROMPT = (
    "Does everything look correct? (You can disable this prompt with the `-y` flag) (Y/n) "
)


class ExitCode(IntEnum):
    """Process exit codes."""

    OK = 0
    COPY_FAILED = 1
    USAGE = 2
    SOURCE_UNREADABLE = 3
    RENDER_FAILED = 4
    UNEXPECTED = 70
    INTERRUPTED = 130


def resolve_queue(source: Path, destinations: list[Path], cwd: Path | None = None) -> CopyQueue:
    """
    Build a CopyQueue from command-line paths.

    Parameters
    ----------
    source : Path
        Source directory, relative paths are taken from cwd
    destinations : list[Path]
        Destination directories, relative paths are taken from cwd; paths
        resolving to the same directory are copied once, order is kept
    cwd : Path | None, default=None
        Base for relative paths (the current directory by default)

    Returns
    -------
    CopyQueue
        Queue with an absolute source

    Raises
    ------
    ArgumentError
        If the source is missing or not a directory, no destination is given,
        or a destination is the source or lies inside it
    """
    base = cwd if cwd is not None else Path.cwd()
    source = base / source

    if not source.exists():
        raise ArgumentError(f"Source directory not found: {source}")
    if not source.is_dir():
        raise ArgumentError(f"Source is not a directory: {source}")
    if not destinations:
        raise ArgumentError("At least one destination is required")

    resolved_source = source.resolve()
    unique: list[Path] = []
    seen: set[Path] = set()
    for dest in destinations:
        anchored = base / dest
        target = anchored.resolve()
        if target == resolved_source or resolved_source in target.parents:
            raise ArgumentError(f"Destination {dest} is inside the source directory")
        if target in seen:
            logger.warning(f"Destination {dest} given twice, copying once")
            continue
        seen.add(target)
        unique.append(anchored)

    return CopyQueue(source=source, destinations=tuple(unique))


class CLIProcessor:
    """
    Handles CLI orchestration and presentation.

    Parameters
    ----------
    queue : CopyQueue
        Source and destinations to copy
    config : CopyConfig
        Run configuration
    output : TextIO | None, default=None
        Terminal stream (stdout by default)
    input_func : Callable[[], str], default=input
        Reads the confirmation answer
    """

    def __init__(
        self,
        queue: CopyQueue,
        config: CopyConfig,
        output: TextIO | None = None,
        input_func: Callable[[], str] = input,
    ):
        self.queue = queue
        self.config = config
        self.ui = UserInterface(output)
        self.input_func = input_func
        self.summary: CopySummary | None = None

    def run(self) -> ExitCode:
        """
        Show the queue, ask for confirmation, copy and show the result.

        Returns
        -------
        ExitCode
            OK when every destination succeeded or the user declined,
            COPY_FAILED when a destination failed, INTERRUPTED on Ctrl+C

        Raises
        ------
        SourceUnreadable
            If the source cannot be listed, sized or read
        RenderIOError
            If the terminal rejects a write
        """
        self.ui.with_pre_copy(self.queue).render()
        self._show_preview()

        if not self.config.assume_yes and not self._confirm():
            self.ui.log("Aborting copy...")
            return ExitCode.OK

        channel = ProgressChannel(self.config.channel_capacity)
        cancel_event = threading.Event()
        worker = CopyWorker(self.queue, channel, cancel_event, self.config.buffer_size)
        worker.start()

        self.ui.with_copying(channel, self.queue)
        try:
            self.ui.render()
        except KeyboardInterrupt:
            worker.cancel()
            channel.close()
            worker.join()
            self.ui.abandon("Copy interrupted")
            self.summary = worker.summary
            return ExitCode.INTERRUPTED
        except RenderIOError:
            worker.cancel()
            channel.close()
            worker.join()
            raise
        worker.join()

        if worker.error is not None:
            self.ui.abandon(str(worker.error))
            raise worker.error

        self.summary = worker.summary
        self.ui.with_completed(self.queue, self.summary).render()
        self._log_failures(self.summary)

        if self.summary is None or not self.summary.success:
            return ExitCode.COPY_FAILED
        return ExitCode.OK

    def _show_preview(self) -> None:
        """List the first entries of the source below the queue box."""
        entries = list_entries(self.queue.source)
        shown = entries[: self.config.preview_limit]

        self.ui.log(f"Copying from `{self.queue.source}`...")
        for name in shown:
            self.ui.write(f"  {Fore.LIGHTBLACK_EX}{name}{Fore.RESET}\n")
        if len(entries) > len(shown):
            self.ui.write(f"  ... +{len(entries) - len(shown)} more ...\n")
        self.ui.flush()

    def _confirm(self) -> bool:
        self.ui.write(CONFIRM_PROMPT)
        self.ui.flush()
        try:
            answer = self.input_func()
        except EOFError:
            self.ui.write("\n")
            return False
        return answer.strip().lower() in ("y", "yes")

    def _log_failures(self, summary: CopySummary | None) -> None:
        if summary is None:
            return
        for result in summary.failed:
            logger.error(f"Failed: {result.path} - {result.error}")
        logger.debug(
            f"{len(summary.succeeded)} of {len(summary.destinations)} destination(s) "
            f"copied in {summary.duration:.2f}s"
        )


# ============================================================================
# Main Entry Point
# ============================================================================


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns
    -------
    argparse.Namespace
        Parsed command line arguments
    """
    parser = argparse.ArgumentParser(
        prog="decopy",
        description="Copy the contents of a directory into one or more destinations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  decopy build /mnt/usb-a /mnt/usb-b         # Ask, then copy build/* to both drives
  decopy -y build /mnt/usb-a                 # Copy without the confirmation prompt
        """,
    )

    parser.add_argument("source", type=Path, help="Source directory whose contents are copied")

    parser.add_argument(
        "destinations",
        type=Path,
        nargs="*",
        help="Destination directories, copied to in the given order",
    )

    parser.add_argument(
        "-y", "--yes", action="store_true", help="Skip the confirmation prompt"
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )

    parser.add_argument(
        "-b",
        "--buffer-size",
        type=int,
        default=BUFFER_SIZE,
        help="Copy chunk size in bytes (default: 8MB)",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Returns
    -------
    int
        Exit code, see ``ExitCode``
    """
    args = parse_arguments(argv)
    setup_logging(args.verbose)
    colorama.just_fix_windows_console()

    try:
        config = CopyConfig.from_args(args)
        queue = resolve_queue(args.source, args.destinations)
        processor = CLIProcessor(queue, config)
        return processor.run()

    except ArgumentError as e:
        logger.error(str(e))
        return ExitCode.USAGE
    except SourceUnreadable as e:
        logger.error(str(e))
        return ExitCode.SOURCE_UNREADABLE
    except RenderIOError as e:
        logger.error(str(e))
        return ExitCode.RENDER_FAILED
    except KeyboardInterrupt:
        logger.error("Operation interrupted by user")
        return ExitCode.INTERRUPTED
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=args.verbose)
        return ExitCode.UNEXPECTED
