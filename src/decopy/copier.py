"""
Recursive directory copy primitive.

Copies the *contents* of a source directory into a destination directory,
chunk by chunk, reporting the cumulative number of bytes copied after every
chunk. The progress handler answers with a ``TransitResult`` to continue or
abort, and an optional ``threading.Event`` cancels the copy between chunks.

Errors are split by side: anything failing on the source raises
``SourceUnreadable``, anything failing on the destination raises
``DestinationCopyError``.
"""

import contextlib
import logging
import os
import shutil
import threading
from collections.abc import Callable, Iterator
from enum import Enum
from pathlib import Path

import aiofiles
import aiofiles.os

from .errors import CopyAborted, CopyCancelled, DestinationCopyError, SourceUnreadable

# Constants
BUFFER_SIZE = 8 * 1024 * 1024  # 8MB

logger = logging.getLogger(__name__)


class TransitResult(Enum):
    """
    Answer of a progress handler.

    Attributes
    ----------
    CONTINUE : str
        Keep copying the current destination
    ABORT : str
        Stop copying the current destination
    """

    CONTINUE = "continue"
    ABORT = "abort"


ChunkHandler = Callable[[int], "TransitResult | None"]


def _raise_source_error(source: Path) -> Callable[[OSError], None]:
    def onerror(error: OSError) -> None:
        raise SourceUnreadable(source, error.strerror or str(error)) from error

    return onerror


def _walk_tree(source: Path) -> Iterator[tuple[str, list[str]]]:
    """
    Walk the source tree, following directory symlinks.

    Yields ``(root, files)`` in sorted order. Only regular files (or links to
    them) are yielded; FIFOs, sockets, devices and broken links are skipped.
    A directory link pointing back at one of its own ancestors is not
    descended into.

    Raises
    ------
    SourceUnreadable
        If a directory cannot be listed
    """
    onerror = _raise_source_error(source)
    for root, dirs, files in os.walk(source, onerror=onerror, followlinks=True):
        real_root = os.path.realpath(root)
        for name in list(dirs):
            real_dir = os.path.realpath(os.path.join(root, name))
            if real_root == real_dir or real_root.startswith(real_dir + os.sep):
                logger.debug(f"skipping {os.path.join(root, name)}: link loop")
                dirs.remove(name)
        # Deterministic order keeps progress reproducible
        dirs.sort()

        regular = []
        for name in sorted(files):
            path = os.path.join(root, name)
            if os.path.isfile(path):
                regular.append(name)
            else:
                logger.debug(f"skipping {path}: not a regular file")
        yield root, regular


def get_size(source: Path) -> int:
    """
    Compute the total size in bytes of all files below a directory.

    Parameters
    ----------
    source : Path
        Source directory

    Returns
    -------
    int
        Sum of the sizes of all regular files (symlinks are followed)

    Raises
    ------
    SourceUnreadable
        If the source is missing, not a directory, or any entry cannot be sized
    """
    if not source.exists():
        raise SourceUnreadable(source, "no such directory")
    if not source.is_dir():
        raise SourceUnreadable(source, "not a directory")

    total = 0
    for root, files in _walk_tree(source):
        for name in files:
            path = os.path.join(root, name)
            try:
                total += os.path.getsize(path)
            except OSError as e:
                raise SourceUnreadable(source, f"{path}: {e.strerror or e}") from e
    return total


def list_entries(source: Path) -> list[str]:
    """
    List the names directly inside the source directory, sorted.

    Raises
    ------
    SourceUnreadable
        If the directory cannot be listed
    """
    try:
        return sorted(entry.name for entry in os.scandir(source))
    except OSError as e:
        raise SourceUnreadable(source, e.strerror or str(e)) from e


async def _makedirs(destination_root: Path, directory: Path) -> None:
    try:
        await aiofiles.os.makedirs(directory, exist_ok=True)
    except OSError as e:
        raise DestinationCopyError(
            destination_root, f"cannot create {directory}: {e.strerror or e}"
        ) from e


async def _copy_file(
    source_file: Path,
    target_file: Path,
    destination_root: Path,
    copied: int,
    on_chunk: ChunkHandler,
    cancel_event: threading.Event | None,
    buffer_size: int,
) -> int:
    """
    Copy one file, returning the updated cumulative byte count.

    Raises
    ------
    SourceUnreadable
        If the source file cannot be opened or read
    DestinationCopyError
        If the target file cannot be opened, written or closed
    CopyAborted
        If on_chunk answered ``TransitResult.ABORT``
    CopyCancelled
        If cancel_event was set
    """
    source_root = source_file.parent
    try:
        f_source = await aiofiles.open(source_file, "rb")
    except OSError as e:
        raise SourceUnreadable(source_root, f"{source_file}: {e.strerror or e}") from e

    try:
        try:
            f_target = await aiofiles.open(target_file, "wb")
        except OSError as e:
            raise DestinationCopyError(
                destination_root, f"{target_file}: {e.strerror or e}"
            ) from e

        try:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    raise CopyCancelled("Copy cancelled")

                try:
                    chunk = await f_source.read(buffer_size)
                except OSError as e:
                    raise SourceUnreadable(
                        source_root, f"{source_file}: {e.strerror or e}"
                    ) from e
                if not chunk:
                    break

                try:
                    await f_target.write(chunk)
                except OSError as e:
                    raise DestinationCopyError(
                        destination_root, f"{target_file}: {e.strerror or e}"
                    ) from e

                copied += len(chunk)
                if on_chunk(copied) is TransitResult.ABORT:
                    raise CopyAborted("Copy aborted by progress handler")
        except BaseException:
            # The original error wins over a failing close
            with contextlib.suppress(OSError):
                await f_target.close()
            raise
    finally:
        await f_source.close()

    # Buffered data is flushed on close, so disk-full often shows up here
    try:
        await f_target.close()
        shutil.copymode(source_file, target_file)
    except OSError as e:
        raise DestinationCopyError(
            destination_root, f"{target_file}: {e.strerror or e}"
        ) from e

    return copied


async def copy_directory_contents(
    source: Path,
    destination: Path,
    on_chunk: ChunkHandler,
    cancel_event: threading.Event | None = None,
    buffer_size: int = BUFFER_SIZE,
) -> int:
    """
    Copy everything inside source into destination, overwriting files.

    Directory symlinks are followed and copied as real directories. FIFOs,
    sockets, devices and broken links are skipped.

    Parameters
    ----------
    source : Path
        Source directory (its contents are copied, not the directory itself)
    destination : Path
        Destination directory, created if missing
    on_chunk : Callable[[int], TransitResult | None]
        Called with the cumulative bytes copied after every chunk
    cancel_event : threading.Event | None, default=None
        Checked before every chunk
    buffer_size : int, default=BUFFER_SIZE
        Chunk size in bytes

    Returns
    -------
    int
        Total bytes copied into this destination

    Raises
    ------
    SourceUnreadable
        If the source tree cannot be walked or read
    DestinationCopyError
        If writing below destination fails
    CopyAborted
        If on_chunk answered ``TransitResult.ABORT`` (``CopyCancelled`` when
        cancel_event was set)
    """
    copied = 0
    await _makedirs(destination, destination)

    for root, files in _walk_tree(source):
        target_dir = destination / Path(root).relative_to(source)
        await _makedirs(destination, target_dir)

        for name in files:
            copied = await _copy_file(
                Path(root) / name,
                target_dir / name,
                destination,
                copied,
                on_chunk,
                cancel_event,
                buffer_size,
            )
            logger.debug(f"copied {Path(root) / name} -> {target_dir / name}")

    return copied
