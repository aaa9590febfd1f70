"""
decopy: Deployment copy of one directory into several destinations.

This package copies the contents of a source directory into an ordered queue
of destination directories, rendering the queue and live progress as boxes in
the terminal.
"""

from .channel import (
    ChannelClosed,
    CopyFinished,
    CopyingState,
    DestinationFailed,
    ProgressChannel,
)
from .copier import TransitResult, copy_directory_contents, get_size
from .config import CopyConfig
from .copy_queue import CopyQueue, CopySummary, DestinationResult
from .errors import (
    ArgumentError,
    DecopyError,
    DestinationCopyError,
    RenderIOError,
    SourceUnreadable,
)
from .formatting import format_bytes, strip_styles, truncate, visible_length
from .logs import setup_logging
from .main import CLIProcessor, ExitCode, main
from .ui import UserInterface

__version__ = "1.0.0"
__author__ = "decopy project"
__description__ = "Deployment copy of one directory into several destinations"

__all__ = [
    "ArgumentError",
    "CLIProcessor",
    "ChannelClosed",
    "CopyConfig",
    "CopyFinished",
    "CopyQueue",
    "CopySummary",
    "CopyingState",
    "DecopyError",
    "DestinationCopyError",
    "DestinationFailed",
    "DestinationResult",
    "ExitCode",
    "ProgressChannel",
    "RenderIOError",
    "SourceUnreadable",
    "TransitResult",
    "UserInterface",
    "copy_directory_contents",
    "format_bytes",
    "get_size",
    "main",
    "setup_logging",
    "strip_styles",
    "truncate",
    "visible_length",
]
