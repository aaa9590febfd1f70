"""
Exception hierarchy for decopy.

Per-destination failures are collected and reported at the end of a run;
everything else here is fatal for the run that raised it.
"""

from pathlib import Path


class DecopyError(Exception):
    """Base class for all decopy errors."""


class ArgumentError(DecopyError, ValueError):
    """Malformed or missing paths/options, detected before any copy starts."""


class SourceUnreadable(DecopyError, OSError):
    """
    The source directory cannot be listed, sized or read.

    Parameters
    ----------
    source : Path
        Source directory that failed
    reason : str
        Human readable cause
    """

    def __init__(self, source: Path, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot read source `{source}`: {reason}")


class DestinationCopyError(DecopyError, OSError):
    """
    A single destination failed mid-copy.

    Parameters
    ----------
    destination : Path
        Destination root that failed
    reason : str
        Human readable cause (permission denied, disk full, ...)
    """

    def __init__(self, destination: Path, reason: str):
        self.destination = destination
        self.reason = reason
        super().__init__(f"Copy to `{destination}` failed: {reason}")


class RenderIOError(DecopyError, OSError):
    """The terminal output sink rejected a write."""


class CopyAborted(DecopyError):
    """The progress handler asked to stop the current destination."""


class CopyCancelled(CopyAborted):
    """The run's cancellation token was set."""
