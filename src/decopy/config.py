"""Run configuration built from the command line."""

import argparse
from dataclasses import dataclass

from .channel import DEFAULT_CAPACITY
from .copier import BUFFER_SIZE
from .errors import ArgumentError


@dataclass
class CopyConfig:
    """Configuration for a deployment copy run."""

    buffer_size: int = BUFFER_SIZE
    assume_yes: bool = False
    verbose: bool = False
    preview_limit: int = 5
    channel_capacity: int = DEFAULT_CAPACITY

    def __post_init__(self):
        """Validate configuration."""
        if self.buffer_size <= 0:
            raise ArgumentError(f"Buffer size must be positive, got {self.buffer_size}")
        if self.preview_limit < 0:
            raise ArgumentError(f"Preview limit must not be negative, got {self.preview_limit}")
        if self.channel_capacity <= 0:
            raise ArgumentError(
                f"Channel capacity must be positive, got {self.channel_capacity}"
            )

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "CopyConfig":
        """Create config from command-line arguments."""
        return cls(
            buffer_size=args.buffer_size,
            assume_yes=args.yes,
            verbose=args.verbose,
        )
