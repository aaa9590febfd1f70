"""
String helpers shared by the renderer and the CLI.

None of these touch the terminal; they only compute on strings so they can be
tested without one.
"""

import re

# CSI sequences (colors, styles, cursor movement, erase) and OSC sequences
# terminated by BEL or ST.
_ESCAPE_RE = re.compile(
    r"\x1b\[[0-?]*[ -/]*[@-~]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b[@-Z\\-_]"
)

_BYTE_UNITS = (
    (1024**4, "tb"),
    (1024**3, "gb"),
    (1024**2, "mb"),
    (1024, "kb"),
)


def format_bytes(num_bytes: int) -> str:
    """
    Format a byte count with binary units.

    The value is truncated, not rounded: 1535 bytes is ``"1kb"``.

    Parameters
    ----------
    num_bytes : int
        Non-negative byte count

    Returns
    -------
    str
        e.g. ``"0b"``, ``"1023b"``, ``"12mb"``

    Raises
    ------
    ValueError
        If num_bytes is negative
    """
    if num_bytes < 0:
        raise ValueError(f"Byte count must be non-negative, got {num_bytes}")

    for size, suffix in _BYTE_UNITS:
        if num_bytes >= size:
            return f"{num_bytes // size}{suffix}"
    return f"{num_bytes}b"


def strip_styles(text: str) -> str:
    """Remove terminal escape sequences from text."""
    return _ESCAPE_RE.sub("", text)


def visible_length(text: str) -> int:
    """
    Count the characters a terminal will actually display.

    Parameters
    ----------
    text : str
        String that may contain color/style sequences

    Returns
    -------
    int
        Character count of the text with all escape sequences removed
    """
    return len(strip_styles(text))


def truncate(text: str, max_chars: int) -> str:
    """Keep at most max_chars characters of text."""
    if max_chars <= 0:
        return ""
    return text[:max_chars]
