"""
Box drawing for the deployment copy UI.

Every box has a fixed interior width of ``BOX_WIDTH`` visible columns.
Columns are counted on the whole line, starting with the left corner glyph at
column 0, so a content row's text starts at column 2.

The queue box joins the source name to the destination list::

    ╭───────────┬───────────────────────────────────────╮
    │           │  /mnt/backup-a                        │
    │ test-dir ──> /mnt/backup-b                        │
    │           │  /mnt/backup-c                        │
    ╰───────────┴───────────────────────────────────────╯
"""

from colorama import Fore, Style

from .copy_queue import CopyQueue
from .formatting import truncate, visible_length

# Straight pieces
VERTICAL_CHAR = "│"
HORIZONTAL_CHAR = "─"

# Split pieces
SPLIT_RIGHT = "┤"
SPLIT_LEFT = "├"
SPLIT_ABOVE = "┬"
SPLIT_BELOW = "┴"

# Corner pieces (rounded)
BOTTOM_LEFT_CHAR = "╰"
BOTTOM_RIGHT_CHAR = "╯"
TOP_LEFT_CHAR = "╭"
TOP_RIGHT_CHAR = "╮"

ARROW_CHAR = ">"

BOX_WIDTH = 51
MAX_SOURCE_NAME = 15


def _rule(left: str, right: str, split_at: int | None, glyph: str) -> str:
    run = [HORIZONTAL_CHAR] * BOX_WIDTH
    if split_at is not None:
        if not 1 <= split_at <= BOX_WIDTH:
            raise ValueError(f"Split column must be in 1..{BOX_WIDTH}, got {split_at}")
        run[split_at - 1] = glyph
    return left + "".join(run) + right


def top_border(split_at: int | None = None, glyph: str = SPLIT_ABOVE) -> str:
    """
    Top rule of a box.

    Parameters
    ----------
    split_at : int | None, default=None
        Line column whose rule glyph is replaced by a T-junction
    glyph : str, default=SPLIT_ABOVE
        Junction glyph
    """
    return _rule(TOP_LEFT_CHAR, TOP_RIGHT_CHAR, split_at, glyph)


def bottom_border(split_at: int | None = None, glyph: str = SPLIT_BELOW) -> str:
    """Bottom rule of a box, optionally with an upward T-junction."""
    return _rule(BOTTOM_LEFT_CHAR, BOTTOM_RIGHT_CHAR, split_at, glyph)


def divider() -> str:
    return SPLIT_LEFT + HORIZONTAL_CHAR * BOX_WIDTH + SPLIT_RIGHT


def content_line(text: str) -> str:
    """
    One interior row of a box.

    Padding is computed on the visible length of text, so colored text lines
    up with plain text. Text wider than the box is written unpadded.
    """
    padding = max(BOX_WIDTH - visible_length(text) - 1, 0)
    return f"{VERTICAL_CHAR} {text}{' ' * padding}{VERTICAL_CHAR}"


def title_line(title: str) -> str:
    return content_line(f"{Fore.MAGENTA}{title}{Fore.RESET}")


def key_hint(key: str) -> str:
    """Style a keyboard key like ``[Y]``."""
    return f"{Style.BRIGHT}{Fore.LIGHTBLACK_EX}[{key}]{Style.RESET_ALL}"


def column_split(source_name: str) -> int:
    """Line column of the queue box T-junctions for a source name."""
    return min(visible_length(source_name), MAX_SOURCE_NAME) + 4


def arrow_row(count: int) -> int | None:
    """
    Index of the destination row connected to the source name.

    Parameters
    ----------
    count : int
        Number of destinations

    Returns
    -------
    int | None
        None without destinations, 1 for one or two, otherwise ``count // 2``
    """
    if count == 0:
        return None
    if count <= 2:
        return 1
    return count // 2


def queue_rows(queue: CopyQueue) -> list[str]:
    """Interior texts of the queue box, one per destination."""
    source_name = truncate(queue.source_name, MAX_SOURCE_NAME)
    split = column_split(source_name)
    count = len(queue.destinations)
    arrow = arrow_row(count)
    if arrow is not None:
        # A single destination has no row 1
        arrow = min(arrow, count - 1)

    # Both prefixes are `split` columns wide, the rule/arrow shaft sits on the
    # junction column
    arrow_prefix = f"{source_name} {HORIZONTAL_CHAR * 2}{ARROW_CHAR}"
    rule_prefix = f"{VERTICAL_CHAR:>{split - 1}} "
    room = BOX_WIDTH - 1 - (split + 1)

    rows = []
    for index, dest in enumerate(queue.destinations):
        prefix = arrow_prefix if index == arrow else rule_prefix
        dest_text = truncate(str(dest), room)
        rows.append(f"{prefix} {Fore.LIGHTBLACK_EX}{dest_text}{Fore.RESET}")
    return rows


def queue_box(queue: CopyQueue) -> list[str]:
    """
    Full queue box: bordered rows linking the source to its destinations.

    The T-junctions and the row rules are recomputed from the queue every
    call.
    """
    split = column_split(truncate(queue.source_name, MAX_SOURCE_NAME))
    lines = [top_border(split)]
    lines.extend(content_line(row) for row in queue_rows(queue))
    lines.append(bottom_border(split))
    return lines
