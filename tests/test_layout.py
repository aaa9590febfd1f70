#!/usr/bin/env python3
"""
Tests for box drawing.

Tests cover:
- Borders, split glyphs and content padding
- Column split and arrow row geometry
- Queue box rows
"""

import sys
from pathlib import Path

import pytest
from colorama import Fore, Style

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from decopy.copy_queue import CopyQueue
from decopy.formatting import strip_styles, visible_length
from decopy.layout import (
    ARROW_CHAR,
    BOX_WIDTH,
    SPLIT_ABOVE,
    SPLIT_BELOW,
    VERTICAL_CHAR,
    arrow_row,
    bottom_border,
    column_split,
    content_line,
    divider,
    queue_box,
    queue_rows,
    title_line,
    top_border,
)

LINE_WIDTH = BOX_WIDTH + 2


# ============================================================================
# Borders
# ============================================================================


def test_top_border_without_split() -> None:
    """Test a plain rounded top border."""
    border = top_border()
    assert border == "╭" + "─" * BOX_WIDTH + "╮"
    assert len(border) == LINE_WIDTH


def test_bottom_border_without_split() -> None:
    """Test a plain rounded bottom border."""
    assert bottom_border() == "╰" + "─" * BOX_WIDTH + "╯"


def test_divider() -> None:
    """Test the header divider."""
    assert divider() == "├" + "─" * BOX_WIDTH + "┤"


def test_borders_with_split() -> None:
    """Test that the split column carries the T-junction glyph."""
    top = top_border(7)
    bottom = bottom_border(7)

    assert len(top) == LINE_WIDTH
    assert top[7] == SPLIT_ABOVE
    assert bottom[7] == SPLIT_BELOW
    assert top.count(SPLIT_ABOVE) == 1
    assert bottom.count(SPLIT_BELOW) == 1


def test_border_with_custom_glyph() -> None:
    """Test overriding the junction glyph."""
    assert top_border(3, glyph="┼")[3] == "┼"


@pytest.mark.parametrize("column", [0, BOX_WIDTH + 1])
def test_border_split_out_of_range(column) -> None:
    """Test that a split outside the rule is refused."""
    with pytest.raises(ValueError):
        top_border(column)


# ============================================================================
# Content Lines
# ============================================================================


def test_content_line_pads_to_box_width() -> None:
    """Test that a content line is exactly as wide as the borders."""
    line = content_line("Do you want to copy to these directories?")
    assert line.startswith(f"{VERTICAL_CHAR} Do you")
    assert line.endswith(VERTICAL_CHAR)
    assert len(line) == LINE_WIDTH


def test_content_line_ignores_styles_when_padding() -> None:
    """Test that styled text is padded by its visible width."""
    styled = content_line(f"Press {Style.BRIGHT}{Fore.LIGHTBLACK_EX}[Y]{Style.RESET_ALL} now")
    plain = content_line("Press [Y] now")

    assert visible_length(styled) == LINE_WIDTH
    assert strip_styles(styled) == plain


def test_content_line_with_overlong_text() -> None:
    """Test that text wider than the box is not padded."""
    text = "x" * (BOX_WIDTH + 10)
    assert content_line(text) == f"{VERTICAL_CHAR} {text}{VERTICAL_CHAR}"


def test_title_line_is_colored_and_aligned() -> None:
    """Test the magenta header title."""
    line = title_line("Deployment Copy")
    assert Fore.MAGENTA in line
    assert strip_styles(line) == content_line("Deployment Copy")


# ============================================================================
# Geometry
# ============================================================================


@pytest.mark.parametrize(
    "count, expected",
    [(0, None), (1, 1), (2, 1), (3, 1), (4, 2), (5, 2), (8, 4)],
)
def test_arrow_row(count, expected) -> None:
    """Test the arrow row for different queue lengths."""
    assert arrow_row(count) == expected


def test_column_split_short_name() -> None:
    """Test the split column for a short source name."""
    assert column_split("abc") == 7


def test_column_split_is_capped() -> None:
    """Test that long names are capped at 15 characters."""
    assert column_split("a" * 30) == 19


def test_column_split_ignores_styles() -> None:
    """Test that a colored name is measured by its visible width."""
    assert column_split(f"{Fore.MAGENTA}abc{Fore.RESET}") == 7


# ============================================================================
# Queue Box
# ============================================================================


def test_queue_box_geometry() -> None:
    """Test junctions, rules and arrow line up on the split column."""
    queue = CopyQueue(Path("/data/test-dir"), [Path("/mnt/a"), Path("/mnt/b"), Path("/mnt/c")])
    lines = [strip_styles(line) for line in queue_box(queue)]
    split = column_split("test-dir")

    assert split == 12
    assert len(lines) == 5
    assert lines[0][split] == SPLIT_ABOVE
    assert lines[-1][split] == SPLIT_BELOW
    for line in lines:
        assert len(line) == LINE_WIDTH

    rows = lines[1:-1]
    # Three destinations point the arrow at the middle row
    assert rows[1].startswith(f"{VERTICAL_CHAR} test-dir ──{ARROW_CHAR} /mnt/b")
    assert rows[1][split] == "─"
    for row in (rows[0], rows[2]):
        assert row[split] == VERTICAL_CHAR
        assert row[1:split].strip() == ""

    # Destinations start on the same column in every row
    starts = {row.index("/mnt/") for row in rows}
    assert len(starts) == 1


def test_queue_box_single_destination_has_arrow() -> None:
    """Test that a lone destination row still carries the arrow."""
    queue = CopyQueue(Path("/data/site"), [Path("/mnt/usb")])
    rows = [strip_styles(row) for row in queue_rows(queue)]

    assert len(rows) == 1
    assert "site ──>" in rows[0]


def test_queue_box_two_destinations_arrow_on_second_row() -> None:
    """Test the arrow row for two destinations."""
    queue = CopyQueue(Path("/data/site"), [Path("/mnt/a"), Path("/mnt/b")])
    rows = [strip_styles(row) for row in queue_rows(queue)]

    assert ARROW_CHAR not in rows[0]
    assert "site ──> /mnt/b" in rows[1]


def test_queue_box_truncates_long_names() -> None:
    """Test long source names and destinations keep the box closed."""
    long_source = Path("/data") / ("s" * 30)
    long_dest = Path("/mnt") / ("d" * 80)
    queue = CopyQueue(long_source, [long_dest])
    lines = [strip_styles(line) for line in queue_box(queue)]

    assert "s" * 15 + " ──>" in lines[1]
    assert "s" * 16 not in lines[1]
    assert lines[0][19] == SPLIT_ABOVE
    for line in lines:
        assert len(line) == LINE_WIDTH


def test_queue_box_without_destinations() -> None:
    """Test an empty queue draws only the borders."""
    queue = CopyQueue(Path("/data/site"), [])
    assert len(queue_box(queue)) == 2


def test_queue_box_for_root_source() -> None:
    """Test that a source without a name falls back to its path."""
    queue = CopyQueue(Path("/"), [Path("/mnt/a")])
    rows = [strip_styles(row) for row in queue_rows(queue)]
    assert rows[0].startswith("/ ──>")
