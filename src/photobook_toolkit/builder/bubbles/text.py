"""
Module: builder.bubbles.text

Purpose:
    Word wrapping and placement of bubble text, plus the shared font
    loader used for bubble text and captions.

Key Functions:
    - wrap_text(): Greedy per-paragraph word wrap
    - layout_text(): Line positions inside a bubble body
    - load_font(): Bold TrueType font with fallbacks

Dependencies:
    - PIL: Font loading and text metrics

Used By:
    - builder.bubbles.raster
    - builder.output.caption
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, List, Tuple

from PIL import ImageFont

logger = logging.getLogger(__name__)

# Line height as a multiple of the font size
LINE_SPACING = 1.2

DEFAULT_FONT_SIZE = 14


def wrap_text(text: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """
    Greedy word wrap.

    Manual newlines always break. Words are added to the current line
    while it still fits ``max_width``; a single word wider than the
    limit is kept whole on its own line.

    Args:
        text: Text to wrap
        max_width: Available width in the units of ``measure``
        measure: Width of a string

    Example:
        >>> wrap_text("aa bb cc", 5, len)
        ['aa bb', 'cc']
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if measure(candidate) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return lines


@dataclass(frozen=True)
class TextLine:
    text: str
    x: float
    y: float


def layout_text(
    lines: List[str],
    box: Tuple[float, float, float, float],
    line_height: float,
    measure: Callable[[str], float],
    *,
    align_left: bool = False,
) -> List[TextLine]:
    """
    Position wrapped lines inside a box.

    The block is centred vertically on the box centre. Lines are centred
    horizontally, or left aligned when ``align_left`` is set.

    Args:
        lines: Wrapped lines
        box: (x, y, width, height) of the text area
        line_height: Distance between baselines' tops
        measure: Width of a string
        align_left: Left align instead of centring
    """
    x, y, width, height = box
    block_height = line_height * len(lines)
    top = y + (height - block_height) / 2

    placed = []
    for i, line in enumerate(lines):
        line_x = x if align_left else x + (width - measure(line)) / 2
        placed.append(TextLine(text=line, x=line_x, y=top + i * line_height))
    return placed


@lru_cache(maxsize=32)
def load_font(size: int) -> ImageFont.FreeTypeFont:
    """
    Load a bold font for bubble and caption text.

    Falls back to regular weights, then to Pillow's default font.

    Args:
        size: Font size in pixels
    """
    font_options = [
        "arialbd.ttf",          # Arial Bold (Windows)
        "Arial Bold.ttf",       # Arial Bold (Mac)
        "DejaVuSans-Bold.ttf",  # DejaVu Sans Bold
        "arial.ttf",
        "Arial.ttf",
        "DejaVuSans.ttf",
    ]

    for font_name in font_options:
        try:
            return ImageFont.truetype(font_name, size)
        except (IOError, OSError):
            continue

    logger.warning("Could not load TrueType font, using default")
    return ImageFont.load_default(size)


def text_width(font: ImageFont.ImageFont, text: str) -> float:
    """Advance width of ``text`` in ``font``."""
    return font.getlength(text)
