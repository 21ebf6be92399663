"""
Module: builder.bubbles.sizing

Purpose:
    Deterministic bubble size estimation from text length, and the extra
    canvas padding each bubble type needs around its body for tails and
    trailing circles.

    All values are in editor pixels. The estimate is character-count
    based so it gives the same result everywhere, with no font metrics
    involved; wrapping for display happens separately in
    builder.bubbles.text.

Key Functions:
    - measure(): Body size of a bubble
    - chars_per_line(): Line capacity used by measure()
    - canvas_padding(): Space above / below the body for tails
    - side_margin(): Space left / right of the body

Key Classes:
    - BubbleSize: Body width / height

Dependencies:
    - core.models: BubbleType, TailDirection

Used By:
    - builder.bubbles.paths: Outline generation
    - builder.bubbles.raster: Rendering
    - builder.bubbles.operations: Editor operations
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from photobook_toolkit.core.models import BubbleType, TailDirection

PADDING = 12
CHAR_WIDTH = 9.5
LINE_HEIGHT = 20

MIN_WIDTH = 100
MIN_HEIGHT = 60
MAX_WIDTH = 300
TEXT_BLOCK_MAX_WIDTH = 400
TEXT_BLOCK_MAX_HEIGHT = 400
TEXT_BLOCK_DEFAULT_WIDTH = 180

# Fixed line capacity of speech / thought / annotation bubbles
CHARS_PER_LINE = 30
TEXT_BLOCK_MIN_CHARS_PER_LINE = 10

# Offset of the body inside its canvas on the left and top
CANVAS_MARGIN = 10

# Tail tip of a speech bubble extends this far past the ellipse
SPEECH_TAIL_LENGTH = 15

# Thought circles sit this far past the scallops (plus bump size)
THOUGHT_TRAIL_CLEARANCE = 30

# Bump size of thought scallops relative to the smaller radius
THOUGHT_BUMP_FACTOR = 0.4


@dataclass(frozen=True, slots=True)
class BubbleSize:
    """Body size of a bubble in editor pixels."""

    width: float
    height: float


def max_height(bubble_type: BubbleType) -> Optional[float]:
    """Height cap of the estimate, None when unbounded."""
    if bubble_type is BubbleType.TEXT_BLOCK:
        return TEXT_BLOCK_MAX_HEIGHT
    return None


def max_width(bubble_type: BubbleType) -> float:
    return TEXT_BLOCK_MAX_WIDTH if bubble_type is BubbleType.TEXT_BLOCK else MAX_WIDTH


def chars_per_line(bubble_type: BubbleType, width: float) -> int:
    """Characters that fit one line of the given body width."""
    if bubble_type is BubbleType.TEXT_BLOCK:
        return max(TEXT_BLOCK_MIN_CHARS_PER_LINE, int((width - PADDING * 2) // CHAR_WIDTH))
    return CHARS_PER_LINE


def measure(
    text: str,
    bubble_type: BubbleType,
    width: Optional[float] = None,
    height: Optional[float] = None,
) -> BubbleSize:
    """
    Estimate the body size of a bubble.

    Explicit ``width`` / ``height`` always win over the estimate. Pure:
    the same inputs always give the same size.

    Args:
        text: Bubble text
        bubble_type: Bubble variant
        width: Explicit width override
        height: Explicit height override

    Returns:
        BubbleSize in editor pixels

    Example:
        >>> measure("Hello", BubbleType.SPEECH)
        BubbleSize(width=100, height=60)
    """
    length = len(text)

    if width is None:
        if bubble_type is BubbleType.TEXT_BLOCK:
            width = TEXT_BLOCK_DEFAULT_WIDTH
        else:
            width = max(MIN_WIDTH, min(MAX_WIDTH, length * CHAR_WIDTH + PADDING * 2))

    if height is None:
        lines = math.ceil(length / chars_per_line(bubble_type, width))
        height = max(MIN_HEIGHT, lines * LINE_HEIGHT + PADDING * 2)
        cap = max_height(bubble_type)
        if cap is not None:
            height = min(cap, height)

    return BubbleSize(width=width, height=height)


def thought_bump_size(size: BubbleSize) -> float:
    """Outward reach of thought-bubble scallops."""
    return min(size.width / 2, size.height / 2) * THOUGHT_BUMP_FACTOR


def side_margin(bubble_type: BubbleType, size: BubbleSize) -> float:
    """Space left and right of the body."""
    if bubble_type is BubbleType.THOUGHT:
        return max(float(CANVAS_MARGIN), thought_bump_size(size) / 2)
    return float(CANVAS_MARGIN)


def canvas_padding(
    bubble_type: BubbleType,
    tail: TailDirection,
    size: BubbleSize,
) -> Tuple[float, float]:
    """
    Space (top, bottom) added around the body so tails are not clipped.

    Top tails push the body down; bottom tails need room below.
    """
    if bubble_type is BubbleType.THOUGHT:
        # Scallops reach up to half a bump past the ellipse
        bump = thought_bump_size(size)
        overshoot = bump / 2
        if tail.is_top:
            return (bump + THOUGHT_TRAIL_CLEARANCE, overshoot + CANVAS_MARGIN + 2)
        return (max(0.0, overshoot - CANVAS_MARGIN), max(70.0, bump + 42))

    if tail.is_top:
        top = SPEECH_TAIL_LENGTH + 5 if bubble_type is BubbleType.SPEECH else 0.0
        return (top, 12.0)

    if bubble_type is BubbleType.SPEECH:
        return (0.0, 30.0)
    return (0.0, 12.0)


def canvas_size(
    bubble_type: BubbleType,
    tail: TailDirection,
    size: BubbleSize,
) -> Tuple[float, float]:
    """Full canvas (width, height) the outline is drawn on."""
    top, bottom = canvas_padding(bubble_type, tail, size)
    return (size.width + 2 * side_margin(bubble_type, size), size.height + top + bottom)
