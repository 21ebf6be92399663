"""
Module: builder.bubbles.operations

Purpose:
    Editing operations on SpeechBubble models. Each returns a new bubble;
    inputs are clamped to the ranges the editor allows.

Key Functions:
    - move_bubble(): New anchor, clamped to 5-95%
    - resize_bubble(): Explicit size of a text block
    - rescale_bubble(): Uniform scale 0.3-3
    - change_font_size(): Font size in steps of 2 within 8-32
    - retype_bubble(), edit_bubble(): Type / text / tail changes

Used By:
    - Editor hosts; builder tests
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from photobook_toolkit.core.models import BubbleType, PercentPoint, SpeechBubble, TailDirection

from .sizing import MIN_HEIGHT, MIN_WIDTH, TEXT_BLOCK_MAX_WIDTH
from .text import DEFAULT_FONT_SIZE

MIN_POSITION = 5.0
MAX_POSITION = 95.0

MIN_SCALE = 0.3
MAX_SCALE = 3.0

MIN_FONT_SIZE = 8
MAX_FONT_SIZE = 32
FONT_SIZE_STEP = 2


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def move_bubble(bubble: SpeechBubble, x: float, y: float) -> SpeechBubble:
    """Move the anchor, keeping it inside the 5-95% band of the spread."""
    anchor = PercentPoint(_clamp(x, MIN_POSITION, MAX_POSITION), _clamp(y, MIN_POSITION, MAX_POSITION))
    return replace(bubble, anchor=anchor)


def resize_bubble(bubble: SpeechBubble, width: float, height: float) -> SpeechBubble:
    """
    Set an explicit body size. Only text blocks are resizable.

    Raises:
        ValueError: If the bubble is not a text block
    """
    if bubble.type is not BubbleType.TEXT_BLOCK:
        raise ValueError(f"Only text blocks can be resized, got {bubble.type.value}")
    return replace(
        bubble,
        width=_clamp(width, MIN_WIDTH, TEXT_BLOCK_MAX_WIDTH),
        height=max(MIN_HEIGHT, height),
    )


def rescale_bubble(bubble: SpeechBubble, scale: float) -> SpeechBubble:
    """Set the uniform scale, clamped to 0.3-3 and rounded to 0.01."""
    return replace(bubble, scale=round(_clamp(scale, MIN_SCALE, MAX_SCALE), 2))


def change_font_size(bubble: SpeechBubble, steps: int) -> SpeechBubble:
    """
    Grow (positive steps) or shrink the font by FONT_SIZE_STEP per step.

    A change that would leave the 8-32 range is ignored and the bubble is
    returned unchanged.
    """
    size = (bubble.font_size or DEFAULT_FONT_SIZE) + steps * FONT_SIZE_STEP
    if not MIN_FONT_SIZE <= size <= MAX_FONT_SIZE:
        return bubble
    return replace(bubble, font_size=size)


def retype_bubble(bubble: SpeechBubble, bubble_type: BubbleType) -> SpeechBubble:
    """Change the variant; explicit sizes only survive between text blocks."""
    if bubble_type is bubble.type:
        return bubble
    return replace(bubble, type=bubble_type, width=None, height=None)


def edit_bubble(
    bubble: SpeechBubble,
    text: str,
    tail_direction: Optional[TailDirection] = None,
) -> SpeechBubble:
    """Replace text (trimmed) and optionally the tail direction."""
    return replace(
        bubble,
        text=text.strip(),
        tail_direction=tail_direction or bubble.tail_direction,
    )
