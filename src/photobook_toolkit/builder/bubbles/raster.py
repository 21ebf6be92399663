"""
Module: builder.bubbles.raster

Purpose:
    Rasterize a speech bubble (outline plus wrapped text) to an RGBA
    bitmap at print resolution.

    The outline is drawn supersampled and downscaled for smooth edges;
    text is drawn afterwards at the final resolution.

Key Functions:
    - bubble_outline(): Outline for a SpeechBubble model
    - render_bubble(): RGBA raster of a bubble

Dependencies:
    - PIL: Drawing
    - .sizing, .paths, .text

Used By:
    - builder.layout.composer: Spread bubbles
"""

from __future__ import annotations

import logging
import math
from typing import Tuple

from PIL import Image, ImageDraw

from photobook_toolkit.core.models import BubbleType, SpeechBubble

from .paths import BubbleOutline, build_outline
from .sizing import PADDING, measure
from .text import DEFAULT_FONT_SIZE, LINE_SPACING, layout_text, load_font, wrap_text

logger = logging.getLogger(__name__)

SUPERSAMPLE = 2
STROKE_WIDTH = 2

FILL = (255, 255, 255, 255)
TEXT_BLOCK_FILL = (255, 255, 255, round(255 * 0.75))
STROKE = (0, 0, 0, 255)
TEXT_COLOR = (0, 0, 0, 255)


def bubble_outline(bubble: SpeechBubble) -> BubbleOutline:
    """Outline of a bubble at its measured (or overridden) size."""
    size = measure(bubble.text, bubble.type, bubble.width, bubble.height)
    return build_outline(bubble.type, size.width, size.height, bubble.tail_direction)


def render_bubble(bubble: SpeechBubble, px_per_unit: float) -> Image.Image:
    """
    Render a bubble to an RGBA image.

    Args:
        bubble: Bubble model
        px_per_unit: Output pixels per editor pixel (already including
            the bubble's own scale)

    Returns:
        Transparent RGBA image of the bubble's canvas
    """
    outline = bubble_outline(bubble)
    canvas_w, canvas_h = outline.canvas_size
    out_size = (max(1, math.ceil(canvas_w * px_per_unit)), max(1, math.ceil(canvas_h * px_per_unit)))

    is_text_block = bubble.type is BubbleType.TEXT_BLOCK
    fill = TEXT_BLOCK_FILL if is_text_block else FILL
    stroke = None if is_text_block else STROKE

    ss = px_per_unit * SUPERSAMPLE
    big = Image.new("RGBA", (out_size[0] * SUPERSAMPLE, out_size[1] * SUPERSAMPLE), (0, 0, 0, 0))
    draw = ImageDraw.Draw(big)
    stroke_px = max(1, round(STROKE_WIDTH * ss))

    polygon = outline.flatten(scale=ss)
    draw.polygon(polygon, fill=fill)
    if stroke is not None:
        draw.line(polygon + polygon[:1], fill=stroke, width=stroke_px, joint="curve")

    for circle in outline.circles:
        (cx, cy), r = circle.center, circle.radius
        draw.ellipse(
            (cx * ss - r * ss, cy * ss - r * ss, cx * ss + r * ss, cy * ss + r * ss),
            fill=fill,
            outline=stroke,
            width=stroke_px,
        )

    image = big.resize(out_size, Image.Resampling.LANCZOS)
    _draw_text(image, bubble, outline, px_per_unit)
    logger.debug(f"Rendered bubble {bubble.id} ({bubble.type.value}) at {out_size}")
    return image


def _text_box(outline: BubbleOutline, px_per_unit: float) -> Tuple[float, float, float, float]:
    x, y, w, h = outline.body
    return (
        (x + PADDING) * px_per_unit,
        (y + PADDING) * px_per_unit,
        max(1.0, (w - 2 * PADDING) * px_per_unit),
        max(1.0, (h - 2 * PADDING) * px_per_unit),
    )


def _draw_text(image: Image.Image, bubble: SpeechBubble, outline: BubbleOutline, px_per_unit: float) -> None:
    if not bubble.text.strip():
        return

    font_px = max(1, round((bubble.font_size or DEFAULT_FONT_SIZE) * px_per_unit))
    font = load_font(font_px)
    box = _text_box(outline, px_per_unit)

    lines = wrap_text(bubble.text, box[2], font.getlength)
    placed = layout_text(
        lines,
        box,
        font_px * LINE_SPACING,
        font.getlength,
        align_left=bubble.type is BubbleType.TEXT_BLOCK,
    )

    draw = ImageDraw.Draw(image)
    for line in placed:
        draw.text((line.x, line.y), line.text, fill=TEXT_COLOR, font=font)
