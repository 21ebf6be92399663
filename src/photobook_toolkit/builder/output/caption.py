"""
Module: builder.output.caption

Purpose:
    Render photo caption strips: a translucent dark band anchored to the
    bottom of a slot with centred, word-wrapped white text.

Key Functions:
    - caption_rect(): Physical rectangle of the strip for a slot
    - render_caption(): RGBA bitmap of the strip

Dependencies:
    - PIL: Drawing
    - builder.bubbles.text: Font loading and wrapping

Used By:
    - builder.layout.composer: Captioned slots
"""

from __future__ import annotations

import logging

from PIL import Image, ImageDraw

from photobook_toolkit.builder.bubbles.text import layout_text, load_font, wrap_text
from photobook_toolkit.core.models import MmRect

logger = logging.getLogger(__name__)

BACKGROUND = (0, 0, 0, round(255 * 0.6))
TEXT_COLOR = (255, 255, 255, 255)

# Proportions of the strip height
FONT_SIZE_RATIO = 0.48
LINE_HEIGHT_RATIO = 0.5
SIDE_PADDING_RATIO = 0.3


def caption_rect(slot_rect: MmRect, height_mm: float, inset_mm: float) -> MmRect:
    """Strip along the bottom edge of a slot, inset horizontally."""
    height = min(height_mm, slot_rect.height)
    return MmRect(
        x=slot_rect.x + inset_mm,
        y=slot_rect.bottom - height,
        width=max(0.0, slot_rect.width - 2 * inset_mm),
        height=height,
    )


def render_caption(text: str, rect: MmRect, dpi: int) -> Image.Image:
    """
    Render a caption strip at print resolution.

    Args:
        text: Caption text
        rect: Strip rectangle (see caption_rect())
        dpi: Print resolution

    Returns:
        RGBA image sized to rect at dpi
    """
    width_px, height_px = rect.pixel_size(dpi)
    image = Image.new("RGBA", (width_px, height_px), BACKGROUND)

    font_px = max(1, round(height_px * FONT_SIZE_RATIO))
    font = load_font(font_px)
    padding = height_px * SIDE_PADDING_RATIO
    box = (padding, 0.0, max(1.0, width_px - 2 * padding), float(height_px))

    lines = wrap_text(text, box[2], font.getlength)
    placed = layout_text(lines, box, height_px * LINE_HEIGHT_RATIO, font.getlength)
    if len(lines) > 2:
        logger.debug(f"Caption wraps to {len(lines)} lines and overflows its strip: {text[:30]!r}")

    draw = ImageDraw.Draw(image)
    for line in placed:
        draw.text((line.x, line.y), line.text, fill=TEXT_COLOR, font=font)
    return image
