"""
Bubbles Module

Size estimation, vector outlines, text layout and rasterization of
comic-style speech bubbles.

Key Functions:
    - measure(): Deterministic body size
    - build_outline(): Vector outline per bubble type
    - render_bubble(): RGBA raster for print
"""

from .sizing import BubbleSize, canvas_size, chars_per_line, measure
from .paths import (
    BubbleOutline,
    Circle,
    Close,
    CubicTo,
    LineTo,
    MoveTo,
    QuadTo,
    build_outline,
    outline_bounds,
)
from .text import layout_text, load_font, wrap_text
from .raster import bubble_outline, render_bubble
from .operations import (
    change_font_size,
    edit_bubble,
    move_bubble,
    rescale_bubble,
    resize_bubble,
    retype_bubble,
)

__all__ = [
    "BubbleSize",
    "canvas_size",
    "chars_per_line",
    "measure",
    "BubbleOutline",
    "Circle",
    "Close",
    "CubicTo",
    "LineTo",
    "MoveTo",
    "QuadTo",
    "build_outline",
    "outline_bounds",
    "layout_text",
    "load_font",
    "wrap_text",
    "bubble_outline",
    "render_bubble",
    "change_font_size",
    "edit_bubble",
    "move_bubble",
    "rescale_bubble",
    "resize_bubble",
    "retype_bubble",
]
