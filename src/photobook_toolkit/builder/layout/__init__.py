"""
Module: builder.layout

Purpose:
    Page composition for album printing.
    Converts album spreads into page plans of positioned bitmaps.

Key Functions:
    - compose_album(): Main entry point for layout

Key Classes:
    - LayoutConfig: Physical page configuration
    - PagePlan: Single page layout plan
    - LayoutResult: All pages plus warnings

Used By:
    - builder.controller: Main build controller
"""

from .config import LayoutConfig
from .models import (
    BubblePlacement,
    CaptionPlacement,
    LayoutResult,
    PageKind,
    PagePlan,
    PhotoPlacement,
    TitlePlacement,
)
from .composer import compose_album, compose_bubbles, render_slot

__all__ = [
    # Config
    "LayoutConfig",
    # Models
    "BubblePlacement",
    "CaptionPlacement",
    "LayoutResult",
    "PageKind",
    "PagePlan",
    "PhotoPlacement",
    "TitlePlacement",
    # Functions
    "compose_album",
    "compose_bubbles",
    "render_slot",
]
