"""
Core Models Package

Immutable data models shared by the whole print pipeline.

All models are frozen dataclasses. Coordinate spaces get their own
types (NormRect, CropArea, PercentPoint, MmRect) so values from one
space cannot be passed where another is expected without an explicit
conversion.
"""

from .geometry import (
    CropArea,
    MmRect,
    NormRect,
    PercentPoint,
    mm_to_pt,
    mm_to_px,
    px_to_mm,
)
from .slots import PageLayout, PageSide, PhotoSlot, SpreadTemplate
from .album import (
    AiUsage,
    Album,
    BubbleType,
    Cover,
    Photo,
    SpeechBubble,
    Spread,
    TailDirection,
)

__all__ = [
    # Geometry
    "CropArea",
    "MmRect",
    "NormRect",
    "PercentPoint",
    "mm_to_pt",
    "mm_to_px",
    "px_to_mm",
    # Slots
    "PageLayout",
    "PageSide",
    "PhotoSlot",
    "SpreadTemplate",
    # Album
    "AiUsage",
    "Album",
    "BubbleType",
    "Cover",
    "Photo",
    "SpeechBubble",
    "Spread",
    "TailDirection",
]
