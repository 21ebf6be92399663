"""
Module: builder.layout.models

Purpose:
    Data models for composed pages.
    Immutable dataclasses of bitmaps positioned in physical millimetres.

Key Classes:
    - PhotoPlacement: Slot bitmap placed on a page
    - CaptionPlacement: Caption strip bitmap
    - BubblePlacement: Bubble raster
    - TitlePlacement: Cover title text
    - PagePlan: Complete page layout
    - LayoutResult: Final layout output

Dependencies:
    - PIL: Image type
    - core.models: MmRect

Used By:
    - builder.layout.composer: Creates PagePlans
    - builder.output.renderer: Draws PagePlans
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from PIL import Image

from photobook_toolkit.core.models import MmRect


class PageKind(str, Enum):
    COVER = "cover"
    SPREAD = "spread"


@dataclass(frozen=True)
class PhotoPlacement:
    """
    A slot bitmap positioned on a page.

    Attributes:
        slot_id: Template slot the photo fills
        photo_id: Photo identifier
        image: Print-resolution RGB bitmap
        rect: Where the bitmap is drawn (the slot, or a letterboxed
            rectangle inside it)
        slot_rect: Full slot rectangle
        border_mm: Width of the white border drawn inside the slot
    """

    slot_id: str
    photo_id: str
    image: Image.Image
    rect: MmRect
    slot_rect: MmRect
    border_mm: float = 0.0


@dataclass(frozen=True)
class CaptionPlacement:
    photo_id: str
    text: str
    image: Image.Image
    rect: MmRect


@dataclass(frozen=True)
class BubblePlacement:
    """Bubble raster centred on its anchor (may overhang the sheet)."""

    bubble_id: str
    image: Image.Image
    rect: MmRect


@dataclass(frozen=True)
class TitlePlacement:
    """Centred text; (x, y) is the centre of the text in millimetres."""

    text: str
    x: float
    y: float
    font_size_pt: float


@dataclass(frozen=True)
class PagePlan:
    """
    Complete layout plan for a single PDF page.

    Attributes:
        index: Page number (0-indexed)
        kind: Cover or spread
        width_mm, height_mm: Physical page size
        photos: Slot bitmaps, in template order
        captions: Caption strips, drawn over photos
        bubbles: Bubble rasters, drawn last
        title: Cover title
        spread_id: Source spread (None for the cover)
    """

    index: int
    kind: PageKind
    width_mm: float
    height_mm: float
    photos: tuple[PhotoPlacement, ...] = ()
    captions: tuple[CaptionPlacement, ...] = ()
    bubbles: tuple[BubblePlacement, ...] = ()
    title: Optional[TitlePlacement] = None
    spread_id: Optional[str] = None

    @property
    def placement_count(self) -> int:
        """Number of bitmaps on this page."""
        return len(self.photos) + len(self.captions) + len(self.bubbles)

    @property
    def is_empty(self) -> bool:
        return self.placement_count == 0 and self.title is None


@dataclass(frozen=True)
class LayoutResult:
    """
    Final layout output with diagnostics.

    Attributes:
        pages: Page plans in print order
        warnings: Warning messages for skipped or degraded content
        skipped_spreads: Ids of spreads that were not printed
    """

    pages: tuple[PagePlan, ...]
    warnings: list[str] = field(default_factory=list)
    skipped_spreads: list[str] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def total_placements(self) -> int:
        """Total number of bitmaps across all pages."""
        return sum(p.placement_count for p in self.pages)
