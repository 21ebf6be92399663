"""
Module: builder.layout.config

Purpose:
    Configuration for the page compositor.
    Defines the physical page, print resolution, cover geometry and
    worker settings.

Key Classes:
    - LayoutConfig: Immutable layout configuration

Dependencies:
    - dataclasses (std)

Used By:
    - builder.layout.composer: Page composition
    - builder.output.renderer: Page sizes
    - builder.config: BuilderConfig
"""

from __future__ import annotations

from dataclasses import dataclass

from photobook_toolkit.core.models import MmRect

# Square page edge and print resolution
DEFAULT_PAGE_SIZE_MM = 206.0
DEFAULT_DPI = 300

# Wrap-around cover: back + spine + front, with bleed in height
DEFAULT_COVER_WIDTH_MM = 458.0
DEFAULT_COVER_HEIGHT_MM = 242.0

# Width of the editor canvas bubble sizes are expressed against
DEFAULT_EDITOR_REFERENCE_WIDTH_PX = 800


@dataclass(frozen=True)
class LayoutConfig:
    """
    Configuration for page layout (immutable).

    Attributes:
        page_size_mm: Edge of the square page
        dpi: Print resolution for slot bitmaps
        cover_width_mm: Full cover width (back + spine + front)
        cover_height_mm: Cover height
        border_width_mm: White border around slots that are not full page
        caption_height_mm: Height of the caption strip
        caption_inset_mm: Horizontal inset of the caption strip
        title_font_size_pt: Cover title size
        editor_reference_width_px: Editor spread width bubbles are sized against
        aspect_tolerance: Ratio difference still filled by stretching
        panorama_min_half_px: Minimum short edge of each panorama half
        max_workers: Threads decoding and cropping slot images
        decode_attempts: Attempts per image decode
        decode_base_delay_s: First retry delay; doubles each retry

    Example:
        >>> config = LayoutConfig()
        >>> config.spread_width_mm
        412.0
    """

    # Physical page
    page_size_mm: float = DEFAULT_PAGE_SIZE_MM
    dpi: int = DEFAULT_DPI

    # Cover
    cover_width_mm: float = DEFAULT_COVER_WIDTH_MM
    cover_height_mm: float = DEFAULT_COVER_HEIGHT_MM
    title_font_size_pt: float = 24.0

    # Slot decoration
    border_width_mm: float = 0.5
    caption_height_mm: float = 10.0
    caption_inset_mm: float = 2.0

    # Geometry
    editor_reference_width_px: int = DEFAULT_EDITOR_REFERENCE_WIDTH_PX
    aspect_tolerance: float = 0.02
    panorama_min_half_px: int = 2000

    # Workers
    max_workers: int = 4
    decode_attempts: int = 5
    decode_base_delay_s: float = 0.05

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_size_mm <= 0:
            raise ValueError(f"page_size_mm must be positive: {self.page_size_mm}")
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive: {self.dpi}")
        if self.spine_width_mm < 0:
            raise ValueError(
                f"Cover width {self.cover_width_mm} is narrower than two pages"
            )
        if self.cover_height_mm <= 0:
            raise ValueError(f"cover_height_mm must be positive: {self.cover_height_mm}")
        if self.border_width_mm < 0:
            raise ValueError(f"border_width_mm must not be negative: {self.border_width_mm}")
        if self.editor_reference_width_px <= 0:
            raise ValueError("editor_reference_width_px must be positive")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1: {self.max_workers}")
        if self.decode_attempts < 1:
            raise ValueError(f"decode_attempts must be at least 1: {self.decode_attempts}")

    @property
    def spread_width_mm(self) -> float:
        """Width of a two-page spread sheet."""
        return self.page_size_mm * 2

    @property
    def spine_width_mm(self) -> float:
        return self.cover_width_mm - 2 * self.page_size_mm

    @property
    def back_cover_rect(self) -> MmRect:
        return MmRect(0.0, 0.0, self.page_size_mm, self.cover_height_mm)

    @property
    def front_cover_rect(self) -> MmRect:
        return MmRect(
            self.page_size_mm + self.spine_width_mm,
            0.0,
            self.page_size_mm,
            self.cover_height_mm,
        )

    @property
    def bubble_mm_per_px(self) -> float:
        """Millimetres per editor pixel for bubbles drawn on a spread."""
        return self.spread_width_mm / self.editor_reference_width_px
