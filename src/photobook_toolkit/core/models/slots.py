"""
Module: slots

Purpose:
    Layout template data: photo slots, page layouts, and spread
    templates. Pure data, immutable once a template is defined.

Key Classes:
    - PageSide: left / right page of a spread
    - PhotoSlot: One rectangular photo region on a page
    - PageLayout: Ordered slots for one page
    - SpreadTemplate: Left + right page layouts under one id

Dependencies:
    - .geometry.NormRect

Used By:
    - builder.templates.catalog
    - builder.layout.composer
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple

from .geometry import NormRect


class PageSide(str, Enum):
    """Which page of a spread."""

    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class PhotoSlot:
    """
    Rectangular region on a page reserved for one photo.

    Attributes:
        id: Slot identifier like "left-1"
        rect: Position and size in normalized page space
        aspect_ratio: Authored aspect hint (width / height)
    """

    id: str
    rect: NormRect
    aspect_ratio: float

    def __post_init__(self) -> None:
        if self.aspect_ratio <= 0:
            raise ValueError(f"aspect_ratio must be positive: {self.aspect_ratio}")

    @property
    def real_aspect(self) -> float:
        """Aspect ratio of the actual rectangle (pages are square)."""
        return self.rect.aspect

    @property
    def is_full_page(self) -> bool:
        return self.rect.covers_page()


@dataclass(frozen=True)
class PageLayout:
    """Ordered sequence of photo slots for one page."""

    slots: Tuple[PhotoSlot, ...]

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[PhotoSlot]:
        return iter(self.slots)


@dataclass(frozen=True)
class SpreadTemplate:
    """
    Named two-page layout.

    In a panoramic template, slot 0 on both pages is understood to be
    the two halves of one image spanning the binding.

    Attributes:
        id: Template identifier referenced by spreads
        name: Human readable name
        description: Short description for pickers
        left: Left page layout
        right: Right page layout
        panoramic: Whether slot 0 spans both pages
    """

    id: str
    name: str
    description: str
    left: PageLayout
    right: PageLayout
    panoramic: bool = False

    def page(self, side: PageSide) -> PageLayout:
        return self.left if side is PageSide.LEFT else self.right

    @property
    def slot_counts(self) -> Tuple[int, int]:
        """(left, right) slot counts."""
        return (len(self.left), len(self.right))
