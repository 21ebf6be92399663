"""
Module: geometry

Purpose:
    Distinct types for the four coordinate spaces used when printing an
    album, plus the explicit conversions between them:

    - NormRect: normalized slot space, fractions [0, 1] of one page
    - CropArea: pixel space of one specific bitmap resolution
    - PercentPoint: percentage space (0-100) of a whole spread
    - MmRect: physical millimetre space on a printed page

    Numbers from different spaces never mix implicitly; every hop goes
    through a named conversion method.

Key Functions:
    - mm_to_px(), px_to_mm(), mm_to_pt(): Physical unit conversion
    - NormRect.to_mm(): Slot space -> page millimetres
    - CropArea.rescaled_to(): Pixel space of one bitmap -> another
    - PercentPoint.to_mm(): Spread percentages -> spread millimetres

Dependencies:
    - dataclasses (std)

Used By:
    - core.models.slots, core.models.album
    - builder.images: Crop normalization and rescaling
    - builder.layout.composer: Physical placement
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0

# Slack for authored template fractions like 0.333 + 0.333 + 0.334
_EPSILON = 1e-6


def mm_to_px(mm: float, dpi: int) -> float:
    """Convert millimetres to pixels at the given DPI."""
    return mm * dpi / MM_PER_INCH


def px_to_mm(px: float, dpi: int) -> float:
    """Convert pixels at the given DPI to millimetres."""
    return px * MM_PER_INCH / dpi


def mm_to_pt(mm: float) -> float:
    """Convert millimetres to PDF points (1/72 inch)."""
    return mm * POINTS_PER_INCH / MM_PER_INCH


@dataclass(frozen=True, slots=True)
class NormRect:
    """
    Rectangle in normalized page space.

    All four fields are fractions of the page edge, so (0, 0, 1, 1) is
    the whole page.

    Invariants:
        - width > 0 and height > 0
        - rectangle lies within [0, 1] x [0, 1]
    """

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"NormRect must have positive size: {self.width}x{self.height}")
        if self.x < -_EPSILON or self.y < -_EPSILON:
            raise ValueError(f"NormRect origin outside page: ({self.x}, {self.y})")
        if self.right > 1 + _EPSILON or self.bottom > 1 + _EPSILON:
            raise ValueError(
                f"NormRect extends past page edge: right={self.right}, bottom={self.bottom}"
            )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def aspect(self) -> float:
        """Width / height. Pages are square so this is also the physical aspect."""
        return self.width / self.height

    def contains(self, other: NormRect) -> bool:
        """True if ``other`` lies entirely inside this rectangle."""
        return (
            other.x >= self.x - _EPSILON
            and other.y >= self.y - _EPSILON
            and other.right <= self.right + _EPSILON
            and other.bottom <= self.bottom + _EPSILON
        )

    def covers_page(self, tolerance: float = 1e-3) -> bool:
        """True if the rectangle spans the full page."""
        return (
            self.x <= tolerance
            and self.y <= tolerance
            and self.right >= 1 - tolerance
            and self.bottom >= 1 - tolerance
        )

    def to_mm(self, page_size_mm: float, x_offset_mm: float = 0.0) -> MmRect:
        """
        Convert to an absolute physical rectangle.

        Args:
            page_size_mm: Edge length of the (square) page
            x_offset_mm: Horizontal offset of the page on the sheet
                (0 for the left page, page_size_mm for the right page)
        """
        return MmRect(
            x=self.x * page_size_mm + x_offset_mm,
            y=self.y * page_size_mm,
            width=self.width * page_size_mm,
            height=self.height * page_size_mm,
        )

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict) -> NormRect:
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )


@dataclass(frozen=True, slots=True)
class CropArea:
    """
    Crop rectangle in the pixel space of one specific bitmap.

    Coordinates are floats; rounding happens only when rasterizing.
    ``reference_size`` names the (width, height) of the bitmap the crop
    was computed against. Snapshots only promise that the crop is in the
    *original* image's space, so a freshly loaded crop may be unbound
    (``reference_size is None``) until the original is decoded and bound
    with ``bound_to()``.

    Invariants:
        - width > 0 and height > 0
        - rescaling requires a bound reference_size
    """

    x: float
    y: float
    width: float
    height: float
    reference_size: Optional[Tuple[int, int]] = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"CropArea must have positive size: {self.width}x{self.height}")
        if self.reference_size is not None:
            ref_w, ref_h = self.reference_size
            if ref_w <= 0 or ref_h <= 0:
                raise ValueError(f"reference_size must be positive: {self.reference_size}")

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def box(self) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) tuple for PIL."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    @property
    def is_bound(self) -> bool:
        return self.reference_size is not None

    def is_within_reference(self) -> bool:
        """True if the crop lies inside its reference bitmap (no expansion canvas)."""
        if self.reference_size is None:
            raise ValueError("CropArea is not bound to a reference resolution")
        ref_w, ref_h = self.reference_size
        left, top, right, bottom = self.box
        return (
            left >= -_EPSILON
            and top >= -_EPSILON
            and right <= ref_w + _EPSILON
            and bottom <= ref_h + _EPSILON
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Conversions
    # ─────────────────────────────────────────────────────────────────────────

    def bound_to(self, reference_size: Tuple[int, int]) -> CropArea:
        """Attach the resolution this crop was computed against."""
        return replace(self, reference_size=(int(reference_size[0]), int(reference_size[1])))

    def rescaled_to(self, size: Tuple[int, int]) -> CropArea:
        """
        Re-express this crop in the pixel space of another resolution.

        All four fields are multiplied by the long-edge ratio
        ``max(size) / max(reference_size)``, so the framing is identical
        at every resolution (uniform scaling, never re-cropping).

        Raises:
            ValueError: If the crop is not bound to a reference resolution
        """
        if self.reference_size is None:
            raise ValueError("Cannot rescale an unbound CropArea")
        factor = max(size) / max(self.reference_size)
        return CropArea(
            x=self.x * factor,
            y=self.y * factor,
            width=self.width * factor,
            height=self.height * factor,
            reference_size=(int(size[0]), int(size[1])),
        )

    def rounded(self) -> CropArea:
        """Crop snapped to whole pixels."""
        return replace(
            self,
            x=float(round(self.x)),
            y=float(round(self.y)),
            width=float(max(1, round(self.width))),
            height=float(max(1, round(self.height))),
        )

    def to_dict(self) -> dict:
        d = {"x": self.x, "y": self.y, "width": self.width, "height": self.height}
        if self.reference_size is not None:
            d["referenceWidth"] = self.reference_size[0]
            d["referenceHeight"] = self.reference_size[1]
        return d

    @classmethod
    def from_dict(cls, data: dict) -> CropArea:
        reference = None
        if "referenceWidth" in data and "referenceHeight" in data:
            reference = (int(data["referenceWidth"]), int(data["referenceHeight"]))
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
            reference_size=reference,
        )


@dataclass(frozen=True, slots=True)
class PercentPoint:
    """Point in spread percentage space: (0, 0) top-left, (100, 100) bottom-right."""

    x: float
    y: float

    def __post_init__(self) -> None:
        if not (0 <= self.x <= 100 and 0 <= self.y <= 100):
            raise ValueError(f"PercentPoint outside 0-100: ({self.x}, {self.y})")

    def to_fraction(self) -> Tuple[float, float]:
        return (self.x / 100.0, self.y / 100.0)

    def to_mm(self, spread_width_mm: float, spread_height_mm: float) -> Tuple[float, float]:
        """Absolute position on the spread sheet in millimetres."""
        fx, fy = self.to_fraction()
        return (fx * spread_width_mm, fy * spread_height_mm)


@dataclass(frozen=True, slots=True)
class MmRect:
    """Rectangle in physical millimetres, origin at the sheet's top-left."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def inset(self, dx: float, dy: Optional[float] = None) -> MmRect:
        """Shrink by ``dx`` horizontally and ``dy`` vertically on every side."""
        if dy is None:
            dy = dx
        return MmRect(self.x + dx, self.y + dy, self.width - 2 * dx, self.height - 2 * dy)

    def contain(self, aspect: float) -> MmRect:
        """Largest rectangle of ``aspect`` centred inside this one (letterbox)."""
        if aspect >= self.aspect:
            width = self.width
            height = self.width / aspect
        else:
            height = self.height
            width = self.height * aspect
        return MmRect(
            x=self.x + (self.width - width) / 2,
            y=self.y + (self.height - height) / 2,
            width=width,
            height=height,
        )

    def pixel_size(self, dpi: int) -> Tuple[int, int]:
        """Pixel dimensions needed to print this rectangle at ``dpi``."""
        return (
            max(1, round(mm_to_px(self.width, dpi))),
            max(1, round(mm_to_px(self.height, dpi))),
        )

    def to_points(self, sheet_height_mm: float) -> Tuple[float, float, float, float]:
        """
        Convert to PDF points with a bottom-up Y axis.

        Returns:
            (x_pt, y_pt, width_pt, height_pt) where y_pt is the bottom edge
        """
        return (
            mm_to_pt(self.x),
            mm_to_pt(sheet_height_mm - self.y - self.height),
            mm_to_pt(self.width),
            mm_to_pt(self.height),
        )
