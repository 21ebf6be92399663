"""
Module: builder.bubbles.paths

Purpose:
    Vector outlines for the four bubble types, expressed as a small
    path-command model that can be serialized to SVG path data or
    flattened to polygons for rasterization.

    Dispatch is a table from BubbleType to an outline builder, so adding
    a type means adding one function and one table entry.

Key Classes:
    - MoveTo, LineTo, CubicTo, QuadTo, Close: Path segments
    - Circle: Detached circle (thought trail)
    - BubbleOutline: Complete outline of one bubble on its canvas

Key Functions:
    - build_outline(): Outline for a type, body size and tail direction

Dependencies:
    - .sizing: Canvas padding and constants

Used By:
    - builder.bubbles.raster: Rendering
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple, Union

from photobook_toolkit.core.models import BubbleType, TailDirection

from .sizing import (
    CANVAS_MARGIN,
    SPEECH_TAIL_LENGTH,
    BubbleSize,
    canvas_padding,
    canvas_size,
    side_margin,
    thought_bump_size,
)

Point = Tuple[float, float]

# Circle approximation constant for cubic Bezier quadrants
KAPPA = 0.551915

THOUGHT_BUMPS = 10

ANNOTATION_CORNER_RADIUS = 8
TEXT_BLOCK_CORNER_RADIUS = 6


@dataclass(frozen=True, slots=True)
class MoveTo:
    to: Point

    def svg(self) -> str:
        return f"M {_fmt(self.to)}"


@dataclass(frozen=True, slots=True)
class LineTo:
    to: Point

    def svg(self) -> str:
        return f"L {_fmt(self.to)}"


@dataclass(frozen=True, slots=True)
class CubicTo:
    c1: Point
    c2: Point
    to: Point

    def svg(self) -> str:
        return f"C {_fmt(self.c1)} {_fmt(self.c2)} {_fmt(self.to)}"


@dataclass(frozen=True, slots=True)
class QuadTo:
    c: Point
    to: Point

    def svg(self) -> str:
        return f"Q {_fmt(self.c)} {_fmt(self.to)}"


@dataclass(frozen=True, slots=True)
class Close:
    def svg(self) -> str:
        return "Z"


Segment = Union[MoveTo, LineTo, CubicTo, QuadTo, Close]


@dataclass(frozen=True, slots=True)
class Circle:
    center: Point
    radius: float


def _fmt(p: Point) -> str:
    return f"{p[0]:g},{p[1]:g}"


@dataclass(frozen=True)
class BubbleOutline:
    """
    Outline of one bubble on its own canvas.

    Attributes:
        segments: Main closed path
        circles: Detached circles drawn with the same fill and stroke
        canvas_size: (width, height) of the canvas the path lives in
        body: (x, y, width, height) of the body rectangle; text goes here
    """

    segments: Tuple[Segment, ...]
    circles: Tuple[Circle, ...]
    canvas_size: Tuple[float, float]
    body: Tuple[float, float, float, float]

    def to_svg_path(self) -> str:
        """SVG path data of the main path."""
        return " ".join(segment.svg() for segment in self.segments)

    def count(self, kind: type) -> int:
        """Number of segments of a given class."""
        return sum(1 for s in self.segments if isinstance(s, kind))

    def flatten(self, steps: int = 16, scale: float = 1.0) -> List[Point]:
        """
        Approximate the main path as a polygon.

        Args:
            steps: Points sampled per curve segment
            scale: Multiplier applied to every coordinate
        """
        points: List[Point] = []
        current: Point = (0.0, 0.0)
        for segment in self.segments:
            if isinstance(segment, (MoveTo, LineTo)):
                current = segment.to
                points.append(current)
            elif isinstance(segment, CubicTo):
                points.extend(_sample_cubic(current, segment.c1, segment.c2, segment.to, steps))
                current = segment.to
            elif isinstance(segment, QuadTo):
                points.extend(_sample_quad(current, segment.c, segment.to, steps))
                current = segment.to
        return [(x * scale, y * scale) for x, y in points]


def _sample_cubic(p0: Point, p1: Point, p2: Point, p3: Point, steps: int) -> List[Point]:
    out = []
    for i in range(1, steps + 1):
        t = i / steps
        u = 1 - t
        out.append((
            u ** 3 * p0[0] + 3 * u * u * t * p1[0] + 3 * u * t * t * p2[0] + t ** 3 * p3[0],
            u ** 3 * p0[1] + 3 * u * u * t * p1[1] + 3 * u * t * t * p2[1] + t ** 3 * p3[1],
        ))
    return out


def _sample_quad(p0: Point, p1: Point, p2: Point, steps: int) -> List[Point]:
    out = []
    for i in range(1, steps + 1):
        t = i / steps
        u = 1 - t
        out.append((
            u * u * p0[0] + 2 * u * t * p1[0] + t * t * p2[0],
            u * u * p0[1] + 2 * u * t * p1[1] + t * t * p2[1],
        ))
    return out


# ─────────────────────────────────────────────────────────────────────────────
# Outline builders
# ─────────────────────────────────────────────────────────────────────────────

def _ellipse_frame(
    size: BubbleSize, top_pad: float, side: float = CANVAS_MARGIN
) -> Tuple[float, float, float, float]:
    """(cx, cy, rx, ry) of the body ellipse on the canvas."""
    rx = size.width / 2
    ry = size.height / 2
    return (rx + side, ry + CANVAS_MARGIN + top_pad, rx, ry)


def _speech_segments(size: BubbleSize, tail: TailDirection, top_pad: float) -> List[Segment]:
    cx, cy, rx, ry = _ellipse_frame(size, top_pad)
    ox, oy = rx * KAPPA, ry * KAPPA
    t = SPEECH_TAIL_LENGTH

    start = MoveTo((cx + rx, cy))
    top_right = CubicTo((cx + rx, cy - oy), (cx + ox, cy - ry), (cx, cy - ry))
    top_left = CubicTo((cx - ox, cy - ry), (cx - rx, cy - oy), (cx - rx, cy))
    bottom_left = CubicTo((cx - rx, cy + oy), (cx - ox, cy + ry), (cx, cy + ry))
    bottom_right = CubicTo((cx + ox, cy + ry), (cx + rx, cy + oy), (cx + rx, cy))

    if tail is TailDirection.BOTTOM_LEFT:
        body = [
            top_right,
            top_left,
            CubicTo((cx - rx, cy + oy), (cx - ox, cy + ry), (cx - rx * 0.3, cy + ry)),
            LineTo((cx - rx * 0.5, cy + ry + t)),
            LineTo((cx - rx * 0.1, cy + ry)),
            CubicTo((cx + ox, cy + ry), (cx + rx, cy + oy), (cx + rx, cy)),
        ]
    elif tail is TailDirection.BOTTOM_RIGHT:
        body = [
            top_right,
            top_left,
            CubicTo((cx - rx, cy + oy), (cx - ox, cy + ry), (cx + rx * 0.1, cy + ry)),
            LineTo((cx + rx * 0.5, cy + ry + t)),
            LineTo((cx + rx * 0.3, cy + ry)),
            CubicTo((cx + rx, cy + ry), (cx + rx, cy + oy), (cx + rx, cy)),
        ]
    elif tail is TailDirection.TOP_LEFT:
        body = [
            CubicTo((cx + rx, cy - oy), (cx + ox, cy - ry), (cx - rx * 0.1, cy - ry)),
            LineTo((cx - rx * 0.5, cy - ry - t)),
            LineTo((cx - rx * 0.3, cy - ry)),
            CubicTo((cx - rx, cy - ry), (cx - rx, cy - oy), (cx - rx, cy)),
            bottom_left,
            bottom_right,
        ]
    else:
        body = [
            CubicTo((cx + rx, cy - oy), (cx + rx, cy - ry), (cx + rx * 0.3, cy - ry)),
            LineTo((cx + rx * 0.5, cy - ry - t)),
            LineTo((cx + rx * 0.1, cy - ry)),
            CubicTo((cx - ox, cy - ry), (cx - rx, cy - oy), (cx - rx, cy)),
            bottom_left,
            bottom_right,
        ]

    return [start, *body, Close()]


def _speech_outline(size: BubbleSize, tail: TailDirection) -> BubbleOutline:
    top_pad, _ = canvas_padding(BubbleType.SPEECH, tail, size)
    return BubbleOutline(
        segments=tuple(_speech_segments(size, tail, top_pad)),
        circles=(),
        canvas_size=canvas_size(BubbleType.SPEECH, tail, size),
        body=(CANVAS_MARGIN, CANVAS_MARGIN + top_pad, size.width, size.height),
    )


def _thought_outline(size: BubbleSize, tail: TailDirection) -> BubbleOutline:
    top_pad, _ = canvas_padding(BubbleType.THOUGHT, tail, size)
    side_pad = side_margin(BubbleType.THOUGHT, size)
    cx, cy, rx, ry = _ellipse_frame(size, top_pad, side_pad)
    bump = thought_bump_size(size)

    segments: List[Segment] = [MoveTo((cx + rx, cy))]
    for i in range(THOUGHT_BUMPS):
        angle = i / THOUGHT_BUMPS * 2 * math.pi
        next_angle = (i + 1) / THOUGHT_BUMPS * 2 * math.pi
        mid = (angle + next_angle) / 2
        control = (
            cx + rx * math.cos(mid) + bump * math.cos(mid),
            cy + ry * math.sin(mid) + bump * math.sin(mid),
        )
        segments.append(QuadTo(control, (cx + rx * math.cos(next_angle), cy + ry * math.sin(next_angle))))
    segments.append(Close())

    # Two trailing circles, large then small, moving away from the body
    side = -1 if tail.is_left else 1
    base_x = cx + side * rx * 0.3
    if tail.is_top:
        base_y = cy - ry - bump
        circles = (
            Circle((base_x, base_y - 12), 7),
            Circle((base_x + side * 10, base_y - 28), 4),
        )
    else:
        base_y = cy + ry + bump
        circles = (
            Circle((base_x, base_y + 12), 7),
            Circle((base_x + side * 10, base_y + 28), 4),
        )

    return BubbleOutline(
        segments=tuple(segments),
        circles=circles,
        canvas_size=canvas_size(BubbleType.THOUGHT, tail, size),
        body=(side_pad, CANVAS_MARGIN + top_pad, size.width, size.height),
    )


def _rounded_rect_segments(x: float, y: float, w: float, h: float, r: float) -> List[Segment]:
    return [
        MoveTo((x + r, y)),
        LineTo((x + w - r, y)),
        QuadTo((x + w, y), (x + w, y + r)),
        LineTo((x + w, y + h - r)),
        QuadTo((x + w, y + h), (x + w - r, y + h)),
        LineTo((x + r, y + h)),
        QuadTo((x, y + h), (x, y + h - r)),
        LineTo((x, y + r)),
        QuadTo((x, y), (x + r, y)),
        Close(),
    ]


def _rect_outline(bubble_type: BubbleType, radius: float) -> Callable[[BubbleSize, TailDirection], BubbleOutline]:
    def build(size: BubbleSize, tail: TailDirection) -> BubbleOutline:
        return BubbleOutline(
            segments=tuple(
                _rounded_rect_segments(CANVAS_MARGIN, CANVAS_MARGIN, size.width, size.height, radius)
            ),
            circles=(),
            canvas_size=canvas_size(bubble_type, tail, size),
            body=(CANVAS_MARGIN, CANVAS_MARGIN, size.width, size.height),
        )

    return build


_BUILDERS: Dict[BubbleType, Callable[[BubbleSize, TailDirection], BubbleOutline]] = {
    BubbleType.SPEECH: _speech_outline,
    BubbleType.THOUGHT: _thought_outline,
    BubbleType.ANNOTATION: _rect_outline(BubbleType.ANNOTATION, ANNOTATION_CORNER_RADIUS),
    BubbleType.TEXT_BLOCK: _rect_outline(BubbleType.TEXT_BLOCK, TEXT_BLOCK_CORNER_RADIUS),
}


def build_outline(
    bubble_type: BubbleType,
    width: float,
    height: float,
    tail_direction: TailDirection = TailDirection.BOTTOM_LEFT,
) -> BubbleOutline:
    """
    Generate the outline of a bubble body.

    Args:
        bubble_type: Bubble variant
        width, height: Body size in editor pixels
        tail_direction: Corner the tail (or thought trail) points to

    Returns:
        BubbleOutline on a canvas that includes tail padding

    Example:
        >>> outline = build_outline(BubbleType.THOUGHT, 200, 80, TailDirection.TOP_RIGHT)
        >>> outline.count(LineTo), len(outline.circles)
        (0, 2)
    """
    return _BUILDERS[bubble_type](BubbleSize(width, height), tail_direction)


def outline_bounds(outline: BubbleOutline, samples: int = 16) -> Tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y) of the flattened path and circles."""
    points: Sequence[Point] = outline.flatten(samples)
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    for circle in outline.circles:
        (ccx, ccy), r = circle.center, circle.radius
        xs.extend((ccx - r, ccx + r))
        ys.extend((ccy - r, ccy + r))
    return (min(xs), min(ys), max(xs), max(ys))
