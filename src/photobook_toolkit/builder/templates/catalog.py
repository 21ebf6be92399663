"""
Module: builder.templates.catalog

Purpose:
    Static catalog of spread templates and derivation of the effective
    slot geometry for the album's gap setting.

    Every template is authored in its "with gaps" form: each slot is its
    layout cell inset by GAP_MARGIN on all four sides, so the page margin
    is GAP_MARGIN and the gap between neighbours is 2 * GAP_MARGIN.
    Removing gaps grows every edge to the midline between it and the
    nearest facing slot edge (or to the page edge when no slot faces it).

Key Functions:
    - get_template(): Lookup by id (raises TemplateNotFoundError)
    - find_template(): Lookup by id (returns None)
    - get_page_slots(): Effective slots for one page and gap setting
    - remove_gaps(): Edge-to-edge expansion of a slot list

Key Classes:
    - TemplateNotFoundError: Unknown template id

Dependencies:
    - core.models: NormRect, PhotoSlot, PageLayout, SpreadTemplate

Used By:
    - builder.layout.composer: Page composition
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from photobook_toolkit.core.models import (
    NormRect,
    PageLayout,
    PageSide,
    PhotoSlot,
    SpreadTemplate,
)

logger = logging.getLogger(__name__)

# Half of the inter-slot gap; also the page margin
GAP_MARGIN = 0.01

# Facing-edge comparison slack
_EDGE_EPSILON = 1e-6


class TemplateNotFoundError(KeyError):
    """Spread references a template id that is not in the catalog."""
    pass


def _slot(slot_id: str, x: float, y: float, w: float, h: float) -> PhotoSlot:
    """Author a gapped slot from its layout cell."""
    return PhotoSlot(
        id=slot_id,
        rect=NormRect(x + GAP_MARGIN, y + GAP_MARGIN, w - 2 * GAP_MARGIN, h - 2 * GAP_MARGIN),
        aspect_ratio=w / h,
    )


def _page(*slots: PhotoSlot) -> PageLayout:
    return PageLayout(slots=tuple(slots))


# 1 square photo left, 3 horizontal strips right
TEMPLATE_CLASSIC = SpreadTemplate(
    id="classic",
    name="Classic",
    description="1 photo left, 3 horizontal photos right",
    left=_page(_slot("left-1", 0, 0, 1, 1)),
    right=_page(
        _slot("right-1", 0, 0, 1, 1 / 3),
        _slot("right-2", 0, 1 / 3, 1, 1 / 3),
        _slot("right-3", 0, 2 / 3, 1, 1 / 3),
    ),
)

# Large + small square left; two squares over a wide strip right
TEMPLATE_6PHOTOS = SpreadTemplate(
    id="6photos",
    name="6 photo mix",
    description="Varied arrangement of 6 photos",
    left=_page(
        _slot("left-1", 0, 0, 0.72, 0.72),
        _slot("left-2", 0.72, 0.72, 0.28, 0.28),
    ),
    right=_page(
        _slot("right-1", 0, 0, 0.5, 0.5),
        _slot("right-2", 0, 0.5, 1, 0.5),
        _slot("right-3", 0.5, 0, 0.5, 0.5),
    ),
)

TEMPLATE_GRID = SpreadTemplate(
    id="grid",
    name="Grid",
    description="2 photos on each page",
    left=_page(
        _slot("left-1", 0, 0, 1, 0.5),
        _slot("left-2", 0, 0.5, 1, 0.5),
    ),
    right=_page(
        _slot("right-1", 0, 0, 1, 0.5),
        _slot("right-2", 0, 0.5, 1, 0.5),
    ),
)

# Vertical strip left, mixed sizes right
TEMPLATE_ASYMMETRIC = SpreadTemplate(
    id="asymmetric",
    name="Asymmetric",
    description="Vertical strip on the left, mixed layout on the right",
    left=_page(
        _slot("left-1", 0, 0, 0.43, 1),
        _slot("left-2", 0.43, 0, 0.57, 0.456),
        _slot("left-3", 0.43, 0.456, 0.57, 0.544),
    ),
    right=_page(
        _slot("right-1", 0, 0, 1, 0.5625),
        _slot("right-2", 0, 0.5625, 0.4375, 0.4375),
        _slot("right-3", 0.4375, 0.5625, 0.5625, 0.4375),
    ),
)

# One image across both pages, split at the binding. Full bleed, so the
# halves meet exactly at the spine in both gap modes.
TEMPLATE_PANORAMA = SpreadTemplate(
    id="panorama",
    name="Panorama",
    description="One photo spanning the whole spread",
    left=_page(PhotoSlot("left-1", NormRect(0, 0, 1, 1), aspect_ratio=1)),
    right=_page(PhotoSlot("right-1", NormRect(0, 0, 1, 1), aspect_ratio=1)),
    panoramic=True,
)

SPREAD_TEMPLATES: Tuple[SpreadTemplate, ...] = (
    TEMPLATE_CLASSIC,
    TEMPLATE_6PHOTOS,
    TEMPLATE_GRID,
    TEMPLATE_ASYMMETRIC,
    TEMPLATE_PANORAMA,
)

_BY_ID: Dict[str, SpreadTemplate] = {t.id: t for t in SPREAD_TEMPLATES}


def find_template(template_id: str) -> Optional[SpreadTemplate]:
    """Look up a template, returning None for unknown ids."""
    return _BY_ID.get(template_id)


def get_template(template_id: str) -> SpreadTemplate:
    """
    Look up a template by id.

    Raises:
        TemplateNotFoundError: If the id is not in the catalog
    """
    template = _BY_ID.get(template_id)
    if template is None:
        raise TemplateNotFoundError(template_id)
    return template


def get_page_slots(
    template: SpreadTemplate,
    side: PageSide,
    with_gaps: bool,
) -> Tuple[PhotoSlot, ...]:
    """
    Get the effective slots for one page of a template.

    Args:
        template: Spread template
        side: Which page
        with_gaps: True returns the authored (gapped) rectangles,
            False returns them expanded edge-to-edge

    Returns:
        Slots in template order

    Example:
        >>> slots = get_page_slots(TEMPLATE_CLASSIC, PageSide.LEFT, with_gaps=False)
        >>> slots[0].rect
        NormRect(x=0.0, y=0.0, width=1.0, height=1.0)
    """
    slots = template.page(side).slots
    if with_gaps:
        return slots
    return remove_gaps(slots)


def remove_gaps(slots: Sequence[PhotoSlot]) -> Tuple[PhotoSlot, ...]:
    """
    Expand slots to eliminate inter-slot margins.

    Each edge moves to the midline between itself and the nearest slot
    edge facing it, or to the page edge if no slot faces it. Two slots
    that do not overlap stay disjoint because both move to the same
    midline at most.

    Args:
        slots: Authored slots for one page

    Returns:
        Expanded slots, same order and ids, aspect hints recomputed
    """
    rects = [s.rect for s in slots]
    expanded: List[PhotoSlot] = []

    for index, slot in enumerate(slots):
        others = [r for i, r in enumerate(rects) if i != index]
        r = slot.rect

        lefts = [o.right for o in others if o.right <= r.x + _EDGE_EPSILON]
        rights = [o.x for o in others if o.x >= r.right - _EDGE_EPSILON]
        tops = [o.bottom for o in others if o.bottom <= r.y + _EDGE_EPSILON]
        bottoms = [o.y for o in others if o.y >= r.bottom - _EDGE_EPSILON]

        new_left = (max(lefts) + r.x) / 2 if lefts else 0.0
        new_right = (min(rights) + r.right) / 2 if rights else 1.0
        new_top = (max(tops) + r.y) / 2 if tops else 0.0
        new_bottom = (min(bottoms) + r.bottom) / 2 if bottoms else 1.0

        rect = NormRect(
            x=new_left,
            y=new_top,
            width=new_right - new_left,
            height=new_bottom - new_top,
        )
        expanded.append(PhotoSlot(id=slot.id, rect=rect, aspect_ratio=rect.aspect))

    return tuple(expanded)


def slot_aspect_ratio(slot: PhotoSlot) -> float:
    """Real aspect ratio of a slot's rectangle (target for crop normalization)."""
    return slot.real_aspect


def panorama_aspect_ratio(template: SpreadTemplate, with_gaps: bool) -> float:
    """
    Combined aspect ratio of the two slot-0 halves of a panoramic template.

    Raises:
        ValueError: If the template is not panoramic
    """
    if not template.panoramic:
        raise ValueError(f"Template {template.id!r} is not panoramic")
    left = get_page_slots(template, PageSide.LEFT, with_gaps)[0].rect
    right = get_page_slots(template, PageSide.RIGHT, with_gaps)[0].rect
    return (left.width + right.width) / left.height
