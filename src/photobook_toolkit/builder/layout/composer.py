"""
Module: builder.layout.composer

Purpose:
    Compose an album into page plans: absolute millimetre placements of
    print-resolution bitmaps, one plan per PDF page.

    Image work (decode, crop, resample) for every slot of every page is
    submitted to a thread pool up front and collected in submission
    order, so pages come out in album order however the workers finish.
    A failure in one slot or spread is reported as a warning and never
    aborts the album.

Key Functions:
    - compose_album(): Cover + one page per spread
    - compose_cover(): Cover page plan
    - compose_bubbles(): Bubble rasters for a spread

Dependencies:
    - concurrent.futures: Worker pool
    - builder.templates: Slot geometry
    - builder.images: Bitmap resolution, panorama split
    - builder.bubbles: Bubble rasters
    - builder.output.caption: Caption strips

Used By:
    - builder.controller: Pipeline orchestration
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from PIL import Image

from photobook_toolkit.builder.bubbles import bubble_outline, render_bubble
from photobook_toolkit.builder.images import (
    ImageDecodeError,
    ImageNotFoundError,
    ImageProvider,
    PhotoImages,
    fit_to_slot,
    prepare_panorama,
    resolve_print_bitmap,
)
from photobook_toolkit.builder.output.caption import caption_rect, render_caption
from photobook_toolkit.builder.templates import find_template, get_page_slots
from photobook_toolkit.core.models import (
    Album,
    Cover,
    MmRect,
    PageSide,
    Photo,
    PhotoSlot,
    Spread,
    SpreadTemplate,
    mm_to_px,
)

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

logger = logging.getLogger(__name__)


@dataclass
class SlotRender:
    """Output of one worker task."""

    photos: List[PhotoPlacement] = field(default_factory=list)
    captions: List[CaptionPlacement] = field(default_factory=list)
    bubbles: List[BubblePlacement] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class _PendingPage:
    kind: PageKind
    width_mm: float
    height_mm: float
    spread_id: Optional[str] = None
    title: Optional[TitlePlacement] = None
    tasks: List[Tuple[str, Future]] = field(default_factory=list)


def _side_offset(side: PageSide, config: LayoutConfig) -> float:
    return 0.0 if side is PageSide.LEFT else config.page_size_mm


def _is_printable(photo: Optional[Photo]) -> bool:
    return photo is not None and photo.visible and photo.has_image


# ─────────────────────────────────────────────────────────────────────────────
# Worker tasks
# ─────────────────────────────────────────────────────────────────────────────

def _place_bitmap(
    bitmap: Image.Image,
    photo: Photo,
    slot_id: str,
    slot_rect: MmRect,
    border_mm: float,
    config: LayoutConfig,
    result: SlotRender,
    *,
    with_caption: bool = True,
) -> None:
    """Fit a bitmap into its slot and add the photo and caption placements."""
    fit = fit_to_slot(bitmap.size, slot_rect, config.aspect_tolerance)
    if fit.warning:
        result.warnings.append(f"Photo {photo.id} in slot {slot_id}: {fit.warning}")

    target = fit.placement.pixel_size(config.dpi)
    if bitmap.size != target:
        bitmap = bitmap.resize(target, Image.Resampling.LANCZOS)

    result.photos.append(PhotoPlacement(
        slot_id=slot_id,
        photo_id=photo.id,
        image=bitmap,
        rect=fit.placement,
        slot_rect=slot_rect,
        border_mm=border_mm,
    ))

    if with_caption and photo.caption:
        rect = caption_rect(slot_rect, config.caption_height_mm, config.caption_inset_mm)
        result.captions.append(CaptionPlacement(
            photo_id=photo.id,
            text=photo.caption,
            image=render_caption(photo.caption, rect, config.dpi),
            rect=rect,
        ))


def render_slot(
    photo: Photo,
    slot: PhotoSlot,
    slot_rect: MmRect,
    config: LayoutConfig,
    provider: ImageProvider,
) -> SlotRender:
    """
    Produce the placements for one photo in one slot.

    Args:
        photo: Photo to print
        slot: Effective template slot
        slot_rect: Absolute slot rectangle on the sheet
        config: Layout configuration
        provider: Image decoder

    Raises:
        ImageDecodeError, ImageNotFoundError: If the photo can't be read
    """
    result = SlotRender()
    if photo.is_stylizing:
        logger.info(f"Photo {photo.id} is still being stylized; printing current bitmap")

    bitmap = resolve_print_bitmap(
        PhotoImages(photo, provider),
        slot.real_aspect,
        slot_rect.pixel_size(config.dpi),
    )
    border = 0.0 if slot.is_full_page else config.border_width_mm
    _place_bitmap(bitmap, photo, slot.id, slot_rect, border, config, result)
    return result


def render_panorama(
    photo: Photo,
    slots: Tuple[PhotoSlot, PhotoSlot],
    rects: Tuple[MmRect, MmRect],
    config: LayoutConfig,
    provider: ImageProvider,
) -> SlotRender:
    """
    Produce the two half placements of a panoramic photo.

    The caption (if any) goes on the left half.

    Raises:
        ImageDecodeError, ImageNotFoundError: If the photo can't be read
    """
    result = SlotRender()
    left_rect, right_rect = rects
    ratio = (left_rect.width + right_rect.width) / left_rect.height
    halves = prepare_panorama(PhotoImages(photo, provider), ratio, config.panorama_min_half_px)

    for index, (half, slot, rect) in enumerate(zip(halves, slots, rects)):
        border = 0.0 if slot.is_full_page else config.border_width_mm
        _place_bitmap(half, photo, slot.id, rect, border, config, result, with_caption=index == 0)
    return result


def compose_bubbles(spread: Spread, config: LayoutConfig) -> SlotRender:
    """
    Rasterize every bubble of a spread.

    Bubble sizes are editor pixels relative to an editor spread of
    ``editor_reference_width_px``; the anchor is the raster's centre.
    """
    result = SlotRender()
    for bubble in spread.bubbles:
        mm_per_unit = config.bubble_mm_per_px * bubble.scale
        canvas_w, canvas_h = bubble_outline(bubble).canvas_size
        width_mm, height_mm = canvas_w * mm_per_unit, canvas_h * mm_per_unit
        cx, cy = bubble.anchor.to_mm(config.spread_width_mm, config.page_size_mm)

        image = render_bubble(bubble, mm_to_px(mm_per_unit, config.dpi))
        result.bubbles.append(BubblePlacement(
            bubble_id=bubble.id,
            image=image,
            rect=MmRect(cx - width_mm / 2, cy - height_mm / 2, width_mm, height_mm),
        ))
    return result


def render_cover_image(photo: Photo, rect: MmRect, slot_id: str, config: LayoutConfig, provider: ImageProvider) -> SlotRender:
    """Cover image filling the cover panel."""
    result = SlotRender()
    bitmap = resolve_print_bitmap(PhotoImages(photo, provider), rect.aspect, rect.pixel_size(config.dpi))
    _place_bitmap(bitmap, photo, slot_id, rect, 0.0, config, result)
    return result


# ─────────────────────────────────────────────────────────────────────────────
# Page planning
# ─────────────────────────────────────────────────────────────────────────────

def compose_cover(
    cover: Cover,
    config: LayoutConfig,
    submit: Callable[..., Future],
    provider: ImageProvider,
) -> _PendingPage:
    """Queue the cover page: back on the left, front on the right, title centred."""
    page = _PendingPage(
        kind=PageKind.COVER,
        width_mm=config.cover_width_mm,
        height_mm=config.cover_height_mm,
    )
    for slot_id, photo, rect in (
        ("back", cover.back, config.back_cover_rect),
        ("front", cover.front, config.front_cover_rect),
    ):
        if _is_printable(photo):
            page.tasks.append((
                f"cover {slot_id}",
                submit(render_cover_image, photo, rect, slot_id, config, provider),
            ))
    if cover.title:
        page.title = TitlePlacement(
            text=cover.title,
            x=config.cover_width_mm / 2,
            y=config.cover_height_mm / 2,
            font_size_pt=config.title_font_size_pt,
        )
    return page


def compose_spread(
    spread: Spread,
    template: SpreadTemplate,
    with_gaps: bool,
    config: LayoutConfig,
    submit: Callable[..., Future],
    provider: ImageProvider,
) -> _PendingPage:
    """Queue the image work for one spread sheet."""
    page = _PendingPage(
        kind=PageKind.SPREAD,
        width_mm=config.spread_width_mm,
        height_mm=config.page_size_mm,
        spread_id=spread.id,
    )

    left_slots = get_page_slots(template, PageSide.LEFT, with_gaps)
    right_slots = get_page_slots(template, PageSide.RIGHT, with_gaps)

    if template.panoramic:
        photo = spread.photo_at(PageSide.LEFT, 0) or spread.photo_at(PageSide.RIGHT, 0)
        if _is_printable(photo):
            rects = (
                left_slots[0].rect.to_mm(config.page_size_mm),
                right_slots[0].rect.to_mm(config.page_size_mm, config.page_size_mm),
            )
            page.tasks.append((
                f"spread {spread.id} panorama",
                submit(render_panorama, photo, (left_slots[0], right_slots[0]), rects, config, provider),
            ))

    for side, slots in ((PageSide.LEFT, left_slots), (PageSide.RIGHT, right_slots)):
        for index, slot in enumerate(slots):
            if template.panoramic and index == 0:
                continue
            photo = spread.photo_at(side, index)
            if not _is_printable(photo):
                continue
            rect = slot.rect.to_mm(config.page_size_mm, _side_offset(side, config))
            page.tasks.append((
                f"spread {spread.id} slot {slot.id}",
                submit(render_slot, photo, slot, rect, config, provider),
            ))

    if spread.bubbles:
        page.tasks.append((
            f"spread {spread.id} bubbles",
            submit(compose_bubbles, spread, config),
        ))
    return page


def _collect(pending: _PendingPage, index: int, warnings: List[str]) -> PagePlan:
    """Wait for a page's tasks in submission order and build its plan."""
    photos: List[PhotoPlacement] = []
    captions: List[CaptionPlacement] = []
    bubbles: List[BubblePlacement] = []

    for label, future in pending.tasks:
        try:
            render = future.result()
        except (ImageDecodeError, ImageNotFoundError) as e:
            message = f"Skipped {label}: {e}"
            logger.warning(message)
            warnings.append(message)
            continue
        except Exception as e:
            message = f"Skipped {label}: unexpected {type(e).__name__}: {e}"
            logger.warning(message, exc_info=True)
            warnings.append(message)
            continue
        photos.extend(render.photos)
        captions.extend(render.captions)
        bubbles.extend(render.bubbles)
        warnings.extend(render.warnings)

    return PagePlan(
        index=index,
        kind=pending.kind,
        width_mm=pending.width_mm,
        height_mm=pending.height_mm,
        photos=tuple(photos),
        captions=tuple(captions),
        bubbles=tuple(bubbles),
        title=pending.title,
        spread_id=pending.spread_id,
    )


def compose_album(
    album: Album,
    config: LayoutConfig,
    provider: ImageProvider,
) -> LayoutResult:
    """
    Compose every page of an album.

    The cover page comes first when the cover has a front or back image,
    then one landscape sheet per spread. Spreads with an unknown
    template are skipped with a warning.

    Args:
        album: Album snapshot
        config: Layout configuration
        provider: Image decoder shared by all workers

    Returns:
        LayoutResult with pages in album order

    Example:
        >>> with SnapshotImageProvider() as provider:
        ...     layout = compose_album(album, LayoutConfig(), provider)
        >>> layout.page_count
        3
    """
    warnings: List[str] = []
    skipped: List[str] = []
    pending: List[_PendingPage] = []

    logger.info(f"Composing album {album.id!r}: {len(album.spreads)} spreads")

    with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
        if album.cover.has_images:
            pending.append(compose_cover(album.cover, config, pool.submit, provider))
        elif album.cover.title:
            logger.debug("Cover has a title but no images; cover page omitted")

        for spread in album.spreads:
            template = find_template(spread.template_id)
            if template is None:
                message = f"Skipped spread {spread.id}: unknown template {spread.template_id!r}"
                logger.warning(message)
                warnings.append(message)
                skipped.append(spread.id)
                continue
            pending.append(
                compose_spread(spread, template, album.with_gaps, config, pool.submit, provider)
            )

        pages = tuple(_collect(p, i, warnings) for i, p in enumerate(pending))

    logger.info(f"Composed {len(pages)} pages with {len(warnings)} warnings")
    return LayoutResult(pages=pages, warnings=warnings, skipped_spreads=skipped)
