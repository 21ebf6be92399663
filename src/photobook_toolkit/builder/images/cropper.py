"""
Module: builder.images.cropper

Purpose:
    Aspect normalization and crop rasterization. Forces arbitrary user
    crops onto exact slot ratios without distortion, and turns a crop
    into a bitmap of a given size at whatever resolution the source has.

Key Functions:
    - compute_crop_area(): Interactive crop model (zoom / centre)
    - normalize_crop(): Shrink the longer side to hit a ratio exactly
    - center_crop_to_ratio(): Centre crop a bitmap to a ratio
    - render_crop(): Rasterize a crop to an output size
    - fit_to_slot(): Fill-or-contain placement for a bitmap in a slot
    - to_rgb(): Flatten transparency onto white

Key Classes:
    - SlotFit: Placement result of fit_to_slot()

Dependencies:
    - PIL: Image manipulation
    - core.models: CropArea, MmRect

Used By:
    - builder.images.provider: Print bitmap resolution
    - builder.images.panorama: Panorama crop
    - builder.layout.composer: Slot placement
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from PIL import Image

from photobook_toolkit.core.models import CropArea, MmRect

logger = logging.getLogger(__name__)

# Maximum |image ratio - slot ratio| that is filled by stretching
DEFAULT_ASPECT_TOLERANCE = 0.02

# Canvas colour around the photo in expansion mode
EXPANSION_FILL = (255, 255, 255)


@dataclass(frozen=True)
class SlotFit:
    """
    Where a bitmap goes inside a slot.

    Attributes:
        placement: Rectangle the bitmap is drawn into
        filled: True if placement is the whole slot
        warning: Set when the ratio mismatch forced a contain fallback
    """

    placement: MmRect
    filled: bool
    warning: Optional[str] = None


def compute_crop_area(
    image_size: Tuple[int, int],
    aspect: float,
    zoom: float = 1.0,
    center: Tuple[float, float] = (0.5, 0.5),
) -> CropArea:
    """
    Crop rectangle an interactive cropper would commit.

    At zoom 1 this is the largest ``aspect`` rectangle that fits the
    image. Higher zoom shrinks it around ``center`` (fractions of the
    image) and keeps it inside the image. Zoom below 1 is expansion mode:
    the rectangle is larger than the image, centred on it, and the excess
    is blank canvas.

    Args:
        image_size: (width, height) of the bitmap being cropped
        aspect: Target width / height
        zoom: Crop zoom, must be positive
        center: Requested crop centre as fractions of the image

    Returns:
        CropArea bound to image_size

    Example:
        >>> compute_crop_area((4000, 3000), 1.0)
        CropArea(x=500.0, y=0.0, width=3000.0, height=3000.0, reference_size=(4000, 3000))
    """
    if zoom <= 0:
        raise ValueError(f"zoom must be positive: {zoom}")
    if aspect <= 0:
        raise ValueError(f"aspect must be positive: {aspect}")

    img_w, img_h = image_size
    if img_w / img_h >= aspect:
        base_w, base_h = img_h * aspect, float(img_h)
    else:
        base_w, base_h = float(img_w), img_w / aspect

    width = base_w / zoom
    height = base_h / zoom

    if zoom < 1:
        x = (img_w - width) / 2
        y = (img_h - height) / 2
    else:
        x = center[0] * img_w - width / 2
        y = center[1] * img_h - height / 2
        x = min(max(x, 0.0), img_w - width)
        y = min(max(y, 0.0), img_h - height)

    return CropArea(x=x, y=y, width=width, height=height, reference_size=(img_w, img_h))


def normalize_crop(crop: CropArea, target_ratio: float) -> CropArea:
    """
    Force a crop onto an exact aspect ratio.

    The longer side (relative to the target) shrinks around the crop's
    centre; the other side is kept. The result therefore never grows and
    stays inside whatever the input stayed inside.

    Args:
        crop: Crop in any pixel space
        target_ratio: Required width / height

    Returns:
        CropArea with width / height == target_ratio, same reference size
    """
    if target_ratio <= 0:
        raise ValueError(f"target_ratio must be positive: {target_ratio}")

    cx, cy = crop.center
    if crop.aspect > target_ratio:
        width, height = crop.height * target_ratio, crop.height
    else:
        width, height = crop.width, crop.width / target_ratio

    return replace(crop, x=cx - width / 2, y=cy - height / 2, width=width, height=height)


def center_crop_to_ratio(image: Image.Image, ratio: float) -> Image.Image:
    """
    Centre crop a bitmap to an aspect ratio.

    Example:
        >>> center_crop_to_ratio(Image.new("RGB", (300, 100)), 1.0).size
        (100, 100)
    """
    full = CropArea(0, 0, image.width, image.height, reference_size=image.size)
    box = normalize_crop(full, ratio).rounded().box
    return image.crop(tuple(int(v) for v in box))


def to_rgb(image: Image.Image) -> Image.Image:
    """Convert to RGB, compositing any transparency onto white."""
    if image.mode == "RGB":
        return image
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, EXPANSION_FILL)
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return image.convert("RGB")


def render_crop(
    image: Image.Image,
    crop: CropArea,
    out_size: Tuple[int, int],
) -> Image.Image:
    """
    Rasterize a crop of ``image`` to exactly ``out_size``.

    A bound crop whose reference differs from the image's size is first
    rescaled by uniform long-edge scaling. An unbound crop is taken to be
    in the image's own pixel space. Parts of the crop outside the image
    (expansion mode) render as white canvas.

    Args:
        image: Source bitmap
        crop: Crop rectangle
        out_size: (width, height) of the result

    Returns:
        RGB image of out_size
    """
    if crop.is_bound and crop.reference_size != image.size:
        crop = crop.rescaled_to(image.size)
    elif not crop.is_bound:
        crop = crop.bound_to(image.size)

    source = to_rgb(image)
    out_w, out_h = out_size

    if crop.is_within_reference():
        left, top, right, bottom = crop.box
        box = (
            max(0.0, left),
            max(0.0, top),
            min(float(image.width), right),
            min(float(image.height), bottom),
        )
        return source.resize((out_w, out_h), Image.Resampling.LANCZOS, box=box)

    logger.debug(f"Rendering expansion crop {crop.box} from {image.size} bitmap")
    canvas = Image.new("RGB", (out_w, out_h), EXPANSION_FILL)

    left, top, right, bottom = crop.box
    ix0, iy0 = max(0.0, left), max(0.0, top)
    ix1, iy1 = min(float(image.width), right), min(float(image.height), bottom)
    if ix1 <= ix0 or iy1 <= iy0:
        return canvas

    scale_x = out_w / crop.width
    scale_y = out_h / crop.height
    dest_w = max(1, round((ix1 - ix0) * scale_x))
    dest_h = max(1, round((iy1 - iy0) * scale_y))
    region = source.resize((dest_w, dest_h), Image.Resampling.LANCZOS, box=(ix0, iy0, ix1, iy1))
    canvas.paste(region, (round((ix0 - left) * scale_x), round((iy0 - top) * scale_y)))
    return canvas


def fit_to_slot(
    image_size: Tuple[int, int],
    slot_rect: MmRect,
    tolerance: float = DEFAULT_ASPECT_TOLERANCE,
) -> SlotFit:
    """
    Decide how a bitmap is placed in a slot.

    Within ``tolerance`` the bitmap fills the slot exactly (a stretch of
    at most a couple of percent). Otherwise it is letterboxed ("contain")
    and a warning is returned; normalization upstream should make this
    path rare.

    Args:
        image_size: (width, height) of the bitmap
        slot_rect: Slot rectangle on the page
        tolerance: Maximum ratio difference filled by stretching
    """
    image_aspect = image_size[0] / image_size[1]
    if abs(image_aspect - slot_rect.aspect) < tolerance:
        return SlotFit(placement=slot_rect, filled=True)

    message = (
        f"Image ratio {image_aspect:.3f} does not match slot ratio "
        f"{slot_rect.aspect:.3f}; letterboxing"
    )
    logger.warning(message)
    return SlotFit(placement=slot_rect.contain(image_aspect), filled=False, warning=message)
