"""
Module: builder.images.panorama

Purpose:
    Split one image across the two pages of a panoramic spread.

    The source is cropped once at its native resolution, then split at
    the exact pixel midline so the last column of the left half and the
    first column of the right half are neighbours in the source. Each
    half is then upscaled (never downscaled) so it prints sharply.

Key Functions:
    - split_panorama(): Midline split + upscale
    - prepare_panorama(): Crop rule + split for a photo

Dependencies:
    - PIL: Cropping and resampling

Used By:
    - builder.layout.composer: Panoramic spreads
"""

from __future__ import annotations

import logging
from typing import Tuple

from PIL import Image

from .cropper import center_crop_to_ratio, normalize_crop, render_crop, to_rgb
from .provider import PhotoImages

logger = logging.getLogger(__name__)

PANORAMA_RATIO = 2.0
DEFAULT_MIN_HALF_PX = 2000


def split_panorama(
    image: Image.Image,
    min_half_px: int = DEFAULT_MIN_HALF_PX,
) -> Tuple[Image.Image, Image.Image]:
    """
    Split an image into left and right halves at the exact midline.

    An odd width loses its last column so the halves are equal. Each half
    is upscaled with LANCZOS until its short edge is at least
    ``min_half_px``.

    Args:
        image: Panorama bitmap (ideally 2:1)
        min_half_px: Minimum short edge of each half

    Returns:
        (left_half, right_half), equal sizes

    Example:
        >>> left, right = split_panorama(Image.new("RGB", (3600, 1800)))
        >>> left.size, right.size
        ((2000, 2000), (2000, 2000))
    """
    width, height = image.size
    mid = width // 2

    left = image.crop((0, 0, mid, height))
    right = image.crop((mid, 0, 2 * mid, height))

    short_edge = min(mid, height)
    if short_edge < min_half_px:
        scale = min_half_px / short_edge
        size = (max(1, round(mid * scale)), max(1, round(height * scale)))
        logger.debug(f"Upscaling panorama halves {left.size} -> {size}")
        left = left.resize(size, Image.Resampling.LANCZOS)
        right = right.resize(size, Image.Resampling.LANCZOS)

    return left, right


def prepare_panorama(
    images: PhotoImages,
    ratio: float = PANORAMA_RATIO,
    min_half_px: int = DEFAULT_MIN_HALF_PX,
) -> Tuple[Image.Image, Image.Image]:
    """
    Produce the two page halves for a panoramic photo.

    Crop rule:
        - Stylized: the stylized preview, centre-cropped to ``ratio``
        - With crop: the crop (normalized to ``ratio``) taken from the
          original, or from the preview without one, at native resolution
        - Otherwise: the best available bitmap, centre-cropped to ``ratio``

    Raises:
        ImageDecodeError, ImageNotFoundError: If the source cannot be read
    """
    photo = images.photo

    if photo.is_stylized:
        panorama = center_crop_to_ratio(to_rgb(images.preview), ratio)
    else:
        crop = images.crop_area
        source = images.original if images.has_original else images.preview
        if crop is not None:
            crop = normalize_crop(crop, ratio)
            if crop.reference_size != source.size:
                crop = crop.rescaled_to(source.size)
            native = crop.rounded()
            panorama = render_crop(source, crop, (int(native.width), int(native.height)))
        else:
            panorama = center_crop_to_ratio(to_rgb(source), ratio)

    logger.debug(f"Photo {photo.id}: panorama source {panorama.size}")
    return split_panorama(panorama, min_half_px)
