"""
Images Module

Crop normalization, two-resolution bitmap handling and panorama splitting.

Key Functions:
    - normalize_crop(): Exact aspect ratio for any crop
    - resolve_print_bitmap(): Bitmap a slot is printed from
    - split_panorama(): Midline split for panoramic spreads
"""

from .cropper import (
    SlotFit,
    center_crop_to_ratio,
    compute_crop_area,
    fit_to_slot,
    normalize_crop,
    render_crop,
    to_rgb,
)
from .provider import (
    ImageDecodeError,
    ImageNotFoundError,
    ImageProvider,
    PhotoImages,
    SnapshotImageProvider,
    decode_with_retry,
    make_preview,
    resolve_print_bitmap,
)
from .panorama import prepare_panorama, split_panorama

__all__ = [
    "SlotFit",
    "center_crop_to_ratio",
    "compute_crop_area",
    "fit_to_slot",
    "normalize_crop",
    "render_crop",
    "to_rgb",
    "ImageDecodeError",
    "ImageNotFoundError",
    "ImageProvider",
    "PhotoImages",
    "SnapshotImageProvider",
    "decode_with_retry",
    "make_preview",
    "resolve_print_bitmap",
    "prepare_panorama",
    "split_panorama",
]
