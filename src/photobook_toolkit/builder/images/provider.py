"""
Module: builder.images.provider

Purpose:
    Decoding of snapshot image sources and the two-resolution rule that
    picks the bitmap a slot is printed from.

    Every photo carries a small preview (what the editor showed) and
    optionally a full-resolution original (what gets printed). The crop
    rectangle is stored once, in the original's pixel space; the preview
    crop is always derived from it by uniform long-edge scaling.

Key Classes:
    - ImageProvider: Abstract interface for image access
    - SnapshotImageProvider: Decodes data URIs / file paths with retry
    - PhotoImages: Lazily decoded preview + original for one photo
    - ImageDecodeError, ImageNotFoundError: Per-image failures

Key Functions:
    - decode_with_retry(): Bounded exponential backoff around a decode
    - make_preview(): LANCZOS downscale to the preview long edge
    - resolve_print_bitmap(): Print-resolution bitmap for a slot

Dependencies:
    - PIL: Image decoding and resampling
    - core.utils.serialization: Image source reading

Used By:
    - builder.layout.composer: Slot rendering
    - builder.images.panorama: Panorama source
"""

from __future__ import annotations

import io
import logging
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from PIL import Image

from photobook_toolkit.core.models import CropArea, Photo
from photobook_toolkit.core.utils.serialization import read_image_source

from .cropper import (
    center_crop_to_ratio,
    compute_crop_area,
    normalize_crop,
    render_crop,
    to_rgb,
)

logger = logging.getLogger(__name__)

PREVIEW_MAX_EDGE = 800
DEFAULT_DECODE_ATTEMPTS = 5
DEFAULT_DECODE_BASE_DELAY_S = 0.05


class ImageNotFoundError(Exception):
    """Image source is empty or points at a missing file."""
    pass


class ImageDecodeError(Exception):
    """Image could not be decoded after all retry attempts."""
    pass


def decode_with_retry(
    load: Callable[[], bytes],
    *,
    attempts: int = DEFAULT_DECODE_ATTEMPTS,
    base_delay_s: float = DEFAULT_DECODE_BASE_DELAY_S,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "image",
) -> Image.Image:
    """
    Read and decode an image, retrying with exponential backoff.

    Args:
        load: Returns the encoded bytes; called once per attempt
        attempts: Total attempts before giving up
        base_delay_s: Delay after the first failure; doubles each retry
        sleep: Sleep function (injectable for tests)
        label: Name used in log messages

    Returns:
        Fully loaded PIL image

    Raises:
        ImageNotFoundError: If the source file does not exist (not retried)
        ImageDecodeError: If every attempt failed
    """
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1: {attempts}")

    last_error: Optional[Exception] = None
    for attempt in range(attempts):
        try:
            data = load()
            image = Image.open(io.BytesIO(data))
            image.load()
            return image
        except FileNotFoundError as e:
            raise ImageNotFoundError(str(e)) from e
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            last_error = e
            if attempt < attempts - 1:
                delay = base_delay_s * (2 ** attempt)
                logger.debug(
                    f"Decode of {label} failed (attempt {attempt + 1}/{attempts}): {e}; "
                    f"retrying in {delay:.2f}s"
                )
                sleep(delay)

    raise ImageDecodeError(
        f"Failed to decode {label} after {attempts} attempts: {last_error}"
    ) from last_error


def make_preview(image: Image.Image, max_edge: int = PREVIEW_MAX_EDGE) -> Image.Image:
    """
    Downscale to the preview long edge with LANCZOS. Never upscales.

    Example:
        >>> make_preview(Image.new("RGB", (4000, 3000))).size
        (800, 600)
    """
    long_edge = max(image.size)
    if long_edge <= max_edge:
        return image.copy()
    scale = max_edge / long_edge
    size = (max(1, round(image.width * scale)), max(1, round(image.height * scale)))
    return image.resize(size, Image.Resampling.LANCZOS)


class ImageProvider(ABC):
    """
    Abstract interface for turning image source strings into bitmaps.

    Implementations handle the actual storage format.
    """

    @abstractmethod
    def get_image(self, source: str) -> Image.Image:
        """
        Get the decoded bitmap for a source string.

        Raises:
            ImageNotFoundError: If the source is empty or missing
            ImageDecodeError: If decoding failed after retries
        """

    def close(self) -> None:
        """Release cached bitmaps."""

    def __enter__(self) -> "ImageProvider":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class SnapshotImageProvider(ImageProvider):
    """
    Provider for the image sources found in album snapshots.

    Decodes data URIs and file paths, retrying failed decodes, and
    caches each decoded bitmap so a photo used by several consumers is
    decoded once. Safe to call from worker threads.

    Example:
        >>> with SnapshotImageProvider(base_dir=Path("album")) as provider:
        ...     image = provider.get_image("photos/cat.jpg")
    """

    def __init__(
        self,
        base_dir: Optional[Path] = None,
        *,
        attempts: int = DEFAULT_DECODE_ATTEMPTS,
        base_delay_s: float = DEFAULT_DECODE_BASE_DELAY_S,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._base_dir = base_dir
        self._attempts = attempts
        self._base_delay_s = base_delay_s
        self._sleep = sleep
        self._cache: Dict[str, Image.Image] = {}
        self._lock = threading.Lock()

    def get_image(self, source: str) -> Image.Image:
        if not source:
            raise ImageNotFoundError("Empty image source")

        with self._lock:
            cached = self._cache.get(source)
        if cached is not None:
            return cached

        label = source[:40] + "..." if len(source) > 40 else source
        image = decode_with_retry(
            lambda: read_image_source(source, self._base_dir),
            attempts=self._attempts,
            base_delay_s=self._base_delay_s,
            sleep=self._sleep,
            label=label,
        )
        with self._lock:
            return self._cache.setdefault(source, image)

    def close(self) -> None:
        with self._lock:
            for image in self._cache.values():
                image.close()
            self._cache.clear()


class PhotoImages:
    """
    Preview and original bitmaps for one photo, decoded on demand.

    The crop area is kept once, in original coordinates. When the
    snapshot did not record the resolution it was computed against, it
    is bound to the original's decoded size (or the preview's when there
    is no original).
    """

    def __init__(self, photo: Photo, provider: ImageProvider) -> None:
        self.photo = photo
        self._provider = provider
        self._preview: Optional[Image.Image] = None
        self._original: Optional[Image.Image] = None

    @property
    def preview(self) -> Image.Image:
        if self._preview is None:
            self._preview = self._provider.get_image(self.photo.preview)
        return self._preview

    @property
    def has_original(self) -> bool:
        return bool(self.photo.original)

    @property
    def original(self) -> Optional[Image.Image]:
        if self._original is None and self.photo.original:
            self._original = self._provider.get_image(self.photo.original)
        return self._original

    @property
    def crop_area(self) -> Optional[CropArea]:
        """Crop bound to the original's resolution (or the preview's without one)."""
        crop = self.photo.crop_area
        if crop is None or crop.is_bound:
            return crop
        reference = self.original if self.has_original else self.preview
        return crop.bound_to(reference.size)

    def preview_crop(self) -> Optional[CropArea]:
        """Crop re-expressed in preview pixel space."""
        crop = self.crop_area
        if crop is None:
            return None
        return crop.rescaled_to(self.preview.size)


def resolve_print_bitmap(
    images: PhotoImages,
    target_ratio: float,
    out_size: Tuple[int, int],
) -> Image.Image:
    """
    Produce the bitmap a slot is printed from.

    Rules, first match wins:
        1. Stylized photo: the stylized preview, centre-cropped to the
           slot ratio (the provider may have returned any ratio)
        2. Original and crop: the original, cropped with the crop
           normalized to the slot ratio
        3. Crop but no original: the preview, cropped with the crop
           rescaled to preview space
        4. Otherwise: the original (or the preview without one),
           centre-cropped at zoom 1 to the slot ratio

    Args:
        images: Decoded bitmaps for the photo
        target_ratio: Real aspect ratio of the slot
        out_size: Print pixel size of the slot

    Returns:
        RGB bitmap of exactly out_size
    """
    photo = images.photo

    if photo.is_stylized:
        cropped = center_crop_to_ratio(to_rgb(images.preview), target_ratio)
        return cropped.resize(out_size, Image.Resampling.LANCZOS)

    crop = images.crop_area
    if crop is not None:
        crop = normalize_crop(crop, target_ratio)
        source = images.original if images.has_original else images.preview
        logger.debug(
            f"Photo {photo.id}: cropping {'original' if images.has_original else 'preview'} "
            f"{source.size} with {crop.rounded().box}"
        )
        return render_crop(source, crop, out_size)

    source = images.original if images.has_original else images.preview
    crop = compute_crop_area(source.size, target_ratio)
    logger.debug(f"Photo {photo.id}: centre crop {crop.rounded().box} of {source.size}")
    return render_crop(source, crop, out_size)
