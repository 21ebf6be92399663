"""
Module: stylization.client

Purpose:
    Seam to an external image-stylization service. The transport lives
    behind the Stylizer interface; this module prepares the request
    image, decodes the response with the decode retry policy, records
    token usage and turns every failure into a "keep the unstylized
    bitmap" outcome.

Key Classes:
    - Stylizer: Interface for a stylization provider
    - StylizerResponse: Raw provider reply
    - StylizationOutcome: Updated photo, or the unchanged one plus an error
    - SceneOutcome: Generated scene photo, or an error
    - StylizationError: Provider failure

Key Functions:
    - apply_stylization(): Run one photo through a provider
    - apply_scene(): New scene photo from reference photos
    - build_expansion_canvas(): Photo on a white canvas for expansion mode

Dependencies:
    - PIL: Request/response bitmaps
    - builder.images: Crop rendering, decode retry
    - stylization.presets, stylization.pricing

Used By:
    - Host applications (editor back ends, batch scripts)
"""

from __future__ import annotations

import io
import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

from PIL import Image

from photobook_toolkit.builder.images import (
    ImageDecodeError,
    ImageNotFoundError,
    compute_crop_area,
    decode_with_retry,
    render_crop,
    to_rgb,
)
from photobook_toolkit.core.models import AiUsage, Photo
from photobook_toolkit.core.utils import encode_data_uri, read_image_source

from .presets import DEFAULT_PRESET_ID, build_instructions, build_scene_instructions
from .pricing import DEFAULT_MODEL_ID, ModelPricing, calculate_token_cost

logger = logging.getLogger(__name__)

REQUEST_JPEG_QUALITY = 95


class StylizationError(Exception):
    """The provider failed or returned no image."""
    pass


@dataclass(frozen=True)
class StylizerResponse:
    """
    Attributes:
        image_bytes: Encoded stylized image
        prompt_tokens: Input tokens billed
        output_tokens: Output tokens billed
    """

    image_bytes: bytes
    prompt_tokens: int = 0
    output_tokens: int = 0


class Stylizer(ABC):
    """
    Interface for a stylization provider.

    Implementations make one remote call per invocation and never retry;
    failures are raised as StylizationError. Scene generation is optional.
    """

    @abstractmethod
    def stylize(self, image_bytes: bytes, instructions: str, model_id: str) -> StylizerResponse:
        """
        Stylize one image.

        Args:
            image_bytes: JPEG request image
            instructions: Full instruction text
            model_id: Provider model id

        Raises:
            StylizationError: If the call fails or yields no image
        """
        pass

    def generate_scene(
        self, reference_images: Sequence[bytes], instructions: str, model_id: str
    ) -> StylizerResponse:
        """
        Generate a new image from several reference images.

        Raises:
            StylizationError: If the call fails or yields no image
            NotImplementedError: If the provider has no scene generation
        """
        raise NotImplementedError(f"{self.__class__.__name__} does not support scene generation")


@dataclass(frozen=True)
class StylizationOutcome:
    """
    Result of apply_stylization().

    On failure ``photo`` is the input photo with its in-progress flag
    cleared and ``error`` explains why the unstylized bitmap is kept.
    """

    photo: Photo
    error: Optional[str] = None

    @property
    def stylized(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SceneOutcome:
    """Result of apply_scene(): the generated photo, or None plus an error."""

    photo: Optional[Photo]
    error: Optional[str] = None

    @property
    def generated(self) -> bool:
        return self.error is None


def build_expansion_canvas(
    image: Image.Image,
    aspect: float,
    zoom: float,
    center: Tuple[float, float] = (0.5, 0.5),
) -> Image.Image:
    """
    Place a photo on a white canvas of the target aspect.

    The canvas is what the expansion-mode crop frames: at zoom ``z < 1``
    the photo covers ``z`` of the canvas along its limiting side and the
    rest is white for the provider to paint into.

    Example:
        >>> build_expansion_canvas(Image.new("RGB", (400, 400)), 1.0, 0.5).size
        (800, 800)
    """
    crop = compute_crop_area(image.size, aspect, zoom=zoom, center=center)
    out_size = (max(1, round(crop.width)), max(1, round(crop.height)))
    return render_crop(to_rgb(image), crop, out_size)


def _encode_request(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    to_rgb(image).save(buf, format="JPEG", quality=REQUEST_JPEG_QUALITY)
    return buf.getvalue()


def apply_stylization(
    photo: Photo,
    stylizer: Stylizer,
    *,
    preset_id: Optional[str] = None,
    model_id: str = DEFAULT_MODEL_ID,
    aspect: Optional[float] = None,
    extra_instructions: Optional[str] = None,
    pricing: Optional[ModelPricing] = None,
    base_dir: Optional[Path] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> StylizationOutcome:
    """
    Run one photo through a stylization provider.

    The request image is the photo's preview; in expansion mode it is
    first placed on a white canvas of the slot ``aspect``. The provider
    is called exactly once. Its image is decoded with retry, then stored
    as the photo's new preview (PNG data URI) together with an AiUsage
    record.

    Args:
        photo: Photo to stylize
        stylizer: Provider
        preset_id: Style preset (default comic-book)
        model_id: Provider model id
        aspect: Slot aspect; required for expansion mode
        extra_instructions: Free-form edit request appended to the prompt
        pricing: Explicit prices (e.g. from PricingCache)
        base_dir: Directory for relative preview paths
        sleep: Sleep function for decode retries

    Returns:
        StylizationOutcome; never raises for provider or decode failures
    """
    preset_id = preset_id or DEFAULT_PRESET_ID
    expansion = photo.is_expansion and aspect is not None

    try:
        source = decode_with_retry(
            lambda: read_image_source(photo.preview, base_dir),
            sleep=sleep,
            label=f"preview of {photo.id}",
        )
    except (ImageDecodeError, ImageNotFoundError) as e:
        return _failed(photo, f"Cannot read preview: {e}")

    request_image = (
        build_expansion_canvas(source, aspect, photo.zoom) if expansion else source
    )
    instructions = build_instructions(
        preset_id, expansion=expansion, extra=extra_instructions
    )

    logger.info(
        f"Stylizing photo {photo.id} with {model_id}"
        f"{' (expansion)' if expansion else ''}"
    )
    try:
        response = stylizer.stylize(_encode_request(request_image), instructions, model_id)
    except Exception as e:
        return _failed(photo, f"Stylization failed: {_describe(e)}")

    try:
        usage, preview = _store_response(
            response, photo.id, model_id, preset_id, pricing, sleep
        )
    except ImageDecodeError as e:
        return _failed(photo, f"Stylized image unreadable: {e}")

    stylized = replace(photo, preview=preview, ai_usage=usage, is_stylizing=False)
    return StylizationOutcome(photo=stylized)


def apply_scene(
    references: Sequence[Photo],
    stylizer: Stylizer,
    scene_description: str,
    *,
    photo_id: Optional[str] = None,
    preset_id: Optional[str] = None,
    model_id: str = DEFAULT_MODEL_ID,
    pricing: Optional[ModelPricing] = None,
    base_dir: Optional[Path] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SceneOutcome:
    """
    Generate a new stylized scene around the people in reference photos.

    Every reference preview is sent, in order, with one instruction text.
    The provider is called once. The result becomes a new photo whose
    preview is the generated PNG; it has no original, so it prints from
    the preview.

    Args:
        references: 1 to MAX_SCENE_REFERENCES photos showing the people
        stylizer: Provider; must implement generate_scene()
        scene_description: Where to place the people
        photo_id: Id for the new photo (random when omitted)
        preset_id: Style preset (default comic-book)
        model_id: Provider model id
        pricing: Explicit prices (e.g. from PricingCache)
        base_dir: Directory for relative preview paths
        sleep: Sleep function for decode retries

    Returns:
        SceneOutcome with the new photo, or an error

    Raises:
        ValueError: Blank description or wrong number of references
    """
    preset_id = preset_id or DEFAULT_PRESET_ID
    instructions = build_scene_instructions(
        scene_description, preset_id, reference_count=len(references)
    )

    requests = []
    for reference in references:
        try:
            source = decode_with_retry(
                lambda: read_image_source(reference.preview, base_dir),
                sleep=sleep,
                label=f"preview of {reference.id}",
            )
        except (ImageDecodeError, ImageNotFoundError) as e:
            return _scene_failed(f"Cannot read reference {reference.id}: {e}")
        requests.append(_encode_request(source))

    logger.info(f"Generating scene from {len(requests)} reference photos with {model_id}")
    try:
        response = stylizer.generate_scene(requests, instructions, model_id)
    except Exception as e:
        return _scene_failed(f"Scene generation failed: {_describe(e)}")

    new_id = photo_id or f"scene-{uuid.uuid4().hex[:12]}"
    try:
        usage, preview = _store_response(response, new_id, model_id, preset_id, pricing, sleep)
    except ImageDecodeError as e:
        return _scene_failed(f"Generated scene unreadable: {e}")

    return SceneOutcome(photo=Photo(id=new_id, preview=preview, ai_usage=usage))


def _store_response(
    response: StylizerResponse,
    photo_id: str,
    model_id: str,
    preset_id: str,
    pricing: Optional[ModelPricing],
    sleep: Callable[[float], None],
) -> Tuple[AiUsage, str]:
    """
    Decode a provider image and price the call.

    Returns:
        (usage record, PNG data URI)

    Raises:
        ImageDecodeError: If the returned bytes never decode
    """
    result = decode_with_retry(
        lambda: response.image_bytes,
        sleep=sleep,
        label=f"stylized {photo_id}",
    )

    buf = io.BytesIO()
    to_rgb(result).save(buf, format="PNG")

    cost = calculate_token_cost(
        response.prompt_tokens, response.output_tokens, model_id, pricing=pricing
    )
    usage = AiUsage(
        model_id=model_id,
        preset_id=preset_id,
        prompt_tokens=response.prompt_tokens,
        output_tokens=response.output_tokens,
        cost=cost.total_cost,
    )
    logger.info(
        f"Stylized photo {photo_id}: {response.prompt_tokens}+{response.output_tokens} "
        f"tokens, ${cost.total_cost:.4f}"
    )
    return usage, encode_data_uri(buf.getvalue(), "image/png")


def _describe(error: Exception) -> str:
    if isinstance(error, StylizationError):
        return str(error)
    return f"{type(error).__name__}: {error}"


def _failed(photo: Photo, message: str) -> StylizationOutcome:
    logger.warning(f"Photo {photo.id}: {message}; keeping unstylized bitmap")
    return StylizationOutcome(photo=replace(photo, is_stylizing=False), error=message)


def _scene_failed(message: str) -> SceneOutcome:
    logger.warning(message)
    return SceneOutcome(photo=None, error=message)
