"""
Tests for stylization.client

Test Coverage:
- apply_stylization(): success stores preview + usage, single provider call
- Failures keep the unstylized bitmap and clear the in-progress flag
- Expansion mode request canvas
- apply_scene(): all references sent once, new photo with usage, failures
"""
import io

import pytest
from PIL import Image

from photobook_toolkit.core.models import Photo
from photobook_toolkit.core.utils import decode_data_uri
from photobook_toolkit.stylization import (
    EXPANSION_INSTRUCTIONS,
    SceneOutcome,
    StylizationError,
    Stylizer,
    StylizerResponse,
    apply_scene,
    apply_stylization,
    build_expansion_canvas,
)


def _png(size, color="purple"):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


class FakeStylizer(Stylizer):
    """Records requests; returns a fixed image or raises."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.requests = []

    def stylize(self, image_bytes, instructions, model_id):
        self.requests.append((Image.open(io.BytesIO(image_bytes)), instructions, model_id))
        if self.error:
            raise self.error
        return StylizerResponse(self.result, prompt_tokens=1000, output_tokens=1290)

    def generate_scene(self, reference_images, instructions, model_id):
        self.requests.append(
            ([Image.open(io.BytesIO(b)) for b in reference_images], instructions, model_id)
        )
        if self.error:
            raise self.error
        return StylizerResponse(self.result, prompt_tokens=2000, output_tokens=1120)


class StyleOnlyStylizer(Stylizer):
    def stylize(self, image_bytes, instructions, model_id):
        return StylizerResponse(_png((8, 8)))


@pytest.fixture
def photo(data_uri):
    return Photo(id="p1", preview=data_uri((400, 400)), is_stylizing=True)


def no_sleep(seconds):
    pass


class TestApplyStylization:
    def test_success_replaces_preview(self, photo):
        # Arrange
        stylizer = FakeStylizer(result=_png((512, 512)))

        # Act
        outcome = apply_stylization(
            photo, stylizer, preset_id="manga", model_id="gemini-2.5-flash-image", sleep=no_sleep,
        )

        # Assert
        assert outcome.stylized
        styled = outcome.photo
        assert styled.preview.startswith("data:image/png;base64,")
        assert Image.open(io.BytesIO(decode_data_uri(styled.preview))).size == (512, 512)
        assert not styled.is_stylizing
        assert styled.ai_usage.model_id == "gemini-2.5-flash-image"
        assert styled.ai_usage.preset_id == "manga"
        assert styled.ai_usage.cost == pytest.approx(0.03885)
        assert len(stylizer.requests) == 1

    def test_default_preset_recorded(self, photo):
        outcome = apply_stylization(photo, FakeStylizer(result=_png((64, 64))), sleep=no_sleep)
        assert outcome.photo.ai_usage.preset_id == "comic-book"

    def test_provider_failure_keeps_original(self, photo):
        # Arrange
        stylizer = FakeStylizer(error=StylizationError("quota exceeded"))

        # Act
        outcome = apply_stylization(photo, stylizer, sleep=no_sleep)

        # Assert
        assert not outcome.stylized
        assert "quota exceeded" in outcome.error
        assert outcome.photo.preview == photo.preview
        assert outcome.photo.ai_usage is None
        assert not outcome.photo.is_stylizing
        assert len(stylizer.requests) == 1

    def test_unexpected_provider_error_keeps_original(self, photo):
        outcome = apply_stylization(photo, FakeStylizer(error=TimeoutError("read timed out")), sleep=no_sleep)
        assert not outcome.stylized
        assert "TimeoutError" in outcome.error
        assert outcome.photo.preview == photo.preview
        assert not outcome.photo.is_stylizing

    def test_unreadable_result_keeps_original(self, photo):
        delays = []
        outcome = apply_stylization(photo, FakeStylizer(result=b"not an image"), sleep=delays.append)
        assert not outcome.stylized
        assert outcome.photo.preview == photo.preview
        assert len(delays) == 4

    def test_missing_preview(self, tmp_path):
        photo = Photo(id="gone", preview="gone.jpg", is_stylizing=True)
        stylizer = FakeStylizer(result=_png((8, 8)))

        outcome = apply_stylization(photo, stylizer, base_dir=tmp_path, sleep=no_sleep)

        assert not outcome.stylized
        assert stylizer.requests == []


class TestExpansionMode:
    def test_request_is_white_canvas_of_slot_aspect(self, data_uri):
        # Arrange - zoom 0.5 on a square slot doubles the canvas
        photo = Photo(id="p", preview=data_uri((400, 400), (0, 0, 0)), zoom=0.5)
        stylizer = FakeStylizer(result=_png((800, 800)))

        # Act
        apply_stylization(photo, stylizer, aspect=1.0, sleep=no_sleep)

        # Assert
        request, instructions, _ = stylizer.requests[0]
        assert request.size == (800, 800)
        assert request.getpixel((10, 10))[0] > 240
        assert request.getpixel((400, 400))[0] < 15
        assert EXPANSION_INSTRUCTIONS in instructions

    def test_without_aspect_sends_plain_preview(self, data_uri):
        photo = Photo(id="p", preview=data_uri((400, 400)), zoom=0.5)
        stylizer = FakeStylizer(result=_png((400, 400)))

        apply_stylization(photo, stylizer, sleep=no_sleep)

        request, instructions, _ = stylizer.requests[0]
        assert request.size == (400, 400)
        assert EXPANSION_INSTRUCTIONS not in instructions

    def test_canvas_wide_slot(self):
        canvas = build_expansion_canvas(Image.new("RGB", (400, 400)), 2.0, 0.5)
        assert canvas.size == (800, 400)

    def test_extra_instructions_forwarded(self, photo):
        stylizer = FakeStylizer(result=_png((8, 8)))
        apply_stylization(photo, stylizer, extra_instructions="Make it night", sleep=no_sleep)
        assert stylizer.requests[0][1].endswith("Make it night")


class TestApplyScene:
    def test_references_sent_in_one_call(self, data_uri):
        # Arrange
        refs = [
            Photo(id="r1", preview=data_uri((64, 48), (255, 0, 0))),
            Photo(id="r2", preview=data_uri((48, 64), (0, 0, 255))),
        ]
        stylizer = FakeStylizer(result=_png((300, 200)))

        # Act
        outcome = apply_scene(
            refs, stylizer, "a snowy mountain cabin",
            photo_id="scene-1", preset_id="noir", sleep=no_sleep,
        )

        # Assert
        assert isinstance(outcome, SceneOutcome)
        assert outcome.generated
        (images, instructions, model_id), = stylizer.requests
        assert [img.size for img in images] == [(64, 48), (48, 64)]
        assert "(2 photos)" in instructions and "a snowy mountain cabin" in instructions
        assert model_id == "gemini-3-pro-image-preview"

        scene = outcome.photo
        assert scene.id == "scene-1"
        assert scene.original is None
        assert Image.open(io.BytesIO(decode_data_uri(scene.preview))).size == (300, 200)
        assert scene.ai_usage.preset_id == "noir"
        assert scene.ai_usage.prompt_tokens == 2000
        assert scene.ai_usage.cost == pytest.approx(0.004 + 0.1344)

    def test_generated_id_when_omitted(self, photo):
        outcome = apply_scene([photo], FakeStylizer(result=_png((8, 8))), "a park", sleep=no_sleep)
        assert outcome.photo.id.startswith("scene-")

    def test_provider_failure(self, photo):
        outcome = apply_scene(
            [photo], FakeStylizer(error=StylizationError("safety block")), "a park", sleep=no_sleep,
        )
        assert not outcome.generated
        assert outcome.photo is None
        assert "safety block" in outcome.error

    def test_provider_without_scene_support(self, photo):
        outcome = apply_scene([photo], StyleOnlyStylizer(), "a park", sleep=no_sleep)
        assert outcome.photo is None
        assert "NotImplementedError" in outcome.error

    def test_unreadable_reference_skips_call(self, tmp_path):
        stylizer = FakeStylizer(result=_png((8, 8)))
        outcome = apply_scene(
            [Photo(id="gone", preview="gone.jpg")], stylizer, "a park",
            base_dir=tmp_path, sleep=no_sleep,
        )
        assert "gone" in outcome.error
        assert stylizer.requests == []

    def test_blank_description_rejected(self, photo):
        with pytest.raises(ValueError):
            apply_scene([photo], FakeStylizer(result=_png((8, 8))), "  ", sleep=no_sleep)
