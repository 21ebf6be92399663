"""
Tests for builder.layout.composer

Test Coverage:
- compose_album(): page order, cover page, skipped spreads
- Slot placement in millimetres, with and without gaps
- Captions, bubbles and panorama halves
- Per-slot decode failures reported as warnings
"""
import pytest

from photobook_toolkit.builder.images import ImageProvider, SnapshotImageProvider
from photobook_toolkit.builder.layout import LayoutConfig, PageKind, compose_album
from photobook_toolkit.core.models import Album

THIRD = 206.0 / 3


@pytest.fixture
def config():
    # Low resolution keeps the bitmaps small
    return LayoutConfig(dpi=30, panorama_min_half_px=10)


@pytest.fixture
def provider(tmp_path):
    with SnapshotImageProvider(base_dir=tmp_path, sleep=lambda s: None) as p:
        yield p


def _compose(album_dict, config, provider):
    return compose_album(Album.from_dict(album_dict), config, provider)


class FaultyProvider(ImageProvider):
    """Raises an unexpected error for one source, delegates the rest."""

    def __init__(self, inner, broken):
        self.inner = inner
        self.broken = broken

    def get_image(self, source):
        if source == self.broken:
            raise RuntimeError("decoder crashed")
        return self.inner.get_image(source)


class TestClassicSpread:
    def test_gapless_classic_places_two_photos(self, album_dict, config, provider):
        """Classic spread without gaps: full left page plus the top right strip."""
        # Arrange
        album_dict["withGaps"] = False
        spread = album_dict["spreads"][0]
        spread["rightPhotos"] = [spread["rightPhotos"][0]]
        spread["bubbles"] = []

        # Act
        layout = _compose(album_dict, config, provider)

        # Assert
        (page,) = layout.pages
        assert page.kind is PageKind.SPREAD
        assert (page.width_mm, page.height_mm) == (412.0, 206.0)
        left, right = page.photos
        assert (left.slot_id, left.photo_id) == ("left-1", "p1")
        assert (left.rect.x, left.rect.y, left.rect.width, left.rect.height) == pytest.approx(
            (0, 0, 206, 206)
        )
        assert (right.slot_id, right.photo_id) == ("right-1", "p2")
        assert (right.rect.x, right.rect.y, right.rect.width, right.rect.height) == pytest.approx(
            (206, 0, 206, THIRD)
        )
        assert left.border_mm == 0
        assert layout.warnings == []

    def test_bitmaps_sized_for_print(self, album_dict, config, provider):
        layout = _compose(album_dict, config, provider)
        for photo in layout.pages[0].photos:
            assert photo.image.size == photo.rect.pixel_size(config.dpi)

    def test_uncropped_photo_fills_slot_from_original(self, album_dict, config, provider, data_uri):
        """A 4:3 photo without a crop fills the square slot from its original."""
        # Arrange
        album_dict["withGaps"] = False
        album_dict["spreads"][0]["leftPhotos"] = [{
            "id": "p1",
            "url": data_uri((80, 60), (255, 0, 0)),
            "originalUrl": data_uri((400, 300), (0, 128, 0)),
        }]

        # Act
        layout = _compose(album_dict, config, provider)

        # Assert
        left = layout.pages[0].photos[0]
        assert (left.rect.x, left.rect.y, left.rect.width, left.rect.height) == pytest.approx(
            (left.slot_rect.x, left.slot_rect.y, left.slot_rect.width, left.slot_rect.height)
        )
        assert left.image.size == left.rect.pixel_size(config.dpi)
        assert left.image.getpixel((0, 0)) == (0, 128, 0)
        assert layout.warnings == []

    def test_gapped_slots_inset_and_bordered(self, album_dict, config, provider):
        layout = _compose(album_dict, config, provider)
        left = layout.pages[0].photos[0]
        assert left.slot_rect.x == pytest.approx(206 * 0.01)
        assert left.border_mm == config.border_width_mm

    def test_empty_slot_skipped(self, album_dict, config, provider):
        layout = _compose(album_dict, config, provider)
        assert [p.slot_id for p in layout.pages[0].photos] == ["left-1", "right-1", "right-3"]

    def test_hidden_photo_not_printed(self, album_dict, config, provider):
        album_dict["spreads"][0]["leftPhotos"][0]["visible"] = False
        layout = _compose(album_dict, config, provider)
        assert "p1" not in [p.photo_id for p in layout.pages[0].photos]

    def test_caption_strip_along_slot_bottom(self, album_dict, config, provider):
        # Act
        layout = _compose(album_dict, config, provider)

        # Assert
        (caption,) = layout.pages[0].captions
        slot = next(p for p in layout.pages[0].photos if p.photo_id == "p2").slot_rect
        assert caption.text == "Beach"
        assert caption.rect.bottom == pytest.approx(slot.bottom)
        assert caption.rect.x == pytest.approx(slot.x + config.caption_inset_mm)
        assert caption.image.mode == "RGBA"


class TestBubbles:
    def test_bubble_centred_on_anchor(self, album_dict, config, provider):
        # Act
        layout = _compose(album_dict, config, provider)

        # Assert - "Hello!" measures 100x60 on a 120x90 canvas
        (bubble,) = layout.pages[0].bubbles
        mm_per_px = 412.0 / 800
        assert bubble.bubble_id == "b1"
        assert bubble.rect.center == pytest.approx((206.0, 103.0))
        assert bubble.rect.width == pytest.approx(120 * mm_per_px)
        assert bubble.rect.height == pytest.approx(90 * mm_per_px)

    def test_bubble_scale_applied(self, album_dict, config, provider):
        album_dict["spreads"][0]["bubbles"][0]["scale"] = 2
        (bubble,) = _compose(album_dict, config, provider).pages[0].bubbles
        assert bubble.rect.width == pytest.approx(240 * 412.0 / 800)


class TestAlbumPages:
    def test_unknown_template_skipped(self, album_dict, config, provider):
        """A spread with an unknown template is skipped; the rest still print."""
        # Arrange
        second = dict(album_dict["spreads"][0], id="s2", templateId="mosaic-9")
        third = dict(album_dict["spreads"][0], id="s3", templateId="grid")
        album_dict["spreads"] += [second, third]

        # Act
        layout = _compose(album_dict, config, provider)

        # Assert
        assert [p.spread_id for p in layout.pages] == ["s1", "s3"]
        assert [p.index for p in layout.pages] == [0, 1]
        assert layout.skipped_spreads == ["s2"]
        assert any("mosaic-9" in w for w in layout.warnings)

    def test_pages_in_album_order(self, album_dict, config, provider):
        base = album_dict["spreads"][0]
        album_dict["spreads"] = [dict(base, id=f"s{i}") for i in range(6)]
        layout = _compose(album_dict, LayoutConfig(dpi=30, max_workers=3), provider)
        assert [p.spread_id for p in layout.pages] == [f"s{i}" for i in range(6)]

    def test_cover_page_first(self, album_dict, config, provider, data_uri):
        # Arrange
        album_dict["cover"] = {
            "frontImage": {"id": "front", "url": data_uri((100, 100))},
            "backImage": None,
            "title": "Summer",
        }

        # Act
        layout = _compose(album_dict, config, provider)

        # Assert
        cover = layout.pages[0]
        assert cover.kind is PageKind.COVER
        assert (cover.width_mm, cover.height_mm) == (458.0, 242.0)
        (front,) = cover.photos
        assert front.slot_id == "front"
        assert front.rect == config.front_cover_rect
        assert cover.title.text == "Summer"
        assert layout.pages[1].spread_id == "s1"

    def test_title_only_cover_omitted(self, album_dict, config, provider):
        album_dict["cover"] = {"frontImage": None, "backImage": None, "title": "Summer"}
        layout = _compose(album_dict, config, provider)
        assert all(p.kind is PageKind.SPREAD for p in layout.pages)

    def test_missing_image_is_a_warning(self, album_dict, config, provider):
        # Arrange
        album_dict["spreads"][0]["leftPhotos"][0]["url"] = "missing.png"

        # Act
        layout = _compose(album_dict, config, provider)

        # Assert
        assert [p.photo_id for p in layout.pages[0].photos] == ["p2", "p3"]
        assert any("left-1" in w for w in layout.warnings)
        assert layout.skipped_spreads == []

    def test_unexpected_slot_error_is_a_warning(self, album_dict, config, provider):
        # Arrange
        album_dict["spreads"][0]["leftPhotos"][0]["url"] = "broken.png"

        # Act
        layout = _compose(album_dict, config, FaultyProvider(provider, "broken.png"))

        # Assert - the rest of the spread still prints
        assert [p.photo_id for p in layout.pages[0].photos] == ["p2", "p3"]
        assert any("RuntimeError" in w and "left-1" in w for w in layout.warnings)


class TestPanoramaSpread:
    def test_two_halves_span_the_sheet(self, album_dict, config, provider, data_uri):
        # Arrange
        album_dict["spreads"] = [{
            "id": "pano",
            "templateId": "panorama",
            "leftPhotos": [{"id": "wide", "url": data_uri((400, 200)), "caption": "Coast"}],
            "rightPhotos": [],
            "bubbles": [],
        }]

        # Act
        layout = _compose(album_dict, config, provider)

        # Assert
        left, right = layout.pages[0].photos
        assert (left.slot_id, right.slot_id) == ("left-1", "right-1")
        assert left.photo_id == right.photo_id == "wide"
        assert left.rect.right == pytest.approx(right.rect.x)
        assert left.border_mm == right.border_mm == 0
        (caption,) = layout.pages[0].captions
        assert caption.rect.right <= 206.0
