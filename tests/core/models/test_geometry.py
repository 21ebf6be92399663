"""
Unit Tests for coordinate-space types.

Tests NormRect, CropArea, PercentPoint and MmRect conversions.
"""

import pytest

from photobook_toolkit.core.models import (
    CropArea,
    MmRect,
    NormRect,
    PercentPoint,
    mm_to_pt,
    mm_to_px,
    px_to_mm,
)


class TestUnitConversion:
    """Tests for physical unit helpers."""

    def test_mm_to_px_at_300_dpi(self):
        assert mm_to_px(25.4, 300) == pytest.approx(300)

    def test_px_to_mm_inverts_mm_to_px(self):
        assert px_to_mm(mm_to_px(206, 300), 300) == pytest.approx(206)

    def test_mm_to_pt_page_size(self):
        assert mm_to_pt(412) == pytest.approx(1167.87, abs=0.01)
        assert mm_to_pt(206) == pytest.approx(583.94, abs=0.01)


class TestNormRect:
    """Tests for NormRect."""

    def test_rect_outside_page_rejected(self):
        with pytest.raises(ValueError):
            NormRect(0.5, 0.5, 0.6, 0.2)

    def test_zero_size_rejected(self):
        with pytest.raises(ValueError):
            NormRect(0, 0, 0, 0.5)

    def test_authored_thirds_within_epsilon_accepted(self):
        rect = NormRect(0.0, 0.667, 1.0, 0.333)
        assert rect.bottom == pytest.approx(1.0)

    def test_to_mm_right_page_offset(self):
        # Arrange
        rect = NormRect(0.0, 0.5, 0.5, 0.5)

        # Act
        mm = rect.to_mm(206.0, x_offset_mm=206.0)

        # Assert
        assert (mm.x, mm.y, mm.width, mm.height) == pytest.approx((206.0, 103.0, 103.0, 103.0))

    def test_contains(self):
        outer = NormRect(0, 0, 1, 1)
        assert outer.contains(NormRect(0.1, 0.1, 0.5, 0.5))
        assert not NormRect(0.2, 0.2, 0.3, 0.3).contains(outer)

    def test_covers_page(self):
        assert NormRect(0, 0, 1, 1).covers_page()
        assert not NormRect(0.01, 0.01, 0.98, 0.98).covers_page()


class TestCropArea:
    """Tests for CropArea rescaling."""

    def test_rescale_requires_reference(self):
        with pytest.raises(ValueError):
            CropArea(0, 0, 10, 10).rescaled_to((100, 100))

    def test_rescale_uses_long_edge_ratio(self):
        # Arrange
        crop = CropArea(400, 300, 1200, 900, reference_size=(4000, 3000))

        # Act
        preview = crop.rescaled_to((800, 600))

        # Assert
        assert (preview.x, preview.y, preview.width, preview.height) == pytest.approx(
            (80, 60, 240, 180)
        )
        assert preview.reference_size == (800, 600)

    def test_round_trip_through_half_size_preview_within_one_pixel(self):
        """original -> half-size preview -> original reproduces the rectangle."""
        # Arrange
        original = CropArea(1237, 411, 1501, 1001, reference_size=(4001, 3001))

        # Act
        preview = original.rescaled_to((2000, 1500)).rounded()
        back = preview.rescaled_to((4001, 3001)).rounded()

        # Assert
        for a, b in zip(original.box, back.box):
            assert abs(a - b) <= 2.0  # one preview pixel is two original pixels
        assert abs(back.width - original.width) <= 2.0

    def test_round_trip_same_resolution_exact(self):
        crop = CropArea(10.4, 20.6, 300.2, 200.1, reference_size=(1000, 800))
        back = crop.rescaled_to((500, 400)).rescaled_to((1000, 800))
        assert back.box == pytest.approx(crop.box)

    def test_is_within_reference_detects_expansion(self):
        assert CropArea(0, 0, 100, 100, reference_size=(100, 100)).is_within_reference()
        assert not CropArea(-50, -50, 200, 200, reference_size=(100, 100)).is_within_reference()

    def test_dict_round_trip_keeps_reference(self):
        crop = CropArea(1, 2, 3, 4, reference_size=(10, 20))
        assert CropArea.from_dict(crop.to_dict()) == crop


class TestPercentPoint:
    def test_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            PercentPoint(101, 50)

    def test_to_mm_on_spread(self):
        assert PercentPoint(50, 25).to_mm(412, 206) == pytest.approx((206, 51.5))


class TestMmRect:
    def test_contain_wide_image_letterboxes_vertically(self):
        # Arrange
        slot = MmRect(0, 0, 100, 100)

        # Act
        placed = slot.contain(2.0)

        # Assert
        assert (placed.x, placed.y, placed.width, placed.height) == pytest.approx((0, 25, 100, 50))

    def test_pixel_size_at_dpi(self):
        assert MmRect(0, 0, 206, 103).pixel_size(300) == (2433, 1217)

    def test_to_points_flips_y(self):
        x, y, w, h = MmRect(10, 20, 30, 40).to_points(206)
        assert y == pytest.approx(mm_to_pt(206 - 20 - 40))
        assert (x, w, h) == pytest.approx((mm_to_pt(10), mm_to_pt(30), mm_to_pt(40)))

    def test_inset_uniform_when_dy_omitted(self):
        assert MmRect(10, 20, 30, 40).inset(2) == MmRect(12, 22, 26, 36)

    def test_inset_separate_axes(self):
        assert MmRect(10, 20, 30, 40).inset(2, 5) == MmRect(12, 25, 26, 30)
