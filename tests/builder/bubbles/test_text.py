"""
Tests for builder.bubbles.text and builder.bubbles.raster

Test Coverage:
- wrap_text(): greedy wrap, manual newlines, overlong words
- layout_text(): vertical centring, alignment
- render_bubble(): canvas size, fill, transparency
"""
import numpy as np
import pytest

from photobook_toolkit.builder.bubbles import (
    bubble_outline,
    layout_text,
    load_font,
    render_bubble,
    wrap_text,
)
from photobook_toolkit.core.models import BubbleType, PercentPoint, SpeechBubble


class TestWrapText:
    def test_greedy(self):
        assert wrap_text("aa bb cc", 5, len) == ["aa bb", "cc"]

    def test_manual_newlines_always_break(self):
        assert wrap_text("one\ntwo three", 100, len) == ["one", "two three"]

    def test_blank_line_preserved(self):
        assert wrap_text("a\n\nb", 100, len) == ["a", "", "b"]

    def test_overlong_word_kept_whole(self):
        assert wrap_text("hi supercalifragilistic yo", 6, len) == ["hi", "supercalifragilistic", "yo"]

    def test_collapses_runs_of_spaces(self):
        assert wrap_text("a    b", 10, len) == ["a b"]


class TestLayoutText:
    def test_block_centred_vertically(self):
        # Arrange - two lines of height 10 in a 100 high box
        placed = layout_text(["ab", "abcd"], (0, 0, 20, 100), 10, len)

        # Assert
        assert [line.y for line in placed] == pytest.approx([40, 50])

    def test_lines_centred_horizontally(self):
        placed = layout_text(["ab", "abcd"], (0, 0, 20, 100), 10, len)
        assert [line.x for line in placed] == pytest.approx([9, 8])

    def test_align_left(self):
        placed = layout_text(["ab", "abcd"], (5, 0, 20, 100), 10, len, align_left=True)
        assert [line.x for line in placed] == [5, 5]


class TestLoadFont:
    def test_cached_per_size(self):
        assert load_font(20) is load_font(20)

    def test_measures_text(self):
        font = load_font(20)
        assert font.getlength("Hello") > font.getlength("Hi") > 0


def _bubble(**kwargs):
    defaults = {"id": "b", "anchor": PercentPoint(50, 50), "text": "Hi"}
    defaults.update(kwargs)
    return SpeechBubble(**defaults)


class TestRenderBubble:
    def test_size_matches_canvas(self):
        # Arrange
        bubble = _bubble()
        canvas_w, canvas_h = bubble_outline(bubble).canvas_size

        # Act
        image = render_bubble(bubble, 2.0)

        # Assert
        assert image.mode == "RGBA"
        assert image.size == (canvas_w * 2, canvas_h * 2)

    def test_body_opaque_corners_transparent(self):
        image = render_bubble(_bubble(), 1.0)
        assert image.getpixel((0, 0))[3] == 0
        # Inside the ellipse, left of the centred text
        assert image.getpixel((30, 40)) == (255, 255, 255, 255)

    def test_text_block_semi_transparent(self):
        image = render_bubble(_bubble(type=BubbleType.TEXT_BLOCK, text=""), 1.0)
        alpha = image.getpixel((100, 40))[3]
        assert 150 < alpha < 230

    def test_text_drawn(self):
        image = render_bubble(_bubble(text="WWWW"), 3.0)
        arr = np.asarray(image)
        assert ((arr[..., 0] < 100) & (arr[..., 3] > 200)).any()
