"""
Tests for builder.bubbles.paths

Test Coverage:
- Speech outline: one tail, two straight edges, per direction
- Thought outline: scallops only, two trailing circles on the tail side
- Annotation / text block: rounded rectangles, no tails
- outline_bounds(): every outline fits its canvas
"""
import pytest

from photobook_toolkit.builder.bubbles import (
    Close,
    CubicTo,
    LineTo,
    MoveTo,
    QuadTo,
    build_outline,
    measure,
    outline_bounds,
)
from photobook_toolkit.core.models import BubbleType, TailDirection

ALL_TAILS = list(TailDirection)


class TestSpeechOutline:
    @pytest.mark.parametrize("tail", ALL_TAILS)
    def test_exactly_two_line_segments(self, tail):
        outline = build_outline(BubbleType.SPEECH, 160, 80, tail)
        assert outline.count(LineTo) == 2
        assert outline.count(CubicTo) == 4
        assert not outline.circles

    @pytest.mark.parametrize("tail", ALL_TAILS)
    def test_closed_path(self, tail):
        segments = build_outline(BubbleType.SPEECH, 160, 80, tail).segments
        assert isinstance(segments[0], MoveTo)
        assert isinstance(segments[-1], Close)

    @pytest.mark.parametrize("tail", ALL_TAILS)
    def test_tail_tip_on_its_side(self, tail):
        # Arrange
        outline = build_outline(BubbleType.SPEECH, 160, 80, tail)
        body_x, body_y, w, h = outline.body
        tip = [s for s in outline.segments if isinstance(s, LineTo)][0].to
        cx = body_x + w / 2

        # Assert
        if tail.is_top:
            assert tip[1] < body_y
        else:
            assert tip[1] > body_y + h
        if tail.is_left:
            assert tip[0] < cx
        else:
            assert tip[0] > cx

    def test_top_tails_mirror_each_other(self):
        left = build_outline(BubbleType.SPEECH, 160, 80, TailDirection.TOP_LEFT)
        right = build_outline(BubbleType.SPEECH, 160, 80, TailDirection.TOP_RIGHT)
        width = left.canvas_size[0]
        left_tip = [s for s in left.segments if isinstance(s, LineTo)][0].to
        right_tip = [s for s in right.segments if isinstance(s, LineTo)][0].to
        assert right_tip[0] == pytest.approx(width - left_tip[0])
        assert right_tip[1] == pytest.approx(left_tip[1])


class TestThoughtOutline:
    def test_thought_at_center_has_no_lines_and_two_circles(self):
        """A thought bubble anchored mid-spread is all curves plus two circles."""
        # Arrange
        size = measure("Hmm...", BubbleType.THOUGHT)

        # Act
        outline = build_outline(BubbleType.THOUGHT, size.width, size.height)

        # Assert
        assert outline.count(LineTo) == 0
        assert len(outline.circles) == 2

    @pytest.mark.parametrize("tail", ALL_TAILS)
    def test_ten_scallops(self, tail):
        outline = build_outline(BubbleType.THOUGHT, 200, 80, tail)
        assert outline.count(QuadTo) == 10
        assert outline.count(LineTo) == 0

    @pytest.mark.parametrize("tail", ALL_TAILS)
    def test_circles_trail_toward_tail(self, tail):
        # Arrange
        outline = build_outline(BubbleType.THOUGHT, 200, 80, tail)
        body_x, body_y, w, h = outline.body
        big, small = outline.circles

        # Assert - large circle first, then smaller and further away
        assert big.radius > small.radius
        if tail.is_top:
            assert small.center[1] < big.center[1] < body_y
        else:
            assert small.center[1] > big.center[1] > body_y + h
        if tail.is_left:
            assert small.center[0] < big.center[0] < body_x + w / 2
        else:
            assert small.center[0] > big.center[0] > body_x + w / 2


@pytest.mark.parametrize("bubble_type", [BubbleType.ANNOTATION, BubbleType.TEXT_BLOCK])
class TestRectOutlines:
    def test_rounded_rectangle(self, bubble_type):
        outline = build_outline(bubble_type, 180, 60, TailDirection.TOP_LEFT)
        assert outline.count(LineTo) == 4
        assert outline.count(QuadTo) == 4
        assert not outline.circles

    def test_tail_direction_ignored(self, bubble_type):
        outlines = [build_outline(bubble_type, 180, 60, tail) for tail in ALL_TAILS]
        assert len({o.to_svg_path() for o in outlines}) == 1


class TestSvgPath:
    @pytest.mark.parametrize("bubble_type", list(BubbleType))
    def test_starts_with_move_and_ends_closed(self, bubble_type):
        path = build_outline(bubble_type, 150, 70).to_svg_path()
        assert path.startswith("M ")
        assert path.endswith("Z")


@pytest.mark.parametrize("bubble_type", list(BubbleType))
@pytest.mark.parametrize("tail", ALL_TAILS)
@pytest.mark.parametrize("size", [(100, 60), (300, 124), (300, 320)])
def test_outline_fits_canvas(bubble_type, tail, size):
    # Arrange
    outline = build_outline(bubble_type, *size, tail)
    canvas_w, canvas_h = outline.canvas_size

    # Act
    min_x, min_y, max_x, max_y = outline_bounds(outline, samples=64)

    # Assert
    assert min_x >= 0 and min_y >= 0
    assert max_x <= canvas_w and max_y <= canvas_h
