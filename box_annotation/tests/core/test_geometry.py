"""
Tests for geometry primitives.
"""

import itertools

import pytest

from box_annotation.core.geometry import (
    CanvasElement,
    Point,
    PointerEvent,
    Rectangle,
    clip_to_bounds,
    normalize,
    rectangle_from_points,
    to_canvas_coordinates,
)


def covered_pixels(rect: Rectangle):
    """Integer pixel cells covered by a rectangle, whatever its orientation."""
    xs = sorted((rect.x, rect.x + rect.width))
    ys = sorted((rect.y, rect.y + rect.height))
    return {
        (x, y)
        for x in range(int(xs[0]), int(xs[1]))
        for y in range(int(ys[0]), int(ys[1]))
    }


class TestNormalize:
    def test_already_normalized_is_unchanged(self):
        rect = Rectangle(50, 50, 100, 70)
        assert normalize(rect) == rect

    @pytest.mark.parametrize(
        "rect",
        [
            Rectangle(150, 120, -100, -70),
            Rectangle(150, 50, -100, 70),
            Rectangle(50, 120, 100, -70),
        ],
    )
    def test_every_drag_direction_gives_same_rectangle(self, rect):
        assert normalize(rect) == Rectangle(50, 50, 100, 70)

    def test_dimensions_non_negative_and_area_preserved(self):
        values = [-7, -1, 0, 3, 12]
        for w, h in itertools.product(values, values):
            rect = Rectangle(20, 30, w, h)
            norm = normalize(rect)
            assert norm.width >= 0 and norm.height >= 0
            assert norm.is_normalized
            assert covered_pixels(norm) == covered_pixels(rect)
            assert norm.area == rect.area

    def test_zero_size(self):
        assert normalize(Rectangle(5, 5, 0, 0)).is_empty


class TestRectangle:
    def test_from_points_is_raw(self):
        rect = rectangle_from_points(Point(150, 120), Point(50, 50))
        assert rect == Rectangle(150, 120, -100, -70)
        assert not rect.is_normalized

    def test_corners(self):
        top_left, bottom_right = Rectangle(150, 120, -100, -70).corners()
        assert top_left == Point(50, 50)
        assert bottom_right == Point(150, 120)

    def test_dict_round_trip_keeps_wire_names(self):
        data = Rectangle(1, 2, 3, 4).to_dict()
        assert data == {"x": 1, "y": 2, "width": 3, "height": 4}
        assert Rectangle.from_dict(data) == Rectangle(1, 2, 3, 4)

    def test_clip_to_bounds(self):
        assert clip_to_bounds(Rectangle(-10, -10, 30, 30), 100, 100) == Rectangle(
            0, 0, 20, 20
        )
        assert clip_to_bounds(Rectangle(120, 0, 10, 10), 100, 100) is None


class TestCanvasCoordinates:
    def test_subtracts_canvas_offset(self):
        canvas = CanvasElement(left=30, top=12, width=640, height=480)
        pos = to_canvas_coordinates(PointerEvent(130, 62), canvas)
        assert pos == Point(100, 50)

    def test_unscaled_by_default(self):
        pos = to_canvas_coordinates(PointerEvent(7, 9), CanvasElement())
        assert pos == Point(7, 9)

    def test_scaled_display_maps_back_to_image_pixels(self):
        canvas = CanvasElement(
            left=0, top=0, width=800, height=600, display_width=400, display_height=300
        )
        pos = to_canvas_coordinates(PointerEvent(100, 150), canvas)
        assert pos == Point(200, 300)
