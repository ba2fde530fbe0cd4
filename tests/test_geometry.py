"""Tests for the diamond tile geometry: rasterizer, boundary model, classifier."""

from __future__ import annotations

import numpy as np
import pytest

from isotile.geometry import (
    Point,
    build_tile_boundary,
    is_inside_tile,
    point_in_polygon,
    rasterize_line,
    tile_mask,
)


TILE_SIZES = [(110, 78), (64, 32), (32, 16), (7, 5)]


def _assert_connected(points):
    for a, b in zip(points, points[1:]):
        assert abs(a.x - b.x) <= 1 and abs(a.y - b.y) <= 1, f"Gap between {a} and {b}"
        assert a != b, f"Repeated point {a}"


# ---------------------------------------------------------------------------
# Tests: Line rasterizer
# ---------------------------------------------------------------------------


class TestRasterizeLine:
    def test_horizontal_endpoints(self):
        points = rasterize_line(Point(0, 0), Point(5, 0))
        assert points == [Point(x, 0) for x in range(6)]

    def test_zero_length(self):
        assert rasterize_line(Point(0, 0), Point(0, 0)) == [Point(0, 0)]

    def test_vertical(self):
        points = rasterize_line(Point(3, 4), Point(3, 0))
        assert points == [Point(3, y) for y in (4, 3, 2, 1, 0)]

    def test_exact_diagonal(self):
        points = rasterize_line(Point(0, 0), Point(4, 4))
        assert points == [Point(i, i) for i in range(5)]

    @pytest.mark.parametrize("origin,target", [
        ((0, 39), (55, 0)),
        ((109, 39), (55, 77)),
        ((55, 0), (0, 39)),
        ((2, 1), (4, 20)),
        ((10, 10), (-7, 3)),
    ])
    def test_connected_and_reaches_target(self, origin, target):
        points = rasterize_line(Point(*origin), Point(*target))
        assert points[0] == Point(*origin)
        assert points[-1] == Point(*target)
        dx = abs(target[0] - origin[0])
        dy = abs(target[1] - origin[1])
        assert len(points) == max(dx, dy) + 1
        _assert_connected(points)

    def test_accepts_plain_tuples(self):
        assert rasterize_line((1, 1), (3, 1)) == [Point(1, 1), Point(2, 1), Point(3, 1)]


# ---------------------------------------------------------------------------
# Tests: Tile boundary model
# ---------------------------------------------------------------------------


class TestTileBoundary:
    def test_anchor_positions(self):
        boundary = build_tile_boundary(110, 78)
        assert boundary.top == Point(55, 0)
        assert boundary.left == Point(0, 39)
        assert boundary.right == Point(109, 39)
        assert boundary.bottom == Point(55, 77)

    def test_lines_join_adjacent_anchors(self):
        b = build_tile_boundary(110, 78)
        assert (b.left_top[0], b.left_top[-1]) == (b.left, b.top)
        assert (b.left_bottom[0], b.left_bottom[-1]) == (b.left, b.bottom)
        assert (b.right_top[0], b.right_top[-1]) == (b.right, b.top)
        assert (b.right_bottom[0], b.right_bottom[-1]) == (b.right, b.bottom)

    def test_lines_have_one_point_per_column(self):
        """Tiles wider than tall rasterize along x: one point per x value."""
        b = build_tile_boundary(110, 78)
        for line in b.lines:
            assert len(line) > 0
            xs = [p.x for p in line]
            assert len(set(xs)) == len(xs)
            steps = {xs[i + 1] - xs[i] for i in range(len(xs) - 1)}
            assert len(steps) == 1, "x should change monotonically"
            _assert_connected(list(line))

    def test_outline_stays_inside_bounding_box(self):
        for w, h in TILE_SIZES:
            b = build_tile_boundary(w, h)
            for x, y in b.outline_points():
                assert 0 <= x < w and 0 <= y < h

    def test_build_is_pure(self):
        assert build_tile_boundary(64, 32) == build_tile_boundary(64, 32)
        assert build_tile_boundary(64, 32) != build_tile_boundary(64, 30)

    def test_rejects_tiny_tiles(self):
        with pytest.raises(ValueError):
            build_tile_boundary(1, 10)

    def test_polygon_is_grown_by_one_pixel(self):
        b = build_tile_boundary(110, 78)
        assert b.polygon == (Point(-1, 39), Point(55, 78), Point(110, 39), Point(55, -1))


# ---------------------------------------------------------------------------
# Tests: Pixel classifier
# ---------------------------------------------------------------------------


class TestPixelClassifier:
    @pytest.mark.parametrize("size", TILE_SIZES)
    def test_anchors_are_inside(self, size):
        b = build_tile_boundary(*size)
        for anchor in b.anchors:
            assert is_inside_tile(b, anchor), f"{anchor} should be inside {size}"

    def test_center_inside_corners_outside(self):
        b = build_tile_boundary(110, 78)
        assert is_inside_tile(b, (55, 39))
        for corner in [(0, 0), (109, 0), (0, 77), (109, 77)]:
            assert not is_inside_tile(b, corner), f"{corner} should be outside"

    def test_square_polygon(self):
        square = [(0, 0), (0, 10), (10, 10), (10, 0)]
        assert point_in_polygon((5, 5), square)
        assert not point_in_polygon((15, 5), square)
        assert not point_in_polygon((5, -1), square)

    def test_mask_matches_classifier(self):
        b = build_tile_boundary(32, 16)
        mask = tile_mask(b)
        assert mask.shape == (16, 32)
        for y in range(16):
            for x in range(32):
                assert mask[y, x] == is_inside_tile(b, (x, y))

    def test_mask_is_deterministic_and_read_only(self):
        b = build_tile_boundary(110, 78)
        first = tile_mask(b)
        second = tile_mask(build_tile_boundary(110, 78))
        assert np.array_equal(first, second)
        with pytest.raises(ValueError):
            first[0, 0] = True

    def test_mask_covers_about_half_the_box(self):
        mask = tile_mask(build_tile_boundary(110, 78))
        fraction = mask.sum() / mask.size
        assert 0.45 < fraction < 0.6, f"Unexpected diamond fill fraction {fraction:.3f}"

    def test_mask_rows_are_contiguous(self):
        """Each row of the diamond is one unbroken run of inside pixels."""
        mask = tile_mask(build_tile_boundary(110, 78))
        for y in range(mask.shape[0]):
            xs = np.flatnonzero(mask[y])
            if len(xs):
                assert xs[-1] - xs[0] + 1 == len(xs)
