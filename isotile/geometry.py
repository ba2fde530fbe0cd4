"""Diamond tile geometry.

Three pieces:
  1. An integer line rasterizer (Bresenham) for the diamond's diagonal edges.
  2. The tile boundary model: four anchors plus the four rasterized edges,
     built once per tile size.
  3. The pixel classifier: ray-casting point-in-polygon against the diamond,
     evaluated once per boundary into a cached boolean mask.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, NamedTuple, Sequence, Tuple

import numpy as np


class Point(NamedTuple):
    x: int
    y: int


Line = Tuple[Point, ...]


# ---- Line rasterizer ----

def rasterize_line(origin: Point, target: Point) -> List[Point]:
    """Lattice points from ``origin`` to ``target`` inclusive.

    Error terms are kept for both axes so steep, shallow and diagonal runs all
    come out 8-connected. A zero-length segment yields just ``origin``.
    """
    x, y = int(origin[0]), int(origin[1])
    tx, ty = int(target[0]), int(target[1])

    dx = abs(tx - x)
    dy = -abs(ty - y)
    sx = 1 if x < tx else -1
    sy = 1 if y < ty else -1
    err = dx + dy

    points: List[Point] = []
    for _ in range(max(dx, -dy) + 1):
        points.append(Point(x, y))
        e2 = 2 * err
        if e2 >= dy:
            if x == tx:
                break
            err += dy
            x += sx
        if e2 <= dx:
            if y == ty:
                break
            err += dx
            y += sy
    return points


# ---- Tile boundary model ----

@dataclass(frozen=True)
class TileBoundary:
    """Anchors and rasterized edges of a ``width`` x ``height`` diamond."""
    width: int
    height: int
    top: Point
    left: Point
    right: Point
    bottom: Point
    left_top: Line = field(repr=False)
    left_bottom: Line = field(repr=False)
    right_top: Line = field(repr=False)
    right_bottom: Line = field(repr=False)

    @property
    def anchors(self) -> Tuple[Point, Point, Point, Point]:
        return (self.top, self.left, self.right, self.bottom)

    @property
    def lines(self) -> Tuple[Line, Line, Line, Line]:
        return (self.left_top, self.left_bottom, self.right_top, self.right_bottom)

    @property
    def polygon(self) -> Tuple[Point, Point, Point, Point]:
        """Containment polygon: the diamond grown one pixel outward.

        Walk order is left, bottom, right, top. Growing the vertices keeps the
        anchor pixels on the inside of the ray-casting test.
        """
        half_w = self.width // 2
        half_h = self.height // 2
        return (
            Point(-1, half_h),
            Point(half_w, self.height),
            Point(self.width, half_h),
            Point(half_w, -1),
        )

    def outline_points(self) -> List[Point]:
        points: List[Point] = []
        for line in self.lines:
            points.extend(line)
        return points


def build_tile_boundary(width: int, height: int) -> TileBoundary:
    """Anchors and edges for one tile size. Rebuild when the size changes."""
    if width < 2 or height < 2:
        raise ValueError(f"Tile must be at least 2x2, got {width}x{height}")

    top = Point(width // 2, 0)
    left = Point(0, height // 2)
    right = Point(width - 1, height // 2)
    bottom = Point(width // 2, height - 1)

    return TileBoundary(
        width=width,
        height=height,
        top=top,
        left=left,
        right=right,
        bottom=bottom,
        left_top=tuple(rasterize_line(left, top)),
        left_bottom=tuple(rasterize_line(left, bottom)),
        right_top=tuple(rasterize_line(right, top)),
        right_bottom=tuple(rasterize_line(right, bottom)),
    )


# ---- Pixel classifier ----

def point_in_polygon(point: Sequence[float], polygon: Sequence[Sequence[float]]) -> bool:
    """Ray-casting containment test.

    An edge counts when ``min_y < y <= max_y`` (half-open, so a shared vertex
    is only crossed once) and the point lies strictly left of the edge's
    intersection with the horizontal through ``y``.
    """
    x, y = point[0], point[1]
    inside = False
    n = len(polygon)
    p1 = polygon[0]
    for i in range(1, n + 1):
        p2 = polygon[i % n]
        if min(p1[1], p2[1]) < y <= max(p1[1], p2[1]) and x < max(p1[0], p2[0]):
            x_cross = (y - p1[1]) * (p2[0] - p1[0]) / (p2[1] - p1[1]) + p1[0]
            if x < x_cross:
                inside = not inside
        p1 = p2
    return inside


def is_inside_tile(boundary: TileBoundary, pixel: Sequence[int]) -> bool:
    """Whether a pixel local to the tile's bounding box belongs to the tile."""
    return point_in_polygon(pixel, boundary.polygon)


@lru_cache(maxsize=16)
def tile_mask(boundary: TileBoundary) -> np.ndarray:
    """Read-only (H, W) bool mask of :func:`is_inside_tile` for every pixel."""
    mask = np.zeros((boundary.height, boundary.width), dtype=bool)
    for y in range(boundary.height):
        for x in range(boundary.width):
            mask[y, x] = is_inside_tile(boundary, (x, y))
    mask.flags.writeable = False
    return mask
