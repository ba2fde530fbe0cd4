"""Staggered (brick) grid layout for diamond tiles.

Rows are half a tile high, so every row overlaps the previous one by 50%.
Even rows are pushed half a tile to the left; the first row starts half a
tile above the image so the top edge is covered by diamond bottoms.
"""

import math
from typing import Iterator, Tuple

from isotile.geometry import Point


def compute_grid_dimensions(
    image_width: int,
    image_height: int,
    tile_width: int,
    tile_height: int,
) -> Tuple[int, int]:
    """(cols, rows) of cells needed to cover the whole image.

    With an odd tile height the row step ``tile_height // 2`` is less than
    half a tile, so extra rows are added until the last row reaches the
    bottom edge.
    """
    cols = math.ceil(image_width / tile_width) + 1
    rows = 2 * math.ceil(image_height / tile_height) + 1
    if tile_height % 2:
        step = tile_height // 2
        # last row starts at (rows - 2) * step and must end at image_height - 1
        needed = math.ceil(max(0, image_height - tile_height + step) / step) + 1
        rows = max(rows, needed)
    return cols, rows


def compute_cell_offset(row: int, col: int, tile_width: int, tile_height: int) -> Point:
    """Top-left corner of cell (row, col) in source-image coordinates."""
    x = col * tile_width
    y = row * (tile_height // 2) - tile_height // 2
    if row % 2 == 0:
        x -= tile_width // 2
    return Point(x, y)


def iter_cells(
    image_width: int,
    image_height: int,
    tile_width: int,
    tile_height: int,
) -> Iterator[Tuple[int, int, Point]]:
    """Yield ``(row, col, offset)`` for every cell in row-major order."""
    cols, rows = compute_grid_dimensions(image_width, image_height, tile_width, tile_height)
    for row in range(rows):
        for col in range(cols):
            yield row, col, compute_cell_offset(row, col, tile_width, tile_height)
