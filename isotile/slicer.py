"""Cut a source image into diamond tiles on the staggered grid.

Each cell gets a fresh tile-sized RGBA buffer filled with the background
colour. Source pixels that fall inside the image and inside the diamond are
copied in; everything else keeps the background. Tiles whose copied pixels
are all one colour are dropped.
"""

import logging
import multiprocessing
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from isotile.config import Color, SlicerConfig, TRANSPARENT
from isotile.geometry import Point, TileBoundary, build_tile_boundary, tile_mask
from isotile.grid import compute_cell_offset, compute_grid_dimensions

logger = logging.getLogger(__name__)


@dataclass
class Tile:
    """A retained diamond tile and where it came from."""
    image: np.ndarray          # (H, W, 4) uint8 RGBA
    row: int
    col: int
    offset: Point              # top-left of the tile in source coordinates
    index: int = 0             # output number, assigned in row-major order


def _as_rgba(source: np.ndarray) -> np.ndarray:
    if source.ndim != 3 or source.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3|4) image, got shape {source.shape}")
    if source.shape[2] == 4:
        return source
    alpha = np.full(source.shape[:2] + (1,), 255, dtype=source.dtype)
    return np.concatenate([source, alpha], axis=2)


def extract_tile(
    source: np.ndarray,
    boundary: TileBoundary,
    offset: Point,
    tile_width: int,
    tile_height: int,
    background: Color = TRANSPARENT,
) -> Optional[np.ndarray]:
    """Copy one diamond out of ``source``; ``None`` if it holds a single colour.

    The source is only read.
    """
    if (boundary.width, boundary.height) != (tile_width, tile_height):
        raise ValueError(
            f"Boundary is {boundary.width}x{boundary.height}, "
            f"tile is {tile_width}x{tile_height}; rebuild the boundary"
        )
    src_h, src_w = source.shape[:2]
    tile = np.empty((tile_height, tile_width, 4), dtype=np.uint8)
    tile[:, :] = background

    # intersect the tile rectangle with the image
    ox, oy = offset
    x0, y0 = max(0, -ox), max(0, -oy)
    x1, y1 = min(tile_width, src_w - ox), min(tile_height, src_h - oy)
    if x0 >= x1 or y0 >= y1:
        return None

    inside = tile_mask(boundary)[y0:y1, x0:x1]
    region = source[oy + y0:oy + y1, ox + x0:ox + x1]
    copied = region[inside]
    if copied.shape[0] == 0:
        return None

    tile[y0:y1, x0:x1][inside] = copied

    distinct = np.unique(copied, axis=0)
    if len(distinct) <= 1:
        return None
    return tile


def _slice_row(
    source: np.ndarray,
    boundary: TileBoundary,
    config: SlicerConfig,
    row: int,
    cols: int,
) -> List[Tile]:
    tiles = []
    for col in range(cols):
        offset = compute_cell_offset(row, col, config.tile_width, config.tile_height)
        image = extract_tile(
            source, boundary, offset,
            config.tile_width, config.tile_height, config.background,
        )
        if image is None:
            logger.debug("Dropped cell (%d, %d) at %s", row, col, tuple(offset))
            continue
        tiles.append(Tile(image=image, row=row, col=col, offset=offset))
    return tiles


# ---- Worker state for parallel row scans ----

_worker_state: dict = {}


def _init_row_worker(source: np.ndarray, config: SlicerConfig, cols: int):
    _worker_state["source"] = source
    _worker_state["config"] = config
    _worker_state["boundary"] = build_tile_boundary(config.tile_width, config.tile_height)
    _worker_state["cols"] = cols


def _slice_row_worker(row: int) -> List[Tile]:
    return _slice_row(
        _worker_state["source"],
        _worker_state["boundary"],
        _worker_state["config"],
        row,
        _worker_state["cols"],
    )


def slice_image(
    source: np.ndarray,
    config: Optional[SlicerConfig] = None,
    workers: int = 1,
) -> List[Tile]:
    """Slice ``source`` into retained diamond tiles.

    Args:
        source: (H, W, 3|4) uint8 image. RGB input gets an opaque alpha.
        config: Tile size, background colour and numbering.
        workers: Processes used to scan rows. 1 runs in-process.

    Returns:
        Tiles in row-major scan order, numbered from ``config.starting_number``.
    """
    config = (config or SlicerConfig()).validate()
    source = _as_rgba(np.ascontiguousarray(source, dtype=np.uint8))
    src_h, src_w = source.shape[:2]

    cols, rows = compute_grid_dimensions(src_w, src_h, config.tile_width, config.tile_height)
    logger.info(
        "Slicing %dx%d image into %d cols x %d rows of %dx%d tiles",
        src_w, src_h, cols, rows, config.tile_width, config.tile_height,
    )

    if workers > 1 and rows > 1:
        init_args = (source, config, cols)
        with multiprocessing.Pool(
            processes=min(workers, rows),
            initializer=_init_row_worker,
            initargs=init_args,
        ) as pool:
            per_row = list(pool.imap(_slice_row_worker, range(rows)))
    else:
        boundary = build_tile_boundary(config.tile_width, config.tile_height)
        per_row = [_slice_row(source, boundary, config, row, cols) for row in range(rows)]

    tiles: List[Tile] = []
    for row_tiles in per_row:
        tiles.extend(row_tiles)
    for i, tile in enumerate(tiles):
        tile.index = config.starting_number + i

    dropped = cols * rows - len(tiles)
    logger.info("Kept %d tiles, dropped %d uniform or empty cells", len(tiles), dropped)
    return tiles

