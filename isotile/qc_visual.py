"""Visual QC output for sliced tiles.

Generates inspection-friendly images:
  - Retained tiles pasted back at their source offsets (coverage check)
  - One tile blown up with the diamond boundary drawn over it
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np
from PIL import Image

from isotile.errors import PersistenceError
from isotile.geometry import TileBoundary

logger = logging.getLogger(__name__)

# Boundary overlay colour (red) on previews
OUTLINE_COLOR = (255, 0, 0)
CHECKER_COLORS = ((200, 200, 200), (235, 235, 235))


def render_reassembly(tiles: Sequence, image_width: int, image_height: int) -> np.ndarray:
    """Paste every tile back at its source offset.

    Returns an (image_height, image_width, 4) RGBA array. Pixels no retained
    tile covers stay transparent.
    """
    canvas = Image.new("RGBA", (image_width, image_height), (0, 0, 0, 0))
    for tile in tiles:
        layer = Image.new("RGBA", (image_width, image_height), (0, 0, 0, 0))
        layer.paste(Image.fromarray(tile.image, "RGBA"), (tile.offset.x, tile.offset.y))
        canvas = Image.alpha_composite(canvas, layer)
    return np.array(canvas)


def _checker_background(h: int, w: int, block: int) -> np.ndarray:
    ys, xs = np.indices((h, w))
    pattern = ((ys // block) + (xs // block)) % 2
    bg = np.empty((h, w, 3), dtype=np.float32)
    bg[pattern == 0] = CHECKER_COLORS[0]
    bg[pattern == 1] = CHECKER_COLORS[1]
    return bg


def render_tile_preview(
    tile_image: np.ndarray,
    boundary: TileBoundary,
    scale: int = 8,
    outline_color: Tuple[int, int, int] = OUTLINE_COLOR,
) -> np.ndarray:
    """Nearest-neighbour blow-up of one tile with its boundary in red.

    Transparent pixels are composited over a light checkerboard so the
    diamond edge is visible. Returns an RGB array.
    """
    h, w = tile_image.shape[:2]
    big = cv2.resize(tile_image, (w * scale, h * scale), interpolation=cv2.INTER_NEAREST)

    alpha = big[:, :, 3:4].astype(np.float32) / 255.0
    rgb = big[:, :, :3].astype(np.float32)
    bg = _checker_background(h * scale, w * scale, block=max(scale, 4))
    out = (rgb * alpha + bg * (1 - alpha)).astype(np.uint8)

    # outline cells are drawn hollow so the tile pixel underneath stays visible
    for x, y in boundary.outline_points():
        x0, y0 = x * scale, y * scale
        cv2.rectangle(out, (x0, y0), (x0 + scale - 1, y0 + scale - 1), outline_color, 1)
    return out


def save_qc_images(
    tiles: Sequence,
    image_width: int,
    image_height: int,
    boundary: TileBoundary,
    output_dir: Path,
    preview_index: Optional[int] = None,
) -> list:
    """Write the reassembly and a single-tile preview. Returns written paths."""
    output_dir = Path(output_dir)
    written = []
    images = [("qc_reassembly.png", render_reassembly(tiles, image_width, image_height))]
    if tiles:
        pick = tiles[0] if preview_index is None else tiles[preview_index]
        images.append(("qc_tile_preview.png", render_tile_preview(pick.image, boundary)))

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for name, image in images:
            path = output_dir / name
            Image.fromarray(image).save(path)
            written.append(path)
    except OSError as exc:
        raise PersistenceError(f"Failed to write QC images to {output_dir}: {exc}") from exc

    logger.info("QC images saved: %s", ", ".join(p.name for p in written))
    return written
