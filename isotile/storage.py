"""Load source images and persist slicer artefacts.

Output layout:
  <output_dir>/
    0.png, 1.png, ...     # retained tiles, named by config.filename_format
    grid.png              # debug tile outline
    layout.html           # absolute-positioned reassembly page
    layout.json           # same placement data for other renderers
"""

import json
import logging
from pathlib import Path
from typing import List, Sequence, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from isotile.config import SlicerConfig
from isotile.errors import MissingInputError, PersistenceError
from isotile.layout import LayoutDocument, render_layout_html
from isotile.slicer import Tile

logger = logging.getLogger(__name__)

LAYOUT_JSON_NAME = "layout.json"


def load_image(path: Union[str, Path]) -> np.ndarray:
    """Decode ``path`` into an (H, W, 4) uint8 RGBA array."""
    path = Path(path)
    if not path.is_file():
        raise MissingInputError(f"Image path could not be found: {path}")
    try:
        with Image.open(path) as pil_img:
            rgba = pil_img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise MissingInputError(f"Image could not be decoded: {path} ({exc})") from exc
    return np.array(rgba)


def _ensure_dir(output_dir: Path) -> Path:
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PersistenceError(f"Cannot create output directory {output_dir}: {exc}") from exc
    return output_dir


def _save_rgba(image: np.ndarray, path: Path) -> Path:
    try:
        Image.fromarray(image, "RGBA").save(path)
    except OSError as exc:
        raise PersistenceError(f"Failed to write {path}: {exc}") from exc
    return path


def _write_text(path: Path, text: str) -> Path:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Failed to write {path}: {exc}") from exc
    return path


def save_tiles(tiles: Sequence[Tile], output_dir: Path, config: SlicerConfig) -> List[Path]:
    """Write every tile as a PNG; returns the paths in output order."""
    output_dir = _ensure_dir(Path(output_dir))
    saved = [
        _save_rgba(tile.image, output_dir / config.tile_filename(tile.index))
        for tile in tiles
    ]
    logger.info("Saved %d tiles → %s", len(saved), output_dir)
    return saved


def save_grid_image(grid: np.ndarray, output_dir: Path, config: SlicerConfig) -> Path:
    output_dir = _ensure_dir(Path(output_dir))
    return _save_rgba(grid, output_dir / config.grid_filename)


def write_layout_html(document: LayoutDocument, output_dir: Path,
                      config: SlicerConfig) -> Path:
    output_dir = _ensure_dir(Path(output_dir))
    path = _write_text(output_dir / config.layout_filename, render_layout_html(document))
    logger.info("Layout page written: %s", path)
    return path


def write_layout_json(document: LayoutDocument, output_dir: Path) -> Path:
    output_dir = _ensure_dir(Path(output_dir))
    return _write_text(
        output_dir / LAYOUT_JSON_NAME,
        json.dumps(document.to_dict(), indent=2) + "\n",
    )
