"""Reassembly layout for retained tiles.

Placement lives in an overlay space at twice the source offset plus half a
tile (one full tile after doubling), which lets the staggered rows interlock
when the tiles are shown at full scale in a viewer. The grid image is one
transparent tile with only the four diamond edges drawn.
"""

import html
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from isotile.config import Color, SlicerConfig, css_color
from isotile.geometry import TileBoundary, build_tile_boundary
from isotile.slicer import Tile


@dataclass
class LayoutEntry:
    """Where one tile goes in the overlay."""
    filename: str
    index: int
    row: int
    col: int
    top: int
    left: int

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "index": int(self.index),
            "row": int(self.row),
            "col": int(self.col),
            "top": int(self.top),
            "left": int(self.left),
        }


@dataclass
class LayoutDocument:
    """Everything an external writer needs to rebuild the tiled view."""
    tile_width: int
    tile_height: int
    background: Color
    grid_filename: str
    grid_image: np.ndarray = field(repr=False)
    entries: List[LayoutEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "tile_width": int(self.tile_width),
            "tile_height": int(self.tile_height),
            "background": list(self.background),
            "grid_filename": self.grid_filename,
            "tiles": [e.to_dict() for e in self.entries],
        }


def overlay_position(tile: Tile, tile_width: int, tile_height: int) -> tuple:
    """(top, left) of a tile in the overlay."""
    top = tile.offset.y * 2 + tile_height
    left = tile.offset.x * 2 + tile_width
    return top, left


def render_grid_image(boundary: TileBoundary, color: Color) -> np.ndarray:
    """Transparent (H, W, 4) tile with the four boundary lines drawn."""
    grid = np.zeros((boundary.height, boundary.width, 4), dtype=np.uint8)
    for x, y in boundary.outline_points():
        grid[y, x] = color
    return grid


def emit_layout(
    tiles: Sequence[Tile],
    config: SlicerConfig,
    boundary: Optional[TileBoundary] = None,
) -> LayoutDocument:
    """Build the layout document for ``tiles`` (already in output order)."""
    if boundary is None:
        boundary = build_tile_boundary(config.tile_width, config.tile_height)

    entries = []
    for tile in tiles:
        top, left = overlay_position(tile, config.tile_width, config.tile_height)
        entries.append(LayoutEntry(
            filename=config.tile_filename(tile.index),
            index=tile.index,
            row=tile.row,
            col=tile.col,
            top=top,
            left=left,
        ))

    return LayoutDocument(
        tile_width=config.tile_width,
        tile_height=config.tile_height,
        background=config.background,
        grid_filename=config.grid_filename,
        grid_image=render_grid_image(boundary, config.grid_color),
        entries=entries,
    )


def render_layout_html(document: LayoutDocument) -> str:
    """HTML page placing every tile absolutely, with the grid overlaid."""
    parts = [
        f"<body style='background-color: {css_color(document.background)}; "
        "padding: 0px; border: 0px; margin: 0px;'>",
        "",
    ]
    for entry in document.entries:
        src = html.escape(entry.filename, quote=True)
        title = html.escape(f"{entry.filename} ({entry.col}, {entry.row})", quote=True)
        parts.append(
            f"<img src='{src}' title='{title}' style='"
            "position: absolute;"
            f"top: {entry.top}px;"
            f"left: {entry.left}px"
            "'>"
        )
    grid = html.escape(document.grid_filename, quote=True)
    parts.append(
        f"<div style=\"background-image: url('{grid}'); position: absolute; "
        "top: 0; left: 0; width: 100%; height: 100%; pointer-events: none;\"></div>"
    )
    parts.append("</body>")
    return "\n".join(parts) + "\n"
