"""Public interface for the isometric diamond tile slicer."""

from isotile.config import SlicerConfig, load_config, parse_color
from isotile.errors import ConfigError, MissingInputError, PersistenceError, SlicerError
from isotile.geometry import (
    Point,
    TileBoundary,
    build_tile_boundary,
    is_inside_tile,
    rasterize_line,
    tile_mask,
)
from isotile.grid import compute_cell_offset, compute_grid_dimensions, iter_cells
from isotile.layout import LayoutDocument, LayoutEntry, emit_layout, render_layout_html
from isotile.slicer import Tile, extract_tile, slice_image

__all__ = [
    "ConfigError",
    "LayoutDocument",
    "LayoutEntry",
    "MissingInputError",
    "PersistenceError",
    "Point",
    "SlicerConfig",
    "SlicerError",
    "Tile",
    "TileBoundary",
    "build_tile_boundary",
    "compute_cell_offset",
    "compute_grid_dimensions",
    "emit_layout",
    "extract_tile",
    "is_inside_tile",
    "iter_cells",
    "load_config",
    "parse_color",
    "rasterize_line",
    "render_layout_html",
    "slice_image",
    "tile_mask",
]
