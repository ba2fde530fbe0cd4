"""Command line interface for the isometric tile slicer.

Usage:
    python -m isotile.cli slice <image> -o <dir>  [--tile-width 110] [--tile-height 78]
                                                  [--background transparent] [--name-format "{0}"]
                                                  [--start 0] [--workers 1] [--config cfg.json]
                                                  [--no-html] [--no-json] [--qc]
    python -m isotile.cli grid -o <dir>           [--tile-width 110] [--tile-height 78]

Subcommands:
  slice — Cut an image into diamond tiles, write tiles + grid.png + layout files
  grid  — Write only the debug tile outline image
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional

from isotile.config import SlicerConfig, load_config, parse_color
from isotile.errors import ConfigError, MissingInputError, PersistenceError, SlicerError
from isotile.geometry import build_tile_boundary
from isotile.grid import compute_grid_dimensions
from isotile.layout import emit_layout, render_grid_image
from isotile.slicer import slice_image
from isotile.storage import (
    load_image,
    save_grid_image,
    save_tiles,
    write_layout_html,
    write_layout_json,
)

logger = logging.getLogger("isotile")


def _setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@dataclass
class SliceReport:
    """What a :func:`process` run produced."""
    image_path: Path
    cols: int = 0
    rows: int = 0
    retained: int = 0
    tile_paths: List[Path] = field(default_factory=list)
    grid_path: Optional[Path] = None
    html_path: Optional[Path] = None
    json_path: Optional[Path] = None
    qc_paths: List[Path] = field(default_factory=list)

    @property
    def candidates(self) -> int:
        return self.cols * self.rows

    @property
    def dropped(self) -> int:
        return self.candidates - self.retained


def process(
    image_path: Path,
    output_dir: Path,
    config: Optional[SlicerConfig] = None,
    workers: int = 1,
    write_html: bool = True,
    write_json: bool = True,
    qc: bool = False,
) -> SliceReport:
    """Load → slice → save tiles, grid image and layout files.

    Raises MissingInputError before anything is written if the image is
    missing or unreadable.
    """
    config = (config or SlicerConfig()).validate()
    image_path = Path(image_path)
    output_dir = Path(output_dir)

    source = load_image(image_path)
    report = SliceReport(image_path=image_path)
    h, w = source.shape[:2]
    report.cols, report.rows = compute_grid_dimensions(
        w, h, config.tile_width, config.tile_height,
    )

    tiles = slice_image(source, config, workers=workers)
    report.retained = len(tiles)

    boundary = build_tile_boundary(config.tile_width, config.tile_height)
    document = emit_layout(tiles, config, boundary)

    report.tile_paths = save_tiles(tiles, output_dir, config)
    report.grid_path = save_grid_image(document.grid_image, output_dir, config)
    if write_html:
        report.html_path = write_layout_html(document, output_dir, config)
    if write_json:
        report.json_path = write_layout_json(document, output_dir)
    if qc:
        from isotile.qc_visual import save_qc_images

        report.qc_paths = save_qc_images(tiles, w, h, boundary, output_dir)

    return report


def _config_from_args(args) -> SlicerConfig:
    config = load_config(args.config) if args.config else SlicerConfig()
    overrides = {}
    if args.tile_width is not None:
        overrides["tile_width"] = args.tile_width
    if args.tile_height is not None:
        overrides["tile_height"] = args.tile_height
    if getattr(args, "background", None) is not None:
        overrides["background"] = parse_color(args.background)
    if getattr(args, "name_format", None) is not None:
        overrides["filename_format"] = args.name_format
    if getattr(args, "start", None) is not None:
        overrides["starting_number"] = args.start
    return replace(config, **overrides).validate()


# ---- Subcommand: slice ----

def cmd_slice(args):
    try:
        config = _config_from_args(args)
        report = process(
            Path(args.image),
            Path(args.output),
            config,
            workers=args.workers,
            write_html=not args.no_html,
            write_json=not args.no_json,
            qc=args.qc,
        )
    except (MissingInputError, ConfigError) as exc:
        logger.error("%s", exc)
        return 1
    except PersistenceError as exc:
        logger.error("%s", exc)
        return 2

    logger.info(
        "Sliced %s: %d x %d grid, %d tiles kept, %d dropped → %s",
        report.image_path.name, report.cols, report.rows,
        report.retained, report.dropped, args.output,
    )
    return 0


# ---- Subcommand: grid ----

def cmd_grid(args):
    try:
        config = _config_from_args(args)
        boundary = build_tile_boundary(config.tile_width, config.tile_height)
        path = save_grid_image(
            render_grid_image(boundary, config.grid_color), Path(args.output), config,
        )
    except SlicerError as exc:
        logger.error("%s", exc)
        return 2 if isinstance(exc, PersistenceError) else 1

    logger.info("Grid image written: %s", path)
    return 0


def _add_tile_args(parser: argparse.ArgumentParser):
    parser.add_argument("-o", "--output", required=True, help="Output directory")
    parser.add_argument("--tile-width", type=int, default=None,
                        help="Tile width in pixels (default: 110)")
    parser.add_argument("--tile-height", type=int, default=None,
                        help="Tile height in pixels (default: 78)")
    parser.add_argument("--config", default=None,
                        help="JSON config file; command line values override it")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="isotile",
        description="Slice images into staggered isometric diamond tiles",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # -- slice --
    p_slice = sub.add_parser("slice", help="Slice an image into diamond tiles")
    p_slice.add_argument("image", help="Source image")
    _add_tile_args(p_slice)
    p_slice.add_argument("--background", default=None,
                         help="Tile/page background colour (default: transparent)")
    p_slice.add_argument("--name-format", default=None,
                         help="Tile filename template, .png is appended (default: {0})")
    p_slice.add_argument("--start", type=int, default=None,
                         help="First tile number (default: 0)")
    p_slice.add_argument("--workers", type=int, default=1,
                         help="Processes used to scan grid rows (default: 1)")
    p_slice.add_argument("--no-html", action="store_true", help="Skip layout.html")
    p_slice.add_argument("--no-json", action="store_true", help="Skip layout.json")
    p_slice.add_argument("--qc", action="store_true",
                         help="Also write reassembly and tile preview QC images")
    p_slice.set_defaults(func=cmd_slice)

    # -- grid --
    p_grid = sub.add_parser("grid", help="Write only the debug tile outline")
    _add_tile_args(p_grid)
    p_grid.set_defaults(func=cmd_grid)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.debug)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
