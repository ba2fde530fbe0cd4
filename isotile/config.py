"""Slicer configuration: tile dimensions, colours, output naming."""

import json
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Sequence, Tuple, Union

from PIL import ImageColor

from isotile.errors import ConfigError

Color = Tuple[int, int, int, int]

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_TILE_WIDTH = 110
DEFAULT_TILE_HEIGHT = 78

# Smallest tile that still has four distinct diamond anchors
MIN_TILE_PX = 2

TRANSPARENT: Color = (0, 0, 0, 0)
GRID_LINE_COLOR: Color = (0, 255, 0, 100)


def parse_color(value: Union[str, Sequence[int]]) -> Color:
    """Turn user input into an RGBA tuple.

    Accepts anything ``PIL.ImageColor`` understands (``"#rrggbb"``,
    ``"#rrggbbaa"``, ``"rgb(...)"``, CSS names), the word ``transparent``,
    or a 3/4-element sequence of ints.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.lower() == "transparent":
            return TRANSPARENT
        try:
            rgba = ImageColor.getcolor(text, "RGBA")
        except ValueError as exc:
            raise ConfigError(f"Unrecognised colour: {value!r}") from exc
        return tuple(int(c) for c in rgba)  # type: ignore[return-value]

    try:
        components = [int(c) for c in value]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Unrecognised colour: {value!r}") from exc
    if len(components) == 3:
        components.append(255)
    if len(components) != 4 or any(c < 0 or c > 255 for c in components):
        raise ConfigError(f"Colour must have 3 or 4 components in 0..255: {value!r}")
    return tuple(components)  # type: ignore[return-value]


def css_color(color: Color) -> str:
    """CSS ``rgba()`` notation for an RGBA tuple."""
    r, g, b, a = color
    alpha = round(a / 255.0, 3)
    return f"rgba({r}, {g}, {b}, {alpha:g})"


@dataclass(frozen=True)
class SlicerConfig:
    """Immutable configuration shared by the grid, boundary and extractor.

    Change the tile size through :meth:`with_tile_size`, which hands back a
    new value; anything derived from the old dimensions must be rebuilt.
    """
    tile_width: int = DEFAULT_TILE_WIDTH
    tile_height: int = DEFAULT_TILE_HEIGHT
    background: Color = TRANSPARENT

    # Output naming
    filename_format: str = "{0}"      # str.format template, ".png" is appended
    starting_number: int = 0
    grid_filename: str = "grid.png"
    layout_filename: str = "layout.html"

    # Debug grid
    grid_color: Color = GRID_LINE_COLOR

    def validate(self) -> "SlicerConfig":
        for name in ("tile_width", "tile_height", "starting_number"):
            if not isinstance(getattr(self, name), int):
                raise ConfigError(f"{name} must be an integer, got {getattr(self, name)!r}")
        if self.tile_width < MIN_TILE_PX or self.tile_height < MIN_TILE_PX:
            raise ConfigError(
                f"Tile size must be at least {MIN_TILE_PX}x{MIN_TILE_PX}, "
                f"got {self.tile_width}x{self.tile_height}"
            )
        if self.starting_number < 0:
            raise ConfigError(f"Starting number must be >= 0, got {self.starting_number}")
        try:
            self.filename_format.format(self.starting_number)
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
            raise ConfigError(
                f"Filename format {self.filename_format!r} cannot format a number: {exc}"
            ) from exc
        for name in ("background", "grid_color"):
            parse_color(getattr(self, name))
        return self

    def with_tile_size(self, width: int, height: int) -> "SlicerConfig":
        return replace(self, tile_width=width, tile_height=height).validate()

    def tile_filename(self, number: int) -> str:
        return self.filename_format.format(number) + ".png"

    def to_dict(self) -> dict:
        d = asdict(self)
        d["background"] = list(self.background)
        d["grid_color"] = list(self.grid_color)
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "SlicerConfig":
        kwargs = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        for key in ("background", "grid_color"):
            if key in kwargs:
                kwargs[key] = parse_color(kwargs[key])
        for key in ("tile_width", "tile_height", "starting_number"):
            if key in kwargs:
                try:
                    kwargs[key] = int(kwargs[key])
                except (TypeError, ValueError) as exc:
                    raise ConfigError(f"{key} must be an integer, got {kwargs[key]!r}") from exc
        return cls(**kwargs).validate()


def load_config(path: Union[str, Path]) -> SlicerConfig:
    """Read a :class:`SlicerConfig` from a JSON file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return SlicerConfig.from_dict(data)
