"""
Dot-grid geometry and rendering for the year-progress overlays.

Architecture:
    GridSpec        - fixed canvas size, grid extent, dot size and colors
    LayoutEngine    - dot centers derived from a GridSpec
    DotGridRenderer - draws one overlay (f filled dots) over a background

Dots are drawn on a transparent layer and alpha-composited over the
background raster, so every overlay shares the same background and only
the dot states differ from day to day.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw

# ─────────────────────────── Types ────────────────────────────

Color = Tuple[int, int, int]
ColorRGBA = Tuple[int, int, int, int]
Point = Tuple[int, int]

TOTAL_DOTS = 365            # Days in a standard year; day 366 reuses day 365
PNG_COMPRESS_LEVEL = 6


def overlay_filename(day_of_year: int) -> str:
    """Asset name for a day of year, e.g. ``day-007.png``."""
    return f"day-{day_of_year:03d}.png"


# ─────────────────────────── Grid Spec ────────────────────────

@dataclass(frozen=True)
class GridSpec:
    """
    Layout of the dot grid on the reference canvas.

    Defaults reproduce the reference overlay: a 1290x2796 canvas with a
    20-column grid, 62 px between dot centers in both directions, the
    first row at 38% of the canvas height.
    """
    width: int = 1290
    height: int = 2796
    columns: int = 20
    total_dots: int = TOTAL_DOTS
    left_margin: int = 56
    right_margin: int = 56
    grid_top: int = 1062
    grid_height: int = 1116
    dot_radius: int = 14
    filled_color: ColorRGBA = (0x1C, 0x1C, 0x1E, 255)   # near-black, elapsed days
    empty_color: ColorRGBA = (255, 255, 255, 77)        # white at ~30%, remaining days
    background_color: Color = (255, 255, 255)           # plain canvas, used when no background image
    canvas_empty_color: ColorRGBA = (0xD1, 0xD1, 0xD6, 255)  # light grey, remaining days on the plain canvas

    def __post_init__(self) -> None:
        if self.columns < 2 or self.rows < 2:
            raise ValueError("grid needs at least 2 columns and 2 rows")
        if self.columns * self.rows < self.total_dots:
            raise ValueError(
                f"{self.columns}x{self.rows} grid cannot hold {self.total_dots} dots"
            )

    @property
    def rows(self) -> int:
        return math.ceil(self.total_dots / self.columns)

    @property
    def grid_width(self) -> int:
        return self.width - self.left_margin - self.right_margin

    @property
    def h_spacing(self) -> int:
        return round(self.grid_width / (self.columns - 1))

    @property
    def v_spacing(self) -> int:
        return round(self.grid_height / (self.rows - 1))


REFERENCE_GRID = GridSpec()


# ─────────────────────────── Layout Engine ────────────────────

class LayoutEngine:
    """Row-major dot positions: dot ``i`` sits at column ``i % columns``."""

    @classmethod
    def center(cls, spec: GridSpec, index: int) -> Point:
        col = index % spec.columns
        row = index // spec.columns
        return (
            spec.left_margin + col * spec.h_spacing,
            spec.grid_top + row * spec.v_spacing,
        )

    @classmethod
    def centers(cls, spec: GridSpec) -> List[Point]:
        return [cls.center(spec, i) for i in range(spec.total_dots)]

    @staticmethod
    def dot_states(spec: GridSpec, filled_count: int) -> List[bool]:
        """True for each filled dot; dot ``i`` is filled iff ``i < filled_count``."""
        return [i < filled_count for i in range(spec.total_dots)]


# ─────────────────────────── Renderer ─────────────────────────

class DotGridRenderer:
    """
    Draws overlays for a single GridSpec over a single background.

    The background is resized once to the grid canvas and shared by
    every overlay this renderer produces. Without a background image
    the dots go on an opaque plain canvas, and empty dots switch to the
    opaque grey so they stay visible on it.
    """

    def __init__(self, spec: GridSpec = REFERENCE_GRID, background: Optional[Image.Image] = None):
        self.spec = spec
        if background is None:
            base = Image.new("RGBA", (spec.width, spec.height), spec.background_color + (255,))
            self.empty_color = spec.canvas_empty_color
        else:
            base = background.convert("RGBA")
            if base.size != (spec.width, spec.height):
                base = base.resize((spec.width, spec.height), Image.Resampling.LANCZOS)
            self.empty_color = spec.empty_color
        self._background = base

    @classmethod
    def from_file(cls, spec: GridSpec, background_path: Optional[Path]) -> DotGridRenderer:
        """Load the background from disk; a missing file means a plain canvas."""
        if background_path is None or not background_path.exists():
            return cls(spec)
        with Image.open(background_path) as bg:
            bg.load()
            return cls(spec, bg)

    def render(self, filled_count: int) -> Image.Image:
        """
        Produce the overlay for ``filled_count`` elapsed days.

        Returns:
            PIL Image in RGB mode at the grid canvas size
        """
        layer = Image.new("RGBA", self._background.size, (0, 0, 0, 0))
        self._draw_dots(ImageDraw.Draw(layer), filled_count)
        return Image.alpha_composite(self._background, layer).convert("RGB")

    def _draw_dots(self, draw: ImageDraw.ImageDraw, filled_count: int) -> None:
        s = self.spec
        r = s.dot_radius
        states = LayoutEngine.dot_states(s, filled_count)
        for (cx, cy), filled in zip(LayoutEngine.centers(s), states):
            draw.ellipse(
                (cx - r, cy - r, cx + r, cy + r),
                fill=s.filled_color if filled else self.empty_color,
            )

    def save(self, filled_count: int, output_dir: Path) -> Path:
        """Render and write ``day-NNN.png``; overwrites any existing file."""
        path = output_dir / overlay_filename(filled_count)
        self.render(filled_count).save(path, format="PNG", compress_level=PNG_COMPRESS_LEVEL)
        return path
