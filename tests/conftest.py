from pathlib import Path

import pytest
from PIL import Image

from dot_grid import GridSpec
from generate_overlays import generate_overlays
from wallpaper import LabelRenderer, OverlayStore, WallpaperRenderer

SMALL_GRID = GridSpec(
    width=200,
    height=400,
    left_margin=10,
    right_margin=10,
    grid_top=100,
    grid_height=180,
    dot_radius=3,
)


@pytest.fixture
def small_grid():
    return SMALL_GRID


@pytest.fixture
def gray_background():
    return Image.new("RGB", (SMALL_GRID.width, SMALL_GRID.height), (100, 100, 100))


@pytest.fixture
def overlay_dir(tmp_path):
    """Asset store holding only the days the renderer tests touch."""
    out = tmp_path / "overlays"
    generate_overlays(out, None, spec=SMALL_GRID, days=[1, 2, 365])
    return out


@pytest.fixture
def renderer(overlay_dir, tmp_path):
    return WallpaperRenderer(OverlayStore(overlay_dir), LabelRenderer(tmp_path / "missing.ttf"))


@pytest.fixture
def empty_renderer(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    return WallpaperRenderer(OverlayStore(empty), LabelRenderer(Path("missing.ttf")))
