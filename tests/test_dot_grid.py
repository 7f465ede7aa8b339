import pytest
from PIL import Image

from dot_grid import REFERENCE_GRID, DotGridRenderer, GridSpec, LayoutEngine, overlay_filename


def test_reference_geometry():
    spec = REFERENCE_GRID
    assert (spec.columns, spec.rows) == (20, 19)
    assert spec.columns * spec.rows >= 365
    assert spec.grid_width == 1178
    assert spec.h_spacing == 62
    assert spec.v_spacing == 62


def test_rejects_single_column():
    with pytest.raises(ValueError):
        GridSpec(columns=1)


@pytest.mark.parametrize(
    "index,expected",
    [(0, (56, 1062)), (19, (1234, 1062)), (20, (56, 1124)), (364, (304, 2178))],
)
def test_centers_are_row_major(index, expected):
    assert LayoutEngine.center(REFERENCE_GRID, index) == expected


def test_centers_stay_on_canvas():
    for x, y in LayoutEngine.centers(REFERENCE_GRID):
        assert REFERENCE_GRID.dot_radius <= x <= REFERENCE_GRID.width - REFERENCE_GRID.dot_radius
        assert REFERENCE_GRID.dot_radius <= y <= REFERENCE_GRID.height - REFERENCE_GRID.dot_radius


@pytest.mark.parametrize("filled", [0, 1, 100, 364, 365])
def test_fill_rule(filled):
    states = LayoutEngine.dot_states(REFERENCE_GRID, filled)
    assert len(states) == 365
    assert all(states[i] == (i < filled) for i in range(365))


def test_overlay_filename():
    assert overlay_filename(7) == "day-007.png"
    assert overlay_filename(365) == "day-365.png"


def _dot_pixels(image, spec):
    return [image.getpixel(c) for c in LayoutEngine.centers(spec)]


@pytest.mark.parametrize("filled", [0, 42, 365])
def test_rendered_dots_match_fill_rule(small_grid, gray_background, filled):
    image = DotGridRenderer(small_grid, gray_background).render(filled)
    assert image.mode == "RGB"
    assert image.size == (small_grid.width, small_grid.height)
    for i, (r, g, b) in enumerate(_dot_pixels(image, small_grid)):
        if i < filled:
            assert max(r, g, b) < 60, i
        else:
            assert min(r, g, b) > 120, i


def test_empty_dots_are_translucent(small_grid, gray_background):
    image = DotGridRenderer(small_grid, gray_background).render(0)
    r, _, _ = image.getpixel(LayoutEngine.center(small_grid, 0))
    assert 100 < r < 255


def test_background_shows_between_dots(small_grid):
    red = Image.new("RGB", (small_grid.width, small_grid.height), (200, 0, 0))
    image = DotGridRenderer(small_grid, red).render(10)
    assert image.getpixel((1, 1)) == (200, 0, 0)


def test_background_is_fitted_to_canvas(small_grid):
    big = Image.new("RGB", (50, 50), (0, 0, 200))
    image = DotGridRenderer(small_grid, big).render(1)
    assert image.size == (small_grid.width, small_grid.height)
    assert image.getpixel((1, 1)) == (0, 0, 200)


def test_plain_canvas_without_background(small_grid, tmp_path):
    renderer = DotGridRenderer.from_file(small_grid, tmp_path / "nope.png")
    assert renderer.render(1).getpixel((1, 1)) == (255, 255, 255)


def test_background_from_file(small_grid, tmp_path):
    path = tmp_path / "bg.png"
    Image.new("RGB", (20, 40), (0, 120, 0)).save(path)
    renderer = DotGridRenderer.from_file(small_grid, path)
    assert renderer.render(1).getpixel((1, 1)) == (0, 120, 0)


def test_render_is_deterministic(small_grid, gray_background):
    renderer = DotGridRenderer(small_grid, gray_background)
    assert renderer.render(200).tobytes() == renderer.render(200).tobytes()


def test_empty_dots_visible_on_plain_canvas(small_grid):
    image = DotGridRenderer(small_grid).render(0)
    canvas = image.getpixel((1, 1))
    empty = image.getpixel(LayoutEngine.center(small_grid, 0))
    assert canvas == (255, 255, 255)
    assert empty != canvas
    assert empty == (0xD1, 0xD1, 0xD6)


def test_reference_plain_canvas_from_missing_file(tmp_path):
    image = DotGridRenderer.from_file(REFERENCE_GRID, tmp_path / "background.png").render(0)
    assert image.getpixel((56, 1062)) != image.getpixel((5, 5))
