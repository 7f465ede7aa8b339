from pathlib import Path

from settings import Settings


def test_defaults():
    s = Settings.from_env({})
    assert s.public_dir == Path("public")
    assert s.overlays_dir == Path("public/overlays")
    assert s.background_path == Path("public/background.png")
    assert s.font_path == Path("public/fonts/label.ttf")


def test_overrides():
    s = Settings.from_env({"PUBLIC_DIR": "/srv/assets", "FONT_PATH": "/fonts/Inter.ttf"})
    assert s.overlays_dir == Path("/srv/assets/overlays")
    assert s.background_path == Path("/srv/assets/background.png")
    assert s.font_path == Path("/fonts/Inter.ttf")
