"""
Asset locations, read once from the environment.

    PUBLIC_DIR       root of the static assets            (default: public)
    BACKGROUND_PATH  background raster for the generator  (default: <PUBLIC_DIR>/background.png)
    FONT_PATH        font used for the wallpaper label    (default: <PUBLIC_DIR>/fonts/label.ttf)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

OVERLAYS_SUBDIR = "overlays"


@dataclass(frozen=True)
class Settings:
    public_dir: Path
    background_path: Path
    font_path: Path

    @property
    def overlays_dir(self) -> Path:
        return self.public_dir / OVERLAYS_SUBDIR

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        env = os.environ if environ is None else environ
        public_dir = Path(env.get("PUBLIC_DIR", "public"))
        background = env.get("BACKGROUND_PATH")
        font = env.get("FONT_PATH")
        return cls(
            public_dir=public_dir,
            background_path=Path(background) if background else public_dir / "background.png",
            font_path=Path(font) if font else public_dir / "fonts" / "label.ttf",
        )
