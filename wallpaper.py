"""
On-demand year-progress wallpaper renderer.

Architecture:
    DeviceProfile     - named model -> screen resolution
    RenderRequest     - model, date override, timezone, output format
    OverlayStore      - pre-rendered day-NNN.png files (see generate_overlays)
    LabelRenderer     - "N Days Left  •  P%" text layer with drop shadow
    WallpaperRenderer - request -> encoded image bytes + day metrics
    main()            - render one wallpaper to a file
"""

from __future__ import annotations

import argparse
import io
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from dot_grid import PNG_COMPRESS_LEVEL, REFERENCE_GRID, TOTAL_DOTS, overlay_filename
from settings import Settings
from year_progress import DayMetrics, InvalidDateError, resolve_date

logger = logging.getLogger(__name__)

ColorRGBA = Tuple[int, int, int, int]

JPEG_QUALITY = 92
CACHE_CONTROL = "no-store, no-cache, must-revalidate"


# ─────────────────────────── Errors ───────────────────────────

class WallpaperError(Exception):
    """Base error; ``status`` is the HTTP-equivalent code for the caller."""
    status = 500

    def to_dict(self) -> dict:
        return {"error": str(self)}


class BadRequestError(WallpaperError):
    status = 400


class UnsupportedModelError(BadRequestError):
    pass


class RenderError(WallpaperError):
    """Internal failure; the underlying cause, if any, is ``__cause__``."""
    status = 500

    def to_dict(self) -> dict:
        body = {"error": "Internal server error", "message": str(self)}
        if self.__cause__ is not None:
            body["cause"] = repr(self.__cause__)
        return body


class OverlayMissingError(RenderError):
    pass


# ─────────────────────────── Device Profiles ──────────────────

@dataclass(frozen=True)
class DeviceProfile:
    name: str
    width: int
    height: int

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)


DEFAULT_MODEL = "default"

DEVICE_PROFILES: Mapping[str, DeviceProfile] = MappingProxyType({
    "iphone16pro": DeviceProfile("iphone16pro", 1290, 2796),
    "iphone15": DeviceProfile("iphone15", 1179, 2556),
    "iphone14pro": DeviceProfile("iphone14pro", 1290, 2796),
    "iphone13": DeviceProfile("iphone13", 1170, 2532),
    DEFAULT_MODEL: DeviceProfile(DEFAULT_MODEL, 1290, 2796),
})


def resolve_device(model: Optional[str]) -> DeviceProfile:
    profile = DEVICE_PROFILES.get(DEFAULT_MODEL if model is None else model)
    if profile is None:
        raise UnsupportedModelError(
            f"Unsupported model: {model}. Valid values: {', '.join(DEVICE_PROFILES)}"
        )
    return profile


# ─────────────────────────── Request / Result ─────────────────

@dataclass(frozen=True)
class RenderRequest:
    model: str = DEFAULT_MODEL
    date: Optional[str] = None
    tz: Optional[str] = None
    format: str = "jpg"

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> RenderRequest:
        """Build a request from query-string style parameters."""
        return cls(
            model=query.get("model", DEFAULT_MODEL),
            date=query.get("date") or None,
            tz=query.get("tz") or None,
            format=query.get("format") or "jpg",
        )

    @property
    def is_png(self) -> bool:
        return self.format.lower() == "png"


@dataclass(frozen=True)
class RenderResult:
    image: bytes
    content_type: str
    metrics: DayMetrics
    overlay_day: int

    @property
    def headers(self) -> Dict[str, str]:
        """Metadata for the transport layer to attach to the response."""
        return {
            "Content-Type": self.content_type,
            "Cache-Control": CACHE_CONTROL,
            "X-Day-Of-Year": str(self.metrics.day_of_year),
            "X-Days-Left": str(self.metrics.days_left),
            "X-Percent-Elapsed": self.metrics.percent_elapsed,
        }


# ─────────────────────────── Overlay Store ────────────────────

class OverlayStore:
    """Read-only view of the pre-rendered overlays in a flat directory."""

    def __init__(self, directory: Path):
        self.directory = directory

    @staticmethod
    def overlay_day(day_of_year: int) -> int:
        """Day 366 of a leap year reuses the day-365 overlay."""
        return min(day_of_year, TOTAL_DOTS)

    def path_for(self, day_of_year: int) -> Path:
        return self.directory / overlay_filename(self.overlay_day(day_of_year))

    def load(self, day_of_year: int) -> Image.Image:
        path = self.path_for(day_of_year)
        if not path.exists():
            raise OverlayMissingError(
                f"No overlay image found for day {day_of_year} ({path}). "
                "Run generate_overlays to rebuild the asset store."
            )
        try:
            with Image.open(path) as src:
                return src.convert("RGB")
        except OSError as exc:
            raise RenderError(f"Could not decode overlay {path}") from exc


# ─────────────────────────── Label ────────────────────────────

_font_cache: Dict[Tuple[str, int], ImageFont.FreeTypeFont] = {}

# System fonts tried when FONT_PATH is missing, before Pillow's default
_FALLBACK_FONTS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
    "C:/Windows/Fonts/segoeuib.ttf",
]

BULLET = "•"
SEPARATORS = (BULLET, "·", "|", "-")


def _find_fallback() -> Optional[str]:
    for candidate in _FALLBACK_FONTS:
        if Path(candidate).exists():
            return candidate
    return None


def load_font(path: Path, size: int) -> ImageFont.FreeTypeFont:
    """Load the label font at ``size`` once per process."""
    key = (str(path), size)
    if key not in _font_cache:
        if path.exists():
            _font_cache[key] = ImageFont.truetype(str(path), size)
        else:
            fallback = _find_fallback()
            logger.warning("Font %s not found, using %s", path, fallback or "Pillow's default font")
            if fallback:
                _font_cache[key] = ImageFont.truetype(fallback, size)
            else:
                _font_cache[key] = ImageFont.load_default(size)
    return _font_cache[key]


def has_glyph(font: ImageFont.FreeTypeFont, char: str) -> bool:
    """False when ``char`` would draw as the font's missing-glyph box."""
    mask = font.getmask(char)
    missing = font.getmask("\uffff")
    return (mask.size, bytes(mask)) != (missing.size, bytes(missing))


def fit_separator(text: str, font: ImageFont.FreeTypeFont) -> str:
    """Swap the bullet for the first separator the font can actually draw."""
    if BULLET not in text:
        return text
    for separator in SEPARATORS:
        if has_glyph(font, separator):
            return text.replace(BULLET, separator)
    return text


def label_text(metrics: DayMetrics) -> str:
    return f"{metrics.days_left} Days Left  {BULLET}  {metrics.percent_elapsed}%"


@dataclass(frozen=True)
class LabelStyle:
    """Text label placement, relative to the reference canvas width."""
    font_size: int = 44
    reference_width: int = REFERENCE_GRID.width
    y_fraction: float = 0.91
    color: ColorRGBA = (255, 255, 255, 235)
    shadow_color: ColorRGBA = (0, 0, 0, 150)
    shadow_offset_ratio: float = 0.06
    shadow_blur_ratio: float = 0.12

    def font_size_for(self, width: int) -> int:
        return max(1, round(self.font_size * width / self.reference_width))


class LabelRenderer:
    """Draws the label centered on a transparent layer the size of the image."""

    def __init__(self, font_path: Path, style: Optional[LabelStyle] = None):
        self.font_path = font_path
        self.style = style or LabelStyle()

    def render(self, text: str, size: Tuple[int, int]) -> Image.Image:
        width, height = size
        font_size = self.style.font_size_for(width)
        font = load_font(self.font_path, font_size)
        text = fit_separator(text, font)
        anchor_xy = (width / 2, round(height * self.style.y_fraction))

        offset = max(1, round(font_size * self.style.shadow_offset_ratio))
        shadow = Image.new("RGBA", size, (0, 0, 0, 0))
        ImageDraw.Draw(shadow).text(
            (anchor_xy[0] + offset, anchor_xy[1] + offset),
            text, font=font, fill=self.style.shadow_color, anchor="mm",
        )
        shadow = shadow.filter(ImageFilter.GaussianBlur(font_size * self.style.shadow_blur_ratio))

        layer = Image.new("RGBA", size, (0, 0, 0, 0))
        ImageDraw.Draw(layer).text(anchor_xy, text, font=font, fill=self.style.color, anchor="mm")
        return Image.alpha_composite(shadow, layer)


# ─────────────────────────── Renderer ─────────────────────────

class WallpaperRenderer:
    """
    Turns a RenderRequest into an encoded wallpaper.

    Steps: device lookup, date and metrics, overlay selection, stretch to
    the device resolution, label composite, encode. The output depends
    only on the request and the static assets.
    """

    def __init__(self, store: OverlayStore, labels: LabelRenderer):
        self.store = store
        self.labels = labels

    @classmethod
    def from_settings(cls, settings: Settings) -> WallpaperRenderer:
        return cls(OverlayStore(settings.overlays_dir), LabelRenderer(settings.font_path))

    def render(self, request: RenderRequest, now: Optional[datetime] = None) -> RenderResult:
        device = resolve_device(request.model)
        try:
            today = resolve_date(request.date, request.tz, now=now)
        except InvalidDateError as exc:
            raise BadRequestError(str(exc)) from exc

        metrics = DayMetrics.for_date(today)
        overlay_day = self.store.overlay_day(metrics.day_of_year)
        logger.debug(
            "Rendering %s for %s: day %d/%d, overlay %d",
            device.name, today.isoformat(), metrics.day_of_year, metrics.days_in_year, overlay_day,
        )

        overlay = self.store.load(metrics.day_of_year)
        try:
            image = self.compose(overlay, device, metrics)
            data = self.encode(image, request.is_png)
        except OSError as exc:
            logger.error("Wallpaper render failed: %s", exc)
            raise RenderError(f"Failed to render wallpaper: {exc}") from exc

        return RenderResult(
            image=data,
            content_type="image/png" if request.is_png else "image/jpeg",
            metrics=metrics,
            overlay_day=overlay_day,
        )

    def compose(self, overlay: Image.Image, device: DeviceProfile, metrics: DayMetrics) -> Image.Image:
        """Stretch the overlay to the device and put the label on top."""
        base = overlay.convert("RGBA")
        if base.size != device.size:
            base = base.resize(device.size, Image.Resampling.LANCZOS)
        label = self.labels.render(label_text(metrics), device.size)
        return Image.alpha_composite(base, label).convert("RGB")

    @staticmethod
    def encode(image: Image.Image, png: bool) -> bytes:
        buf = io.BytesIO()
        if png:
            image.save(buf, format="PNG", compress_level=PNG_COMPRESS_LEVEL)
        else:
            image.save(buf, format="JPEG", quality=JPEG_QUALITY)
        return buf.getvalue()


# ─────────────────────────── CLI ──────────────────────────────

def main(argv: Optional[List[str]] = None) -> int:
    """Render a single wallpaper to a file and print its metrics."""
    parser = argparse.ArgumentParser(description="Render a year-progress wallpaper.")
    parser.add_argument("--model", default=DEFAULT_MODEL, help=f"one of: {', '.join(DEVICE_PROFILES)}")
    parser.add_argument("--date", help="YYYY-MM-DD override")
    parser.add_argument("--tz", help="IANA timezone, e.g. Asia/Dubai (default: UTC)")
    parser.add_argument("--format", default="jpg", choices=["jpg", "png"])
    parser.add_argument("--output", type=Path, help="output file (default: wallpaper.<format>)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(message)s")

    request = RenderRequest(model=args.model, date=args.date, tz=args.tz, format=args.format)
    renderer = WallpaperRenderer.from_settings(Settings.from_env())
    try:
        result = renderer.render(request)
    except WallpaperError as err:
        print(f"Error ({err.status}): {err}", file=sys.stderr)
        return 1

    output = args.output or Path(f"wallpaper.{args.format}")
    output.write_bytes(result.image)
    print(f"  Wrote: {output}")
    for name, value in result.headers.items():
        print(f"  {name}: {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
