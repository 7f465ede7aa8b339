"""
Year-Progress Overlay Generator

Pre-renders one dot-grid overlay per day of the year. Overlay N shows N
filled dots (elapsed days) and 365 - N empty dots (remaining days) on
top of the shared background. The wallpaper renderer only ever resizes
these files and adds the text label.

Output:
    <PUBLIC_DIR>/overlays/day-001.png ... day-365.png

Rerunning overwrites every file with identical content.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, List, Optional

from dot_grid import REFERENCE_GRID, TOTAL_DOTS, DotGridRenderer, GridSpec
from settings import Settings

PROGRESS_EVERY = 50


def generate_overlays(
    output_dir: Path,
    background_path: Optional[Path] = None,
    spec: GridSpec = REFERENCE_GRID,
    days: Optional[Iterable[int]] = None,
) -> List[Path]:
    """
    Write overlays for ``days`` (default: every day 1..365) into ``output_dir``.

    Returns the written paths in generation order.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    renderer = DotGridRenderer.from_file(spec, background_path)

    selected = list(days) if days is not None else list(range(1, spec.total_dots + 1))
    for day in selected:
        if not 1 <= day <= spec.total_dots:
            raise ValueError(f"day must be within 1..{spec.total_dots}, got {day}")

    written = []
    for day in selected:
        written.append(renderer.save(day, output_dir))
        if day % PROGRESS_EVERY == 0 or day == selected[-1]:
            print(f"  Generated day {day}/{spec.total_dots}")
    return written


# ─────────────────────────── CLI ──────────────────────────────

def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point. Optional arguments are day numbers to regenerate;
    with none, all 365 overlays are written.
    """
    settings = Settings.from_env()
    args = sys.argv[1:] if argv is None else argv

    try:
        days = [int(a) for a in args] or None
        background = settings.background_path
        print(f"Generating {len(days) if days else TOTAL_DOTS} overlay PNGs -> {settings.overlays_dir}")
        if background.exists():
            print(f"  Background: {background}")
        else:
            print("  Background: plain white canvas")
        generate_overlays(settings.overlays_dir, background, spec=REFERENCE_GRID, days=days)
    except (OSError, ValueError) as err:
        print(f"Generation failed: {err}", file=sys.stderr)
        return 1

    print(f"\nDone. Overlays written to {settings.overlays_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
