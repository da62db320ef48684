"""Fonts and icons used by the badge renderer, loaded once and shared."""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

DEFAULT_ASSETS_DIR = Path(__file__).parent / "assets"

TITLE_FONT_SIZE = 20
SUBTITLE_FONT_SIZE = 24
METRIC_FONT_SIZE = 16
ICON_SIZE = 24

# Drawn icons are rendered this many times larger, then scaled down for smooth edges.
_SUPERSAMPLE = 4

ICON_COLOR = (255, 255, 255, 255)

FONT_PATHS = [
    # macOS
    "/Library/Fonts/PatuaOne-Regular.ttf",
    # Linux
    "/usr/share/fonts/truetype/patua-one/PatuaOne-Regular.ttf",
    # Windows
    "C:/Windows/Fonts/PatuaOne-Regular.ttf",
    # Fallbacks
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "C:/Windows/Fonts/segoeuib.ttf",
]


def load_font(size: int, assets_dir: Path | None = None) -> Font:
    """Load a font, with fallbacks."""
    assets_dir = assets_dir or DEFAULT_ASSETS_DIR
    font_paths = [assets_dir / "PatuaOne-Regular.ttf", *FONT_PATHS]

    for font_path in font_paths:
        path = Path(font_path)
        if path.exists():
            try:
                return ImageFont.truetype(str(path), size)
            except OSError:
                continue

    # Fallback to Pillow's built-in font
    return ImageFont.load_default(size)


def _draw_star(draw: ImageDraw.ImageDraw, size: int) -> None:
    """5-pointed star filling the canvas."""
    cx = cy = size / 2
    outer = size / 2
    points = []
    for i in range(10):
        angle = math.radians(i * 36 - 90)  # Start from top
        r = outer if i % 2 == 0 else outer * 0.45
        points.append((cx + r * math.cos(angle), cy + 0.08 * size + r * math.sin(angle)))
    draw.polygon(points, fill=ICON_COLOR)


def _draw_fork(draw: ImageDraw.ImageDraw, size: int) -> None:
    """Code-branch icon: two branches merging into one trunk."""
    line_width = max(1, size // 10)
    r = size * 0.13
    left_x, right_x = size * 0.3, size * 0.7
    top_y, bottom_y = size * 0.18, size * 0.82

    draw.line([(left_x, top_y), (left_x, bottom_y)], fill=ICON_COLOR, width=line_width)
    draw.line(
        [(right_x, top_y), (right_x, size * 0.45), (left_x, size * 0.65)],
        fill=ICON_COLOR,
        width=line_width,
        joint="curve",
    )
    for x, y in ((left_x, top_y), (right_x, top_y), (left_x, bottom_y)):
        draw.ellipse([x - r, y - r, x + r, y + r], fill=ICON_COLOR)


def _draw_download(draw: ImageDraw.ImageDraw, size: int) -> None:
    """Arrow pointing down into a tray."""
    line_width = max(1, size // 10)
    cx = size / 2
    # Arrow shaft and head
    draw.line([(cx, size * 0.08), (cx, size * 0.55)], fill=ICON_COLOR, width=line_width)
    draw.polygon(
        [(size * 0.25, size * 0.45), (size * 0.75, size * 0.45), (cx, size * 0.72)],
        fill=ICON_COLOR,
    )
    # Tray
    draw.rounded_rectangle(
        [size * 0.06, size * 0.72, size * 0.94, size * 0.94],
        radius=int(size * 0.06),
        fill=ICON_COLOR,
    )


def draw_icon(painter: Callable[[ImageDraw.ImageDraw, int], None], size: int = ICON_SIZE) -> Image.Image:
    big = size * _SUPERSAMPLE
    icon = Image.new("RGBA", (big, big), (0, 0, 0, 0))
    painter(ImageDraw.Draw(icon), big)
    return icon.resize((size, size), Image.Resampling.LANCZOS)


def load_icon(
    filename: str,
    painter: Callable[[ImageDraw.ImageDraw, int], None],
    assets_dir: Path | None = None,
) -> Image.Image:
    """Load an icon PNG from the assets folder, or draw it if missing."""
    path = (assets_dir or DEFAULT_ASSETS_DIR) / filename
    if path.exists():
        try:
            with Image.open(path) as image:
                return image.convert("RGBA")
        except OSError as e:
            logger.warning(f"Could not load icon {path}: {e}. Drawing it instead.")
    return draw_icon(painter)


@dataclass(frozen=True)
class AssetBundle:
    """Read-only fonts and icons for the renderer."""

    title_font: Font
    subtitle_font: Font
    metric_font: Font
    star_icon: Image.Image
    fork_icon: Image.Image
    download_icon: Image.Image

    @classmethod
    def load(cls, assets_dir: str | Path | None = None) -> "AssetBundle":
        assets_dir = Path(assets_dir) if assets_dir else None
        return cls(
            title_font=load_font(TITLE_FONT_SIZE, assets_dir),
            subtitle_font=load_font(SUBTITLE_FONT_SIZE, assets_dir),
            metric_font=load_font(METRIC_FONT_SIZE, assets_dir),
            star_icon=load_icon("star-solid.png", _draw_star, assets_dir),
            fork_icon=load_icon("code-branch-solid.png", _draw_fork, assets_dir),
            download_icon=load_icon("download-solid.png", _draw_download, assets_dir),
        )
