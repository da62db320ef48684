"""RGB/HSV conversion and color parsing helpers."""

import colorsys
import re

from PIL import ImageColor

from models import RGB

_HEX_PATTERN = re.compile(r"^#?(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def rgb_to_hsv(r: int, g: int, b: int) -> tuple[float, float, float]:
    """
    Convert 8-bit RGB channels to HSV.

    Returns hue in degrees [0, 360) and saturation/value in [0, 1]. Grey
    colors (saturation 0) report a hue of 0.
    """
    h, s, v = colorsys.rgb_to_hsv(r / 255.0, g / 255.0, b / 255.0)
    if s == 0:
        return 0.0, 0.0, v
    return (h * 360.0) % 360.0, s, v


def hsv_to_rgb(h: float, s: float, v: float) -> RGB:
    """Convert HSV (hue in degrees) back to 8-bit RGB channels."""
    r, g, b = colorsys.hsv_to_rgb((h % 360.0) / 360.0, s, v)
    return (_to_channel(r), _to_channel(g), _to_channel(b))


def _to_channel(value: float) -> int:
    return max(0, min(255, int(round(value * 255.0))))


def saturation(color: RGB) -> float:
    return rgb_to_hsv(*color)[1]


def hue(color: RGB) -> float:
    return rgb_to_hsv(*color)[0]


def parse_hex_color(color_text: str) -> RGB:
    """
    Parse a hex color such as ``#336699``, ``369`` or ``336699FF``.

    Alpha is discarded. Anything that is not a hex color raises ValueError.
    """
    text = (color_text or "").strip()
    if not _HEX_PATTERN.match(text):
        raise ValueError(f"Invalid hex color: {color_text!r}. Use RGB, RRGGBB or RRGGBBAA.")
    color = ImageColor.getrgb("#" + text.lstrip("#"))
    return (color[0], color[1], color[2])


def to_hex(color: RGB) -> str:
    return "#{:02x}{:02x}{:02x}".format(*color)
