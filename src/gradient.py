"""Gradient color ramps for badge backgrounds."""

import random
from dataclasses import dataclass
from typing import Sequence

from colors import hsv_to_rgb
from models import RGB, ColorSource

# Muted fallback: same hue, two brightness levels.
SYNTHETIC_SATURATION = 0.18
SYNTHETIC_DARK_VALUE = 0.37
SYNTHETIC_LIGHT_VALUE = 0.54


@dataclass(frozen=True)
class ColorStop:
    offset: float
    color: RGB

    def __post_init__(self) -> None:
        if not 0.0 <= self.offset <= 1.0:
            raise ValueError(f"Color stop offset must be within [0, 1], got {self.offset}")


@dataclass(frozen=True)
class Gradient:
    """
    An ordered color ramp.

    ``synthetic`` marks the random fallback ramp. ``scrim`` asks the renderer
    to darken the ramp for text contrast, which only colors picked from an
    icon need; the muted fallback and explicit background colors are drawn
    as is.
    """

    stops: tuple[ColorStop, ...]
    synthetic: bool = False
    scrim: bool = False

    def __post_init__(self) -> None:
        if not self.stops:
            raise ValueError("A gradient needs at least one color stop.")
        offsets = [stop.offset for stop in self.stops]
        if any(b < a for a, b in zip(offsets, offsets[1:])):
            raise ValueError(f"Color stop offsets must be non-decreasing: {offsets}")
        if offsets[0] != 0.0:
            raise ValueError("The first color stop must be at offset 0.")
        if len(offsets) > 1 and offsets[-1] != 1.0:
            raise ValueError("The last color stop must be at offset 1.")

    @property
    def is_solid(self) -> bool:
        return len(self.stops) == 1

    def color_at(self, t: float) -> RGB:
        """Linearly interpolate the ramp at ``t`` (clamped to [0, 1])."""
        t = max(0.0, min(1.0, t))
        if self.is_solid or t <= self.stops[0].offset:
            return self.stops[0].color

        for left, right in zip(self.stops, self.stops[1:]):
            if t <= right.offset:
                span = right.offset - left.offset
                if span == 0:
                    return right.color
                return _blend(left.color, right.color, (t - left.offset) / span)

        return self.stops[-1].color


def _blend(color1: RGB, color2: RGB, factor: float) -> RGB:
    """Blend two colors. factor=0 returns color1, factor=1 returns color2."""
    return (
        int(round(color1[0] + (color2[0] - color1[0]) * factor)),
        int(round(color1[1] + (color2[1] - color1[1]) * factor)),
        int(round(color1[2] + (color2[2] - color1[2]) * factor)),
    )


def build_ramp(colors: Sequence[RGB], scrim: bool = True) -> Gradient:
    """
    Spread ``colors`` evenly across a ramp.

    A single color gives a solid fill (one stop at 0). Callers must not pass
    an empty sequence; use build_synthetic_ramp for that case.
    """
    if not colors:
        raise ValueError("build_ramp needs at least one color.")
    if len(colors) == 1:
        return Gradient((ColorStop(0.0, tuple(colors[0])),), scrim=scrim)

    last = len(colors) - 1
    stops = tuple(
        ColorStop(1.0 if i == last else i / last, tuple(color))
        for i, color in enumerate(colors)
    )
    return Gradient(stops, scrim=scrim)


def build_synthetic_ramp(rng: random.Random | None = None) -> Gradient:
    """Two-stop muted ramp around a random hue."""
    hue = (rng or random.Random()).random() * 360.0
    return Gradient(
        (
            ColorStop(0.0, hsv_to_rgb(hue, SYNTHETIC_SATURATION, SYNTHETIC_DARK_VALUE)),
            ColorStop(1.0, hsv_to_rgb(hue, SYNTHETIC_SATURATION, SYNTHETIC_LIGHT_VALUE)),
        ),
        synthetic=True,
    )


def gradient_for(
    colors: Sequence[RGB],
    rng: random.Random | None = None,
    source: ColorSource = "icon",
) -> Gradient:
    if colors:
        return build_ramp(colors, scrim=source == "icon")
    return build_synthetic_ramp(rng)
