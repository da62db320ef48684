"""Vibrant color extraction from repository icons."""

import math
from dataclasses import dataclass
from io import BytesIO
from typing import Protocol

from PIL import Image, ImageEnhance, UnidentifiedImageError

from colors import rgb_to_hsv
from exceptions import IconDecodeError, IconTooLargeError
from models import RGB

VIBRANCY_THRESHOLD = 0.6
MIN_OPACITY = 0.7
MAX_ICON_SIZE = 200


class VibrancyStrategy(Protocol):
    """Picks an ordered set of vibrant colors from an RGBA image."""

    def extract(self, image: Image.Image) -> list[RGB]:
        ...


def decode_icon(data: bytes, max_size: int | None = MAX_ICON_SIZE) -> Image.Image:
    """
    Decode icon bytes into an RGBA image.

    The size limit is checked from the header, before any pixel data is
    decoded. Pass ``max_size=None`` to skip it.
    """
    try:
        image = Image.open(BytesIO(data))
        if max_size is not None:
            check_icon_size(image, max_size)
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise IconDecodeError(f"Could not decode icon: {e}") from e
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return image


def check_icon_size(image: Image.Image, max_size: int = MAX_ICON_SIZE) -> None:
    """Raise IconTooLargeError when either side exceeds ``max_size``."""
    if image.width > max_size or image.height > max_size:
        raise IconTooLargeError(image.width, image.height, max_size)


def _is_opaque(alpha: int) -> bool:
    return alpha >= 255 * MIN_OPACITY


class PixelStatisticsStrategy:
    """
    Shrinks the icon down to a handful of pixels and keeps the vibrant ones.

    The edges are cropped away (icons usually sit on a plain canvas), the
    remainder is pixelated and saturated so that small details don't win,
    then every surviving pixel with high saturation and value is returned
    ordered by hue.
    """

    def __init__(
        self,
        padding: float = 0.15,
        sample_width: int = 20,
        block_size: int = 5,
        saturation_boost: float = 2.0,
        final_width: int = 4,
    ):
        self.padding = padding
        self.sample_width = sample_width
        self.block_size = block_size
        self.saturation_boost = saturation_boost
        self.final_width = final_width

    def extract(self, image: Image.Image) -> list[RGB]:
        sample = self._prepare(image.convert("RGBA"))

        vibrant: list[tuple[float, float, float, RGB]] = []
        for r, g, b, a in sample.getdata():
            if not _is_opaque(a):
                continue
            h, s, v = rgb_to_hsv(r, g, b)
            if s < VIBRANCY_THRESHOLD or v < VIBRANCY_THRESHOLD:
                continue
            vibrant.append((h, s, v, (r, g, b)))

        vibrant.sort(key=lambda c: (c[0], -(c[1] + c[2])))
        return [rgb for _, _, _, rgb in vibrant]

    def _prepare(self, image: Image.Image) -> Image.Image:
        pad_x = int(image.width * self.padding)
        pad_y = int(image.height * self.padding)
        image = image.crop((pad_x, pad_y, image.width - pad_x, image.height - pad_y))

        image = _resize_to_width(image, self.sample_width, Image.Resampling.BICUBIC)
        image = self._pixelate(image)
        image = self._saturate(image)
        return _resize_to_width(image, self.final_width, Image.Resampling.NEAREST)

    def _pixelate(self, image: Image.Image) -> Image.Image:
        blocks = (
            max(1, math.ceil(image.width / self.block_size)),
            max(1, math.ceil(image.height / self.block_size)),
        )
        return image.resize(blocks, Image.Resampling.BOX).resize(
            image.size, Image.Resampling.NEAREST
        )

    def _saturate(self, image: Image.Image) -> Image.Image:
        # ImageEnhance would also stretch the alpha channel, so only touch RGB.
        alpha = image.getchannel("A")
        rgb = ImageEnhance.Color(image.convert("RGB")).enhance(self.saturation_boost)
        rgb.putalpha(alpha)
        return rgb


def _resize_to_width(image: Image.Image, width: int, resample: Image.Resampling) -> Image.Image:
    height = max(1, round(image.height * width / image.width))
    return image.resize((width, height), resample)


@dataclass(frozen=True)
class SwatchDefinition:
    """A named bucket of palette colors bounded in saturation and value."""

    name: str
    min_saturation: float = 0.0
    max_saturation: float = 1.0
    min_value: float = 0.0
    max_value: float = 1.0

    def matches(self, color: RGB) -> bool:
        _, s, v = rgb_to_hsv(*color)
        return (
            self.min_saturation <= s <= self.max_saturation
            and self.min_value <= v <= self.max_value
        )


DARK_VIBRANT = SwatchDefinition("dark-vibrant", min_saturation=VIBRANCY_THRESHOLD, max_value=0.5)
VIBRANT = SwatchDefinition("vibrant", min_saturation=VIBRANCY_THRESHOLD, min_value=0.5)


class SwatchPaletteStrategy:
    """
    Quantizes the icon into a small palette and sorts it into swatches.

    The last swatch is preferred; if nothing landed in it, the first one is
    used instead. Colors are returned ordered by hue.
    """

    def __init__(
        self,
        swatches: tuple[SwatchDefinition, SwatchDefinition] = (DARK_VIBRANT, VIBRANT),
        palette_size: int = 16,
    ):
        for swatch in swatches:
            if swatch.min_saturation < VIBRANCY_THRESHOLD:
                raise ValueError(
                    f"Swatch {swatch.name} must have min_saturation >= {VIBRANCY_THRESHOLD}"
                )
        self.swatches = swatches
        self.palette_size = palette_size

    def extract(self, image: Image.Image) -> list[RGB]:
        palette = self.palette(image)
        buckets = [[c for c in palette if swatch.matches(c)] for swatch in self.swatches]

        chosen = buckets[-1] or buckets[0]
        return sorted(chosen, key=lambda c: rgb_to_hsv(*c)[0])

    def palette(self, image: Image.Image) -> list[RGB]:
        """Quantize the opaque pixels of ``image`` into at most ``palette_size`` colors."""
        pixels = [(r, g, b) for r, g, b, a in image.convert("RGBA").getdata() if _is_opaque(a)]
        if not pixels:
            return []

        strip = Image.new("RGB", (len(pixels), 1))
        strip.putdata(pixels)
        quantized = strip.quantize(colors=self.palette_size, method=Image.Quantize.MEDIANCUT)

        flat = quantized.getpalette() or []
        used = sorted(index for _, index in quantized.getcolors() or [])
        return [tuple(flat[i * 3:i * 3 + 3]) for i in used]


DEFAULT_STRATEGY = PixelStatisticsStrategy()

STRATEGIES = {
    "pixel": PixelStatisticsStrategy,
    "swatch": SwatchPaletteStrategy,
}


def extract_vibrant_colors(
    image: Image.Image,
    strategy: VibrancyStrategy | None = None,
    max_size: int = MAX_ICON_SIZE,
) -> list[RGB]:
    """
    Return the vibrant colors of ``image`` ordered by hue.

    Raises IconTooLargeError if the icon is bigger than ``max_size`` on
    either side. An icon without vibrant colors yields an empty list.
    """
    check_icon_size(image, max_size)
    return (strategy or DEFAULT_STRATEGY).extract(image)
