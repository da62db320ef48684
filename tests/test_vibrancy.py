"""
Tests for vibrant color extraction.
"""

import pytest
from PIL import Image

from colors import rgb_to_hsv
from exceptions import IconDecodeError, IconTooLargeError
from helpers import (
    assert_close,
    create_quadrant_image,
    create_test_image,
    create_test_image_bytes,
    to_png_bytes,
)
from vibrancy import (
    VIBRANCY_THRESHOLD,
    PixelStatisticsStrategy,
    SwatchDefinition,
    SwatchPaletteStrategy,
    decode_icon,
    extract_vibrant_colors,
)


def assert_vibrant_and_sorted(colors):
    hsv = [rgb_to_hsv(*c) for c in colors]
    assert all(s >= VIBRANCY_THRESHOLD for _, s, _ in hsv)
    hues = [h for h, _, _ in hsv]
    assert hues == sorted(hues)


class TestPixelStatisticsStrategy:
    """Tests for the default pixel-statistics strategy."""

    def test_solid_red_icon(self):
        colors = PixelStatisticsStrategy().extract(create_test_image(color=(255, 0, 0, 255)))

        # 100x100 -> cropped to 70x70 -> 20x20 -> 4x4 samples
        assert len(colors) == 16
        for color in colors:
            assert_close(color, (255, 0, 0), tolerance=2)

    def test_grey_icon_has_no_vibrant_colors(self):
        assert PixelStatisticsStrategy().extract(create_test_image(color=(128, 128, 128, 255))) == []

    def test_transparent_icon_has_no_vibrant_colors(self):
        assert PixelStatisticsStrategy().extract(create_test_image(color=(255, 0, 0, 0))) == []

    def test_mostly_transparent_pixels_are_skipped(self):
        # 150 is below 70% of 255
        assert PixelStatisticsStrategy().extract(create_test_image(color=(255, 0, 0, 150))) == []

    def test_dark_colors_are_skipped(self):
        assert PixelStatisticsStrategy().extract(create_test_image(color=(10, 10, 40, 255))) == []

    def test_multi_colored_icon_is_sorted_by_hue(self):
        colors = PixelStatisticsStrategy().extract(create_quadrant_image())

        assert colors
        assert_vibrant_and_sorted(colors)

    def test_non_square_icon(self):
        colors = PixelStatisticsStrategy().extract(create_test_image(120, 40, (0, 200, 255, 255)))
        assert colors
        assert_vibrant_and_sorted(colors)


class TestSwatchPaletteStrategy:
    """Tests for the alternate swatch-palette strategy."""

    def test_vibrant_swatch(self):
        colors = SwatchPaletteStrategy().extract(create_test_image(color=(255, 0, 0, 255)))
        assert len(colors) == 1
        assert_close(colors[0], (255, 0, 0), tolerance=2)

    def test_falls_back_to_dark_vibrant(self):
        colors = SwatchPaletteStrategy().extract(create_test_image(color=(110, 0, 0, 255)))
        assert len(colors) == 1
        assert_close(colors[0], (110, 0, 0), tolerance=2)

    def test_prefers_vibrant_over_dark_vibrant(self):
        image = create_test_image(color=(110, 0, 0, 255))
        image.paste((0, 0, 255, 255), (0, 0, 50, 100))

        colors = SwatchPaletteStrategy().extract(image)

        assert len(colors) == 1
        assert_close(colors[0], (0, 0, 255), tolerance=2)

    def test_grey_icon(self):
        assert SwatchPaletteStrategy().extract(create_test_image(color=(90, 90, 90, 255))) == []

    def test_transparent_icon(self):
        assert SwatchPaletteStrategy().extract(create_test_image(color=(255, 0, 0, 0))) == []

    def test_multi_colored_icon_is_sorted_by_hue(self):
        colors = SwatchPaletteStrategy().extract(create_quadrant_image())

        assert len(colors) >= 2
        assert_vibrant_and_sorted(colors)

    def test_swatches_must_be_vibrant(self):
        with pytest.raises(ValueError):
            SwatchPaletteStrategy(swatches=(SwatchDefinition("dull"), SwatchDefinition("dull")))


class TestExtractVibrantColors:
    """Tests for the size guard and decoding."""

    def test_size_limit(self):
        with pytest.raises(IconTooLargeError):
            extract_vibrant_colors(create_test_image(201, 10))
        with pytest.raises(IconTooLargeError):
            extract_vibrant_colors(create_test_image(10, 201))

    def test_at_size_limit(self):
        assert extract_vibrant_colors(create_test_image(200, 200))

    def test_custom_strategy(self):
        class _FixedStrategy:
            def extract(self, image):
                return [(1, 2, 3)]

        assert extract_vibrant_colors(create_test_image(), _FixedStrategy()) == [(1, 2, 3)]

    def test_decode_icon(self):
        image = decode_icon(create_test_image_bytes(32, 16))
        assert image.mode == "RGBA"
        assert image.size == (32, 16)

    def test_decode_rgb_icon(self):
        rgb = Image.new("RGB", (8, 8), (0, 255, 0))
        assert decode_icon(to_png_bytes(rgb)).mode == "RGBA"

    def test_decode_garbage(self):
        with pytest.raises(IconDecodeError):
            decode_icon(b"definitely not a png")

    def test_decode_checks_size_before_pixels(self):
        data = to_png_bytes(create_quadrant_image(300))
        # Pixel data is cut short, so only the header can be read
        with pytest.raises(IconTooLargeError):
            decode_icon(data[:-40])

    def test_decode_without_size_limit(self):
        assert decode_icon(create_test_image_bytes(256, 256), max_size=None).size == (256, 256)

    def test_decompression_bomb(self, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        with pytest.raises(IconDecodeError):
            decode_icon(create_test_image_bytes(32, 16))
