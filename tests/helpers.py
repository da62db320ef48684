"""Shared helpers for building test images."""

from io import BytesIO

from PIL import Image


def create_test_image(width: int = 100, height: int = 100, color=(255, 0, 0, 255)) -> Image.Image:
    """Create a simple single-color RGBA image."""
    return Image.new("RGBA", (width, height), color)


def create_quadrant_image(size: int = 100) -> Image.Image:
    """Red, green, blue and yellow quadrants."""
    image = Image.new("RGBA", (size, size))
    half = size // 2
    image.paste((255, 0, 0, 255), (0, 0, half, half))
    image.paste((0, 255, 0, 255), (half, 0, size, half))
    image.paste((0, 0, 255, 255), (0, half, half, size))
    image.paste((255, 255, 0, 255), (half, half, size, size))
    return image


def to_png_bytes(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def create_test_image_bytes(width: int = 100, height: int = 100, color=(255, 0, 0, 255)) -> bytes:
    """Create a single-color image encoded as PNG bytes."""
    return to_png_bytes(create_test_image(width, height, color))


def assert_close(actual, expected, tolerance: int = 1) -> None:
    assert len(actual) == len(expected)
    for a, e in zip(actual, expected):
        assert abs(a - e) <= tolerance, f"{actual} != {expected} (±{tolerance})"
