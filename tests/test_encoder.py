"""
Tests for PNG encoding and cache metadata.
"""

from datetime import datetime, timedelta, timezone
from io import BytesIO

import pytest
from PIL import Image

from encoder import (
    CACHE_MAX_AGE,
    build_cache_metadata,
    build_etag,
    encode_png,
    encode_preview,
)
from helpers import create_quadrant_image
from models import RepositoryStats

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestEncodePng:
    """Tests for encode_png."""

    def test_palettized_png(self):
        data = encode_png(Image.new("RGBA", (420, 80), (61, 109, 140, 255)))

        assert data.startswith(PNG_SIGNATURE)
        decoded = Image.open(BytesIO(data))
        assert decoded.format == "PNG"
        assert decoded.mode == "P"
        assert decoded.size == (420, 80)

    def test_deterministic(self):
        image = create_quadrant_image()
        assert encode_png(image) == encode_png(image.copy())

    def test_preserves_colors(self):
        decoded = Image.open(BytesIO(encode_png(create_quadrant_image()))).convert("RGB")
        assert decoded.getpixel((0, 0)) == (255, 0, 0)
        assert decoded.getpixel((99, 99)) == (255, 255, 0)

    def test_preview_keeps_transparency(self):
        data = encode_preview(Image.new("RGBA", (10, 10), (0, 0, 0, 0)))
        assert Image.open(BytesIO(data)).convert("RGBA").getpixel((5, 5))[3] == 0


class TestEtag:
    """Tests for build_etag."""

    def test_is_quoted(self):
        assert build_etag("octocat", "hello", 42, 7) == '"octocat/hello-42-7"'

    def test_same_inputs_same_etag(self):
        assert build_etag("octocat", "hello", 42, 7) == build_etag("octocat", "hello", 42, 7)

    @pytest.mark.parametrize(
        "changed",
        [
            ("someone", "hello", 42, 7),
            ("octocat", "world", 42, 7),
            ("octocat", "hello", 43, 7),
            ("octocat", "hello", 42, 8),
            ("octocat", "hello", 7, 42),
        ],
    )
    def test_any_change_changes_etag(self, changed):
        assert build_etag(*changed) != build_etag("octocat", "hello", 42, 7)

    def test_dashes_in_names_do_not_collide(self):
        assert build_etag("a-b", "c", 1, 2) != build_etag("a", "b-c", 1, 2)


class TestCacheMetadata:
    """Tests for build_cache_metadata."""

    def test_headers(self):
        stats = RepositoryStats("octocat", "hello", 42, 7)
        now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        cache = build_cache_metadata(stats, now=now)

        assert cache.max_age == CACHE_MAX_AGE == timedelta(hours=6)
        assert cache.last_modified == now
        assert cache.expires == now + timedelta(hours=6)
        assert cache.to_headers() == {
            "ETag": '"octocat/hello-42-7"',
            "Cache-Control": "public, max-age=21600",
            "Last-Modified": "Tue, 02 Jan 2024 03:04:05 GMT",
            "Expires": "Tue, 02 Jan 2024 09:04:05 GMT",
        }

    def test_ignores_downloads(self):
        now = datetime(2024, 1, 2, tzinfo=timezone.utc)
        plain = build_cache_metadata(RepositoryStats("o", "r", 1, 2), now=now)
        with_downloads = build_cache_metadata(RepositoryStats("o", "r", 1, 2, download_count=99), now=now)
        assert plain.etag == with_downloads.etag

    def test_defaults_to_now(self):
        before = datetime.now(timezone.utc).replace(microsecond=0)
        cache = build_cache_metadata(RepositoryStats("o", "r", 1, 2))
        assert cache.last_modified >= before
        assert cache.last_modified.tzinfo is not None

    def test_naive_time_is_utc(self):
        cache = build_cache_metadata(RepositoryStats("o", "r", 1, 2), now=datetime(2024, 1, 2, 3, 4, 5))
        assert cache.to_headers()["Last-Modified"] == "Tue, 02 Jan 2024 03:04:05 GMT"
