"""PNG encoding and HTTP cache metadata for rendered badges."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from io import BytesIO

from PIL import Image

from models import RepositoryStats

CACHE_MAX_AGE = timedelta(hours=6)


def encode_png(image: Image.Image) -> bytes:
    """
    Encode an image as an 8-bit palettized PNG with maximum compression.

    Identical pixels always produce identical bytes.
    """
    palettized = image.convert("RGB").convert("P", palette=Image.Palette.ADAPTIVE, colors=256)

    output = BytesIO()
    palettized.save(output, format="PNG", optimize=True, compress_level=9)
    return output.getvalue()


def build_etag(owner: str, repository_name: str, stargazer_count: int, fork_count: int) -> str:
    """
    Quoted validator for a badge.

    It only changes with the repository identity and its star/fork counts;
    new icon colors or a new random fallback hue keep the same tag.
    """
    return f'"{owner}/{repository_name}-{stargazer_count}-{fork_count}"'


@dataclass(frozen=True)
class CacheMetadata:
    """Validator and freshness window for a generated badge."""

    etag: str
    last_modified: datetime
    max_age: timedelta = CACHE_MAX_AGE

    @property
    def expires(self) -> datetime:
        return self.last_modified + self.max_age

    def to_headers(self) -> dict[str, str]:
        return {
            "ETag": self.etag,
            "Cache-Control": f"public, max-age={int(self.max_age.total_seconds())}",
            "Last-Modified": format_datetime(self.last_modified, usegmt=True),
            "Expires": format_datetime(self.expires, usegmt=True),
        }


def build_cache_metadata(stats: RepositoryStats, now: datetime | None = None) -> CacheMetadata:
    """Cache metadata for a badge generated at ``now`` (defaults to the current UTC time)."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return CacheMetadata(
        etag=build_etag(
            stats.owner_login,
            stats.repository_name,
            stats.stargazer_count,
            stats.fork_count,
        ),
        last_modified=now.replace(microsecond=0),
    )


def encode_preview(image: Image.Image) -> bytes:
    """Plain RGBA PNG, used for color sample previews that keep transparency."""
    output = BytesIO()
    image.save(output, format="PNG", optimize=True)
    return output.getvalue()
