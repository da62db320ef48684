"""Value types shared across the badge pipeline."""

from dataclasses import dataclass, field
from typing import Literal

RGB = tuple[int, int, int]

ColorSource = Literal["override", "icon", "none"]


@dataclass(frozen=True)
class RepositoryStats:
    """Repository identity and counters, as reported by the hosting API."""

    owner_login: str
    repository_name: str
    stargazer_count: int
    fork_count: int
    download_count: int = 0

    def __post_init__(self) -> None:
        for name in ("stargazer_count", "fork_count", "download_count"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")


@dataclass(frozen=True)
class BadgeRequest:
    """Everything a caller can ask for when generating one badge."""

    owner: str
    repo_name: str
    packages: tuple[str, ...] = ()
    background: str | None = None
    image_url: str | None = None

    @classmethod
    def parse(
        cls,
        slug: str,
        packages: list[str] | tuple[str, ...] | None = None,
        background: str | None = None,
        image_url: str | None = None,
    ) -> "BadgeRequest":
        """Build a request from an ``owner/repo`` slug."""
        parts = (slug or "").strip().strip("/").split("/")
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"Repository must be formatted as owner/repo. Got: {slug}")
        return cls(
            owner=parts[0],
            repo_name=parts[1],
            packages=tuple(p for p in (packages or []) if p),
            background=background or None,
            image_url=image_url or None,
        )

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo_name}"


@dataclass(frozen=True)
class ProjectDetails:
    """Merged result of the concurrent metadata fetches."""

    stats: RepositoryStats
    colors: tuple[RGB, ...] = field(default_factory=tuple)
    color_source: ColorSource = "none"
