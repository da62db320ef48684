"""End-to-end badge generation: fetch, pick colors, render, encode."""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Sequence

from aggregator import DEFAULT_OPTIONAL_TIMEOUT, MetadataAggregator
from assets import AssetBundle
from encoder import CacheMetadata, build_cache_metadata, encode_png, encode_preview
from github_stats import GitHubStats, default_icon_url
from gradient import Gradient, gradient_for
from models import BadgeRequest, ProjectDetails
from nuget import NuGetClient
from renderer import BadgeRenderer
from vibrancy import STRATEGIES, decode_icon, extract_vibrant_colors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Badge:
    """A rendered badge and the headers to serve it with."""

    request: BadgeRequest
    details: ProjectDetails
    gradient: Gradient
    png: bytes
    cache: CacheMetadata

    @property
    def path(self) -> str:
        stats = self.details.stats
        return f"{stats.owner_login}/{stats.repository_name}.png"


class BadgeGenerator:
    """Runs the badge pipeline for one or many repositories."""

    def __init__(
        self,
        aggregator: MetadataAggregator,
        renderer: BadgeRenderer,
        rng: random.Random | None = None,
    ):
        self.aggregator = aggregator
        self.renderer = renderer
        self.rng = rng or random.Random()

    @classmethod
    def create(
        cls,
        token: str | None = None,
        strategy: str = "pixel",
        optional_timeout: float | None = DEFAULT_OPTIONAL_TIMEOUT,
        assets_dir: str | None = None,
        rng: random.Random | None = None,
    ) -> "BadgeGenerator":
        """Default wiring: live GitHub and NuGet clients, assets loaded once."""
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy {strategy!r}. Choose from: {', '.join(STRATEGIES)}")

        aggregator = MetadataAggregator(
            github=GitHubStats(token),
            nuget=NuGetClient(),
            strategy=STRATEGIES[strategy](),
            optional_timeout=optional_timeout,
        )
        return cls(aggregator, BadgeRenderer(AssetBundle.load(assets_dir)), rng)

    async def generate(self, request: BadgeRequest) -> Badge:
        """
        Generate one badge.

        Repository lookup failures propagate and no image is produced.
        """
        details = await self.aggregator.aggregate(request)
        gradient = gradient_for(details.colors, self.rng, details.color_source)

        logger.info(
            f"Rendering {request.slug}: {len(gradient.stops)} stop(s), colors from {details.color_source}"
        )
        image = self.renderer.render(details.stats, gradient)

        return Badge(
            request=request,
            details=details,
            gradient=gradient,
            png=encode_png(image),
            cache=build_cache_metadata(details.stats),
        )

    async def generate_many(self, requests: Sequence[BadgeRequest]) -> list[Badge | Exception]:
        """Generate badges concurrently; a failed badge is returned as its exception."""
        return await asyncio.gather(
            *(self.generate(request) for request in requests),
            return_exceptions=True,
        )

    async def sample(self, request: BadgeRequest) -> bytes:
        """
        Preview the colors picked from a repository icon.

        Unlike badge generation, icon problems are raised since the preview
        has nothing to show without the icon.
        """
        url = request.image_url or default_icon_url(request.owner, request.repo_name)
        data = await asyncio.to_thread(self.aggregator.github.fetch_icon, url)
        icon = decode_icon(data)

        colors = extract_vibrant_colors(icon, self.aggregator.strategy)
        gradient = gradient_for(colors, self.rng)
        return encode_preview(self.renderer.render_color_sample(icon, gradient))
