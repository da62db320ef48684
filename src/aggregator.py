"""Concurrent fan-out/fan-in of everything a badge needs to know."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from colors import parse_hex_color
from github_stats import GitHubStats, default_icon_url
from models import RGB, BadgeRequest, ColorSource, ProjectDetails, RepositoryStats
from nuget import NuGetClient
from vibrancy import VibrancyStrategy, decode_icon, extract_vibrant_colors

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_OPTIONAL_TIMEOUT = 10.0


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of an optional branch: a value, or the default plus why."""

    value: T
    error: BaseException | None = None

    @property
    def degraded(self) -> bool:
        return self.error is not None


class MetadataAggregator:
    """
    Gathers repository stats, background colors and download counts.

    The three lookups run at the same time and only meet when the result is
    merged. Stats are mandatory; colors and downloads degrade to empty/zero
    on any failure or when they take longer than ``optional_timeout``.
    """

    def __init__(
        self,
        github: GitHubStats,
        nuget: NuGetClient,
        strategy: VibrancyStrategy | None = None,
        optional_timeout: float | None = DEFAULT_OPTIONAL_TIMEOUT,
    ):
        self.github = github
        self.nuget = nuget
        self.strategy = strategy
        self.optional_timeout = optional_timeout

    async def aggregate(self, request: BadgeRequest) -> ProjectDetails:
        # A malformed override is a caller bug, so it fails before any fetch.
        override = parse_hex_color(request.background) if request.background else None

        stats_task = asyncio.create_task(
            asyncio.to_thread(self.github.get_repository, request.owner, request.repo_name)
        )
        colors_task = asyncio.create_task(self._colors(request, override))
        downloads_task = asyncio.create_task(self._downloads(request))

        try:
            stats = await stats_task
        except Exception:
            colors_task.cancel()
            downloads_task.cancel()
            raise

        colors, downloads = await asyncio.gather(colors_task, downloads_task)

        return self._merge(stats, colors, downloads, "override" if override else "icon")

    def _merge(
        self,
        stats: RepositoryStats,
        colors: Outcome[tuple[RGB, ...]],
        downloads: Outcome[int],
        source: ColorSource,
    ) -> ProjectDetails:
        if colors.degraded or not colors.value:
            source = "none"
        return ProjectDetails(
            stats=RepositoryStats(
                owner_login=stats.owner_login,
                repository_name=stats.repository_name,
                stargazer_count=stats.stargazer_count,
                fork_count=stats.fork_count,
                download_count=downloads.value,
            ),
            colors=colors.value,
            color_source=source,
        )

    async def _colors(self, request: BadgeRequest, override: RGB | None) -> Outcome[tuple[RGB, ...]]:
        if override is not None:
            return Outcome((override,))
        return await self._optional(
            f"colors for {request.slug}",
            lambda: asyncio.to_thread(self._icon_colors, request),
            (),
        )

    def _icon_colors(self, request: BadgeRequest) -> tuple[RGB, ...]:
        url = request.image_url or default_icon_url(request.owner, request.repo_name)
        icon = decode_icon(self.github.fetch_icon(url))
        return tuple(extract_vibrant_colors(icon, self.strategy))

    async def _downloads(self, request: BadgeRequest) -> Outcome[int]:
        if not request.packages:
            return Outcome(0)
        return await self._optional(
            f"downloads for {request.slug}",
            lambda: asyncio.to_thread(self.nuget.get_download_count, request.packages),
            0,
        )

    async def _optional(self, label: str, start: Callable[[], Awaitable[T]], default: T) -> Outcome[T]:
        try:
            return Outcome(await asyncio.wait_for(start(), self.optional_timeout))
        except asyncio.TimeoutError as e:
            logger.info(f"Gave up on {label} after {self.optional_timeout}s, using default.")
            return Outcome(default, e)
        except Exception as e:
            logger.info(f"Could not get {label}: {e}. Using default.")
            return Outcome(default, e)
