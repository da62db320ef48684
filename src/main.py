#!/usr/bin/env python3
"""Main entry point for the repository badge generator."""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Sequence

import yaml
from dotenv import load_dotenv

from aggregator import DEFAULT_OPTIONAL_TIMEOUT
from exceptions import BadgeException
from generator import Badge, BadgeGenerator
from models import BadgeRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Validated contents of config.yaml."""

    badges: tuple[BadgeRequest, ...] = ()
    output_dir: Path = Path("output")
    headers_file: str = "_headers"
    optional_timeout: float | None = DEFAULT_OPTIONAL_TIMEOUT
    strategy: str = "pixel"
    assets_dir: str | None = None

    @classmethod
    def from_config(cls, config: dict | None, base_dir: Path | None = None) -> "Settings":
        config = config or {}
        base_dir = base_dir or Path.cwd()

        badges = []
        for entry in config.get("badges") or []:
            if isinstance(entry, str):
                entry = {"repository": entry}
            if not isinstance(entry, dict) or not entry.get("repository"):
                raise ValueError(f"Each badge needs a 'repository' (owner/repo). Got: {entry!r}")
            badges.append(
                BadgeRequest.parse(
                    entry["repository"],
                    packages=entry.get("packages"),
                    background=entry.get("background"),
                    image_url=entry.get("image_url"),
                )
            )

        timeout = config.get("optional_timeout", DEFAULT_OPTIONAL_TIMEOUT)
        if timeout is not None and float(timeout) <= 0:
            raise ValueError("optional_timeout must be positive (or null to disable it)")

        output_dir = Path(config.get("output_dir", "output"))
        assets_dir = config.get("assets_dir")
        return cls(
            badges=tuple(badges),
            output_dir=output_dir if output_dir.is_absolute() else base_dir / output_dir,
            headers_file=config.get("headers_file", "_headers"),
            optional_timeout=float(timeout) if timeout is not None else None,
            strategy=config.get("strategy", "pixel"),
            assets_dir=str(base_dir / assets_dir) if assets_dir else None,
        )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Generate badge images for GitHub repositories.",
    )
    parser.add_argument(
        "repositories",
        nargs="*",
        metavar="owner/repo",
        help="Repositories to render (defaults to the badges listed in the config file)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the configuration file (default: config.yaml in the project root)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output directory (overrides output_dir from the config file)",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help="Write icon color sample previews instead of badges",
    )
    return parser.parse_args(argv)


def load_config(config_path: str | Path = "config.yaml") -> dict:
    """Load configuration from YAML file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def select_requests(settings: Settings, slugs: Sequence[str]) -> list[BadgeRequest]:
    """
    Requests for the repositories named on the command line, or every
    configured badge when none are named. Named repositories that are also
    configured keep their packages and color overrides.
    """
    if not slugs:
        return list(settings.badges)

    configured = {badge.slug.lower(): badge for badge in settings.badges}
    requests = []
    for slug in slugs:
        request = BadgeRequest.parse(slug)
        requests.append(configured.get(request.slug.lower(), request))
    return requests


def format_headers(badges: Sequence[Badge]) -> str:
    """Render a static-host ``_headers`` file with one block per badge."""
    blocks = []
    for badge in badges:
        lines = [f"/{badge.path}"]
        lines.extend(f"  {name}: {value}" for name, value in badge.cache.to_headers().items())
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n" if blocks else ""


def write_badges(badges: Sequence[Badge], output_dir: Path, headers_file: str) -> None:
    for badge in badges:
        path = output_dir / badge.path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(badge.png)
        print(f"  {badge.path} ({len(badge.png):,} bytes, ETag {badge.cache.etag})")

    headers_path = output_dir / headers_file
    headers_path.parent.mkdir(parents=True, exist_ok=True)
    headers_path.write_text(format_headers(badges))


async def run_badges(generator: BadgeGenerator, settings: Settings, requests: Sequence[BadgeRequest]) -> int:
    results = await generator.generate_many(requests)

    badges = []
    failures = 0
    for request, result in zip(requests, results):
        if isinstance(result, Exception):
            failures += 1
            logger.error(f"Could not generate badge for {request.slug}: {result}")
        else:
            badges.append(result)

    print(f"\n[3/3] Writing {len(badges)} badge(s) to {settings.output_dir}...")
    write_badges(badges, settings.output_dir, settings.headers_file)
    return 1 if failures else 0


async def run_samples(generator: BadgeGenerator, settings: Settings, requests: Sequence[BadgeRequest]) -> int:
    print(f"\n[3/3] Writing color samples to {settings.output_dir}...")
    failures = 0
    for request in requests:
        try:
            data = await generator.sample(request)
        except (BadgeException, OSError) as e:
            failures += 1
            logger.error(f"Could not sample colors for {request.slug}: {e}")
            continue
        path = settings.output_dir / request.owner / f"{request.repo_name}.sample.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        print(f"  {path}")
    return 1 if failures else 0


def main(argv: Sequence[str] | None = None) -> int:
    """Generate repository badges."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Determine paths
    project_root = Path(__file__).parent.parent
    config_path = args.config or project_root / "config.yaml"

    # Load environment variables from .env file if it exists
    load_dotenv(project_root / ".env")

    print("=" * 50)
    print("Repository Badge Generator")
    print("=" * 50)

    # Load configuration
    print("\n[1/3] Loading configuration...")
    try:
        config = load_config(config_path) if (args.config or config_path.exists()) else {}
        settings = Settings.from_config(config, base_dir=Path(config_path).parent)
        requests = select_requests(settings, args.repositories)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        return 1

    if args.output:
        settings = replace(settings, output_dir=args.output)

    if not requests:
        print("Error: no repositories given and none listed under 'badges' in the config file")
        return 1

    print(f"  Repositories: {', '.join(r.slug for r in requests)}")
    print(f"  Color strategy: {settings.strategy}")

    try:
        generator = BadgeGenerator.create(
            strategy=settings.strategy,
            optional_timeout=settings.optional_timeout,
            assets_dir=settings.assets_dir,
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print("\n[2/3] Fetching repository details...")
    if args.sample:
        status = asyncio.run(run_samples(generator, settings, requests))
    else:
        status = asyncio.run(run_badges(generator, settings, requests))

    print("\n" + "=" * 50)
    print("✓ Done!" if status == 0 else "✗ Finished with errors, see the log above.")
    print("=" * 50)

    return status


if __name__ == "__main__":
    sys.exit(main())
