"""GitHub API client for fetching repository statistics and icons."""

import logging
import os

import requests

from exceptions import RepositoryFetchError, RepositoryNotFoundError
from models import RepositoryStats

logger = logging.getLogger(__name__)

ICON_URL_TEMPLATE = "https://raw.githubusercontent.com/{owner}/{name}/main/images/icon.png"


def default_icon_url(owner: str, name: str) -> str:
    """Conventional location of a repository's icon."""
    return ICON_URL_TEMPLATE.format(owner=owner, name=name)


class GitHubStats:
    """Fetches GitHub statistics for a repository."""

    REST_API_URL = "https://api.github.com"
    TIMEOUT = 30

    def __init__(self, token: str | None = None, session: requests.Session | None = None):
        self.token = token or os.environ.get("GITHUB_TOKEN") or os.environ.get("GITHUB_ACCESS_TOKEN")
        self.session = session or requests.Session()
        self.headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "repo-badges",
        }
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"
        else:
            logger.info("No GitHub token configured, using anonymous API access.")

    def get_repository(self, owner: str, name: str) -> RepositoryStats:
        """
        Get stars, forks and the canonical owner/name of a repository.

        Raises RepositoryNotFoundError for unknown repositories and
        RepositoryFetchError for any other failure.
        """
        url = f"{self.REST_API_URL}/repos/{owner}/{name}"

        try:
            response = self.session.get(url, headers=self.headers, timeout=self.TIMEOUT)
            if response.status_code == 404:
                raise RepositoryNotFoundError(owner, name)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise RepositoryFetchError(owner, name, f"GitHub request failed: {e}") from e
        except ValueError as e:
            raise RepositoryFetchError(owner, name, f"Invalid GitHub response: {e}") from e

        return RepositoryStats(
            owner_login=data.get("owner", {}).get("login") or owner,
            repository_name=data.get("name") or name,
            stargazer_count=data.get("stargazers_count") or 0,
            fork_count=data.get("forks_count") or 0,
        )

    def fetch_icon(self, url: str) -> bytes:
        """Download raw icon bytes. Errors are left to the caller."""
        response = self.session.get(url, timeout=self.TIMEOUT)
        response.raise_for_status()
        return response.content
