"""NuGet search client for aggregate package download counts."""

import logging
from typing import Sequence

import requests

from exceptions import DownloadCountError

logger = logging.getLogger(__name__)


class NuGetClient:
    """Sums download counts for a list of package ids."""

    SERVICE_INDEX_URL = "https://api.nuget.org/v3/index.json"
    SEARCH_RESOURCE_TYPE = "SearchQueryService"
    TIMEOUT = 30

    def __init__(self, session: requests.Session | None = None, service_index_url: str | None = None):
        self.session = session or requests.Session()
        self.service_index_url = service_index_url or self.SERVICE_INDEX_URL
        self._search_url: str | None = None

    def _get_json(self, url: str, params: dict | None = None) -> dict:
        try:
            response = self.session.get(url, params=params, timeout=self.TIMEOUT)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise DownloadCountError(f"NuGet request to {url} failed: {e}") from e
        except ValueError as e:
            raise DownloadCountError(f"Invalid NuGet response from {url}: {e}") from e

    def search_url(self) -> str:
        """Resolve (and remember) the search endpoint from the service index."""
        if self._search_url is None:
            index = self._get_json(self.service_index_url)
            for resource in index.get("resources", []):
                resource_type = resource.get("@type", "")
                if resource_type.split("/")[0] == self.SEARCH_RESOURCE_TYPE:
                    self._search_url = resource["@id"]
                    break
            else:
                raise DownloadCountError("NuGet service index has no search resource.")
            logger.debug(f"Resolved NuGet search endpoint: {self._search_url}")
        return self._search_url

    def get_download_count(self, packages: Sequence[str]) -> int:
        """Total downloads across ``packages``. Missing counts count as 0."""
        if not packages:
            return 0

        params = {
            "q": " ".join(f"packageid:{package}" for package in packages),
            "prerelease": "true",
            "skip": 0,
            "take": len(packages),
        }
        data = self._get_json(self.search_url(), params=params)

        return sum(result.get("totalDownloads") or 0 for result in data.get("data", []))
