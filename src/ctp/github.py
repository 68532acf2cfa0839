"""GitHub REST client that supplies template metadata and archives."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Protocol, runtime_checkable

from .errors import RepositoryFetchError
from .locator import RepositoryIdentity

__all__ = [
    "DEFAULT_API_URL",
    "GitHubFetcher",
    "RepositoryFetcher",
    "RepositoryMetadata",
    "parse_timestamp",
]


LOGGER = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"

Opener = Callable[[urllib.request.Request], Any]


@dataclass(frozen=True, slots=True)
class RepositoryMetadata:
    """The parts of the repository description the cache relies on."""

    default_ref: str
    updated_at: int


@runtime_checkable
class RepositoryFetcher(Protocol):
    """Source of repository metadata and archives."""

    def get_metadata(self, identity: RepositoryIdentity) -> RepositoryMetadata:
        """Return the default ref and last update time of ``identity``."""

    def get_archive(self, identity: RepositoryIdentity, ref: str) -> bytes:
        """Return a zip archive of ``identity`` at ``ref``."""


def parse_timestamp(value: str) -> int:
    """Convert an ISO-8601 timestamp such as ``2024-01-01T00:00:00Z`` to epoch ms."""

    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


class GitHubFetcher:
    """Fetch repositories through the GitHub REST API."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        token: str | None = None,
        *,
        opener: Opener | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._opener = opener

    def _headers(self, accept: str) -> dict[str, str]:
        headers = {"Accept": accept, "User-Agent": "ctp"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _open(self, url: str, accept: str) -> bytes:
        request = urllib.request.Request(url, headers=self._headers(accept))
        LOGGER.debug("GET %s", url)
        try:
            if self._opener is not None:
                response = self._opener(request)
            else:
                response = urllib.request.urlopen(request, timeout=self.timeout)
            with response:
                return response.read()
        except urllib.error.HTTPError as exc:
            raise RepositoryFetchError(f"{url} returned HTTP {exc.code}") from exc
        except (urllib.error.URLError, OSError) as exc:
            raise RepositoryFetchError(f"cannot reach {url}: {exc}") from exc

    def get_metadata(self, identity: RepositoryIdentity) -> RepositoryMetadata:
        url = f"{self.api_url}/repos/{identity.owner}/{identity.repo}"
        body = self._open(url, "application/vnd.github+json")
        try:
            payload = json.loads(body.decode("utf-8"))
            return RepositoryMetadata(
                default_ref=payload["default_branch"],
                updated_at=parse_timestamp(payload["updated_at"]),
            )
        except (UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise RepositoryFetchError(f"unexpected repository payload from {url}") from exc

    def get_archive(self, identity: RepositoryIdentity, ref: str) -> bytes:
        url = f"{self.api_url}/repos/{identity.owner}/{identity.repo}/zipball/{ref}"
        return self._open(url, "application/vnd.github+json")
