"""On-disk cache of downloaded templates."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable
from uuid import uuid4

from .archive import extract_archive, hoist_single_root
from .errors import RepositoryFetchError, StaleCacheFallback, TemplateUnavailable
from .github import RepositoryFetcher, RepositoryMetadata
from .locator import RepositoryIdentity, cache_key

__all__ = [
    "TIMESTAMP_FILENAME",
    "CacheResult",
    "CacheStatus",
    "CachedTemplate",
    "TemplateCache",
]


LOGGER = logging.getLogger(__name__)

TIMESTAMP_FILENAME = ".timestamp"

Extractor = Callable[[bytes, Path], None]


class CacheStatus(str, Enum):
    """How :meth:`TemplateCache.ensure_fresh` satisfied a request."""

    CREATED = "created"
    REFRESHED = "refreshed"
    HIT = "hit"
    STALE = "stale"


@dataclass(frozen=True, slots=True)
class CacheResult:
    path: Path
    status: CacheStatus
    fallback: StaleCacheFallback | None = None


@dataclass(frozen=True, slots=True)
class CachedTemplate:
    key: str
    path: Path
    synced_at: int | None


def _read_sidecar(directory: Path) -> int | None:
    try:
        text = (directory / TIMESTAMP_FILENAME).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    try:
        return int(text.strip())
    except ValueError:
        LOGGER.warning("ignoring unreadable timestamp in %s", directory)
        return None


class TemplateCache:
    """Directory of cached templates, one sub-directory per repository.

    Each entry carries a ``.timestamp`` sidecar with the remote ``updated_at``
    (epoch milliseconds) of the content on disk. Refreshes are staged in a
    sibling directory and swapped in once the archive has been unpacked and the
    sidecar written, so an entry is never observed half replaced.
    """

    def __init__(self, root: str | Path, *, extractor: Extractor = extract_archive) -> None:
        self.root = Path(root).expanduser().resolve()
        self._extract = extractor

    def path_for(self, identity: RepositoryIdentity) -> Path:
        return self.root / cache_key(identity)

    def read_timestamp(self, identity: RepositoryIdentity) -> int | None:
        """Return the last synced timestamp, or ``None`` when never synced."""

        return _read_sidecar(self.path_for(identity))

    @staticmethod
    def needs_refresh(local: int | None, remote: int) -> bool:
        return local is None or remote > local

    def ensure_fresh(
        self,
        identity: RepositoryIdentity,
        fetcher: RepositoryFetcher,
        *,
        offline: bool = False,
        force: bool = False,
    ) -> CacheResult:
        """Make sure an up to date copy of ``identity`` is cached.

        A failed fetch reuses an existing entry (status ``STALE``) and raises
        :class:`TemplateUnavailable` when there is nothing cached. ``force``
        downloads the template even when the cached timestamp is current.
        """

        path = self.path_for(identity)
        if offline:
            if path.is_dir():
                return CacheResult(path, CacheStatus.HIT)
            raise TemplateUnavailable(
                f"the template {identity} has not been downloaded locally; "
                "connect to the Internet and try again"
            )

        try:
            metadata = fetcher.get_metadata(identity)
            local = self.read_timestamp(identity)
            if not force and not self.needs_refresh(local, metadata.updated_at):
                LOGGER.info("cached copy of %s is up to date (%s)", identity, local)
                return CacheResult(path, CacheStatus.HIT)
            existed = path.is_dir()
            self.refresh(identity, fetcher, metadata)
        except RepositoryFetchError as exc:
            return self._fall_back(identity, path, exc)

        return CacheResult(path, CacheStatus.REFRESHED if existed else CacheStatus.CREATED)

    def refresh(
        self,
        identity: RepositoryIdentity,
        fetcher: RepositoryFetcher,
        metadata: RepositoryMetadata,
    ) -> Path:
        """Download ``identity`` and replace its cache entry wholesale."""

        data = fetcher.get_archive(identity, metadata.default_ref)
        target = self.path_for(identity)
        self.root.mkdir(parents=True, exist_ok=True)
        staging = self.root / f".{target.name}.{uuid4().hex}.staging"
        staging.mkdir()
        try:
            self._extract(data, staging)
            hoist_single_root(staging)
            (staging / TIMESTAMP_FILENAME).write_text(str(metadata.updated_at), encoding="utf-8")
            if target.exists():
                shutil.rmtree(target)
            staging.rename(target)
        except Exception:
            shutil.rmtree(staging, ignore_errors=True)
            raise

        LOGGER.info("cached %s at %s (updated_at=%s)", identity, target, metadata.updated_at)
        return target

    def _fall_back(
        self, identity: RepositoryIdentity, path: Path, exc: RepositoryFetchError
    ) -> CacheResult:
        if not path.is_dir():
            raise TemplateUnavailable(
                f"failed to retrieve the template {identity} ({exc}) and it has not been "
                "downloaded locally; connect to the Internet and try again"
            ) from exc

        fallback = StaleCacheFallback(
            f"failed to retrieve the template information for {identity} ({exc}); "
            "loading the template from the local cache"
        )
        LOGGER.info("%s", fallback)
        return CacheResult(path, CacheStatus.STALE, fallback)

    def entries(self) -> list[CachedTemplate]:
        """List cached templates sorted by key."""

        if not self.root.is_dir():
            return []
        return [
            CachedTemplate(key=child.name, path=child, synced_at=_read_sidecar(child))
            for child in sorted(self.root.iterdir())
            if child.is_dir() and not child.name.startswith(".")
        ]
