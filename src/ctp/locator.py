"""Parse ``owner/repo`` template references."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidReference

__all__ = ["RepositoryIdentity", "cache_key", "parse_reference"]


@dataclass(frozen=True, slots=True)
class RepositoryIdentity:
    """Owner and repository name of a template hosted on GitHub."""

    owner: str
    repo: str

    @classmethod
    def parse(cls, ref: str) -> "RepositoryIdentity":
        return parse_reference(ref)

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_reference(ref: str) -> RepositoryIdentity:
    """Return the :class:`RepositoryIdentity` described by ``ref``.

    ``ref`` must contain exactly one ``/`` with a non-empty owner on the left
    and a non-empty repository name on the right.
    """

    text = ref.strip()
    owner, separator, repo = text.rpartition("/")
    if not separator or not owner or not repo or "/" in owner:
        raise InvalidReference(f'"{ref}" is not a repository path.')
    if owner != owner.strip() or repo != repo.strip():
        raise InvalidReference(f'"{ref}" is not a repository path.')
    return RepositoryIdentity(owner=owner, repo=repo)


def cache_key(identity: RepositoryIdentity) -> str:
    """Directory name under which ``identity`` is cached."""

    return f"{identity.owner}-{identity.repo}"
