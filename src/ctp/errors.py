"""Custom exception types used by the ctp engine."""

from __future__ import annotations


class CtpError(RuntimeError):
    """Base class for every error the engine reports to its callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidReference(CtpError):
    """Raised when a template reference is not of the form ``owner/repo``."""


class RepositoryFetchError(CtpError):
    """Raised by fetchers when repository metadata or archives are unreachable."""


class TemplateUnavailable(CtpError):
    """Raised when the template cannot be fetched and no cached copy exists."""


class StaleCacheFallback(CtpError):
    """Describes a cached template being reused after a failed fetch.

    Instances are attached to :class:`ctp.cache.CacheResult` rather than raised.
    """


class ManifestParseError(CtpError):
    """Raised when ``ctp.json`` is missing or malformed."""


class ArchiveLayoutError(CtpError):
    """Raised when a template archive does not unpack into a single directory."""


class ProjectExistsError(CtpError):
    """Raised when the project destination already exists."""


class ValidationFailure(CtpError):
    """Raised by prompters when a required answer is empty."""


__all__ = [
    "ArchiveLayoutError",
    "CtpError",
    "InvalidReference",
    "ManifestParseError",
    "ProjectExistsError",
    "RepositoryFetchError",
    "StaleCacheFallback",
    "TemplateUnavailable",
    "ValidationFailure",
]
