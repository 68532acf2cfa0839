"""Configuration shared by the project creator and the CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping

from .github import DEFAULT_API_URL
from .substitution import DEFAULT_SCRIPT_EXTENSIONS

__all__ = ["CtpConfig", "default_cache_dir"]


def default_cache_dir() -> Path:
    return Path.home() / ".ctp" / "templates"


@dataclass(frozen=True, slots=True)
class CtpConfig:
    """Settings for a ctp run.

    Attributes
    ----------
    cache_dir:
        Directory holding one sub-directory per cached template.
    api_url:
        Base URL of the GitHub REST API.
    token:
        Optional GitHub token sent with every request. Raises the API rate
        limit and gives access to private templates.
    script_extensions:
        File extensions that use ``__ctp__key`` placeholders instead of the
        braced ``{key}`` spelling.
    """

    cache_dir: Path = field(default_factory=default_cache_dir)
    api_url: str = DEFAULT_API_URL
    token: str | None = None
    script_extensions: frozenset[str] = DEFAULT_SCRIPT_EXTENSIONS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CtpConfig":
        """Build a :class:`CtpConfig` from ``CTP_*`` and ``GITHUB_TOKEN`` variables."""

        env = os.environ if environ is None else environ

        cache_dir = env.get("CTP_CACHE_DIR", "").strip()
        extensions = env.get("CTP_SCRIPT_EXTENSIONS", "").strip()

        return cls(
            cache_dir=Path(cache_dir).expanduser() if cache_dir else default_cache_dir(),
            api_url=env.get("CTP_GITHUB_API", "").strip() or DEFAULT_API_URL,
            token=env.get("GITHUB_TOKEN", "").strip() or None,
            script_extensions=(
                frozenset(part.strip() for part in extensions.split(",") if part.strip())
                if extensions
                else DEFAULT_SCRIPT_EXTENSIONS
            ),
        )

    def with_cache_dir(self, cache_dir: str | Path | None) -> "CtpConfig":
        if cache_dir is None:
            return self
        return replace(self, cache_dir=Path(cache_dir).expanduser())
