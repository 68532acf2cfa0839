"""Create projects from GitHub template repositories.

The package fetches a template repository, keeps a timestamped copy of it in a
local cache, asks for the values declared in the template's ``ctp.json`` and
materializes a new project by substituting placeholders in many naming
conventions, before running the template's post-creation hooks.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .cache import CacheResult, CacheStatus, TemplateCache
from .config import CtpConfig
from .errors import (
    ArchiveLayoutError,
    CtpError,
    InvalidReference,
    ManifestParseError,
    ProjectExistsError,
    StaleCacheFallback,
    TemplateUnavailable,
    ValidationFailure,
)
from .hooks import run_created_hooks, tokenize_command
from .locator import RepositoryIdentity, cache_key, parse_reference
from .manifest import CtpManifest, load_manifest
from .naming import CASE_NAMES, case_variants, split_words
from .project import CreatedProject, ProjectCreator
from .questions import Question, QuestionPlanner
from .substitution import PlaceholderSyntax, SubstitutionEngine, classify

__all__ = [
    "ArchiveLayoutError",
    "CASE_NAMES",
    "CacheResult",
    "CacheStatus",
    "CreatedProject",
    "CtpConfig",
    "CtpError",
    "CtpManifest",
    "InvalidReference",
    "ManifestParseError",
    "PlaceholderSyntax",
    "ProjectCreator",
    "ProjectExistsError",
    "Question",
    "QuestionPlanner",
    "RepositoryIdentity",
    "StaleCacheFallback",
    "SubstitutionEngine",
    "TemplateCache",
    "TemplateUnavailable",
    "ValidationFailure",
    "cache_key",
    "case_variants",
    "classify",
    "load_manifest",
    "parse_reference",
    "run_created_hooks",
    "split_words",
    "tokenize_command",
]
