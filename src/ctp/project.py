"""Create projects from cached templates."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from rich.console import Console

from .cache import TIMESTAMP_FILENAME, CacheResult, TemplateCache
from .config import CtpConfig
from .errors import ProjectExistsError
from .github import GitHubFetcher, RepositoryFetcher
from .hooks import Runner, run_created_hooks
from .locator import parse_reference
from .manifest import MANIFEST_FILENAME, QuestionSpec, load_manifest
from .prompting import Prompter
from .questions import NAME_KEY, QuestionPlanner
from .substitution import SubstitutionEngine

__all__ = ["CreatedProject", "ProjectCreator"]


LOGGER = logging.getLogger(__name__)

_TEMPLATE_ONLY_FILES = frozenset({TIMESTAMP_FILENAME, MANIFEST_FILENAME})


@dataclass(frozen=True, slots=True)
class CreatedProject:
    """Outcome of :meth:`ProjectCreator.create`."""

    path: Path
    answers: dict[str, str]
    cache: CacheResult
    rewritten: list[Path] = field(default_factory=list)
    hook_exit_codes: list[int] = field(default_factory=list)


def _declares_name(inputs: Iterable[str | QuestionSpec]) -> bool:
    return any((item if isinstance(item, str) else item.name) == NAME_KEY for item in inputs)


def copy_template(source: Path, destination: Path) -> Path:
    """Copy ``source`` to ``destination`` without the cache bookkeeping files.

    A failed copy removes whatever was already written to ``destination``.
    """

    def ignore(directory: str, names: list[str]) -> set[str]:
        if Path(directory) == source:
            return {name for name in names if name in _TEMPLATE_ONLY_FILES}
        return set()

    try:
        shutil.copytree(source, destination, symlinks=True, ignore=ignore)
    except Exception:
        shutil.rmtree(destination, ignore_errors=True)
        raise
    return destination


@dataclass(slots=True)
class ProjectCreator:
    """Materialize a project from a template reference.

    The pipeline runs strictly in order: refresh the cached template, read its
    manifest, ask the planned questions, copy the template, substitute the
    placeholders and finally run the ``created`` hooks.
    """

    cache: TemplateCache
    fetcher: RepositoryFetcher
    prompter: Prompter
    planner: QuestionPlanner = field(default_factory=QuestionPlanner)
    engine: SubstitutionEngine = field(default_factory=SubstitutionEngine)
    hook_runner: Runner | None = None
    console: Console | None = None

    @classmethod
    def from_config(
        cls,
        config: CtpConfig,
        prompter: Prompter,
        *,
        fetcher: RepositoryFetcher | None = None,
        console: Console | None = None,
    ) -> "ProjectCreator":
        return cls(
            cache=TemplateCache(config.cache_dir),
            fetcher=fetcher or GitHubFetcher(config.api_url, config.token),
            prompter=prompter,
            engine=SubstitutionEngine(config.script_extensions),
            console=console,
        )

    def _say(self, message: str, style: str = "cyan") -> None:
        LOGGER.info("%s", message)
        if self.console is not None:
            self.console.print(message, style=style, markup=False)

    def create(
        self,
        reference: str,
        name: str | None = None,
        *,
        directory: str | Path | None = None,
        offline: bool = False,
        force: bool = False,
    ) -> CreatedProject:
        """Create a project from the template ``reference`` (``owner/repo``).

        Parameters
        ----------
        reference:
            GitHub repository holding the template.
        name:
            Project name. When omitted the user is asked for it.
        directory:
            Parent directory of the new project, the working directory by default.
        offline:
            Use the cached template without contacting GitHub.
        force:
            Download the template again even when the cached copy is current.
        """

        identity = parse_reference(reference)

        self._say(f"⬇️  fetching latest template information for {identity}")
        cached = self.cache.ensure_fresh(
            identity, self.fetcher, offline=offline, force=force
        )
        if cached.fallback is not None:
            self._say(f"❗ {cached.fallback}", style="red")

        manifest = load_manifest(cached.path / MANIFEST_FILENAME)
        inputs: list[str | QuestionSpec] = list(manifest.inputs)
        if not name and not _declares_name(inputs):
            inputs.insert(0, NAME_KEY)

        questions = self.planner.plan(inputs, name)
        answers = self.planner.finalize(self.prompter.prompt(questions), name)

        parent = Path(directory) if directory is not None else Path.cwd()
        destination = (parent / answers[NAME_KEY]).resolve()
        if destination.exists():
            raise ProjectExistsError(f"{destination} already exists")

        self._say("➡️  copying template for project")
        copy_template(cached.path, destination)

        rewritten: list[Path] = []
        if manifest.replaces:
            self._say("🔁 replacing project files")
            rewritten = self.engine.apply(destination, manifest.replaces, answers)

        codes = run_created_hooks(manifest.created_hooks, destination, runner=self.hook_runner)

        return CreatedProject(
            path=destination,
            answers=answers,
            cache=cached,
            rewritten=rewritten,
            hook_exit_codes=codes,
        )
