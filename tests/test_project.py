from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from ctp.cache import CacheStatus, TemplateCache
from ctp.errors import InvalidReference, ManifestParseError, ProjectExistsError, TemplateUnavailable
from ctp.project import ProjectCreator
from tests.fixtures.github_fake import FakeFetcher, ScriptedPrompter, manifest

TEMPLATE = {
    "ctp.json": manifest(
        inputs=["name", {"name": "description", "message": "description"}],
        replaces=["package.json", "README.md", "src/**/*.ts"],
        hooks={"created": ["git init", 'npm run "set up"']},
    ),
    "package.json": '{\n  "name": "{name.param}",\n  "description": "--ctp--description"\n}\n',
    "README.md": "# {name.capital}\n\n{description}\n",
    "src/index.ts": "export class __ctp__name_pascal {}\nexport const id = '__ctp__name_constant'\n",
    "src/nested/ctp.json": "kept",
    "LICENSE": "{name}",
}


class RecordingRunner:
    def __init__(self) -> None:
        self.calls: list[tuple[list[str], Path]] = []

    def __call__(self, argv, cwd):
        self.calls.append((list(argv), cwd))
        return 0


def _creator(cache: TemplateCache, fetcher=None, prompter=None, **kwargs) -> ProjectCreator:
    return ProjectCreator(
        cache=cache,
        fetcher=fetcher or FakeFetcher(TEMPLATE),
        prompter=prompter or ScriptedPrompter({"description": "A tiny tool"}),
        hook_runner=kwargs.pop("hook_runner", RecordingRunner()),
        **kwargs,
    )


def test_create_project_end_to_end(tmp_path: Path, cache: TemplateCache):
    prompter = ScriptedPrompter({"description": "A tiny tool"})
    runner = RecordingRunner()
    creator = _creator(cache, prompter=prompter, hook_runner=runner)

    project = creator.create("owner/template", "My App", directory=tmp_path / "work")

    root = tmp_path / "work" / "My App"
    assert project.path == root
    assert project.answers == {"description": "A tiny tool", "name": "My App"}
    assert project.cache.status is CacheStatus.CREATED

    assert not (root / "ctp.json").exists()
    assert not (root / ".timestamp").exists()
    assert (root / "src" / "nested" / "ctp.json").read_text(encoding="utf-8") == "kept"

    assert (root / "package.json").read_text(encoding="utf-8") == (
        '{\n  "name": "my-app",\n  "description": "A tiny tool"\n}\n'
    )
    assert (root / "README.md").read_text(encoding="utf-8") == "# My App\n\nA tiny tool\n"
    assert (root / "src" / "index.ts").read_text(encoding="utf-8") == (
        "export class MyApp {}\nexport const id = 'MY_APP'\n"
    )
    assert (root / "LICENSE").read_text(encoding="utf-8") == "{name}"
    assert sorted(path.name for path in project.rewritten) == ["README.md", "index.ts", "package.json"]

    assert [question.key for question in prompter.asked[0]] == ["description"]
    assert runner.calls == [(["git", "init"], root), (["npm", "run", "set up"], root)]
    assert project.hook_exit_codes == [0, 0]

    assert (cache.root / "owner-template" / "ctp.json").exists()


def test_name_is_prompted_when_not_given(tmp_path: Path, cache: TemplateCache):
    prompter = ScriptedPrompter({"name": "prompted", "description": ""})

    project = _creator(cache, prompter=prompter).create("owner/template", directory=tmp_path)

    (questions,) = prompter.asked
    assert [(question.key, question.required) for question in questions] == [
        ("name", True),
        ("description", False),
    ]
    assert project.path == tmp_path / "prompted"


def test_name_question_added_when_manifest_omits_it(tmp_path: Path, cache: TemplateCache):
    fetcher = FakeFetcher({"ctp.json": manifest(inputs=["license"])})
    prompter = ScriptedPrompter({"name": "demo", "license": "MIT"})

    project = _creator(cache, fetcher=fetcher, prompter=prompter).create("owner/template", directory=tmp_path)

    assert [question.key for question in prompter.asked[0]] == ["name", "license"]
    assert project.answers == {"name": "demo", "license": "MIT"}


def test_existing_destination_is_rejected(tmp_path: Path, cache: TemplateCache):
    (tmp_path / "demo").mkdir()
    (tmp_path / "demo" / "keep.txt").write_text("mine", encoding="utf-8")

    with pytest.raises(ProjectExistsError):
        _creator(cache).create("owner/template", "demo", directory=tmp_path)

    assert [path.name for path in (tmp_path / "demo").iterdir()] == ["keep.txt"]


def test_missing_manifest_is_fatal(tmp_path: Path, cache: TemplateCache):
    fetcher = FakeFetcher({"README.md": "{name}"})

    with pytest.raises(ManifestParseError):
        _creator(cache, fetcher=fetcher).create("owner/template", "demo", directory=tmp_path)

    assert not (tmp_path / "demo").exists()


def test_invalid_reference_fails_before_fetching(tmp_path: Path, cache: TemplateCache):
    fetcher = FakeFetcher(TEMPLATE)

    with pytest.raises(InvalidReference):
        _creator(cache, fetcher=fetcher).create("not-a-reference", "demo", directory=tmp_path)

    assert fetcher.calls == []


def test_stale_cache_is_used_with_warning(tmp_path: Path, cache: TemplateCache):
    _creator(cache).create("owner/template", "first", directory=tmp_path)
    output = io.StringIO()
    creator = _creator(cache, fetcher=FakeFetcher(fail_metadata=True), console=Console(file=output, width=200))

    project = creator.create("owner/template", "second", directory=tmp_path)

    assert project.cache.status is CacheStatus.STALE
    assert (project.path / "README.md").read_text(encoding="utf-8") == "# Second\n\nA tiny tool\n"
    assert "local cache" in output.getvalue()


def test_unavailable_template_creates_nothing(tmp_path: Path, cache: TemplateCache):
    with pytest.raises(TemplateUnavailable):
        _creator(cache, fetcher=FakeFetcher(fail_metadata=True)).create(
            "owner/template", "demo", directory=tmp_path
        )
    assert not (tmp_path / "demo").exists()


def test_default_directory_is_working_directory(
    tmp_path: Path, cache: TemplateCache, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.chdir(tmp_path)
    project = _creator(cache).create("owner/template", "here")
    assert project.path == (tmp_path / "here").resolve()
