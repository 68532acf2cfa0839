from __future__ import annotations

import os
from pathlib import Path

import pytest

from ctp.substitution import (
    BRACED_SYNTAX,
    SCRIPT_SYNTAX,
    SubstitutionEngine,
    classify,
)


@pytest.fixture()
def engine() -> SubstitutionEngine:
    return SubstitutionEngine()


def _write(root: Path, relative: str, text: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_script_placeholders(tmp_path: Path, engine: SubstitutionEngine):
    path = _write(tmp_path, "src/app.ts", "const title = '__ctp__title'\nclass __ctp__title_pascal {}\n")

    assert engine.apply(tmp_path, ["src/*.ts"], {"title": "my app"}) == [path]

    text = path.read_text(encoding="utf-8")
    assert text == "const title = 'my app'\nclass MyApp {}\n"
    assert "__ctp__title" not in text


def test_braced_placeholders(tmp_path: Path, engine: SubstitutionEngine):
    path = _write(tmp_path, "README.md", "# {name}\n\n--ctp--name.snake\n")

    engine.apply(tmp_path, ["README.md"], {"name": "Cool Thing"})

    assert path.read_text(encoding="utf-8") == "# Cool Thing\n\ncool_thing\n"


def test_all_braced_forms_and_global_replacement():
    text = "{name} {name.pascal} --ctp--name --ctp--name.constant {name} --ctp--name.param"
    assert BRACED_SYNTAX.substitute(text, {"name": "cool thing"}) == (
        "cool thing CoolThing cool thing COOL_THING cool thing cool-thing"
    )


def test_braced_syntax_ignores_script_tokens_and_vice_versa():
    assert BRACED_SYNTAX.substitute("__ctp__name", {"name": "x"}) == "__ctp__name"
    assert SCRIPT_SYNTAX.substitute("{name} --ctp--name", {"name": "x"}) == "{name} --ctp--name"


def test_unknown_case_and_key_are_left_in_place():
    answers = {"name": "Cool Thing"}
    assert BRACED_SYNTAX.substitute("{name.shout} {other} {other.snake}", answers) == (
        "{name.shout} {other} {other.snake}"
    )
    assert SCRIPT_SYNTAX.substitute("__ctp__other_snake", answers) == "__ctp__other_snake"


def test_path_case_alias():
    assert BRACED_SYNTAX.substitute("{name.path} {name.pathCase}", {"name": "Cool Thing"}) == (
        "cool/thing cool/thing"
    )
    assert SCRIPT_SYNTAX.substitute("__ctp__name_pathCase", {"name": "Cool Thing"}) == "cool/thing"


def test_keys_sharing_a_prefix_do_not_interfere():
    text = "__ctp__name_x __ctp__name_snake __ctp__name"
    forward = SCRIPT_SYNTAX.substitute(text, {"name": "a b", "name_x": "zzz"})
    backward = SCRIPT_SYNTAX.substitute(text, {"name_x": "zzz", "name": "a b"})
    assert forward == backward == "zzz a_b a b"


def test_result_is_independent_of_key_order(tmp_path: Path):
    content = "{name.pascal} --ctp--description {license} {name}\n"
    first = _write(tmp_path / "one", "README.md", content)
    second = _write(tmp_path / "two", "README.md", content)
    answers = {"name": "cool thing", "description": "A {license} tool", "license": "MIT"}

    SubstitutionEngine().apply(first.parent, ["*.md"], answers)
    SubstitutionEngine().apply(second.parent, ["*.md"], dict(reversed(answers.items())))

    assert first.read_text(encoding="utf-8") == second.read_text(encoding="utf-8")
    assert first.read_text(encoding="utf-8") == "CoolThing A {license} tool MIT cool thing\n"


def test_recursive_globs_and_ordering(tmp_path: Path, engine: SubstitutionEngine):
    readme = _write(tmp_path, "README.md", "{name}")
    guide = _write(tmp_path, "docs/guide/intro.md", "{name.snake}")
    untouched = _write(tmp_path, "src/index.ts", "__ctp__name")
    (tmp_path / "docs" / "folder.md").mkdir()

    changed = engine.apply(tmp_path, ["**/*.md"], {"name": "Cool Thing"})

    assert changed == [readme, guide]
    assert guide.read_text(encoding="utf-8") == "cool_thing"
    assert untouched.read_text(encoding="utf-8") == "__ctp__name"


def test_files_matched_twice_are_rewritten_once(tmp_path: Path, engine: SubstitutionEngine):
    path = _write(tmp_path, "README.md", "{a}")

    assert engine.apply(tmp_path, ["*.md", "README.md"], {"a": "{b}", "b": "B"}) == [path]
    assert path.read_text(encoding="utf-8") == "{b}"


def test_rerun_is_idempotent(tmp_path: Path, engine: SubstitutionEngine):
    path = _write(tmp_path, "package.json", '{"name": "{name.param}"}')

    engine.apply(tmp_path, ["package.json"], {"name": "My App"})
    assert engine.apply(tmp_path, ["package.json"], {"name": "My App"}) == []
    assert path.read_text(encoding="utf-8") == '{"name": "my-app"}'


def test_binary_files_are_skipped(tmp_path: Path, engine: SubstitutionEngine):
    path = tmp_path / "logo.png"
    path.write_bytes(b"\x89PNG\xff\xfe{name}")

    assert engine.apply(tmp_path, ["*.png"], {"name": "demo"}) == []
    assert path.read_bytes() == b"\x89PNG\xff\xfe{name}"


def test_line_endings_are_preserved(tmp_path: Path, engine: SubstitutionEngine):
    path = tmp_path / "notes.txt"
    path.write_bytes(b"title\r\n{name}\r\n")

    engine.apply(tmp_path, ["notes.txt"], {"name": "demo"})

    assert path.read_bytes() == b"title\r\ndemo\r\n"


@pytest.mark.parametrize(
    "filename, syntax",
    [
        ("index.js", SCRIPT_SYNTAX),
        ("App.jsx", SCRIPT_SYNTAX),
        ("main.ts", SCRIPT_SYNTAX),
        ("View.tsx", SCRIPT_SYNTAX),
        ("package.json", BRACED_SYNTAX),
        ("README.md", BRACED_SYNTAX),
        ("main.py", BRACED_SYNTAX),
        ("Makefile", BRACED_SYNTAX),
    ],
)
def test_classify_default_extensions(filename, syntax):
    assert classify(filename) is syntax


def test_configurable_script_extensions(tmp_path: Path):
    engine = SubstitutionEngine(frozenset({"py", ".vue"}))
    module = _write(tmp_path, "app.py", "class __ctp__name_pascal: pass")
    script = _write(tmp_path, "index.ts", "{name}")

    engine.apply(tmp_path, ["*.py", "*.ts"], {"name": "my app"})

    assert classify("App.vue", engine.script_extensions) is SCRIPT_SYNTAX
    assert module.read_text(encoding="utf-8") == "class MyApp: pass"
    assert script.read_text(encoding="utf-8") == "my app"


def test_rewrite_keeps_file_mode(tmp_path: Path, engine: SubstitutionEngine):
    script = _write(tmp_path, "setup.sh", "echo {name.param}\n")
    script.chmod(0o755)

    assert engine.rewrite(script, {"name": "Cool Thing"})

    assert script.read_text(encoding="utf-8") == "echo cool-thing\n"
    assert script.stat().st_mode & 0o777 == 0o755
    assert [path.name for path in tmp_path.iterdir()] == ["setup.sh"]


def test_interrupted_rewrite_leaves_original_intact(
    tmp_path: Path, engine: SubstitutionEngine, monkeypatch: pytest.MonkeyPatch
):
    path = _write(tmp_path, "README.md", "# {name}\n")

    def failing_replace(source, destination):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", failing_replace)
    with pytest.raises(OSError):
        engine.rewrite(path, {"name": "demo"})

    assert path.read_text(encoding="utf-8") == "# {name}\n"
    assert [item.name for item in tmp_path.iterdir()] == ["README.md"]
