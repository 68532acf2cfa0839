"""Placeholder substitution across the files of a new project."""

from __future__ import annotations

import glob
import logging
import os
import re
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Sequence
from uuid import uuid4

from .naming import CASE_ALIASES, CASE_NAMES, case_variants

__all__ = [
    "BRACED_SYNTAX",
    "DEFAULT_SCRIPT_EXTENSIONS",
    "SCRIPT_SYNTAX",
    "BracedSyntax",
    "PlaceholderForm",
    "PlaceholderSyntax",
    "ScriptSyntax",
    "SubstitutionEngine",
    "classify",
]


LOGGER = logging.getLogger(__name__)

DEFAULT_SCRIPT_EXTENSIONS: frozenset[str] = frozenset({".js", ".jsx", ".ts", ".tsx"})


def _alternation(tokens: Iterable[str]) -> str:
    # Longest first so that ``name_x`` wins over ``name`` and ``pathCase`` over ``path``.
    ordered = sorted(set(tokens), key=lambda token: (-len(token), token))
    return "|".join(re.escape(token) for token in ordered)


_CASE_PATTERN = _alternation((*CASE_NAMES, *CASE_ALIASES))


@dataclass(frozen=True, slots=True)
class PlaceholderForm:
    """One spelling of a placeholder: ``prefix key [case_separator case] suffix``."""

    prefix: str
    case_separator: str
    suffix: str = ""

    def source(self, index: int, keys: str) -> str:
        return (
            f"{re.escape(self.prefix)}(?P<key{index}>{keys})"
            f"(?:{re.escape(self.case_separator)}(?P<case{index}>{_CASE_PATTERN}))?"
            f"{re.escape(self.suffix)}"
        )


class PlaceholderSyntax(ABC):
    """Strategy describing how placeholders are spelled in a family of files."""

    name: str

    @property
    @abstractmethod
    def forms(self) -> Sequence[PlaceholderForm]:
        """Every spelling recognised by this syntax."""

    def compile(self, keys: Iterable[str]) -> re.Pattern[str]:
        alternation = _alternation(keys)
        return re.compile("|".join(form.source(index, alternation) for index, form in enumerate(self.forms)))

    def substitute(self, text: str, answers: Mapping[str, str]) -> str:
        """Replace every placeholder for the keys of ``answers`` in ``text``.

        All keys are handled in a single pass, so the result does not depend
        on the order of ``answers`` and substituted values are never rescanned.
        Unknown case names are left as they are.
        """

        keys = [key for key in answers if key]
        if not keys:
            return text

        variants: dict[str, dict[str, str]] = {}
        count = len(self.forms)

        def replace(match: re.Match[str]) -> str:
            for index in range(count):
                key = match.group(f"key{index}")
                if key is not None:
                    case = match.group(f"case{index}")
                    break
            else:  # pragma: no cover - the pattern always captures a key
                return match.group(0)

            value = answers[key]
            if case is None:
                return value
            if key not in variants:
                variants[key] = case_variants(value)
            return variants[key][CASE_ALIASES.get(case, case)]

        return self.compile(keys).sub(replace, text)


class ScriptSyntax(PlaceholderSyntax):
    """Identifier-safe ``__ctp__key`` / ``__ctp__key_case`` placeholders."""

    name = "script"
    _forms = (PlaceholderForm("__ctp__", "_"),)

    @property
    def forms(self) -> Sequence[PlaceholderForm]:
        return self._forms


class BracedSyntax(PlaceholderSyntax):
    """``{key}``, ``{key.case}``, ``--ctp--key`` and ``--ctp--key.case`` placeholders."""

    name = "braced"
    _forms = (
        PlaceholderForm("{", ".", "}"),
        PlaceholderForm("--ctp--", "."),
    )

    @property
    def forms(self) -> Sequence[PlaceholderForm]:
        return self._forms


SCRIPT_SYNTAX = ScriptSyntax()
BRACED_SYNTAX = BracedSyntax()


def _normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    return frozenset(
        (ext if ext.startswith(".") else f".{ext}").lower() for ext in extensions if ext.strip()
    )


def classify(path: str | Path, script_extensions: Iterable[str] = DEFAULT_SCRIPT_EXTENSIONS) -> PlaceholderSyntax:
    """Pick the placeholder syntax used by ``path`` based on its extension."""

    if Path(path).suffix.lower() in _normalize_extensions(script_extensions):
        return SCRIPT_SYNTAX
    return BRACED_SYNTAX


def _replace_contents(path: Path, data: bytes) -> None:
    staged = path.with_name(f".{path.name}.{uuid4().hex}.tmp")
    try:
        staged.write_bytes(data)
        shutil.copymode(path, staged)
        os.replace(staged, path)
    except Exception:
        staged.unlink(missing_ok=True)
        raise


@dataclass(slots=True)
class SubstitutionEngine:
    """Rewrite the files selected by glob patterns with the collected answers."""

    script_extensions: frozenset[str] = field(default=DEFAULT_SCRIPT_EXTENSIONS)

    def __post_init__(self) -> None:
        self.script_extensions = _normalize_extensions(self.script_extensions)

    def matched_files(self, root: str | Path, patterns: Iterable[str]) -> list[Path]:
        """Return the files matched by ``patterns`` below ``root``.

        Files keep pattern order, sorted within a pattern. A file matched by
        several patterns is listed once.
        """

        base = glob.escape(str(Path(root)))
        seen: set[Path] = set()
        files: list[Path] = []
        for pattern in patterns:
            matches = glob.glob(os.path.join(base, pattern.lstrip("/")), recursive=True)
            for match in sorted(matches):
                path = Path(match)
                if path in seen or not path.is_file():
                    continue
                seen.add(path)
                files.append(path)
        return files

    def rewrite(self, path: Path, answers: Mapping[str, str]) -> bool:
        """Substitute placeholders in ``path``; return ``True`` when it changed."""

        raw = path.read_bytes()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            LOGGER.warning("skipping %s: not a UTF-8 text file", path)
            return False

        syntax = classify(path, self.script_extensions)
        rendered = syntax.substitute(text, answers)
        if rendered == text:
            return False

        _replace_contents(path, rendered.encode("utf-8"))
        LOGGER.debug("rewrote %s using %s placeholders", path, syntax.name)
        return True

    def apply(self, root: str | Path, patterns: Iterable[str], answers: Mapping[str, str]) -> list[Path]:
        """Rewrite every matched file and return those whose content changed."""

        return [path for path in self.matched_files(root, patterns) if self.rewrite(path, answers)]
