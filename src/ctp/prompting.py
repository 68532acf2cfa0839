"""Prompters that collect answers for a planned list of questions."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from rich.console import Console
from rich.prompt import Confirm, Prompt

from .errors import ValidationFailure
from .questions import Question

__all__ = ["PresetPrompter", "Prompter", "RichPrompter", "check_answer"]


LOGGER = logging.getLogger(__name__)

_CHOICE_TYPES = {"list", "rawlist", "expand"}


@runtime_checkable
class Prompter(Protocol):
    """Collects one string answer per question."""

    def prompt(self, questions: Sequence[Question]) -> dict[str, str]:
        """Return a mapping from question key to answer."""


def check_answer(question: Question, value: str) -> str:
    """Return ``value`` or raise :class:`ValidationFailure` when it is rejected."""

    error = question.validate(value)
    if error is not None:
        raise ValidationFailure(f"{question.key}: {error}")
    return value


def _choice_labels(choices: Sequence[Any]) -> dict[str, str]:
    labels: dict[str, str] = {}
    for choice in choices:
        if isinstance(choice, Mapping):
            label = str(choice.get("name", choice.get("value", "")))
            labels[label] = str(choice.get("value", label))
        else:
            labels[str(choice)] = str(choice)
    return labels


class RichPrompter:
    """Ask questions on the terminal using :mod:`rich.prompt`."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def prompt(self, questions: Sequence[Question]) -> dict[str, str]:
        return {question.key: self.ask(question) for question in questions}

    def ask(self, question: Question) -> str:
        while True:
            try:
                return check_answer(question, self._ask_once(question))
            except ValidationFailure as exc:
                LOGGER.debug("re-asking after rejected answer: %s", exc)
                self.console.print(f"❗ {exc}", style="red", markup=False)

    def _ask_once(self, question: Question) -> str:
        text = question.prompt_text
        kwargs: dict[str, Any] = {"console": self.console}

        if question.type == "confirm":
            default = bool(question.default) if question.default is not None else False
            return "true" if Confirm.ask(text, default=default, **kwargs) else "false"

        if question.default is not None:
            kwargs["default"] = str(question.default)

        if question.type == "password":
            return Prompt.ask(text, password=True, **kwargs)

        if question.type in _CHOICE_TYPES and question.choices:
            labels = _choice_labels(question.choices)
            label = Prompt.ask(text, choices=list(labels), **kwargs)
            return labels.get(label, label)

        return Prompt.ask(text, **kwargs)


class PresetPrompter:
    """Answer questions from pre-supplied values, delegating the rest.

    Without a ``fallback`` unanswered questions take their default, or an
    empty string, and required ones raise :class:`ValidationFailure`.
    """

    def __init__(self, presets: Mapping[str, str], fallback: Prompter | None = None) -> None:
        self.presets = dict(presets)
        self.fallback = fallback

    def prompt(self, questions: Sequence[Question]) -> dict[str, str]:
        answers: dict[str, str] = {}
        remaining: list[Question] = []
        unused = sorted(set(self.presets).difference(question.key for question in questions))
        if unused:
            LOGGER.warning("ignoring answers for undeclared inputs: %s", ", ".join(unused))

        for question in questions:
            if question.key in self.presets:
                answers[question.key] = check_answer(question, self.presets[question.key])
            else:
                remaining.append(question)

        if self.fallback is not None:
            answers.update(self.fallback.prompt(remaining))
        else:
            for question in remaining:
                default = "" if question.default is None else str(question.default)
                answers[question.key] = check_answer(question, default)

        return {question.key: answers[question.key] for question in questions}
