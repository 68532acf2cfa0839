"""Turn manifest ``inputs`` into an ordered prompt plan."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .manifest import QuestionSpec

__all__ = [
    "NAME_KEY",
    "RESERVED_KEYS",
    "KeyRule",
    "Question",
    "QuestionPlanner",
]

NAME_KEY = "name"


@dataclass(frozen=True, slots=True)
class KeyRule:
    """Special handling applied to an input key."""

    skip_when_preset: bool = False
    force_required: bool = False


RESERVED_KEYS: Mapping[str, KeyRule] = {
    NAME_KEY: KeyRule(skip_when_preset=True, force_required=True),
}

_NO_RULE = KeyRule()


@dataclass(frozen=True, slots=True)
class Question:
    """A single prompt handed to a :class:`~ctp.prompting.Prompter`."""

    key: str
    type: str = "input"
    message: str | None = None
    default: Any = None
    choices: tuple[Any, ...] | None = None
    required: bool = False
    options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def prompt_text(self) -> str:
        return self.message or self.key

    def validate(self, value: str) -> str | None:
        """Return an error message for ``value`` or ``None`` when acceptable."""

        if self.required and not value:
            return "required"
        return None


class QuestionPlanner:
    """Apply the reserved key rules to the manifest's inputs."""

    def __init__(self, rules: Mapping[str, KeyRule] | None = None) -> None:
        self.rules = dict(RESERVED_KEYS if rules is None else rules)

    def plan(
        self,
        inputs: Iterable[str | QuestionSpec],
        preset_name: str | None = None,
    ) -> list[Question]:
        """Return the questions to ask, in manifest order.

        Parameters
        ----------
        inputs:
            Bare answer keys or structured :class:`QuestionSpec` entries.
        preset_name:
            Project name supplied out of band. When given, inputs for the
            ``name`` key are not asked.
        """

        questions: list[Question] = []
        for item in inputs:
            key = item if isinstance(item, str) else item.name
            rule = self.rules.get(key, _NO_RULE)
            if preset_name and rule.skip_when_preset:
                continue

            if isinstance(item, str):
                questions.append(Question(key=key, required=rule.force_required))
                continue

            choices = tuple(item.choices) if item.choices is not None else None
            questions.append(
                Question(
                    key=key,
                    type=item.type,
                    message=item.message,
                    default=item.default,
                    choices=choices,
                    required=rule.force_required or item.required,
                    options=dict(item.model_extra or {}),
                )
            )
        return questions

    @staticmethod
    def finalize(answers: Mapping[str, str], preset_name: str | None = None) -> dict[str, str]:
        """Merge the preset project name into ``answers``."""

        result = dict(answers)
        if preset_name:
            result[NAME_KEY] = preset_name
        if not result.get(NAME_KEY):
            raise ValueError("answers must include a non-empty 'name' entry")
        return result
