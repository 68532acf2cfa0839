"""Schema for the ``ctp.json`` manifest shipped at the root of a template."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ManifestParseError

__all__ = [
    "MANIFEST_FILENAME",
    "CtpManifest",
    "Hooks",
    "QuestionSpec",
    "load_manifest",
]

MANIFEST_FILENAME = "ctp.json"

JSONPrimitive = Union[str, int, float, bool, None]


class QuestionSpec(BaseModel):
    """Structured prompt definition listed under ``inputs``.

    Only the fields below are interpreted; anything else is preserved so that
    prompters may honour additional options.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    name: str = Field(..., min_length=1, description="Answer key the prompt fills in.")
    type: str = Field("input", description="Prompt kind: input, password, confirm, list, ...")
    message: str | None = Field(None, description="Question shown to the user.")
    default: JSONPrimitive = Field(None, description="Value used when the user just presses enter.")
    choices: List[Union[str, Dict[str, JSONPrimitive]]] | None = Field(
        None, description="Allowed answers for list style prompts."
    )
    required: bool = Field(False, description="Reject empty answers.")


class Hooks(BaseModel):
    """Lifecycle commands declared by the template."""

    model_config = ConfigDict(extra="allow", frozen=True)

    created: Union[str, List[str], None] = Field(
        None, description="Command or commands run inside the new project."
    )


class CtpManifest(BaseModel):
    """Parsed ``ctp.json``."""

    model_config = ConfigDict(extra="allow", frozen=True)

    inputs: List[Union[str, QuestionSpec]] = Field(default_factory=list)
    replaces: List[str] = Field(default_factory=list)
    hooks: Hooks = Field(default_factory=Hooks)

    @property
    def created_hooks(self) -> list[str]:
        created = self.hooks.created
        if created is None:
            return []
        if isinstance(created, str):
            return [created]
        return list(created)


def load_manifest(path: str | Path) -> CtpManifest:
    """Read and validate the manifest stored at ``path``."""

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ManifestParseError(f"template manifest not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestParseError(f"cannot read template manifest {path}: {exc}") from exc

    try:
        return CtpManifest.model_validate_json(text)
    except ValidationError as exc:
        raise ManifestParseError(f"invalid template manifest {path}: {exc}") from exc
