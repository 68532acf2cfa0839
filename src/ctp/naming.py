"""Naming convention conversions used when rendering placeholders."""

from __future__ import annotations

import re
from typing import Callable, Iterable

__all__ = [
    "CASE_ALIASES",
    "CASE_NAMES",
    "camel_case",
    "capital_case",
    "case_variants",
    "constant_case",
    "dot_case",
    "header_case",
    "no_case",
    "param_case",
    "pascal_case",
    "path_case",
    "sentence_case",
    "snake_case",
    "split_words",
]


_SEPARATORS = re.compile(r"[\W_]+", flags=re.UNICODE)


def _is_boundary(previous: str, current: str, following: str) -> bool:
    if current.isupper():
        if previous.islower() or previous.isdecimal():
            return True
        # last capital of an acronym starts the next word: XMLHttp
        return previous.isupper() and following.islower()
    return previous.isdecimal() != current.isdecimal()


def _split_token(token: str) -> list[str]:
    words: list[str] = []
    start = 0
    for index in range(1, len(token)):
        following = token[index + 1] if index + 1 < len(token) else ""
        if _is_boundary(token[index - 1], token[index], following):
            words.append(token[start:index])
            start = index
    words.append(token[start:])
    return words


def split_words(value: str) -> list[str]:
    """Split ``value`` into the words that every case converter joins.

    Words are separated at lower/upper case transitions (``myApp``, also for
    non-ASCII letters such as ``caféÜber``), at the end of an acronym
    (``XMLHttp``), between letters and digits (``v2``) and at any run of
    characters that are neither letters nor digits.
    """

    words: list[str] = []
    for token in _SEPARATORS.split(value):
        if token:
            words.extend(_split_token(token))
    return words


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def _join(words: Iterable[str], separator: str) -> str:
    return separator.join(words)


def camel_case(value: str) -> str:
    words = split_words(value)
    return _join(
        (word.lower() if index == 0 else _capitalize(word) for index, word in enumerate(words)),
        "",
    )


def pascal_case(value: str) -> str:
    return _join((_capitalize(word) for word in split_words(value)), "")


def snake_case(value: str) -> str:
    return _join((word.lower() for word in split_words(value)), "_")


def param_case(value: str) -> str:
    """Return ``value`` in kebab case, e.g. ``my-app``."""

    return _join((word.lower() for word in split_words(value)), "-")


def constant_case(value: str) -> str:
    return _join((word.upper() for word in split_words(value)), "_")


def dot_case(value: str) -> str:
    return _join((word.lower() for word in split_words(value)), ".")


def header_case(value: str) -> str:
    return _join((_capitalize(word) for word in split_words(value)), "-")


def path_case(value: str) -> str:
    return _join((word.lower() for word in split_words(value)), "/")


def no_case(value: str) -> str:
    return _join((word.lower() for word in split_words(value)), " ")


def sentence_case(value: str) -> str:
    words = split_words(value)
    return _join(
        (_capitalize(word) if index == 0 else word.lower() for index, word in enumerate(words)),
        " ",
    )


def capital_case(value: str) -> str:
    return _join((_capitalize(word) for word in split_words(value)), " ")


_CONVERTERS: dict[str, Callable[[str], str]] = {
    "camel": camel_case,
    "capital": capital_case,
    "constant": constant_case,
    "dot": dot_case,
    "header": header_case,
    "no": no_case,
    "param": param_case,
    "pascal": pascal_case,
    "path": path_case,
    "sentence": sentence_case,
    "snake": snake_case,
}

CASE_NAMES: tuple[str, ...] = tuple(_CONVERTERS)

# Templates written for older releases spell the path variant ``pathCase``.
CASE_ALIASES: dict[str, str] = {"pathCase": "path"}


def case_variants(value: str) -> dict[str, str]:
    """Return ``value`` rendered in every supported naming convention."""

    return {name: converter(value) for name, converter in _CONVERTERS.items()}
