"""Identifier case conversion shared by the analyzers and templates."""

from __future__ import annotations

import re
from typing import List

_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")
_WORDS = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z0-9]+|[0-9]+")


def split_words(value: str) -> List[str]:
    """Split snake, kebab, camel and Pascal identifiers into their words."""
    words: List[str] = []
    for chunk in _SEPARATORS.split(value):
        if chunk:
            words.extend(_WORDS.findall(chunk))
    return words


def pascal_case(value: str) -> str:
    return "".join(word[:1].upper() + word[1:].lower() for word in split_words(value))


def camel_case(value: str) -> str:
    pascal = pascal_case(value)
    if not pascal:
        return pascal
    first = split_words(value)[0]
    return first.lower() + pascal[len(first):]


def snake_case(value: str) -> str:
    return "_".join(word.lower() for word in split_words(value))


def kebab_case(value: str) -> str:
    return "-".join(word.lower() for word in split_words(value))


_RENAME_RULES = {
    "lowercase": lambda name: "".join(split_words(name)).lower(),
    "UPPERCASE": lambda name: "".join(split_words(name)).upper(),
    "PascalCase": pascal_case,
    "camelCase": camel_case,
    "snake_case": snake_case,
    "SCREAMING_SNAKE_CASE": lambda name: snake_case(name).upper(),
    "kebab-case": kebab_case,
    "SCREAMING-KEBAB-CASE": lambda name: kebab_case(name).upper(),
}


def apply_rename_rule(name: str, rule: str | None) -> str:
    """Apply a serde ``rename_all`` rule; unknown rules leave the name untouched."""
    if not rule:
        return name
    converter = _RENAME_RULES.get(rule)
    if converter is None:
        return name
    return converter(name)


__all__ = [
    "apply_rename_rule",
    "camel_case",
    "kebab_case",
    "pascal_case",
    "snake_case",
    "split_words",
]
