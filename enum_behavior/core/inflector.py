"""Naming helpers used to present enum fields and labels.

The rules follow the classic inflector conventions of MVC frameworks:

    >>> humanize("in_progress")
    'In Progress'
    >>> variable("exemple_field")
    'exempleField'
    >>> presentation_name("exemple_field")
    'exempleFields'
"""

from __future__ import annotations

import re
from functools import lru_cache

import inflect

__all__ = [
    "humanize",
    "camelize",
    "variable",
    "pluralize",
    "presentation_name",
]

inflect_e = inflect.engine()

_LAST_SEGMENT = re.compile(r"^(.*?)([A-Z]?[a-z0-9]+)$")


def humanize(token: object) -> str:
    """Turn ``under_scored`` words into ``Under Scored``."""

    if token is None:
        return ""
    words = str(token).replace("_", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def camelize(name: str) -> str:
    """Return ``name`` in PascalCase."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def variable(name: str) -> str:
    """Return ``name`` in camelCase."""
    camel = camelize(name)
    return camel[:1].lower() + camel[1:]


@lru_cache(maxsize=256)
def pluralize(word: str) -> str:
    """Pluralize the last camel-case segment of ``word``."""

    if not word:
        return word
    match = _LAST_SEGMENT.match(word)
    if match is None:
        return inflect_e.plural(word)  # type: ignore
    head, tail = match.groups()
    plural = inflect_e.plural(tail.lower())  # type: ignore
    if tail[:1].isupper():
        plural = plural[:1].upper() + plural[1:]
    return head + plural


def presentation_name(field: str) -> str:
    """Name under which a field's label set is exposed to display layers."""

    return pluralize(variable(field))
