"""Rendering of domain entities as JavaScript literal source text.

The set of renderable shapes is closed: strings, integers, sequences and the
four domain entities. Object keys are emitted in the declared order below,
which is part of the output contract with the frontend.
"""
from typing import Any, Dict, Iterable, Tuple, Type

from good_first_repos.domain.models import Label, Repository, Subject, Topic


OBJECT_FIELDS: Dict[Type, Tuple[str, ...]] = {
    Topic: ("name", "url"),
    Label: ("name", "count", "color"),
    Repository: (
        "name_with_owner",
        "url",
        "description",
        "homepage_url",
        "avatar_url",
        "num_forks",
        "num_issues",
        "num_pull_requests",
        "num_stars",
        "topics",
        "labels",
        "languages",
        "issues",
    ),
    Subject: ("name", "search_term", "repositories"),
}

# Backslash goes first so later escapes are not escaped twice
_STRING_ESCAPES = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def string_literal(value: str) -> str:
    """Quote a string, escaping backslashes, quotes and line terminators."""
    for raw, escaped in _STRING_ESCAPES:
        value = value.replace(raw, escaped)
    return f'"{value}"'


def sequence_literal(values: Iterable[Any]) -> str:
    """Render values as a bracketed, comma-separated array."""
    return "[" + ", ".join(to_literal(value) for value in values) + "]"


def object_literal(entity: Any) -> str:
    """Render an entity as an object with its fields in declared order."""
    fields = OBJECT_FIELDS[type(entity)]
    return "{" + ", ".join(
        f"{name}: {to_literal(getattr(entity, name))}" for name in fields
    ) + "}"


def to_literal(value: Any) -> str:
    """Render a value as JavaScript literal text.

    Args:
        value: A str, int, list/tuple of renderable values, or a Topic,
            Label, Repository or Subject

    Returns:
        The literal source text

    Raises:
        TypeError: For any other type, including bool
    """
    if isinstance(value, bool):
        raise TypeError("Booleans have no literal rendering")
    if isinstance(value, str):
        return string_literal(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (list, tuple)):
        return sequence_literal(value)
    if type(value) in OBJECT_FIELDS:
        return object_literal(value)
    raise TypeError(f"Cannot render {type(value).__name__} as a literal")


def to_module(rendered_subjects: Iterable[str]) -> str:
    """Wrap already rendered subjects in an ES module default export."""
    return "export default [\n" + ",\n".join(rendered_subjects) + "\n];"
