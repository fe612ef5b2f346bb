"""Helpers for GraphQL type reference strings (``[String!]!`` and friends)."""

from __future__ import annotations

import re

_NAME = r"[_A-Za-z][_0-9A-Za-z]*"
_NAME_RE = re.compile(rf"^{_NAME}$")
_TYPE_REF_RE = re.compile(rf"^\[*{_NAME}!?(\]!?)*$")


def is_valid_name(name: str) -> bool:
    """True for a legal GraphQL name."""
    return bool(_NAME_RE.match(name))


def is_valid_type_ref(ref: str) -> bool:
    """True for a well-formed type reference with balanced brackets."""
    if not _TYPE_REF_RE.match(ref):
        return False
    return ref.count("[") == ref.count("]")


def named_type(ref: str) -> str:
    """Innermost named type: ``[[Foo!]]!`` -> ``Foo``."""
    return ref.replace("[", "").replace("]", "").replace("!", "").strip()


def list_of(element: str, element_non_null: bool) -> str:
    """Wrap an element type as a list, marking the element non-null if asked."""
    return f"[{element}!]" if element_non_null else f"[{element}]"


def split_non_null(ref: str) -> tuple[str, bool]:
    """
    Split a reference into (type without outer ``!``, nullable).

    ``[String!]!`` -> (``[String!]``, False); ``Product`` -> (``Product``, True)
    """
    ref = ref.strip()
    if ref.endswith("!"):
        return ref[:-1], False
    return ref, True


def accepts(expected: str, actual: str) -> bool:
    """
    True when a field typed ``actual`` satisfies an interface field typed ``expected``.

    The implementer may tighten a nullable reference to non-null at any
    level, but may not change the named type or list depth.
    """
    if expected == actual:
        return True
    expected_inner, expected_nullable = split_non_null(expected)
    actual_inner, actual_nullable = split_non_null(actual)
    if not expected_nullable and actual_nullable:
        return False
    if expected_inner.startswith("[") and actual_inner.startswith("["):
        return accepts(expected_inner[1:-1], actual_inner[1:-1])
    return expected_inner == actual_inner
