"""Declared property-name grammar for object shapes.

A declared key is the real property name followed by a run of trailing ``?``
characters. The run is read two at a time: each ``??`` pair stands for one
literal ``?`` in the real name, and a leftover single ``?`` marks the property
optional.

    >>> is_optional_property("foo?"), unescape_property_name("foo?")
    (True, 'foo')
    >>> is_optional_property("foo??"), unescape_property_name("foo??")
    (False, 'foo?')

Question marks before the trailing run are never touched.
"""

from __future__ import annotations

from typing import Tuple


def _split_trailing_marks(property_name: str) -> Tuple[str, int]:
    head = property_name.rstrip("?")
    return head, len(property_name) - len(head)


def is_optional_property(property_name: str) -> bool:
    """Return True when the trailing ``?`` run has odd length."""
    _, marks = _split_trailing_marks(property_name)
    return marks % 2 == 1


def unescape_property_name(property_name: str) -> str:
    """Return the real property name a declared key refers to."""
    head, marks = _split_trailing_marks(property_name)
    return head + "?" * (marks // 2)


def escape_property_name(real_name: str, optional: bool = False) -> str:
    """Build the declared key for ``real_name``.

    Inverse of ``unescape_property_name``/``is_optional_property``: every
    trailing ``?`` of the real name is doubled and a single ``?`` is appended
    for optional properties.
    """
    head, marks = _split_trailing_marks(real_name)
    return head + "??" * marks + ("?" if optional else "")


def parse_property_name(property_name: str) -> Tuple[str, bool]:
    """Return ``(real_name, optional)`` for a declared key."""
    head, marks = _split_trailing_marks(property_name)
    return head + "?" * (marks // 2), marks % 2 == 1


__all__ = [
    "is_optional_property",
    "unescape_property_name",
    "escape_property_name",
    "parse_property_name",
]
