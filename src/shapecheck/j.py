"""The ``j`` namespace: every checker constant and combinator in one place.

    from shapecheck import j

    point = j.object({"x": j.number, "y": j.number, "label?": j.string})
"""

from .checker import (  # noqa: F401
    any,
    array,
    boolean,
    literal,
    nil,
    nullable,
    number,
    object,
    string,
    unknown,
)

__all__ = [
    "string",
    "number",
    "boolean",
    "nil",
    "unknown",
    "literal",
    "any",
    "nullable",
    "array",
    "object",
]
