"""Runtime type inference for composed checkers.

``json_type_of`` returns the typing annotation that a successful ``check``
implies, e.g.::

    >>> json_type_of(j.nullable(j.array(j.string)))
    typing.Optional[typing.List[str]]

Object shapes become ``TypedDict`` classes keyed by the unescaped property
names, with optional properties marked ``NotRequired``. The result can be fed
to static tooling or to ``pydantic.TypeAdapter``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, List, Literal, Optional, Set, Union

from typing_extensions import Never, NotRequired, Required, TypedDict

from .checker import (
    AnyChecker,
    ArrayChecker,
    BooleanChecker,
    LiteralChecker,
    NilChecker,
    NullableChecker,
    NumberChecker,
    ObjectChecker,
    StringChecker,
    UnknownChecker,
)
from .registry import ShapeRef
from .types import Deferred, is_checker

logger = logging.getLogger(__name__)

DEFAULT_TYPE_NAME = "Shape"


class _Inferrer:
    def __init__(self) -> None:
        # deferred producers and shape refs currently being expanded
        self._active: Set[Hashable] = set()

    def infer(self, checker: Any, name: str) -> Any:
        if isinstance(checker, StringChecker):
            return str
        if isinstance(checker, NumberChecker):
            return float
        if isinstance(checker, BooleanChecker):
            return bool
        if isinstance(checker, NilChecker):
            return None
        if isinstance(checker, UnknownChecker):
            return Any
        if isinstance(checker, LiteralChecker):
            return Literal[checker.value]
        if isinstance(checker, AnyChecker):
            members = [self.infer(c, f"{name}_{i}") for i, c in enumerate(checker.checkers)]
            return _union(members)
        if isinstance(checker, NullableChecker):
            inner = self.infer(checker.inner, name)
            if inner is Any:
                return Any
            return Optional[inner]
        if isinstance(checker, ArrayChecker):
            return List[self.infer(checker.element, f"{name}_item")]
        if isinstance(checker, ObjectChecker):
            return self._infer_object(checker, name)
        if isinstance(checker, ShapeRef):
            key = (id(checker.registry), checker.name)
            return self._infer_lazy(key, checker.resolve, name)
        return Any

    def _infer_object(self, checker: ObjectChecker, name: str) -> Any:
        fields = {}
        for prop in checker.properties:
            field_type = self._infer_entry(prop.entry, f"{name}_{prop.name}")
            fields[prop.name] = NotRequired[field_type] if prop.optional else Required[field_type]
        return TypedDict(name, fields)

    def _infer_entry(self, entry: Any, name: str) -> Any:
        if not isinstance(entry, Deferred):
            return self.infer(entry.resolve(), name)
        return self._infer_lazy(id(entry.producer), entry.resolve, name)

    def _infer_lazy(self, key: Hashable, resolve: Callable[[], Any], name: str) -> Any:
        if key in self._active:
            logger.debug("Recursive reference at %s inferred as Any", name)
            return Any
        self._active.add(key)
        try:
            produced = resolve()
            if not is_checker(produced):
                return Never
            return self.infer(produced, name)
        finally:
            self._active.discard(key)


def _union(members: List[Any]) -> Any:
    if not members:
        return Never
    if any(member is Any for member in members):
        return Any
    if len(members) == 1:
        return members[0]
    return Union[tuple(members)]


def json_type_of(checker: Any, name: Optional[str] = None) -> Any:
    """Return the type annotation validated by ``checker``.

    Args:
        checker: A composed checker.
        name: Class name for the root ``TypedDict`` when ``checker`` is an
            object shape. Nested object shapes derive their names from it.

    Returns:
        A typing annotation. Checkers this module does not recognise infer
        ``Any``.
    """
    return _Inferrer().infer(checker, name or DEFAULT_TYPE_NAME)


JsonOf = json_type_of


__all__ = ["json_type_of", "JsonOf", "DEFAULT_TYPE_NAME"]
