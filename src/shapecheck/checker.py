"""Primitive checkers and the combinators that compose them.

Every checker is an immutable dataclass exposing ``check(value) -> bool``.
Composition happens once, usually at import time:

    user = object({
        "id": number,
        "name": string,
        "email?": nullable(string),
        "tags?": array(string),
        "manager?": lambda: user,
    })

``check`` is total over untyped input: it returns False for anything that
does not conform and never raises on account of the value itself.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Generator, Generic, List, Optional, Sequence, Tuple, TypeVar

from typing_extensions import TypeGuard

from .exceptions import ShapeDefinitionError
from .property_names import parse_property_name
from .types import Checker, Deferred, Direct, Entry, is_checker

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S", bound=str)

# a step yields (checker, value) sub-checks, receives each verdict, and
# returns its own verdict
Steps = Generator[Tuple[Any, Any], bool, bool]


@dataclass(frozen=True)
class StringChecker:
    def check(self, value: Any) -> TypeGuard[str]:
        return isinstance(value, str)


@dataclass(frozen=True)
class NumberChecker:
    """Accepts ints and floats (NaN and infinities included), never bools."""

    def check(self, value: Any) -> TypeGuard[float]:
        return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class BooleanChecker:
    def check(self, value: Any) -> TypeGuard[bool]:
        return value is True or value is False


@dataclass(frozen=True)
class NilChecker:
    def check(self, value: Any) -> TypeGuard[None]:
        return value is None


@dataclass(frozen=True)
class UnknownChecker:
    def check(self, value: Any) -> TypeGuard[Any]:
        return True


string: Checker[str] = StringChecker()
number: Checker[float] = NumberChecker()
boolean: Checker[bool] = BooleanChecker()
nil: Checker[None] = NilChecker()
unknown: Checker[Any] = UnknownChecker()


@dataclass(frozen=True)
class LiteralChecker(Generic[S]):
    value: S

    def check(self, value: Any) -> TypeGuard[S]:
        return isinstance(value, str) and value == self.value


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def evaluate(checker: Any, value: Any) -> bool:
    """Run ``checker`` against ``value`` on an explicit stack.

    Composite checkers describe their work as ``steps`` generators, so nesting
    depth of the value costs heap, not Python call frames. A container that
    reappears inside itself while being descended into is a cyclic value and
    is rejected.
    """
    if not isinstance(checker, CompositeChecker):
        return bool(checker.check(value))

    stack: List[Tuple[Steps, Any, bool]] = []
    # ids of container values currently on the stack, with multiplicity
    active: Counter = Counter()

    def push(composite: "CompositeChecker", target: Any) -> None:
        stack.append((composite.steps(target), target, composite.descends))
        if _is_container(target):
            active[id(target)] += 1

    push(checker, value)
    result: Optional[bool] = None
    while stack:
        frame, frame_value, descends = stack[-1]
        try:
            child, child_value = frame.send(result)
        except StopIteration as stop:
            stack.pop()
            if _is_container(frame_value):
                active[id(frame_value)] -= 1
            result = bool(stop.value)
            continue
        if not isinstance(child, CompositeChecker):
            result = bool(child.check(child_value))
        elif descends and _is_container(child_value) and active[id(child_value)] > 0:
            logger.debug("Cyclic value %s rejected", type(child_value).__name__)
            result = False
        else:
            push(child, child_value)
            result = None
    return bool(result)


class CompositeChecker:
    """Base for checkers that delegate to other checkers.

    Subclasses implement ``steps``; ``check`` drives it through ``evaluate``.
    ``descends`` is True for checkers whose sub-checks look at elements or
    properties rather than at the value itself.
    """

    __slots__ = ()

    descends = False

    def steps(self, value: Any) -> Steps:
        raise NotImplementedError

    def check(self, value: Any) -> bool:
        return evaluate(self, value)


@dataclass(frozen=True)
class AnyChecker(CompositeChecker, Generic[T]):
    """Logical OR over ``checkers``, evaluated in order."""

    checkers: Tuple[Checker[T], ...]

    def steps(self, value: Any) -> Steps:
        for checker in self.checkers:
            if (yield checker, value):
                return True
        return False


@dataclass(frozen=True)
class NullableChecker(CompositeChecker, Generic[T]):
    inner: Checker[T]

    def steps(self, value: Any) -> Steps:
        if value is None:
            return True
        return (yield self.inner, value)


@dataclass(frozen=True)
class ArrayChecker(CompositeChecker, Generic[T]):
    """Accepts lists and tuples whose every element satisfies ``element``."""

    element: Checker[T]
    descends = True

    def steps(self, value: Any) -> Steps:
        if not isinstance(value, (list, tuple)):
            return False
        for item in value:
            if not (yield self.element, item):
                return False
        return True


@dataclass(frozen=True)
class PropertySpec:
    """One declared key of an object shape, decoded once at composition."""

    declared_name: str
    name: str
    optional: bool
    entry: Entry

    def resolve_checker(self) -> Optional[Checker[Any]]:
        """Return the checker for this property, or None if a producer misbehaved."""
        checker = self.entry.resolve()
        if isinstance(self.entry, Deferred) and not is_checker(checker):
            logger.debug(
                "Deferred checker for '%s' produced %r, which is not a checker",
                self.declared_name,
                checker,
            )
            return None
        return checker


@dataclass(frozen=True)
class ObjectChecker(CompositeChecker):
    """Structural check of a mapping against declared properties.

    Undeclared keys are ignored. Absent optional properties are accepted
    without resolving their entry.
    """

    properties: Tuple[PropertySpec, ...]
    descends = True

    def steps(self, value: Any) -> Steps:
        if not isinstance(value, Mapping):
            return False
        for prop in self.properties:
            if prop.name in value:
                checker = prop.resolve_checker()
                if checker is None:
                    return False
                if not (yield checker, value[prop.name]):
                    return False
            elif not prop.optional:
                return False
        return True

    def get_property(self, name: str) -> Optional[PropertySpec]:
        """Look up a property by its real (unescaped) name."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


def _require_checker(target: Any, what: str) -> None:
    if not is_checker(target):
        raise ShapeDefinitionError(f"{what} expects a checker, got {target!r}")


def _to_entry(declared_name: str, target: Any) -> Entry:
    if isinstance(target, Direct):
        if not is_checker(target.checker):
            raise ShapeDefinitionError(
                f"Direct expects a checker, got {target.checker!r}", declared_name
            )
        return target
    if isinstance(target, Deferred):
        if not callable(target.producer):
            raise ShapeDefinitionError(
                f"Deferred expects a zero-argument function, got {target.producer!r}",
                declared_name,
            )
        return target
    if is_checker(target):
        return Direct(target)
    if callable(target):
        return Deferred(target)
    raise ShapeDefinitionError(
        f"expected a checker or a zero-argument function returning one, got {target!r}",
        declared_name,
    )


def literal(value: S) -> Checker[S]:
    """Checker accepting only the string ``value``."""
    if not isinstance(value, str):
        raise ShapeDefinitionError(f"literal expects a string, got {value!r}")
    return LiteralChecker(value)


def any(checkers: Sequence[Checker[T]]) -> Checker[T]:  # noqa: A001
    """Checker accepting values that at least one of ``checkers`` accepts.

    An empty sequence rejects everything.
    """
    checkers = tuple(checkers)
    for checker in checkers:
        _require_checker(checker, "any")
    return AnyChecker(checkers)


def nullable(checker: Checker[T]) -> Checker[Optional[T]]:
    """Checker accepting None, or whatever ``checker`` accepts."""
    _require_checker(checker, "nullable")
    return NullableChecker(checker)


def array(checker: Checker[T]) -> Checker[List[T]]:
    """Checker accepting lists/tuples whose elements all satisfy ``checker``."""
    _require_checker(checker, "array")
    return ArrayChecker(checker)


def object(properties: Mapping) -> Checker[Dict[str, Any]]:  # noqa: A001
    """Checker for mappings described by a shape descriptor.

    Args:
        properties: Mapping of declared key to a checker or to a zero-argument
            function returning a checker. Declared keys follow the grammar in
            ``shapecheck.property_names``.

    Raises:
        ShapeDefinitionError: If the descriptor is not a mapping of strings to
            checkers or checker producers.
    """
    if not isinstance(properties, Mapping):
        raise ShapeDefinitionError(f"object expects a mapping, got {properties!r}")
    specs = []
    for declared_name, target in properties.items():
        if not isinstance(declared_name, str):
            raise ShapeDefinitionError(f"property names must be strings, got {declared_name!r}")
        name, optional = parse_property_name(declared_name)
        specs.append(
            PropertySpec(
                declared_name=declared_name,
                name=name,
                optional=optional,
                entry=_to_entry(declared_name, target),
            )
        )
    return ObjectChecker(tuple(specs))


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
    "StringChecker",
    "NumberChecker",
    "BooleanChecker",
    "NilChecker",
    "UnknownChecker",
    "LiteralChecker",
    "AnyChecker",
    "NullableChecker",
    "ArrayChecker",
    "ObjectChecker",
    "PropertySpec",
    "CompositeChecker",
    "evaluate",
]
