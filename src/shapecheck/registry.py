"""Named shape registry."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

from .checker import CompositeChecker, Steps
from .exceptions import ShapeDefinitionError
from .types import Checker, is_checker

logger = logging.getLogger(__name__)


class ShapeRegistry:
    """Maps shape names to checkers.

    ``deferred(name)`` hands out a producer that looks the name up when it is
    called, which is how shapes refer to each other (or to themselves)
    without requiring definition order.
    """

    def __init__(self) -> None:
        self._shapes: Dict[str, Checker[Any]] = {}

    def register(self, name: str, checker: Checker[Any]) -> Checker[Any]:
        if name in self._shapes:
            raise ShapeDefinitionError(f"shape '{name}' is already registered")
        if not is_checker(checker):
            raise ShapeDefinitionError(f"expected a checker, got {checker!r}", name)
        self._shapes[name] = checker
        return checker

    def get(self, name: str) -> Checker[Any]:
        if name not in self._shapes:
            raise KeyError(f"Shape '{name}' is not registered. Available shapes: {self.names()}")
        return self._shapes[name]

    def lookup(self, name: str) -> Optional[Checker[Any]]:
        """Like ``get`` but returns None for unregistered names."""
        return self._shapes.get(name)

    def deferred(self, name: str) -> Callable[[], Optional[Checker[Any]]]:
        def producer() -> Optional[Checker[Any]]:
            # None for an unregistered name makes the property check reject
            return self.lookup(name)

        producer.__name__ = f"deferred_{name}"
        return producer

    def names(self) -> List[str]:
        return sorted(self._shapes)

    def __contains__(self, name: object) -> bool:
        return name in self._shapes

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._shapes)

    def ref(self, name: str) -> "ShapeRef":
        return ShapeRef(self, name)


class ShapeRef(CompositeChecker):
    """Checker that delegates to a registry entry looked up at check time.

    Usable wherever a checker is expected (array elements, union members),
    unlike ``ShapeRegistry.deferred`` producers which only fit object
    properties.
    """

    __slots__ = ("registry", "name")

    def __init__(self, registry: ShapeRegistry, name: str):
        self.registry = registry
        self.name = name

    def resolve(self) -> Optional[Checker[Any]]:
        return self.registry.lookup(self.name)

    def steps(self, value: Any) -> Steps:
        checker = self.resolve()
        if checker is None:
            logger.debug("Shape '%s' is not registered; rejecting", self.name)
            return False
        return (yield checker, value)

    def __repr__(self) -> str:
        return f"ShapeRef({self.name!r})"
