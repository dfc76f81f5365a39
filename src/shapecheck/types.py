"""Checker protocol and the tagged entries of a shape descriptor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Protocol, TypeVar, Union

from typing_extensions import TypeGuard

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Checker(Protocol[T_co]):
    """Immutable predicate over untyped values.

    ``check`` returning True narrows ``value`` to ``T_co`` for type checkers
    that understand ``TypeGuard``.
    """

    def check(self, value: Any) -> TypeGuard[T_co]:
        ...


Producer = Callable[[], Any]


def is_checker(target: Any) -> bool:
    """Return True when ``target`` exposes a callable ``check`` method."""
    if target is None or isinstance(target, type):
        return False
    return callable(getattr(target, "check", None))


@dataclass(frozen=True)
class Direct(Generic[T]):
    """Descriptor entry holding a checker."""

    checker: Checker[T]

    def resolve(self) -> Checker[T]:
        return self.checker


@dataclass(frozen=True)
class Deferred:
    """Descriptor entry holding a zero-argument checker producer.

    The producer is called on every resolution, so self-referential shapes
    only expand as deep as the value being checked.
    """

    producer: Producer

    def resolve(self) -> Any:
        return self.producer()


Entry = Union[Direct, Deferred]
