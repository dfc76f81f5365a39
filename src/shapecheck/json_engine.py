"""Validation façade returning structured results instead of booleans."""

from __future__ import annotations

from typing import Any, Optional, Tuple, TypeVar

from .exceptions import ShapeMismatchError
from .registry import ShapeRegistry
from .schemas import CheckError, CheckErrorCode
from .types import Checker

T = TypeVar("T")


def _make_error(code: CheckErrorCode, message: str, shape: Optional[str] = None) -> CheckError:
    return CheckError(code=code, message=message, shape=shape)


def validate(
    checker: Checker[T], payload: Any, shape: Optional[str] = None
) -> Tuple[Optional[T], Optional[CheckError]]:
    """Check payload against a checker.

    Returns (payload, None) on success, (None, CheckError) on failure.
    """
    if checker.check(payload):
        return payload, None
    label = f"'{shape}'" if shape else "the expected shape"
    return None, _make_error(CheckErrorCode.MISMATCH, f"Value does not conform to {label}", shape)


def validate_named(
    registry: ShapeRegistry, shape: str, payload: Any
) -> Tuple[Optional[Any], Optional[CheckError]]:
    """Check payload against a shape registered under ``shape``."""
    if shape not in registry:
        return None, _make_error(
            CheckErrorCode.UNKNOWN_SHAPE,
            f"Unknown shape '{shape}'. Available shapes: {registry.names()}",
            shape,
        )
    return validate(registry.get(shape), payload, shape)


def expect(checker: Checker[T], payload: Any, *, label: str = "value", shape: Optional[str] = None) -> T:
    """Return ``payload`` if it conforms to ``checker``.

    Raises:
        ShapeMismatchError: If the payload is rejected.
    """
    if not checker.check(payload):
        raise ShapeMismatchError(label, shape)
    return payload


__all__ = ["validate", "validate_named", "expect"]
