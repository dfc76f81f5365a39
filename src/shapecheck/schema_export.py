"""JSON Schema (Draft 7) export for composed checkers."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Hashable, Optional, Set

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

DRAFT7_URI = "http://json-schema.org/draft-07/schema#"


class _SchemaBuilder:
    def __init__(self) -> None:
        self._active: Set[Hashable] = set()

    def build(self, checker: Any) -> Dict[str, Any]:
        if isinstance(checker, StringChecker):
            return {"type": "string"}
        if isinstance(checker, NumberChecker):
            return {"type": "number"}
        if isinstance(checker, BooleanChecker):
            return {"type": "boolean"}
        if isinstance(checker, NilChecker):
            return {"type": "null"}
        if isinstance(checker, UnknownChecker):
            return {}
        if isinstance(checker, LiteralChecker):
            return {"const": checker.value}
        if isinstance(checker, AnyChecker):
            if not checker.checkers:
                return {"not": {}}
            return {"anyOf": [self.build(c) for c in checker.checkers]}
        if isinstance(checker, NullableChecker):
            inner = self.build(checker.inner)
            if not inner:
                return {}
            return {"anyOf": [{"type": "null"}, inner]}
        if isinstance(checker, ArrayChecker):
            return {"type": "array", "items": self.build(checker.element)}
        if isinstance(checker, ObjectChecker):
            properties = {}
            required = []
            for prop in checker.properties:
                properties[prop.name] = self._build_entry(prop.entry, prop.name)
                if not prop.optional:
                    required.append(prop.name)
            schema: Dict[str, Any] = {"type": "object", "properties": properties}
            if required:
                schema["required"] = required
            return schema
        if isinstance(checker, ShapeRef):
            key = (id(checker.registry), checker.name)
            return self._build_lazy(key, checker.resolve, checker.name)
        return {}

    def _build_entry(self, entry: Any, property_name: str) -> Dict[str, Any]:
        if not isinstance(entry, Deferred):
            return self.build(entry.resolve())
        return self._build_lazy(id(entry.producer), entry.resolve, property_name)

    def _build_lazy(
        self, key: Hashable, resolve: Callable[[], Any], label: str
    ) -> Dict[str, Any]:
        if key in self._active:
            logger.debug("Recursive reference at '%s' exported as {}", label)
            return {}
        self._active.add(key)
        try:
            produced = resolve()
            if not is_checker(produced):
                return {"not": {}}
            return self.build(produced)
        finally:
            self._active.discard(key)


def to_json_schema(checker: Any, *, title: Optional[str] = None) -> Dict[str, Any]:
    """Render ``checker`` as a JSON Schema document.

    Args:
        checker: A composed checker.
        title: Optional ``title`` for the root schema.

    Returns:
        A Draft 7 schema dict. Recursive references are cut to ``{}`` on
        re-entry, so the schema is at least as permissive as the checker for
        self-referential shapes and exact otherwise.
    """
    schema: Dict[str, Any] = {"$schema": DRAFT7_URI}
    if title:
        schema["title"] = title
    schema.update(_SchemaBuilder().build(checker))
    return schema


__all__ = ["to_json_schema", "DRAFT7_URI"]
