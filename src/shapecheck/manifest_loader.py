"""Load named shapes from YAML/JSON manifest files.

A manifest looks like::

    version: 1
    shapes:
      tree:
        object:
          label: string
          "note?": {nullable: string}
          children: {array: {ref: tree}}

Shape expressions are either a primitive name (``string``, ``number``,
``boolean``, ``nil``, ``unknown``) or a single-key mapping naming a
combinator: ``literal``, ``any``, ``nullable``, ``array``, ``object`` or
``ref``. ``ref`` compiles to a deferred lookup in the registry being built.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Set, Union

import yaml
from pydantic import ValidationError

from . import checker as c
from .exceptions import ManifestLoadError, ShapeDefinitionError
from .registry import ShapeRegistry
from .schemas import ShapeManifest
from .types import Checker

logger = logging.getLogger(__name__)

PRIMITIVES: Dict[str, Checker[Any]] = {
    "string": c.string,
    "number": c.number,
    "boolean": c.boolean,
    "nil": c.nil,
    "unknown": c.unknown,
}

COMBINATORS = ("literal", "any", "nullable", "array", "object", "ref")


class _ShapeCompiler:
    def __init__(self, registry: ShapeRegistry, file_name: str, declared: Set[str]):
        self.registry = registry
        self.file_name = file_name
        self.declared = declared

    def compile(self, expr: Any, path: str) -> Checker[Any]:
        if isinstance(expr, str):
            if expr not in PRIMITIVES:
                raise self._error(path, f"unknown primitive '{expr}'")
            return PRIMITIVES[expr]
        if not isinstance(expr, Mapping) or len(expr) != 1:
            raise self._error(
                path, f"expected a primitive name or a single-key mapping, got {expr!r}"
            )
        (kind, arg), = expr.items()
        if kind == "literal":
            if not isinstance(arg, str):
                raise self._error(path, f"literal expects a string, got {arg!r}")
            return c.literal(arg)
        if kind == "any":
            if not isinstance(arg, list):
                raise self._error(path, "any expects a list of shapes")
            return c.any([self.compile(item, f"{path}.any[{i}]") for i, item in enumerate(arg)])
        if kind == "nullable":
            return c.nullable(self.compile(arg, f"{path}.nullable"))
        if kind == "array":
            return c.array(self.compile(arg, f"{path}.array"))
        if kind == "object":
            return self._compile_object(arg, path)
        if kind == "ref":
            self._check_ref(arg, path)
            return self.registry.ref(arg)
        raise self._error(path, f"unknown combinator '{kind}' (expected one of {list(COMBINATORS)})")

    def _compile_object(self, arg: Any, path: str) -> Checker[Any]:
        if arg is None:
            arg = {}
        if not isinstance(arg, Mapping):
            raise self._error(path, "object expects a mapping of property names to shapes")
        properties: Dict[str, Any] = {}
        for key, value in arg.items():
            if not isinstance(key, str):
                raise self._error(path, f"property names must be strings, got {key!r}")
            prop_path = f"{path}.object[{key!r}]"
            if isinstance(value, Mapping) and set(value) == {"ref"}:
                self._check_ref(value["ref"], prop_path)
                properties[key] = self.registry.deferred(value["ref"])
            else:
                properties[key] = self.compile(value, prop_path)
        try:
            return c.object(properties)
        except ShapeDefinitionError as exc:
            raise self._error(path, exc.message)

    def _check_ref(self, name: Any, path: str) -> None:
        if not isinstance(name, str):
            raise self._error(path, f"ref expects a shape name, got {name!r}")
        if name not in self.declared and name not in self.registry:
            raise self._error(path, f"unresolved ref '{name}'")

    def _error(self, path: str, message: str) -> ManifestLoadError:
        return ManifestLoadError(self.file_name, f"{path}: {message}")


def compile_shapes(
    data: Any,
    file_name: str = "shapes.yaml",
    registry: Optional[ShapeRegistry] = None,
) -> ShapeRegistry:
    """Compile a manifest document into a registry.

    Args:
        data: Parsed manifest document (mapping with ``shapes``).
        file_name: Name used in error messages.
        registry: Registry to extend; a new one is created when omitted.
            Refs may point at shapes already registered there.

    Returns:
        The registry holding every shape declared in ``data``.

    Raises:
        ManifestLoadError: If the document or any shape expression is invalid.
    """
    try:
        manifest = ShapeManifest.model_validate(data)
    except ValidationError as exc:
        raise ManifestLoadError(file_name, str(exc))

    registry = registry if registry is not None else ShapeRegistry()
    declared = set(manifest.shapes)
    clashes = sorted(name for name in declared if name in registry)
    if clashes:
        raise ManifestLoadError(file_name, f"shapes already registered: {clashes}")

    compiler = _ShapeCompiler(registry, file_name, declared)
    compiled = {
        name: compiler.compile(expr, f"shapes.{name}") for name, expr in manifest.shapes.items()
    }
    for name, checker in compiled.items():
        registry.register(name, checker)
    return registry


YAML_SUFFIXES = {".yaml", ".yml"}


def _read_document(path: Path) -> Any:
    if not path.exists():
        raise ManifestLoadError(path.name, "File not found")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestLoadError(path.name, str(e))
    if path.suffix.lower() in YAML_SUFFIXES:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ManifestLoadError(path.name, f"Invalid YAML: {e}")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestLoadError(path.name, f"Invalid JSON: {e}")


def load_shape_manifest(
    path: Union[str, Path], registry: Optional[ShapeRegistry] = None
) -> ShapeRegistry:
    """Load a shape manifest from ``path``.

    ``.yaml``/``.yml`` files are read as YAML, anything else as JSON.
    """
    path = Path(path)
    data = _read_document(path)
    if data is None:
        raise ManifestLoadError(path.name, "Empty file")

    registry = compile_shapes(data, path.name, registry)
    logger.info("Loaded %d shapes from %s", len(registry), path)
    return registry


def load_payload(path: Union[str, Path]) -> Any:
    """Read a document to be checked, choosing the parser by file suffix."""
    return _read_document(Path(path))


__all__ = ["compile_shapes", "load_shape_manifest", "load_payload", "PRIMITIVES"]
