"""shapecheck package root.

Composable runtime checkers for untyped (e.g. JSON-decoded) values. The
public surface is the ``j`` namespace plus the helpers re-exported here;
individual checker classes live in ``shapecheck.checker``.
"""

__version__ = "0.1.0"

from shapecheck import j  # noqa: F401
from shapecheck.exceptions import (  # noqa: F401
    ManifestLoadError,
    ShapeCheckError,
    ShapeDefinitionError,
    ShapeMismatchError,
)
from shapecheck.inference import JsonOf, json_type_of  # noqa: F401
from shapecheck.property_names import (  # noqa: F401
    escape_property_name,
    is_optional_property,
    unescape_property_name,
)
from shapecheck.registry import ShapeRegistry  # noqa: F401
from shapecheck.schema_export import to_json_schema  # noqa: F401
from shapecheck.types import Checker, Deferred, Direct, is_checker  # noqa: F401

__all__ = [
    "__version__",
    "j",
    "Checker",
    "Direct",
    "Deferred",
    "is_checker",
    "JsonOf",
    "json_type_of",
    "is_optional_property",
    "unescape_property_name",
    "escape_property_name",
    "ShapeRegistry",
    "to_json_schema",
    "ShapeCheckError",
    "ShapeDefinitionError",
    "ManifestLoadError",
    "ShapeMismatchError",
]
