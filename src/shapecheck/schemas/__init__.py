"""Schema exports."""

from .base import SchemaBase, Severity
from .errors import CheckError, CheckErrorCode
from .manifest import ShapeManifest

__all__ = [
    "SchemaBase",
    "Severity",
    "CheckError",
    "CheckErrorCode",
    "ShapeManifest",
]
