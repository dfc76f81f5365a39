"""Document model for shape manifest files."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import Field, field_validator

from .base import SchemaBase


class ShapeManifest(SchemaBase):
    """Top level of a shapes.yaml file.

    ``shapes`` maps shape names to shape expressions; expressions are
    compiled by ``shapecheck.manifest_loader``.
    """

    version: str = Field(default="1")
    shapes: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> Any:
        # YAML reads `version: 1` as an int
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value
