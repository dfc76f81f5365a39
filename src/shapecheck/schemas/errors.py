"""Structured validation failures returned by the json engine."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from .base import SchemaBase, Severity


class CheckErrorCode(str, Enum):
    MISMATCH = "mismatch"
    UNKNOWN_SHAPE = "unknown_shape"


class CheckError(SchemaBase):
    code: CheckErrorCode
    message: str
    shape: Optional[str] = Field(default=None)
    severity: Severity = Field(default=Severity.ERROR)
