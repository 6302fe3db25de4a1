"""Compiler-side data consumed by the highlight engine."""

from sourcemark.models.location import (
    CodePosition,
    LocationMap,
    LocationMapError,
    SourceLocation,
)

__all__ = [
    "CodePosition",
    "LocationMap",
    "LocationMapError",
    "SourceLocation",
]
