"""Compiler output consumed by the playground for one successful compilation.

The low-level (CASM) instruction listing is the axis of the execution trace;
each instruction maps back to intermediate (Sierra) statements and to a span
of the high-level (Cairo) source.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainValidator, ValidationError

from sourcemark.markup.spans import locate_span
from sourcemark.models.location import LocationMap, LocationMapError, SourceLocation

if TYPE_CHECKING:
    from collections.abc import Sequence


class CodeType(StrEnum):
    """The representation shown in the editor pane."""

    CAIRO = "cairo"
    SIERRA = "sierra"
    CASM = "casm"

    def highlight_language(self) -> str:
        """Language name handed to the external syntax highlighter."""
        if self is CodeType.SIERRA:
            return CodeType.CAIRO.value
        if self is CodeType.CASM:
            return "bytecode"
        return self.value


def _to_location_map(value: Any) -> LocationMap:
    if isinstance(value, LocationMap):
        return value
    return LocationMap.from_data(value)


_LocationMapField = Annotated[LocationMap, PlainValidator(_to_location_map)]


class CompilationArtifacts(BaseModel):
    """Listings and cross-representation maps for one compilation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    casm_instructions: list[str] = Field(default_factory=list)
    sierra_statements: list[str] = Field(default_factory=list)
    casm_to_sierra_map: dict[int, list[int]] = Field(default_factory=dict)
    cairo_location: _LocationMapField = Field(default_factory=LocationMap)

    @property
    def step_count(self) -> int:
        return len(self.casm_instructions)


def load_artifacts(path: Path) -> CompilationArtifacts:
    """Read compiler artifacts from a JSON file.

    Raises:
        LocationMapError: If the file is not valid JSON or fails validation.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"{path}: not valid JSON: {exc}"
        raise LocationMapError(msg) from exc
    try:
        return CompilationArtifacts.model_validate(data)
    except ValidationError as exc:
        msg = f"{path}: invalid compilation artifacts: {exc}"
        raise LocationMapError(msg) from exc


def active_statement_indexes(
    artifacts: CompilationArtifacts, active_index: int | None
) -> list[int]:
    """IR statement indexes that produced the active low-level instruction."""
    if active_index is None:
        return []
    return list(artifacts.casm_to_sierra_map.get(active_index, []))


@dataclass(frozen=True)
class StepView:
    """Everything the trace panes show for one execution step."""

    index: int
    instruction: str
    statement_indexes: list[int]
    location: SourceLocation | None
    span_text: str | None


def describe_step(
    artifacts: CompilationArtifacts,
    source_lines: Sequence[str],
    active_index: int,
) -> StepView:
    """Collect the instruction, IR statements and source span for one step."""
    instructions = artifacts.casm_instructions
    instruction = (
        instructions[active_index] if 0 <= active_index < len(instructions) else ""
    )
    location = artifacts.cairo_location.get(active_index)
    span_text = None
    if location is not None:
        span_text = locate_span(source_lines, location).text
    return StepView(
        index=active_index,
        instruction=instruction,
        statement_indexes=active_statement_indexes(artifacts, active_index),
        location=location,
        span_text=span_text,
    )
