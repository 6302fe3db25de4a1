"""Source locations recorded by the compiler for each low-level instruction.

Lines are 0-based (the index of the rendered line), columns are 1-based.
A ``LocationMap`` is produced once per successful compilation and is never
modified afterwards; only the active instruction index changes during a run.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class LocationMapError(ValueError):
    """Compiler location output could not be parsed."""


class CodePosition(BaseModel):
    """A (line, column) pair in the high-level source."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=0)
    col: int = Field(ge=0)


class SourceLocation(BaseModel):
    """The source span a low-level instruction originated from."""

    model_config = ConfigDict(frozen=True)

    start: CodePosition
    end: CodePosition

    @property
    def is_multiline(self) -> bool:
        return self.end.line != self.start.line

    def covers_line(self, line_index: int) -> bool:
        """Whether *line_index* lies between the start and end lines."""
        return self.start.line <= line_index <= self.end.line


def _parse_entry(key: object, entry: Any) -> SourceLocation | None:
    """Parse one map entry, accepting the compiler's ``cairo_location`` wrapper."""
    if entry is None:
        return None
    if isinstance(entry, Mapping) and "cairo_location" in entry:
        entry = entry["cairo_location"]
        if entry is None:
            return None
    try:
        return SourceLocation.model_validate(entry)
    except ValidationError as exc:
        msg = f"Invalid source location for instruction {key!r}: {exc}"
        raise LocationMapError(msg) from exc


class LocationMap(Mapping[int, SourceLocation | None]):
    """Immutable instruction index -> source location lookup.

    Absent indexes and ``None`` entries both mean "no mapping" (e.g.
    synthetic instructions inserted by the compiler).
    """

    __slots__ = ("_entries",)

    def __init__(
        self, entries: Mapping[int, SourceLocation | None] | None = None
    ) -> None:
        self._entries: dict[int, SourceLocation | None] = dict(entries or {})

    def __getitem__(self, index: int) -> SourceLocation | None:
        return self._entries[index]

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        mapped = sum(1 for loc in self._entries.values() if loc is not None)
        return f"LocationMap({len(self._entries)} entries, {mapped} mapped)"

    def get(  # type: ignore[override]
        self, index: int | None, default: SourceLocation | None = None
    ) -> SourceLocation | None:
        """Return the location for *index*, or *default* when unmapped."""
        if index is None:
            return default
        location = self._entries.get(index)
        return default if location is None else location

    @classmethod
    def from_data(cls, data: Any) -> LocationMap:
        """Build from decoded compiler JSON (an object keyed by index or a list).

        Raises:
            LocationMapError: If the structure or any entry is invalid.
        """
        if data is None:
            return cls()

        if isinstance(data, list):
            items: list[tuple[object, Any]] = list(enumerate(data))
        elif isinstance(data, Mapping):
            items = list(data.items())
        else:
            msg = f"Location map must be an object or a list, got {type(data).__name__}"
            raise LocationMapError(msg)

        entries: dict[int, SourceLocation | None] = {}
        for key, entry in items:
            try:
                index = int(key)  # type: ignore[call-overload]
            except (TypeError, ValueError) as exc:
                msg = f"Instruction index must be an integer, got {key!r}"
                raise LocationMapError(msg) from exc
            if index < 0:
                msg = f"Instruction index must be non-negative, got {index}"
                raise LocationMapError(msg)
            entries[index] = _parse_entry(key, entry)
        return cls(entries)

    @classmethod
    def from_json(cls, text: str) -> LocationMap:
        """Parse the compiler's JSON location output."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            msg = f"Location map is not valid JSON: {exc}"
            raise LocationMapError(msg) from exc
        return cls.from_data(data)
