"""Recover the plain source text of a compiler location."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sourcemark.models.location import SourceLocation


@dataclass(frozen=True, slots=True)
class LocatedSpan:
    """The source text a location points at, on the location's start line.

    Attributes:
        text: Slice of the start line used for matching against markup.
        start: Plain offset of ``text`` within the start line.
        end: Plain offset one past the end of ``text``.
        length: Number of characters to highlight from ``start``.
    """

    text: str
    start: int
    end: int
    length: int

    @property
    def stripped(self) -> str:
        return self.text.strip()

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


def locate_span(
    source_lines: Sequence[str], location: SourceLocation
) -> LocatedSpan:
    """Slice the start line of *location* using the compiler's column convention.

    The compiler reports 1-based columns whose end side is exclusive of one
    extra character, so the slice runs from ``start.col - 1`` to
    ``end.col + 1`` while the highlighted length is ``end.col - start.col``.
    A span continuing onto later lines takes the rest of its start line.
    A start line past the end of the source yields an empty span.
    """
    line_index = location.start.line
    line = source_lines[line_index] if line_index < len(source_lines) else ""

    start = max(location.start.col - 1, 0)
    if location.is_multiline:
        text = line[start:]
    else:
        text = line[start : location.end.col + 1]
    length = location.end.col - 1 - location.start.col + 1
    return LocatedSpan(text=text, start=start, end=start + len(text), length=length)
