"""Map plain source offsets onto offsets in highlighter markup.

Decodes the text runs of an annotated line character by character
(resolving HTML entities) and records where each decoded character sits in
the annotated string. When the decoded text reproduces the source line the
reconciler can place markers by offset lookup instead of string search.
"""

from __future__ import annotations

import html as html_module
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sourcemark.markup.tokenizer import TextRun

# Longest entity considered, e.g. "&#x1F600;" or "&thetasym;"
_MAX_ENTITY_LEN = 12


def _decode_char(text: str, pos: int) -> tuple[str, int]:
    """Decode the character starting at *pos* in HTML-encoded *text*.

    Returns ``(decoded_char, encoded_length)``. An ``&`` that does not start
    a recognisable single-character entity is taken literally.
    """
    if text[pos] == "&":
        semicolon = text.find(";", pos + 1, pos + _MAX_ENTITY_LEN)
        if semicolon != -1:
            entity = text[pos : semicolon + 1]
            decoded = html_module.unescape(entity)
            if decoded != entity and len(decoded) == 1:
                return decoded, len(entity)
    return text[pos], 1


@dataclass(frozen=True, slots=True)
class OffsetMap:
    """Decoded text of an annotated line with per-character markup offsets.

    Attributes:
        plain: Concatenated decoded text of every run.
        starts: ``starts[k]`` is the markup offset where plain char *k* begins.
        ends: ``ends[k]`` is the markup offset just past plain char *k*.
    """

    plain: str
    starts: tuple[int, ...]
    ends: tuple[int, ...]

    def matches(self, source_line: str) -> bool:
        """Whether the markup reproduces *source_line* exactly."""
        return self.plain == source_line

    def to_markup(self, start: int, end: int) -> tuple[int, int] | None:
        """Translate the plain interval ``[start, end)`` to markup offsets.

        Returns None for empty, inverted or out-of-range intervals.
        """
        if not 0 <= start < end <= len(self.plain):
            return None
        return self.starts[start], self.ends[end - 1]


def build_offset_map(runs: Sequence[TextRun]) -> OffsetMap:
    """Decode *runs* into an ``OffsetMap``."""
    chars: list[str] = []
    starts: list[int] = []
    ends: list[int] = []

    for run in runs:
        pos = 0
        while pos < len(run.text):
            char, width = _decode_char(run.text, pos)
            chars.append(char)
            starts.append(run.start + pos)
            ends.append(run.start + pos + width)
            pos += width

    return OffsetMap(plain="".join(chars), starts=tuple(starts), ends=tuple(ends))
