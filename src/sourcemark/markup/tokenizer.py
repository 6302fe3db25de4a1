"""Split one line of highlighter markup into text runs and tags.

Only tag *boundaries* are detected (``<`` up to the next ``>``); tag
structure, nesting and validity are the highlighter's concern.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

_TAG = re.compile(r"<[^>]+>")


@dataclass(frozen=True, slots=True)
class TextRun:
    """A maximal stretch of annotated text lying outside any tag.

    Attributes:
        text: The run's characters, still HTML-encoded.
        start: Offset of the first character in the annotated line.
        end: Offset one past the last character (exclusive).
    """

    text: str
    start: int
    end: int

    @property
    def stripped(self) -> str:
        return self.text.strip()

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True, slots=True)
class Tag:
    """One markup tag as it appears in the annotated line."""

    name: str
    start: int
    end: int
    closing: bool
    self_closing: bool


def _tag_name(tag_content: str) -> str:
    """Extract tag name from tag content (without < and >).

    Examples:
        "span class='k'" -> "span"
        "/span" -> "span"
        "br/" -> "br"
    """
    content = tag_content.lstrip("/").strip()
    name = content.split()[0] if content.split() else ""
    return name.rstrip("/").lower()


def iter_tags(line: str) -> Iterator[Tag]:
    """Yield every tag in *line* in document order."""
    for match in _TAG.finditer(line):
        content = match.group()[1:-1]
        yield Tag(
            name=_tag_name(content),
            start=match.start(),
            end=match.end(),
            closing=content.startswith("/"),
            self_closing=content.endswith("/") or content.startswith("!"),
        )


def find_text_runs(line: str) -> list[TextRun]:
    """Return the text runs of *line* in order, omitting empty runs."""
    runs: list[TextRun] = []
    last = 0
    for match in _TAG.finditer(line):
        if match.start() > last:
            runs.append(TextRun(line[last : match.start()], last, match.start()))
        last = match.end()
    if last < len(line):
        runs.append(TextRun(line[last:], last, len(line)))
    return runs


def tag_at(line: str, offset: int) -> Tag | None:
    """Return the tag whose interior contains *offset*, if any.

    An offset equal to a tag's start is *not* inside it (it is a valid
    insertion point).
    """
    for tag in iter_tags(line):
        if tag.start < offset < tag.end:
            return tag
        if tag.start >= offset:
            break
    return None
