"""Toggle line comments over the editor's current selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_COMMENT_PREFIX = "// "


@dataclass(frozen=True, slots=True)
class CommentToggle:
    """Result of a toggle: the rewritten text and where the selection moves."""

    text: str
    selection_start: int
    selection_end: int


def _line_number_at(text: str, offset: int) -> int:
    """1-based number of the line containing *offset*."""
    return text.count("\n", 0, offset) + 1


def _line_start_offset(lines: list[str], line_number: int) -> int:
    """Offset of the first character of 1-based *line_number* in the joined text."""
    return sum(len(line) + 1 for line in lines[: line_number - 1])


def _toggle(line: str, prefix: str) -> tuple[str, int]:
    """Flip the comment state of *line*; return the new line and its length delta."""
    if line.startswith(prefix):
        return line[len(prefix) :], -len(prefix)
    return prefix + line, len(prefix)


def toggle_line_comment(
    raw_text: str,
    selection_start: int,
    selection_end: int,
    *,
    prefix: str = DEFAULT_COMMENT_PREFIX,
) -> CommentToggle:
    """Comment or uncomment every line touched by the selection.

    Each line's own state decides whether the prefix is added or removed;
    lines are not forced to agree. For a single line both selection ends
    move with the prefix. For several lines only the selection end moves
    (by the sum of all deltas); the start stays where it was. Either end is
    kept on its own line and inside the text.

    Args:
        raw_text: Full editor contents, ``\\n``-separated.
        selection_start: Selection start offset into *raw_text*.
        selection_end: Selection end offset into *raw_text*.
        prefix: Line-comment prefix to toggle.

    Returns:
        The new text and selection. Line numbers past the end of the text
        are skipped rather than raising.
    """
    selection_start = max(0, min(selection_start, len(raw_text)))
    selection_end = max(selection_start, min(selection_end, len(raw_text)))

    first_line = _line_number_at(raw_text, selection_start)
    last_line = _line_number_at(raw_text, selection_end)
    lines = raw_text.split("\n")

    start_delta = 0
    end_delta = 0
    for line_number in range(first_line, last_line + 1):
        if line_number > len(lines):
            logger.debug("[EDITOR] line %d past end of text, skipped", line_number)
            continue
        lines[line_number - 1], delta = _toggle(lines[line_number - 1], prefix)
        end_delta += delta
        if first_line == last_line:
            start_delta = delta

    new_text = "\n".join(lines)
    new_start = max(
        selection_start + start_delta, _line_start_offset(lines, first_line)
    )
    new_end = max(selection_end + end_delta, _line_start_offset(lines, last_line))
    new_end = min(new_end, len(new_text))
    new_start = min(new_start, new_end)

    logger.debug(
        "[EDITOR] toggled lines %d..%d, selection %d..%d -> %d..%d",
        first_line,
        last_line,
        selection_start,
        selection_end,
        new_start,
        new_end,
    )
    return CommentToggle(new_text, new_start, new_end)
