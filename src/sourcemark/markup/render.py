"""Render highlighter markup with the active source span marked.

``compute_highlighted_markup`` is what the editor's render path calls on
every step: it is pure and idempotent, and it never raises for bad spans.
An unmapped step, an empty span or a span that cannot be placed all leave
the line as the highlighter produced it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from selectolax.lexbor import LexborHTMLParser

from sourcemark.config import HighlightConfig, get_settings
from sourcemark.markup.marker_constants import (
    LINE_NUMBER_TEMPLATE,
    MARKER_CLOSE,
    MARKER_OPEN_TEMPLATE,
)
from sourcemark.markup.reconcile import Mark, reconcile_line
from sourcemark.markup.spans import locate_span

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sourcemark.markup.tracing import TraceHook
    from sourcemark.models.location import SourceLocation

logger = logging.getLogger(__name__)


def render_line(
    line_index: int,
    line: str,
    mark: Mark | None,
    config: HighlightConfig,
) -> str:
    """Prefix *line* with its line-number label and wrap *mark* if given."""
    label = LINE_NUMBER_TEMPLATE.format(config.line_number_class, line_index + 1)
    if mark is None:
        return label + line
    return (
        label
        + line[: mark.start]
        + MARKER_OPEN_TEMPLATE.format(config.marker_class)
        + line[mark.start : mark.end]
        + MARKER_CLOSE
        + line[mark.end :]
    )


def compute_highlighted_markup(
    raw_text: str,
    annotated_text: str,
    location_map: Mapping[int, SourceLocation | None],
    active_index: int | None,
    *,
    config: HighlightConfig | None = None,
    on_event: TraceHook | None = None,
) -> str:
    """Mark the active instruction's source span in the highlighter's markup.

    Args:
        raw_text: Plain source text, ``\\n``-separated.
        annotated_text: The highlighter's markup for *raw_text*, with the
            same line structure.
        location_map: Instruction index -> source location (entries may be
            absent or None).
        active_index: The step's low-level instruction index, or None
            before/after a run.
        config: Marker and label classes; defaults to ``get_settings()``.
        on_event: Optional hook receiving reconcile decisions.

    Returns:
        The annotated text with a line-number label on every line and at
        most one highlight wrapper per line.
    """
    if config is None:
        config = get_settings().highlight

    source_lines = raw_text.split("\n")
    annotated_lines = annotated_text.split("\n")

    location = location_map.get(active_index) if active_index is not None else None
    if location is None:
        return "\n".join(
            render_line(i, line, None, config)
            for i, line in enumerate(annotated_lines)
        )

    span = locate_span(source_lines, location)
    logger.debug(
        "[HIGHLIGHT] step=%s lines %d..%d span=%r",
        active_index,
        location.start.line,
        location.end.line,
        span.text,
    )

    rendered: list[str] = []
    for i, line in enumerate(annotated_lines):
        mark = reconcile_line(
            i, line, source_lines, location, span=span, on_event=on_event
        )
        rendered.append(render_line(i, line, mark, config))
    return "\n".join(rendered)


def extract_marked_text(
    rendered_line: str, config: HighlightConfig | None = None
) -> str | None:
    """Return the plain text inside the highlight wrapper, or None if absent."""
    if config is None:
        config = get_settings().highlight

    tree = LexborHTMLParser(rendered_line)
    node = tree.css_first(f'span[class="{config.marker_class}"]')
    if node is None:
        return None
    return node.text()
