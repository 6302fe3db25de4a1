"""Location-to-markup highlight engine."""

from sourcemark.markup.reconcile import Mark, reconcile_line
from sourcemark.markup.render import (
    compute_highlighted_markup,
    extract_marked_text,
    render_line,
)
from sourcemark.markup.spans import LocatedSpan, locate_span
from sourcemark.markup.tokenizer import TextRun, find_text_runs
from sourcemark.markup.tracing import EventRecorder, ReconcileEvent

__all__ = [
    "EventRecorder",
    "LocatedSpan",
    "Mark",
    "ReconcileEvent",
    "TextRun",
    "compute_highlighted_markup",
    "extract_marked_text",
    "find_text_runs",
    "locate_span",
    "reconcile_line",
    "render_line",
]
