"""Decision events emitted while reconciling spans against markup.

Callers (tests, the CLI's trace view) pass a hook to observe which strategy
placed a highlight, or why none was placed. Every event is also logged at
DEBUG level.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

logger = logging.getLogger(__name__)

EventKind = Literal["match", "ambiguous", "no_match", "malformed"]

# "offsets" is the offset-interval lookup; the rest are string-search cases.
Strategy = Literal[
    "offsets", "same_line", "contained", "first_line", "interior", "last_line"
]


@dataclass(frozen=True, slots=True)
class ReconcileEvent:
    """One decision taken for one rendered line.

    Attributes:
        kind: What happened.
        line_index: 0-based index of the line being rendered.
        strategy: Which placement rule produced (or failed to produce) a mark.
        start: Markup offset of the mark start, for ``match`` events.
        end: Markup offset of the mark end, for ``match`` events.
        detail: Free-form context (the search target, the reason).
    """

    kind: EventKind
    line_index: int
    strategy: Strategy | None = None
    start: int | None = None
    end: int | None = None
    detail: str = ""


TraceHook = Callable[[ReconcileEvent], None]


def emit(hook: TraceHook | None, event: ReconcileEvent) -> None:
    """Log *event* and pass it to *hook* when one is installed."""
    logger.debug(
        "[HIGHLIGHT] line=%d %s strategy=%s range=%s..%s %s",
        event.line_index,
        event.kind,
        event.strategy,
        event.start,
        event.end,
        event.detail,
    )
    if hook is not None:
        hook(event)


class EventRecorder:
    """Trace hook that keeps every event, for tests and diagnostics."""

    def __init__(self) -> None:
        self.events: list[ReconcileEvent] = []

    def __call__(self, event: ReconcileEvent) -> None:
        self.events.append(event)

    def kinds(self, line_index: int | None = None) -> list[EventKind]:
        return [
            e.kind
            for e in self.events
            if line_index is None or e.line_index == line_index
        ]

    def clear(self) -> None:
        self.events.clear()
