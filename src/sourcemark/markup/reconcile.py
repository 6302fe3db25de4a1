"""Decide where, inside one line of highlighter markup, the active span lies.

Two strategies, tried in order:

1. **Offset lookup.** The markup's text runs are decoded into an
   ``OffsetMap``.  When the decoded text reproduces the source line exactly
   (the normal case for a well-behaved highlighter) the plain column
   interval is translated straight into markup offsets.  No searching, so a
   span whose text recurs elsewhere on the line is still placed correctly.

2. **String search.** For markup whose text does not reproduce the source
   (the highlighter rewrote whitespace, or the line counts disagree) the
   span text is searched for among the text runs, leftmost match first:

   - ``same_line``: a run contains the span text -> mark ``length``
     characters from its first occurrence at or after the run start;
   - ``contained``: the span text contains a run -> mark ``length``
     characters from the line's first occurrence of the span text, or the
     whole run when the span text is not contiguous in the markup;
   - ``first_line``: span continues below -> mark from the occurrence to
     the run end;
   - ``interior``: line strictly inside the span -> first non-blank run,
     from the occurrence (or run start) to the run end;
   - ``last_line``: mirror of ``first_line`` -> first non-blank run, from
     the run start to the end of the occurrence (or run end).

   ``same_line`` is tried on every run before ``contained`` is tried on any.

Either way the result is passed through ``balance_mark`` so the inserted
wrapper never crosses the highlighter's own tags.
"""

from __future__ import annotations

import html as html_module
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sourcemark.markup.balance import balance_mark
from sourcemark.markup.offsets import OffsetMap, build_offset_map
from sourcemark.markup.spans import LocatedSpan, locate_span
from sourcemark.markup.tokenizer import TextRun, find_text_runs
from sourcemark.markup.tracing import ReconcileEvent, Strategy, TraceHook, emit

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sourcemark.models.location import SourceLocation

LineRole = Literal["single", "first", "interior", "last"]


@dataclass(frozen=True, slots=True)
class Mark:
    """Markup offsets ``[start, end)`` to wrap in the highlight marker."""

    start: int
    end: int
    strategy: Strategy


def line_role(location: SourceLocation, line_index: int) -> LineRole | None:
    """Classify *line_index* relative to *location*; None when outside it."""
    if not location.covers_line(line_index):
        return None
    if not location.is_multiline:
        return "single"
    if line_index == location.start.line:
        return "first"
    if line_index == location.end.line:
        return "last"
    return "interior"


@dataclass
class _LineContext:
    """Everything the placement rules need for one line."""

    line_index: int
    line: str
    runs: list[TextRun]
    offsets: OffsetMap
    location: SourceLocation
    span: LocatedSpan
    role: LineRole
    hook: TraceHook | None

    def finish(self, start: int, end: int, strategy: Strategy) -> Mark | None:
        """Balance ``[start, end)`` against the line's tags and report it."""
        balanced = balance_mark(self.line, start, end)
        if balanced is None:
            emit(
                self.hook,
                ReconcileEvent(
                    "no_match",
                    self.line_index,
                    strategy,
                    detail=f"nothing to wrap in {start}..{end}",
                ),
            )
            return None
        emit(
            self.hook,
            ReconcileEvent("match", self.line_index, strategy, *balanced),
        )
        return Mark(balanced[0], balanced[1], strategy)

    def malformed(self, strategy: Strategy, detail: str) -> None:
        emit(
            self.hook,
            ReconcileEvent("malformed", self.line_index, strategy, detail=detail),
        )


# ---------------------------------------------------------------------------
# Strategy 1: offset lookup
# ---------------------------------------------------------------------------


def _by_offsets(ctx: _LineContext, source_line: str) -> Mark | None:
    content_end = len(source_line.rstrip())
    indent = len(source_line) - len(source_line.lstrip())

    if ctx.role == "single":
        start = ctx.span.start
        end = min(start + ctx.span.length, len(source_line))
    elif ctx.role == "first":
        start, end = ctx.span.start, content_end
    elif ctx.role == "interior":
        start, end = indent, content_end
    else:
        start, end = indent, min(ctx.location.end.col - 1, content_end)

    interval = ctx.offsets.to_markup(start, end)
    if interval is None:
        ctx.malformed("offsets", f"empty source interval {start}..{end}")
        return None
    return ctx.finish(*interval, "offsets")


# ---------------------------------------------------------------------------
# Strategy 2: string search
# ---------------------------------------------------------------------------


def _needles(span: LocatedSpan) -> list[str]:
    """Forms of the span text to look for in markup, most literal first."""
    candidates = [span.text, span.stripped, html_module.escape(span.stripped)]
    needles: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in needles:
            needles.append(candidate)
    return needles


def _find(
    ctx: _LineContext, start: int = 0, stop: int | None = None
) -> tuple[int, int] | None:
    """Leftmost occurrence of the span text in ``line[start:stop]``.

    Only occurrences that begin on a text character count (never inside a
    tag).  Returns ``(offset, encoded_length)``.
    """
    char_starts = set(ctx.offsets.starts)
    for needle in _needles(ctx.span):
        pos = ctx.line.find(needle, start)
        while pos != -1 and (stop is None or pos < stop):
            if pos in char_starts:
                return pos, len(needle)
            pos = ctx.line.find(needle, pos + 1)
    return None


def _advance(ctx: _LineContext, pos: int, count: int) -> int:
    """Markup offset just past *count* text characters starting at *pos*."""
    first = ctx.offsets.starts.index(pos)
    last = min(first + count, len(ctx.offsets.starts)) - 1
    return ctx.offsets.ends[last]


def _decoded(run: TextRun) -> str:
    return html_module.unescape(run.text).strip()


def _content_bounds(run: TextRun) -> tuple[int, int]:
    """Markup offsets of *run* without its surrounding whitespace."""
    leading = len(run.text) - len(run.text.lstrip())
    trailing = len(run.text) - len(run.text.rstrip())
    return run.start + leading, run.end - trailing


def _warn_if_ambiguous(ctx: _LineContext, strategy: Strategy, haystack: str) -> None:
    occurrences = haystack.count(ctx.span.stripped)
    if occurrences > 1:
        emit(
            ctx.hook,
            ReconcileEvent(
                "ambiguous",
                ctx.line_index,
                strategy,
                detail=f"{ctx.span.stripped!r} occurs {occurrences} times",
            ),
        )


def _same_line(ctx: _LineContext) -> Mark | None:
    target = ctx.span.stripped
    for run in ctx.runs:
        if run.is_blank or target not in _decoded(run):
            continue
        found = _find(ctx, run.start, run.end)
        if found is None:
            continue
        _warn_if_ambiguous(ctx, "same_line", _decoded(run))
        end = _advance(ctx, found[0], ctx.span.length)
        return ctx.finish(found[0], end, "same_line")

    for run in ctx.runs:
        if run.is_blank or _decoded(run) not in target:
            continue
        found = _find(ctx)
        if found is None:
            return ctx.finish(*_content_bounds(run), "contained")
        _warn_if_ambiguous(ctx, "contained", ctx.offsets.plain)
        end = _advance(ctx, found[0], ctx.span.length)
        return ctx.finish(found[0], end, "contained")
    return None


def _first_line(ctx: _LineContext) -> Mark | None:
    target = ctx.span.stripped
    for run in ctx.runs:
        if run.is_blank:
            continue
        text = _decoded(run)
        if target not in text and text not in target:
            continue
        found = _find(ctx, run.start, run.end)
        content_start, content_end = _content_bounds(run)
        start = found[0] if found is not None else content_start
        return ctx.finish(start, content_end, "first_line")
    return None


def _first_content_run(ctx: _LineContext) -> TextRun | None:
    return next((run for run in ctx.runs if not run.is_blank), None)


def _interior(ctx: _LineContext) -> Mark | None:
    run = _first_content_run(ctx)
    if run is None:
        return None
    found = _find(ctx, run.start, run.end)
    content_start, content_end = _content_bounds(run)
    start = found[0] if found is not None else content_start
    return ctx.finish(start, content_end, "interior")


def _last_line(ctx: _LineContext) -> Mark | None:
    run = _first_content_run(ctx)
    if run is None:
        return None
    found = _find(ctx, run.start, run.end)
    content_start, content_end = _content_bounds(run)
    if found is not None:
        content_end = min(found[0] + found[1], run.end)
    return ctx.finish(content_start, content_end, "last_line")


_SEARCH_RULES = {
    "single": (_same_line, "same_line"),
    "first": (_first_line, "first_line"),
    "interior": (_interior, "interior"),
    "last": (_last_line, "last_line"),
}


def _by_search(ctx: _LineContext) -> Mark | None:
    rule, strategy = _SEARCH_RULES[ctx.role]
    if ctx.span.is_empty:
        ctx.malformed(strategy, "empty span text")
        return None
    if ctx.role == "single" and ctx.span.length <= 0:
        ctx.malformed(strategy, f"non-positive span length {ctx.span.length}")
        return None

    mark = rule(ctx)
    if mark is None:
        emit(
            ctx.hook,
            ReconcileEvent(
                "no_match",
                ctx.line_index,
                strategy,
                detail=f"no text run matches {ctx.span.stripped!r}",
            ),
        )
    return mark


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def reconcile_line(
    line_index: int,
    annotated_line: str,
    source_lines: Sequence[str],
    location: SourceLocation,
    *,
    span: LocatedSpan | None = None,
    on_event: TraceHook | None = None,
) -> Mark | None:
    """Find the markup range of *annotated_line* covered by *location*.

    Args:
        line_index: 0-based index of the line being rendered.
        annotated_line: The highlighter's markup for that line.
        source_lines: The plain source, one entry per line.
        location: Source span of the active instruction.
        span: Pre-computed ``locate_span(source_lines, location)``; computed
            here when omitted.
        on_event: Optional hook receiving each ``ReconcileEvent``.

    Returns:
        The range to wrap, or None when this line gets no highlight. Never
        raises for malformed spans.
    """
    role = line_role(location, line_index)
    if role is None:
        return None

    runs = find_text_runs(annotated_line)
    ctx = _LineContext(
        line_index=line_index,
        line=annotated_line,
        runs=runs,
        offsets=build_offset_map(runs),
        location=location,
        span=span if span is not None else locate_span(source_lines, location),
        role=role,
        hook=on_event,
    )

    source_line = source_lines[line_index] if line_index < len(source_lines) else None
    if source_line is not None and ctx.offsets.matches(source_line):
        return _by_offsets(ctx, source_line)
    return _by_search(ctx)
