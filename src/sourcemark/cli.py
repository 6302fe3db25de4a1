"""Command-line access to the highlight engine and editor commands.

Reads a source file plus the compiler's artifacts JSON and prints what the
playground would render for a step, or for every step of the trace.
"""

from __future__ import annotations

import argparse
import html as html_module
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sourcemark import get_version_string, setup_logging
from sourcemark.config import get_settings
from sourcemark.editor.comment_toggle import toggle_line_comment
from sourcemark.markup.render import compute_highlighted_markup, extract_marked_text
from sourcemark.markup.tracing import EventRecorder
from sourcemark.models.artifacts import describe_step, load_artifacts
from sourcemark.models.location import LocationMapError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sourcemark.models.location import SourceLocation

console = Console()
err_console = Console(stderr=True)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        err_console.print(
            f"[red]Error:[/] cannot read {escape(str(path))}: {exc.strerror}"
        )
        sys.exit(1)


def _annotated_text(source: str, annotated_path: Path | None) -> str:
    """Highlighter markup for *source*; escaped plain text when none is given."""
    if annotated_path is None:
        return html_module.escape(source, quote=False)
    return _read_text(annotated_path)


def _format_location(location: SourceLocation | None) -> str:
    if location is None:
        return "-"
    start, end = location.start, location.end
    return f"{start.line + 1}:{start.col}-{end.line + 1}:{end.col}"


def _build_parser() -> argparse.ArgumentParser:
    """Build argparse parser for the sourcemark subcommands."""
    parser = argparse.ArgumentParser(
        prog="sourcemark",
        description="Map execution steps back onto highlighted source.",
    )
    parser.add_argument(
        "--version", action="version", version=f"sourcemark {get_version_string()}"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log reconcile decisions"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # render
    render_p = sub.add_parser("render", help="Render one step's highlighted source")
    render_p.add_argument("source", type=Path, help="Source file")
    render_p.add_argument(
        "--artifacts", type=Path, required=True, help="Compiler artifacts JSON"
    )
    render_p.add_argument(
        "--step", type=int, default=None, help="Active instruction index"
    )
    render_p.add_argument(
        "--annotated", type=Path, default=None, help="Highlighter markup for SOURCE"
    )
    render_p.add_argument(
        "--output", type=Path, default=None, help="Write markup here, not stdout"
    )

    # trace
    trace_p = sub.add_parser("trace", help="Show the source span of every step")
    trace_p.add_argument("source", type=Path, help="Source file")
    trace_p.add_argument(
        "--artifacts", type=Path, required=True, help="Compiler artifacts JSON"
    )
    trace_p.add_argument(
        "--annotated", type=Path, default=None, help="Highlighter markup for SOURCE"
    )

    # comment
    comment_p = sub.add_parser("comment", help="Toggle line comments")
    comment_p.add_argument("source", type=Path, help="Source file")
    comment_p.add_argument("--start", type=int, required=True, help="Selection start")
    comment_p.add_argument("--end", type=int, default=None, help="Selection end")
    comment_p.add_argument(
        "--in-place", action="store_true", help="Rewrite SOURCE instead of printing"
    )

    return parser


def _cmd_render(args: argparse.Namespace) -> int:
    source = _read_text(args.source)
    artifacts = load_artifacts(args.artifacts)
    markup = compute_highlighted_markup(
        source,
        _annotated_text(source, args.annotated),
        artifacts.cairo_location,
        args.step,
    )
    if args.output is None:
        console.print(
            markup, markup=False, highlight=False, emoji=False, soft_wrap=True
        )
    else:
        args.output.write_text(markup + "\n", encoding="utf-8")
        console.print(f"[green]Wrote[/] {escape(str(args.output))}")
    return 0


def _cmd_trace(args: argparse.Namespace) -> int:
    source = _read_text(args.source)
    artifacts = load_artifacts(args.artifacts)
    annotated = _annotated_text(source, args.annotated)
    source_lines: Sequence[str] = source.split("\n")

    table = Table(title=f"{args.source.name}: {artifacts.step_count} steps")
    table.add_column("Step", justify="right")
    table.add_column("Instruction")
    table.add_column("IR", justify="right")
    table.add_column("Location")
    table.add_column("Highlighted")
    table.add_column("Notes", style="dim")

    recorder = EventRecorder()
    for index in range(artifacts.step_count):
        view = describe_step(artifacts, source_lines, index)
        recorder.clear()
        markup = compute_highlighted_markup(
            source, annotated, artifacts.cairo_location, index, on_event=recorder
        )
        marked = [
            text
            for text in (extract_marked_text(line) for line in markup.split("\n"))
            if text is not None
        ]
        notes = sorted({e.kind for e in recorder.events if e.kind != "match"})
        table.add_row(
            str(index),
            escape(view.instruction),
            ", ".join(str(i) for i in view.statement_indexes) or "-",
            _format_location(view.location),
            escape(" / ".join(marked)) or "-",
            ", ".join(notes),
        )

    console.print(table)
    return 0


def _cmd_comment(args: argparse.Namespace) -> int:
    source = _read_text(args.source)
    end = args.start if args.end is None else args.end
    result = toggle_line_comment(
        source, args.start, end, prefix=get_settings().editor.comment_prefix
    )
    if args.in_place:
        args.source.write_text(result.text, encoding="utf-8")
    else:
        console.print(
            result.text, markup=False, highlight=False, emoji=False, soft_wrap=True
        )
    err_console.print(
        f"selection: {result.selection_start}..{result.selection_end}",
        highlight=False,
    )
    return 0


_COMMANDS = {
    "render": _cmd_render,
    "trace": _cmd_trace,
    "comment": _cmd_comment,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``sourcemark`` console script."""
    args = _build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(
        settings.app.log_dir, "DEBUG" if args.verbose else settings.app.log_level
    )

    try:
        return _COMMANDS[args.command](args)
    except LocationMapError as exc:
        err_console.print(f"[red]Error:[/] {escape(str(exc))}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
