"""Shared fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from sourcemark.config import HighlightConfig
from sourcemark.models.location import CodePosition, SourceLocation

MakeLocation = Callable[[int, int, int, int], SourceLocation]


def _make_location(
    start_line: int, start_col: int, end_line: int, end_col: int
) -> SourceLocation:
    return SourceLocation(
        start=CodePosition(line=start_line, col=start_col),
        end=CodePosition(line=end_line, col=end_col),
    )


@pytest.fixture
def make_location() -> MakeLocation:
    """Factory: ``make_location(start_line, start_col, end_line, end_col)``.

    Lines are 0-based, columns 1-based, as the compiler reports them.
    """
    return _make_location


@pytest.fixture
def highlight_config() -> HighlightConfig:
    """Default marker and line-number classes."""
    return HighlightConfig()


# =============================================================================
# A small program and hand-written highlighter markup for it
# =============================================================================

PROGRAM_SOURCE = "\n".join(
    [
        "fn main() {",
        "    let x = foo(1);",
        "    if x == 1 {",
        "        foo(x);",
        "    }",
        "}",
    ]
)

PROGRAM_MARKUP = "\n".join(
    [
        '<span class="k">fn</span> <span class="nf">main</span>() {',
        '    <span class="k">let</span> x = <span class="nf">foo</span>'
        '(<span class="m">1</span>);',
        '    <span class="k">if</span> x == <span class="m">1</span> {',
        '        <span class="nf">foo</span>(x);',
        "    }",
        "}",
    ]
)


@pytest.fixture
def program() -> tuple[str, str]:
    """``(source, markup)`` for a six-line program with tag-split tokens."""
    return PROGRAM_SOURCE, PROGRAM_MARKUP
