"""Tests for keeping the highlight wrapper well-nested."""

from __future__ import annotations

import pytest

from sourcemark.markup.balance import balance_mark

# <span class="k"> 0..16, fn 16..18, </span> 18..25, " " 25..26,
# <span class="n"> 26..42, main 42..46, </span> 46..53, () 53..55
LINE = '<span class="k">fn</span> <span class="n">main</span>()'


class TestBalancedInput:
    """Marks that already nest are left alone."""

    def test_text_inside_one_element(self) -> None:
        """Wrapping a token's text needs no adjustment."""
        assert balance_mark(LINE, 42, 46) == (42, 46)

    def test_whole_elements(self) -> None:
        """A mark covering complete elements is kept."""
        assert balance_mark(LINE, 0, 55) == (0, 55)

    def test_plain_line(self) -> None:
        """Lines without tags are returned unchanged."""
        assert balance_mark("let a = 1;", 4, 5) == (4, 5)


class TestWidening:
    """Partner tags on the same line pull the mark outward."""

    def test_closer_inside_pulls_start_back(self) -> None:
        """A close tag inside the mark moves the start to its opener."""
        assert balance_mark(LINE, 42, 55) == (26, 55)

    def test_closer_at_first_token(self) -> None:
        """Widening also works for the first element on the line."""
        assert balance_mark(LINE, 16, 26) == (0, 26)

    def test_opener_inside_pushes_end_forward(self) -> None:
        """An open tag inside the mark moves the end past its closer."""
        assert balance_mark(LINE, 25, 44) == (25, 53)

    def test_offset_inside_tag_snaps_out(self) -> None:
        """Offsets landing inside a tag move to the tag's boundary."""
        assert balance_mark(LINE, 10, 18) == (0, 25)

    def test_nested_elements(self) -> None:
        """Nested same-name elements resolve to the matching partner."""
        line = "<b><b>x</b></b>y"
        assert balance_mark(line, 6, 16) == (0, 16)

    def test_self_closing_tags_ignored(self) -> None:
        """Void tags never need a partner."""
        line = "a<br/>b"
        assert balance_mark(line, 0, 7) == (0, 7)


class TestShrinking:
    """Tags whose partner is on another line are excluded instead."""

    def test_unpaired_closer_moves_start_past_it(self) -> None:
        """The tail of a multi-line token is left outside the mark."""
        assert balance_mark("end */</span> x", 0, 15) == (13, 15)

    def test_unpaired_opener_moves_end_before_it(self) -> None:
        """The head of a multi-line token is left outside the mark."""
        assert balance_mark('x = 1; <span class="c">/* note', 0, 29) == (0, 7)

    def test_mark_inside_unpaired_element(self) -> None:
        """Text after an unpaired opener can still be wrapped on its own."""
        assert balance_mark('<span class="c">/* note', 16, 23) == (16, 23)


class TestNothingToWrap:
    """Marks that end up without visible text are dropped."""

    @pytest.mark.parametrize(
        ("line", "start", "end"),
        [
            ("<b></b>", 0, 7),
            ('<span class="c">/* note', 0, 23),
            ("abc", 2, 2),
            ("abc", 3, 1),
        ],
    )
    def test_returns_none(self, line: str, start: int, end: int) -> None:
        """Empty, inverted or tag-only marks give None."""
        assert balance_mark(line, start, end) is None
