"""Tests for rendering highlighter markup with the active span marked."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from sourcemark.config import HighlightConfig
from sourcemark.markup.reconcile import Mark
from sourcemark.markup.render import (
    compute_highlighted_markup,
    extract_marked_text,
    render_line,
)
from sourcemark.markup.tracing import EventRecorder
from sourcemark.models.location import LocationMap, SourceLocation

MakeLocation = Callable[[int, int, int, int], SourceLocation]

MARKER = '<span class="bg-red-100">'


def _label(number: int) -> str:
    return f'<span class="line-number">{number}</span>'


@pytest.fixture
def location_map(make_location: MakeLocation) -> LocationMap:
    """Step 0: ``foo`` on line 1; step 1: unmapped; step 2: the ``if`` block."""
    return LocationMap(
        {
            0: make_location(1, 13, 1, 16),
            1: None,
            2: make_location(2, 5, 4, 6),
        }
    )


class TestRenderLine:
    """Line labels and marker insertion."""

    def test_label_only(self, highlight_config: HighlightConfig) -> None:
        """Without a mark the line is only prefixed with its 1-based number."""
        assert render_line(0, "abc", None, highlight_config) == _label(1) + "abc"

    def test_wraps_mark(self, highlight_config: HighlightConfig) -> None:
        """The marked slice is wrapped in the marker span."""
        rendered = render_line(4, "abcdef", Mark(2, 4, "offsets"), highlight_config)
        assert rendered == _label(5) + "ab" + MARKER + "cd</span>ef"

    def test_custom_classes(self) -> None:
        """Marker and label classes come from the highlight config."""
        config = HighlightConfig(marker_class="active-step", line_number_class="ln")
        rendered = render_line(0, "ab", Mark(0, 1, "offsets"), config)
        assert rendered == (
            '<span class="ln">1</span><span class="active-step">a</span>b'
        )


class TestComputeHighlightedMarkup:
    """Whole-document rendering for one execution step."""

    def test_single_line_span(
        self,
        program: tuple[str, str],
        location_map: LocationMap,
        highlight_config: HighlightConfig,
    ) -> None:
        """Only line 1 gains a marker, around the ``foo`` token text."""
        source, markup = program
        rendered = compute_highlighted_markup(
            source, markup, location_map, 0, config=highlight_config
        ).split("\n")
        markup_lines = markup.split("\n")

        assert rendered[1] == (
            _label(2)
            + '    <span class="k">let</span> x = <span class="nf">'
            + MARKER
            + 'foo</span></span>(<span class="m">1</span>);'
        )
        for i in (0, 2, 3, 4, 5):
            assert rendered[i] == _label(i + 1) + markup_lines[i]

    def test_cross_line_span(
        self,
        program: tuple[str, str],
        location_map: LocationMap,
        highlight_config: HighlightConfig,
    ) -> None:
        """Every line of the ``if`` block carries exactly one marker."""
        source, markup = program
        rendered = compute_highlighted_markup(
            source, markup, location_map, 2, config=highlight_config
        ).split("\n")

        marked = [extract_marked_text(line, highlight_config) for line in rendered]
        assert marked == [None, None, "if x == 1 {", "foo(x);", "}", None]
        assert rendered[4] == _label(5) + "    " + MARKER + "}</span>"

    @pytest.mark.parametrize("active_index", [None, 1, 99])
    def test_unmapped_step_only_labels(
        self,
        program: tuple[str, str],
        location_map: LocationMap,
        highlight_config: HighlightConfig,
        active_index: int | None,
    ) -> None:
        """No active step, a None entry or a missing entry highlights nothing."""
        source, markup = program
        rendered = compute_highlighted_markup(
            source, markup, location_map, active_index, config=highlight_config
        )
        expected = "\n".join(
            _label(i + 1) + line for i, line in enumerate(markup.split("\n"))
        )
        assert rendered == expected

    def test_idempotent(
        self,
        program: tuple[str, str],
        location_map: LocationMap,
        highlight_config: HighlightConfig,
    ) -> None:
        """Rendering the same step twice gives identical output."""
        source, markup = program
        first = compute_highlighted_markup(
            source, markup, location_map, 2, config=highlight_config
        )
        second = compute_highlighted_markup(
            source, markup, location_map, 2, config=highlight_config
        )
        assert first == second

    def test_at_most_one_marker_per_line(
        self,
        program: tuple[str, str],
        make_location: MakeLocation,
        highlight_config: HighlightConfig,
    ) -> None:
        """Every step of a busy map leaves at most one marker on each line."""
        source, markup = program
        locations = LocationMap(
            {
                0: make_location(0, 1, 0, 3),
                1: make_location(0, 4, 0, 8),
                2: make_location(1, 5, 1, 8),
                3: make_location(1, 13, 1, 20),
                4: make_location(2, 5, 4, 6),
                5: make_location(0, 1, 5, 2),
                6: make_location(3, 9, 3, 16),
            }
        )
        for step in locations:
            rendered = compute_highlighted_markup(
                source, markup, locations, step, config=highlight_config
            )
            lines = rendered.split("\n")
            assert len(lines) == len(markup.split("\n"))
            for line in lines:
                assert line.count(MARKER) <= 1, (step, line)

    def test_plain_dict_location_map(
        self, program: tuple[str, str], make_location: MakeLocation
    ) -> None:
        """Any mapping of index to location is accepted."""
        source, markup = program
        rendered = compute_highlighted_markup(
            source,
            markup,
            {3: make_location(3, 9, 3, 12)},
            3,
            config=HighlightConfig(),
        )
        assert extract_marked_text(rendered.split("\n")[3]) == "foo"

    def test_malformed_span_leaves_markup_alone(
        self,
        program: tuple[str, str],
        make_location: MakeLocation,
        highlight_config: HighlightConfig,
    ) -> None:
        """An empty span renders labels only and reports the problem."""
        source, markup = program
        recorder = EventRecorder()
        rendered = compute_highlighted_markup(
            source,
            markup,
            {0: make_location(1, 13, 1, 13)},
            0,
            config=highlight_config,
            on_event=recorder,
        )
        assert MARKER not in rendered
        assert recorder.kinds() == ["malformed"]

    def test_config_defaults_to_settings(
        self,
        program: tuple[str, str],
        location_map: LocationMap,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Without an explicit config the marker class comes from settings."""
        monkeypatch.setenv("HIGHLIGHT__MARKER_CLASS", "active-step")
        source, markup = program
        rendered = compute_highlighted_markup(source, markup, location_map, 0)
        assert '<span class="active-step">foo</span>' in rendered
        assert MARKER not in rendered


class TestExtractMarkedText:
    """Reading the highlighted text back out of a rendered line."""

    def test_decodes_entities(self, highlight_config: HighlightConfig) -> None:
        """Returned text is the visible text, not the encoded markup."""
        line = (
            _label(1)
            + '    s = <span class="s">'
            + MARKER
            + "&quot;a&lt;b&quot;</span></span>;"
        )
        assert extract_marked_text(line, highlight_config) == '"a<b"'

    def test_nested_tags_flattened(self, highlight_config: HighlightConfig) -> None:
        """Text of elements inside the marker is included."""
        line = MARKER + '<span class="k">if</span> x {</span>'
        assert extract_marked_text(line, highlight_config) == "if x {"

    def test_no_marker(self, highlight_config: HighlightConfig) -> None:
        """Lines without the marker give None."""
        assert extract_marked_text(_label(1) + "abc", highlight_config) is None
