"""Property-based tests for rendering and line mapping using Hypothesis.

These tests verify invariants that should hold for any document:
1. Rendering is deterministic
2. The line map is non-decreasing and made of valid 1-based source lines
3. Every recorded line has exactly one tagged element in the HTML
4. closest() agrees with a linear scan
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from previewmark import LineMap, MarkdownRenderer

# Block-level markup characters; no raw HTML, links or emoji shortcodes
markdown_text = st.text(alphabet="abc xyz\n#>-*_`", max_size=200)

line_lists = st.lists(st.integers(min_value=1, max_value=50), max_size=30).map(sorted)

md = MarkdownRenderer()


class TestRenderProperties:
    """Invariants of convert()."""

    @given(source=markdown_text)
    @settings(max_examples=100, deadline=None)
    def test_deterministic(self, source: str) -> None:
        assert md.convert(source) == md.convert(source)

    @given(source=markdown_text)
    @settings(max_examples=100, deadline=None)
    def test_line_map_is_ordered_and_in_range(self, source: str) -> None:
        lines = md.convert(source).line_map.lines
        line_count = source.count("\n") + 1

        assert list(lines) == sorted(lines)
        assert all(1 <= line <= line_count for line in lines)

    @given(source=markdown_text)
    @settings(max_examples=100, deadline=None)
    def test_one_tag_per_recorded_line(self, source: str) -> None:
        result = md.convert(source)
        assert result.html.count('data-line="') == len(result.line_map)


class TestClosestProperties:
    """closest() matches a brute-force scan."""

    @given(lines=line_lists, query=st.integers(min_value=-5, max_value=60))
    @settings(max_examples=200)
    def test_matches_linear_scan(self, lines: list[int], query: int) -> None:
        candidates = [line for line in lines if line <= query]
        expected = candidates[-1] if candidates else None

        assert LineMap(tuple(lines)).closest(query) == expected
