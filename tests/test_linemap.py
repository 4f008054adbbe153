"""Tests for source line mapping."""

from __future__ import annotations

import pytest

from previewmark import LineMap, MarkdownRenderer, RendererConfig


@pytest.fixture(scope="module")
def md() -> MarkdownRenderer:
    return MarkdownRenderer()


class TestClosest:
    """LineMap.closest() finds the greatest entry <= the query."""

    @pytest.mark.parametrize(
        ("query", "expected"),
        [(5, 4), (0, None), (9, 9), (100, 9), (1, 1), (4, 4), (8, 4)],
    )
    def test_examples(self, query: int, expected: int | None) -> None:
        assert LineMap((1, 4, 9)).closest(query) == expected

    def test_empty_map(self) -> None:
        assert LineMap().closest(10) is None

    def test_all_entries_greater(self) -> None:
        assert LineMap((3, 5)).closest(2) is None

    def test_duplicates(self) -> None:
        assert LineMap((1, 3, 3, 6)).closest(4) == 3
        assert LineMap((1, 3, 3, 6)).closest(3) == 3

    def test_sequence_protocol(self) -> None:
        lm = LineMap((2, 5))
        assert list(lm) == [2, 5]
        assert len(lm) == 2
        assert lm[1] == 5
        assert lm
        assert not LineMap()


class TestLineAttribution:
    """Top-level blocks carry data-line and appear in the line map."""

    def test_heading_and_paragraph(self, md: MarkdownRenderer) -> None:
        result = md.convert("# Title\n\nBody text")

        assert result.html == (
            '<h1 class="line" data-line="1">Title</h1>\n'
            '<p class="line" data-line="3">Body text</p>\n'
        )
        assert result.line_map.lines == (1, 3)

    def test_blockquote_maps_only_outer_block(self, md: MarkdownRenderer) -> None:
        result = md.convert("Intro\n\n> quoted\n> more\n\nOutro")

        assert '<blockquote class="line" data-line="3">' in result.html
        assert "<p>quoted" in result.html
        assert result.line_map.lines == (1, 3, 6)

    def test_nested_blocks_are_not_mapped(self, md: MarkdownRenderer) -> None:
        source = "- item one\n- item two\n\n  continued\n\nAfter"
        result = md.convert(source)

        assert result.line_map.lines == (6,)
        assert result.html.count("data-line") == 1

    def test_unmapped_block_types(self, md: MarkdownRenderer) -> None:
        source = "```\ncode\n```\n\n---\n\n| a |\n|---|\n| 1 |\n\nText"
        result = md.convert(source)

        assert result.line_map.lines == (11,)

    def test_multiline_paragraph_maps_first_line(self, md: MarkdownRenderer) -> None:
        result = md.convert("\n\nfirst line\nsecond line")

        assert result.line_map.lines == (3,)
        assert "<br" in result.html

    def test_setext_heading(self, md: MarkdownRenderer) -> None:
        result = md.convert("Title\n=====\n\nText")

        assert '<h1 class="line" data-line="1">' in result.html
        assert result.line_map.lines == (1, 4)

    def test_math_block_between_paragraphs(self, md: MarkdownRenderer) -> None:
        result = md.convert("Before\n\n$$\nx^2\n$$\n\nAfter")

        assert result.line_map.lines == (1, 7)

    def test_document_order_is_non_decreasing(self, md: MarkdownRenderer) -> None:
        source = "\n".join(f"## Heading {i}\n\nParagraph {i}\n" for i in range(20))
        lines = md.convert(source).line_map.lines

        assert list(lines) == sorted(lines)
        assert len(lines) == 40

    def test_line_map_without_plugins(self) -> None:
        md = MarkdownRenderer(RendererConfig(plugins=()))
        assert md.convert("a\n\nb").line_map.lines == (1, 3)


class TestPreviewQuery:
    """get_closest_preview_line() answers from the last render()."""

    def test_before_any_render(self) -> None:
        assert MarkdownRenderer().get_closest_preview_line(5) is None

    def test_query_after_render(self) -> None:
        md = MarkdownRenderer()
        md.render("# A\n\nB\n\n\n\nC\n\n\nD")

        assert md.line_map.lines == (1, 3, 7, 10)
        assert md.get_closest_preview_line(5) == 3
        assert md.get_closest_preview_line(0) is None
        assert md.get_closest_preview_line(10) == 10
        assert md.get_closest_preview_line(99) == 10

    def test_render_replaces_previous_map(self) -> None:
        md = MarkdownRenderer()
        md.render("a\n\nb\n\nc")
        md.render("only")

        assert md.line_map.lines == (1,)
        assert md.get_closest_preview_line(5) == 1

    def test_empty_document_clears_map(self) -> None:
        md = MarkdownRenderer()
        md.render("text")
        md.render("")

        assert md.line_map.lines == ()
        assert md.get_closest_preview_line(1) is None

    def test_convert_does_not_touch_instance_map(self) -> None:
        md = MarkdownRenderer()
        md.render("a\n\nb")
        md.convert("x\n\n\ny\n\n\nz")

        assert md.line_map.lines == (1, 3)
