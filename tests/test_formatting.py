"""Tests for superscript, subscript, highlight and underline."""

from __future__ import annotations

import pytest

from previewmark import ExtensionKind, MarkdownRenderer, RendererConfig


@pytest.fixture(scope="module")
def md() -> MarkdownRenderer:
    return MarkdownRenderer(RendererConfig(plugins=("formatting",)))


def body(html: str) -> str:
    """Strip the line-mapped paragraph wrapper."""
    prefix = '<p class="line" data-line="1">'
    assert html.startswith(prefix)
    return html[len(prefix) : -len("</p>\n")]


class TestSuperscript:
    def test_basic(self, md: MarkdownRenderer) -> None:
        assert body(md.render("x^2^")) == "x<sup>2</sup>"

    def test_whitespace_is_not_superscript(self, md: MarkdownRenderer) -> None:
        assert body(md.render("2^10 and 2^20")) == "2^10 and 2^20"

    def test_escaped_space(self, md: MarkdownRenderer) -> None:
        assert body(md.render("x^a\\ b^")) == "x<sup>a b</sup>"

    def test_empty(self, md: MarkdownRenderer) -> None:
        assert body(md.render("x^^")) == "x^^"


class TestSubscript:
    def test_basic(self, md: MarkdownRenderer) -> None:
        assert body(md.render("H~2~O")) == "H<sub>2</sub>O"

    def test_strikethrough_still_works(self, md: MarkdownRenderer) -> None:
        assert body(md.render("~~gone~~")) == "<s>gone</s>"

    def test_unclosed(self, md: MarkdownRenderer) -> None:
        assert body(md.render("a~b")) == "a~b"


class TestMark:
    def test_basic(self, md: MarkdownRenderer) -> None:
        assert body(md.render("a ==key== b")) == "a <mark>key</mark> b"

    def test_nested_markup(self, md: MarkdownRenderer) -> None:
        assert body(md.render("==*very* important==")) == "<mark><em>very</em> important</mark>"

    def test_comparison_is_not_mark(self, md: MarkdownRenderer) -> None:
        assert body(md.render("a == b == c")) == "a == b == c"

    def test_empty(self, md: MarkdownRenderer) -> None:
        assert body(md.render("a ==== b")) == "a ==== b"

    def test_unclosed(self, md: MarkdownRenderer) -> None:
        assert body(md.render("==open")) == "==open"

    def test_inside_code_span(self, md: MarkdownRenderer) -> None:
        assert body(md.render("`==x==`")) == "<code>==x==</code>"

    def test_without_plugin(self) -> None:
        md = MarkdownRenderer(RendererConfig(plugins=()))
        assert "==key==" in md.render("==key==")


class TestUnderline:
    def test_underscore_is_underline(self, md: MarkdownRenderer) -> None:
        assert body(md.render("_under_ and *em*")) == "<u>under</u> and <em>em</em>"

    def test_strong_unchanged(self, md: MarkdownRenderer) -> None:
        assert body(md.render("__bold__")) == "<strong>bold</strong>"

    def test_without_plugin(self) -> None:
        md = MarkdownRenderer(RendererConfig(plugins=()))
        assert "<em>under</em>" in md.render("_under_")


class TestRuleOrder:
    def test_after_emphasis(self, md: MarkdownRenderer) -> None:
        order = md.registry.resolve()[ExtensionKind.INLINE_RULE]
        idx = order.index("emphasis")

        assert order[idx + 1 : idx + 3] == ("sup", "sub")

    def test_mark_before_emphasis(self, md: MarkdownRenderer) -> None:
        order = md.registry.resolve()[ExtensionKind.INLINE_RULE]
        assert order[order.index("emphasis") - 1] == "mark"

    def test_third_party_rules_are_not_extensions(self, md: MarkdownRenderer) -> None:
        assert "mark" in md.registry.names
        assert "sup" not in md.registry.names

    def test_mixed(self, md: MarkdownRenderer) -> None:
        html = body(md.render("*E = mc^2^* and CO~2~"))
        assert html == "<em>E = mc<sup>2</sup></em> and CO<sub>2</sub>"
