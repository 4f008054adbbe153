"""Tests for the emoji plugin."""

from __future__ import annotations

import pytest

from previewmark import MarkdownRenderer, RendererConfig
from previewmark.plugins.twemoji import lookup_shortcode, to_codepoints, twemoji_resolver

EMOJI_ONLY = RendererConfig(plugins=("emoji",))


def img(char: str, codepoints: str, prefix: str = "/_assets/svg/twemoji") -> str:
    return f'<img class="emoji" draggable="false" alt="{char}" src="{prefix}/{codepoints}.svg">'


@pytest.fixture(scope="module")
def md() -> MarkdownRenderer:
    return MarkdownRenderer(EMOJI_ONLY)


class TestCodepoints:
    @pytest.mark.parametrize(
        ("char", "expected"),
        [
            ("\U0001f604", "1f604"),
            ("\u2764\ufe0f", "2764"),
            ("\U0001f468\u200d\U0001f4bb", "1f468-200d-1f4bb"),
            ("\U0001f3f3\ufe0f\u200d\U0001f308", "1f3f3-fe0f-200d-1f308"),
            ("\U0001f1fa\U0001f1f8", "1f1fa-1f1f8"),
        ],
    )
    def test_to_codepoints(self, char: str, expected: str) -> None:
        assert to_codepoints(char) == expected


class TestResolver:
    def test_default_prefix(self) -> None:
        assert twemoji_resolver()("1f604") == "/_assets/svg/twemoji/1f604.svg"

    def test_trailing_slash_stripped(self) -> None:
        assert twemoji_resolver("/static/emoji/")("2764") == "/static/emoji/2764.svg"


class TestShortcodes:
    def test_known(self) -> None:
        assert lookup_shortcode("thumbsup") == "\U0001f44d"

    def test_unknown(self) -> None:
        assert lookup_shortcode("definitely_not_an_emoji") is None


class TestRendering:
    """Emoji in text become twemoji images."""

    def test_shortcode(self, md: MarkdownRenderer) -> None:
        html = md.render("Nice :thumbsup:")
        assert html == f'<p class="line" data-line="1">Nice {img(chr(0x1F44D), "1f44d")}</p>\n'

    def test_unicode_emoji(self, md: MarkdownRenderer) -> None:
        html = md.render("Party \U0001f389 time")
        assert f"Party {img(chr(0x1F389), '1f389')} time" in html

    def test_multiple_in_one_text(self, md: MarkdownRenderer) -> None:
        html = md.render(":smile: and :+1:")

        assert "1f604.svg" in html
        assert "1f44d.svg" in html
        assert " and " in html

    def test_unknown_shortcode_stays_text(self, md: MarkdownRenderer) -> None:
        html = md.render("keep :definitely_not_an_emoji: as is")
        assert ":definitely_not_an_emoji:" in html
        assert "<img" not in html

    def test_code_span_untouched(self, md: MarkdownRenderer) -> None:
        html = md.render("`:smile:` and `\U0001f389`")

        assert "<code>:smile:</code>" in html
        assert "<img" not in html

    def test_fenced_code_untouched(self, md: MarkdownRenderer) -> None:
        assert "<img" not in md.render("```\n:smile:\n```")

    def test_autolink_text_untouched(self, md: MarkdownRenderer) -> None:
        html = md.render("<https://example.com/:smile:>")
        assert ">https://example.com/:smile:</a>" in html

    def test_inside_emphasis(self, md: MarkdownRenderer) -> None:
        html = md.render("*so :smile:*")
        assert f"<em>so {img(chr(0x1F604), '1f604')}</em>" in html

    def test_custom_resolver(self) -> None:
        md = MarkdownRenderer(EMOJI_ONLY, emoji_resolver=lambda cp: f"https://cdn.test/{cp}.png")
        html = md.render(":smile:")
        assert 'src="https://cdn.test/1f604.png"' in html

    def test_asset_prefix_from_config(self) -> None:
        md = MarkdownRenderer(RendererConfig(plugins=("emoji",), emoji_asset_prefix="/img/"))
        assert 'src="/img/1f604.svg"' in md.render(":smile:")

    def test_disabled(self) -> None:
        md = MarkdownRenderer(RendererConfig(plugins=()))
        assert "<img" not in md.render(":smile: \U0001f389")
