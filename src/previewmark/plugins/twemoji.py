"""Emoji plugin for previewmark.

Recognizes ``:shortcode:`` aliases and unicode emoji in text and renders
each one as a twemoji SVG image:

    :smile:  ->  <img class="emoji" draggable="false" alt="😄"
                      src="/_assets/svg/twemoji/1f604.svg">

Asset paths are a pure function of the emoji's codepoints; nothing is
fetched at render time. Inject a different EmojiAssetResolver to serve the
images from elsewhere.

"""

from __future__ import annotations

import re
from collections.abc import Callable, MutableMapping, Sequence
from typing import TYPE_CHECKING, Any

import emoji
from markdown_it.token import Token

from previewmark.plugins import RenderServices, register_plugin
from previewmark.registry import Anchor, Extension, ExtensionKind
from previewmark.utils.text import escape_html

if TYPE_CHECKING:
    from markdown_it.renderer import RendererHTML
    from markdown_it.rules_core import StateCore
    from markdown_it.utils import OptionsDict

    from previewmark.registry import ExtensionRegistryBuilder

EmojiAssetResolver = Callable[[str], str]

ZWJ = "\u200d"
VARIATION_SELECTOR_16 = "\ufe0f"

_SHORTCODE_RE = re.compile(r":([\w+-]+):")


def to_codepoints(char: str) -> str:
    """Codepoint sequence naming an emoji's twemoji asset.

    The U+FE0F variation selector is dropped unless the sequence contains a
    zero-width joiner.

    Example:
        >>> to_codepoints("❤️")
        '2764'
        >>> to_codepoints("👨‍💻")
        '1f468-200d-1f4bb'
    """
    if ZWJ not in char:
        char = char.replace(VARIATION_SELECTOR_16, "")
    return "-".join(f"{ord(c):x}" for c in char)


def twemoji_resolver(prefix: str = "/_assets/svg/twemoji") -> EmojiAssetResolver:
    """Build a resolver mapping codepoints to ``<prefix>/<codepoints>.svg``."""
    prefix = prefix.rstrip("/")

    def resolve(codepoints: str) -> str:
        return f"{prefix}/{codepoints}.svg"

    return resolve


def lookup_shortcode(name: str) -> str | None:
    """Unicode emoji for a shortcode alias, or None if it is unknown."""
    code = f":{name}:"
    char = emoji.emojize(code, language="alias")
    return None if char == code else char


def _split_text(text: str) -> list[tuple[str, str, str]]:
    """Split text into ("text", content, "") and ("emoji", char, markup) parts."""
    found: list[tuple[int, int, str, str]] = []

    for match in _SHORTCODE_RE.finditer(text):
        char = lookup_shortcode(match.group(1))
        if char is not None:
            found.append((match.start(), match.end(), char, match.group(1)))

    taken = [(start, end) for start, end, _, _ in found]
    for item in emoji.emoji_list(text):
        start, end = item["match_start"], item["match_end"]
        if any(start < t_end and t_start < end for t_start, t_end in taken):
            continue
        found.append((start, end, item["emoji"], ""))

    if not found:
        return [("text", text, "")]

    parts: list[tuple[str, str, str]] = []
    pos = 0
    for start, end, char, markup in sorted(found):
        if start > pos:
            parts.append(("text", text[pos:start], ""))
        parts.append(("emoji", char, markup))
        pos = end
    if pos < len(text):
        parts.append(("text", text[pos:], ""))
    return parts


def replace_emoji(state: StateCore) -> None:
    """Core rule turning emoji inside text tokens into ``emoji`` tokens."""
    for block in state.tokens:
        if block.type != "inline" or not block.children:
            continue

        children: list[Token] = []
        autolink_depth = 0
        for token in block.children:
            if token.type == "link_open" and token.info == "auto":
                autolink_depth += 1
            elif token.type == "link_close" and token.info == "auto":
                autolink_depth -= 1

            if token.type != "text" or autolink_depth > 0:
                children.append(token)
                continue

            for kind, content, markup in _split_text(token.content):
                if kind == "text":
                    part = Token("text", "", 0)
                else:
                    part = Token("emoji", "", 0)
                    part.markup = markup
                part.content = content
                part.level = token.level
                children.append(part)

        block.children = children


def _emoji_renderer(resolver: EmojiAssetResolver) -> Any:
    def render_emoji(
        self: RendererHTML,
        tokens: Sequence[Token],
        idx: int,
        options: OptionsDict,
        env: MutableMapping[str, Any],
    ) -> str:
        char = tokens[idx].content
        src = resolver(to_codepoints(char))
        return f'<img class="emoji" draggable="false" alt="{escape_html(char)}" src="{escape_html(src)}">'

    return render_emoji


@register_plugin("emoji")
class EmojiPlugin:
    """Plugin rendering emoji as twemoji images."""

    @property
    def name(self) -> str:
        return "emoji"

    def register(self, builder: ExtensionRegistryBuilder, services: RenderServices) -> None:
        builder.register_all(
            [
                Extension(
                    name="emoji",
                    kind=ExtensionKind.CORE_RULE,
                    handler=replace_emoji,
                    anchor=Anchor("linkify"),
                ),
                Extension(
                    name="emoji",
                    kind=ExtensionKind.RENDER_OVERRIDE,
                    handler=_emoji_renderer(services.emoji_resolver),
                ),
            ]
        )
