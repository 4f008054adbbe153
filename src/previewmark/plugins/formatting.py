"""Inline formatting plugin for previewmark.

Adds:
- ``^text^`` superscript -> <sup>text</sup> (mdit-py-plugins)
- ``~text~`` subscript   -> <sub>text</sub> (mdit-py-plugins; ``~~text~~``
  stays strikethrough)
- ``==text==`` highlight -> <mark>text</mark>
- ``_text_`` emphasis rendered as underline -> <u>text</u>
  (``*text*`` is still <em>)

Superscript and subscript content may not contain unescaped whitespace,
so ``2^10 and 2^20`` is left alone. Highlighted text may hold other inline
markup but may not start or end with whitespace.

"""

from __future__ import annotations

from collections.abc import MutableMapping, Sequence
from typing import TYPE_CHECKING, Any

from mdit_py_plugins.subscript import sub_plugin
from mdit_py_plugins.superscript import superscript_plugin

from previewmark.plugins import RenderServices, register_plugin
from previewmark.registry import Anchor, Extension, ExtensionKind, Position

if TYPE_CHECKING:
    from markdown_it.renderer import RendererHTML
    from markdown_it.rules_inline import StateInline
    from markdown_it.token import Token
    from markdown_it.utils import OptionsDict

    from previewmark.registry import ExtensionRegistryBuilder

MARK_DELIMITER = "=="


def mark(state: StateInline, silent: bool) -> bool:
    """Inline rule for ``==text==``."""
    start = state.pos
    maximum = state.posMax

    if not state.src.startswith(MARK_DELIMITER, start):
        return False

    content_start = start + len(MARK_DELIMITER)
    state.pos = content_start
    found = False
    while state.pos < maximum:
        if state.src.startswith(MARK_DELIMITER, state.pos):
            found = True
            break
        state.md.inline.skipToken(state)

    content_end = state.pos
    state.pos = start
    if not found or content_end == content_start:
        return False

    content = state.src[content_start:content_end]
    if content[0].isspace() or content[-1].isspace():
        return False

    if not silent:
        state.pos = content_start
        state.posMax = content_end

        token = state.push("mark_open", "mark", 1)
        token.markup = MARK_DELIMITER
        state.md.inline.tokenize(state)
        token = state.push("mark_close", "mark", -1)
        token.markup = MARK_DELIMITER

    state.pos = content_end + len(MARK_DELIMITER)
    state.posMax = maximum
    return True


def render_underline_open(
    self: RendererHTML,
    tokens: Sequence[Token],
    idx: int,
    options: OptionsDict,
    env: MutableMapping[str, Any],
) -> str:
    if tokens[idx].markup == "_":
        return "<u>"
    return self.renderToken(tokens, idx, options, env)


def render_underline_close(
    self: RendererHTML,
    tokens: Sequence[Token],
    idx: int,
    options: OptionsDict,
    env: MutableMapping[str, Any],
) -> str:
    if tokens[idx].markup == "_":
        return "</u>"
    return self.renderToken(tokens, idx, options, env)


@register_plugin("formatting")
class FormattingPlugin:
    """Plugin adding superscript, subscript, highlight and underline.

    Both third-party rules insert themselves right after ``emphasis``, so
    subscript is applied first to leave superscript next to emphasis.
    """

    @property
    def name(self) -> str:
        return "formatting"

    def register(self, builder: ExtensionRegistryBuilder, services: RenderServices) -> None:
        builder.use(sub_plugin).use(superscript_plugin)
        builder.register_all(
            [
                Extension(
                    name="mark",
                    kind=ExtensionKind.INLINE_RULE,
                    handler=mark,
                    anchor=Anchor("emphasis", Position.BEFORE),
                ),
                Extension(
                    name="underline_open",
                    kind=ExtensionKind.RENDER_OVERRIDE,
                    handler=render_underline_open,
                    target="em_open",
                ),
                Extension(
                    name="underline_close",
                    kind=ExtensionKind.RENDER_OVERRIDE,
                    handler=render_underline_close,
                    target="em_close",
                ),
            ]
        )
