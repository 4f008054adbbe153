"""Tab expansion plugin for previewmark.

Replaces tabs inside fenced and indented code blocks with spaces, so code
lines up the same way in every browser no matter its ``tab-size``. Columns
are counted per line, using ``RendererConfig.tab_width``.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from previewmark.plugins import RenderServices, register_plugin
from previewmark.registry import Extension, ExtensionKind

if TYPE_CHECKING:
    from markdown_it.rules_core import StateCore

    from previewmark.registry import ExtensionRegistryBuilder

CODE_TOKENS: tuple[str, ...] = ("fence", "code_block")


def expand_tabs_rule(tab_width: int) -> Any:
    """Core rule expanding tabs in code token contents."""

    def expand_tabs(state: StateCore) -> None:
        for token in state.tokens:
            if token.type in CODE_TOKENS and "\t" in token.content:
                token.content = token.content.expandtabs(tab_width)

    return expand_tabs


@register_plugin("expand_tabs")
class ExpandTabsPlugin:
    """Plugin expanding tabs in code blocks."""

    @property
    def name(self) -> str:
        return "expand_tabs"

    def register(self, builder: ExtensionRegistryBuilder, services: RenderServices) -> None:
        builder.register(
            Extension(
                name="expand_tabs",
                kind=ExtensionKind.CORE_RULE,
                handler=expand_tabs_rule(services.config.tab_width),
            )
        )
