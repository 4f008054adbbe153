"""Fenced code plugin for previewmark.

Fenced blocks are dispatched on their language tag, with no overlap between
the three cases:

1. ``diagram``: the body is base64-encoded markup, decoded and emitted
   inside ``<pre class="diagram">``.
2. A client-side diagram language (``mermaid``, ``plantuml`` by default):
   the body is HTML-escaped inside ``<pre class="codeblock-<tag>"><code>``
   for a browser-side renderer to pick up.
3. Anything else: syntax highlighted, with a line-number gutter when the
   block has more than one line.

Trust boundary:
Decoded ``diagram`` markup is emitted without escaping by default, on the
assumption that it comes from the same authoring pipeline as the document.
Integrations that render untrusted documents should set
``RendererConfig(trust_diagram_markup=False)``.

"""

from __future__ import annotations

import base64
import binascii
from collections.abc import MutableMapping, Sequence
from typing import TYPE_CHECKING, Any

from markdown_it.common.utils import unescapeAll

from previewmark.errors import RenderFallbackError
from previewmark.plugins import RenderServices, register_plugin
from previewmark.registry import Extension, ExtensionKind
from previewmark.utils.logger import get_logger
from previewmark.utils.text import escape_html

if TYPE_CHECKING:
    from markdown_it.renderer import RendererHTML
    from markdown_it.token import Token
    from markdown_it.utils import OptionsDict

    from previewmark.highlighting import Highlighter
    from previewmark.registry import ExtensionRegistryBuilder

logger = get_logger(__name__)

DIAGRAM_LANGUAGE = "diagram"


def fence_language(info: str) -> str:
    """First word of a fence info string, with escapes resolved."""
    info = unescapeAll(info).strip() if info else ""
    return info.split(maxsplit=1)[0] if info else ""


def decode_diagram(payload: str) -> str:
    """Decode a base64 diagram payload to text.

    Raises:
        RenderFallbackError: If the payload is not base64-encoded UTF-8
    """
    try:
        return base64.b64decode(payload).decode("utf-8")
    except (binascii.Error, ValueError) as err:
        raise RenderFallbackError("diagram", payload, str(err)) from err


def render_diagram(payload: str, *, trusted: bool = True) -> str:
    """Render a ``diagram`` fence body."""
    try:
        markup = decode_diagram(payload)
    except RenderFallbackError as err:
        logger.warning("Diagram fallback: %s", err)
        return f'<pre class="diagram">{escape_html(payload)}</pre>\n'

    if not trusted:
        markup = escape_html(markup)
    return f'<pre class="diagram">{markup}</pre>\n'


def render_client_diagram(code: str, language: str) -> str:
    """Render a diagram left for client-side rendering (mermaid, plantuml)."""
    return f'<pre class="codeblock-{language}"><code>{escape_html(code)}</code></pre>\n'


def render_code(
    code: str,
    language: str,
    highlighter: Highlighter,
    *,
    line_numbers: bool = True,
) -> str:
    """Render highlighted code with an optional line-number gutter.

    Example:
        A 5-line block renders five ``<span></span>`` gutter markers and a
        ``line-numbers`` class on the ``<pre>``; a 1-line block gets neither.
    """
    result = highlighter.highlight(code, language or None, ignore_illegals=True)
    lang = language or result.language

    gutter = ""
    pre_class = "codeblock"
    if line_numbers and result.line_count > 1:
        markers = "<span></span>" * result.line_count
        gutter = f'<span aria-hidden="true" class="line-numbers-rows">{markers}</span>'
        pre_class = "codeblock line-numbers"

    return (
        f'<pre class="{pre_class}">'
        f'<code class="language-{escape_html(lang)}">{result.value}{gutter}</code>'
        "</pre>\n"
    )


def _fence_renderer(services: RenderServices) -> Any:
    config = services.config
    client_languages = frozenset(config.diagram_languages)

    def render_fence(
        self: RendererHTML,
        tokens: Sequence[Token],
        idx: int,
        options: OptionsDict,
        env: MutableMapping[str, Any],
    ) -> str:
        token = tokens[idx]
        language = fence_language(token.info)

        if language == DIAGRAM_LANGUAGE:
            return render_diagram(token.content, trusted=config.trust_diagram_markup)
        if language in client_languages:
            return render_client_diagram(token.content, language)
        return render_code(
            token.content,
            language,
            services.highlighter,
            line_numbers=config.line_numbers,
        )

    return render_fence


@register_plugin("fence")
class FencePlugin:
    """Plugin rendering fenced code blocks (diagrams and highlighted code)."""

    @property
    def name(self) -> str:
        return "fence"

    def register(self, builder: ExtensionRegistryBuilder, services: RenderServices) -> None:
        builder.register(
            Extension(
                name="fence",
                kind=ExtensionKind.RENDER_OVERRIDE,
                handler=_fence_renderer(services),
            )
        )
