"""Markdown renderer facade.

One MarkdownRenderer holds a fully configured markdown-it parser. Its
extensions are resolved and installed once, in the constructor; after that
the rule tables are never modified. Each call parses and renders a document
and returns the HTML together with the source line of every top-level block.

Usage:
    >>> md = MarkdownRenderer()
    >>> md.render("# Title\\n\\nBody text")
    '<h1 class="line" data-line="1">Title</h1>\\n<p class="line" data-line="3">Body text</p>\\n'
    >>> md.get_closest_preview_line(2)
    1

Thread Safety:
convert() keeps all per-call state in the markdown-it env, so concurrent
convert() calls on one instance are safe. render() additionally remembers
the last line map on the instance for get_closest_preview_line(); callers
that share an instance across threads should use convert() and query the
returned RenderResult instead.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from markdown_it import MarkdownIt

from previewmark.config import DEFAULT_CONFIG, RendererConfig
from previewmark.highlighting import Highlighter, PygmentsHighlighter
from previewmark.linemap import EMPTY_LINE_MAP, LINE_MAP_ENV_KEY, LineMap, line_map_extensions
from previewmark.plugins import RenderServices, apply_plugins
from previewmark.plugins.math import Latex2MathmlTypesetter, MathTypesetter
from previewmark.plugins.twemoji import EmojiAssetResolver, twemoji_resolver
from previewmark.registry import Extension, ExtensionRegistry, ExtensionRegistryBuilder
from previewmark.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Output of one render call.

    Attributes:
        html: HTML fragment (no document wrapper)
        line_map: 1-based source lines of top-level blocks, in document order
    """

    html: str
    line_map: LineMap

    def closest_line(self, line: int) -> int | None:
        return self.line_map.closest(line)


def create_parser(config: RendererConfig) -> MarkdownIt:
    """Base markdown-it parser for a configuration, before extensions."""
    return MarkdownIt(
        "default",
        {
            "html": config.html,
            "breaks": config.breaks,
            "linkify": config.linkify,
            "typographer": config.typographer,
        },
    )


class MarkdownRenderer:
    """Markdown to HTML renderer with preview line mapping.

    Usage:
        >>> md = MarkdownRenderer(RendererConfig(plugins=("math", "fence")))
        >>> html = md("Euler: $e^{i\\\\pi} + 1 = 0$")
        >>> result = md.convert("# Heading")
        >>> result.line_map.lines
        (1,)

    """

    __slots__ = ("_config", "_md", "_registry", "_macros", "_line_map")

    def __init__(
        self,
        config: RendererConfig | None = None,
        *,
        highlighter: Highlighter | None = None,
        typesetter: MathTypesetter | None = None,
        emoji_resolver: EmojiAssetResolver | None = None,
        extensions: Iterable[Extension] = (),
    ) -> None:
        """Build the parser and install all extensions.

        Args:
            config: Renderer configuration (defaults if None)
            highlighter: Syntax highlighter (Pygments if None)
            typesetter: Math typesetter (latex2mathml if None)
            emoji_resolver: Emoji codepoints to asset URL
                (``config.emoji_asset_prefix`` twemoji paths if None)
            extensions: Extra extensions, registered after the plugins

        Raises:
            ConfigurationError: For unknown plugins or invalid extensions
        """
        self._config = config or DEFAULT_CONFIG
        self._config.validate()

        # Owned by this instance only; seeded from the config
        self._macros: dict[str, str] = dict(self._config.macros)
        self._line_map: LineMap = EMPTY_LINE_MAP

        services = RenderServices(
            config=self._config,
            highlighter=highlighter or PygmentsHighlighter(),
            typesetter=typesetter or Latex2MathmlTypesetter(),
            emoji_resolver=emoji_resolver or twemoji_resolver(self._config.emoji_asset_prefix),
            macros=self._macros,
        )

        self._md = create_parser(self._config)
        builder = ExtensionRegistryBuilder(self._md)
        apply_plugins(self._config.enabled_plugins(), builder, services)
        builder.register_all(extensions)
        builder.register_all(line_map_extensions())

        self._registry = builder.build()
        self._registry.install(self._md)
        logger.debug("Renderer built with %d extensions", len(self._registry))

    @property
    def config(self) -> RendererConfig:
        return self._config

    @property
    def registry(self) -> ExtensionRegistry:
        return self._registry

    @property
    def macros(self) -> dict[str, str]:
        """Math macro table shared by inline and block math of this renderer."""
        return self._macros

    @property
    def line_map(self) -> LineMap:
        """Line map of the last render() call."""
        return self._line_map

    def convert(self, source: str) -> RenderResult:
        """Render Markdown to HTML and a line map without touching instance state.

        Args:
            source: Markdown source text

        Returns:
            RenderResult with the HTML fragment and its line map
        """
        env: dict[str, Any] = {LINE_MAP_ENV_KEY: []}
        html = self._md.render(source, env)
        return RenderResult(html=html, line_map=LineMap.from_env(env))

    def render(self, source: str) -> str:
        """Render Markdown to HTML, keeping the line map for preview queries.

        The previous line map is replaced when the call completes.

        Args:
            source: Markdown source text

        Returns:
            HTML string
        """
        result = self.convert(source)
        self._line_map = result.line_map
        return result.html

    def __call__(self, source: str) -> str:
        """Alias for render()."""
        return self.render(source)

    def get_closest_preview_line(self, line: int) -> int | None:
        """Greatest block start line <= ``line`` from the last render().

        Returns:
            The matching 1-based line, or None if every recorded line is
            greater than ``line`` or nothing has been rendered
        """
        return self._line_map.closest(line)


def render(source: str, config: RendererConfig | None = None) -> RenderResult:
    """Render Markdown with a throwaway renderer.

    Builds a new MarkdownRenderer per call; keep a renderer around when
    rendering more than once.
    """
    return MarkdownRenderer(config).convert(source)


__all__ = [
    "MarkdownRenderer",
    "RenderResult",
    "create_parser",
    "render",
]
