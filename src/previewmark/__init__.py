"""
previewmark: Markdown to HTML for live preview panes

Renders Markdown with math, diagrams, highlighted code and emoji, and tags
every top-level block with its source line so a preview can scroll in sync
with the editor.

Quick Start:
    >>> from previewmark import MarkdownRenderer
    >>> md = MarkdownRenderer()
    >>> html = md.render("# Hello\\n\\nWorld")
    >>> md.line_map.lines
    (1, 3)
    >>> md.get_closest_preview_line(2)
    1

Custom Extensions:
    >>> from previewmark import Anchor, Extension, ExtensionKind
    >>>
    >>> md = MarkdownRenderer(extensions=[
    ...     Extension("wiki_link", ExtensionKind.INLINE_RULE, wiki_link,
    ...               anchor=Anchor("link")),
    ... ])

Failure Handling:
    A malformed formula or diagram payload is logged as a warning and
    rendered as its source text; render() always returns HTML.
"""

from previewmark.config import DEFAULT_CONFIG, DEFAULT_PLUGINS, RendererConfig
from previewmark.errors import (
    ConfigurationError,
    PluginError,
    PreviewmarkError,
    RenderFallbackError,
)
from previewmark.highlighting import HighlightResult, Highlighter, PygmentsHighlighter
from previewmark.linemap import LineMap
from previewmark.plugins import BUILTIN_PLUGINS, PreviewPlugin, RenderServices
from previewmark.plugins.math import Latex2MathmlTypesetter, MathTypesetter
from previewmark.plugins.twemoji import EmojiAssetResolver, twemoji_resolver
from previewmark.registry import (
    Anchor,
    Extension,
    ExtensionKind,
    ExtensionRegistry,
    ExtensionRegistryBuilder,
    Position,
)
from previewmark.renderer import MarkdownRenderer, RenderResult, render

__version__ = "0.1.0"

__all__ = [  # noqa: RUF022 - grouped by category
    # Version
    "__version__",
    # Core API
    "MarkdownRenderer",
    "RenderResult",
    "LineMap",
    "render",
    # Configuration
    "DEFAULT_CONFIG",
    "DEFAULT_PLUGINS",
    "RendererConfig",
    # Extension registry
    "Anchor",
    "Extension",
    "ExtensionKind",
    "ExtensionRegistry",
    "ExtensionRegistryBuilder",
    "Position",
    # Plugins
    "BUILTIN_PLUGINS",
    "PreviewPlugin",
    "RenderServices",
    # Services
    "EmojiAssetResolver",
    "HighlightResult",
    "Highlighter",
    "Latex2MathmlTypesetter",
    "MathTypesetter",
    "PygmentsHighlighter",
    "twemoji_resolver",
    # Errors
    "ConfigurationError",
    "PluginError",
    "PreviewmarkError",
    "RenderFallbackError",
]
