"""Plugin system for previewmark.

Plugins contribute syntax and render extensions to a renderer:
- math: $inline$ and $$block$$ math typeset to MathML
- fence: diagram payloads, client-side diagrams and highlighted code
- emoji: :shortcode: and unicode emoji rendered as twemoji images
- formatting: ^sup^, ~sub~, ==mark== and _underline_
- footnotes: [^1] references (mdit-py-plugins)
- task_lists: - [ ] checkboxes (mdit-py-plugins)
- attrs: {#id .class target=_blank} attribute lists (mdit-py-plugins)
- abbr: *[ABBR]: title abbreviations
- expand_tabs: tabs in code blocks expanded to spaces
- heading_ids: unique slug ids on headings

Usage:
    >>> from previewmark import MarkdownRenderer, RendererConfig
    >>>
    >>> md = MarkdownRenderer(RendererConfig(plugins=("math", "fence")))
    >>> md = MarkdownRenderer(RendererConfig(plugins=("all",)))

Plugin Architecture:
A plugin never touches the markdown-it rule tables directly. Its register()
method adds Extension objects (and third-party markdown-it plugins) to an
ExtensionRegistryBuilder; the builder resolves anchors once and installs the
result. Services the extensions need (highlighter, math typesetter, emoji
assets, macro table) arrive through RenderServices.

"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from previewmark.errors import ConfigurationError, PluginError, PreviewmarkError

if TYPE_CHECKING:
    from previewmark.config import RendererConfig
    from previewmark.highlighting import Highlighter
    from previewmark.plugins.math import MathTypesetter
    from previewmark.plugins.twemoji import EmojiAssetResolver
    from previewmark.registry import ExtensionRegistryBuilder

__all__ = [
    "BUILTIN_PLUGINS",
    "PreviewPlugin",
    "RenderServices",
    "apply_plugins",
    "get_plugin",
    "register_plugin",
]


@dataclass(frozen=True, slots=True)
class RenderServices:
    """External capabilities and configuration handed to plugins.

    Attributes:
        config: The renderer's configuration
        highlighter: Syntax highlighter for fenced code
        typesetter: Math expression renderer
        emoji_resolver: Maps an emoji codepoint sequence to an asset URL
        macros: Math macro table owned by one renderer instance

    """

    config: RendererConfig
    highlighter: Highlighter
    typesetter: MathTypesetter
    emoji_resolver: EmojiAssetResolver
    macros: dict[str, str]


@runtime_checkable
class PreviewPlugin(Protocol):
    """Protocol for previewmark plugins."""

    @property
    def name(self) -> str:
        """Plugin identifier."""
        ...

    def register(self, builder: ExtensionRegistryBuilder, services: RenderServices) -> None:
        """Add this plugin's extensions to the builder.

        Called once while a renderer is being constructed.
        """
        ...


# Registry of built-in plugins
BUILTIN_PLUGINS: dict[str, type[PreviewPlugin]] = {}


def register_plugin(
    name: str,
) -> Callable[[type[PreviewPlugin]], type[PreviewPlugin]]:
    """Decorator to register a plugin.

    Usage:
        @register_plugin("math")
        class MathPlugin:
            ...

    """

    def decorator(cls: type[PreviewPlugin]) -> type[PreviewPlugin]:
        BUILTIN_PLUGINS[name] = cls
        return cls

    return decorator


def get_plugin(name: str) -> PreviewPlugin:
    """Get a plugin instance by name.

    Raises:
        KeyError: If plugin name is not recognized

    """
    if name not in BUILTIN_PLUGINS:
        available = ", ".join(sorted(BUILTIN_PLUGINS.keys()))
        raise KeyError(f"Unknown plugin: {name!r}. Available: {available}")
    return BUILTIN_PLUGINS[name]()


def apply_plugins(
    plugins: Iterable[str],
    builder: ExtensionRegistryBuilder,
    services: RenderServices,
) -> None:
    """Register the named plugins with a builder, in the given order.

    Raises:
        ConfigurationError: For an unknown plugin name or a plugin whose
            extensions conflict with ones already registered
        PluginError: If a plugin fails for any other reason

    """
    names = list(plugins)
    if "all" in names:
        names = list(BUILTIN_PLUGINS)

    for plugin_name in names:
        try:
            plugin = get_plugin(plugin_name)
        except KeyError as err:
            raise ConfigurationError(str(err.args[0]), extension=plugin_name) from err

        try:
            plugin.register(builder, services)
        except PreviewmarkError:
            raise
        except Exception as err:
            raise PluginError(plugin_name, str(err)) from err


# Import built-in plugins to register them
# These imports trigger the @register_plugin decorators
from previewmark.plugins.math import MathPlugin  # noqa: E402
from previewmark.plugins.fence import FencePlugin  # noqa: E402
from previewmark.plugins.twemoji import EmojiPlugin  # noqa: E402
from previewmark.plugins.formatting import FormattingPlugin  # noqa: E402
from previewmark.plugins.footnotes import FootnotesPlugin  # noqa: E402
from previewmark.plugins.task_lists import TaskListPlugin  # noqa: E402
from previewmark.plugins.attributes import AttributesPlugin  # noqa: E402
from previewmark.plugins.abbreviations import AbbreviationsPlugin  # noqa: E402
from previewmark.plugins.tabs import ExpandTabsPlugin  # noqa: E402
from previewmark.plugins.headings import HeadingIdsPlugin  # noqa: E402

__all__ += [
    "AbbreviationsPlugin",
    "AttributesPlugin",
    "EmojiPlugin",
    "ExpandTabsPlugin",
    "FencePlugin",
    "FootnotesPlugin",
    "FormattingPlugin",
    "HeadingIdsPlugin",
    "MathPlugin",
    "TaskListPlugin",
]
