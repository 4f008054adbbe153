"""Renderer configuration for previewmark.

Configuration is fixed once per MarkdownRenderer instance and never changes
afterwards. There is no process-wide configuration: two renderers built from
different configs are fully independent.

Usage:
    from previewmark import MarkdownRenderer, RendererConfig

    config = RendererConfig(plugins=("math", "fence"), line_numbers=False)
    md = MarkdownRenderer(config)

    # Or from a settings dict (unknown keys are ignored)
    config = RendererConfig.from_dict({"plugins": ["all"], "breaks": False})

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields

from previewmark.errors import ConfigurationError

DEFAULT_PLUGINS: tuple[str, ...] = (
    "math",
    "fence",
    "emoji",
    "formatting",
    "footnotes",
    "task_lists",
    "attrs",
    "abbr",
    "expand_tabs",
)


@dataclass(frozen=True, slots=True)
class RendererConfig:
    """Immutable renderer configuration.

    Attributes:
        html: Pass raw HTML in the source through to the output
        breaks: Convert single newlines into <br>
        linkify: Turn bare URLs into links
        typographer: Smart quotes and dash replacements
        plugins: Names of built-in plugins to enable, "all" for every one
        macros: Initial math macros (copied into each renderer's own table)
        emoji_asset_prefix: URL prefix of the twemoji SVG assets
        diagram_languages: Fence tags rendered client-side as diagrams
        trust_diagram_markup: Emit decoded ``diagram`` payloads unescaped
        line_numbers: Emit a line-number gutter for multi-line code blocks
        tab_width: Columns per tab stop when expanding tabs in code blocks

    """

    html: bool = True
    breaks: bool = True
    linkify: bool = True
    typographer: bool = True
    plugins: tuple[str, ...] = DEFAULT_PLUGINS
    macros: Mapping[str, str] = field(default_factory=dict)
    emoji_asset_prefix: str = "/_assets/svg/twemoji"
    diagram_languages: tuple[str, ...] = ("mermaid", "plantuml")
    trust_diagram_markup: bool = True
    line_numbers: bool = True
    tab_width: int = 4

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, object]) -> RendererConfig:
        """Create a RendererConfig from a dictionary.

        Only keys that are RendererConfig fields are used; unknown keys are
        silently ignored. Lists are converted to tuples.

        Example:
            >>> config = RendererConfig.from_dict({
            ...     "plugins": ["math"],
            ...     "unknown_key": "ignored",
            ... })
            >>> config.plugins
            ('math',)

        """
        valid_fields = {f.name for f in fields(cls)}
        filtered: dict[str, object] = {}
        for key, value in config_dict.items():
            if key not in valid_fields:
                continue
            if isinstance(value, list):
                value = tuple(value)
            filtered[key] = value
        return cls(**filtered)  # type: ignore[arg-type]

    def enabled_plugins(self) -> tuple[str, ...]:
        """Plugin names with "all" expanded, in a stable order."""
        from previewmark.plugins import BUILTIN_PLUGINS

        if "all" in self.plugins:
            return tuple(BUILTIN_PLUGINS)
        return self.plugins

    def validate(self) -> None:
        """Check plugin names, diagram tags and the tab width.

        Raises:
            ConfigurationError: If a plugin name is unknown, a diagram
                language collides with the reserved ``diagram`` tag, or the
                tab width is below 1
        """
        from previewmark.plugins import BUILTIN_PLUGINS

        for name in self.plugins:
            if name != "all" and name not in BUILTIN_PLUGINS:
                available = ", ".join(sorted(BUILTIN_PLUGINS))
                raise ConfigurationError(
                    f"Unknown plugin. Available: {available}", extension=name
                )

        if "diagram" in self.diagram_languages:
            raise ConfigurationError(
                "'diagram' is reserved for base64 payloads and cannot be a "
                "client-side diagram language"
            )

        if self.tab_width < 1:
            raise ConfigurationError(f"tab_width must be at least 1, got {self.tab_width}")


DEFAULT_CONFIG: RendererConfig = RendererConfig()

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_PLUGINS",
    "RendererConfig",
]
