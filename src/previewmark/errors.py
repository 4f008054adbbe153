"""Exception classes for previewmark.

Provides standardized exceptions for error handling throughout previewmark.

Configuration problems surface at construction time as ConfigurationError.
Per-feature render failures are RenderFallbackError and never escape a
render call: the render override that triggered them logs a warning and
emits the raw source instead.
"""

from __future__ import annotations


class PreviewmarkError(Exception):
    """Base exception for all previewmark errors.

    Subclass this for specific error categories.
    """

    pass


class ConfigurationError(PreviewmarkError):
    """Invalid extension registration or renderer configuration.

    Raised while building a renderer (unknown anchor, duplicate extension,
    conflicting render override, unknown plugin). Never raised by render().
    """

    def __init__(self, message: str, extension: str | None = None) -> None:
        """Initialize configuration error.

        Args:
            message: Description of the problem
            extension: Name of the offending extension or plugin (optional)
        """
        self.message = message
        self.extension = extension

        prefix = f"Extension '{extension}': " if extension else ""
        super().__init__(f"{prefix}{message}")


class RenderFallbackError(PreviewmarkError):
    """A single math expression or diagram payload failed to render.

    Raised by rendering services and caught by the render override,
    which falls back to the raw source text.
    """

    def __init__(self, feature: str, source: str, reason: str = "") -> None:
        """Initialize render fallback error.

        Args:
            feature: Feature that failed (e.g., "math", "diagram")
            source: Raw source text that could not be rendered
            reason: Human-readable cause (optional)
        """
        self.feature = feature
        self.source = source
        self.reason = reason

        detail = f": {reason}" if reason else ""
        super().__init__(f"Could not render {feature} {source!r}{detail}")


class PluginError(PreviewmarkError):
    """Error in plugin initialization.

    Raised when a plugin fails to register its extensions.
    """

    def __init__(self, plugin_name: str, message: str) -> None:
        """Initialize plugin error.

        Args:
            plugin_name: Name of the failing plugin
            message: Description of the error
        """
        self.plugin_name = plugin_name
        super().__init__(f"Plugin '{plugin_name}': {message}")
