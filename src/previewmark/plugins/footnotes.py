"""Footnotes plugin for previewmark.

Adds ``[^1]`` references, ``[^1]: text`` definitions and ``^[inline]``
footnotes using mdit-py-plugins. Footnote definitions are collected into a
section at the end of the document; their paragraphs are nested, so they
never appear in the line map.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mdit_py_plugins.footnote import footnote_plugin

from previewmark.plugins import RenderServices, register_plugin

if TYPE_CHECKING:
    from previewmark.registry import ExtensionRegistryBuilder


@register_plugin("footnotes")
class FootnotesPlugin:
    """Plugin adding footnote support."""

    @property
    def name(self) -> str:
        return "footnotes"

    def register(self, builder: ExtensionRegistryBuilder, services: RenderServices) -> None:
        builder.use(footnote_plugin)
