"""Attribute plugin for previewmark.

Adds ``{#id .class target=_blank}`` attribute lists using mdit-py-plugins:

- inline, right after a link, image or code span:
  ``[docs](https://example.com){target=_blank}``
- on a line of its own, applying to the block below it:
  ``{.note}`` followed by a paragraph

Only ``id``, ``class`` and ``target`` are kept. Anything else is dropped from
the output and left in the token's ``meta["insecure_attrs"]``.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mdit_py_plugins.attrs import attrs_block_plugin, attrs_plugin

from previewmark.plugins import RenderServices, register_plugin

if TYPE_CHECKING:
    from previewmark.registry import ExtensionRegistryBuilder

ALLOWED_ATTRIBUTES: tuple[str, ...] = ("id", "class", "target")


@register_plugin("attrs")
class AttributesPlugin:
    """Plugin adding inline and block attribute lists."""

    @property
    def name(self) -> str:
        return "attrs"

    def register(self, builder: ExtensionRegistryBuilder, services: RenderServices) -> None:
        builder.use(attrs_plugin, allowed=ALLOWED_ATTRIBUTES)
        builder.use(attrs_block_plugin, allowed=ALLOWED_ATTRIBUTES)
