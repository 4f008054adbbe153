"""Heading id plugin for previewmark.

Gives every heading an ``id`` slugified from its text, so preview panes and
tables of contents can link to it. Duplicate slugs within one document get a
numeric suffix (``intro``, ``intro-1``, ...).

Opt-in: not part of the default plugin set.

"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any

from previewmark.plugins import RenderServices, register_plugin
from previewmark.registry import Extension, ExtensionKind
from previewmark.utils.text import slugify

if TYPE_CHECKING:
    from markdown_it.token import Token

    from previewmark.registry import ExtensionRegistryBuilder

SEEN_SLUGS_ENV_KEY = "previewmark_heading_slugs"


def assign_heading_id(tokens: list[Token], idx: int, env: MutableMapping[str, Any]) -> None:
    """Attribute decorator setting ``id`` on heading_open tokens."""
    token = tokens[idx]
    if token.type != "heading_open" or token.attrGet("id") is not None:
        return
    if idx + 1 >= len(tokens) or tokens[idx + 1].type != "inline":
        return

    base = slugify(tokens[idx + 1].content) or "section"
    seen: set[str] = env.setdefault(SEEN_SLUGS_ENV_KEY, set())
    slug = base
    counter = 1
    while slug in seen:
        slug = f"{base}-{counter}"
        counter += 1
    seen.add(slug)
    token.attrSet("id", slug)


@register_plugin("heading_ids")
class HeadingIdsPlugin:
    """Plugin adding unique slug ids to headings."""

    @property
    def name(self) -> str:
        return "heading_ids"

    def register(self, builder: ExtensionRegistryBuilder, services: RenderServices) -> None:
        builder.register(
            Extension(
                name="heading_ids",
                kind=ExtensionKind.ATTRIBUTE_DECORATOR,
                handler=assign_heading_id,
            )
        )
