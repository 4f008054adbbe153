"""Source line mapping for preview scroll sync.

Every top-level paragraph, heading and blockquote is tagged with the 1-based
source line it starts on (``class="line" data-line="N"``), and the same
numbers are collected, in document order, into a LineMap. A preview pane uses
LineMap.closest() to find the rendered block for the editor's scroll position.

Render overrides never write to renderer state: each one appends its line to
a list carried in the per-call markdown-it ``env``, and the renderer turns
that list into a frozen LineMap once the call finishes.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterator, MutableMapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from previewmark.registry import Extension, ExtensionKind

if TYPE_CHECKING:
    from markdown_it.renderer import RendererHTML
    from markdown_it.token import Token
    from markdown_it.utils import OptionsDict

LINE_MAP_ENV_KEY = "previewmark_line_map"

LINE_MAPPED_TOKENS: tuple[str, ...] = ("paragraph_open", "heading_open", "blockquote_open")


@dataclass(frozen=True, slots=True)
class LineMap:
    """Ordered, non-decreasing 1-based source lines of top-level blocks.

    Example:
        >>> lm = LineMap((1, 4, 9))
        >>> lm.closest(5)
        4
        >>> lm.closest(0) is None
        True
    """

    lines: tuple[int, ...] = ()

    def closest(self, line: int) -> int | None:
        """Greatest recorded line <= ``line``, or None if there is none."""
        idx = bisect_right(self.lines, line)
        if idx == 0:
            return None
        return self.lines[idx - 1]

    def __iter__(self) -> Iterator[int]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __getitem__(self, idx: int) -> int:
        return self.lines[idx]

    def __bool__(self) -> bool:
        return bool(self.lines)

    @classmethod
    def from_env(cls, env: MutableMapping[str, Any]) -> LineMap:
        lines: Sequence[int] = env.get(LINE_MAP_ENV_KEY, ())
        return cls(tuple(lines))


EMPTY_LINE_MAP = LineMap()


def inject_line_number(
    self: RendererHTML,
    tokens: Sequence[Token],
    idx: int,
    options: OptionsDict,
    env: MutableMapping[str, Any],
) -> str:
    """Tag a top-level block with its source line, then render it normally."""
    token = tokens[idx]
    if token.map and token.level == 0:
        line = token.map[0] + 1
        token.attrJoin("class", "line")
        token.attrSet("data-line", str(line))
        env.setdefault(LINE_MAP_ENV_KEY, []).append(line)
    return self.renderToken(tokens, idx, options, env)


def line_map_extensions() -> list[Extension]:
    """Render overrides recording line numbers for the mapped token types."""
    return [
        Extension(
            name=f"line_map_{token_type}",
            kind=ExtensionKind.RENDER_OVERRIDE,
            handler=inject_line_number,
            target=token_type,
        )
        for token_type in LINE_MAPPED_TOKENS
    ]


__all__ = [
    "EMPTY_LINE_MAP",
    "LINE_MAPPED_TOKENS",
    "LINE_MAP_ENV_KEY",
    "LineMap",
    "inject_line_number",
    "line_map_extensions",
]
