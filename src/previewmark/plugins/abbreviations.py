"""Abbreviation plugin for previewmark.

Definitions look like reference links with a leading asterisk::

    *[HTML]: Hyper Text Markup Language

They produce no output of their own. Every whole-word occurrence of the
abbreviation elsewhere in the document is wrapped as
``<abbr title="Hyper Text Markup Language">HTML</abbr>``; text inside links
is left alone. Definitions are collected per render in the markdown-it env,
so documents never see each other's abbreviations.

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from markdown_it.token import Token

from previewmark.plugins import RenderServices, register_plugin
from previewmark.registry import Anchor, Extension, ExtensionKind, Position

if TYPE_CHECKING:
    from markdown_it.rules_block import StateBlock
    from markdown_it.rules_core import StateCore

    from previewmark.registry import ExtensionRegistryBuilder

ABBREVIATIONS_ENV_KEY = "previewmark_abbreviations"

ABBR_DEF_ALT: tuple[str, ...] = ("paragraph", "reference")

_DEFINITION_RE = re.compile(r"\*\[([^\[\]]+)\]:[ \t]*(.*?)[ \t]*$")


def abbr_def(state: StateBlock, start_line: int, end_line: int, silent: bool) -> bool:
    """Block rule for ``*[ABBR]: title`` definitions."""
    if state.sCount[start_line] - state.blkIndent >= 4:
        return False

    pos = state.bMarks[start_line] + state.tShift[start_line]
    maximum = state.eMarks[start_line]
    match = _DEFINITION_RE.match(state.src[pos:maximum])
    if match is None:
        return False

    label = match.group(1).replace("\\", "")
    title = match.group(2)
    if not label.strip() or not title:
        return False

    if silent:
        return True

    abbreviations = state.env.setdefault(ABBREVIATIONS_ENV_KEY, {})
    # First definition wins, like link references
    abbreviations.setdefault(label, title)

    state.line = start_line + 1
    return True


def _split_text(token: Token, pattern: re.Pattern[str], titles: dict[str, str]) -> list[Token]:
    text = token.content
    nodes: list[Token] = []
    pos = 0
    for match in pattern.finditer(text):
        if match.start() > pos:
            nodes.append(_text(text[pos : match.start()], token.level))

        abbr_open = Token("abbr_open", "abbr", 1, level=token.level)
        abbr_open.attrSet("title", titles[match.group(0)])
        nodes.append(abbr_open)
        nodes.append(_text(match.group(0), token.level + 1))
        nodes.append(Token("abbr_close", "abbr", -1, level=token.level))
        pos = match.end()

    if not nodes:
        return [token]
    if pos < len(text):
        nodes.append(_text(text[pos:], token.level))
    return nodes


def _text(content: str, level: int) -> Token:
    token = Token("text", "", 0, level=level)
    token.content = content
    return token


def abbr_replace(state: StateCore) -> None:
    """Core rule wrapping known abbreviations in inline text."""
    titles: dict[str, str] = state.env.get(ABBREVIATIONS_ENV_KEY) or {}
    if not titles:
        return

    names = sorted(titles, key=len, reverse=True)
    pattern = re.compile(r"(?<!\w)(?:" + "|".join(re.escape(name) for name in names) + r")(?!\w)")

    for block in state.tokens:
        if block.type != "inline" or not block.children:
            continue

        children: list[Token] = []
        link_depth = 0
        for token in block.children:
            if token.type == "link_open":
                link_depth += 1
            elif token.type == "link_close":
                link_depth -= 1

            if token.type != "text" or link_depth:
                children.append(token)
            else:
                children.extend(_split_text(token, pattern, titles))
        block.children = children


@register_plugin("abbr")
class AbbreviationsPlugin:
    """Plugin adding ``*[ABBR]: title`` abbreviations.

    Definitions are read before link references and can end a paragraph;
    replacement runs right after linkify so autolinked text is skipped.
    """

    @property
    def name(self) -> str:
        return "abbr"

    def register(self, builder: ExtensionRegistryBuilder, services: RenderServices) -> None:
        builder.register_all(
            [
                Extension(
                    name="abbr_def",
                    kind=ExtensionKind.BLOCK_RULE,
                    handler=abbr_def,
                    anchor=Anchor("reference", Position.BEFORE),
                    alt=ABBR_DEF_ALT,
                ),
                Extension(
                    name="abbr_replace",
                    kind=ExtensionKind.CORE_RULE,
                    handler=abbr_replace,
                    anchor=Anchor("linkify"),
                ),
            ]
        )
