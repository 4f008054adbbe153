"""Math plugin for previewmark.

Adds LaTeX math typeset to MathML.

Usage:
    >>> md = MarkdownRenderer(RendererConfig(plugins=("math",)))
    >>> md("Inline: $E = mc^2$")
    '<p class="line" data-line="1">Inline: <math ...>...</math></p>\\n'

Syntax:
Inline math: $expression$ (no whitespace just inside the delimiters, and
the closing $ must not be followed by a digit, so "$5 and $6" stays text)
Block math: $$expression$$ on one line, or $$ ... $$ spanning several lines

Failure handling:
A malformed expression never aborts the document. The typesetter raises
RenderFallbackError, the render override logs a warning and emits the
expression's source text instead.

"""

from __future__ import annotations

import re
from collections.abc import Mapping, MutableMapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

import latex2mathml.converter

from previewmark.errors import RenderFallbackError
from previewmark.plugins import RenderServices, register_plugin
from previewmark.registry import Anchor, Extension, ExtensionKind
from previewmark.utils.logger import get_logger
from previewmark.utils.text import escape_html

if TYPE_CHECKING:
    from markdown_it.renderer import RendererHTML
    from markdown_it.rules_block import StateBlock
    from markdown_it.rules_inline import StateInline
    from markdown_it.token import Token
    from markdown_it.utils import OptionsDict

    from previewmark.registry import ExtensionRegistryBuilder

logger = get_logger(__name__)

MATH_BLOCK_ALT: tuple[str, ...] = ("paragraph", "reference", "blockquote", "list")

# Nested macros are expanded at most this many times
MAX_MACRO_PASSES = 10


class MathTypesetter(Protocol):
    """Protocol for math renderers.

    Contract:
        - Returns markup for a well-formed expression
        - Raises RenderFallbackError for anything it cannot render
    """

    def render(
        self,
        expression: str,
        *,
        display_mode: bool,
        macros: Mapping[str, str],
    ) -> str: ...


def expand_macros(expression: str, macros: Mapping[str, str]) -> str:
    """Replace macro invocations with their expansions.

    Macro names are written with their leading backslash (``"\\\\RR"``).
    A name only matches when it is not followed by another letter, so
    ``\\R`` does not match inside ``\\RR``.

    Example:
        >>> expand_macros(r"x \\in \\RR", {r"\\RR": r"\\mathbb{R}"})
        'x \\\\in \\\\mathbb{R}'
    """
    if not macros:
        return expression

    names = sorted(macros, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(name) + r"(?![A-Za-z])" for name in names))

    for _ in range(MAX_MACRO_PASSES):
        expanded = pattern.sub(lambda m: macros[m.group(0)], expression)
        if expanded == expression:
            break
        expression = expanded
    return expression


def braces_balanced(expression: str) -> bool:
    """Whether every unescaped ``{`` has a matching ``}``.

    Example:
        >>> braces_balanced(r"\\frac{1}{2}")
        True
        >>> braces_balanced(r"\\frac{a")
        False
        >>> braces_balanced(r"\\{x")
        True
    """
    depth = 0
    escaped = False
    for char in expression:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


class Latex2MathmlTypesetter:
    """Typeset LaTeX with latex2mathml.

    latex2mathml quietly closes unbalanced groups, so braces are checked
    up front and an unbalanced expression falls back to its source text.
    """

    __slots__ = ()

    def render(
        self,
        expression: str,
        *,
        display_mode: bool,
        macros: Mapping[str, str],
    ) -> str:
        source = expand_macros(expression, macros)
        if not braces_balanced(source):
            raise RenderFallbackError("math", expression, "unbalanced braces")
        try:
            return latex2mathml.converter.convert(
                source, display="block" if display_mode else "inline"
            )
        except Exception as err:
            # latex2mathml signals malformed input with assorted exception types
            raise RenderFallbackError("math", expression, str(err) or type(err).__name__) from err


# =============================================================================
# Parser rules
# =============================================================================


def _delimiter_state(src: str, pos: int) -> tuple[bool, bool]:
    """Whether the $ at ``pos`` can open and/or close a math span."""
    prev_char = src[pos - 1] if pos > 0 else ""
    next_char = src[pos + 1] if pos + 1 < len(src) else ""

    can_open = next_char not in (" ", "\t")
    can_close = not (prev_char in (" ", "\t") or next_char.isdigit())
    return can_open, can_close


def math_inline(state: StateInline, silent: bool) -> bool:
    """Inline rule for ``$...$``."""
    src = state.src
    if src[state.pos] != "$":
        return False

    can_open, _ = _delimiter_state(src, state.pos)
    if not can_open:
        if not silent:
            state.pending += "$"
        state.pos += 1
        return True

    start = state.pos + 1
    match = start
    while True:
        match = src.find("$", match, state.posMax)
        if match == -1:
            break
        # Skip $ preceded by an odd number of backslashes
        pos = match - 1
        while pos >= start and src[pos] == "\\":
            pos -= 1
        if (match - pos) % 2 == 1:
            break
        match += 1

    if match == -1:
        if not silent:
            state.pending += "$"
        state.pos = start
        return True

    if match == start:
        if not silent:
            state.pending += "$$"
        state.pos = start + 1
        return True

    _, can_close = _delimiter_state(src, match)
    if not can_close:
        if not silent:
            state.pending += "$"
        state.pos = start
        return True

    if not silent:
        token = state.push("math_inline", "math", 0)
        token.markup = "$"
        token.content = src[start:match]

    state.pos = match + 1
    return True


def math_block(state: StateBlock, start_line: int, end_line: int, silent: bool) -> bool:
    """Block rule for ``$$ ... $$``."""
    if state.sCount[start_line] - state.blkIndent >= 4:
        return False

    pos = state.bMarks[start_line] + state.tShift[start_line]
    maximum = state.eMarks[start_line]
    if pos + 2 > maximum or state.src[pos : pos + 2] != "$$":
        return False

    if silent:
        return True

    pos += 2
    first_line = state.src[pos:maximum]
    last_line = ""
    found = False
    next_line = start_line

    if first_line.strip().endswith("$$"):
        first_line = first_line.strip()[:-2]
        found = True

    while not found:
        next_line += 1
        if next_line >= end_line:
            break

        pos = state.bMarks[next_line] + state.tShift[next_line]
        maximum = state.eMarks[next_line]
        if pos < maximum and state.tShift[next_line] < state.blkIndent:
            # Non-empty line with negative indent closes the block
            break

        line = state.src[pos:maximum]
        if line.strip().endswith("$$"):
            last_pos = state.src.rfind("$$", pos, maximum)
            last_line = state.src[pos:last_pos]
            found = True

    state.line = next_line + 1

    token = state.push("math_block", "math", 0)
    token.block = True
    token.content = "".join(
        (
            f"{first_line}\n" if first_line.strip() else "",
            state.getLines(start_line + 1, next_line, state.tShift[start_line], True),
            f"{last_line}\n" if last_line.strip() else "",
        )
    )
    token.map = [start_line, state.line]
    token.markup = "$$"
    return True


# =============================================================================
# Render overrides
# =============================================================================


def _render_math(
    services: RenderServices,
    expression: str,
    *,
    display_mode: bool,
) -> str | None:
    try:
        return services.typesetter.render(
            expression, display_mode=display_mode, macros=services.macros
        )
    except RenderFallbackError as err:
        logger.warning("Math fallback: %s", err)
        return None


def _math_renderers(services: RenderServices) -> tuple[Any, Any]:
    def render_math_inline(
        self: RendererHTML,
        tokens: Sequence[Token],
        idx: int,
        options: OptionsDict,
        env: MutableMapping[str, Any],
    ) -> str:
        content = tokens[idx].content
        markup = _render_math(services, content, display_mode=False)
        if markup is None:
            return escape_html(content)
        return markup

    def render_math_block(
        self: RendererHTML,
        tokens: Sequence[Token],
        idx: int,
        options: OptionsDict,
        env: MutableMapping[str, Any],
    ) -> str:
        content = tokens[idx].content
        markup = _render_math(services, content, display_mode=True)
        if markup is None:
            return f"{escape_html(content)}\n"
        return f"<p>{markup}</p>\n"

    return render_math_inline, render_math_block


@register_plugin("math")
class MathPlugin:
    """Plugin adding $math$ and $$math$$ support.

    Inline math sits right after escape handling so ``\\$`` stays literal;
    block math sits right after blockquotes and can interrupt paragraphs,
    references, blockquotes and lists.
    """

    @property
    def name(self) -> str:
        return "math"

    def register(self, builder: ExtensionRegistryBuilder, services: RenderServices) -> None:
        render_inline, render_block = _math_renderers(services)
        builder.register_all(
            [
                Extension(
                    name="math_inline",
                    kind=ExtensionKind.INLINE_RULE,
                    handler=math_inline,
                    anchor=Anchor("escape"),
                ),
                Extension(
                    name="math_block",
                    kind=ExtensionKind.BLOCK_RULE,
                    handler=math_block,
                    anchor=Anchor("blockquote"),
                    alt=MATH_BLOCK_ALT,
                ),
                Extension(
                    name="math_inline",
                    kind=ExtensionKind.RENDER_OVERRIDE,
                    handler=render_inline,
                ),
                Extension(
                    name="math_block",
                    kind=ExtensionKind.RENDER_OVERRIDE,
                    handler=render_block,
                ),
            ]
        )
