"""Syntax highlighting protocol and the Pygments-backed default.

The fence render override consumes a Highlighter through a narrow contract:
code and an optional language in, highlighted markup plus a rendered line
count out. The highlighter is passed to the renderer at construction; there
is no global highlighter.

Usage:
    from previewmark import MarkdownRenderer

    class PlainHighlighter:
        def highlight(self, code, language, *, ignore_illegals=True):
            return HighlightResult(escape_html(code), language or "", code.count("\\n"))

    md = MarkdownRenderer(highlighter=PlainHighlighter())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from pygments import highlight as pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import TextLexer, get_lexer_by_name, guess_lexer
from pygments.util import ClassNotFound

from previewmark.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class HighlightResult:
    """Highlighted code.

    Attributes:
        value: HTML markup for the code (without <pre>/<code> wrappers)
        language: Language actually used ("" when unknown)
        line_count: Number of newline characters in ``value``
    """

    value: str
    language: str
    line_count: int


class Highlighter(Protocol):
    """Protocol for syntax highlighters.

    Highlighters take code and an optional language and return markup
    with syntax highlighting applied.
    """

    def highlight(
        self,
        code: str,
        language: str | None,
        *,
        ignore_illegals: bool = True,
    ) -> HighlightResult:
        """Highlight code with syntax colors.

        Args:
            code: Source code to highlight
            language: Language identifier, or None to auto-detect
            ignore_illegals: Render malformed snippets best-effort
                instead of failing

        Contract:
            - MUST escape HTML entities in code
            - MUST use CSS classes (not inline styles)
            - SHOULD fall back to plain text for unknown languages
        """
        ...


class PygmentsHighlighter:
    """Highlighter implemented with Pygments.

    Leading and trailing blank lines are preserved so the rendered line
    count matches the fenced block.
    """

    __slots__ = ("_formatter",)

    def __init__(self) -> None:
        self._formatter = HtmlFormatter(nowrap=True)

    def highlight(
        self,
        code: str,
        language: str | None,
        *,
        ignore_illegals: bool = True,
    ) -> HighlightResult:
        if language:
            try:
                lexer = get_lexer_by_name(language, stripnl=False)
            except ClassNotFound:
                if not ignore_illegals:
                    raise
                logger.debug("No lexer for %r, rendering as plain text", language)
                lexer = TextLexer(stripnl=False)
            name = language
        else:
            try:
                lexer = guess_lexer(code, stripnl=False)
            except ClassNotFound:
                lexer = TextLexer(stripnl=False)
            name = lexer.aliases[0] if lexer.aliases else ""

        value = pygments_highlight(code, lexer, self._formatter)
        return HighlightResult(value=value, language=name, line_count=value.count("\n"))


__all__ = [
    "HighlightResult",
    "Highlighter",
    "PygmentsHighlighter",
]
