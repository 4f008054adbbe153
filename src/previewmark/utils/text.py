"""Text helpers shared by the render overrides.

Example:
    >>> from previewmark.utils.text import slugify
    >>> slugify("Hello World!")
    'hello-world'
"""

from __future__ import annotations

import html as html_module
import re

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[-\s]+")


def slugify(text: str, separator: str = "-") -> str:
    """Convert heading text to a URL-safe slug.

    Unicode word characters are kept; HTML entities are decoded first.

    Examples:
        >>> slugify("Test &amp; Code")
        'test-code'
        >>> slugify("Café")
        'café'
    """
    if not text:
        return ""

    text = html_module.unescape(text).lower().strip()
    text = _NON_WORD.sub("", text)
    text = _SEPARATORS.sub(separator, text)
    return text.strip(separator)


def escape_html(text: str) -> str:
    """Escape HTML special characters, including both quote styles.

    Examples:
        >>> escape_html("<b class='x'>")
        '&lt;b class=&#x27;x&#x27;&gt;'
    """
    if not text:
        return ""

    return html_module.escape(text, quote=True)
