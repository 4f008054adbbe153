"""Utility modules for previewmark.

Provides:
- text: slugify, escape_html for text processing
- logger: get_logger for logging
"""

from previewmark.utils.logger import get_logger
from previewmark.utils.text import escape_html, slugify

__all__ = [
    "escape_html",
    "get_logger",
    "slugify",
]
