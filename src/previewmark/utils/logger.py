"""Minimal logging utilities for previewmark.

Example:
    >>> from previewmark.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.warning("Math fallback")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "previewmark." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("fence")
        >>> logger.name
        'previewmark.fence'
    """
    if not (name == "previewmark" or name.startswith("previewmark.")):
        name = f"previewmark.{name}"
    return logging.getLogger(name)
