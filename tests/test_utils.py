"""Tests for text and logging helpers."""

from __future__ import annotations

import pytest

from previewmark.utils import escape_html, get_logger, slugify


class TestSlugify:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Hello World", "hello-world"),
            ("Hello World!", "hello-world"),
            ("  padded  ", "padded"),
            ("Test &amp; Code", "test-code"),
            ("multiple   spaces", "multiple-spaces"),
            ("already-slugged", "already-slugged"),
            ("Café", "café"),
            ("", ""),
            ("!!!", ""),
        ],
    )
    def test_slugify(self, text: str, expected: str) -> None:
        assert slugify(text) == expected

    def test_separator(self) -> None:
        assert slugify("Hello World", separator="_") == "hello_world"


class TestEscapeHtml:
    def test_escapes_markup(self) -> None:
        assert escape_html('<a href="x">') == "&lt;a href=&quot;x&quot;&gt;"

    def test_escapes_single_quote(self) -> None:
        assert escape_html("it's") == "it&#x27;s"

    def test_empty(self) -> None:
        assert escape_html("") == ""


class TestGetLogger:
    def test_prefix_added(self) -> None:
        assert get_logger("fence").name == "previewmark.fence"

    def test_module_name_unchanged(self) -> None:
        assert get_logger("previewmark.plugins.math").name == "previewmark.plugins.math"
