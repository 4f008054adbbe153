"""Tests for RendererConfig."""

from __future__ import annotations

import dataclasses

import pytest

from previewmark import BUILTIN_PLUGINS, DEFAULT_CONFIG, DEFAULT_PLUGINS, RendererConfig
from previewmark.errors import ConfigurationError


class TestDefaults:
    def test_parser_options_on(self) -> None:
        assert DEFAULT_CONFIG.html
        assert DEFAULT_CONFIG.breaks
        assert DEFAULT_CONFIG.linkify
        assert DEFAULT_CONFIG.typographer

    def test_default_plugins(self) -> None:
        assert DEFAULT_CONFIG.plugins == DEFAULT_PLUGINS
        assert "heading_ids" not in DEFAULT_PLUGINS

    def test_emoji_prefix(self) -> None:
        assert DEFAULT_CONFIG.emoji_asset_prefix == "/_assets/svg/twemoji"

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.breaks = False  # type: ignore[misc]


class TestFromDict:
    def test_known_keys(self) -> None:
        config = RendererConfig.from_dict({"breaks": False, "line_numbers": False})

        assert config.breaks is False
        assert config.line_numbers is False
        assert config.html is True

    def test_unknown_keys_ignored(self) -> None:
        config = RendererConfig.from_dict({"plugins": ["math"], "theme": "dark"})
        assert config.plugins == ("math",)

    def test_lists_become_tuples(self) -> None:
        config = RendererConfig.from_dict({"diagram_languages": ["mermaid"]})
        assert config.diagram_languages == ("mermaid",)

    def test_macros(self) -> None:
        config = RendererConfig.from_dict({"macros": {r"\RR": r"\mathbb{R}"}})
        assert config.macros == {r"\RR": r"\mathbb{R}"}

    def test_empty(self) -> None:
        assert RendererConfig.from_dict({}) == RendererConfig()


class TestEnabledPlugins:
    def test_explicit(self) -> None:
        assert RendererConfig(plugins=("fence", "math")).enabled_plugins() == ("fence", "math")

    def test_all(self) -> None:
        assert RendererConfig(plugins=("all",)).enabled_plugins() == tuple(BUILTIN_PLUGINS)

    def test_none(self) -> None:
        assert RendererConfig(plugins=()).enabled_plugins() == ()


class TestValidate:
    def test_default_is_valid(self) -> None:
        DEFAULT_CONFIG.validate()

    def test_unknown_plugin(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown plugin") as excinfo:
            RendererConfig(plugins=("math", "mystery")).validate()
        assert excinfo.value.extension == "mystery"

    def test_all_is_valid(self) -> None:
        RendererConfig(plugins=("all",)).validate()

    def test_reserved_diagram_language(self) -> None:
        with pytest.raises(ConfigurationError, match="reserved"):
            RendererConfig(diagram_languages=("mermaid", "diagram")).validate()

    def test_tab_width_must_be_positive(self) -> None:
        with pytest.raises(ConfigurationError, match="tab_width"):
            RendererConfig(tab_width=0).validate()
