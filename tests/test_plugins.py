from __future__ import annotations

from core.plugins import PluginFilter


def test_no_list_enables_everything() -> None:
    plugins = PluginFilter()

    assert plugins.is_enabled("karma")
    assert plugins.enabled_plugins() is None


def test_empty_list_enables_everything() -> None:
    assert PluginFilter([]).enabled_plugins() is None
    assert PluginFilter(" , ").enabled_plugins() is None


def test_comma_separated_string() -> None:
    plugins = PluginFilter(" karma, help ,karma")

    assert plugins.enabled_plugins() == ["karma", "help"]
    assert plugins.is_enabled("help")
    assert not plugins.is_enabled("factoids")


def test_file_extensions_ignored() -> None:
    plugins = PluginFilter(["factoids"])

    assert plugins.is_enabled("factoids.py")
    assert plugins.is_enabled("factoids.ts")
    assert not plugins.is_enabled("conversions.py")
