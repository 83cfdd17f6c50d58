from __future__ import annotations

import pytest

from adapters.json_backups import JsonBackupStore
from adapters.sqlite_storage import SQLiteStorage
from core.dispatch import DispatchRegistry
from core.pending import PendingActionStore
from core.plugins import PluginFilter
from features.help import HelpFeature
from features.loader import load_features


class FakeChat:
    async def reply(self, conversation, text: str) -> None:
        return None


def _load(tmp_path, plugins: PluginFilter):
    storage = SQLiteStorage(str(tmp_path / "switchboard.db"))
    storage.init_db()
    registry = DispatchRegistry()
    features = load_features(
        plugins,
        registry,
        FakeChat(),
        facts=storage,
        karma=storage,
        backups=JsonBackupStore(str(tmp_path / "backups")),
        pending=PendingActionStore(),
    )
    return features, registry


def test_all_features_loaded_by_default(tmp_path) -> None:
    features, registry = _load(tmp_path, PluginFilter())

    assert [feature.name for feature in features] == ["help", "karma", "factoids", "conversions"]
    assert registry.resolve("bob++") == "karma"
    assert registry.resolve("help") == "help"


def test_disabled_features_register_nothing(tmp_path) -> None:
    features, registry = _load(tmp_path, PluginFilter("karma"))

    assert [feature.name for feature in features] == ["karma"]
    assert registry.resolve("help") is None
    assert registry.resolve("coffee?") is None


def test_feature_requires_setup_before_registry_use() -> None:
    with pytest.raises(RuntimeError):
        HelpFeature(FakeChat()).registry
