from __future__ import annotations

from core.ports import Fact
from adapters.sqlite_storage import SQLiteStorage


def _storage(tmp_path) -> SQLiteStorage:
    storage = SQLiteStorage(str(tmp_path / "nested" / "switchboard.db"))
    storage.init_db()
    return storage


def test_init_db_creates_directory_and_is_repeatable(tmp_path) -> None:
    storage = _storage(tmp_path)
    storage.init_db()

    assert (tmp_path / "nested" / "switchboard.db").exists()


def test_fact_round_trip_keeps_display_key(tmp_path) -> None:
    storage = _storage(tmp_path)
    storage.put_fact("chat", "coffee", Fact(key="Coffee", be="is", reply=False, value=["great", "hot"]))

    assert storage.get_fact("chat", "coffee") == Fact(key="Coffee", be="is", reply=False, value=["great", "hot"])
    assert storage.get_fact("chat", "tea") is None


def test_put_fact_overwrites(tmp_path) -> None:
    storage = _storage(tmp_path)
    storage.put_fact("chat", "coffee", Fact(key="coffee", value=["great"]))
    storage.put_fact("chat", "coffee", Fact(key="coffee", reply=True, value=["Bad!"]))

    fact = storage.get_fact("chat", "coffee")
    assert fact is not None
    assert fact.reply is True
    assert fact.value == ["Bad!"]


def test_scopes_are_separate(tmp_path) -> None:
    storage = _storage(tmp_path)
    storage.put_fact("a", "coffee", Fact(key="coffee", value=["great"]))

    assert storage.get_fact("b", "coffee") is None
    assert storage.load_facts("b") == {}


def test_delete_facts_counts_existing_rows(tmp_path) -> None:
    storage = _storage(tmp_path)
    storage.put_fact("chat", "one", Fact(key="one", value=["1"]))
    storage.put_fact("chat", "two", Fact(key="two", value=["2"]))

    assert storage.delete_facts("chat", ["one", "missing"]) == 1
    assert storage.delete_facts("chat", []) == 0
    assert list(storage.load_facts("chat")) == ["two"]


def test_replace_facts(tmp_path) -> None:
    storage = _storage(tmp_path)
    storage.put_fact("chat", "old", Fact(key="old", value=["x"]))
    storage.put_fact("other", "keep", Fact(key="keep", value=["y"]))

    storage.replace_facts("chat", {"new": Fact(key="New", value=["z"])})

    assert list(storage.load_facts("chat")) == ["new"]
    assert list(storage.load_facts("other")) == ["keep"]


def test_karma_accumulates(tmp_path) -> None:
    storage = _storage(tmp_path)

    assert storage.get_karma("chat", "bob") == 0
    assert storage.add_karma("chat", "bob", 1) == 1
    assert storage.add_karma("chat", "bob", 1) == 2
    assert storage.add_karma("chat", "bob", -3) == -1
    assert storage.get_karma("other", "bob") == 0
