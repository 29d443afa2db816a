"""Tests for the file-backed favorites list."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from holocron.services import favorites as favorites_module
from holocron.services.favorites import FAVORITES_KEY, FavoritesStore, JsonKeyValueFile


@pytest.fixture
def storage(tmp_path: Path) -> JsonKeyValueFile:
    return JsonKeyValueFile(tmp_path / "data" / "favorites.json")


def _store(storage: JsonKeyValueFile) -> FavoritesStore:
    return FavoritesStore(storage, clock=lambda: 1_700_000_000.5)


def test_add_persists_under_fixed_key(storage: JsonKeyValueFile) -> None:
    store = _store(storage)

    favorite = store.add("1", "Luke Skywalker")

    assert favorite.added_at == 1_700_000_000_500
    raw = json.loads(storage.path.read_text(encoding="utf-8"))
    assert json.loads(raw[FAVORITES_KEY]) == [
        {"uid": "1", "name": "Luke Skywalker", "addedAt": 1_700_000_000_500}
    ]


def test_favorites_survive_reload(storage: JsonKeyValueFile) -> None:
    _store(storage).add("5", "Leia Organa")
    _store(storage).add("1", "Luke Skywalker")

    reloaded = _store(storage)

    assert [favorite.uid for favorite in reloaded.entries()] == ["5", "1"]
    assert reloaded.uids() == {"1", "5"}


def test_adding_existing_uid_is_a_no_op(storage: JsonKeyValueFile) -> None:
    store = _store(storage)
    first = store.add("1", "Luke Skywalker")

    again = store.add("1", "Luke")

    assert again == first
    assert len(store.entries()) == 1


def test_remove_reports_whether_uid_was_present(storage: JsonKeyValueFile) -> None:
    store = _store(storage)
    store.add("1", "Luke Skywalker")

    assert store.remove("1") is True
    assert store.remove("1") is False
    assert _store(storage).entries() == []


def test_toggle_flips_state(storage: JsonKeyValueFile) -> None:
    store = _store(storage)

    assert store.toggle("4", "Darth Vader") is True
    assert store.is_favorite("4")
    assert store.toggle("4", "Darth Vader") is False
    assert not store.is_favorite("4")


def test_corrupt_payload_starts_empty(
    storage: JsonKeyValueFile, caplog: pytest.LogCaptureFixture
) -> None:
    storage.set_item(FAVORITES_KEY, "not json at all")

    store = _store(storage)

    assert store.entries() == []
    assert "Failed to parse stored favorites" in caplog.text


def test_unreadable_file_is_treated_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "favorites.json"
    path.write_text("{broken", encoding="utf-8")

    storage = JsonKeyValueFile(path)

    assert storage.get_item(FAVORITES_KEY) is None


def test_other_keys_are_preserved(storage: JsonKeyValueFile) -> None:
    storage.set_item("theme", "dark")

    _store(storage).add("1", "Luke Skywalker")

    assert storage.get_item("theme") == "dark"


def test_failed_write_leaves_memory_unchanged(tmp_path: Path) -> None:
    blocker = tmp_path / "data"
    blocker.write_text("not a directory", encoding="utf-8")
    store = _store(JsonKeyValueFile(blocker / "favorites.json"))

    with pytest.raises(OSError):
        store.add("1", "Luke Skywalker")

    assert store.uids() == set()
    assert store.entries() == []


def test_failed_remove_keeps_the_favorite(
    storage: JsonKeyValueFile, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = _store(storage)
    store.add("1", "Luke Skywalker")

    def _refuse(key: str, value: str) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(storage, "set_item", _refuse)

    with pytest.raises(OSError):
        store.remove("1")

    assert store.is_favorite("1")


def test_interrupted_dump_keeps_previous_file(
    storage: JsonKeyValueFile, monkeypatch: pytest.MonkeyPatch
) -> None:
    storage.set_item("theme", "dark")
    before = storage.path.read_text(encoding="utf-8")

    def _partial_dump(data: object, handle, **kwargs: object) -> None:
        handle.write('{"theme": "da')
        raise OSError("interrupted")

    monkeypatch.setattr(favorites_module.json, "dump", _partial_dump)

    with pytest.raises(OSError):
        storage.set_item("theme", "light")

    assert storage.path.read_text(encoding="utf-8") == before
    assert storage.get_item("theme") == "dark"
    assert [path.name for path in storage.path.parent.iterdir()] == ["favorites.json"]
