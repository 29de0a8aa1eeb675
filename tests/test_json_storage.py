"""
Full-file persistence: missing files, pretty-printed writes, broken files.
"""
from __future__ import annotations

import json

import pytest

from eventhub.domain.errors import PersistenceError
from eventhub.repositories.json_storage import JsonCollectionFile


def test_missing_file_loads_as_empty_collection(tmp_path):
    storage = JsonCollectionFile(tmp_path / "nope" / "users.json")
    assert storage.load() == []


def test_save_creates_directory_and_pretty_prints(tmp_path):
    path = tmp_path / "data" / "events.json"
    storage = JsonCollectionFile(path)
    storage.save([{"id": 1, "title": "Café"}])

    text = path.read_text(encoding="utf-8")
    assert text.startswith("[\n  {")
    assert "Café" in text
    assert storage.load() == [{"id": 1, "title": "Café"}]
    assert [p.name for p in path.parent.iterdir()] == ["events.json"]


def test_corrupted_file_raises_persistence_error(tmp_path):
    path = tmp_path / "users.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError) as info:
        JsonCollectionFile(path).load()
    assert isinstance(info.value.__cause__, json.JSONDecodeError)
    assert info.value.path == str(path)


def test_non_array_file_is_rejected(tmp_path):
    path = tmp_path / "users.json"
    path.write_text('{"users": []}', encoding="utf-8")
    with pytest.raises(PersistenceError):
        JsonCollectionFile(path).load()


def test_failed_write_keeps_previous_file(tmp_path):
    path = tmp_path / "events.json"
    storage = JsonCollectionFile(path)
    storage.save([{"id": 1}])
    with pytest.raises(TypeError):
        storage.save([{"id": object()}])
    assert storage.load() == [{"id": 1}]
    assert [p.name for p in tmp_path.iterdir()] == ["events.json"]
