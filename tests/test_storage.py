"""Tests for the JSON key-value adapter."""

import json
import datetime

from dream_rhythm.storage import JsonKeyValueStore


class TestJsonKeyValueStore:
    def test_missing_file_is_empty(self, storage):
        assert storage.get("anything") is None
        assert storage.get("anything", 5) == 5
        assert not storage.contains("anything")

    def test_set_persists_to_disk(self, storage, store_path, logger):
        storage.set("userStats", {"sleep_goal": 7.0})
        with open(store_path, "r", encoding="utf-8") as f:
            assert json.load(f) == {"userStats": {"sleep_goal": 7.0}}
        assert JsonKeyValueStore(store_path, logger).get("userStats") == {"sleep_goal": 7.0}

    def test_keys_are_independent(self, storage):
        storage.set_many({"a": 1, "b": [1, 2]})
        storage.remove("a")
        assert not storage.contains("a")
        assert storage.get("b") == [1, 2]

    def test_remove_missing_key_is_noop(self, storage, store_path):
        storage.remove("nope")
        assert storage.get("nope") is None

    def test_non_object_document_treated_as_empty(self, store_path, logger):
        with open(store_path, "w", encoding="utf-8") as f:
            json.dump([1, 2, 3], f)
        assert JsonKeyValueStore(store_path, logger).get("sleepEntries") is None

    def test_unserializable_value_is_dropped(self, storage):
        storage.set("when", datetime.datetime(2026, 1, 1))
        assert not storage.contains("when")

    def test_set_many_skips_bad_values(self, storage):
        storage.set_many({"ok": 1, "bad": object()})
        assert storage.get("ok") == 1
        assert not storage.contains("bad")

    def test_write_failure_is_swallowed(self, tmp_path, logger):
        # The target path is a directory, so every open() fails
        storage = JsonKeyValueStore(str(tmp_path), logger)
        storage.set("userStats", {"dream_stars": 1})
        assert storage.get("userStats") == {"dream_stars": 1}
