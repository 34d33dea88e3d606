"""
Tests for the key-value settings stores.
"""

import json
import logging

from wheel_phase.settings_store import InMemorySettingsStore, JsonSettingsStore


class TestInMemorySettingsStore:

    def test_load_save_remove(self):
        store = InMemorySettingsStore({"a": 1})
        assert store.load("a") == 1
        assert store.load("missing") is None
        assert store.load("missing", 5) == 5
        store.save("b", "x")
        assert store.as_dict() == {"a": 1, "b": "x"}
        store.remove("a")
        store.remove("never-there")
        assert store.as_dict() == {"b": "x"}


class TestJsonSettingsStore:

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "settings.json"
        store = JsonSettingsStore(str(path))
        store.save("pointNumber", 12)
        store.save("wheelCircumference", 11.78)
        assert path.exists()

        again = JsonSettingsStore(str(path))
        assert again.load("pointNumber") == 12
        assert again.load("wheelCircumference") == 11.78

        again.remove("pointNumber")
        assert json.loads(path.read_text()) == {"wheelCircumference": 11.78}

    def test_missing_file_is_empty(self, tmp_path):
        store = JsonSettingsStore(str(tmp_path / "nope.json"))
        assert store.load("x", "default") == "default"

    def test_corrupt_file_is_empty(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        with caplog.at_level(logging.WARNING):
            store = JsonSettingsStore(str(path))
        assert store.load("x") is None
        assert "Corrupt settings file" in caplog.text

    def test_non_object_file_is_empty(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2, 3]")
        with caplog.at_level(logging.WARNING):
            store = JsonSettingsStore(str(path))
        assert store.load("x") is None
        assert "not a JSON object" in caplog.text
