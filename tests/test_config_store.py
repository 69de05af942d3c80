"""Tests for the named layout store."""

import json

import pytest

from gridpath.domain.config import GridConfig, NodeConfig
from gridpath.domain.errors import InvalidConfig
from gridpath.utils.config_store import (
    STORE_ENV_VAR, ConfigStore, get_default_store_path
)


def sample_config():
    return GridConfig(
        size=4,
        nodes=[NodeConfig(0, 1, True, 1), NodeConfig(2, 2, False, 5)],
        start_position=(0, 0),
        end_position=(3, 3),
    )


class TestConfigStore:

    def test_missing_file_is_an_empty_store(self, store):
        assert store.names() == []
        assert store.load("anything") is None
        assert "anything" not in store

    def test_save_and_load(self, store):
        assert store.save("corridor", sample_config())

        loaded = store.load("corridor")
        assert loaded.to_dict() == sample_config().to_dict()
        assert "corridor" in store
        assert store.saved_at("corridor")

    def test_document_layout_on_disk(self, store):
        store.save("corridor", sample_config())

        with open(store.path, encoding="utf-8") as f:
            document = json.load(f)

        assert document["version"] == 1
        entry = document["layouts"]["corridor"]
        assert entry["config"]["size"] == 4
        assert entry["config"]["startPosition"] == {"row": 0, "col": 0}
        assert "savedAt" in entry

    def test_save_overwrites_existing_name(self, store):
        store.save("demo", sample_config())
        store.save("demo", GridConfig(size=2))

        assert store.names() == ["demo"]
        assert store.load("demo").size == 2

    def test_names_are_sorted(self, store):
        for name in ("zeta", "alpha", "mid"):
            store.save(name, GridConfig(size=3))

        assert store.names() == ["alpha", "mid", "zeta"]

    def test_delete(self, store):
        store.save("gone", GridConfig(size=3))

        assert store.delete("gone") is True
        assert store.delete("gone") is False
        assert store.names() == []

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name_raises(self, store, name):
        with pytest.raises(ValueError):
            store.save(name, GridConfig(size=3))

    def test_creates_parent_directories(self, tmp_path):
        store = ConfigStore(tmp_path / "nested" / "dir" / "layouts.json")
        assert store.save("x", GridConfig(size=2))
        assert store.path.exists()

    @pytest.mark.parametrize("contents", ["{broken", "[]", '{"version": 1}'])
    def test_corrupt_document_raises(self, tmp_path, contents):
        path = tmp_path / "layouts.json"
        path.write_text(contents, encoding="utf-8")

        with pytest.raises(InvalidConfig):
            ConfigStore(path).names()

    def test_malformed_entry_raises_on_load(self, tmp_path):
        path = tmp_path / "layouts.json"
        path.write_text(json.dumps({"version": 1, "layouts": {
            "empty": {"savedAt": "2024-01-01T00:00:00"},
            "bad": {"config": {"size": 0, "nodes": []}},
        }}), encoding="utf-8")
        store = ConfigStore(path)

        with pytest.raises(InvalidConfig):
            store.load("empty")
        with pytest.raises(InvalidConfig):
            store.load("bad")

    def test_environment_variable_overrides_path(self, tmp_path, monkeypatch):
        target = tmp_path / "custom.json"
        monkeypatch.setenv(STORE_ENV_VAR, str(target))

        assert get_default_store_path() == target
        assert ConfigStore().path == target

    def test_default_path_is_in_home_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv(STORE_ENV_VAR, raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))

        assert get_default_store_path() == tmp_path / ".gridpath" / "layouts.json"

    def test_directory_in_place_of_the_document(self, tmp_path):
        store = ConfigStore(tmp_path)

        assert store.save("a", GridConfig(size=3)) is False
        assert store.delete("a") is False
        with pytest.raises(InvalidConfig):
            store.names()
        with pytest.raises(InvalidConfig):
            store.load("a")

    def test_corrupt_document_is_not_overwritten(self, tmp_path):
        path = tmp_path / "layouts.json"
        path.write_text("{broken", encoding="utf-8")

        assert ConfigStore(path).save("a", GridConfig(size=3)) is False
        assert path.read_text(encoding="utf-8") == "{broken"

    def test_failed_write_leaves_no_temporary_file(self, store, monkeypatch):
        store.save("kept", GridConfig(size=2))
        before = store.path.read_text(encoding="utf-8")

        def fail_midway(obj, f, **kwargs):
            f.write('{"version": ')
            raise OSError("No space left on device")

        monkeypatch.setattr(json, "dump", fail_midway)

        assert store.save("lost", GridConfig(size=3)) is False
        assert list(store.path.parent.iterdir()) == [store.path]
        assert store.path.read_text(encoding="utf-8") == before
