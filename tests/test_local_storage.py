"""Tests for the persisted key/value store."""

from local_storage import LocalStorage


def test_missing_key_returns_none(tmp_path):
    storage = LocalStorage(str(tmp_path / "store.json"))
    assert storage.get_item("lastVisitedRequests_u1") is None


def test_values_survive_reload(tmp_path):
    path = str(tmp_path / "nested" / "store.json")
    LocalStorage(path).set_item("lastVisitedRequests_u1", "2026-01-01T12:00:00")

    reloaded = LocalStorage(path)
    assert reloaded.get_item("lastVisitedRequests_u1") == "2026-01-01T12:00:00"


def test_remove_item(tmp_path):
    path = str(tmp_path / "store.json")
    storage = LocalStorage(path)
    storage.set_item("a", "1")
    storage.remove_item("a")
    storage.remove_item("never-set")

    assert storage.get_item("a") is None
    assert LocalStorage(path).get_item("a") is None


def test_unreadable_file_starts_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json")

    storage = LocalStorage(str(path))
    assert storage.get_item("a") is None
    storage.set_item("a", "1")
    assert LocalStorage(str(path)).get_item("a") == "1"
