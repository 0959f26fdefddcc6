"""Tests for the durable storage backends and session management."""

import json

import pytest

from pokemon_cache.storage import (
    DurableStore,
    FileSessionStore,
    MemoryStore,
    NullStore,
    QuotaExceededError,
    StorageError,
    _session_stores,
    cleanup_all_sessions,
    cleanup_session,
    get_or_create_session_store,
)


def test_null_store_is_unavailable_and_inert():
    store = NullStore()
    store.set("pokemon_img_x", "value")
    assert store.available is False
    assert store.get("pokemon_img_x") is None
    assert store.keys() == []


def test_memory_store_get_set_remove():
    store = MemoryStore()
    store.set("a", "1")
    assert store.get("a") == "1"
    store.remove("a")
    store.remove("a")
    assert store.get("a") is None


def test_memory_store_quota():
    store = MemoryStore(quota_bytes=10)
    store.set("ab", "cd")
    with pytest.raises(QuotaExceededError):
        store.set("long-key", "long-value")
    # Overwriting an existing key only counts its new size
    store.set("ab", "cdefgh")
    assert store.get("ab") == "cdefgh"


def test_quota_error_is_storage_error():
    assert issubclass(QuotaExceededError, StorageError)


def test_file_store_persists_across_instances(tmp_path):
    first = FileSessionStore(session_id="s1", base_dir=str(tmp_path))
    first.set("pokemon_custom_names", '["mewthree"]')

    second = FileSessionStore(session_id="s1", base_dir=str(tmp_path))
    assert second.get("pokemon_custom_names") == '["mewthree"]'
    assert second.keys() == ["pokemon_custom_names"]


def test_file_store_writes_json_document(tmp_path):
    store = FileSessionStore(session_id="doc", base_dir=str(tmp_path))
    store.set("k", "v")
    store.remove("missing")
    assert json.loads(store.path.read_text()) == {"k": "v"}
    assert not store.path.with_suffix(".tmp").exists()


def test_file_store_without_session_id_uses_unique_dir(tmp_path):
    a = FileSessionStore(base_dir=str(tmp_path))
    b = FileSessionStore(base_dir=str(tmp_path))
    assert a.session_dir != b.session_dir


def test_file_store_base_dir_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("POKEMON_CACHE_DIR", str(tmp_path))
    store = FileSessionStore(session_id="env")
    assert store.session_dir == tmp_path / "pokemon-cache-env"


def test_file_store_corrupt_document_raises_storage_error(tmp_path):
    store = FileSessionStore(session_id="bad", base_dir=str(tmp_path))
    store.path.write_text("{not json")
    with pytest.raises(StorageError):
        store.get("anything")


def test_file_store_destroy_is_idempotent(tmp_path):
    store = FileSessionStore(session_id="gone", base_dir=str(tmp_path))
    store.set("k", "v")
    store.destroy()
    store.destroy()
    assert not store.session_dir.exists()


def test_get_or_create_returns_consistent_store(tmp_path):
    s1 = get_or_create_session_store("same", base_dir=str(tmp_path))
    s2 = get_or_create_session_store("same", base_dir=str(tmp_path))
    assert s1 is s2


def test_different_sessions_get_different_stores(tmp_path):
    a = get_or_create_session_store("a", base_dir=str(tmp_path))
    b = get_or_create_session_store("b", base_dir=str(tmp_path))
    assert a is not b


def test_cleanup_session_removes_from_registry(tmp_path):
    store = get_or_create_session_store("bye", base_dir=str(tmp_path))
    store.set("k", "v")
    cleanup_session("bye")
    assert "bye" not in _session_stores
    assert not store.session_dir.exists()


def test_cleanup_session_is_idempotent():
    cleanup_session("never-existed")


def test_cleanup_all_sessions(tmp_path):
    for i in range(3):
        get_or_create_session_store(f"user-{i}", base_dir=str(tmp_path))
    assert len(_session_stores) == 3
    cleanup_all_sessions()
    assert len(_session_stores) == 0


def test_file_stores_sharing_a_session_keep_each_others_writes(tmp_path):
    s1 = FileSessionStore(session_id="shared", base_dir=str(tmp_path))
    s2 = FileSessionStore(session_id="shared", base_dir=str(tmp_path))
    assert s1.get("pokemon_img_a") is None

    s2.set("pokemon_img_a", "1")
    s1.set("pokemon_img_b", "2")

    s3 = FileSessionStore(session_id="shared", base_dir=str(tmp_path))
    assert s3.get("pokemon_img_a") == "1"
    assert s3.get("pokemon_img_b") == "2"


def test_file_store_sees_later_outside_writes(tmp_path):
    s1 = FileSessionStore(session_id="watch", base_dir=str(tmp_path))
    s1.set("k", "old")
    s2 = FileSessionStore(session_id="watch", base_dir=str(tmp_path))
    s2.set("k", "new")
    s2.remove("gone")
    assert s1.get("k") == "new"
    s2.remove("k")
    assert s1.keys() == []


def test_durable_store_requires_every_method():
    class PartialStore(DurableStore):
        def get(self, key):
            return None

    with pytest.raises(TypeError):
        PartialStore()
