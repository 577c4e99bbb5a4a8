import json

import pytest

from sahaayak.core.database import DatabaseError, JsonFileRecordStore, MemoryRecordStore

def test_user_and_global_scopes_are_separate(store):
    store.set("posts", "p1", {'title': "global"})
    store.set("posts", "p1", {'title': "mine"}, user_id="u1")

    assert store.get("posts", "p1")['title'] == "global"
    assert store.get("posts", "p1", "u1")['title'] == "mine"
    assert store.get("posts", "p1", "u2") is None

def test_create_generates_id(store):
    record_id = store.create("notes", {'text': "hi"}, user_id="u1")
    assert store.get("notes", record_id, "u1") == {'text': "hi"}
    assert store.create("notes", {'text': "x"}, "u1", record_id="fixed") == "fixed"

def test_records_are_copies(store):
    data = {'tags': ["a"]}
    store.set("notes", "n1", data, "u1")
    data['tags'].append("b")
    fetched = store.get("notes", "n1", "u1")
    fetched['tags'].append("c")

    assert store.get("notes", "n1", "u1") == {'tags': ["a"]}

def test_get_all_ordering_puts_missing_last(store):
    store.set("logs", "a", {'date': "2026-10-02"}, "u1")
    store.set("logs", "b", {}, "u1")
    store.set("logs", "c", {'date': "2026-10-01"}, "u1")

    ascending = store.get_all("logs", "u1", order_by="date")
    descending = store.get_all("logs", "u1", order_by="date", descending=True)

    assert [r.get('date') for r in ascending] == ["2026-10-01", "2026-10-02", None]
    assert [r.get('date') for r in descending] == ["2026-10-02", "2026-10-01", None]

def test_delete_and_clear_user(store):
    store.set("a", "1", {}, "u1")
    store.set("b", "2", {}, "u1")
    store.set("a", "3", {}, "u2")

    assert store.delete("a", "1", "u1") is True
    assert store.delete("a", "1", "u1") is False
    assert store.clear_user("u1") == 1
    assert store.user_ids() == ["u2"]
    assert store.clear_user("nobody") == 0

def test_json_store_persists(tmp_path):
    store = JsonFileRecordStore(tmp_path / "store.json", backup_dir=tmp_path / "backups")
    store.set("mood_logs", "m1", {'mood': "🙂"}, "u1")

    reopened = JsonFileRecordStore(tmp_path / "store.json", backup_dir=tmp_path / "backups")
    assert reopened.get("mood_logs", "m1", "u1") == {'mood': "🙂"}
    assert not (tmp_path / "store.tmp").exists()

def test_corrupted_file_restored_from_backup(tmp_path):
    data_file = tmp_path / "store.json"
    store = JsonFileRecordStore(data_file, backup_dir=tmp_path / "backups")
    store.set("journal_entries", "j1", {'content': "safe"}, "u1")
    assert store.create_backup() is not None

    data_file.write_text("{ not json", encoding="utf-8")
    recovered = JsonFileRecordStore(data_file, backup_dir=tmp_path / "backups")

    assert recovered.get("journal_entries", "j1", "u1") == {'content': "safe"}
    assert recovered.stats.recoveries == 1
    assert recovered.get_health_status()['status'] == "warning"
    assert json.loads(data_file.read_text(encoding="utf-8"))['users']['u1']

def test_corruption_without_backup_starts_empty(tmp_path):
    data_file = tmp_path / "store.json"
    data_file.write_text("[1, 2, 3]", encoding="utf-8")

    store = JsonFileRecordStore(data_file, backup_dir=tmp_path / "backups")

    assert store.user_ids() == []
    assert store.stats.recoveries == 1

def test_backups_rotated(json_store):
    json_store.set("a", "1", {}, "u1")
    for _ in range(5):
        json_store.create_backup()
    assert len(json_store.get_backups()) == 3

def test_health_of_fresh_store():
    assert MemoryRecordStore().get_health_status()['status'] == "healthy"

@pytest.mark.parametrize("auto_backup", [True, False])
def test_start_and_shutdown(tmp_path, auto_backup):
    import asyncio

    store = JsonFileRecordStore(tmp_path / "store.json", auto_backup=auto_backup)
    store.set("a", "1", {}, "u1")

    async def lifecycle():
        await store.start()
        running = store.scheduler is not None
        await store.shutdown()
        return running

    assert asyncio.run(lifecycle()) is auto_backup
    assert store.scheduler is None
    assert bool(store.get_backups()) is auto_backup

def _failing_save(data):
    raise DatabaseError("disk full")

def test_failed_set_rolls_back(json_store, monkeypatch):
    json_store.set("journal_entries", "j1", {'content': "kept"}, "u1")
    monkeypatch.setattr(json_store, "_save_data_sync", _failing_save)

    with pytest.raises(DatabaseError):
        json_store.set("journal_entries", "j1", {'content': "lost"}, "u1")
    with pytest.raises(DatabaseError):
        json_store.set("goals", "g1", {'text': "new"}, "u2")
    with pytest.raises(DatabaseError):
        json_store.set("posts", "p1", {'title': "global"})

    assert json_store.get("journal_entries", "j1", "u1") == {'content': "kept"}
    assert json_store.user_ids() == ["u1"]
    assert json_store.get_all("posts") == []

def test_failed_delete_and_clear_roll_back(json_store, monkeypatch):
    json_store.set("journal_entries", "j1", {'content': "kept"}, "u1")
    monkeypatch.setattr(json_store, "_save_data_sync", _failing_save)

    with pytest.raises(DatabaseError):
        json_store.delete("journal_entries", "j1", "u1")
    with pytest.raises(DatabaseError):
        json_store.clear_user("u1")

    assert json_store.get("journal_entries", "j1", "u1") == {'content': "kept"}
    assert json_store.user_ids() == ["u1"]

def test_unreadable_newest_snapshot_skipped(tmp_path):
    data_file = tmp_path / "store.json"
    store = JsonFileRecordStore(data_file, backup_dir=tmp_path / "backups")
    store.set("journal_entries", "j1", {'content': "safe"}, "u1")
    store.create_backup()
    (tmp_path / "backups" / "store-99999999_000000_000000.json.gz").write_bytes(b"not gzip")

    data_file.write_text("{ not json", encoding="utf-8")
    recovered = JsonFileRecordStore(data_file, backup_dir=tmp_path / "backups")

    assert recovered.get("journal_entries", "j1", "u1") == {'content': "safe"}
    assert (tmp_path / "store.corrupt").read_text(encoding="utf-8") == "{ not json"
