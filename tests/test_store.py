import sqlite3
from datetime import datetime, timezone

import pytest

from diskusage.models import Directory, File, User
from diskusage.usage_db import UsageDB
from diskusage.UsageStore import UsageStore


def test_user_upsert_updates_username(store: UsageStore) -> None:
    store.upsert_user(User(user_id=1000, username=None))
    store.upsert_user(User(user_id=1000, username="alice"))

    assert store.users.select(1000) == User(user_id=1000, username="alice")
    assert store.users.count_all() == 1


def test_directory_update_and_delete(store: UsageStore) -> None:
    store.upsert_user(User(user_id=7, username="bob"))
    store.upsert_directory(Directory(directory_id="/data"))

    assert store.directories.update(Directory(directory_id="/data", owner_id=7)) == 1
    assert store.directories.select("/data") == Directory(directory_id="/data", owner_id=7, parent_id=None)

    assert store.directories.delete("/data") == 1
    assert store.directories.select("/data") is None
    assert not store.directories.exists("/data")


def test_file_round_trips_last_modified(store: UsageStore) -> None:
    modified: datetime = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)
    store.upsert_directory(Directory(directory_id="/data"))
    store.upsert_file(File(file_id="/data/a", name="a", size=42, directory_id="/data", last_modified=modified))

    stored: File | None = store.files.select("/data/a")

    assert stored is not None
    assert stored.size == 42
    assert stored.last_modified == modified
    assert store.files.select_all() == [stored]


def test_file_upsert_is_idempotent(store: UsageStore) -> None:
    store.upsert_directory(Directory(directory_id="/data"))
    for size in (1, 2, 3):
        store.upsert_file(File(file_id="/data/a", name="a", size=size, directory_id="/data"))

    assert store.count_files() == 1
    stored: File | None = store.files.select("/data/a")
    assert stored is not None and stored.size == 3


def test_file_requires_existing_directory(store: UsageStore) -> None:
    with pytest.raises(sqlite3.IntegrityError):
        store.upsert_file(File(file_id="/missing/a", name="a", size=1, directory_id="/missing"))

    assert store.count_files() == 0


def test_directory_requires_existing_parent(store: UsageStore) -> None:
    with pytest.raises(sqlite3.IntegrityError):
        store.upsert_directory(Directory(directory_id="/data/sub", parent_id="/data"))


def test_reset_schema_drops_rows(db: UsageDB, store: UsageStore) -> None:
    store.upsert_user(User(user_id=1))
    db.reset_schema()

    assert store.users.count_all() == 0


def test_reset_schema_debug_does_not_execute(db: UsageDB, store: UsageStore) -> None:
    store.upsert_user(User(user_id=1))
    db.reset_schema(debug=True)

    assert store.users.count_all() == 1


def test_schema_statements_create_users_first() -> None:
    statements: list[str] = UsageDB.schema_statements()

    assert "users" in statements[0]
    assert any("idx_files_directory_id" in sql for sql in statements)
    assert "files" in UsageDB.drop_statements()[0]


def test_directory_upsert_without_parent_keeps_stored_parent(store: UsageStore) -> None:
    store.upsert_directory(Directory(directory_id="/data"))
    store.upsert_directory(Directory(directory_id="/data/sub", parent_id="/data"))

    store.upsert_directory(Directory(directory_id="/data/sub", parent_id=None))

    assert store.directories.select("/data/sub") == Directory(directory_id="/data/sub", parent_id="/data")
