import sqlite3
from collections.abc import Callable
from types import ModuleType
from typing import Generic, cast

from .models import Directory, File, RecordT, User
from .sql import directories, files, users
from .usage_db import UsageDB


class RecordTable(Generic[RecordT]):
    """
    Insert/update/delete/select for one entity table.

    The SQL comes from the table's module under ``diskusage.sql``; the
    record type converts between dataclass and row. The primary key is the
    first value of ``to_params()``.
    """

    def __init__(self, db: UsageDB, sql: ModuleType, from_row: Callable[[sqlite3.Row], RecordT]) -> None:
        self.db: UsageDB = db
        self.sql: ModuleType = sql
        self.from_row: Callable[[sqlite3.Row], RecordT] = from_row

    @property
    def name(self) -> str:
        return cast(str, self.sql.TABLE)

    def upsert(self, record: RecordT) -> None:
        _ = self.db.execute(sql=self.sql.UPSERT, params=record.to_params())

    def update(self, record: RecordT) -> int:
        params: tuple[object, ...] = record.to_params()
        return self.db.execute(sql=self.sql.UPDATE, params=params[1:] + params[:1])

    def delete(self, key: object) -> int:
        return self.db.execute(sql=self.sql.DELETE, params=(key,))

    def select(self, key: object) -> RecordT | None:
        row: sqlite3.Row | None = self.db.query_one(sql=self.sql.SELECT, params=(key,))
        if row is None:
            return None
        return self.from_row(row)

    def select_all(self) -> list[RecordT]:
        return [self.from_row(row) for row in self.db.query_all(sql=self.sql.SELECT_ALL)]

    def exists(self, key: object) -> bool:
        return self.select(key) is not None

    def count_all(self) -> int:
        row: sqlite3.Row | None = self.db.query_one(sql=self.sql.COUNT_ALL)

        assert row is not None

        return cast(int, row["total"])


class UsageStore:
    def __init__(self, usage_db: UsageDB) -> None:
        self.db: UsageDB = usage_db
        self.users: RecordTable[User] = RecordTable(usage_db, users, User.from_row)
        self.directories: RecordTable[Directory] = RecordTable(usage_db, directories, Directory.from_row)
        self.files: RecordTable[File] = RecordTable(usage_db, files, File.from_row)

    def upsert_user(self, user: User) -> None:
        self.users.upsert(user)

    def upsert_directory(self, directory: Directory) -> None:
        self.directories.upsert(directory)

    def upsert_file(self, file: File) -> None:
        self.files.upsert(file)

    def count_files(self) -> int:
        return self.files.count_all()

    def count_directories(self) -> int:
        return self.directories.count_all()

    def estimate_size(self, directory_id: str) -> int:
        row: sqlite3.Row | None = self.db.query_one(sql=files.ESTIMATE_SIZE, params=(directory_id,))

        assert row is not None

        return cast(int, row["total_size"])

    def largest_files(self, directory_id: str, limit: int) -> list[File]:
        rows: list[sqlite3.Row] = self.db.query_all(sql=files.TOP_N_LARGEST, params=(directory_id, limit))
        return [File.from_row(row) for row in rows]
