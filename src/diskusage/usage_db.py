import logging
import sqlite3
import threading
from collections.abc import Sequence
from pathlib import Path
from types import TracebackType
from typing import cast

from .sql import directories, files, users

logger: logging.Logger = logging.getLogger(__name__)

# Creation order; dropped in reverse.
SCHEMA_MODULES = (users, directories, files)


class UsageDB:
    def __init__(self, path: Path | str, *, create_schema: bool = False) -> None:
        self.connection: sqlite3.Connection = sqlite3.connect(
            path, isolation_level=None, check_same_thread=False, timeout=30.0
        )
        self.connection.row_factory = sqlite3.Row
        self._lock: threading.RLock = threading.RLock()

        self._configure()
        if create_schema:
            self.create_schema()

    def __enter__(self) -> "UsageDB":
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        self.close()

    def _configure(self) -> None:
        cursor: sqlite3.Cursor = self.connection.cursor()

        statements: list[str] = [
            "PRAGMA journal_mode = WAL;",
            "PRAGMA synchronous = NORMAL;",
            "PRAGMA foreign_keys = ON;",
        ]

        for statement in statements:
            _ = cursor.execute(statement)

        cursor.close()

    @staticmethod
    def schema_statements() -> list[str]:
        statements: list[str] = []
        for module in SCHEMA_MODULES:
            statements.append(module.CREATE_TABLE)
            statements.extend(module.CREATE_INDEXES)
        return statements

    @staticmethod
    def drop_statements() -> list[str]:
        return [module.DROP_TABLE for module in reversed(SCHEMA_MODULES)]

    def create_schema(self) -> None:
        self.run_transaction(self.schema_statements())

    def reset_schema(self, *, debug: bool = False) -> None:
        """
        Drop every table and create it again.

        The drop and the create run inside a single transaction. With
        ``debug`` set the statements are only logged, nothing is executed.
        """
        self.run_transaction(self.drop_statements() + self.schema_statements(), debug=debug)

    def run_transaction(self, statements: Sequence[str], *, debug: bool = False) -> None:
        if debug:
            for sql in statements:
                logger.info("%s", sql.strip())
            return

        with self._lock:
            self.begin()
            try:
                for sql in statements:
                    self.execute(sql)
            except sqlite3.Error:
                self.rollback()
                raise
            self.commit()

    def cursor(self) -> sqlite3.Cursor:
        return self.connection.cursor()

    def begin(self) -> None:
        _ = self.connection.execute("BEGIN;")

    def commit(self) -> None:
        _ = self.connection.execute("COMMIT;")

    def rollback(self) -> None:
        _ = self.connection.execute("ROLLBACK;")

    def execute(self, sql: str, params: Sequence[object] | None = None) -> int:
        """Run one statement and return the number of affected rows."""
        with self._lock:
            cursor: sqlite3.Cursor = self.connection.cursor()
            try:
                if params is not None:
                    _ = cursor.execute(sql, params)
                else:
                    _ = cursor.execute(sql)
                return cursor.rowcount
            finally:
                cursor.close()

    def close(self) -> None:
        self.connection.close()

    def query_one(self, sql: str, params: Sequence[object] | None = None) -> sqlite3.Row | None:
        with self._lock:
            cursor: sqlite3.Cursor = self.connection.cursor()

            if params is None:
                _ = cursor.execute(sql)
            else:
                _ = cursor.execute(sql, params)
            row: sqlite3.Row | None = cast(sqlite3.Row | None, cursor.fetchone())

            cursor.close()

        return row

    def query_all(self, sql: str, params: Sequence[object] | None = None) -> list[sqlite3.Row]:
        with self._lock:
            cursor: sqlite3.Cursor = self.connection.cursor()

            if params is None:
                _ = cursor.execute(sql)
            else:
                _ = cursor.execute(sql, params)
            rows: list[sqlite3.Row] = cast(list[sqlite3.Row], cursor.fetchall())

            cursor.close()

        return rows
