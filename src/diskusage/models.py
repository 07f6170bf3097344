import sqlite3
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar, Protocol, TypeVar, cast


class Record(Protocol):
    """A row of one of the storage tables, primary key first."""

    def to_params(self) -> tuple[object, ...]: ...

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Record": ...


RecordT = TypeVar("RecordT", bound=Record)


@dataclass(frozen=True, slots=True)
class User:
    user_id: int
    username: str | None = None

    def to_params(self) -> tuple[object, ...]:
        return (self.user_id, self.username)

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "User":
        return cls(user_id=cast(int, row["user_id"]), username=cast(str | None, row["username"]))


@dataclass(frozen=True, slots=True)
class Directory:
    directory_id: str
    owner_id: int | None = None
    parent_id: str | None = None

    def to_params(self) -> tuple[object, ...]:
        return (self.directory_id, self.owner_id, self.parent_id)

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Directory":
        return cls(
            directory_id=cast(str, row["directory_id"]),
            owner_id=cast(int | None, row["owner_id"]),
            parent_id=cast(str | None, row["parent_id"]),
        )


@dataclass(frozen=True, slots=True)
class File:
    file_id: str
    name: str
    size: int
    directory_id: str
    owner_id: int | None = None
    last_modified: datetime | None = None

    def to_params(self) -> tuple[object, ...]:
        modified: str | None = self.last_modified.isoformat() if self.last_modified is not None else None
        return (self.file_id, self.name, self.size, self.owner_id, self.directory_id, modified)

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "File":
        raw_modified: str | None = cast(str | None, row["last_modified"])
        return cls(
            file_id=cast(str, row["file_id"]),
            name=cast(str, row["name"]),
            size=cast(int, row["size"]),
            owner_id=cast(int | None, row["owner_id"]),
            directory_id=cast(str, row["directory_id"]),
            last_modified=datetime.fromisoformat(raw_modified) if raw_modified is not None else None,
        )


@dataclass(frozen=True, slots=True)
class PathMetadata:
    size: int
    owner_uid: int | None
    last_modified: datetime | None


class EntryKind(str, Enum):
    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True, slots=True)
class Entry:
    path: str
    kind: EntryKind
    parent: str | None

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(slots=True)
class IngestStats:
    directories: int = 0
    files: int = 0
    skipped: int = 0
    failed: int = 0

    TOTAL_FIELDS: ClassVar[tuple[str, ...]] = ("directories", "files", "skipped", "failed")

    def merge(self, other: "IngestStats") -> None:
        for name in self.TOTAL_FIELDS:
            setattr(self, name, getattr(self, name) + getattr(other, name))


@dataclass(frozen=True, slots=True)
class ProgressSample:
    files: int
    directories: int
    new_files: int
    new_directories: int
    files_per_second: float
    directories_per_second: float
