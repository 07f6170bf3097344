from collections.abc import Iterator
from pathlib import Path

import pytest

from diskusage.identity import IdentityResolver, UidCache
from diskusage.ingest import Ingestor, RetryPolicy
from diskusage.models import Directory, File
from diskusage.usage_db import UsageDB
from diskusage.UsageStore import UsageStore

FAST_RETRY: RetryPolicy = RetryPolicy(min_delay=1, max_delay=5, time_unit=0.001, max_attempts=0)


@pytest.fixture
def db(tmp_path: Path) -> Iterator[UsageDB]:
    with UsageDB(tmp_path / "usage.db", create_schema=True) as usage_db:
        yield usage_db


@pytest.fixture
def store(db: UsageDB) -> UsageStore:
    return UsageStore(db)


@pytest.fixture
def resolver(store: UsageStore) -> IdentityResolver:
    return IdentityResolver(store=store, cache=UidCache(), lookup=lambda uid: f"user{uid}")


@pytest.fixture
def ingestor(store: UsageStore, resolver: IdentityResolver) -> Ingestor:
    return Ingestor(store=store, resolver=resolver, retry=FAST_RETRY)


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """
    root/
        a.txt (10 bytes)
        sub/
            b.bin (200 bytes)
            deeper/
                c.log (3000 bytes)
        empty/
    """
    root: Path = tmp_path / "root"
    (root / "sub" / "deeper").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "a.txt").write_bytes(b"x" * 10)
    (root / "sub" / "b.bin").write_bytes(b"x" * 200)
    (root / "sub" / "deeper" / "c.log").write_bytes(b"x" * 3000)
    return root


def add_directory(store: UsageStore, directory_id: str, parent_id: str | None) -> None:
    store.upsert_directory(Directory(directory_id=directory_id, parent_id=parent_id))


def add_file(store: UsageStore, file_id: str, size: int) -> None:
    directory_id, _, name = file_id.rpartition("/")
    store.upsert_file(File(file_id=file_id, name=name, size=size, directory_id=directory_id))
