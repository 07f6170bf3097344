import logging
import os
import random
import sqlite3
import time
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum

from .fetch import fetch_metadata
from .identity import IdentityResolver
from .models import Directory, Entry, File, IngestStats, PathMetadata
from .UsageStore import UsageStore

logger: logging.Logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    STORED = "stored"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """
    Backoff for writes that reference a parent row not committed yet.

    Each retry sleeps a random whole number of ``time_unit`` seconds between
    ``min_delay`` and ``max_delay``. ``max_attempts`` of 0 retries forever.
    """

    min_delay: int = 1
    max_delay: int = 5
    time_unit: float = 1.0
    max_attempts: int = 120

    def backoff(self) -> float:
        return random.randint(self.min_delay, self.max_delay) * self.time_unit

    def exhausted(self, attempts: int) -> bool:
        return self.max_attempts > 0 and attempts >= self.max_attempts


class Ingestor:
    def __init__(
        self,
        store: UsageStore,
        resolver: IdentityResolver,
        retry: RetryPolicy | None = None,
        fetch: Callable[[str], PathMetadata | None] = fetch_metadata,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.store: UsageStore = store
        self.resolver: IdentityResolver = resolver
        self.retry: RetryPolicy = retry if retry is not None else RetryPolicy()
        self.fetch: Callable[[str], PathMetadata | None] = fetch
        self.sleep: Callable[[float], None] = sleep

    def _upsert_with_retry(self, write: Callable[[], None], kind: str, path: str) -> Outcome:
        attempts: int = 0

        while True:
            attempts += 1
            try:
                write()
                return Outcome.STORED
            except sqlite3.IntegrityError as e:
                # Parent row not written yet by another worker
                if self.retry.exhausted(attempts):
                    logger.error("Giving up on %s %s after %s attempts: %s", kind, path, attempts, e)
                    return Outcome.FAILED

                delay: float = self.retry.backoff()
                logger.debug("Retrying %s %s in %.1fs: %s", kind, path, delay, e)
                self.sleep(delay)
            except sqlite3.Error as e:
                logger.error("Error inserting %s %s: %s", kind, path, e)
                return Outcome.FAILED

    def ingest_directory(self, entry: Entry) -> Outcome:
        meta: PathMetadata | None = self.fetch(entry.path)
        if meta is None:
            return Outcome.SKIPPED

        directory: Directory = Directory(
            directory_id=entry.path,
            owner_id=self.resolver.resolve(meta.owner_uid),
            parent_id=entry.parent,
        )

        return self._upsert_with_retry(lambda: self.store.upsert_directory(directory), "directory", entry.path)

    def ingest_file(self, entry: Entry) -> Outcome:
        meta: PathMetadata | None = self.fetch(entry.path)
        if meta is None:
            return Outcome.SKIPPED

        parent: str = entry.parent if entry.parent is not None else os.path.dirname(entry.path)

        file: File = File(
            file_id=entry.path,
            name=os.path.basename(entry.path),
            size=meta.size,
            owner_id=self.resolver.resolve(meta.owner_uid),
            directory_id=parent,
            last_modified=meta.last_modified,
        )

        return self._upsert_with_retry(lambda: self.store.upsert_file(file), "file", entry.path)

    def ingest_entry(self, entry: Entry) -> IngestStats:
        stats: IngestStats = IngestStats()

        outcome: Outcome = self.ingest_directory(entry) if entry.is_dir else self.ingest_file(entry)

        if outcome is Outcome.STORED:
            if entry.is_dir:
                stats.directories += 1
            else:
                stats.files += 1
        elif outcome is Outcome.SKIPPED:
            stats.skipped += 1
        else:
            stats.failed += 1

        return stats

    def run(self, entries: Iterable[Entry], max_workers: int, max_in_flight: int) -> IngestStats:
        """
        Ingest every entry on a thread pool.

        At most ``max_in_flight`` entries are queued at once; the producer
        blocks until a worker finishes.
        """
        if max_in_flight <= 0:
            raise ValueError("max_in_flight must be > 0")
        if max_workers <= 0:
            raise ValueError("max_workers must be > 0")

        totals: IngestStats = IngestStats()

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ingest") as executor:
            in_flight: set[Future[IngestStats]] = set()

            for entry in entries:
                # Apply backpressure
                while len(in_flight) >= max_in_flight:
                    done: Future[IngestStats] = next(as_completed(in_flight))
                    in_flight.remove(done)
                    totals.merge(done.result())

                in_flight.add(executor.submit(self.ingest_entry, entry))

            # Drain remaining futures
            for future in as_completed(in_flight):
                totals.merge(future.result())

        return totals
