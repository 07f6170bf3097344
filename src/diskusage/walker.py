import logging
import os
from collections.abc import Iterator
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from .models import Entry, EntryKind

logger: logging.Logger = logging.getLogger(__name__)


def discover_dir_entries(path: str) -> list[Entry]:
    """
    Return the immediate subdirectories and regular files of `path`.

    Symlinks and special files are ignored. A directory that cannot be
    read is logged and yields nothing.
    """
    entries: list[Entry] = []

    try:
        with os.scandir(path) as it:
            for entry in it:
                try:
                    if entry.is_symlink():
                        continue

                    if entry.is_dir(follow_symlinks=False):
                        entries.append(Entry(path=entry.path, kind=EntryKind.DIRECTORY, parent=path))
                    elif entry.is_file(follow_symlinks=False):
                        entries.append(Entry(path=entry.path, kind=EntryKind.FILE, parent=path))
                except OSError as e:
                    logger.warning("Skipping %s: %s", entry.path, e)
    except FileNotFoundError:
        # Directory disappeared between discovery and scanning
        logger.warning("Skipping %s: no longer exists", path)
    except OSError as e:
        logger.warning("Skipping %s: %s", path, e)

    return entries


def walk_tree(root: Path, max_workers: int) -> Iterator[Entry]:
    """
    Yield every directory and regular file under `root`.

    The root comes first, with no parent. Subdirectories are scanned in
    parallel, so the order of the remaining entries is not fixed beyond a
    directory entry being yielded before anything found inside it.
    """
    if max_workers <= 0:
        raise ValueError("max_workers must be > 0")

    resolved_root: Path = root.resolve()

    if not resolved_root.exists():
        raise ValueError(f"{resolved_root} does not exist")
    if not resolved_root.is_dir():
        raise ValueError(f"{resolved_root} is not a directory")

    yield Entry(path=str(resolved_root), kind=EntryKind.DIRECTORY, parent=None)

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="walker") as executor:
        pending: set[Future[list[Entry]]] = {executor.submit(discover_dir_entries, str(resolved_root))}

        while pending:
            done: Future[list[Entry]] = next(as_completed(pending))
            pending.remove(done)

            for entry in done.result():
                if entry.is_dir:
                    pending.add(executor.submit(discover_dir_entries, entry.path))
                yield entry
