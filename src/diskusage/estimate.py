import logging
from datetime import datetime

from rich.console import Console
from rich.table import Table

from .models import File
from .UsageStore import UsageStore

logger: logging.Logger = logging.getLogger(__name__)

UNITS: tuple[str, ...] = ("bytes", "KB", "MB", "GB", "TB")


def estimate(store: UsageStore, directory_id: str) -> int:
    """Total size in bytes of every file in `directory_id` and below."""
    return store.estimate_size(directory_id)


def top_n_largest_files(store: UsageStore, directory_id: str, n: int) -> list[File]:
    """The `n` largest files in `directory_id` and below, largest first."""
    if n < 0:
        raise ValueError("n must be >= 0")
    return store.largest_files(directory_id, n)


def size_breakdown(total_bytes: int) -> list[tuple[str, float]]:
    breakdown: list[tuple[str, float]] = []
    size: float = float(total_bytes)
    for unit in UNITS:
        breakdown.append((unit, size))
        size /= 1024
    return breakdown


def _format_time(ts: datetime | None) -> str:
    if ts is None:
        return "unknown"
    return ts.isoformat(timespec="seconds")


def largest_files_table(largest: list[File]) -> Table:
    table: Table = Table(title=f"Top {len(largest)} largest files")
    table.add_column("Size (bytes)", justify="right")
    table.add_column("Owner", justify="right")
    table.add_column("Last modified")
    table.add_column("Path")

    for file in largest:
        owner: str = str(file.owner_id) if file.owner_id is not None else "unknown"
        table.add_row(f"{file.size:,}", owner, _format_time(file.last_modified), file.file_id)

    return table


def print_estimate(store: UsageStore, directory_id: str, top: int, console: Console | None = None) -> int:
    out: Console = console if console is not None else Console()

    if not store.directories.exists(directory_id):
        logger.warning("No directory %s has been recorded", directory_id)

    total: int = estimate(store, directory_id)

    out.print(f"Estimated size of {directory_id}:")
    for unit, value in size_breakdown(total):
        if unit == "bytes":
            out.print(f"  {total:,} {unit}")
        else:
            out.print(f"  {value:,.2f} {unit}")

    out.print(largest_files_table(top_n_largest_files(store, directory_id, top)))

    return total
