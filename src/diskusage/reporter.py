import logging
import sqlite3
import threading
from collections.abc import Callable

from .models import ProgressSample

logger: logging.Logger = logging.getLogger(__name__)


def safe_count(count: Callable[[], int], what: str) -> int:
    try:
        return count()
    except sqlite3.Error as e:
        logger.error("Failed to count %s: %s", what, e)
        return 0


class ProgressReporter:
    """
    Log how many files and directories have been stored, and how fast.

    Every ``interval`` seconds the totals are read back from storage and
    compared with the previous reading.
    """

    def __init__(self, count_files: Callable[[], int], count_directories: Callable[[], int], interval: int) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")

        self.count_files: Callable[[], int] = count_files
        self.count_directories: Callable[[], int] = count_directories
        self.interval: int = interval

        self.files_counter: int = 0
        self.directories_counter: int = 0

        self._stop: threading.Event = threading.Event()
        self._thread: threading.Thread | None = None

    def tick(self) -> ProgressSample:
        files_count: int = safe_count(self.count_files, "files")
        directories_count: int = safe_count(self.count_directories, "directories")

        sample: ProgressSample = ProgressSample(
            files=files_count,
            directories=directories_count,
            new_files=files_count - self.files_counter,
            new_directories=directories_count - self.directories_counter,
            files_per_second=(files_count - self.files_counter) / self.interval,
            directories_per_second=(directories_count - self.directories_counter) / self.interval,
        )

        self.files_counter = files_count
        self.directories_counter = directories_count

        logger.info(
            "Parsed %s files (%s new) and %s directories (%s new): %.2f files/s, %.2f directories/s",
            sample.files,
            sample.new_files,
            sample.directories,
            sample.new_directories,
            sample.files_per_second,
            sample.directories_per_second,
        )

        return sample

    def run_forever(self) -> None:
        logger.info("Logging thread: Active")
        logger.info("Logging frequency: %s seconds", self.interval)

        while True:
            _ = self.tick()
            if self._stop.wait(self.interval):
                break

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run_forever, name="progress-reporter", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
