"""Bounded-concurrency attachment downloads.

`schedule` blocks the caller until one of the N slots is free, then hands
the file to a worker thread and returns without waiting for it. A path that
is already queued or downloading is not scheduled a second time. Each worker
skips files already on disk, otherwise streams the file down. Failures are
logged and counted per file; they never reach the caller.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_CONCURRENCY
from .errors import DownloadError
from .ledger import is_downloaded

logger = logging.getLogger(__name__)


@dataclass
class DownloadStats:
    scheduled: int = 0
    downloaded: int = 0
    skipped: int = 0
    failed: int = 0
    peak_in_flight: int = 0


class DownloadScheduler:
    """Run downloads on a thread pool with at most `concurrency` in flight."""

    def __init__(
        self,
        download: Callable[[str, Path], None],
        concurrency: int = DEFAULT_CONCURRENCY,
    ):
        self._download = download
        self.concurrency = concurrency
        self._slots = threading.BoundedSemaphore(concurrency)
        self._pool = ThreadPoolExecutor(
            max_workers=concurrency, thread_name_prefix="download"
        )
        self._futures: list[Future] = []
        self._lock = threading.Lock()
        self._in_flight = 0
        self._pending: set[Path] = set()
        self.stats = DownloadStats()

    def schedule(self, url: str, file_path: Path) -> Future | None:
        """Wait for a free slot, then start downloading in the background.

        Returns None without waiting if `file_path` is still pending from an
        earlier call.
        """
        with self._lock:
            if file_path in self._pending:
                logger.debug("file %s already queued, skipping", file_path)
                self.stats.skipped += 1
                return None
            self._pending.add(file_path)

        self._slots.acquire()
        try:
            future = self._pool.submit(self._run, url, file_path)
        except RuntimeError:
            self._slots.release()
            with self._lock:
                self._pending.discard(file_path)
            raise
        with self._lock:
            self.stats.scheduled += 1
        self._futures.append(future)
        return future

    def _run(self, url: str, file_path: Path) -> bool:
        with self._lock:
            self._in_flight += 1
            self.stats.peak_in_flight = max(
                self.stats.peak_in_flight, self._in_flight
            )
        try:
            return self._download_if_missing(url, file_path)
        finally:
            with self._lock:
                self._in_flight -= 1
                self._pending.discard(file_path)
            self._slots.release()

    def _download_if_missing(self, url: str, file_path: Path) -> bool:
        if is_downloaded(file_path):
            logger.debug("file %s exists, skipping", file_path)
            self._count("skipped")
            return True

        try:
            self._download(url, file_path)
        except DownloadError as e:
            logger.error("%s", e)
            self._count("failed")
            return False

        self._count("downloaded")
        return True

    def _count(self, name: str) -> None:
        with self._lock:
            setattr(self.stats, name, getattr(self.stats, name) + 1)

    def drain(self) -> DownloadStats:
        """Block until every scheduled download has settled."""
        pending, self._futures = self._futures, []
        wait(pending)
        for future in pending:
            error = future.exception()
            if error is not None:
                logger.error("Download task crashed: %r", error)
                self._count("failed")
        return self.stats

    def close(self) -> None:
        self.drain()
        self._pool.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
