"""Walk each student's story feed and queue its attachments for download.

Feed pages are fetched one at a time on the calling thread; only the file
downloads run concurrently (see downloader.py).

Page budget: one counter is shared by the whole run. Every fetched feed page
uses one unit, and so does every completed pass over the student list. The
run keeps making passes, each one starting again from every student's newest
page, until the budget is used up. Older pages are followed only while
budget remains, and a student whose turn comes after the budget ran out
within a pass gets no page at all in that pass.
"""

import logging
from pathlib import Path

from .client import DojoClient, feed_url
from .config import AppConfig
from .downloader import DownloadScheduler, DownloadStats
from .errors import FeedFetchError
from .extractor import extract
from .models import FeedItem

logger = logging.getLogger(__name__)


class PageBudget:
    """Run-wide cap on feed work. Not thread-safe; pagination is sequential."""

    def __init__(self, limit: int):
        self.limit = limit
        self.used = 0

    @property
    def exhausted(self) -> bool:
        return self.used >= self.limit

    def consume(self) -> None:
        self.used += 1


class Archiver:
    def __init__(
        self,
        client: DojoClient,
        scheduler: DownloadScheduler,
        images_dir: Path,
        budget: PageBudget,
    ):
        self.client = client
        self.scheduler = scheduler
        self.images_dir = images_dir
        self.budget = budget

    def run(self, students: list[str]) -> None:
        """Make passes over all students until the page budget is spent."""
        while not self.budget.exhausted:
            for student_id in students:
                if self.budget.exhausted:
                    logger.info(
                        "Page budget spent, skipping student %s", student_id
                    )
                    continue
                logger.info(
                    "processing feed for student %s: %s...",
                    student_id,
                    feed_url(student_id),
                )
                self.process_feed(student_id)
            self.budget.consume()

    def process_feed(self, student_id: str) -> int:
        """Page through one student's feed, newest first.

        Returns the number of pages fetched. A fetch failure ends this
        student's pagination.
        """
        url: str | None = feed_url(student_id)
        pages = 0

        while url:
            try:
                page = self.client.fetch_feed_page(url)
            except FeedFetchError as e:
                logger.error("Couldn't process feed for student %s: %s", student_id, e)
                break

            self.budget.consume()
            pages += 1
            logger.info("found %d feed items...", len(page.items))

            for item in page.items:
                self.process_item(student_id, item)

            logger.info(
                "finished processing feed, pages used = %d / %d",
                self.budget.used,
                self.budget.limit,
            )

            if self.budget.exhausted or not page.prev_url:
                break
            logger.info("found previous link %s", page.prev_url)
            url = page.prev_url

        return pages

    def process_item(self, student_id: str, item: FeedItem) -> int:
        """Create the item's directory and schedule its attachments."""
        directory, downloads = extract(item, self.images_dir, student_id)
        if not downloads:
            return 0

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Couldn't create %s for item %s: %s", directory, item.item_id, e)
            return 0

        for url, file_path in downloads:
            self.scheduler.schedule(url, file_path)
        return len(downloads)


def archive(config: AppConfig) -> DownloadStats:
    """Log in and download every configured student's attachments.

    Raises ConfigError or AuthError if the login cannot be made; all other
    failures are logged and skipped.
    """
    with DojoClient() as client:
        client.login(config.credentials)

        with DownloadScheduler(client.download_file, config.concurrency) as scheduler:
            archiver = Archiver(
                client,
                scheduler,
                config.images_dir,
                PageBudget(config.max_pages),
            )
            archiver.run(config.students)
            stats = scheduler.drain()

    logger.info(
        "Done: %d scheduled, %d downloaded, %d already present, %d failed",
        stats.scheduled,
        stats.downloaded,
        stats.skipped,
        stats.failed,
    )
    return stats
