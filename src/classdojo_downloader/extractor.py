"""Map feed items to local download destinations."""

import logging
from pathlib import Path

from .models import FeedItem

logger = logging.getLogger(__name__)


def destination_dir(base_dir: Path, student_id: str, item: FeedItem) -> Path:
    return base_dir / student_id / item.date


def extract(
    item: FeedItem, base_dir: Path, student_id: str
) -> tuple[Path, list[tuple[str, Path]]]:
    """Return the item's directory and its (remote_url, local_path) pairs.

    Nothing is created on disk. An item without attachments yields an empty
    list. Attachments whose URL path ends in "/" have no file name and are
    left out.
    """
    directory = destination_dir(base_dir, student_id, item)
    downloads = []
    for attachment in item.attachments:
        if not attachment.filename:
            logger.warning(
                "Skipping attachment without a file name in item %s: %s",
                item.item_id,
                attachment.url,
            )
            continue
        downloads.append((attachment.url, directory / attachment.filename))
    return directory, downloads
