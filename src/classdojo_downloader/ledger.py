"""The images directory doubles as the record of what has been downloaded.

Layout: <images_dir>/<student_id>/<YYYY-MM-DD>/<filename>. A file that is
present and readable/writable counts as downloaded; its contents are not
checked.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def is_downloaded(file_path: Path) -> bool:
    return os.access(file_path, os.R_OK | os.W_OK)


def summarize(images_dir: Path) -> dict[str, int]:
    """Count downloaded files per student directory."""
    counts: dict[str, int] = {}
    if not images_dir.is_dir():
        return counts

    for student_dir in sorted(images_dir.iterdir()):
        if not student_dir.is_dir():
            continue
        counts[student_dir.name] = sum(
            1 for p in student_dir.glob("*/*") if p.is_file()
        )
    logger.debug("Found downloads for %d students in %s", len(counts), images_dir)
    return counts
