"""Configure logging for the application.

Console output goes to stderr. Runs can also be written in full to a log
file; the file always gets DEBUG records so a long download can be audited
afterwards without re-running it verbosely.
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"


def setup_logging(debug: bool = False, log_file: Path | None = None) -> None:
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if debug else logging.INFO)
    console.setFormatter(formatter)

    package_logger = logging.getLogger("classdojo_downloader")
    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
        old.close()
    package_logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    package_logger.setLevel(
        logging.DEBUG if debug or log_file is not None else logging.INFO
    )

    # httpx logs every request at INFO
    httpx_level = logging.DEBUG if debug else logging.WARNING
    logging.getLogger("httpx").setLevel(httpx_level)
    logging.getLogger("httpcore").setLevel(httpx_level)
