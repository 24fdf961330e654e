"""Data models for parsed story feed data."""

from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import urlparse


@dataclass
class Attachment:
    url: str  # absolute URL of the media file

    @property
    def filename(self) -> str:
        """Final path segment of the URL, used verbatim as the local name."""
        path = urlparse(self.url).path
        return path[path.rfind("/") + 1:]


@dataclass
class FeedItem:
    item_id: str
    time: datetime  # always timezone-aware, UTC
    attachments: list[Attachment] = field(default_factory=list)

    @property
    def date(self) -> str:
        """Calendar day of the item in UTC, as YYYY-MM-DD."""
        return self.time.date().isoformat()


@dataclass
class FeedPage:
    items: list[FeedItem] = field(default_factory=list)
    prev_url: str | None = None  # link to the next older page
