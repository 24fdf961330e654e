"""Parse ClassDojo story feed responses into model objects.

A feed response looks like:
    {
        "_items": [
            {"_id": "...", "time": "2024-03-01T14:05:00.000Z",
             "contents": {"attachments": [{"path": "https://..."}]}}
        ],
        "_links": {"prev": {"href": "https://home.classdojo.com/api/storyFeed?..."}}
    }

"prev" points at older entries.
"""

import logging
from datetime import datetime, timezone

from .models import Attachment, FeedItem, FeedPage

logger = logging.getLogger(__name__)


def parse_feed_page(data: dict) -> FeedPage:
    """Parse a decoded storyFeed response into a FeedPage."""
    items = []
    for raw in data.get("_items") or []:
        try:
            items.append(_parse_item(raw))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            item_id = raw.get("_id", "?") if isinstance(raw, dict) else "?"
            logger.warning("Skipping malformed feed item %s: %s", item_id, e)

    return FeedPage(items=items, prev_url=_prev_link(data))


def _parse_item(raw: dict) -> FeedItem:
    contents = raw.get("contents") or {}
    attachments = [
        Attachment(url=a["path"])
        for a in contents.get("attachments") or []
        if a.get("path")
    ]
    return FeedItem(
        item_id=str(raw.get("_id", "")),
        time=parse_time(raw["time"]),
        attachments=attachments,
    )


def parse_time(value) -> datetime:
    """Convert a feed timestamp to an aware UTC datetime.

    Accepts ISO-8601 strings (with or without offset) and epoch milliseconds.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _prev_link(data: dict) -> str | None:
    links = data.get("_links") or {}
    href = (links.get("prev") or {}).get("href")
    return href or None
