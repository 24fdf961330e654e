"""Shared test fixtures."""

from datetime import datetime, timezone

import pytest

from classdojo_downloader.models import Attachment, FeedItem

MEDIA_HOST = "https://svc.classdojo.com/dojophotos/2024-03"


def _item(item_id: str, time: str, *paths: str) -> dict:
    item = {"_id": item_id, "time": time, "contents": {"body": "hello"}}
    if paths:
        item["contents"]["attachments"] = [{"path": p} for p in paths]
    return item


def _feed(items: list[dict], prev: str | None = None) -> dict:
    feed = {"_items": items, "_links": {}}
    if prev:
        feed["_links"]["prev"] = {"href": prev}
    return feed


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's real settings out of the tests."""
    for name in (
        "DOJO_EMAIL",
        "DOJO_PASSWORD",
        "STUDENTS",
        "DOJO_IMAGES_DIR",
        "DOJO_MAX_PAGES",
        "DOJO_CONCURRENCY",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_item():
    """Build a raw storyFeed item: make_item(id, time, *attachment_urls)."""
    return _item


@pytest.fixture
def make_feed():
    """Build a raw storyFeed page: make_feed(items, prev=None)."""
    return _feed


@pytest.fixture
def images_dir(tmp_path):
    return tmp_path / "images"


@pytest.fixture
def feed_response() -> dict:
    """One page, two items: a text post and a post with two photos."""
    return _feed(
        [
            _item("story-1", "2024-03-02T09:15:00.000Z"),
            _item(
                "story-2",
                "2024-03-01T14:05:00.000Z",
                f"{MEDIA_HOST}/a1b2c3.jpg",
                f"{MEDIA_HOST}/d4e5f6.mp4",
            ),
        ]
    )


@pytest.fixture
def photo_item() -> FeedItem:
    return FeedItem(
        item_id="story-2",
        time=datetime(2024, 3, 1, 14, 5, tzinfo=timezone.utc),
        attachments=[
            Attachment(url=f"{MEDIA_HOST}/a1b2c3.jpg"),
            Attachment(url=f"{MEDIA_HOST}/d4e5f6.mp4"),
        ],
    )
