"""Tests for the ClassDojo API client."""

import json

import httpx
import pytest
import respx

from classdojo_downloader.client import LOGIN_URL, DojoClient, feed_url
from classdojo_downloader.config import Credentials
from classdojo_downloader.errors import (
    AuthError,
    ConfigError,
    DownloadError,
    FeedFetchError,
)

FEED_URL = "https://home.classdojo.com/api/storyFeed"
MEDIA_HOST = "https://svc.classdojo.com/dojophotos/2024-03"

CREDENTIALS = Credentials(email="parent@example.com", password="hunter2")


class TestLogin:
    @respx.mock
    def test_posts_credentials(self):
        route = respx.post(LOGIN_URL).mock(return_value=httpx.Response(200, json={}))

        with DojoClient() as client:
            client.login(CREDENTIALS)

        assert route.call_count == 1
        assert json.loads(route.calls.last.request.content) == {
            "login": "parent@example.com",
            "password": "hunter2",
            "resumeAddClassFlow": False,
        }

    @respx.mock
    def test_session_cookie_sent_on_later_requests(self, make_feed):
        respx.post(LOGIN_URL).mock(
            return_value=httpx.Response(
                200, json={}, headers={"set-cookie": "dojo_log_session_id=abc; Path=/"}
            )
        )
        feed = respx.get(FEED_URL).mock(
            return_value=httpx.Response(200, json=make_feed([]))
        )

        with DojoClient() as client:
            client.login(CREDENTIALS)
            client.fetch_feed_page(feed_url("42"))

        assert "dojo_log_session_id=abc" in feed.calls.last.request.headers["cookie"]

    @pytest.mark.parametrize(
        "credentials, missing",
        [
            (Credentials("parent@example.com", ""), "DOJO_PASSWORD"),
            (Credentials("", "hunter2"), "DOJO_EMAIL"),
        ],
    )
    def test_missing_credentials_fail_before_request(self, credentials, missing):
        with respx.mock(assert_all_called=False) as router:
            route = router.post(LOGIN_URL).mock(
                return_value=httpx.Response(200, json={})
            )

            with DojoClient() as client:
                with pytest.raises(ConfigError, match=missing):
                    client.login(credentials)

        assert route.call_count == 0
        assert len(router.calls) == 0

    @respx.mock
    def test_rejected_login(self):
        respx.post(LOGIN_URL).mock(return_value=httpx.Response(401, json={}))

        with DojoClient() as client:
            with pytest.raises(AuthError, match="Double check"):
                client.login(CREDENTIALS)

    @respx.mock
    def test_server_error(self):
        respx.post(LOGIN_URL).mock(return_value=httpx.Response(503))

        with DojoClient() as client:
            with pytest.raises(AuthError, match="503"):
                client.login(CREDENTIALS)

    @respx.mock
    def test_network_error(self):
        respx.post(LOGIN_URL).mock(side_effect=httpx.ConnectError("offline"))

        with DojoClient() as client:
            with pytest.raises(AuthError, match="offline"):
                client.login(CREDENTIALS)


class TestFetchFeedPage:
    def test_feed_url(self):
        assert feed_url("42") == (
            "https://home.classdojo.com/api/storyFeed?includePrivate=true&studentId=42"
        )

    @respx.mock
    def test_query_parameters(self, feed_response):
        route = respx.get(FEED_URL, params={"studentId": "42"}).mock(
            return_value=httpx.Response(200, json=feed_response)
        )

        with DojoClient() as client:
            page = client.fetch_feed_page(feed_url("42"))

        assert len(page.items) == 2
        assert route.calls.last.request.url.params["includePrivate"] == "true"

    @respx.mock
    def test_prev_link_followed_verbatim(self, make_feed):
        older = "https://home.classdojo.com/api/storyFeed?before=xyz&studentId=42"
        route = respx.get(FEED_URL, params={"before": "xyz"}).mock(
            return_value=httpx.Response(200, json=make_feed([]))
        )

        with DojoClient() as client:
            client.fetch_feed_page(older)

        assert str(route.calls.last.request.url) == older

    @respx.mock
    def test_http_error(self):
        respx.get(FEED_URL).mock(return_value=httpx.Response(500))

        with DojoClient() as client:
            with pytest.raises(FeedFetchError, match="Couldn't get feed"):
                client.fetch_feed_page(feed_url("42"))

    @respx.mock
    def test_invalid_json(self):
        respx.get(FEED_URL).mock(return_value=httpx.Response(200, text="<html>"))

        with DojoClient() as client:
            with pytest.raises(FeedFetchError, match="did not return JSON"):
                client.fetch_feed_page(feed_url("42"))

    @respx.mock
    def test_non_object_payload(self):
        respx.get(FEED_URL).mock(return_value=httpx.Response(200, json=[1, 2]))

        with DojoClient() as client:
            with pytest.raises(FeedFetchError, match="Unexpected feed payload"):
                client.fetch_feed_page(feed_url("42"))


class TestDownloadFile:
    @respx.mock
    def test_streams_to_disk(self, tmp_path):
        url = f"{MEDIA_HOST}/a1b2c3.jpg"
        respx.get(url).mock(return_value=httpx.Response(200, content=b"\xff\xd8jpeg"))
        target = tmp_path / "a1b2c3.jpg"

        with DojoClient() as client:
            client.download_file(url, target)

        assert target.read_bytes() == b"\xff\xd8jpeg"

    @respx.mock
    def test_http_error_leaves_no_file(self, tmp_path):
        url = f"{MEDIA_HOST}/gone.jpg"
        respx.get(url).mock(return_value=httpx.Response(404))
        target = tmp_path / "gone.jpg"

        with DojoClient() as client:
            with pytest.raises(DownloadError, match="gone.jpg"):
                client.download_file(url, target)

        assert not target.exists()

    @respx.mock
    def test_network_error_leaves_no_file(self, tmp_path):
        url = f"{MEDIA_HOST}/flaky.jpg"
        respx.get(url).mock(side_effect=httpx.ReadTimeout("stalled"))
        target = tmp_path / "flaky.jpg"

        with DojoClient() as client:
            with pytest.raises(DownloadError):
                client.download_file(url, target)

        assert not target.exists()

    @respx.mock
    def test_missing_directory(self, tmp_path):
        url = f"{MEDIA_HOST}/a.jpg"
        respx.get(url).mock(return_value=httpx.Response(200, content=b"x"))

        with DojoClient() as client:
            with pytest.raises(DownloadError):
                client.download_file(url, tmp_path / "nope" / "a.jpg")
