"""ClassDojo web API client.

Authentication posts the account credentials once to the session endpoint.
The server answers with session cookies, which the underlying httpx client
keeps in its cookie jar and sends with every later request (feed pages and
attachment downloads alike). Sessions are never refreshed; an expired
session surfaces as an ordinary fetch failure.
"""

import logging
from pathlib import Path

import httpx

from .config import Credentials
from .errors import AuthError, ConfigError, DownloadError, FeedFetchError
from .models import FeedPage
from .parser import parse_feed_page

logger = logging.getLogger(__name__)

LOGIN_URL = "https://home.classdojo.com/api/session"
FEED_BASE_URL = "https://home.classdojo.com/api/storyFeed?includePrivate=true"

CHUNK_SIZE = 64 * 1024


def feed_url(student_id: str) -> str:
    """URL of the newest story feed page for a student."""
    return f"{FEED_BASE_URL}&studentId={student_id}"


class DojoClient:
    """Client for the ClassDojo parent API using cookie sessions."""

    def __init__(self):
        self._client = httpx.Client(
            headers={
                "Accept": "application/json, text/plain, */*",
                "User-Agent": (
                    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
                    "AppleWebKit/537.36 (KHTML, like Gecko) "
                    "Chrome/131.0.0.0 Safari/537.36"
                ),
            },
            timeout=None,
            follow_redirects=True,
        )

    def login(self, credentials: Credentials) -> None:
        """Open a session. Raises ConfigError before any request if a
        credential is missing, AuthError if the server rejects the login."""
        missing = [
            name
            for name, value in (
                ("DOJO_EMAIL", credentials.email),
                ("DOJO_PASSWORD", credentials.password),
            )
            if not value
        ]
        if missing:
            raise ConfigError(
                f"{', '.join(missing)} not set. Export it in the environment "
                "or run `classdojo-downloader setup`."
            )

        try:
            response = self._client.post(
                LOGIN_URL,
                json={
                    "login": credentials.email,
                    "password": credentials.password,
                    "resumeAddClassFlow": False,
                },
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Login request failed: {e}") from e

        if response.status_code in (400, 401, 403):
            raise AuthError(
                "Login rejected by ClassDojo. Double check your email and password."
            )
        if response.is_error:
            raise AuthError(f"Login failed with HTTP {response.status_code}")

        logger.info("Logged in as %s", credentials.email)

    def fetch_feed_page(self, url: str) -> FeedPage:
        """Fetch and parse a single story feed page."""
        try:
            response = self._client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise FeedFetchError(f"Couldn't get feed {url}: {e}") from e
        except ValueError as e:
            raise FeedFetchError(f"Feed {url} did not return JSON: {e}") from e

        if not isinstance(data, dict):
            raise FeedFetchError(f"Unexpected feed payload from {url}")
        return parse_feed_page(data)

    def download_file(self, url: str, file_path: Path) -> None:
        """Stream a remote file to disk.

        The file is only opened once the server answered successfully, and is
        removed again if the transfer breaks off.
        """
        logger.info("about to download %s...", file_path)
        opened = False
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                with open(file_path, "wb") as f:
                    opened = True
                    for chunk in response.iter_bytes(CHUNK_SIZE):
                        f.write(chunk)
        except (httpx.HTTPError, OSError) as e:
            if opened:
                file_path.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download {url}: {e}") from e
        logger.info("finished downloading %s", file_path)

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
