"""Exception types raised by the downloader.

ConfigError and AuthError abort a run. FeedFetchError and DownloadError are
recovered where they happen: the failing feed or file is logged and skipped.
"""


class DownloaderError(Exception):
    """Base class for all downloader errors."""


class ConfigError(DownloaderError):
    """Required configuration is missing or malformed."""


class AuthError(DownloaderError):
    """The login request was rejected or could not be sent."""


class FeedFetchError(DownloaderError):
    """A story feed page could not be fetched or decoded."""


class DownloadError(DownloaderError):
    """A single attachment could not be fetched or written."""
