"""
Crawl Errors
Per-page failure types raised by the fetch layer and absorbed by the crawler.
"""

from typing import Optional


class CrawlError(Exception):
    """Base class for a single page that could not be crawled."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}")


class FetchFailed(CrawlError):
    """
    The page could not be fetched.

    ``status`` holds the HTTP status code for non-success responses and is
    ``None`` for network-level failures (timeout, DNS, connection reset).
    """

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        self.status = status
        super().__init__(url, reason)


class ParseFailed(CrawlError):
    """The response body could not be turned into a document."""


class StorageError(Exception):
    """The site store on disk is unreadable."""
