"""Shared fixtures: an in-memory fetcher and small HTML builders."""

from __future__ import annotations

import pytest

from sitecorpus.dom import load_document
from sitecorpus.errors import FetchFailed
from sitecorpus.run_config import CrawlerRunConfig
from sitecorpus.utils import extract_hostname

SEED_URL = "https://example.com/docs"

LONG_TEXT = (
    "This paragraph carries enough words to clear the thin page threshold "
    "on its own, so any page containing it is kept."
)


def page(title: str = "", body: str = "") -> str:
    """Minimal HTML page."""
    return (
        "<html><head>"
        f"<title>{title}</title>"
        "</head><body>"
        f"{body}"
        "</body></html>"
    )


def content_page(title: str, links=(), text: str = LONG_TEXT) -> str:
    """A page that will be accepted, linking to ``links`` from its body."""
    anchors = "".join(f'<a href="{href}">{href}</a>' for href in links)
    return page(title, f"<main><p>{text}</p>{anchors}</main>")


class FakeFetcher:
    """
    Serves pages from a dict.

    Values may be HTML strings, an int HTTP status (raised as FetchFailed)
    or an exception instance to raise. Unknown URLs are 404s. ``redirects``
    maps a requested URL to the URL it lands on; landing on another host
    fails the way PageFetcher does.
    """

    def __init__(self, pages: dict, redirects: dict = None):
        self.pages = pages
        self.redirects = redirects or {}
        self.fetched = []

    async def fetch(self, url: str, allow_offsite: bool = False):
        self.fetched.append(url)
        final_url = self.redirects.get(url, url)
        if not allow_offsite and extract_hostname(final_url) != extract_hostname(url):
            raise FetchFailed(url, f"Redirected off-site to {final_url}")
        entry = self.pages.get(final_url, 404)
        if isinstance(entry, int):
            raise FetchFailed(url, f"HTTP {entry}", status=entry)
        if isinstance(entry, Exception):
            raise entry
        return load_document(entry, final_url)


@pytest.fixture
def fast_config() -> CrawlerRunConfig:
    """Config without pacing so tests run instantly."""
    return CrawlerRunConfig(page_delay=0)
