"""
Utility Functions
URL canonicalisation, text cleaning and crawl statistics.
"""

import logging
import re
import time
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

_WS_RE = re.compile(r'\s+')

_DEFAULT_PORTS = {'http': 80, 'https': 443}


def canonical_url(url: str) -> Optional[str]:
    """
    Reduce a URL to ``scheme://host[:port]/path``.

    Query string and fragment are dropped, scheme and host are lower-cased
    and default ports are removed.

    Args:
        url: Absolute URL

    Returns:
        Canonical URL string, or None if the URL is not http(s)
    """
    if not url:
        return None

    try:
        parsed = urlparse(url.strip())
        port = parsed.port
    except ValueError:
        return None

    scheme = parsed.scheme.lower()
    if scheme not in _DEFAULT_PORTS or not parsed.hostname:
        return None

    host = parsed.hostname.lower()
    if ':' in host:
        host = f'[{host}]'
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        host = f'{host}:{port}'

    path = parsed.path or '/'
    return f'{scheme}://{host}{path}'


def extract_hostname(url: str) -> str:
    """Extract the lower-cased hostname (no port) from a URL."""
    try:
        return (urlparse(url).hostname or '').lower()
    except ValueError:
        return ''


def is_valid_url(url: str) -> bool:
    """Check if URL is an absolute http(s) URL."""
    try:
        parsed = urlparse(url)
        return all([parsed.scheme in ('http', 'https'), parsed.netloc])
    except Exception:
        return False


def clean_text(text: str) -> str:
    """Collapse runs of whitespace and trim."""
    if not text:
        return ""
    return _WS_RE.sub(' ', text).strip()


def base_name_from_url(url: str) -> str:
    """Derive a filesystem-safe base name from a URL."""
    parsed = urlparse(url)
    base = parsed.netloc.replace('.', '_').replace(':', '_')
    if parsed.path and parsed.path != '/':
        path_part = parsed.path.strip('/').replace('/', '_')[:30]
        base = f"{base}_{path_part}"
    return base


class ProgressTracker:
    """
    Tracks crawl counters for reporting.
    """

    def __init__(self):
        self.pages_accepted = 0
        self.pages_failed = 0
        self.pages_thin = 0
        self.pages_skipped = 0
        self.stop_reason = 'completed'
        self.start_time = None
        self.end_time = None

    def start(self) -> None:
        """Mark crawl start."""
        self.start_time = time.monotonic()

    def finish(self) -> None:
        """Mark crawl end."""
        self.end_time = time.monotonic()

    def increment_accepted(self) -> int:
        self.pages_accepted += 1
        return self.pages_accepted

    def increment_failed(self) -> int:
        self.pages_failed += 1
        return self.pages_failed

    def increment_thin(self) -> int:
        self.pages_thin += 1
        return self.pages_thin

    def increment_skipped(self) -> int:
        self.pages_skipped += 1
        return self.pages_skipped

    @property
    def pages_fetched(self) -> int:
        """Fetch attempts made after the seed."""
        return max(0, self.pages_accepted - 1) + self.pages_failed + self.pages_thin

    @property
    def elapsed_time(self) -> float:
        """Elapsed time in seconds."""
        if self.start_time is None:
            return 0
        end = self.end_time or time.monotonic()
        return end - self.start_time

    def get_stats(self) -> dict:
        """Get current statistics."""
        return {
            'pages_accepted': self.pages_accepted,
            'pages_failed': self.pages_failed,
            'pages_thin': self.pages_thin,
            'pages_skipped': self.pages_skipped,
            'pages_fetched': self.pages_fetched,
            'elapsed_time': round(self.elapsed_time, 2),
            'stop_reason': self.stop_reason,
        }
