"""
Run Configuration
=================
Single source of truth for crawler defaults and runtime limits.

The CLI, the crawler and the fetcher all read from ``CrawlerRunConfig``.
Values come from the defaults below, ``SITECORPUS_*`` environment
variables, or command-line flags.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Dict, Optional

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Canonical defaults
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "max_pages": 5,
    "page_delay": 0.2,               # seconds between fetch attempts
    "min_content_length": 100,       # pages at or below this are thin
    "max_content_length": 50_000,    # corpus budget in characters
    "timeout_seconds": 20,           # per-page fetch timeout
    "crawl_timeout": None,           # whole-crawl deadline in seconds
    "explore_thin_pages": False,
    "html_parser": "lxml",
    "user_agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
    ),
    "output_json": None,
    "output_csv": None,
    "output_docx": None,
    "store_path": None,
}

ENV_PREFIX = "SITECORPUS_"


@dataclass
class CrawlerRunConfig:
    """
    Configuration consumed by every crawler subsystem.

    Populate via:
      - ``CrawlerRunConfig()``                 → all defaults
      - ``CrawlerRunConfig(max_pages=20)``     → override one value
      - ``CrawlerRunConfig.from_env()``        → ``SITECORPUS_*`` variables
      - ``CrawlerRunConfig.from_cli_args(ns)`` → from argparse Namespace
    """

    # ---- Crawl limits ----
    max_pages: int = _DEFAULTS["max_pages"]
    page_delay: float = _DEFAULTS["page_delay"]
    min_content_length: int = _DEFAULTS["min_content_length"]
    max_content_length: int = _DEFAULTS["max_content_length"]
    timeout_seconds: float = _DEFAULTS["timeout_seconds"]
    crawl_timeout: Optional[float] = _DEFAULTS["crawl_timeout"]

    # ---- Policy ----
    explore_thin_pages: bool = _DEFAULTS["explore_thin_pages"]

    # ---- Fetching ----
    html_parser: str = _DEFAULTS["html_parser"]
    user_agent: str = _DEFAULTS["user_agent"]
    cookies: Dict[str, str] = field(default_factory=dict)

    # ---- Output paths (None = skip) ----
    output_json: Optional[str] = _DEFAULTS["output_json"]
    output_csv: Optional[str] = _DEFAULTS["output_csv"]
    output_docx: Optional[str] = _DEFAULTS["output_docx"]
    store_path: Optional[str] = _DEFAULTS["store_path"]

    def __post_init__(self):
        if self.max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {self.max_pages}")
        if self.page_delay < 0:
            raise ValueError(f"page_delay must not be negative, got {self.page_delay}")
        if self.max_content_length < 1:
            raise ValueError(
                f"max_content_length must be positive, got {self.max_content_length}"
            )

    # -----------------------------------------------------------------------
    # Factory helpers
    # -----------------------------------------------------------------------
    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "CrawlerRunConfig":
        """
        Build config from ``SITECORPUS_<FIELD>`` environment variables.

        Unset variables keep their defaults; ``cookies`` is not read from
        the environment.
        """
        environ = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            if f.name == "cookies":
                continue
            raw = environ.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None or raw == "":
                continue
            overrides[f.name] = _coerce(f.name, raw)
        return cls(**overrides)

    @classmethod
    def from_cli_args(cls, args, base: Optional["CrawlerRunConfig"] = None) -> "CrawlerRunConfig":
        """Build config from an argparse Namespace (``__main__.py``)."""
        base = base or cls()
        cookies = dict(base.cookies)
        for pair in getattr(args, "cookie", None) or []:
            name, sep, value = pair.partition("=")
            if not sep or not name.strip():
                raise ValueError(f"Cookie must be NAME=VALUE, got {pair!r}")
            cookies[name.strip()] = value.strip()

        def pick(attr, current):
            value = getattr(args, attr, None)
            return current if value is None else value

        return cls(
            max_pages=pick("pages", base.max_pages),
            page_delay=pick("delay", base.page_delay),
            min_content_length=pick("min_content", base.min_content_length),
            max_content_length=pick("max_content", base.max_content_length),
            timeout_seconds=pick("timeout", base.timeout_seconds),
            crawl_timeout=pick("crawl_timeout", base.crawl_timeout),
            explore_thin_pages=getattr(args, "explore_thin_pages", False) or base.explore_thin_pages,
            html_parser=base.html_parser,
            user_agent=pick("user_agent", base.user_agent),
            cookies=cookies,
            output_json=pick("output_json", base.output_json),
            output_csv=pick("output_csv", base.output_csv),
            output_docx=pick("output_docx", base.output_docx),
            store_path=pick("store", base.store_path),
        )

    # -----------------------------------------------------------------------
    # Logging helper
    # -----------------------------------------------------------------------
    def log_summary(self, url: str) -> None:
        """Emit a structured summary to the logger."""
        logger.info("=" * 60)
        logger.info("CRAWL RUN CONFIG")
        logger.info("=" * 60)
        logger.info(f"  URL:              {url}")
        logger.info(f"  Max Pages:        {self.max_pages}")
        logger.info(f"  Page Delay:       {self.page_delay}s between fetches")
        logger.info(f"  Timeout:          {self.timeout_seconds}s per page")
        if self.crawl_timeout:
            logger.info(f"  Crawl Deadline:   {self.crawl_timeout}s")
        logger.info(f"  Thin Threshold:   {self.min_content_length} chars")
        logger.info(f"  Corpus Budget:    {self.max_content_length:,} chars")
        if self.explore_thin_pages:
            logger.info("  Thin Pages:       links explored")
        if self.cookies:
            logger.info(f"  Cookies:          {len(self.cookies)} configured")
        if self.store_path:
            logger.info(f"  Site Store:       {self.store_path}")
        logger.info("=" * 60)


_BOOL_FIELDS = {"explore_thin_pages"}
_INT_FIELDS = {"max_pages", "min_content_length", "max_content_length"}
_FLOAT_FIELDS = {"page_delay", "timeout_seconds", "crawl_timeout"}


def _coerce(name: str, raw: str):
    raw = raw.strip()
    try:
        if name in _BOOL_FIELDS:
            return raw.lower() in ("1", "true", "yes", "on")
        if name in _INT_FIELDS:
            return int(raw)
        if name in _FLOAT_FIELDS:
            return float(raw)
    except ValueError as e:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from e
    return raw
