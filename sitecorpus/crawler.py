"""
Site Crawler
Breadth-first same-host crawl from an already loaded seed page, assembling
the accepted pages into one size-bounded text corpus.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional, Set

from .dom import Document
from .errors import CrawlError
from .extractor import ContentExtractor
from .fetcher import PageFetcher
from .links import LinkDiscoverer
from .run_config import CrawlerRunConfig
from .utils import ProgressTracker, canonical_url, is_valid_url

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

TRUNCATION_MARKER = '\n\n[Content truncated due to size limit]'


@dataclass(frozen=True)
class CrawlPage:
    """One accepted page of a crawl."""
    url: str
    content: str = ''

    def to_dict(self) -> dict:
        return {'url': self.url, 'content': self.content}


@dataclass
class CrawlResult:
    """
    Result of a crawl operation.
    """
    title: str = ''
    pages: List[CrawlPage] = field(default_factory=list)
    content: str = ''
    pages_count: int = 0
    stats: Dict = field(default_factory=dict)
    errors: List[Dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Flat record for storage or JSON export."""
        return {
            'title': self.title,
            'pages': [page.to_dict() for page in self.pages],
            'content': self.content,
            'pages_count': self.pages_count,
            'stats': dict(self.stats),
            'errors': list(self.errors),
        }


def assemble_corpus(pages: List[CrawlPage], max_length: int) -> str:
    """
    Join page contents under ``--- <url> ---`` markers.

    If the joined text is longer than ``max_length``, exactly ``max_length``
    characters are kept and TRUNCATION_MARKER is appended.
    """
    content = '\n\n'.join(f'--- {page.url} ---\n{page.content}' for page in pages)
    if len(content) > max_length:
        logger.info(f"Corpus truncated from {len(content):,} to {max_length:,} chars")
        content = content[:max_length] + TRUNCATION_MARKER
    return content


class SiteCrawler:
    """
    Sequential breadth-first crawler.

    One fetch is in flight at a time and fetch attempts are separated by
    ``config.page_delay``. A failed, thin or unparseable page is skipped;
    nothing a single page does aborts the crawl.
    """

    def __init__(
        self,
        config: CrawlerRunConfig = None,
        fetcher=None,
        extractor: ContentExtractor = None,
        link_discoverer: LinkDiscoverer = None
    ):
        """
        Initialize the crawler.

        Args:
            config: Run configuration
            fetcher: Object with ``async fetch(url) -> Document``;
                a PageFetcher is created (and closed) per crawl if omitted
            extractor: Content extractor
            link_discoverer: Link discoverer
        """
        self.config = config or CrawlerRunConfig()
        self.fetcher = fetcher
        self.extractor = extractor or ContentExtractor()
        self.link_discoverer = link_discoverer or LinkDiscoverer()

        self.progress = ProgressTracker()
        self._stop_requested = False

    def stop(self) -> None:
        """Request the crawler to stop after the current page."""
        self._stop_requested = True
        logger.info("Stop requested")

    async def crawl(
        self,
        seed_document: Document,
        seed_url: str,
        max_pages: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> CrawlResult:
        """
        Crawl a site starting from an already loaded page.

        Args:
            seed_document: Parsed seed page (not modified)
            seed_url: URL of the seed page
            max_pages: Page budget including the seed (defaults to config)
            on_progress: Called as ``on_progress(accepted, max_pages)``
                after each accepted page

        Returns:
            CrawlResult; the seed page is always its first page
        """
        if not is_valid_url(seed_url):
            raise ValueError(f"Invalid URL: {seed_url}")
        max_pages = max_pages if max_pages is not None else self.config.max_pages
        if max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {max_pages}")

        self._stop_requested = False
        self.progress = ProgressTracker()
        self.progress.start()

        owns_fetcher = self.fetcher is None
        fetcher = self.fetcher or PageFetcher(self.config)

        pages: List[CrawlPage] = []
        errors: List[Dict] = []
        try:
            if owns_fetcher:
                await fetcher.open()
            await self._traverse(fetcher, seed_document, seed_url, max_pages, on_progress, pages, errors)
        finally:
            if owns_fetcher:
                await fetcher.close()
            self.progress.finish()

        result = CrawlResult(
            title=seed_document.title,
            pages=pages,
            content=assemble_corpus(pages, self.config.max_content_length),
            pages_count=len(pages),
            stats=self.progress.get_stats(),
            errors=errors,
        )

        logger.info(
            f"Crawl complete: {result.pages_count} pages, "
            f"{len(result.content):,} chars, stop_reason={self.progress.stop_reason}"
        )
        return result

    async def _traverse(
        self,
        fetcher,
        seed_document: Document,
        seed_url: str,
        max_pages: int,
        on_progress: Optional[ProgressCallback],
        pages: List[CrawlPage],
        errors: List[Dict]
    ) -> None:
        loop = asyncio.get_running_loop()
        deadline = None
        if self.config.crawl_timeout:
            deadline = loop.time() + self.config.crawl_timeout

        visited: Set[str] = set()
        queued: Set[str] = set()
        to_visit: Deque[str] = deque()

        # ── Seeding ──────────────────────────────────────────────────────
        seed_canonical = canonical_url(seed_url) or seed_url
        # A redirected seed resolves its links against where it landed
        seed_base = seed_document.url or seed_url
        seed_content = self.extractor.extract(seed_document)
        pages.append(CrawlPage(url=seed_canonical, content=seed_content))
        visited.update({seed_url, seed_canonical, canonical_url(seed_base) or seed_base})
        self.progress.increment_accepted()
        self._report(on_progress, len(pages), max_pages)

        logger.info(f"[SEED] {seed_canonical[:70]} — chars={len(seed_content):,}")
        self._discover_and_enqueue(seed_document, seed_base, to_visit, visited, queued, errors)

        # ── Traversing ───────────────────────────────────────────────────
        fetch_attempted = False
        while to_visit and len(pages) < max_pages:
            if self._stop_requested:
                self.progress.stop_reason = 'stopped'
                break
            if deadline is not None and loop.time() >= deadline:
                self.progress.stop_reason = 'deadline'
                logger.warning(f"Crawl deadline of {self.config.crawl_timeout}s reached")
                break

            url = to_visit.popleft()
            if url in visited:
                self.progress.increment_skipped()
                continue
            visited.add(url)

            if fetch_attempted and self.config.page_delay > 0:
                await asyncio.sleep(self.config.page_delay)
            fetch_attempted = True

            logger.info(f"[BFS] Accepted:{len(pages)}/{max_pages} | Queue:{len(to_visit)} | {url[:80]}")

            try:
                document = await self._fetch(fetcher, url, deadline, loop)
            except CrawlError as e:
                logger.warning(f"Skipping {url}: {e.reason}")
                self.progress.increment_failed()
                errors.append({'url': url, 'error': e.reason, 'stage': 'fetch'})
                continue
            except asyncio.TimeoutError:
                if deadline is not None and loop.time() >= deadline:
                    self.progress.stop_reason = 'deadline'
                    logger.warning(f"Crawl deadline reached while fetching {url}")
                    errors.append({'url': url, 'error': 'Crawl deadline reached', 'stage': 'fetch'})
                    break
                logger.warning(f"Skipping {url}: request timeout")
                self.progress.increment_failed()
                errors.append({'url': url, 'error': 'Request timeout', 'stage': 'fetch'})
                continue
            except Exception as e:
                logger.error(f"Unexpected error fetching {url}: {e}")
                self.progress.increment_failed()
                errors.append({'url': url, 'error': str(e), 'stage': 'fetch'})
                continue

            final_url = canonical_url(document.url) or url
            if final_url != url:
                if final_url in visited:
                    logger.info(f"[REDIRECT] {url[:70]} → already visited {final_url[:70]}")
                    self.progress.increment_skipped()
                    continue
                visited.add(final_url)
                url = final_url

            try:
                content = self.extractor.extract(document)
            except Exception as e:
                logger.error(f"Error extracting {url}: {e}")
                self.progress.increment_failed()
                errors.append({'url': url, 'error': f"Extraction error: {e}", 'stage': 'extract'})
                continue

            if len(content) <= self.config.min_content_length:
                self.progress.increment_thin()
                logger.info(f"[THIN] {url[:70]} — {len(content)} chars, discarded")
                if self.config.explore_thin_pages:
                    self._discover_and_enqueue(
                        document, document.url or url, to_visit, visited, queued, errors
                    )
                continue

            pages.append(CrawlPage(url=url, content=content))
            self.progress.increment_accepted()
            self._report(on_progress, len(pages), max_pages)
            self._discover_and_enqueue(
                document, document.url or url, to_visit, visited, queued, errors
            )

        if len(pages) >= max_pages and self.progress.stop_reason == 'completed':
            self.progress.stop_reason = 'max_pages'
            logger.info(f"Reached max pages limit: {max_pages}")

    async def _fetch(self, fetcher, url: str, deadline: Optional[float], loop) -> Document:
        if deadline is None:
            return await fetcher.fetch(url)
        remaining = max(0.0, deadline - loop.time())
        return await asyncio.wait_for(fetcher.fetch(url), timeout=remaining)

    def _discover_and_enqueue(
        self,
        document: Document,
        url: str,
        to_visit: Deque[str],
        visited: Set[str],
        queued: Set[str],
        errors: List[Dict]
    ) -> None:
        try:
            links = self.link_discoverer.discover_links(document, url)
        except Exception as e:
            logger.error(f"Error discovering links on {url}: {e}")
            errors.append({'url': url, 'error': f"Link discovery error: {e}", 'stage': 'links'})
            return
        new_enqueued = self._enqueue(links, to_visit, visited, queued)
        logger.info(
            f"[FRONTIER] {url[:60]} → links={len(links)} "
            f"enqueued={new_enqueued} queue_size={len(to_visit)}"
        )

    @staticmethod
    def _enqueue(
        links: List[str],
        to_visit: Deque[str],
        visited: Set[str],
        queued: Set[str]
    ) -> int:
        new_enqueued = 0
        for link in links:
            if link in visited or link in queued:
                continue
            to_visit.append(link)
            queued.add(link)
            new_enqueued += 1
        return new_enqueued

    @staticmethod
    def _report(on_progress: Optional[ProgressCallback], current: int, total: int) -> None:
        if on_progress is None:
            return
        try:
            on_progress(current, total)
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")


async def crawl(
    seed_document: Document,
    seed_url: str,
    max_pages: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    config: CrawlerRunConfig = None
) -> CrawlResult:
    """Crawl from an already loaded seed page with a fresh SiteCrawler."""
    crawler = SiteCrawler(config)
    return await crawler.crawl(seed_document, seed_url, max_pages, on_progress)


async def crawl_site(
    url: str,
    max_pages: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    config: CrawlerRunConfig = None
) -> CrawlResult:
    """
    Fetch the seed page, then crawl from it.

    Unlike later pages, a seed that cannot be loaded is an error. The seed
    may redirect to another host (``example.com`` to ``www.example.com``);
    the crawl then stays on the host it landed on.

    Raises:
        ValueError: If the URL is not http(s)
        FetchFailed: If the seed page cannot be fetched
        ParseFailed: If the seed page is not HTML
    """
    if not is_valid_url(url):
        raise ValueError(f"Invalid URL: {url}")
    config = config or CrawlerRunConfig()
    async with PageFetcher(config) as fetcher:
        seed_document = await fetcher.fetch(url, allow_offsite=True)
        crawler = SiteCrawler(config, fetcher=fetcher)
        return await crawler.crawl(seed_document, url, max_pages, on_progress)


def crawl_website(
    url: str,
    max_pages: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    config: CrawlerRunConfig = None
) -> CrawlResult:
    """Synchronous wrapper for crawl_site."""
    return asyncio.run(crawl_site(url, max_pages, on_progress, config))
