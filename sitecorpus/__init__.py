"""
sitecorpus
Same-host site crawler that turns a seed page and the pages it links to
into one size-bounded text corpus.

CLI Usage:
    python -m sitecorpus <url> [options]

    Options:
        --pages         Maximum pages to keep, seed included (default: 5)
        --delay         Delay between fetches in seconds (default: 0.2)
        --timeout       Per-page timeout in seconds (default: 20)
        --output-json   Export to JSON file
        --store         Save the corpus into a site store

Library usage:

    from sitecorpus import crawl_site

    result = await crawl_site("https://docs.example.com", max_pages=10)
    print(result.content)
"""

from .crawler import (
    CrawlPage,
    CrawlResult,
    SiteCrawler,
    TRUNCATION_MARKER,
    assemble_corpus,
    crawl,
    crawl_site,
    crawl_website,
)
from .dom import Document, clone_document, load_document
from .errors import CrawlError, FetchFailed, ParseFailed, StorageError
from .extractor import ContentExtractor
from .fetcher import PageFetcher
from .links import LinkDiscoverer
from .run_config import CrawlerRunConfig
from .storage import SiteRecord, SiteStore

__all__ = [
    'CrawlPage',
    'CrawlResult',
    'SiteCrawler',
    'TRUNCATION_MARKER',
    'assemble_corpus',
    'crawl',
    'crawl_site',
    'crawl_website',
    # Document access
    'Document',
    'load_document',
    'clone_document',
    # Components
    'ContentExtractor',
    'LinkDiscoverer',
    'PageFetcher',
    'CrawlerRunConfig',
    # Errors
    'CrawlError',
    'FetchFailed',
    'ParseFailed',
    'StorageError',
    # Persistence
    'SiteRecord',
    'SiteStore',
]

__version__ = '1.0.0'
