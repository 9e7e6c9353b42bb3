#!/usr/bin/env python3
"""
Command-line front end
======================
Crawl a site into a text corpus, export it, and optionally keep it in a
site store.

Run with: python -m sitecorpus https://docs.example.com --pages 20
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from .crawler import CrawlResult, crawl_site
from .errors import CrawlError, StorageError
from .exporters import export_csv, export_docx, export_json
from .run_config import CrawlerRunConfig
from .storage import SiteStore
from .utils import base_name_from_url

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sitecorpus',
        description='Crawl a site (same host only) into a size-bounded text corpus',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m sitecorpus https://example.com
  python -m sitecorpus https://docs.example.com --pages 20 --output-json docs.json
  python -m sitecorpus https://example.com --store sites.json --explore-thin-pages
        """
    )

    parser.add_argument('url', help='Seed page URL')
    parser.add_argument('--pages', type=int, help='Maximum pages to keep, seed included (default: 5)')
    parser.add_argument('--delay', type=float, help='Delay between fetches in seconds (default: 0.2)')
    parser.add_argument('--timeout', type=float, help='Timeout per page in seconds (default: 20)')
    parser.add_argument('--crawl-timeout', type=float, help='Deadline for the whole crawl in seconds')
    parser.add_argument('--min-content', type=int, help='Pages with this many chars or fewer are skipped (default: 100)')
    parser.add_argument('--max-content', type=int, help='Corpus size budget in chars (default: 50000)')
    parser.add_argument(
        '--explore-thin-pages', action='store_true',
        help='Follow links found on skipped thin pages',
    )
    parser.add_argument('--user-agent', type=str, help='User-Agent header to send')
    parser.add_argument(
        '--cookie', type=str, action='append', default=[], metavar='NAME=VALUE',
        help='Cookie to send with every request (repeatable)',
    )
    parser.add_argument('--output-json', type=str, help='JSON output file path')
    parser.add_argument('--output-csv', type=str, help='CSV output file path')
    parser.add_argument('--output-docx', type=str, help='DOCX output file path')
    parser.add_argument('--store', type=str, help='Site store file to save the corpus into')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def export_result(result: CrawlResult, cfg: CrawlerRunConfig) -> list:
    """Export to every configured format; returns the written paths."""
    exported = []
    if cfg.output_json:
        exported.append(export_json(result, cfg.output_json))
    if cfg.output_csv:
        exported.append(export_csv(result, cfg.output_csv))
    if cfg.output_docx:
        exported.append(export_docx(result, cfg.output_docx))
    return exported


def print_summary(result: CrawlResult, max_pages: int) -> None:
    """Print crawl summary."""
    stats = result.stats
    print("\n" + "=" * 65)
    print("CRAWL COMPLETE")
    print("=" * 65)
    print(f"  Site title:          {result.title or '(none)'}")
    print(f"  Pages kept:          {result.pages_count}/{max_pages}")
    if stats.get('pages_thin', 0) > 0:
        print(f"  Thin pages skipped:  {stats.get('pages_thin', 0)}")
    print(f"  Failed pages:        {stats.get('pages_failed', 0)}")
    print(f"  Corpus size:         {len(result.content):,} chars")
    print(f"  Total time:          {stats.get('elapsed_time', 0):.1f}s")
    print(f"  Stop reason:         {stats.get('stop_reason', 'completed')}")
    print("=" * 65)


def run_cli_with_args(argv=None) -> int:
    """Parse argv, build CrawlerRunConfig, run."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )

    url = args.url
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url

    try:
        cfg = CrawlerRunConfig.from_cli_args(args, base=CrawlerRunConfig.from_env())
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if not (cfg.output_json or cfg.output_csv or cfg.output_docx or cfg.store_path):
        cfg.output_json = f"{base_name_from_url(url)}.json"

    cfg.log_summary(url)

    def progress_cb(current: int, total: int) -> None:
        print(f"[Page {current}/{total}]")

    try:
        result = asyncio.run(crawl_site(url, cfg.max_pages, progress_cb, cfg))
    except (CrawlError, ValueError) as e:
        logger.error(f"Could not load seed page: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nCrawl cancelled.")
        return 130

    try:
        exported = export_result(result, cfg)
    except OSError as e:
        logger.error(f"Could not write export: {e}")
        return 1
    if exported:
        print("\n" + "-" * 40)
        for path in exported:
            print(f"  Exported: {path}")
        print("-" * 40)

    if cfg.store_path:
        try:
            record = SiteStore(cfg.store_path).save(result, url)
        except StorageError as e:
            logger.error(f"Could not save to site store: {e}")
            return 1
        print(f"  Stored as {record.site_id} in {cfg.store_path}")

    print_summary(result, cfg.max_pages)
    return 0


def main() -> None:
    load_dotenv()
    sys.exit(run_cli_with_args())


if __name__ == '__main__':
    main()
