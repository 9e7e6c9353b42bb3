"""
Link Discoverer
Enumerates same-host navigable links of a page, navigation menus first.
"""

import logging
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import Tag

from .dom import Document
from .utils import canonical_url, extract_hostname

logger = logging.getLogger(__name__)


class LinkDiscoverer:
    """
    Collects the links a crawl may follow from one page.
    """

    # Extensions of resources that are not pages
    SKIP_EXTENSIONS = {
        'pdf', 'jpg', 'jpeg', 'png', 'gif', 'svg', 'zip', 'doc', 'docx'
    }

    # Path fragments of administrative / transactional areas
    SKIP_PATH_MARKERS = ('/wp-admin', '/admin', '/login', '/cart', '/checkout')

    NAV_TAGS = {'nav'}
    NAV_ROLES = {'navigation'}
    NAV_CLASSES = {'nav', 'menu'}

    def discover_links(self, document: Document, page_url: str) -> List[str]:
        """
        Discover followable links on a page.

        Args:
            document: Parsed page (read only)
            page_url: URL the page was loaded from

        Returns:
            Canonical URLs, navigation links first, each listed once
        """
        base_url = self._base_url(document, page_url)
        page_host = extract_hostname(page_url)
        page_path = urlparse(page_url).path or '/'

        nav_links: List[str] = []
        other_links: List[str] = []

        for anchor in document.soup.find_all('a', href=True):
            link = self._accept(anchor['href'], base_url, page_host, page_path)
            if link is None:
                continue
            if self._in_navigation(anchor):
                nav_links.append(link)
            else:
                other_links.append(link)

        nav_unique = list(dict.fromkeys(nav_links))
        nav_set = set(nav_unique)
        other_unique = [link for link in dict.fromkeys(other_links) if link not in nav_set]

        logger.debug(
            f"[LINKS] {page_url[:70]} — nav={len(nav_unique)}, other={len(other_unique)}"
        )
        return nav_unique + other_unique

    @staticmethod
    def _base_url(document: Document, page_url: str) -> str:
        """Page URL, overridden by a usable <base href>."""
        base_href = document.base_href
        if not base_href:
            return page_url
        try:
            base_url = urljoin(page_url, base_href)
            urlparse(base_url).port
        except ValueError:
            logger.debug(f"[LINKS] Ignoring malformed <base href={base_href!r}> on {page_url[:70]}")
            return page_url
        return base_url

    def _accept(
        self,
        href: str,
        base_url: str,
        page_host: str,
        page_path: str
    ) -> Optional[str]:
        """Resolve and filter one href; returns its canonical form or None."""
        href = href.strip()
        if not href:
            return None

        try:
            absolute = urljoin(base_url, href)
            parsed = urlparse(absolute)
        except ValueError:
            return None

        if parsed.scheme not in ('http', 'https'):
            return None

        if extract_hostname(absolute) != page_host:
            return None

        path = parsed.path or '/'
        if path == page_path:
            return None

        last_segment = path.rsplit('/', 1)[-1]
        if '.' in last_segment:
            extension = last_segment.rsplit('.', 1)[-1].lower()
            if extension in self.SKIP_EXTENSIONS:
                return None

        if any(marker in path for marker in self.SKIP_PATH_MARKERS):
            return None

        return canonical_url(absolute)

    def _in_navigation(self, anchor: Tag) -> bool:
        """True if any ancestor of the anchor is a navigation container."""
        for parent in anchor.parents:
            if parent.name in self.NAV_TAGS:
                return True
            if (parent.get('role') or '').strip().lower() in self.NAV_ROLES:
                return True
            classes = parent.get('class') or []
            if any(cls.lower() in self.NAV_CLASSES for cls in classes):
                return True
        return False
