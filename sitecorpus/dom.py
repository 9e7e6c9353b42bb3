"""
Document Access Layer
Thin wrapper over BeautifulSoup giving the extractor and link discoverer a
safe-to-copy document with Optional-returning queries.
"""

import copy
import logging
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .errors import ParseFailed
from .utils import clean_text

logger = logging.getLogger(__name__)

DEFAULT_PARSER = 'lxml'


class Document:
    """
    A parsed HTML document and the URL it was loaded from.
    """

    def __init__(self, soup: BeautifulSoup, url: str = ''):
        self.soup = soup
        self.url = url

    def clone(self) -> 'Document':
        """Deep copy of the tree; the original is never touched."""
        return Document(copy.deepcopy(self.soup), self.url)

    def select(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    @property
    def body(self) -> Optional[Tag]:
        return self.soup.find('body')

    @property
    def title(self) -> str:
        """Text of the <title> element, or an empty string."""
        title_tag = self.soup.find('title')
        if title_tag is None:
            return ''
        return clean_text(title_tag.get_text())

    @property
    def base_href(self) -> Optional[str]:
        """Value of <base href>, if the document declares one."""
        base = self.soup.find('base', href=True)
        if base is None:
            return None
        return base['href'].strip() or None

    def meta_content(self, name: str) -> Optional[str]:
        """Trimmed ``content`` of ``<meta name=...>``, or None when absent or blank."""
        meta = self.soup.find('meta', attrs={'name': name})
        if meta is None:
            return None
        content = (meta.get('content') or '').strip()
        return content or None


def load_document(html: str, url: str = '', parser: str = DEFAULT_PARSER) -> Document:
    """
    Parse raw HTML into a Document.

    Raises:
        ParseFailed: If the parser cannot handle the markup
    """
    try:
        soup = BeautifulSoup(html or '', parser)
    except Exception as e:
        raise ParseFailed(url, f"HTML parse error: {e}") from e
    return Document(soup, url)


def clone_document(document: Document) -> Document:
    return document.clone()


def element_text(element: Tag) -> str:
    """Whitespace-collapsed text content of an element."""
    return clean_text(element.get_text())
