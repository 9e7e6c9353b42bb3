"""
Content Extractor
Turns a parsed page into ordered, deduplicated text blocks.
"""

import logging
from typing import List

from bs4 import Tag

from .dom import Document, element_text

logger = logging.getLogger(__name__)


class ContentExtractor:
    """
    Extracts structured text from a Document.

    Works on a deep copy, so the caller's document is left intact for
    link discovery.
    """

    # Tags that never carry page content
    EXCLUDED_TAGS = {
        'script', 'style', 'noscript', 'iframe', 'svg', 'canvas',
        'video', 'audio', 'embed', 'object',
        'nav', 'footer', 'header'
    }

    # Whole class tokens that mark layout chrome
    EXCLUDED_CLASSES = {
        'nav', 'navigation', 'menu', 'footer', 'header', 'sidebar',
        'advertisement', 'ad', 'ads', 'cookie', 'popup', 'modal'
    }

    EXCLUDED_ROLES = {'navigation', 'banner', 'contentinfo'}

    # Matched together, so the first hit in document order wins
    MAIN_CONTENT_SELECTOR = 'main, [role="main"], article, .content, #content'

    MIN_HEADING_LENGTH = 2
    MIN_PARAGRAPH_LENGTH = 20
    MIN_LIST_ITEM_LENGTH = 10
    MIN_TABLE_ROW_LENGTH = 10

    LIST_ITEM_PREFIX = '• '
    CELL_SEPARATOR = ' | '
    BLOCK_SEPARATOR = '\n\n'

    def extract(self, document: Document) -> str:
        """
        Extract the page text.

        Args:
            document: Parsed page (not modified)

        Returns:
            Blocks joined by blank lines; empty string if nothing qualifies
        """
        working = document.clone()
        removed = self._remove_excluded(working)

        blocks: List[str] = []

        title = working.title
        if title:
            blocks.append(f'# {title}')

        description = working.meta_content('description')
        if description:
            blocks.append(description)

        region = self._find_main_region(working)
        if region is not None:
            blocks.extend(self._heading_blocks(region))
            blocks.extend(self._paragraph_blocks(region))
            blocks.extend(self._list_item_blocks(region))
            blocks.extend(self._table_row_blocks(region))

        unique = list(dict.fromkeys(blocks))
        content = self.BLOCK_SEPARATOR.join(unique)

        logger.debug(
            f"[EXTRACT] {document.url[:70]} — removed={removed}, "
            f"blocks={len(unique)}, chars={len(content):,}"
        )
        return content

    def _is_excluded(self, tag: Tag) -> bool:
        if tag.name in self.EXCLUDED_TAGS:
            return True
        classes = tag.get('class') or []
        if any(cls.lower() in self.EXCLUDED_CLASSES for cls in classes):
            return True
        role = (tag.get('role') or '').strip().lower()
        if role in self.EXCLUDED_ROLES:
            return True
        return (tag.get('aria-hidden') or '').strip().lower() == 'true'

    def _remove_excluded(self, document: Document) -> int:
        """Decompose every excluded subtree; returns how many were dropped."""
        removed = 0
        for element in document.soup.find_all(self._is_excluded):
            # Nested matches die with their ancestor
            if element.decomposed:
                continue
            element.decompose()
            removed += 1
        return removed

    def _find_main_region(self, document: Document):
        region = document.select_one(self.MAIN_CONTENT_SELECTOR)
        if region is not None and element_text(region):
            return region
        body = document.body
        if body is not None:
            return body
        return document.soup

    def _heading_blocks(self, region: Tag) -> List[str]:
        blocks = []
        for heading in region.find_all(['h1', 'h2', 'h3', 'h4', 'h5', 'h6']):
            text = element_text(heading)
            if len(text) > self.MIN_HEADING_LENGTH:
                level = int(heading.name[1])
                blocks.append(f"{'#' * level} {text}")
        return blocks

    def _paragraph_blocks(self, region: Tag) -> List[str]:
        blocks = []
        for paragraph in region.find_all('p'):
            text = element_text(paragraph)
            if len(text) > self.MIN_PARAGRAPH_LENGTH:
                blocks.append(text)
        return blocks

    def _list_item_blocks(self, region: Tag) -> List[str]:
        blocks = []
        for item in region.select('ul li, ol li'):
            text = element_text(item)
            if len(text) > self.MIN_LIST_ITEM_LENGTH:
                blocks.append(f'{self.LIST_ITEM_PREFIX}{text}')
        return blocks

    def _table_row_blocks(self, region: Tag) -> List[str]:
        blocks = []
        for row in region.select('table tr'):
            cells = [element_text(cell) for cell in row.find_all(['td', 'th'])]
            row_text = self.CELL_SEPARATOR.join(cell for cell in cells if cell)
            if len(row_text) > self.MIN_TABLE_ROW_LENGTH:
                blocks.append(row_text)
        return blocks
