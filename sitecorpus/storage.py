"""
Site Store
JSON-file persistence for crawled sites, with a small in-memory cache of
recently read records.
"""

import json
import logging
import os
import tempfile
from collections import OrderedDict
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .crawler import CrawlResult
from .errors import StorageError
from .utils import extract_hostname

logger = logging.getLogger(__name__)

SITE_ID_PREFIX = 'site:'


@dataclass
class SiteRecord:
    """
    What is kept about one crawled site.
    """
    url: str
    title: str
    parsed_at: str
    pages_count: int
    content: str
    content_length: int

    @property
    def site_id(self) -> str:
        return site_id_for(self.url)

    def to_dict(self) -> dict:
        return asdict(self)


def site_id_for(url: str) -> str:
    """Storage key for the site a URL belongs to (``site:<host>``)."""
    return f'{SITE_ID_PREFIX}{extract_hostname(url)}'


class SiteStore:
    """
    Stores one SiteRecord per host in a JSON file.

    Reads go through an LRU cache holding at most ``cache_size`` records;
    the least recently used record is evicted first.
    """

    def __init__(self, path: str, cache_size: int = 5):
        self.path = Path(path)
        self.cache_size = cache_size
        self._cache: 'OrderedDict[str, SiteRecord]' = OrderedDict()

    def save(self, result: CrawlResult, url: str) -> SiteRecord:
        """
        Persist a crawl result, replacing any earlier record for the site.

        Args:
            result: Finished crawl
            url: URL the crawl started from

        Returns:
            The stored record
        """
        record = SiteRecord(
            url=url,
            title=result.title or extract_hostname(url),
            parsed_at=datetime.now(timezone.utc).isoformat(),
            pages_count=result.pages_count,
            content=result.content,
            content_length=len(result.content),
        )
        data = self._read()
        data[record.site_id] = record.to_dict()
        self._write(data)
        self._remember(record.site_id, record)

        logger.info(
            f"Saved {record.site_id} ({record.pages_count} pages, "
            f"{record.content_length:,} chars) to {self.path}"
        )
        return record

    def get(self, site_id: str) -> Optional[SiteRecord]:
        """Look up a site by id, from cache when possible."""
        if site_id in self._cache:
            self._cache.move_to_end(site_id)
            return self._cache[site_id]

        raw = self._read().get(site_id)
        if raw is None:
            return None
        record = self._to_record(site_id, raw)
        self._remember(site_id, record)
        return record

    def delete(self, site_id: str) -> bool:
        """Remove a site; returns False if it was not stored."""
        self._cache.pop(site_id, None)
        data = self._read()
        if site_id not in data:
            return False
        del data[site_id]
        self._write(data)
        logger.info(f"Deleted {site_id} from {self.path}")
        return True

    def list_sites(self) -> List[SiteRecord]:
        """All stored sites, in the order they were first saved."""
        return [self._to_record(site_id, raw) for site_id, raw in self._read().items()]

    def _remember(self, site_id: str, record: SiteRecord) -> None:
        self._cache[site_id] = record
        self._cache.move_to_end(site_id)
        while len(self._cache) > self.cache_size:
            evicted, _ = self._cache.popitem(last=False)
            logger.debug(f"Evicted {evicted} from cache")

    def _to_record(self, site_id: str, raw: dict) -> SiteRecord:
        try:
            return SiteRecord(**raw)
        except TypeError as e:
            raise StorageError(f"Malformed record {site_id} in {self.path}: {e}") from e

    def _read(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read site store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Site store {self.path} is not a JSON object")
        return data

    def _write(self, data: Dict[str, dict]) -> None:
        """Replace the store file atomically, so readers never see a partial write."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f'.{self.path.name}.', suffix='.tmp', dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            os.unlink(tmp_name)
            raise
