# app/services/loyverse/cache.py
"""
Advisory on-disk cache for Loyverse collection downloads.

The cache is never a source of truth: a missing, expired or unreadable entry is a
miss, and a failed write is logged and ignored. Only full collection reads are
cached; "updated since" reads always go to the API.
"""

import json
import logging
import os
import time
from typing import Any, Dict, List, Optional, Union
from datetime import datetime

from app.core.enums import CatalogCollection

logger = logging.getLogger(__name__)


class ResponseCache:
    """JSON file per key under `cache_dir`."""

    def __init__(self, cache_dir: str = ".cache"):
        self.cache_dir = cache_dir
        self._ensure_cache_dir()

    def _ensure_cache_dir(self):
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create cache directory {self.cache_dir}: {e}")

    def _get_cache_file_path(self, key: str) -> str:
        return os.path.join(self.cache_dir, f"{key}.json")

    def has(self, key: str, max_age_minutes: Optional[float] = None) -> bool:
        """Check if an entry exists and is younger than `max_age_minutes` (when given)"""
        file_path = self._get_cache_file_path(key)
        if not os.path.exists(file_path):
            return False

        if max_age_minutes:
            age = self.get_age(key)
            if age is None or age > max_age_minutes:
                return False

        return True

    def get(self, key: str) -> Optional[Any]:
        file_path = self._get_cache_file_path(key)
        if not os.path.exists(file_path):
            return None

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading cache for {key}: {e}")
            return None

    def set(self, key: str, data: Any) -> None:
        file_path = self._get_cache_file_path(key)
        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, default=str)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing cache for {key}: {e}")

    def clear(self, key: str) -> None:
        file_path = self._get_cache_file_path(key)
        if os.path.exists(file_path):
            os.remove(file_path)

    def clear_all(self) -> int:
        """Remove every cached entry; returns how many files were deleted"""
        if not os.path.isdir(self.cache_dir):
            return 0

        removed = 0
        for name in os.listdir(self.cache_dir):
            if name.endswith('.json'):
                os.remove(os.path.join(self.cache_dir, name))
                removed += 1
        logger.info(f"Cleared {removed} cached responses from {self.cache_dir}")
        return removed

    def get_age(self, key: str) -> Optional[float]:
        """Age of an entry in minutes, or None when absent"""
        file_path = self._get_cache_file_path(key)
        try:
            mtime = os.path.getmtime(file_path)
        except OSError:
            return None
        return (time.time() - mtime) / 60


class CachedFetcher:
    """
    Read-through decorator over a Loyverse fetcher.

    `fetch_all` consults the cache by collection key before calling the wrapped
    fetcher and stores fresh downloads; `fetch_updated_since` always passes through.
    """

    def __init__(self, fetcher, cache: ResponseCache, max_age_minutes: Optional[float] = None):
        self.fetcher = fetcher
        self.cache = cache
        self.max_age_minutes = max_age_minutes

    async def fetch_all(self, collection: Union[CatalogCollection, str]) -> List[Dict]:
        collection = CatalogCollection(collection)
        key = collection.cache_key

        cached = self._read(key)
        if cached is not None:
            logger.info(f"Using cached {collection.value} data ({len(cached)} records)")
            return cached

        records = await self.fetcher.fetch_all(collection)
        self._write(key, records)
        return records

    async def fetch_updated_since(
        self,
        collection: Union[CatalogCollection, str],
        since: Union[datetime, str]
    ) -> List[Dict]:
        return await self.fetcher.fetch_updated_since(collection, since)

    def _read(self, key: str) -> Optional[List[Dict]]:
        try:
            if not self.cache.has(key, self.max_age_minutes):
                return None
            cached = self.cache.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}, treating as miss: {e}")
            return None

        if not isinstance(cached, list):
            return None
        return cached

    def _write(self, key: str, records: List[Dict]) -> None:
        try:
            self.cache.set(key, records)
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")
