import os
import time
import pytest

from app.core.enums import CatalogCollection
from app.services.loyverse.cache import CachedFetcher, ResponseCache


@pytest.fixture
def cache(tmp_path):
    return ResponseCache(str(tmp_path / "cache"))


@pytest.fixture
def fetcher(mocker):
    upstream = mocker.MagicMock()
    upstream.fetch_all = mocker.AsyncMock(return_value=[{"id": "i1"}])
    upstream.fetch_updated_since = mocker.AsyncMock(return_value=[{"id": "i2"}])
    return upstream

"""
1. ResponseCache
"""

def test_set_get_and_clear(cache):
    assert not cache.has("loyverse_items")

    cache.set("loyverse_items", [{"id": "i1"}])

    assert cache.has("loyverse_items")
    assert cache.get("loyverse_items") == [{"id": "i1"}]
    cache.clear("loyverse_items")
    assert cache.get("loyverse_items") is None


def test_expired_entry_is_not_served(cache):
    cache.set("loyverse_items", [])
    path = os.path.join(cache.cache_dir, "loyverse_items.json")
    an_hour_ago = time.time() - 3600
    os.utime(path, (an_hour_ago, an_hour_ago))

    assert cache.get_age("loyverse_items") >= 59
    assert not cache.has("loyverse_items", max_age_minutes=30)
    assert cache.has("loyverse_items", max_age_minutes=120)


def test_corrupt_entry_reads_as_none(cache):
    with open(os.path.join(cache.cache_dir, "loyverse_items.json"), "w") as f:
        f.write("{not json")

    assert cache.get("loyverse_items") is None


def test_clear_all_counts_removed_files(cache):
    cache.set("loyverse_items", [])
    cache.set("loyverse_variants", [])

    assert cache.clear_all() == 2
    assert cache.clear_all() == 0


def test_get_age_missing_entry(cache):
    assert cache.get_age("nothing") is None

"""
2. CachedFetcher
"""

@pytest.mark.asyncio
async def test_cached_fetcher_reads_through(cache, fetcher):
    cached = CachedFetcher(fetcher, cache)

    first = await cached.fetch_all(CatalogCollection.ITEMS)
    second = await cached.fetch_all(CatalogCollection.ITEMS)

    assert first == second == [{"id": "i1"}]
    fetcher.fetch_all.assert_awaited_once_with(CatalogCollection.ITEMS)
    assert cache.get("loyverse_items") == [{"id": "i1"}]


@pytest.mark.asyncio
async def test_cached_fetcher_never_caches_updated_since(cache, fetcher):
    cached = CachedFetcher(fetcher, cache)

    await cached.fetch_updated_since(CatalogCollection.ITEMS, "2024-01-01T00:00:00Z")
    await cached.fetch_updated_since(CatalogCollection.ITEMS, "2024-01-01T00:00:00Z")

    assert fetcher.fetch_updated_since.await_count == 2
    assert not cache.has("loyverse_items")


@pytest.mark.asyncio
async def test_cached_fetcher_treats_read_errors_as_miss(cache, fetcher, mocker):
    mocker.patch.object(cache, "has", side_effect=OSError("disk gone"))
    cached = CachedFetcher(fetcher, cache)

    assert await cached.fetch_all(CatalogCollection.ITEMS) == [{"id": "i1"}]
    fetcher.fetch_all.assert_awaited_once()


@pytest.mark.asyncio
async def test_cached_fetcher_ignores_write_errors(cache, fetcher, mocker):
    mocker.patch.object(cache, "set", side_effect=OSError("read-only"))
    cached = CachedFetcher(fetcher, cache)

    assert await cached.fetch_all(CatalogCollection.ITEMS) == [{"id": "i1"}]


@pytest.mark.asyncio
async def test_cached_fetcher_propagates_upstream_errors(cache, fetcher):
    fetcher.fetch_all.side_effect = RuntimeError("api down")
    cached = CachedFetcher(fetcher, cache)

    with pytest.raises(RuntimeError):
        await cached.fetch_all(CatalogCollection.ITEMS)
    assert not cache.has("loyverse_items")
