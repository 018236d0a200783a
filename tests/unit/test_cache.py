"""
Unit tests — catalog caching layer.
"""
import time

from neo_datasource.catalog.cache import CatalogCache, get_catalog_cache


def test_put_and_get():
    cache = CatalogCache(ttl=60, max_size=8)
    cache.put("http://a", "SELECT 1", ["x"])
    assert cache.get("http://a", "SELECT 1") == ["x"]


def test_miss_on_other_address():
    cache = CatalogCache(ttl=60, max_size=8)
    cache.put("http://a", "SELECT 1", "v")
    assert cache.get("http://b", "SELECT 1") is None


def test_expiry():
    cache = CatalogCache(ttl=0.05, max_size=8)
    cache.put("http://a", "q", "v")
    time.sleep(0.1)
    assert cache.get("http://a", "q") is None


def test_eviction_of_oldest():
    cache = CatalogCache(ttl=60, max_size=2)
    cache.put("a", "q1", 1)
    cache.put("a", "q2", 2)
    cache.put("a", "q3", 3)
    assert len(cache) == 2
    assert cache.get("a", "q1") is None
    assert cache.get("a", "q3") == 3


def test_put_again_refreshes_position():
    cache = CatalogCache(ttl=60, max_size=2)
    cache.put("a", "q1", 1)
    cache.put("a", "q2", 2)
    cache.put("a", "q1", 10)
    cache.put("a", "q3", 3)
    assert cache.get("a", "q1") == 10
    assert cache.get("a", "q2") is None


def test_clear():
    cache = CatalogCache(ttl=60, max_size=8)
    cache.put("a", "q1", 1)
    cache.put("b", "q1", 1)
    assert cache.clear() == 2
    assert len(cache) == 0
    assert cache.get("b", "q1") is None


def test_hit_and_miss_counters():
    cache = CatalogCache(ttl=60, max_size=8)
    cache.put("a", "q", 1)
    cache.get("a", "q")
    cache.get("a", "missing")
    assert cache.hits == 1
    assert cache.misses == 1


def test_singleton():
    assert get_catalog_cache() is get_catalog_cache()
