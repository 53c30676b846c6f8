# tests/test_cache.py

from payroll.cache import TTLCache, riders_key, sheet_key
from payroll.datasource import CachedDataSource


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_entries_expire_after_their_ttl():
    clock = FakeClock()
    cache = TTLCache(default_ttl=10, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2, ttl=100)

    clock.now += 10
    assert cache.get("a") == 1       # still valid at exactly the ttl
    clock.now += 0.5
    assert cache.get("a") is None
    assert cache.get("a", "default") == "default"
    assert cache.get("b") == 2
    assert cache.has("b")
    assert not cache.has("a")


def test_clear_one_key_or_everything():
    cache = TTLCache()
    cache.set("a", 1)
    cache.set("b", 2)

    cache.clear("a")
    assert cache.keys() == ["b"]

    cache.clear()
    assert cache.keys() == []


def test_keys_drops_expired_entries():
    clock = FakeClock()
    cache = TTLCache(default_ttl=5, clock=clock)
    cache.set("short", 1)
    cache.set("long", 2, ttl=50)
    clock.now += 6

    assert cache.keys() == ["long"]


def test_stats_count_hits_and_misses():
    cache = TTLCache()
    cache.set("a", 1)
    cache.get("a")
    cache.get("a")
    cache.get("missing")

    stats = cache.stats()
    assert stats["entries"] == 1
    assert stats["hits"] == 2
    assert stats["misses"] == 1
    assert abs(stats["hit_rate"] - 2 / 3) < 1e-9
    assert TTLCache().stats()["hit_rate"] == 0.0


def test_key_helpers():
    assert sheet_key("المعدات") == "sheet:المعدات"
    assert riders_key("SUP1") == "riders:SUP1"


class CountingSource:
    def __init__(self):
        self.reads = 0

    def read_rows(self, sheet_name):
        self.reads += 1
        return [["header"], [sheet_name]]

    def get_assigned_workers(self, supervisor_code):
        self.reads += 1
        return []

    def get_salary_config(self, supervisor_code):
        self.reads += 1
        return None

    def get_equipment_pricing(self):
        self.reads += 1
        return None


def test_cached_source_memoizes_sheet_reads_until_invalidated():
    inner = CountingSource()
    source = CachedDataSource(inner, TTLCache(default_ttl=60))

    assert source.read_rows("A") == [["header"], ["A"]]
    source.read_rows("A")
    source.get_assigned_workers("SUP1")
    source.get_assigned_workers("SUP1")
    assert inner.reads == 2

    # Salary configurations are never cached
    source.get_salary_config("SUP1")
    source.get_salary_config("SUP1")
    assert inner.reads == 4

    source.invalidate()
    source.read_rows("A")
    assert inner.reads == 5


def test_cached_source_keeps_empty_results():
    inner = CountingSource()
    source = CachedDataSource(inner, TTLCache(default_ttl=60))

    assert source.get_assigned_workers("SUP1") == []
    assert source.get_assigned_workers("SUP1") == []
    assert inner.reads == 1
