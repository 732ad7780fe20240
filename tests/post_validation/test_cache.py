"""Tests for the TTL result cache."""

import asyncio

import pytest

from post_validation.cache import ResultCache


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class CountingCompute:
    """Coroutine function that counts its calls."""

    def __init__(self, value="computed"):
        self.value = value
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return f"{self.value}-{self.calls}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.mark.asyncio
async def test_hit_does_not_recompute(clock):
    """Test a second get within the TTL computes only once."""
    cache = ResultCache(clock=clock)
    compute = CountingCompute()

    first = await cache.get("validation:readability:abc", compute, ttl=60)
    second = await cache.get("validation:readability:abc", compute, ttl=60)

    assert first == second == "computed-1"
    assert compute.calls == 1


@pytest.mark.asyncio
async def test_expired_entry_is_recomputed(clock):
    """Test an entry is not served at or after its expiry time."""
    cache = ResultCache(clock=clock)
    compute = CountingCompute()

    await cache.get("key", compute, ttl=10)
    clock.advance(10)  # now == expires_at
    value = await cache.get("key", compute, ttl=10)

    assert value == "computed-2"
    assert compute.calls == 2


@pytest.mark.asyncio
async def test_entry_served_just_before_expiry(clock):
    """Test an entry is still served right before it expires."""
    cache = ResultCache(clock=clock)
    compute = CountingCompute()

    await cache.get("key", compute, ttl=10)
    clock.advance(9.9)

    assert await cache.get("key", compute, ttl=10) == "computed-1"


def test_expiry_is_timestamp_plus_ttl(clock):
    """Test entries record creation time and expiry."""
    cache = ResultCache(clock=clock, default_ttl=300)

    cache.set("key", "value")

    entry = cache._entries["key"]
    assert entry.timestamp == 1000.0
    assert entry.expires_at == entry.timestamp + 300


@pytest.mark.asyncio
async def test_failed_compute_is_not_cached(clock):
    """Test exceptions propagate and leave no entry behind."""
    cache = ResultCache(clock=clock)

    async def failing():
        raise RuntimeError("worker down")

    with pytest.raises(RuntimeError, match="worker down"):
        await cache.get("key", failing)

    assert "key" not in cache
    assert len(cache) == 0
    assert await cache.get("key", CountingCompute()) == "computed-1"


@pytest.mark.asyncio
async def test_size_bound_evicts_oldest_by_creation(clock):
    """Test inserting max_size + 1 keys evicts only the oldest entry."""
    cache = ResultCache(max_size=3, clock=clock)

    for key in ["a", "b", "c", "d"]:
        await cache.get(key, CountingCompute(key))
        clock.advance(1)

    assert len(cache) == 3
    assert cache.keys() == ["b", "c", "d"]


@pytest.mark.asyncio
async def test_eviction_ignores_recent_reads(clock):
    """Test eviction is by creation time, not by last access."""
    cache = ResultCache(max_size=2, clock=clock)
    await cache.get("a", CountingCompute())
    clock.advance(1)
    await cache.get("b", CountingCompute())
    clock.advance(1)

    await cache.get("a", CountingCompute())  # hit, does not refresh "a"
    await cache.get("c", CountingCompute())

    assert sorted(cache.keys()) == ["b", "c"]


def test_invalidate_and_clear(clock):
    """Test explicit eviction helpers."""
    cache = ResultCache(clock=clock)
    cache.set("validation:readability:1", [])
    cache.set("validation:content_structure:2", [])
    cache.set("docs:intro", "text")

    cache.invalidate("docs:intro")
    cache.invalidate("missing")
    assert sorted(cache.keys()) == ["validation:content_structure:2", "validation:readability:1"]

    cache.clear()
    assert len(cache) == 0


def test_invalidate_pattern(clock):
    """Test keys matching a regex are removed and counted."""
    cache = ResultCache(clock=clock)
    cache.set("validation:readability:1", [])
    cache.set("validation:readability:2", [])
    cache.set("docs:validation", "text")

    removed = cache.invalidate_pattern(r"^validation:")

    assert removed == 2
    assert cache.keys() == ["docs:validation"]


@pytest.mark.asyncio
async def test_warmup_populates_keys(clock):
    """Test warmup fetches every key once."""
    cache = ResultCache(clock=clock)
    fetched = []

    async def fetch(key):
        fetched.append(key)
        return key.upper()

    await cache.warmup(["x", "y"], fetch)
    await cache.warmup(["x", "y"], fetch)

    assert sorted(fetched) == ["x", "y"]
    assert await cache.get("x", CountingCompute()) == "X"


@pytest.mark.asyncio
async def test_concurrent_clear_during_compute(clock):
    """Test clearing while a compute is suspended does not break the get."""
    cache = ResultCache(clock=clock)
    release = asyncio.Event()

    async def slow():
        await release.wait()
        return "late"

    task = asyncio.create_task(cache.get("key", slow))
    await asyncio.sleep(0)
    cache.clear()
    release.set()

    assert await task == "late"
    assert "key" in cache
