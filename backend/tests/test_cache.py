import pytest

from app.services.cache import ReferenceCache, cache_key


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.mark.asyncio
async def test_get_or_load_reads_through_once():
    cache = ReferenceCache(ttl_seconds=60, clock=FakeClock())
    loads = []

    async def loader():
        loads.append(1)
        return ["GOVERNADOR"]

    assert await cache.get_or_load("offices", loader) == ["GOVERNADOR"]
    assert await cache.get_or_load("offices", loader) == ["GOVERNADOR"]
    assert len(loads) == 1


@pytest.mark.asyncio
async def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = ReferenceCache(ttl_seconds=60, clock=clock)
    cache.set("offices", ["SENADOR"])

    clock.now += 59
    assert cache.get("offices") == ["SENADOR"]

    clock.now += 1
    assert cache.get("offices") is None


def test_invalidate_single_key_and_everything():
    cache = ReferenceCache(ttl_seconds=60, clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)

    cache.invalidate("a")
    assert cache.get("a") is None
    assert cache.get("b") == 2

    cache.invalidate()
    assert cache.get("b") is None


def test_cached_values_are_copies():
    cache = ReferenceCache(ttl_seconds=60, clock=FakeClock())
    value = {"offices": ["SENADOR"]}
    cache.set("k", value)

    value["offices"].append("GOVERNADOR")
    cache.get("k")["offices"].append("PRESIDENTE")

    assert cache.get("k") == {"offices": ["SENADOR"]}


@pytest.mark.asyncio
async def test_zero_ttl_disables_caching():
    cache = ReferenceCache(ttl_seconds=0)
    loads = []

    async def loader():
        loads.append(1)
        return 42

    await cache.get_or_load("k", loader)
    await cache.get_or_load("k", loader)

    assert len(loads) == 2


@pytest.mark.asyncio
async def test_failed_load_is_not_cached():
    cache = ReferenceCache(ttl_seconds=60)

    async def failing():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await cache.get_or_load("k", failing)
    assert cache.get("k") is None


def test_cache_key_formats_missing_parts():
    assert cache_key("party_votes", 2022, None, 1392) == "party_votes|2022||1392"
