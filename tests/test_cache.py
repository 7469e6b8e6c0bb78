"""Tests for the JSON response cache."""

import asyncio
import json

import pytest

from lingqsync.cache import JsonCache, cached, cached_opt
from lingqsync.models import lingqs_from_json, lingqs_to_json

from conftest import make_lingq


class Producer:
    """Counts calls and returns (or raises) a configured result."""

    def __init__(self, value=None, error=None, delay=0.0):
        self.value = value
        self.error = error
        self.delay = delay
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.value


@pytest.mark.asyncio
async def test_hit_does_not_run_producer(tmp_path):
    path = tmp_path / "lessons.json"
    path.write_text(json.dumps({"from": "disk"}), encoding="utf-8")
    producer = Producer({"from": "network"})

    assert await cached(path, producer) == {"from": "disk"}
    assert producer.calls == 0


@pytest.mark.asyncio
async def test_miss_runs_producer_and_persists(tmp_path):
    path = tmp_path / "nested" / "lessons.json"
    producer = Producer([1, 2, 3])

    assert await cached(path, producer) == [1, 2, 3]
    assert producer.calls == 1
    assert json.loads(path.read_text(encoding="utf-8")) == [1, 2, 3]


@pytest.mark.asyncio
async def test_corrupt_file_is_a_miss(tmp_path):
    path = tmp_path / "lessons.json"
    path.write_text("{not json", encoding="utf-8")
    producer = Producer({"fresh": True})

    assert await cached(path, producer) == {"fresh": True}
    assert json.loads(path.read_text(encoding="utf-8")) == {"fresh": True}


@pytest.mark.asyncio
async def test_undecodable_file_is_a_miss(tmp_path):
    path = tmp_path / "lesson-1.json"
    path.write_text(json.dumps([{"unexpected": "shape"}]), encoding="utf-8")
    producer = Producer([make_lingq(1)])

    value = await cached(path, producer, decode=lingqs_from_json, encode=lingqs_to_json)

    assert producer.calls == 1
    assert value == [make_lingq(1)]


@pytest.mark.asyncio
async def test_refresh_ignores_file(tmp_path):
    path = tmp_path / "lessons.json"
    path.write_text(json.dumps("old"), encoding="utf-8")
    producer = Producer("new")

    assert await cached(path, producer, refresh=True) == "new"
    assert json.loads(path.read_text(encoding="utf-8")) == "new"


@pytest.mark.asyncio
async def test_failed_refresh_keeps_old_file(tmp_path):
    path = tmp_path / "lessons.json"
    path.write_text(json.dumps("old"), encoding="utf-8")
    producer = Producer(error=RuntimeError("offline"))

    with pytest.raises(RuntimeError):
        await cached(path, producer, refresh=True)
    assert json.loads(path.read_text(encoding="utf-8")) == "old"


@pytest.mark.asyncio
async def test_typed_round_trip(tmp_path):
    path = tmp_path / "lesson-9.json"
    lingqs = [
        make_lingq(1, status=3, extended_status=3, tags=["Grammar"]),
        make_lingq(2, hints=["dog", "hound"]),
    ]
    await cached(path, Producer(lingqs), decode=lingqs_from_json, encode=lingqs_to_json)

    again = Producer([])
    loaded = await cached(path, again, decode=lingqs_from_json, encode=lingqs_to_json)
    assert again.calls == 0
    assert loaded == lingqs


@pytest.mark.asyncio
async def test_opt_gate_closed_touches_nothing(tmp_path):
    path = tmp_path / "lesson-1.json"
    producer = Producer([1])

    assert await cached_opt(path, producer, should_run=False) is None
    assert producer.calls == 0
    assert not path.exists()

    assert await cached_opt(path, producer, should_run=True) == [1]
    assert producer.calls == 1


@pytest.mark.asyncio
async def test_json_cache_keeps_value_in_memory(tmp_path):
    cache = JsonCache(tmp_path)
    producer = Producer(["a"])

    assert await cache.get_or_fetch("lessons", producer) == ["a"]
    (tmp_path / "lessons.json").write_text(json.dumps(["changed on disk"]), encoding="utf-8")
    assert await cache.get_or_fetch("lessons", producer) == ["a"]
    assert producer.calls == 1
    assert cache.peek("lessons") == ["a"]


@pytest.mark.asyncio
async def test_json_cache_reads_existing_file(tmp_path):
    (tmp_path / "lesson-3.json").write_text(json.dumps([3]), encoding="utf-8")
    cache = JsonCache(tmp_path)
    producer = Producer([99])

    assert await cache.get_or_fetch("lesson-3", producer) == [3]
    assert producer.calls == 0


@pytest.mark.asyncio
async def test_invalidate_fetches_again_and_keeps_file_until_then(tmp_path):
    cache = JsonCache(tmp_path)
    await cache.get_or_fetch("lessons", Producer(["v1"]))

    cache.invalidate("lessons")
    assert cache.peek("lessons") is None
    assert json.loads((tmp_path / "lessons.json").read_text(encoding="utf-8")) == ["v1"]

    producer = Producer(["v2"])
    assert await cache.get_or_fetch("lessons", producer) == ["v2"]
    assert producer.calls == 1
    assert json.loads((tmp_path / "lessons.json").read_text(encoding="utf-8")) == ["v2"]


@pytest.mark.asyncio
async def test_force_refresh(tmp_path):
    cache = JsonCache(tmp_path)
    await cache.get_or_fetch("lessons", Producer(["v1"]))

    assert await cache.force_refresh("lessons", Producer(["v2"])) == ["v2"]
    assert cache.peek("lessons") == ["v2"]


@pytest.mark.asyncio
async def test_failed_fetch_is_retried_on_next_access(tmp_path):
    cache = JsonCache(tmp_path)
    with pytest.raises(RuntimeError):
        await cache.get_or_fetch("lessons", Producer(error=RuntimeError("offline")))

    producer = Producer(["ok"])
    assert await cache.get_or_fetch("lessons", producer) == ["ok"]
    assert producer.calls == 1


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_fetch(tmp_path):
    cache = JsonCache(tmp_path)
    producer = Producer(["shared"], delay=0.05)

    results = await asyncio.gather(
        cache.get_or_fetch("lessons", producer),
        cache.get_or_fetch("lessons", producer),
        cache.force_refresh("lessons", producer),
    )

    assert results == [["shared"]] * 3
    assert producer.calls == 1
    assert not cache.is_loading("lessons")


@pytest.mark.asyncio
async def test_opt_variant_on_json_cache(tmp_path):
    cache = JsonCache(tmp_path)
    producer = Producer([1])

    assert await cache.get_or_fetch_opt("lesson-1", producer, should_run=False) is None
    assert producer.calls == 0
    assert await cache.get_or_fetch_opt("lesson-1", producer, should_run=True) == [1]


def test_key_to_file_name(tmp_path):
    cache = JsonCache(tmp_path)
    assert cache.path_for("lesson-12") == tmp_path / "lesson-12.json"
    assert cache.path_for("../etc/passwd") == tmp_path / "etc_passwd.json"
