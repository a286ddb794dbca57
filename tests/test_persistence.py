from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
import redis

from kegscale.exceptions import PersistenceFailure
from kegscale.models.measurement import Measurement
from kegscale.persistence import InMemoryStore, MeasurementStore, NullStore, RedisStore
from kegscale.persistence.redis_store import ACTIVE_KEG_KEY, MEASUREMENT_LIST_KEY


class _FakePipeline:
    """Queues commands and applies them together on ``execute``."""

    def __init__(self, client: _FakeRedis, transaction: bool) -> None:
        self._client = client
        self.transaction = transaction
        self._queued: list[tuple[str, tuple[Any, ...]]] = []

    def __enter__(self) -> _FakePipeline:
        return self

    def __exit__(self, *exc: Any) -> None:
        self._queued.clear()

    def rpush(self, *args: Any) -> _FakePipeline:
        self._queued.append(("rpush", args))
        return self

    def ltrim(self, *args: Any) -> _FakePipeline:
        self._queued.append(("ltrim", args))
        return self

    def execute(self) -> list[Any]:
        self._client._check()
        self._client.executed.append([name for name, _ in self._queued])
        results = [getattr(self._client, name)(*args) for name, args in self._queued]
        self._queued.clear()
        return results


class _FakeRedis:
    """Just enough of the redis-py API for RedisStore (decode_responses=True)."""

    def __init__(self) -> None:
        self.lists: dict[str, list[str]] = {}
        self.values: dict[str, str] = {}
        self.fail = False
        self.executed: list[list[str]] = []
        self.pipelines: list[_FakePipeline] = []

    def _check(self) -> None:
        if self.fail:
            raise redis.ConnectionError("connection refused")

    def pipeline(self, transaction: bool = True) -> _FakePipeline:
        pipe = _FakePipeline(self, transaction)
        self.pipelines.append(pipe)
        return pipe

    def rpush(self, key: str, value: str) -> int:
        self._check()
        self.lists.setdefault(key, []).append(value)
        return len(self.lists[key])

    def ltrim(self, key: str, start: int, end: int) -> bool:
        self._check()
        items = self.lists.get(key, [])
        stop = None if end == -1 else end + 1
        self.lists[key] = items[start:stop]
        return True

    def lrange(self, key: str, start: int, end: int) -> list[str]:
        self._check()
        items = self.lists.get(key, [])
        stop = None if end == -1 else end + 1
        return items[start:stop]

    def set(self, key: str, value: Any) -> bool:
        self._check()
        self.values[key] = str(value)
        return True

    def get(self, key: str) -> str | None:
        self._check()
        return self.values.get(key)


def _measurement(i: int) -> Measurement:
    return Measurement(
        slot_index=i % 3,
        weight=20000.0 + i,
        recorded_at=datetime(2026, 1, 1, tzinfo=UTC) + timedelta(seconds=i),
        sequence=i + 1,
    )


def test_stores_satisfy_protocol() -> None:
    assert isinstance(InMemoryStore(), MeasurementStore)
    assert isinstance(NullStore(), MeasurementStore)
    assert isinstance(RedisStore(_FakeRedis()), MeasurementStore)


def test_in_memory_store_keeps_bounded_window() -> None:
    store = InMemoryStore(retention=3)
    for i in range(5):
        store.save_measurement(_measurement(i))

    assert [m.weight for m in store.load_recent_measurements()] == [20002.0, 20003.0, 20004.0]
    assert store.load_active_keg() is None
    store.save_active_keg(30)
    assert store.load_active_keg() == 30


def test_null_store_forgets() -> None:
    store = NullStore()
    store.save_measurement(_measurement(0))
    store.save_active_keg(50)

    assert store.load_recent_measurements() == []
    assert store.load_active_keg() is None


def test_redis_store_round_trip_oldest_first_with_retention() -> None:
    client = _FakeRedis()
    store = RedisStore(client, retention=3)
    for i in range(5):
        store.save_measurement(_measurement(i))

    loaded = store.load_recent_measurements()

    assert len(client.lists[MEASUREMENT_LIST_KEY]) == 3
    assert loaded == [_measurement(2), _measurement(3), _measurement(4)]


def test_redis_store_active_keg() -> None:
    client = _FakeRedis()
    store = RedisStore(client)

    assert store.load_active_keg() is None
    store.save_active_keg(20)
    assert client.values[ACTIVE_KEG_KEY] == "20"
    assert store.load_active_keg() == 20


def test_redis_errors_become_persistence_failures() -> None:
    client = _FakeRedis()
    client.fail = True
    store = RedisStore(client)

    with pytest.raises(PersistenceFailure) as exc_info:
        store.save_measurement(_measurement(0))
    assert exc_info.value.operation == "save_measurement"
    with pytest.raises(PersistenceFailure):
        store.load_recent_measurements()
    with pytest.raises(PersistenceFailure):
        store.save_active_keg(1)
    with pytest.raises(PersistenceFailure):
        store.load_active_keg()


def test_redis_unreadable_entries_raise() -> None:
    client = _FakeRedis()
    client.lists[MEASUREMENT_LIST_KEY] = ["not json"]
    client.values[ACTIVE_KEG_KEY] = "big"
    store = RedisStore(client)

    with pytest.raises(PersistenceFailure):
        store.load_recent_measurements()
    with pytest.raises(PersistenceFailure):
        store.load_active_keg()


def test_redis_store_appends_and_trims_in_one_transaction() -> None:
    client = _FakeRedis()
    store = RedisStore(client, retention=2)

    store.save_measurement(_measurement(0))

    assert [pipe.transaction for pipe in client.pipelines] == [True]
    assert client.executed == [["rpush", "ltrim"]]


def test_redis_failed_transaction_leaves_list_untouched() -> None:
    client = _FakeRedis()
    store = RedisStore(client, retention=2)
    store.save_measurement(_measurement(0))
    client.fail = True

    with pytest.raises(PersistenceFailure):
        store.save_measurement(_measurement(1))

    client.fail = False
    assert store.load_recent_measurements() == [_measurement(0)]
