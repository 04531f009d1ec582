from __future__ import annotations

import asyncio

from credential_dashboard.models.snapshot import Severity
from credential_dashboard.services.aggregator import build_snapshot
from credential_dashboard.services.snapshot_store import (
    InMemorySnapshotStore,
    RedisSnapshotStore,
    dump_snapshot,
    load_snapshot,
)
from tests.conftest import NOW, days_ago, make_credential, make_event


class _FakeRedis:
    """Just enough of redis.asyncio.Redis for the snapshot store."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value


def _sample_snapshot():
    return build_snapshot(
        [make_credential("1", issued_at=days_ago(1), institution_id="A")],
        [
            make_event("e1", "verified", created_at=days_ago(0)),
            make_event("e2", "issued", created_at=days_ago(1), metadata={"degree": "MSc"}),
        ],
        now=NOW,
    )


def test_in_memory_store_starts_empty_and_replaces() -> None:
    store = InMemorySnapshotStore()
    assert asyncio.run(store.latest()) is None

    first = build_snapshot([], [], now=NOW)
    second = _sample_snapshot()
    asyncio.run(store.publish(first))
    asyncio.run(store.publish(second))

    assert asyncio.run(store.latest()) is second


def test_serialized_snapshot_restores_equal_value() -> None:
    snapshot = _sample_snapshot()
    restored = load_snapshot(dump_snapshot(snapshot))

    assert restored == snapshot
    assert isinstance(restored.weekly_data, tuple)
    assert restored.recent_notifications[0].severity is Severity.SUCCESS
    assert restored.generated_at == NOW


def test_redis_store_publishes_under_single_key() -> None:
    redis = _FakeRedis()
    store = RedisSnapshotStore(redis)
    assert asyncio.run(store.latest()) is None

    asyncio.run(store.publish(build_snapshot([], [], now=NOW)))
    asyncio.run(store.publish(_sample_snapshot()))

    assert list(redis.data) == ["dashboard:snapshot"]
    latest = asyncio.run(store.latest())
    assert latest is not None
    assert latest.total_credentials == 1
