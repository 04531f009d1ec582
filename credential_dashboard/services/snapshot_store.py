"""Latest-snapshot store: where a refresh publishes and the API reads.

The store holds exactly one value, the most recently published
DashboardSnapshot.  Publishing replaces it in a single operation, so a
reader sees either the previous snapshot or the new one, never a mix.

Snapshots carry no TTL.  While the data source is down, refreshes stop
publishing and the last good snapshot must stay visible.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import TypeAdapter

from credential_dashboard.db.redis import redis_pool
from credential_dashboard.models.snapshot import DashboardSnapshot

_SNAPSHOT_ADAPTER = TypeAdapter(DashboardSnapshot)


def dump_snapshot(snapshot: DashboardSnapshot) -> str:
    return _SNAPSHOT_ADAPTER.dump_json(snapshot).decode()


def load_snapshot(raw: str | bytes) -> DashboardSnapshot:
    return _SNAPSHOT_ADAPTER.validate_json(raw)


@runtime_checkable
class SnapshotStore(Protocol):
    async def publish(self, snapshot: DashboardSnapshot) -> None:
        """Replace the current snapshot."""
        ...

    async def latest(self) -> DashboardSnapshot | None:
        """The current snapshot, or None before the first publish."""
        ...


class InMemorySnapshotStore:
    """Process-local store, the default when Redis is not configured."""

    def __init__(self) -> None:
        self._snapshot: DashboardSnapshot | None = None

    async def publish(self, snapshot: DashboardSnapshot) -> None:
        self._snapshot = snapshot

    async def latest(self) -> DashboardSnapshot | None:
        return self._snapshot

    def clear(self) -> None:
        self._snapshot = None


class RedisSnapshotStore:
    """Redis-backed store, shared across API instances."""

    _KEY = "dashboard:snapshot"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def publish(self, snapshot: DashboardSnapshot) -> None:
        await self._redis.set(self._KEY, dump_snapshot(snapshot))

    async def latest(self) -> DashboardSnapshot | None:
        raw = await self._redis.get(self._KEY)
        if raw is None:
            return None
        return load_snapshot(raw)


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

if redis_pool is not None:
    snapshot_store: SnapshotStore = RedisSnapshotStore(redis_pool)
else:
    snapshot_store = InMemorySnapshotStore()
