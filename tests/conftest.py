"""Pytest configuration and fixtures for replcheck testing.

The fixtures here stand in for the two external capabilities the checker
consumes: a store client that returns scripted scan results, and a cluster
event queue the tests can feed by hand.
"""

import asyncio
from collections.abc import AsyncGenerator, Iterable, Sequence

import pytest
import pytest_asyncio

from replcheck.cluster.local import LocalCluster
from replcheck.core.keys import KEY_MAX, range_meta_key
from replcheck.core.model import (
    ClusterEvent,
    RangeDescriptor,
    ReplicaDescriptor,
    ScanRow,
)
from replcheck.core.serialization import DescriptorCodec

codec = DescriptorCodec()


def descriptor_row(
    start_key: bytes = b"",
    end_key: bytes = KEY_MAX,
    replicas: int = 1,
    range_id: int = 1,
) -> ScanRow:
    """Metadata row for a range holding ``replicas`` copies on nodes 1..N."""
    descriptor = RangeDescriptor(
        range_id=range_id,
        start_key=start_key,
        end_key=end_key,
        replicas=tuple(
            ReplicaDescriptor(node_id=n, store_id=n) for n in range(1, replicas + 1)
        ),
    )
    return ScanRow(key=range_meta_key(end_key), value=codec.encode(descriptor))


def bootstrap_rows(replicas: int) -> list[ScanRow]:
    return [descriptor_row(replicas=replicas)]


class ScriptedStoreClient:
    """Store client returning one scripted response per scan.

    Each script entry is either a list of rows or an exception to raise. The
    last entry repeats once the script runs out.
    """

    def __init__(self, script: Iterable[Sequence[ScanRow] | BaseException]) -> None:
        self.script = list(script)
        if not self.script:
            raise ValueError("script needs at least one entry")
        self.scans: list[tuple[bytes, bytes, int]] = []
        self.closed = False

    async def scan(self, start_key: bytes, end_key: bytes, limit: int) -> list[ScanRow]:
        self.scans.append((start_key, end_key, limit))
        index = min(len(self.scans), len(self.script)) - 1
        entry = self.script[index]
        if isinstance(entry, BaseException):
            raise entry
        return list(entry)[:limit]

    async def close(self) -> None:
        self.closed = True


def replica_script(*counts: int) -> ScriptedStoreClient:
    return ScriptedStoreClient([bootstrap_rows(count) for count in counts])


@pytest.fixture
def event_queue() -> asyncio.Queue[ClusterEvent]:
    return asyncio.Queue(maxsize=10)


@pytest_asyncio.fixture
async def local_cluster_factory() -> AsyncGenerator:
    """Build local clusters that are always stopped after the test."""
    clusters: list[LocalCluster] = []

    async def _create(node_count: int, **kwargs) -> LocalCluster:
        kwargs.setdefault("replication_interval", 0.05)
        cluster = LocalCluster.create(node_count, **kwargs)
        clusters.append(cluster)
        await cluster.start()
        return cluster

    yield _create

    for cluster in clusters:
        await cluster.stop()
