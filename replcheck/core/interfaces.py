"""
Capability boundaries the checker consumes.

The checker never provisions nodes or speaks a transport itself. It is given
a store client that can scan a key span and, optionally, a cluster harness
that owns the node processes and publishes their events.
"""

import asyncio
from pathlib import Path
from typing import Protocol

from ..datastructures.type_aliases import (
    EndpointURL,
    NodeAddress,
    NodeIndex,
    Principal,
    RawKey,
    RowLimit,
)
from .model import ClusterEvent, ScanRow


class StoreClient(Protocol):
    """Read-only access to an ordered key span of the store."""

    async def scan(
        self, start_key: RawKey, end_key: RawKey, limit: RowLimit
    ) -> list[ScanRow]: ...

    async def close(self) -> None: ...


class ClusterHarness(Protocol):
    """Lifecycle owner of a set of storage nodes."""

    events: asyncio.Queue[ClusterEvent]

    @property
    def node_addresses(self) -> list[NodeAddress]: ...

    @property
    def certs_dir(self) -> Path: ...

    @property
    def scheme(self) -> str: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    def endpoint(self, node_index: NodeIndex, principal: Principal) -> EndpointURL: ...
