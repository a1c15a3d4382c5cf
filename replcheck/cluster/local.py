"""
In-process cluster harness.

Starts ``node_count`` websocket nodes sharing one metadata keyspace, writes
the bootstrap range with a single replica, and then up-replicates every range
by one replica per ``replication_interval`` until each one holds the target
factor. Lifecycle and replication progress are published as ``ClusterEvent``s
on a bounded queue.
"""

import asyncio
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from ..client.endpoint import ADMIN_PRINCIPAL, build_endpoint
from ..core.keys import KEY_MAX, KEY_MIN, range_meta_key
from ..core.model import (
    ClusterEvent,
    ClusterEventType,
    RangeDescriptor,
    ReplicaDescriptor,
)
from ..core.serialization import DescriptorCodec
from ..core.target import DEFAULT_DESIRED_FACTOR, resolve_target_factor
from ..datastructures.type_aliases import (
    DurationSeconds,
    EndpointURL,
    HostAddress,
    NodeAddress,
    NodeCount,
    NodeIndex,
    Principal,
    RawKey,
    ReplicationFactor,
)
from .meta_store import MetaStore
from .node import StoreNode

DEFAULT_EVENT_BUFFER = 10


@dataclass(slots=True)
class LocalCluster:
    node_count: NodeCount
    host: HostAddress = "127.0.0.1"
    admin_principal: Principal = ADMIN_PRINCIPAL
    replication_interval: DurationSeconds = 1.0
    desired_factor: ReplicationFactor = DEFAULT_DESIRED_FACTOR
    split_keys: tuple[RawKey, ...] = ()
    event_buffer: int = DEFAULT_EVENT_BUFFER

    events: asyncio.Queue[ClusterEvent] = field(init=False)
    nodes: list[StoreNode] = field(default_factory=list, init=False)
    store: MetaStore = field(default_factory=MetaStore, init=False)
    codec: DescriptorCodec = field(default_factory=DescriptorCodec, init=False)
    events_dropped: int = field(default=0, init=False)
    _certs_dir: Path | None = field(default=None, init=False)
    _replicator: asyncio.Task[None] | None = field(default=None, init=False)
    _started: bool = field(default=False, init=False)
    _stopped: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        if self.node_count < 1:
            raise ValueError(f"cluster needs at least one node, got {self.node_count}")
        if any(not key for key in self.split_keys):
            raise ValueError("split keys must be non-empty")
        self.split_keys = tuple(sorted(set(self.split_keys)))
        self.events = asyncio.Queue(maxsize=self.event_buffer)

    @classmethod
    def create(cls, node_count: NodeCount, **kwargs) -> "LocalCluster":
        return cls(node_count=node_count, **kwargs)

    @property
    def scheme(self) -> str:
        # Local nodes listen without TLS.
        return "http"

    @property
    def certs_dir(self) -> Path:
        if self._certs_dir is None:
            raise RuntimeError("cluster has not been started")
        return self._certs_dir

    @property
    def node_addresses(self) -> list[NodeAddress]:
        return [node.address for node in self.nodes]

    @property
    def target_factor(self) -> ReplicationFactor:
        return resolve_target_factor(self.node_count, self.desired_factor)

    def endpoint(
        self, node_index: NodeIndex, principal: Principal | None = None
    ) -> EndpointURL:
        return build_endpoint(
            self.nodes[node_index].address,
            self.certs_dir,
            principal=principal or self.admin_principal,
            scheme=self.scheme,
        )

    async def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._certs_dir = Path(tempfile.mkdtemp(prefix="replcheck_certs_"))

        for index in range(self.node_count):
            node = StoreNode(
                node_id=index + 1,
                store=self.store,
                host=self.host,
                admin_principal=self.admin_principal,
            )
            await node.start()
            self.nodes.append(node)
            self._publish(
                ClusterEvent(
                    ClusterEventType.NODE_STARTED, index, detail=node.address
                )
            )

        self._bootstrap()
        self._replicator = asyncio.create_task(
            self._replicate(), name="local-cluster-replicator"
        )
        logger.info(
            "Started local cluster of {} nodes: {}",
            self.node_count,
            ", ".join(self.node_addresses),
        )

    async def stop(self) -> None:
        """Stop every node and release the certificates directory. Idempotent."""
        if not self._started or self._stopped:
            return
        self._stopped = True

        if self._replicator is not None and not self._replicator.done():
            self._replicator.cancel()
            try:
                await self._replicator
            except asyncio.CancelledError:
                pass

        for index, node in enumerate(self.nodes):
            await node.stop()
            self._publish(ClusterEvent(ClusterEventType.NODE_STOPPED, index))

        if self._certs_dir is not None:
            shutil.rmtree(self._certs_dir, ignore_errors=True)
        logger.info("Stopped local cluster")

    def descriptors(self) -> list[RangeDescriptor]:
        """Current range descriptors in keyspace order."""
        boundaries = [KEY_MIN, *self.split_keys, KEY_MAX]
        descriptors = []
        for end_key in boundaries[1:]:
            value = self.store.get(range_meta_key(end_key))
            if value is not None:
                descriptors.append(self.codec.decode(range_meta_key(end_key), value))
        return descriptors

    def _bootstrap(self) -> None:
        # The first node bootstraps every range with itself as the only replica.
        boundaries = [KEY_MIN, *self.split_keys, KEY_MAX]
        for range_id, (start_key, end_key) in enumerate(
            zip(boundaries, boundaries[1:]), start=1
        ):
            self._write(
                RangeDescriptor(
                    range_id=range_id,
                    start_key=start_key,
                    end_key=end_key,
                    replicas=(ReplicaDescriptor(node_id=1, store_id=1),),
                )
            )

    def _write(self, descriptor: RangeDescriptor) -> None:
        self.store.put(range_meta_key(descriptor.end_key), self.codec.encode(descriptor))

    async def _replicate(self) -> None:
        target = self.target_factor
        while True:
            await asyncio.sleep(self.replication_interval)
            pending = [d for d in self.descriptors() if d.replica_count < target]
            if not pending:
                logger.debug("All ranges hold {} replicas", target)
                return
            for descriptor in pending:
                self._add_replica(descriptor)

    def _add_replica(self, descriptor: RangeDescriptor) -> None:
        held = {replica.node_id for replica in descriptor.replicas}
        node_id = next(
            node.node_id for node in self.nodes if node.node_id not in held
        )
        updated = descriptor.model_copy(
            update={
                "replicas": (
                    *descriptor.replicas,
                    ReplicaDescriptor(node_id=node_id, store_id=node_id),
                )
            }
        )
        self._write(updated)
        self._publish(
            ClusterEvent(
                ClusterEventType.REPLICA_ADDED,
                node_id - 1,
                detail=f"range={updated.range_id} replicas={updated.replica_count}",
            )
        )

    def _publish(self, event: ClusterEvent) -> None:
        try:
            self.events.put_nowait(event)
        except asyncio.QueueFull:
            self.events_dropped += 1
            # Nobody drains the queue once the check is over.
            log = logger.debug if self._stopped else logger.warning
            log("Event queue full, dropping {}", event)
