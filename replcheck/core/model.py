import time
from typing import TypeAlias
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..datastructures.type_aliases import (
    NodeId,
    NodeIndex,
    RangeId,
    RawKey,
    RawValue,
    ReplicaCount,
    StoreId,
    Timestamp,
)
from .errors import ReplicationCheckError

# Raw keys are arbitrary bytes; carry them as base64 in JSON.
BYTES_AS_BASE64 = ConfigDict(
    frozen=True, ser_json_bytes="base64", val_json_bytes="base64"
)


class ReplicaDescriptor(BaseModel):
    """Placement of one copy of a range on a node's store."""

    model_config = BYTES_AS_BASE64

    node_id: NodeId = Field(description="Identifier of the node holding the copy.")
    store_id: StoreId = Field(description="Identifier of the store on that node.")


class RangeDescriptor(BaseModel):
    """
    Ownership/placement record for one contiguous key range.

    Produced by the store and read-only to the checker. An empty start key
    marks the bootstrap (first) range.
    """

    model_config = BYTES_AS_BASE64

    range_id: RangeId = Field(description="Store-assigned range identifier.")
    start_key: bytes = Field(description="Inclusive start of the range.")
    end_key: bytes = Field(description="Exclusive end of the range.")
    replicas: tuple[ReplicaDescriptor, ...] = Field(
        default_factory=tuple, description="Current replica placements."
    )

    @property
    def is_bootstrap(self) -> bool:
        return self.start_key == b""

    @property
    def replica_count(self) -> ReplicaCount:
        return len(self.replicas)


@dataclass(frozen=True, slots=True)
class ScanRow:
    """A key/opaque-value pair returned by a metadata scan."""

    key: RawKey
    value: RawValue


class ClusterEventType(Enum):
    """Asynchronous notifications emitted by a cluster harness."""

    NODE_STARTED = "node_started"
    NODE_STOPPED = "node_stopped"
    REPLICA_ADDED = "replica_added"


@dataclass(frozen=True, slots=True)
class ClusterEvent:
    """Event data for cluster state changes. Only ever logged."""

    event_type: ClusterEventType
    node_index: NodeIndex
    timestamp: Timestamp = field(default_factory=time.time)
    detail: str = ""

    def __str__(self) -> str:
        text = f"{self.event_type.value} node={self.node_index}"
        if self.detail:
            text += f" {self.detail}"
        return text


@dataclass(frozen=True, slots=True)
class Converged:
    """The observed replica count equals the target."""

    replica_count: ReplicaCount


@dataclass(frozen=True, slots=True)
class Mismatch:
    """The observed replica count is not the target yet.

    ``range_found`` is False only when a missing bootstrap range is being
    treated as a transient state.
    """

    replica_count: ReplicaCount
    range_found: bool = True


@dataclass(frozen=True, slots=True)
class ExtractionFailed:
    """The scan or the extraction failed structurally."""

    cause: ReplicationCheckError


PollOutcome: TypeAlias = Converged | Mismatch | ExtractionFailed
