"""Shared datastructures and type aliases for replcheck."""

from .type_aliases import (
    AttemptCount,
    DurationSeconds,
    EndpointURL,
    HostAddress,
    NodeAddress,
    NodeCount,
    NodeId,
    NodeIndex,
    PortNumber,
    Principal,
    RangeId,
    RawKey,
    RawValue,
    ReplicaCount,
    ReplicationFactor,
    RequestId,
    RowLimit,
    StoreId,
    Timestamp,
)

__all__ = [
    "AttemptCount",
    "DurationSeconds",
    "EndpointURL",
    "HostAddress",
    "NodeAddress",
    "NodeCount",
    "NodeId",
    "NodeIndex",
    "PortNumber",
    "Principal",
    "RangeId",
    "RawKey",
    "RawValue",
    "ReplicaCount",
    "ReplicationFactor",
    "RequestId",
    "RowLimit",
    "StoreId",
    "Timestamp",
]
