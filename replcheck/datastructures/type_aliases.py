"""
Semantic type aliases for replcheck.

Aliases keep signatures self-documenting: a raw ``int`` could be a node
index, a replica count or an attempt number, and the checker juggles all
three in the same loop.
"""

from typing import TypeAlias

# Time types
Timestamp: TypeAlias = float
DurationSeconds: TypeAlias = float

# Cluster topology types
NodeIndex: TypeAlias = int  # zero-based position in the harness node list
NodeId: TypeAlias = int  # store-assigned node identifier (1-based)
StoreId: TypeAlias = int
RangeId: TypeAlias = int
NodeCount: TypeAlias = int

# Network types
HostAddress: TypeAlias = str
PortNumber: TypeAlias = int
NodeAddress: TypeAlias = str  # "host:port"
EndpointURL: TypeAlias = str  # scheme://principal@host:port?certs=<dir>
Principal: TypeAlias = str

# Keyspace types
RawKey: TypeAlias = bytes
RawValue: TypeAlias = bytes

# Convergence types
ReplicaCount: TypeAlias = int
ReplicationFactor: TypeAlias = int
AttemptCount: TypeAlias = int
RowLimit: TypeAlias = int
RequestId: TypeAlias = str
