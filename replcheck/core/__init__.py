"""
Core of the range replication check: data model, error taxonomy, the
bootstrap range extractor, the target factor resolver and the convergence
poller. Nothing in here opens sockets or starts nodes.
"""

from .cancellation import CancellationToken
from .config import CheckSettings
from .errors import (
    BootstrapRangeNotFound,
    ConvergenceTimeout,
    DecodeError,
    Interrupted,
    ReplicationCheckError,
    SetupError,
    TransportError,
    is_structural,
)
from .extractor import count_bootstrap_replicas, find_bootstrap_descriptor
from .model import (
    ClusterEvent,
    ClusterEventType,
    Converged,
    ExtractionFailed,
    Mismatch,
    RangeDescriptor,
    ReplicaDescriptor,
    ScanRow,
)
from .poller import ConvergencePoller, ConvergenceReport
from .serialization import DescriptorCodec, JsonSerializer
from .target import DEFAULT_DESIRED_FACTOR, resolve_target_factor

__all__ = [
    "BootstrapRangeNotFound",
    "CancellationToken",
    "CheckSettings",
    "ClusterEvent",
    "ClusterEventType",
    "Converged",
    "ConvergencePoller",
    "ConvergenceReport",
    "ConvergenceTimeout",
    "DEFAULT_DESIRED_FACTOR",
    "DecodeError",
    "DescriptorCodec",
    "ExtractionFailed",
    "Interrupted",
    "JsonSerializer",
    "Mismatch",
    "RangeDescriptor",
    "ReplicaDescriptor",
    "ReplicationCheckError",
    "ScanRow",
    "SetupError",
    "TransportError",
    "count_bootstrap_replicas",
    "find_bootstrap_descriptor",
    "is_structural",
    "resolve_target_factor",
]
