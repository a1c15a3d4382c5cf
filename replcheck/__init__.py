"""
replcheck - range replication acceptance check

Brings up (or attaches to) a cluster of storage nodes and verifies that the
bootstrap range converges to the target replication factor,
``min(3, node_count)``, within a bounded number of polls.

## Architecture

- **core**: data model, error taxonomy, extractor, target resolver, poller
- **client**: endpoint addressing and the websocket store client
- **cluster**: in-process local cluster harness
- **cli**: ``replcheck`` command line

## Quick Start

```python
from replcheck import CancellationToken, CheckSettings, run_local_check

report = await run_local_check(
    CheckSettings(node_count=3), cancel=CancellationToken()
)
```
"""

from .check import (
    check_endpoint_replication,
    check_range_replication,
    poll_for_convergence,
    run_local_check,
)
from .client import StoreEndpoint, WebSocketStoreClient, build_endpoint, connect
from .cluster import LocalCluster
from .core import (
    BootstrapRangeNotFound,
    CancellationToken,
    CheckSettings,
    ConvergencePoller,
    ConvergenceReport,
    ConvergenceTimeout,
    DecodeError,
    Interrupted,
    RangeDescriptor,
    ReplicationCheckError,
    ScanRow,
    SetupError,
    TransportError,
    count_bootstrap_replicas,
    resolve_target_factor,
)

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    "BootstrapRangeNotFound",
    "CancellationToken",
    "CheckSettings",
    "ConvergencePoller",
    "ConvergenceReport",
    "ConvergenceTimeout",
    "DecodeError",
    "Interrupted",
    "LocalCluster",
    "RangeDescriptor",
    "ReplicationCheckError",
    "ScanRow",
    "SetupError",
    "StoreEndpoint",
    "TransportError",
    "WebSocketStoreClient",
    "build_endpoint",
    "check_endpoint_replication",
    "check_range_replication",
    "connect",
    "count_bootstrap_replicas",
    "poll_for_convergence",
    "resolve_target_factor",
    "run_local_check",
]
