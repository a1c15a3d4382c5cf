"""
Range replication acceptance check.

Talks to one node of a running cluster as the administrative principal,
works out how many replicas the bootstrap range should end up with, and polls
until it does. Connection problems surface as ``SetupError`` before any
polling starts.
"""

import asyncio

from loguru import logger

from .client.endpoint import build_endpoint
from .client.store_client import connect
from .cluster.local import LocalCluster
from .core.cancellation import CancellationToken
from .core.config import CheckSettings
from .core.interfaces import ClusterHarness, StoreClient
from .core.model import ClusterEvent
from .core.poller import ConvergencePoller, ConvergenceReport
from .core.progress import ProgressReporter, SilentProgress
from .core.target import resolve_target_factor
from .datastructures.type_aliases import EndpointURL, NodeCount


async def poll_for_convergence(
    client: StoreClient,
    node_count: NodeCount,
    settings: CheckSettings,
    *,
    cancel: CancellationToken,
    events: asyncio.Queue[ClusterEvent] | None = None,
    progress: ProgressReporter | None = None,
) -> ConvergenceReport:
    target = resolve_target_factor(node_count, settings.desired_factor)
    logger.info("waiting for first range to have {} replicas", target)

    poller = ConvergencePoller(
        client=client,
        target_factor=target,
        max_attempts=settings.max_attempts,
        cancel=cancel,
        tick_interval=settings.tick_interval,
        events=events,
        row_limit=settings.row_limit,
        progress=progress or SilentProgress(),
        missing_range_is_transient=settings.missing_range_is_transient,
    )
    return await poller.run()


async def check_range_replication(
    cluster: ClusterHarness,
    settings: CheckSettings,
    *,
    cancel: CancellationToken,
    progress: ProgressReporter | None = None,
) -> ConvergenceReport:
    """Check a harness-managed cluster, draining its event stream while polling."""
    addresses = cluster.node_addresses
    if not 0 <= settings.target_node < len(addresses):
        raise ValueError(
            f"target node {settings.target_node} is outside a "
            f"{len(addresses)}-node cluster"
        )
    endpoint = build_endpoint(
        addresses[settings.target_node],
        cluster.certs_dir,
        principal=settings.admin_principal,
        scheme=settings.scheme or cluster.scheme,
    )

    client = await connect(endpoint, request_timeout=settings.request_timeout)
    try:
        return await poll_for_convergence(
            client,
            len(addresses),
            settings,
            cancel=cancel,
            events=cluster.events,
            progress=progress,
        )
    finally:
        await client.close()


async def check_endpoint_replication(
    endpoint: EndpointURL,
    node_count: NodeCount,
    settings: CheckSettings,
    *,
    cancel: CancellationToken,
    progress: ProgressReporter | None = None,
) -> ConvergenceReport:
    """Check an externally managed cluster reachable at ``endpoint``."""
    client = await connect(endpoint, request_timeout=settings.request_timeout)
    try:
        return await poll_for_convergence(
            client, node_count, settings, cancel=cancel, progress=progress
        )
    finally:
        await client.close()


async def run_local_check(
    settings: CheckSettings,
    *,
    cancel: CancellationToken,
    progress: ProgressReporter | None = None,
) -> ConvergenceReport:
    """Bring up a local cluster, check it, and always tear it down."""
    cluster = LocalCluster.create(
        settings.node_count,
        admin_principal=settings.admin_principal,
        replication_interval=settings.replication_interval,
        desired_factor=settings.desired_factor,
        event_buffer=settings.event_buffer,
    )
    try:
        await cluster.start()
        return await check_range_replication(
            cluster, settings, cancel=cancel, progress=progress
        )
    finally:
        await cluster.stop()
