"""
Convergence polling for the bootstrap range.

Each attempt is a fixed-interval wait followed by one metadata scan. The wait
multiplexes three sources with strict priority:

1. cancellation, which ends the whole check with ``Interrupted``;
2. cluster events, which are logged and never consume an attempt;
3. the tick deadline, fixed when the wait begins.

A replica count below target is an expected transient state and only costs an
attempt. Decode failures, transport failures and a missing bootstrap range
abort immediately.
"""

import asyncio
import contextlib
from dataclasses import dataclass, field

from loguru import logger

from ..datastructures.type_aliases import (
    AttemptCount,
    DurationSeconds,
    ReplicaCount,
    ReplicationFactor,
    RowLimit,
)
from .cancellation import CancellationToken
from .errors import (
    BootstrapRangeNotFound,
    ConvergenceTimeout,
    DecodeError,
    Interrupted,
    TransportError,
)
from .extractor import count_bootstrap_replicas
from .interfaces import StoreClient
from .keys import meta_scan_span
from .model import ClusterEvent, Converged, ExtractionFailed, Mismatch, PollOutcome
from .progress import ProgressReporter, SilentProgress

DEFAULT_ROW_LIMIT: RowLimit = 10
DEFAULT_TICK_INTERVAL: DurationSeconds = 1.0


@dataclass(frozen=True, slots=True)
class ConvergenceReport:
    """Summary of a successful check."""

    target_factor: ReplicationFactor
    attempts: AttemptCount
    observed_counts: tuple[ReplicaCount, ...]
    elapsed: DurationSeconds

    @property
    def replica_count(self) -> ReplicaCount:
        return self.observed_counts[-1]


@dataclass(slots=True)
class ConvergencePoller:
    client: StoreClient
    target_factor: ReplicationFactor
    max_attempts: AttemptCount
    cancel: CancellationToken
    tick_interval: DurationSeconds = DEFAULT_TICK_INTERVAL
    events: asyncio.Queue[ClusterEvent] | None = None
    row_limit: RowLimit = DEFAULT_ROW_LIMIT
    progress: ProgressReporter = field(default_factory=SilentProgress)
    missing_range_is_transient: bool = False

    # Loop state; only ever touched by run().
    attempts: AttemptCount = field(default=0, init=False)
    events_seen: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {self.max_attempts}")
        if self.tick_interval <= 0:
            raise ValueError(
                f"tick_interval must be positive, got {self.tick_interval}"
            )

    async def run(self) -> ConvergenceReport:
        """Poll until convergence, raising on timeout, interrupt or breakage."""
        loop = asyncio.get_running_loop()
        started = loop.time()
        observed: list[ReplicaCount] = []
        last_observed: ReplicaCount | None = None

        self.attempts = 0
        try:
            while self.attempts < self.max_attempts:
                await self._wait_for_tick()

                outcome = await self.check_once()
                # A cancel that landed during the scan still wins over any result.
                self._raise_if_cancelled()

                if isinstance(outcome, ExtractionFailed):
                    logger.error("Range replication check aborted: {}", outcome.cause)
                    raise outcome.cause

                self.attempts += 1
                range_found = isinstance(outcome, Converged) or outcome.range_found
                self.progress.attempt(outcome.replica_count, range_found=range_found)

                if isinstance(outcome, Converged):
                    observed.append(outcome.replica_count)
                    self.progress.converged()
                    elapsed = loop.time() - started
                    logger.info(
                        "First range reached {} replicas after {} attempts ({:.2f}s)",
                        outcome.replica_count,
                        self.attempts,
                        elapsed,
                    )
                    return ConvergenceReport(
                        target_factor=self.target_factor,
                        attempts=self.attempts,
                        observed_counts=tuple(observed),
                        elapsed=elapsed,
                    )

                if range_found:
                    observed.append(outcome.replica_count)
                    last_observed = outcome.replica_count
                logger.debug(
                    "Attempt {}/{}: {} replicas, want {}",
                    self.attempts,
                    self.max_attempts,
                    outcome.replica_count,
                    self.target_factor,
                )
        finally:
            if self.attempts:
                self.progress.finished()

        raise ConvergenceTimeout(self.attempts, self.target_factor, last_observed)

    async def check_once(self) -> PollOutcome:
        """Scan the metadata span once and classify what it shows."""
        start_key, end_key = meta_scan_span()
        try:
            rows = await self.client.scan(start_key, end_key, self.row_limit)
            found = count_bootstrap_replicas(rows)
        except BootstrapRangeNotFound as e:
            if self.missing_range_is_transient:
                logger.debug("Bootstrap range not visible yet: {}", e)
                return Mismatch(replica_count=0, range_found=False)
            return ExtractionFailed(e)
        except (DecodeError, TransportError) as e:
            return ExtractionFailed(e)

        if found == self.target_factor:
            return Converged(found)
        return Mismatch(found)

    def _raise_if_cancelled(self) -> None:
        if self.cancel.cancelled:
            raise Interrupted(self.cancel.reason or "cancellation requested")

    async def _wait_for_tick(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.tick_interval
        while True:
            self._raise_if_cancelled()
            self._drain_pending_events()
            remaining = deadline - loop.time()
            if remaining <= 0:
                return
            await self._wait_for_wakeup(remaining)

    def _drain_pending_events(self) -> None:
        """Consume only the events already queued; never block."""
        if self.events is None:
            return
        for _ in range(self.events.qsize()):
            try:
                event = self.events.get_nowait()
            except asyncio.QueueEmpty:
                break
            self._record_event(event)

    def _record_event(self, event: ClusterEvent) -> None:
        self.events_seen += 1
        logger.debug("Cluster event: {}", event)

    async def _wait_for_wakeup(self, timeout: DurationSeconds) -> None:
        """Block until cancellation, the next event, or ``timeout``."""
        cancel_waiter = asyncio.create_task(self.cancel.wait())
        waiters: set[asyncio.Task] = {cancel_waiter}
        event_waiter: asyncio.Task[ClusterEvent] | None = None
        if self.events is not None:
            event_waiter = asyncio.create_task(self.events.get())
            waiters.add(event_waiter)

        try:
            await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()
            for waiter in waiters:
                with contextlib.suppress(asyncio.CancelledError):
                    await waiter

        if (
            event_waiter is not None
            and event_waiter.done()
            and not event_waiter.cancelled()
        ):
            self._record_event(event_waiter.result())
