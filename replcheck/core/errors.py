"""
Error taxonomy for the range replication check.

Structural failures (setup, transport, decode, missing bootstrap range) mean
the cluster cannot be evaluated at all; waiting longer will not help.
``ConvergenceTimeout`` and ``Interrupted`` are the two ways a healthy poll can
end without success, and callers must be able to tell them apart.
"""

from ..datastructures.type_aliases import (
    AttemptCount,
    RawKey,
    ReplicaCount,
    ReplicationFactor,
)


class ReplicationCheckError(Exception):
    """Base exception for every failure reported by the checker."""

    category = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.category}: {self.message}"


class SetupError(ReplicationCheckError):
    """Raised when the store client cannot connect or authenticate."""

    category = "setup error"


class TransportError(ReplicationCheckError):
    """Raised when a scan request fails in transit or is refused by the node."""

    category = "transport error"


class DecodeError(ReplicationCheckError):
    """Raised when a metadata row does not decode into a range descriptor."""

    category = "decode error"

    def __init__(self, key: RawKey, reason: str) -> None:
        super().__init__(f"row {key!r} is not a range descriptor: {reason}")
        self.key = key
        self.reason = reason


class BootstrapRangeNotFound(ReplicationCheckError):
    """Raised when no scanned row describes the range with an empty start key."""

    category = "bootstrap range not found"

    def __init__(self, rows_scanned: int) -> None:
        super().__init__(
            f"first range not found among {rows_scanned} metadata rows"
        )
        self.rows_scanned = rows_scanned


class ConvergenceTimeout(ReplicationCheckError):
    """Raised when the attempt budget runs out before the target is observed."""

    category = "convergence timeout"

    def __init__(
        self,
        attempts: AttemptCount,
        target_factor: ReplicationFactor,
        last_observed: ReplicaCount | None,
    ) -> None:
        observed = "nothing" if last_observed is None else str(last_observed)
        super().__init__(
            f"failed to replicate first range: wanted {target_factor} replicas, "
            f"last observed {observed} after {attempts} attempts"
        )
        self.attempts = attempts
        self.target_factor = target_factor
        self.last_observed = last_observed


class Interrupted(ReplicationCheckError):
    """Raised when the check is cancelled from outside."""

    category = "interrupted"

    def __init__(self, reason: str = "cancellation requested") -> None:
        super().__init__(reason)
        self.reason = reason


STRUCTURAL_ERRORS: tuple[type[ReplicationCheckError], ...] = (
    SetupError,
    TransportError,
    DecodeError,
    BootstrapRangeNotFound,
)


def is_structural(error: BaseException) -> bool:
    """True when the error means the cluster is not in an evaluable state."""
    return isinstance(error, STRUCTURAL_ERRORS)
