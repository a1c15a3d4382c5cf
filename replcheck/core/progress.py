from rich.console import Console

from ..datastructures.type_aliases import ReplicaCount


class ProgressReporter:
    """Operator-facing progress characters, one per attempt.

    Observed counts go to stderr on a single line; the final success line
    goes to stdout.
    """

    def __init__(
        self, out: Console | None = None, err: Console | None = None
    ) -> None:
        self.out = out or Console(highlight=False)
        self.err = err or Console(stderr=True, highlight=False)

    def attempt(self, replica_count: ReplicaCount, range_found: bool = True) -> None:
        mark = str(replica_count) if range_found else "-"
        self.err.print(f"{mark} ", end="", soft_wrap=True)

    def converged(self) -> None:
        self.out.print("... correct number of replicas found")

    def finished(self) -> None:
        # Terminate the attempt line so later output starts cleanly.
        self.err.print()


class SilentProgress(ProgressReporter):
    """Reporter for library callers that only want the returned report."""

    def __init__(self) -> None:
        pass

    def attempt(self, replica_count: ReplicaCount, range_found: bool = True) -> None:
        pass

    def converged(self) -> None:
        pass

    def finished(self) -> None:
        pass
