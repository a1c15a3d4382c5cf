#!/usr/bin/env python3
"""
Main CLI Entry Point for replcheck.

Provides command-line access to the range replication check:
- run: start a local cluster and check it converges
- check: check an externally managed cluster through one node's endpoint
- scan: dump the range addressing records a node reports
- target: print the replication target for a cluster size
"""

import asyncio
import signal
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import click
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..check import check_endpoint_replication, run_local_check
from ..client.store_client import connect
from ..core.cancellation import CancellationToken
from ..core.config import CheckSettings
from ..core.errors import ConvergenceTimeout, ReplicationCheckError, is_structural
from ..core.extractor import decode_rows
from ..core.keys import meta_scan_span
from ..core.logging import configure_from_settings
from ..core.poller import ConvergenceReport
from ..core.progress import ProgressReporter, SilentProgress
from ..core.serialization import JsonSerializer
from ..core.target import resolve_target_factor

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)
serializer = JsonSerializer()


def _settings(**overrides: Any) -> CheckSettings:
    """Environment/.env settings with explicitly passed options on top."""
    try:
        return CheckSettings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(map(str, err['loc']))}: {err['msg']}"
            for err in e.errors()
        )
        raise click.ClickException(f"invalid settings: {problems}") from e


async def _with_cancellation(
    body: Callable[[CancellationToken], Awaitable[Any]],
) -> Any:
    """Run ``body`` with SIGINT/SIGTERM wired to its cancellation token."""
    cancel = CancellationToken()
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel.cancel, f"received {sig.name}")
            installed.append(sig)
        except (NotImplementedError, RuntimeError, ValueError):
            logger.debug("Cannot install {} handler on this platform", sig.name)
    try:
        return await body(cancel)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def _progress(as_json: bool) -> ProgressReporter:
    # Keep stdout clean for the JSON document.
    if as_json:
        return SilentProgress()
    return ProgressReporter(out=console, err=err_console)


def _report_success(report: ConvergenceReport, as_json: bool) -> None:
    if as_json:
        click.echo(
            serializer.serialize(
                {
                    "status": "converged",
                    "target_factor": report.target_factor,
                    "attempts": report.attempts,
                    "observed_counts": list(report.observed_counts),
                    "elapsed": round(report.elapsed, 3),
                }
            ).decode()
        )
        return
    console.print(
        f"[green]First range converged to {report.target_factor} replicas "
        f"after {report.attempts} attempts ({report.elapsed:.2f}s)[/green]"
    )


def _report_failure(error: ReplicationCheckError, as_json: bool) -> None:
    if as_json:
        payload: dict[str, Any] = {
            "status": "failed",
            "category": error.category,
            "message": error.message,
            "structural": is_structural(error),
        }
        if isinstance(error, ConvergenceTimeout):
            payload["attempts"] = error.attempts
            payload["target_factor"] = error.target_factor
            payload["last_observed"] = error.last_observed
        click.echo(serializer.serialize(payload).decode())
        return
    err_console.print(f"[red]{escape(str(error))}[/red]")


def _run_check(
    ctx: click.Context,
    body: Callable[[CancellationToken], Awaitable[ConvergenceReport]],
    as_json: bool,
) -> None:
    try:
        report = asyncio.run(_with_cancellation(body))
    except ReplicationCheckError as e:
        _report_failure(e, as_json)
        ctx.exit(1)
    except ValueError as e:
        # Caller mistakes such as a target node outside the cluster.
        raise click.ClickException(str(e)) from e
    _report_success(report, as_json)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--debug-scope",
    "debug_scopes",
    multiple=True,
    help="Module scope to log at DEBUG (e.g. core.poller); repeatable",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug_scopes: tuple[str, ...]):
    """
    Range replication acceptance check.

    Verifies that a store cluster converges its first range to
    min(3, nodes) replicas within a bounded number of polls.
    """
    configure_from_settings(
        _settings(), verbose=verbose, debug_scopes=debug_scopes, colorize=True
    )
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option("--nodes", "-n", type=click.IntRange(min=1), help="Cluster size")
@click.option("--attempts", "-a", type=click.IntRange(min=1), help="Poll budget")
@click.option(
    "--tick-interval",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds between checks",
)
@click.option(
    "--replication-interval",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds per up-replication step in the local cluster",
)
@click.option(
    "--transient-missing-range",
    is_flag=True,
    default=None,
    help="Keep polling while the first range is not visible yet",
)
@click.option("--json", "as_json", is_flag=True, help="Emit a JSON report")
@click.pass_context
def run(
    ctx: click.Context,
    nodes: int | None,
    attempts: int | None,
    tick_interval: float | None,
    replication_interval: float | None,
    transient_missing_range: bool | None,
    as_json: bool,
):
    """Start a local cluster and check its first range converges."""
    settings = _settings(
        node_count=nodes,
        max_attempts=attempts,
        tick_interval=tick_interval,
        replication_interval=replication_interval,
        missing_range_is_transient=transient_missing_range,
    )
    progress = _progress(as_json)
    _run_check(
        ctx,
        lambda cancel: run_local_check(settings, cancel=cancel, progress=progress),
        as_json,
    )


@cli.command()
@click.argument("endpoint")
@click.option(
    "--nodes", "-n", type=click.IntRange(min=1), required=True, help="Cluster size"
)
@click.option("--attempts", "-a", type=click.IntRange(min=1), help="Poll budget")
@click.option(
    "--tick-interval",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds between checks",
)
@click.option(
    "--transient-missing-range",
    is_flag=True,
    default=None,
    help="Keep polling while the first range is not visible yet",
)
@click.option("--json", "as_json", is_flag=True, help="Emit a JSON report")
@click.pass_context
def check(
    ctx: click.Context,
    endpoint: str,
    nodes: int,
    attempts: int | None,
    tick_interval: float | None,
    transient_missing_range: bool | None,
    as_json: bool,
):
    """Check an external cluster through ENDPOINT (scheme://user@host:port?certs=DIR)."""
    settings = _settings(
        node_count=nodes,
        max_attempts=attempts,
        tick_interval=tick_interval,
        missing_range_is_transient=transient_missing_range,
    )
    progress = _progress(as_json)
    _run_check(
        ctx,
        lambda cancel: check_endpoint_replication(
            endpoint, nodes, settings, cancel=cancel, progress=progress
        ),
        as_json,
    )


@cli.command()
@click.argument("endpoint")
@click.option("--limit", "-l", type=click.IntRange(min=1), help="Rows to fetch")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a table")
@click.pass_context
def scan(ctx: click.Context, endpoint: str, limit: int | None, as_json: bool):
    """Show the range addressing records reported by ENDPOINT."""
    settings = _settings(row_limit=limit)

    async def _scan():
        client = await connect(endpoint, request_timeout=settings.request_timeout)
        try:
            start_key, end_key = meta_scan_span()
            rows = await client.scan(start_key, end_key, settings.row_limit)
        finally:
            await client.close()
        return decode_rows(rows)

    try:
        descriptors = asyncio.run(_scan())
    except ReplicationCheckError as e:
        _report_failure(e, as_json)
        ctx.exit(1)

    if as_json:
        click.echo(
            serializer.serialize(
                [
                    {
                        "range_id": d.range_id,
                        "start_key": d.start_key,
                        "end_key": d.end_key,
                        "replicas": [r.node_id for r in d.replicas],
                        "bootstrap": d.is_bootstrap,
                    }
                    for d in descriptors
                ]
            ).decode()
        )
        return

    table = Table(title="Range Descriptors")
    table.add_column("Range", justify="right")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Replicas")
    table.add_column("Bootstrap")
    for d in descriptors:
        table.add_row(
            str(d.range_id),
            escape(repr(d.start_key)),
            escape(repr(d.end_key)),
            ", ".join(f"n{r.node_id}" for r in d.replicas),
            "yes" if d.is_bootstrap else "",
        )
    console.print(table)


@cli.command()
@click.argument("nodes", type=click.IntRange(min=1))
@click.option(
    "--desired", type=click.IntRange(min=1), default=None, help="Desired factor"
)
def target(nodes: int, desired: int | None):
    """Print the replica count a NODES-node cluster should converge to."""
    desired_factor = desired or _settings().desired_factor
    click.echo(resolve_target_factor(nodes, desired_factor))


def main():
    """Main CLI entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(1)


if __name__ == "__main__":
    main()
