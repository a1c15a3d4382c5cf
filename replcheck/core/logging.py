"""
loguru setup for the checker.

One sink carries everything at the configured level. When debug scopes are
given, a second sink carries DEBUG records from just those modules, so an
operator can watch e.g. the poller's per-attempt detail without the
websocket chatter of every node.
"""

import sys
from collections.abc import Callable, Iterable
from typing import Any, TextIO, TypeAlias

from loguru import logger

from .config import CheckSettings

PACKAGE = "replcheck"

LOG_FORMAT = "{time:HH:mm:ss.SSS} | {level: <7} | {name}:{line} - {message}"

Sink: TypeAlias = TextIO | Callable[[Any], None]


def qualify_scope(scope: str) -> str:
    """``core.poller`` -> ``replcheck.core.poller``; full names pass through."""
    scope = scope.strip()
    if scope == PACKAGE or scope.startswith(f"{PACKAGE}."):
        return scope
    return f"{PACKAGE}.{scope}"


def scope_filter(scopes: Iterable[str]) -> Callable[[dict[str, Any]], bool]:
    """loguru filter passing DEBUG records emitted under any of ``scopes``."""
    prefixes = tuple(qualify_scope(s) for s in scopes if s.strip())

    def _filter(record: dict[str, Any]) -> bool:
        if record["level"].name != "DEBUG":
            return False
        name = record["name"] or ""
        return any(name == p or name.startswith(f"{p}.") for p in prefixes)

    return _filter


def configure_logging(
    level: str,
    *,
    debug_scopes: Iterable[str] = (),
    colorize: bool = False,
    sink: Sink = sys.stderr,
) -> list[int]:
    """Replace every loguru handler with the checker's sinks."""
    logger.remove()
    level = level.upper()
    handlers = [logger.add(sink, level=level, format=LOG_FORMAT, colorize=colorize)]

    scopes = [s for s in debug_scopes if s.strip()]
    if scopes and level != "DEBUG":
        handlers.append(
            logger.add(
                sink,
                level="DEBUG",
                format=LOG_FORMAT,
                colorize=colorize,
                filter=scope_filter(scopes),
            )
        )
    return handlers


def configure_from_settings(
    settings: CheckSettings,
    *,
    verbose: bool = False,
    debug_scopes: Iterable[str] = (),
    colorize: bool = False,
) -> list[int]:
    """Apply ``settings``; command line scopes replace the configured ones."""
    return configure_logging(
        "DEBUG" if verbose else settings.log_level,
        debug_scopes=tuple(debug_scopes) or settings.log_debug_scopes,
        colorize=colorize,
    )
