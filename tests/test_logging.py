from collections.abc import Iterator
from types import SimpleNamespace

import pytest
from loguru import logger

from replcheck.core.config import CheckSettings
from replcheck.core.logging import (
    configure_from_settings,
    configure_logging,
    qualify_scope,
    scope_filter,
)


def record(level: str, name: str) -> dict:
    return {"level": SimpleNamespace(name=level), "name": name}


def emit_from(module: str, level: str, message: str) -> None:
    logger.patch(lambda r: r.update(name=module)).log(level, message)


@pytest.fixture
def captured() -> Iterator[list[str]]:
    messages: list[str] = []
    yield messages
    configure_logging("INFO")


@pytest.mark.parametrize(
    "scope,expected",
    [
        ("core.poller", "replcheck.core.poller"),
        (" cluster ", "replcheck.cluster"),
        ("replcheck.client", "replcheck.client"),
        ("replcheck", "replcheck"),
    ],
)
def test_qualify_scope(scope, expected):
    assert qualify_scope(scope) == expected


def test_scope_filter_matches_module_and_children_only():
    keep = scope_filter(["core.poller", "cluster"])

    assert keep(record("DEBUG", "replcheck.core.poller"))
    assert keep(record("DEBUG", "replcheck.cluster.local"))
    assert not keep(record("DEBUG", "replcheck.core.pollerx"))
    assert not keep(record("DEBUG", "replcheck.client.store_client"))
    # Non-DEBUG records already reach the main sink.
    assert not keep(record("INFO", "replcheck.core.poller"))


def test_debug_scope_passes_only_the_named_module(captured):
    configure_logging("INFO", debug_scopes=("core.poller",), sink=captured.append)

    emit_from("replcheck.core.poller", "DEBUG", "attempt detail")
    emit_from("replcheck.cluster.local", "DEBUG", "replica added")
    emit_from("replcheck.cluster.local", "INFO", "cluster started")

    text = "".join(captured)
    assert "attempt detail" in text
    assert "replica added" not in text
    assert "cluster started" in text


def test_scoped_sink_is_skipped_at_debug_level(captured):
    handlers = configure_logging(
        "debug", debug_scopes=("core.poller",), sink=captured.append
    )
    assert len(handlers) == 1

    emit_from("replcheck.core.poller", "DEBUG", "once")
    assert "".join(captured).count("once") == 1


def test_settings_drive_level_and_scopes(captured, monkeypatch):
    monkeypatch.setenv("REPLCHECK_LOG_LEVEL", "warning")
    monkeypatch.setenv("REPLCHECK_LOG_DEBUG_SCOPES", "core.poller,cluster.local")
    settings = CheckSettings()

    assert len(configure_from_settings(settings)) == 2
    assert len(configure_from_settings(settings, verbose=True)) == 1
    assert len(configure_from_settings(CheckSettings(log_debug_scopes=()))) == 1
