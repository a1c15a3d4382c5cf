import pytest
from pydantic import ValidationError

from replcheck.core.config import CheckSettings


def test_defaults_match_reference_policy():
    settings = CheckSettings()
    assert settings.node_count == 3
    assert settings.max_attempts == 20
    assert settings.tick_interval == 1.0
    assert settings.desired_factor == 3
    assert settings.row_limit == 10
    assert settings.admin_principal == "root"
    assert settings.missing_range_is_transient is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("REPLCHECK_NODE_COUNT", "5")
    monkeypatch.setenv("REPLCHECK_TICK_INTERVAL", "0.25")
    monkeypatch.setenv("REPLCHECK_LOG_LEVEL", "debug")
    monkeypatch.setenv("REPLCHECK_LOG_DEBUG_SCOPES", "core.poller, cluster")

    settings = CheckSettings()

    assert settings.node_count == 5
    assert settings.tick_interval == 0.25
    assert settings.log_level == "DEBUG"
    assert settings.log_debug_scopes == ("core.poller", "cluster")


def test_explicit_values_beat_environment(monkeypatch):
    monkeypatch.setenv("REPLCHECK_MAX_ATTEMPTS", "7")
    assert CheckSettings(max_attempts=3).max_attempts == 3


@pytest.mark.parametrize(
    "field,value",
    [
        ("node_count", 0),
        ("max_attempts", 0),
        ("tick_interval", 0),
        ("row_limit", 0),
        ("target_node", -1),
    ],
)
def test_rejects_empty_budgets(field, value):
    with pytest.raises(ValidationError):
        CheckSettings(**{field: value})
