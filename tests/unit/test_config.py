import pytest

from smelltrace.config import TrackerConfig
from smelltrace.domain import ConfigurationError


def test_defaults_are_valid():
    cfg = TrackerConfig().validate()
    assert cfg.similarity_threshold == 0.5
    assert cfg.track_non_consecutive_versions is False


@pytest.mark.parametrize(
    "kwargs",
    [
        {"similarity_threshold": 1.2},
        {"similarity_threshold": float("nan")},
        {"affected_weight": -0.5},
        {"max_workers": 0},
    ],
)
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        TrackerConfig(**kwargs).validate()


def test_from_env(monkeypatch):
    monkeypatch.setenv("SMELLTRACE_THRESHOLD", "0.35")
    monkeypatch.setenv("SMELLTRACE_NON_CONSECUTIVE", "yes")
    monkeypatch.setenv("SMELLTRACE_AFFECTED_WEIGHT", "0.8")
    monkeypatch.setenv("SMELLTRACE_WORKERS", "2")

    cfg = TrackerConfig.from_env()

    assert cfg == TrackerConfig(0.35, True, 0.8, 2)


def test_from_env_rejects_garbage(monkeypatch):
    monkeypatch.setenv("SMELLTRACE_THRESHOLD", "lots")
    with pytest.raises(ConfigurationError):
        TrackerConfig.from_env()
