import pytest

from tictactoe_ai.config import EngineConfig, make_rng
from tictactoe_ai.errors import InvalidInput


def test_defaults(monkeypatch):
    for var in ("TTT_RANDOM_FALLBACK", "TTT_THINK_DELAY", "TTT_SEED"):
        monkeypatch.delenv(var, raising=False)
    cfg = EngineConfig.from_env()
    assert cfg.random_fallback_probability == 0.001
    assert cfg.think_delay == 0.0
    assert cfg.seed is None


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TTT_RANDOM_FALLBACK", "0.25")
    monkeypatch.setenv("TTT_THINK_DELAY", "0.5")
    monkeypatch.setenv("TTT_SEED", "42")
    cfg = EngineConfig.from_env()
    assert cfg.random_fallback_probability == 0.25
    assert cfg.think_delay == 0.5
    assert cfg.seed == 42
    assert cfg.make_rng().random() == make_rng(42).random()


@pytest.mark.parametrize("var,value", [
    ("TTT_RANDOM_FALLBACK", "often"),
    ("TTT_RANDOM_FALLBACK", "2"),
    ("TTT_THINK_DELAY", "-1"),
    ("TTT_THINK_DELAY", "nan"),
    ("TTT_THINK_DELAY", "inf"),
    ("TTT_SEED", "1.5"),
])
def test_bad_env_values(monkeypatch, var, value):
    monkeypatch.setenv(var, value)
    with pytest.raises(InvalidInput):
        EngineConfig.from_env()


@pytest.mark.parametrize("delay", [float("nan"), float("inf"), -0.5])
def test_non_finite_or_negative_think_delay_rejected(delay):
    with pytest.raises(InvalidInput):
        EngineConfig(think_delay=delay)
