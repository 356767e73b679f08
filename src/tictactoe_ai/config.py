"""Engine settings.

Environment first (TTT_RANDOM_FALLBACK, TTT_THINK_DELAY, TTT_SEED), then the
dataclass defaults. The CLI overrides individual fields from its flags.
"""

from __future__ import annotations

import math
import os
import random
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidInput
from .search import DEFAULT_RANDOM_FALLBACK, check_probability


@dataclass
class EngineConfig:
    random_fallback_probability: float = DEFAULT_RANDOM_FALLBACK
    think_delay: float = 0.0  # seconds slept before the computer moves
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self.random_fallback_probability = check_probability(self.random_fallback_probability)
        if not math.isfinite(self.think_delay) or self.think_delay < 0:
            raise InvalidInput(f"think_delay must be a finite number >= 0, got {self.think_delay!r}")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        kwargs = {}
        p = os.getenv("TTT_RANDOM_FALLBACK")
        if p:
            kwargs["random_fallback_probability"] = _parse(p, float, "TTT_RANDOM_FALLBACK")
        delay = os.getenv("TTT_THINK_DELAY")
        if delay:
            kwargs["think_delay"] = _parse(delay, float, "TTT_THINK_DELAY")
        seed = os.getenv("TTT_SEED")
        if seed:
            kwargs["seed"] = _parse(seed, int, "TTT_SEED")
        return cls(**kwargs)

    def make_rng(self) -> random.Random:
        return make_rng(self.seed)


def _parse(raw: str, kind, name: str):
    try:
        return kind(raw)
    except ValueError:
        raise InvalidInput(f"{name}={raw!r} is not a valid {kind.__name__}") from None


def make_rng(seed: Optional[int] = None) -> random.Random:
    return random.Random(seed)
