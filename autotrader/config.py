"""
config.py – trading parameters for the pair engine
==================================================

Every knob can be overridden from the environment (or `.env`):

LOT_SIZE          base order volume                      (default: 10)
POSITION_LIMIT    max |net position| in lots             (default: 100)
TICK_SIZE         minimum price increment, cents         (default: 100)
BUY_THRESHOLD     buy when ratio is strictly below       (default: 0.996)
SELL_THRESHOLD    sell when ratio is strictly above      (default: 1.004)
STRATEGY          fixed | bollinger | extremum           (default: bollinger)
BOLLINGER_WINDOW  ratio samples in the band window       (default: 20)
BOLLINGER_WIDTH   band half-width in std deviations      (default: 1.0)
VOLUME_BOOST      lot multiplier on an extreme ratio     (default: 3)
EXTREMUM_DECAY    per-evaluation decay of the extrema    (default: 0.98)
"""

from __future__ import annotations

from dataclasses import dataclass

from shared.config import env

STRATEGIES = ("fixed", "bollinger", "extremum")


@dataclass(frozen=True)
class TraderConfig:
    lot_size: int = 10
    position_limit: int = 100
    tick_size: int = 100
    buy_threshold: float = 0.996
    sell_threshold: float = 1.004
    strategy: str = "bollinger"
    window: int = 20
    band_width: float = 1.0
    boost: int = 3
    decay: float = 0.98

    @classmethod
    def from_env(cls) -> "TraderConfig":
        d = cls()
        cfg = cls(
            lot_size=env("LOT_SIZE", d.lot_size, int),
            position_limit=env("POSITION_LIMIT", d.position_limit, int),
            tick_size=env("TICK_SIZE", d.tick_size, int),
            buy_threshold=env("BUY_THRESHOLD", d.buy_threshold, float),
            sell_threshold=env("SELL_THRESHOLD", d.sell_threshold, float),
            strategy=env("STRATEGY", d.strategy).lower(),
            window=env("BOLLINGER_WINDOW", d.window, int),
            band_width=env("BOLLINGER_WIDTH", d.band_width, float),
            boost=env("VOLUME_BOOST", d.boost, int),
            decay=env("EXTREMUM_DECAY", d.decay, float),
        )
        cfg.validate()
        return cfg

    def validate(self) -> None:
        """Raise ValueError on a configuration the engine cannot trade with."""
        if self.lot_size <= 0 or self.position_limit <= 0:
            raise ValueError("LOT_SIZE and POSITION_LIMIT must be positive")
        if self.tick_size <= 0 or self.tick_size % 2:
            raise ValueError("TICK_SIZE must be a positive even number of cents")
        if not 0 < self.buy_threshold <= 1 <= self.sell_threshold:
            raise ValueError("thresholds must satisfy 0 < BUY <= 1 <= SELL")
        if self.strategy not in STRATEGIES:
            raise ValueError(f"STRATEGY must be one of {', '.join(STRATEGIES)}")
        if self.window < 2:
            raise ValueError("BOLLINGER_WINDOW needs at least 2 samples")
        if self.band_width < 0 or self.boost < 1:
            raise ValueError("BOLLINGER_WIDTH must be >= 0 and VOLUME_BOOST >= 1")
        if not 0 < self.decay < 1:
            raise ValueError("EXTREMUM_DECAY must lie in (0, 1)")
