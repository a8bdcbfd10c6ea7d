"""
signals.py – ratio → trading decision
=====================================

Pure in-memory logic; no Redis, no order ids.

The generator owns the fixed pair-trade rules (thresholds, cancels,
position clamp).  A *strategy* only answers one question: is this ratio
statistically extreme on a side, so the lot should be boosted?

    fixed      never extreme – plain threshold trading
    bollinger  outside mean ± width·σ of the last N ratios
    extremum   a new running max / min, registers decaying toward 1.0
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import ClassVar, Deque, Optional

import numpy as np

from .config import TraderConfig
from .enums import Side


@dataclass(frozen=True)
class Signal:
    buy_volume: int = 0
    sell_volume: int = 0
    cancel_bid: bool = False
    cancel_ask: bool = False

    NONE: ClassVar["Signal"]

    @property
    def is_none(self) -> bool:
        return not (self.buy_volume or self.sell_volume
                    or self.cancel_bid or self.cancel_ask)


Signal.NONE = Signal()


# ───── STRATEGIES ─────────────────────────────────────────────────────
class Strategy(ABC):
    """Volume-boost policy fed with every ratio the engine computes."""

    name = "abstract"

    @abstractmethod
    def observe(self, ratio: float) -> None:
        ...

    @abstractmethod
    def is_extreme(self, ratio: float, side: Side) -> bool:
        ...


class FixedLot(Strategy):
    name = "fixed"

    def observe(self, ratio: float) -> None:
        return None

    def is_extreme(self, ratio: float, side: Side) -> bool:
        return False


class BollingerBand(Strategy):
    """
    Bands over a fixed-capacity FIFO of ratios.

    The bands stay undefined (no boost) until the window holds `window`
    samples; after that every sample evicts the oldest one.
    """

    name = "bollinger"

    def __init__(self, window: int = 20, width: float = 1.0) -> None:
        self.window = window
        self.width = width
        self.samples: Deque[float] = deque(maxlen=window)
        self.mean: Optional[float] = None
        self.std: Optional[float] = None

    @property
    def ready(self) -> bool:
        return len(self.samples) == self.window

    @property
    def upper(self) -> Optional[float]:
        if self.mean is None or self.std is None:
            return None
        return self.mean + self.width * self.std

    @property
    def lower(self) -> Optional[float]:
        if self.mean is None or self.std is None:
            return None
        return self.mean - self.width * self.std

    def observe(self, ratio: float) -> None:
        self.samples.append(ratio)
        if not self.ready:
            return
        arr = np.fromiter(self.samples, dtype=np.float64, count=self.window)
        self.mean = float(arr.mean())
        self.std = float(arr.std())          # population σ

    def is_extreme(self, ratio: float, side: Side) -> bool:
        if side is Side.BUY:
            band = self.lower
            return band is not None and ratio < band
        band = self.upper
        return band is not None and ratio > band


class DecayingExtremum(Strategy):
    """
    Running max / min ratio that fade back toward 1.0.

    Both registers start at the inner thresholds.  On every observation a
    register lying beyond its threshold decays geometrically toward 1.0
    (never past the threshold); a ratio beyond the decayed register is a
    new extremum and becomes the register.
    """

    name = "extremum"

    def __init__(self, decay: float, inner_low: float, inner_high: float) -> None:
        self.decay = decay
        self.inner_low = inner_low
        self.inner_high = inner_high
        self.high = inner_high
        self.low = inner_low
        self._new_high = False
        self._new_low = False

    def _fade(self) -> None:
        if self.high > self.inner_high:
            self.high = max(self.inner_high, 1.0 + (self.high - 1.0) * self.decay)
        if self.low < self.inner_low:
            self.low = min(self.inner_low, 1.0 + (self.low - 1.0) * self.decay)

    def observe(self, ratio: float) -> None:
        self._fade()
        self._new_high = ratio > self.high
        self._new_low = ratio < self.low
        if self._new_high:
            self.high = ratio
        if self._new_low:
            self.low = ratio

    def is_extreme(self, ratio: float, side: Side) -> bool:
        return self._new_low if side is Side.BUY else self._new_high


def build_strategy(cfg: TraderConfig) -> Strategy:
    if cfg.strategy == "fixed":
        return FixedLot()
    if cfg.strategy == "bollinger":
        return BollingerBand(cfg.window, cfg.band_width)
    if cfg.strategy == "extremum":
        return DecayingExtremum(cfg.decay, cfg.buy_threshold, cfg.sell_threshold)
    raise ValueError(f"unknown strategy {cfg.strategy!r}")


# ───── GENERATOR ──────────────────────────────────────────────────────
class SignalGenerator:
    def __init__(self, cfg: TraderConfig, strategy: Optional[Strategy] = None) -> None:
        self.cfg = cfg
        self.strategy = strategy or build_strategy(cfg)

    def size(self, side: Side, ratio: float, position: int) -> int:
        """Lot (boosted on an extreme ratio) clamped to the position headroom."""
        volume = self.cfg.lot_size
        if self.strategy.is_extreme(ratio, side):
            volume *= self.cfg.boost
        limit = self.cfg.position_limit
        headroom = limit - position if side is Side.BUY else limit + position
        return max(0, min(volume, headroom))

    def evaluate(self, ratio: float, position: int,
                 bid_resting: bool, ask_resting: bool) -> Signal:
        # the edge has closed on a side → pull its resting order
        cancel_ask = ask_resting and ratio <= 1
        cancel_bid = bid_resting and ratio >= 1

        self.strategy.observe(ratio)

        buy = sell = 0
        limit = self.cfg.position_limit
        if not bid_resting and ratio < self.cfg.buy_threshold and position < limit:
            buy = self.size(Side.BUY, ratio, position)
        if not ask_resting and ratio > self.cfg.sell_threshold and position > -limit:
            sell = self.size(Side.SELL, ratio, position)

        return Signal(buy, sell, cancel_bid, cancel_ask)
