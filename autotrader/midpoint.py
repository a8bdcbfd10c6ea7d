"""
midpoint.py – rounded top-of-book midpoints for the ETF / future pair
"""

from __future__ import annotations

from typing import Dict, Optional

from .enums import Instrument


class MidpointTracker:
    """
    Keeps one midpoint per instrument, in minor currency units.

    A raw midpoint that is not tick-aligned is pushed up by half a tick;
    a snapshot with an empty side (price 0) leaves the old value in place.
    """

    def __init__(self, tick_size: int = 100) -> None:
        self.tick_size = tick_size
        self._mid: Dict[Instrument, int] = {Instrument.ETF: 0, Instrument.FUTURE: 0}

    def update(self, instrument: Instrument, best_bid: int, best_ask: int) -> bool:
        """Return True when the stored midpoint was refreshed."""
        if best_bid == 0 or best_ask == 0:
            return False
        mid = (best_bid + best_ask) // 2
        if mid % self.tick_size != 0:
            mid += self.tick_size // 2
        self._mid[instrument] = mid
        return True

    def get(self, instrument: Instrument) -> int:
        return self._mid[instrument]

    @property
    def etf(self) -> int:
        return self._mid[Instrument.ETF]

    @property
    def future(self) -> int:
        return self._mid[Instrument.FUTURE]

    def ratio(self) -> Optional[float]:
        """ETF / future, or None until both legs have a midpoint."""
        if self.future == 0 or self.etf == 0:
            return None
        return self.etf / self.future
