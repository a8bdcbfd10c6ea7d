"""
hedging.py – signed position + offsetting hedge on every fill
"""

from __future__ import annotations

from dataclasses import dataclass

from shared.constants import MAXIMUM_ASK, MINIMUM_BID
from shared.utils import above_tick, floor_to_tick

from .enums import Side


@dataclass(frozen=True)
class HedgeOrder:
    order_id: int
    side: Side
    price: int
    volume: int


class HedgeManager:
    """
    Position moves only on fills of our own orders.  Each fill is hedged
    immediately at the extreme tradable price on the other side, so the
    hedge takes liquidity rather than resting.
    """

    def __init__(self, tick_size: int) -> None:
        self.position = 0
        self.hedged_lots = 0
        self.unhedged_lots = 0
        self.max_ask = floor_to_tick(MAXIMUM_ASK, tick_size)
        self.min_bid = above_tick(MINIMUM_BID, tick_size)

    def on_fill(self, side: Side, volume: int, order_id: int) -> HedgeOrder:
        """Book a fill of our `side` order; return the hedge to send as `order_id`."""
        if side is Side.SELL:
            self.position -= volume
            return HedgeOrder(order_id, Side.BUY, self.max_ask, volume)
        self.position += volume
        return HedgeOrder(order_id, Side.SELL, self.min_bid, volume)

    def on_hedge_filled(self, volume: int) -> None:
        self.hedged_lots += volume

    def on_hedge_failed(self, volume: int) -> None:
        # exposure the exchange never got a hedge for; surfaced in the snapshot
        self.unhedged_lots += volume
