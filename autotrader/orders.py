"""
orders.py – lifecycle of the resting bid / ask
==============================================

At most one bid and one ask rest at any time.  Per side:

    EMPTY ──insert──▶ PENDING ──status(remaining=0)──▶ EMPTY
                        │  ▲
                 cancel │  │ partial fill
                        ▼  │
                   (cancel in flight)

A slot is only released by a status update reporting zero remaining
volume (fill, cancel confirmation and errors all end up there), so a
cancel racing a fill resolves on whichever update arrives first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Set

from .enums import Lifespan, Side


@dataclass(frozen=True)
class Order:
    order_id: int
    side: Side
    price: int
    volume: int
    lifespan: Lifespan = Lifespan.GOOD_FOR_DAY


class OrderTracker:
    def __init__(self) -> None:
        self._next_id = 1
        self.bid_id = 0
        self.ask_id = 0
        self.bids: Set[int] = set()
        self.asks: Set[int] = set()
        self.cancelling: Set[int] = set()

    # ───── ids ─────────────────────────────────────────────────────────
    def next_id(self) -> int:
        """Fresh client order id; shared with hedge orders, never reused."""
        oid = self._next_id
        self._next_id += 1
        return oid

    # ───── slot access ─────────────────────────────────────────────────
    def resting(self, side: Side) -> int:
        return self.bid_id if side is Side.BUY else self.ask_id

    def is_resting(self, side: Side) -> bool:
        return self.resting(side) != 0

    def side_of(self, order_id: int) -> Optional[Side]:
        """Classify an id by the membership set holding it."""
        if order_id in self.asks:
            return Side.SELL
        if order_id in self.bids:
            return Side.BUY
        return None

    # ───── transitions ─────────────────────────────────────────────────
    def insert(self, side: Side, price: int, volume: int,
               lifespan: Lifespan = Lifespan.GOOD_FOR_DAY) -> Optional[Order]:
        """EMPTY → PENDING.  Returns the order to send, None if the slot is taken."""
        if self.is_resting(side) or volume <= 0:
            return None
        order = Order(self.next_id(), side, price, volume, lifespan)
        if side is Side.BUY:
            self.bid_id = order.order_id
            self.bids.add(order.order_id)
        else:
            self.ask_id = order.order_id
            self.asks.add(order.order_id)
        return order

    def cancel(self, side: Side) -> Optional[int]:
        """Id to cancel, or None when the slot is empty or a cancel is in flight."""
        oid = self.resting(side)
        if oid == 0 or oid in self.cancelling:
            return None
        self.cancelling.add(oid)
        return oid

    def cancel_failed(self, order_id: int) -> None:
        # the request never left; the next evaluation may ask again
        self.cancelling.discard(order_id)

    def on_status(self, order_id: int, remaining: int) -> bool:
        """Release the id once nothing remains.  Returns True if a slot was freed."""
        if remaining != 0:
            return False
        freed = False
        if order_id == self.ask_id:
            self.ask_id = 0
            freed = True
        elif order_id == self.bid_id:
            self.bid_id = 0
            freed = True
        self.asks.discard(order_id)
        self.bids.discard(order_id)
        self.cancelling.discard(order_id)
        return freed

    def on_error(self, order_id: int) -> bool:
        # a rejected order is a completed order with nothing filled
        if order_id == 0:
            return False
        return self.on_status(order_id, 0)
