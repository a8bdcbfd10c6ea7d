"""
engine.py – the pair auto-trader
================================

`AutoTrader` is the single owner of all trading state (midpoints, signal
statistics, order slots, position).  The message bus calls one `on_*`
method per inbound event, sequentially; each handler runs to completion,
so no locking is needed.

Event map
---------
order book     → midpoints, ratio, signal → cancel / insert
trade ticks    → log only
order filled   → position update + hedge order
order status   → release the slot once remaining == 0
hedge filled   → log only
error          → treated as status(remaining=0) for that id
disconnect     → mark the session as finished
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from shared.logging import get_logger

from .config import TraderConfig
from .enums import Instrument, Lifespan, Side
from .hedging import HedgeManager, HedgeOrder
from .midpoint import MidpointTracker
from .orders import OrderTracker
from .signals import Signal, SignalGenerator, Strategy

log = get_logger("autotrader")

HEDGE_SEND_ATTEMPTS = 3


class OrderSender(Protocol):
    """Outbound half of the message bus."""

    def insert_order(self, order_id: int, side: Side, price: int,
                     volume: int, lifespan: Lifespan) -> None: ...

    def cancel_order(self, order_id: int) -> None: ...

    def hedge_order(self, order_id: int, side: Side, price: int,
                    volume: int) -> None: ...


class AutoTrader:
    def __init__(self, sender: OrderSender,
                 cfg: Optional[TraderConfig] = None,
                 strategy: Optional[Strategy] = None) -> None:
        self.cfg = cfg or TraderConfig()
        self.sender = sender
        self.midpoints = MidpointTracker(self.cfg.tick_size)
        self.signals = SignalGenerator(self.cfg, strategy)
        self.orders = OrderTracker()
        self.hedger = HedgeManager(self.cfg.tick_size)

        self.last_ratio: Optional[float] = None
        self.last_seq: Dict[Instrument, int] = {}
        self.paused = False
        self.disconnected = False

    @property
    def position(self) -> int:
        return self.hedger.position

    # ───── market data ────────────────────────────────────────────────
    def on_order_book(self, instrument: Instrument, sequence_number: int,
                      ask_prices: Sequence[int], ask_volumes: Sequence[int],
                      bid_prices: Sequence[int], bid_volumes: Sequence[int]) -> None:
        instrument = Instrument(instrument)
        log.info("order book received for %s instrument: ask prices: %d; ask volumes: %d;"
                 " bid prices: %d; bid volumes: %d", instrument.name, ask_prices[0],
                 ask_volumes[0], bid_prices[0], bid_volumes[0])

        if not self._in_sequence(instrument, sequence_number):
            return

        self.midpoints.update(instrument, bid_prices[0], ask_prices[0])
        if instrument is not Instrument.ETF:
            return

        ratio = self.midpoints.ratio()
        if ratio is None:
            return
        self.last_ratio = ratio
        log.debug("ratio: %.6f", ratio)

        signal = self.signals.evaluate(ratio, self.position,
                                       self.orders.is_resting(Side.BUY),
                                       self.orders.is_resting(Side.SELL))
        self._act(signal, best_ask=ask_prices[0], best_bid=bid_prices[0])

    def on_trade_ticks(self, instrument: Instrument, sequence_number: int,
                       ask_prices: Sequence[int], ask_volumes: Sequence[int],
                       bid_prices: Sequence[int], bid_volumes: Sequence[int]) -> None:
        log.info("trade ticks received for %s instrument: ask prices: %d; ask volumes: %d;"
                 " bid prices: %d; bid volumes: %d", Instrument(instrument).name,
                 ask_prices[0], ask_volumes[0], bid_prices[0], bid_volumes[0])

    def _in_sequence(self, instrument: Instrument, seq: int) -> bool:
        last = self.last_seq.get(instrument)
        if last is not None:
            if seq < last:
                log.warning("stale %s order book %d (last %d) dropped",
                            instrument.name, seq, last)
                return False
            if seq > last + 1:
                log.debug("%s sequence gap %d → %d", instrument.name, last, seq)
        self.last_seq[instrument] = seq
        return True

    def _act(self, signal: Signal, best_ask: int, best_bid: int) -> None:
        if signal.cancel_ask:
            self._cancel(Side.SELL)
        if signal.cancel_bid:
            self._cancel(Side.BUY)

        if self.paused:
            if signal.buy_volume or signal.sell_volume:
                log.info("trading paused – signal %s not acted on", signal)
            return

        # cross the spread: buy at the best ask, sell at the best bid
        if signal.buy_volume and best_ask:
            self._insert(Side.BUY, best_ask, signal.buy_volume)
        if signal.sell_volume and best_bid:
            self._insert(Side.SELL, best_bid, signal.sell_volume)

    def _insert(self, side: Side, price: int, volume: int) -> None:
        order = self.orders.insert(side, price, volume)
        if order is None:
            return
        try:
            self.sender.insert_order(order.order_id, order.side, order.price,
                                     order.volume, order.lifespan)
        except Exception as exc:  # noqa: BLE001
            # never reached the exchange → no status will ever free the slot
            self.orders.on_error(order.order_id)
            log.error("insert %d not sent, slot released – %s", order.order_id, exc)
            return
        log.info("sending %s order %d: %d lots at %d cents (ratio %.5f, position %d)",
                 side.name.lower(), order.order_id, volume, price,
                 self.last_ratio or 0.0, self.position,
                 extra={"ctx": {"order_id": order.order_id, "side": side.name,
                                "price": price, "volume": volume}})

    def _cancel(self, side: Side) -> None:
        oid = self.orders.cancel(side)
        if oid is None:
            return
        try:
            self.sender.cancel_order(oid)
        except Exception as exc:  # noqa: BLE001
            self.orders.cancel_failed(oid)
            log.error("cancel %d not sent – %s", oid, exc)
            return
        log.info("%s order %d cancelled", side.name.lower(), oid)

    def _send_hedge(self, hedge: HedgeOrder) -> bool:
        for attempt in range(1, HEDGE_SEND_ATTEMPTS + 1):
            try:
                self.sender.hedge_order(hedge.order_id, hedge.side, hedge.price,
                                        hedge.volume)
                return True
            except Exception as exc:  # noqa: BLE001
                log.warning("hedge %d send attempt %d failed – %s",
                            hedge.order_id, attempt, exc)
        return False

    # ───── execution reports ──────────────────────────────────────────
    def on_order_filled(self, order_id: int, price: int, volume: int) -> None:
        log.info("order %d filled for %d lots at %d cents", order_id, volume, price)
        side = self.orders.side_of(order_id)
        if side is None:
            log.warning("fill for unknown order %d ignored", order_id)
            return
        hedge = self.hedger.on_fill(side, volume, self.orders.next_id())
        if not self._send_hedge(hedge):
            self.hedger.on_hedge_failed(hedge.volume)
            log.error("hedge %d NOT sent: %d lots unhedged (total %d), position %d",
                      hedge.order_id, hedge.volume, self.hedger.unhedged_lots,
                      self.position)
            return
        log.info("hedge %d: %s %d lots at %d, position now %d", hedge.order_id,
                 hedge.side.name.lower(), hedge.volume, hedge.price, self.position)

    def on_order_status(self, order_id: int, fill_volume: int,
                        remaining_volume: int, fees: int) -> None:
        log.info("order %d was updated. filled: %d remaining: %d fees: %d",
                 order_id, fill_volume, remaining_volume, fees)
        self.orders.on_status(order_id, remaining_volume)

    def on_hedge_filled(self, order_id: int, price: int, volume: int) -> None:
        log.info("hedge order %d filled for %d lots at %d average price in cents",
                 order_id, volume, price)
        self.hedger.on_hedge_filled(volume)

    def on_error(self, order_id: int, message: str) -> None:
        log.info("error with order %d: %s", order_id, message)
        self.orders.on_error(order_id)

    def on_disconnect(self) -> None:
        log.info("execution connection lost")
        self.disconnected = True

    # ───── observability ──────────────────────────────────────────────
    def snapshot(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "position_limit": self.cfg.position_limit,
            "bid_id": self.orders.bid_id,
            "ask_id": self.orders.ask_id,
            "etf_mid": self.midpoints.etf,
            "future_mid": self.midpoints.future,
            "ratio": self.last_ratio if self.last_ratio is not None else "",
            "strategy": self.signals.strategy.name,
            "hedged_lots": self.hedger.hedged_lots,
            "unhedged_lots": self.hedger.unhedged_lots,
            "paused": int(self.paused),
            "disconnected": int(self.disconnected),
        }
