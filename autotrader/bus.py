#!/usr/bin/env python3
"""
bus.py – Redis pub/sub bridge between the exchange gateway and AutoTrader
-------------------------------------------------------------------------
Inbound  (rtg:events)    one JSON object per frame, keyed by "type":
    order_book / trade_ticks   instrument, sequence_number,
                               ask_prices, ask_volumes, bid_prices, bid_volumes
    order_filled / hedge_filled  order_id, price, volume
    order_status               order_id, fill_volume, remaining_volume, fees
    error                      order_id, message
    disconnect                 –

Outbound (rtg:commands)  insert / cancel / hedge commands, same encoding.

Every few seconds the runner also
* stamps `heartbeat:autotrader` for trade_manager,
* re-reads the global pause flag,
* mirrors `AutoTrader.snapshot()` into the `autotrader:state` hash.
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Dict, Optional, Tuple

import redis

from shared.config import HEARTBEAT_EVERY
from shared.constants import CHANNEL_COMMANDS, CHANNEL_EVENTS, KEY_STATE, TOP_LEVEL_COUNT
from shared.logging import get_logger
from shared.redis_client import heartbeat, publish, rds, trading_paused

from .config import TraderConfig
from .engine import AutoTrader
from .enums import Instrument, Lifespan, Side

SERVICE = "autotrader"
RECONNECT_DELAY = 2.0       # s, same back-off as the lazy client

log = get_logger("autotrader.bus")

# ───── WIRE SCHEMA ────────────────────────────────────────────────────
_BOOK_FIELDS = ("instrument", "sequence_number",
                "ask_prices", "ask_volumes", "bid_prices", "bid_volumes")

EVENTS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "order_book":   ("on_order_book",   _BOOK_FIELDS),
    "trade_ticks":  ("on_trade_ticks",  _BOOK_FIELDS),
    "order_filled": ("on_order_filled", ("order_id", "price", "volume")),
    "order_status": ("on_order_status", ("order_id", "fill_volume",
                                         "remaining_volume", "fees")),
    "hedge_filled": ("on_hedge_filled", ("order_id", "price", "volume")),
    "error":        ("on_error",        ("order_id", "message")),
    "disconnect":   ("on_disconnect",   ()),
}


def _levels(name: str, val: Any) -> list[int]:
    if not isinstance(val, list) or len(val) != TOP_LEVEL_COUNT:
        raise ValueError(f"{name} must be a list of {TOP_LEVEL_COUNT} ints")
    return [int(v) for v in val]


def decode_event(payload: str | bytes) -> Tuple[str, Dict[str, Any]]:
    """
    Parse one inbound frame into (`AutoTrader` method name, kwargs).
    Raises ValueError on anything malformed.
    """
    try:
        msg = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ValueError(f"not JSON: {exc}") from exc
    if not isinstance(msg, dict):
        raise ValueError("event must be a JSON object")

    kind = msg.get("type")
    if kind not in EVENTS:
        raise ValueError(f"unknown event type {kind!r}")
    method, fields = EVENTS[kind]

    missing = [f for f in fields if f not in msg]
    if missing:
        raise ValueError(f"{kind} missing {', '.join(missing)}")

    kwargs: Dict[str, Any] = {}
    for f in fields:
        val = msg[f]
        if f.endswith(("_prices", "_volumes")):
            kwargs[f] = _levels(f, val)
        elif f == "instrument":
            kwargs[f] = Instrument[val] if isinstance(val, str) else Instrument(int(val))
        elif f == "message":
            kwargs[f] = str(val)
        else:
            kwargs[f] = int(val)
    return method, kwargs


# ───── OUTBOUND ───────────────────────────────────────────────────────
class RedisOrderSender:
    """`OrderSender` publishing JSON commands on `rtg:commands`."""

    def __init__(self, client: Any = None, channel: str = CHANNEL_COMMANDS) -> None:
        self.client = client or rds
        self.channel = channel

    def insert_order(self, order_id: int, side: Side, price: int,
                     volume: int, lifespan: Lifespan) -> None:
        publish(self.channel, {"type": "insert", "order_id": order_id,
                               "side": side.name, "price": price,
                               "volume": volume, "lifespan": lifespan.name},
                client=self.client)

    def cancel_order(self, order_id: int) -> None:
        publish(self.channel, {"type": "cancel", "order_id": order_id},
                client=self.client)

    def hedge_order(self, order_id: int, side: Side, price: int, volume: int) -> None:
        publish(self.channel, {"type": "hedge", "order_id": order_id,
                               "side": side.name, "price": price,
                               "volume": volume},
                client=self.client)


# ───── RUNNER ─────────────────────────────────────────────────────────
class BusRunner:
    def __init__(self, trader: AutoTrader, client: Any = None,
                 clock: Callable[[], float] = time.time,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.trader = trader
        self.client = client or rds
        self.clock = clock
        self.sleep = sleep
        self._last_housekeeping = 0.0

    def handle(self, payload: str | bytes) -> None:
        """Decode + dispatch one frame; a bad frame is logged, never fatal."""
        try:
            method, kwargs = decode_event(payload)
            getattr(self.trader, method)(**kwargs)
        except Exception as exc:  # noqa: BLE001
            log.error("event dropped – %s", exc)

    def housekeeping(self) -> None:
        heartbeat(SERVICE, client=self.client)
        paused = trading_paused(client=self.client)
        if paused != self.trader.paused:
            log.warning("trading %s by trade_manager", "paused" if paused else "resumed")
            self.trader.paused = paused
        try:
            self.client.hset(KEY_STATE, mapping=self.trader.snapshot())
        except Exception as exc:  # noqa: BLE001
            log.error("state publish failed – %s", exc)
        self._last_housekeeping = self.clock()

    def _subscribe(self) -> Any:
        ps = self.client.pubsub(ignore_subscribe_messages=True)
        ps.subscribe(CHANNEL_EVENTS)
        return ps

    def _close(self, ps: Any) -> None:
        if ps is None:
            return
        try:
            ps.close()
        except redis.RedisError as exc:
            log.debug("pubsub close failed – %s", exc)

    def run(self, poll_timeout: float = 1.0) -> None:
        ps = None
        log.info("autotrader up – listening on %s", CHANNEL_EVENTS)
        self.housekeeping()
        try:
            while not self.trader.disconnected:
                try:
                    if ps is None:
                        ps = self._subscribe()
                    msg: Optional[dict] = ps.get_message(timeout=poll_timeout)
                except redis.RedisError as exc:
                    # connection lost: drop the subscription and resubscribe
                    log.error("bus read failed – resubscribing in %.0f s (%s)",
                              RECONNECT_DELAY, exc)
                    self._close(ps)
                    ps = None
                    self.sleep(RECONNECT_DELAY)
                    msg = None
                if msg and msg.get("type") == "message":
                    self.handle(msg["data"])
                if self.clock() - self._last_housekeeping >= HEARTBEAT_EVERY:
                    self.housekeeping()
        finally:
            self.housekeeping()
            self._close(ps)
        log.info("session over – autotrader shutting down")


def main() -> None:
    cfg = TraderConfig.from_env()
    trader = AutoTrader(RedisOrderSender(rds), cfg)
    log.info("strategy %s, lot %d, limit %d, thresholds %.4f / %.4f",
             cfg.strategy, cfg.lot_size, cfg.position_limit,
             cfg.buy_threshold, cfg.sell_threshold)
    BusRunner(trader, rds).run()


if __name__ == "__main__":
    main()
