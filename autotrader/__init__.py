"""
autotrader
==========

ETF / future pair trader driven by exchange events on the Redis bus.

Data-flow
---------
1. Order-book snapshots refresh the rounded midpoints of both legs.
2. Every ETF snapshot yields ratio = ETF mid / future mid, fed to the
   signal generator (fixed / bollinger / extremum lot boosting).
3. The order tracker turns the signal into at most one resting bid and
   one resting ask, cancelling a side whose edge has closed.
4. Fills move the position and are hedged at once on the other side.

Modules
-------
enums.py     – Instrument / Side / Lifespan
config.py    – TraderConfig (env-driven)
midpoint.py  – MidpointTracker
signals.py   – Signal, strategies, SignalGenerator
orders.py    – OrderTracker (bid / ask slots)
hedging.py   – HedgeManager (position + hedge orders)
engine.py    – AutoTrader (event callbacks)
bus.py       – Redis pub/sub runner (entry-point)
"""

from .config import TraderConfig
from .engine import AutoTrader, OrderSender
from .enums import Instrument, Lifespan, Side
from .signals import Signal

__all__ = ["AutoTrader", "OrderSender", "TraderConfig",
           "Instrument", "Lifespan", "Side", "Signal"]
