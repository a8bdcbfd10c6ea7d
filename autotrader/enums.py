"""
enums.py – wire-level enumerations shared by every autotrader module
"""

from __future__ import annotations

from enum import IntEnum


class Instrument(IntEnum):
    FUTURE = 0
    ETF = 1


class Side(IntEnum):
    SELL = 0
    BUY = 1


class Lifespan(IntEnum):
    FILL_AND_KILL = 0    # cancelled once it stops matching
    GOOD_FOR_DAY = 1     # rests until filled / cancelled
