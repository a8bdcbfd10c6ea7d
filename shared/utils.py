"""
utils.py – small generic helpers reused in multiple modules
"""

from __future__ import annotations


def floor_to_tick(price: int, tick: int) -> int:
    """Largest multiple of ‘tick’ not above ‘price’."""
    return price // tick * tick


def above_tick(price: int, tick: int) -> int:
    """Smallest multiple of ‘tick’ strictly above ‘price’."""
    return (price + tick) // tick * tick
