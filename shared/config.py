"""
config.py – centralised env-var handling
=======================================

• Loads the first `.env` file it finds (cwd or /app) exactly **once**.
• `env(key, default=None, cast=None)` helper for one-off lookups
  with automatic type-casting (int, float, bool).
• Process-wide settings shared by the autotrader and trade_manager.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

# ───── locate & load .env (first one wins) ────────────────────────────
for candidate in (Path.cwd() / ".env", Path("/app/.env")):
    if candidate.is_file():
        load_dotenv(dotenv_path=candidate, override=False)
        break


def env(key: str, default: Any = None, cast: Optional[type] = None) -> Any:
    """Read `key` from the environment, optionally cast; bad casts → default."""
    val = os.getenv(key)
    if val is None or val == "":
        return default
    if cast is None:
        return val
    try:
        if cast is bool:
            return val.lower() in ("1", "true", "yes", "y")
        return cast(val)
    except (ValueError, TypeError):
        return default


# ───── process settings ──────────────────────────────────────────────
REDIS_URL       = env("REDIS_URL", "redis://redis:6379/0")
LOG_LEVEL       = env("LOG_LEVEL", "INFO").upper()
HEARTBEAT_EVERY = env("HEARTBEAT_EVERY", 5.0, float)        # s
HEARTBEAT_STALE = env("HEARTBEAT_STALE", 30.0, float)       # s
CHECK_INTERVAL  = env("MANAGER_CHECK_INTERVAL", 10, int)    # s
API_PORT        = env("API_PORT", 8000, int)                # 0 = off


__all__ = [
    "env",
    "REDIS_URL", "LOG_LEVEL",
    "HEARTBEAT_EVERY", "HEARTBEAT_STALE",
    "CHECK_INTERVAL", "API_PORT",
]
