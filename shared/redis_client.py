"""
redis_client.py – singleton Redis connection + helpers
======================================================

• 100 % lazy: first call triggers connect; retries until Redis is up.
• `heartbeat(service)` from the bus loop; trade_manager watches these keys.
• `trading_paused()` / `set_paused()` implement the global kill-switch.
• `publish(channel, obj)` sends one JSON frame on a pub/sub channel.
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Optional

import redis

from .config import REDIS_URL
from .constants import KEY_HEARTBEAT, KEY_PAUSE_BY, KEY_PAUSE_FLAG
from .logging import get_logger

log = get_logger("shared.redis")

# ───── LAZY SINGLETON ─────────────────────────────────────────────────
class _LazyRedis:
    """Proxy object that connects on first attribute access (auto-retry)."""
    _client: Optional[redis.Redis] = None

    def __getattr__(self, name: str) -> Callable[..., Any]:  # noqa: D401
        if self._client is None:
            self._connect()
        return getattr(self._client, name)  # type: ignore[arg-type]

    def _connect(self) -> None:
        while True:
            try:
                self._client = redis.Redis.from_url(
                    REDIS_URL,
                    decode_responses=True,
                    socket_timeout=2,
                )
                self._client.ping()
                log.info("Connected to Redis at %s", REDIS_URL)
                break
            except redis.RedisError as exc:
                log.warning("Redis unavailable – retrying in 2 s (%s)", exc)
                time.sleep(2)

# Exposed singleton used by all services
rds: redis.Redis = _LazyRedis()  # type: ignore[assignment]

# ───── HELPER FUNCTIONS ───────────────────────────────────────────────
def publish(channel: str, obj: dict, client: Any = None) -> None:
    """JSON-encode `obj` and publish it on `channel`."""
    (client or rds).publish(channel, json.dumps(obj, separators=(",", ":")))

def heartbeat(service: str, client: Any = None) -> None:
    """Store current epoch-seconds in `heartbeat:<service>`."""
    try:
        (client or rds).set(KEY_HEARTBEAT.format(service), time.time())
    except redis.RedisError as exc:
        log.error("heartbeat failed – %s", exc)

def last_heartbeat(service: str, client: Any = None) -> float:
    """Epoch-seconds of the last heartbeat, 0.0 when never seen."""
    return float((client or rds).get(KEY_HEARTBEAT.format(service)) or 0)

def trading_paused(client: Any = None) -> bool:
    """Return True if trade_manager set the global pause flag."""
    try:
        return (client or rds).get(KEY_PAUSE_FLAG) == "1"
    except redis.RedisError:
        # On Redis failure, default to *paused* for safety.
        return True

def set_paused(flag: bool, client: Any = None, by: str = "") -> None:
    """Flip the kill-switch and record who did it (cleared on resume)."""
    c = client or rds
    c.set(KEY_PAUSE_FLAG, "1" if flag else "0")
    c.set(KEY_PAUSE_BY, by if flag else "")

def paused_by(client: Any = None) -> str:
    return (client or rds).get(KEY_PAUSE_BY) or ""
