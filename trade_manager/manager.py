#!/usr/bin/env python3
"""
manager.py – orchestration / risk guard-rail
-------------------------------------------
Environment
-----------
REDIS_URL               redis://host:port/db        (default: redis://redis:6379/0)
HEARTBEAT_STALE         s without heartbeat → down  (default: 30)
MANAGER_CHECK_INTERVAL  seconds between checks      (default: 10)
API_PORT                expose REST API (0=off)     (default: 8000)
"""

from __future__ import annotations

import time
from typing import Any, Dict, List

import uvicorn
from fastapi import FastAPI

from shared.config import API_PORT, CHECK_INTERVAL, HEARTBEAT_STALE
from shared.constants import KEY_STATE
from shared.logging import get_logger
from shared.redis_client import last_heartbeat, paused_by, rds, set_paused, trading_paused

SERVICES = ["autotrader"]
SUPERVISOR = "trade_manager"     # pause owner that may auto-resume

log = get_logger("trade_manager")

# ───── SMALL HELPERS ──────────────────────────────────────────────────
def trader_state() -> Dict[str, Any]:
    """Last state hash published by the autotrader (strings → ints)."""
    raw = rds.hgetall(KEY_STATE) or {}
    out: Dict[str, Any] = {}
    for k, v in raw.items():
        try:
            out[k] = int(v)
        except (TypeError, ValueError):
            out[k] = v
    return out


def dead_services(now: float | None = None) -> List[str]:
    now = time.time() if now is None else now
    dead = [svc for svc in SERVICES
            if now - last_heartbeat(svc, client=rds) > HEARTBEAT_STALE]
    if dead:
        log.warning("Missing heartbeat: %s", ", ".join(dead))
    return dead


def limit_breached(state: Dict[str, Any]) -> bool:
    try:
        return abs(int(state["position"])) > int(state["position_limit"])
    except (KeyError, TypeError, ValueError):
        return False


def pause(flag: bool, reason: str = "", by: str = "operator") -> None:
    set_paused(flag, client=rds, by=by)
    if flag:
        log.error("TRADING PAUSED – %s", reason)
    else:
        log.info("trading resumed %s", reason)


# ───── SUPERVISOR LOOP ────────────────────────────────────────────────
def check_once(now: float | None = None) -> bool:
    """One supervision round.  Returns the pause flag left in Redis."""
    paused = trading_paused(client=rds)
    dead = dead_services(now)
    state = trader_state()
    breach = limit_breached(state)

    if not paused and (dead or breach):
        reason = ("position limit breached (position=%s)" % state.get("position")
                  if breach else "heartbeat lost: " + ", ".join(dead))
        pause(True, reason, by=SUPERVISOR)
        return True
    if paused and paused_by(client=rds) == SUPERVISOR and not dead and not breach:
        # only undo our own pause; an operator pause stays until /resume
        pause(False, "– autotrader healthy again")
        return False
    return paused


def supervisor_loop() -> None:
    log.info("trade_manager running (interval %d s)", CHECK_INTERVAL)
    while True:
        try:
            check_once()
        except Exception as exc:  # noqa: BLE001
            log.error("supervisor error – %s", exc)
        time.sleep(CHECK_INTERVAL)


# ───── OPTIONAL REST API ──────────────────────────────────────────────
app = FastAPI(title="Trade Manager", docs_url=None, redoc_url=None)


@app.get("/status")
def status():
    return {
        "paused": trading_paused(client=rds),
        "trader": trader_state(),
        "heartbeats": {svc: last_heartbeat(svc, client=rds) for svc in SERVICES},
    }


@app.post("/pause")
def pause_endpoint():
    pause(True, "manual REST call", by="operator")
    return {"paused": True}


@app.post("/resume")
def resume_endpoint():
    pause(False, "manually", by="")
    return {"paused": False}


def main() -> None:
    if API_PORT:
        # Run REST API + supervisor in one process using uvicorn’s loop
        import threading

        th = threading.Thread(target=supervisor_loop, daemon=True)
        th.start()
        uvicorn.run(app, host="0.0.0.0", port=API_PORT, log_level="warning")
    else:
        supervisor_loop()


if __name__ == "__main__":
    main()
