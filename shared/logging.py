"""
logging.py – JSON/std-out logger for the autotrader and its supervisor
"""

from __future__ import annotations
import json, logging, sys
from datetime import datetime, timezone
from typing import Mapping, Any

from .config import LOG_LEVEL

# root config (no 'stream=' dup error)
logging.basicConfig(level=LOG_LEVEL, handlers=[])

class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:          # noqa: D401
        msg: dict[str, Any] = {
            "ts":  datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "src": record.name,
            "msg": record.getMessage(),
        }
        extra: Mapping[str, Any] | None = getattr(record, "ctx", None)
        if extra:
            msg.update(extra)
        if record.exc_info:
            msg["exc"] = self.formatException(record.exc_info)
        return json.dumps(msg, ensure_ascii=False)

def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:                       # only add once / logger
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(JsonFormatter())
        logger.addHandler(h)
        logger.setLevel(LOG_LEVEL)
        logger.propagate = False
    return logger
