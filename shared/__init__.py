"""
shared – tiny helpers imported by the autotrader and its supervisor
-------------------------------------------------------------------
Modules
-------
config.py         → loads `.env` once per process
logging.py        → consistent JSON/stdout logger
constants.py      → exchange bounds, channel and key names
redis_client.py   → singleton Redis + heartbeat / pause-flag helpers
utils.py          → tick arithmetic that doesn't belong elsewhere
"""
