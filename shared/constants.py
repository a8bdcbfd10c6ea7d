"""
constants.py – single source of hard-coded names
"""

# Exchange price bounds (minor currency units)
MAXIMUM_ASK = 2_147_483_647
MINIMUM_BID = 1
TOP_LEVEL_COUNT = 5           # depth carried by every book / tick frame

# Redis channels
CHANNEL_EVENTS   = "rtg:events"       # exchange → autotrader
CHANNEL_COMMANDS = "rtg:commands"     # autotrader → exchange

# Redis keys / templates
KEY_STATE         = "autotrader:state"
KEY_HEARTBEAT     = "heartbeat:{}"        # service-specific
KEY_PAUSE_FLAG    = "flags:trading_paused"
KEY_PAUSE_BY      = "flags:trading_paused_by"   # "trade_manager" | "operator"
