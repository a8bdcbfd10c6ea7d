"""
trade_manager
=============

High-level supervisor for the autotrader:

• Verifies that the autotrader is alive (heartbeat).
• Reads the state hash it publishes and pauses trading on a
  position-limit breach.
• Publishes a REST API for ops dashboards (status / pause / resume).
"""
