# src/perp_orders/__init__.py
"""
perp_orders: order submission pipeline for a perpetual-futures client.

  draft -> lots (codec) -> canonical message -> wallet signature
        -> POST /api/orders -> OrderRegistry
"""

__version__ = "0.1.0"
