"""
Exchange Integrations

Binance USDⓈ-M Futures client and order primitives.
"""

from flipbot.integrations.exchanges.base import (
    OrderSide,
    OrderType,
    TimeInForce,
    WorkingType,
    MarginType,
    OrderIntent,
)
from flipbot.integrations.exchanges.binance_futures import BinanceFuturesClient

__all__ = [
    "OrderSide",
    "OrderType",
    "TimeInForce",
    "WorkingType",
    "MarginType",
    "OrderIntent",
    "BinanceFuturesClient",
]
