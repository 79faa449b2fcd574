"""
Exchange Order Primitives

Enums and the OrderIntent value object shared by the futures client and the
transition engine.

Author: Flipbot Team
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


# ==================== ENUMS ====================

class OrderSide(str, Enum):
    """Order side (direction)"""
    BUY = "BUY"
    SELL = "SELL"

    @property
    def opposite(self) -> "OrderSide":
        return OrderSide.SELL if self is OrderSide.BUY else OrderSide.BUY


class OrderType(str, Enum):
    """Futures order types used by the bot"""
    MARKET = "MARKET"
    STOP_MARKET = "STOP_MARKET"
    TAKE_PROFIT_MARKET = "TAKE_PROFIT_MARKET"


class TimeInForce(str, Enum):
    """Time in force for orders"""
    GTC = "GTC"  # Good Till Cancel
    IOC = "IOC"  # Immediate or Cancel
    FOK = "FOK"  # Fill or Kill


class WorkingType(str, Enum):
    """Price source that triggers conditional orders"""
    MARK_PRICE = "MARK_PRICE"
    CONTRACT_PRICE = "CONTRACT_PRICE"


class MarginType(str, Enum):
    ISOLATED = "ISOLATED"
    CROSSED = "CROSSED"


# ==================== ORDER INTENT ====================

@dataclass(frozen=True)
class OrderIntent:
    """
    One order to place, built and consumed inside a single transition.

    Either ``quantity`` is set (market orders) or ``stop_price`` together with
    ``close_position`` (protective orders that close the whole position).
    """
    side: OrderSide
    order_type: OrderType
    quantity: Optional[Decimal] = None
    stop_price: Optional[Decimal] = None
    close_position: bool = False
    reduce_only: bool = False
    working_type: Optional[WorkingType] = None
    time_in_force: Optional[TimeInForce] = None

    def __post_init__(self):
        if self.order_type == OrderType.MARKET:
            if self.quantity is None or self.quantity <= 0:
                raise ValueError("Market orders require a positive quantity")
        else:
            if self.stop_price is None or self.stop_price <= 0:
                raise ValueError(f"{self.order_type.value} orders require a positive stop price")
            if not self.close_position and self.quantity is None:
                raise ValueError("Conditional orders need a quantity or close_position")

    @classmethod
    def market(cls, side: OrderSide, quantity: Decimal, reduce_only: bool = False) -> "OrderIntent":
        return cls(side=side, order_type=OrderType.MARKET, quantity=quantity, reduce_only=reduce_only)

    @classmethod
    def close_position_trigger(
        cls,
        side: OrderSide,
        order_type: OrderType,
        stop_price: Decimal
    ) -> "OrderIntent":
        """Stop / take-profit that closes the entire position, keyed to mark price."""
        return cls(
            side=side,
            order_type=order_type,
            stop_price=stop_price,
            close_position=True,
            working_type=WorkingType.MARK_PRICE,
            time_in_force=TimeInForce.GTC,
        )

    def to_params(self, symbol: str) -> Dict[str, Any]:
        """Build Binance order parameters in a stable order."""
        params: Dict[str, Any] = {
            "symbol": symbol,
            "side": self.side.value,
            "type": self.order_type.value,
        }
        if self.quantity is not None:
            params["quantity"] = format(self.quantity, "f")
        if self.stop_price is not None:
            params["stopPrice"] = format(self.stop_price, "f")
        if self.close_position:
            params["closePosition"] = "true"
        if self.reduce_only:
            params["reduceOnly"] = "true"
        if self.time_in_force is not None:
            params["timeInForce"] = self.time_in_force.value
        if self.working_type is not None:
            params["workingType"] = self.working_type.value
        return params
