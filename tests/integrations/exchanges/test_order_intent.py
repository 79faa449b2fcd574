"""
OrderIntent Tests
"""

import pytest
from decimal import Decimal

from flipbot.integrations.exchanges.base import OrderIntent, OrderSide, OrderType


def test_market_reduce_only_params():
    intent = OrderIntent.market(OrderSide.SELL, Decimal("12.5"), reduce_only=True)

    assert intent.to_params("SOLUSDT") == {
        "symbol": "SOLUSDT",
        "side": "SELL",
        "type": "MARKET",
        "quantity": "12.5",
        "reduceOnly": "true",
    }


def test_quantity_never_uses_exponent_notation():
    intent = OrderIntent.market(OrderSide.BUY, Decimal("1E+1"))

    assert intent.to_params("SOLUSDT")["quantity"] == "10"


def test_take_profit_close_position_params():
    intent = OrderIntent.close_position_trigger(OrderSide.BUY, OrderType.TAKE_PROFIT_MARKET, Decimal("99.50"))

    params = intent.to_params("SOLUSDT")

    assert params["type"] == "TAKE_PROFIT_MARKET"
    assert params["stopPrice"] == "99.50"
    assert params["closePosition"] == "true"
    assert "quantity" not in params
    assert "reduceOnly" not in params


@pytest.mark.parametrize("quantity", [None, Decimal("0"), Decimal("-1")])
def test_market_requires_positive_quantity(quantity):
    with pytest.raises(ValueError, match="positive quantity"):
        OrderIntent(side=OrderSide.BUY, order_type=OrderType.MARKET, quantity=quantity)


def test_trigger_requires_stop_price():
    with pytest.raises(ValueError, match="positive stop price"):
        OrderIntent(side=OrderSide.SELL, order_type=OrderType.STOP_MARKET, close_position=True)


def test_trigger_requires_quantity_or_close_position():
    with pytest.raises(ValueError, match="quantity or close_position"):
        OrderIntent(side=OrderSide.SELL, order_type=OrderType.STOP_MARKET, stop_price=Decimal("80"))


def test_opposite_side():
    assert OrderSide.BUY.opposite == OrderSide.SELL
    assert OrderSide.SELL.opposite == OrderSide.BUY
