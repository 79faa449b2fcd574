"""
Calculator Tests

Quantity precision, entry sizing and trigger prices.
"""

import pytest
from decimal import Decimal

from flipbot.domain.models.signal import Direction
from flipbot.services.calculator import (
    derive_entry_quantity,
    derive_precision,
    derive_stop_price,
    derive_take_profit_price,
    round_to_precision,
)


# ==================== PRECISION TESTS ====================

@pytest.mark.parametrize("step_size,expected", [
    (0.1, 1),
    (0.001, 3),
    (1, 0),
    ("0.01000000", 2),
    (Decimal("1.00000000"), 0),
])
def test_derive_precision(step_size, expected):
    """Test decimal places follow the step size"""
    assert derive_precision(step_size) == expected


@pytest.mark.parametrize("step_size", [0, -0.1, "0"])
def test_derive_precision_rejects_non_positive(step_size):
    """Test non-positive step sizes are rejected"""
    with pytest.raises(ValueError, match="Step size must be positive"):
        derive_precision(step_size)


# ==================== QUANTITY TESTS ====================

def test_derive_entry_quantity_example():
    """Test 1000 USDT at 5x and 100 price with 95% utilization"""
    quantity = derive_entry_quantity(balance=1000, leverage=5, price=100, utilization_fraction=0.95, precision=1)

    assert quantity == Decimal("47.5")
    assert quantity == round(1000 * 5 * 0.95 / 100, 1)


def test_derive_entry_quantity_rounds_to_step_precision():
    """Test quantity rounded to the step size precision"""
    quantity = derive_entry_quantity(
        balance=Decimal("123.45"),
        leverage=3,
        price=Decimal("17.3"),
        utilization_fraction=Decimal("0.95"),
        precision=2
    )

    # 123.45 * 3 * 0.95 / 17.3 = 20.3369...
    assert quantity == Decimal("20.34")


def test_derive_entry_quantity_whole_units():
    """Test precision 0 yields whole contracts"""
    quantity = derive_entry_quantity(balance=1000, leverage=5, price=100, precision=0)

    # 47.5 rounds half up
    assert quantity == Decimal("48")


def test_derive_entry_quantity_tiny_balance_rounds_to_zero():
    """Test dust balances produce a zero quantity"""
    quantity = derive_entry_quantity(balance=Decimal("0.01"), leverage=1, price=150, precision=1)

    assert quantity == 0


def test_derive_entry_quantity_rejects_zero_price():
    with pytest.raises(ValueError, match="Price must be positive"):
        derive_entry_quantity(balance=1000, leverage=5, price=0, precision=1)


# ==================== TRIGGER PRICE TESTS ====================

def test_derive_stop_price_long():
    """Test long stop sits 20% below entry"""
    assert derive_stop_price("long", 100, 0.20) == Decimal("80.00")


def test_derive_stop_price_short():
    """Test short stop sits 20% above entry"""
    assert derive_stop_price("short", 100, 0.20) == Decimal("120.00")


def test_derive_take_profit_price_long():
    """Test long target sits 0.5% above entry"""
    assert derive_take_profit_price("long", 100, 0.005) == Decimal("100.50")


def test_derive_take_profit_price_short():
    """Test short target sits 0.5% below entry"""
    assert derive_take_profit_price("short", 100, 0.005) == Decimal("99.50")


def test_trigger_prices_use_defaults():
    """Test default fractions are 20% stop and 0.5% target"""
    assert derive_stop_price(Direction.LONG, Decimal("150")) == Decimal("120.00")
    assert derive_take_profit_price(Direction.SHORT, Decimal("150")) == Decimal("149.25")


def test_trigger_prices_round_to_two_decimals():
    """Test trigger prices keep 2 decimals regardless of quantity precision"""
    stop = derive_stop_price(Direction.SHORT, Decimal("143.217"), Decimal("0.20"))
    take_profit = derive_take_profit_price(Direction.LONG, Decimal("143.217"), Decimal("0.005"))

    # 143.217 * 1.2 = 171.8604, 143.217 * 1.005 = 143.933085
    assert stop == Decimal("171.86")
    assert take_profit == Decimal("143.93")
    assert stop.as_tuple().exponent == -2


def test_trigger_price_rejects_unknown_direction():
    with pytest.raises(ValueError):
        derive_stop_price("sideways", 100)


def test_round_to_precision_half_up():
    assert round_to_precision(Decimal("2.345"), 2) == Decimal("2.35")
    assert round_to_precision(Decimal("2.344"), 2) == Decimal("2.34")
