"""
Quantity / Price Calculator

Pure functions deriving order quantity and trigger prices.
Quantity precision follows the exchange step size; trigger prices use a
fixed display precision.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from flipbot.domain.models.signal import Direction

Number = Union[Decimal, int, float, str]

DEFAULT_UTILIZATION_FRACTION = Decimal("0.95")
DEFAULT_STOP_FRACTION = Decimal("0.20")
DEFAULT_TARGET_FRACTION = Decimal("0.005")
DEFAULT_PRICE_PRECISION = 2


def to_decimal(value: Number) -> Decimal:
    """Convert via str so floats like 0.1 stay 0.1"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_to_precision(value: Number, precision: int) -> Decimal:
    """Round half-up to ``precision`` decimal places"""
    return to_decimal(value).quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)


def derive_precision(step_size: Number) -> int:
    """
    Decimal places implied by a step size: round(-log10(step_size)).

    Only meaningful for power-of-ten step sizes (1, 0.1, 0.01, ...).

    Raises:
        ValueError: step size is not positive
    """
    step = to_decimal(step_size)
    if step <= 0:
        raise ValueError(f"Step size must be positive, got {step_size}")
    return int(round(-step.log10()))


def derive_entry_quantity(
    balance: Number,
    leverage: Number,
    price: Number,
    utilization_fraction: Number = DEFAULT_UTILIZATION_FRACTION,
    precision: int = 0
) -> Decimal:
    """
    Quantity that uses the whole balance at the given leverage, minus headroom.

    round((balance * leverage * utilization_fraction) / price, precision)

    Example:
        >>> derive_entry_quantity(1000, 5, 100, 0.95, 1)
        Decimal('47.5')
    """
    price = to_decimal(price)
    if price <= 0:
        raise ValueError(f"Price must be positive, got {price}")

    notional = to_decimal(balance) * to_decimal(leverage) * to_decimal(utilization_fraction)
    return round_to_precision(notional / price, precision)


def derive_stop_price(
    direction: Union[Direction, str],
    entry_price: Number,
    stop_fraction: Number = DEFAULT_STOP_FRACTION,
    precision: int = DEFAULT_PRICE_PRECISION
) -> Decimal:
    """Stop below entry for longs, above entry for shorts"""
    direction = Direction(direction)
    entry_price = to_decimal(entry_price)
    fraction = to_decimal(stop_fraction)

    if direction == Direction.LONG:
        price = entry_price * (1 - fraction)
    else:
        price = entry_price * (1 + fraction)

    return round_to_precision(price, precision)


def derive_take_profit_price(
    direction: Union[Direction, str],
    entry_price: Number,
    target_fraction: Number = DEFAULT_TARGET_FRACTION,
    precision: int = DEFAULT_PRICE_PRECISION
) -> Decimal:
    """Target above entry for longs, below entry for shorts"""
    direction = Direction(direction)
    entry_price = to_decimal(entry_price)
    fraction = to_decimal(target_fraction)

    if direction == Direction.LONG:
        price = entry_price * (1 + fraction)
    else:
        price = entry_price * (1 - fraction)

    return round_to_precision(price, precision)
