"""
Position Transition Engine

Replaces the current exposure on one symbol with a new one:

    IDLE -> PREPARING -> FLATTENING -> ENTERING -> PROTECTING -> DONE
                  \\            \\            \\            \\
                   +------------+------------+------------+--> FAILED

PREPARING   leverage / isolated margin, cancel all open orders
FLATTENING  close any open position, whatever its direction
ENTERING    size from balance, leverage and price; market entry
PROTECTING  stop-market and take-profit-market closing the whole position

Any exception moves the machine to FAILED and is re-raised unchanged; no
further step runs.

Author: Flipbot Team
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from flipbot.domain.models.signal import Direction
from flipbot.integrations.exchanges.base import OrderIntent, OrderSide, OrderType
from flipbot.services.calculator import (
    DEFAULT_PRICE_PRECISION,
    DEFAULT_STOP_FRACTION,
    DEFAULT_TARGET_FRACTION,
    DEFAULT_UTILIZATION_FRACTION,
    derive_entry_quantity,
    derive_precision,
    derive_stop_price,
    derive_take_profit_price,
    to_decimal,
)
from flipbot.shared.exceptions import InsufficientBalanceError
from flipbot.utils.logger import get_logger

logger = get_logger(__name__)


class TransitionState(str, Enum):
    """Transition lifecycle"""
    IDLE = "idle"
    PREPARING = "preparing"
    FLATTENING = "flattening"
    ENTERING = "entering"
    PROTECTING = "protecting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class TransitionResult:
    """Outcome of one transition_to() call"""
    direction: Direction
    state: TransitionState = TransitionState.IDLE
    history: List[TransitionState] = field(default_factory=list)
    quantity: Optional[Decimal] = None
    entry_price: Optional[Decimal] = None
    stop_price: Optional[Decimal] = None
    take_profit_price: Optional[Decimal] = None
    flatten_order: Optional[Dict[str, Any]] = None
    entry_order: Optional[Dict[str, Any]] = None
    stop_order: Optional[Dict[str, Any]] = None
    take_profit_order: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "direction": self.direction.value,
            "state": self.state.value,
            "quantity": str(self.quantity) if self.quantity is not None else None,
            "entry_price": str(self.entry_price) if self.entry_price is not None else None,
            "stop_price": str(self.stop_price) if self.stop_price is not None else None,
            "take_profit_price": str(self.take_profit_price) if self.take_profit_price is not None else None,
            "flattened": self.flatten_order is not None,
        }


class PositionTransitionEngine:
    """
    Flip exposure on one symbol to the requested direction.

    Usage:
        engine = PositionTransitionEngine(client, symbol="SOLUSDT", leverage=5)
        result = await engine.transition_to(Direction.LONG)
        result.state  # TransitionState.DONE
    """

    def __init__(
        self,
        client,
        symbol: str,
        leverage: int,
        utilization_fraction: Decimal = DEFAULT_UTILIZATION_FRACTION,
        stop_fraction: Decimal = DEFAULT_STOP_FRACTION,
        target_fraction: Decimal = DEFAULT_TARGET_FRACTION,
        price_precision: int = DEFAULT_PRICE_PRECISION
    ):
        """
        Args:
            client: Exchange client (BinanceFuturesClient or compatible)
            symbol: Exchange symbol, e.g. "SOLUSDT"
            leverage: Leverage applied before each entry
            utilization_fraction: Share of balance used, headroom for fees/slippage
            stop_fraction: Distance of the catastrophic stop from entry
            target_fraction: Distance of the take-profit from entry
            price_precision: Decimal places of trigger prices
        """
        self.client = client
        self.symbol = symbol
        self.leverage = leverage
        self.utilization_fraction = to_decimal(utilization_fraction)
        self.stop_fraction = to_decimal(stop_fraction)
        self.target_fraction = to_decimal(target_fraction)
        self.price_precision = price_precision

    async def transition_to(self, direction: Direction) -> TransitionResult:
        """
        Run a full transition.

        Raises:
            Whatever the failing step raised (ExchangeError, TransportError,
            DataNotFoundError, InsufficientBalanceError, ...)
        """
        result = TransitionResult(direction=Direction(direction))
        self._advance(result, TransitionState.IDLE)

        try:
            self._advance(result, TransitionState.PREPARING)
            await self._prepare()

            self._advance(result, TransitionState.FLATTENING)
            result.flatten_order = await self.client.close_any_open_position(self.symbol)

            self._advance(result, TransitionState.ENTERING)
            await self._enter(result)

            self._advance(result, TransitionState.PROTECTING)
            await self._protect(result)

            self._advance(result, TransitionState.DONE)

        except Exception as e:
            failed_in = result.state
            self._advance(result, TransitionState.FAILED)
            logger.error(
                f"Transition to {result.direction.value} on {self.symbol} failed "
                f"during {failed_in.value}: {type(e).__name__}: {str(e)}"
            )
            raise

        logger.info(
            f"Transition to {result.direction.value} on {self.symbol} complete: "
            f"qty={result.quantity}, ref_price={result.entry_price}, "
            f"stop={result.stop_price}, take_profit={result.take_profit_price}"
        )
        return result

    def _advance(self, result: TransitionResult, state: TransitionState) -> None:
        result.state = state
        result.history.append(state)
        logger.debug(f"[{self.symbol}] transition -> {state.value}")

    async def _prepare(self) -> None:
        await self.client.set_leverage_and_isolated_margin(self.symbol, self.leverage)
        await self.client.cancel_all_open_orders(self.symbol)

    async def _enter(self, result: TransitionResult) -> None:
        balance = await self.client.get_balance()
        price = await self.client.get_mark_price(self.symbol)
        step_size = await self.client.get_symbol_step_size(self.symbol)

        quantity = derive_entry_quantity(
            balance=balance,
            leverage=self.leverage,
            price=price,
            utilization_fraction=self.utilization_fraction,
            precision=derive_precision(step_size),
        )
        if quantity <= 0:
            raise InsufficientBalanceError(
                f"Computed quantity {quantity} for balance {balance} at price {price} is not positive"
            )

        result.quantity = quantity
        result.entry_price = price

        logger.info(f"Opening {result.direction.value.upper()} {quantity} on {self.symbol} @ ~{price}")
        result.entry_order = await self.client.place_order(
            OrderIntent.market(self._entry_side(result.direction), quantity),
            self.symbol
        )

    async def _protect(self, result: TransitionResult) -> None:
        # Pre-entry reference price; fills may have slipped slightly
        result.stop_price = derive_stop_price(
            result.direction, result.entry_price, self.stop_fraction, self.price_precision
        )
        result.take_profit_price = derive_take_profit_price(
            result.direction, result.entry_price, self.target_fraction, self.price_precision
        )

        exit_side = self._entry_side(result.direction).opposite

        result.stop_order = await self.client.place_order(
            OrderIntent.close_position_trigger(exit_side, OrderType.STOP_MARKET, result.stop_price),
            self.symbol
        )
        result.take_profit_order = await self.client.place_order(
            OrderIntent.close_position_trigger(exit_side, OrderType.TAKE_PROFIT_MARKET, result.take_profit_price),
            self.symbol
        )

    @staticmethod
    def _entry_side(direction: Direction) -> OrderSide:
        return OrderSide.BUY if direction == Direction.LONG else OrderSide.SELL
