"""
Signal Deduplication Gate

Owns the last accepted signal. Classifies inbound messages, suppresses
repeats, serializes transitions and writes the accepted signal through to
durable storage only after the transition fully succeeded.

Author: Flipbot Team
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional

from flipbot.domain.models.signal import Signal, SignalOutcome
from flipbot.repositories.signal_state_repository import SignalStateRepository
from flipbot.services.transition_engine import PositionTransitionEngine, TransitionResult
from flipbot.shared.exceptions import TransitionBusyError
from flipbot.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BUY_MESSAGE = "SuperTrend Buy!"
DEFAULT_SELL_MESSAGE = "SuperTrend Sell!"


def parse_signal(
    message: Any,
    buy_message: str = DEFAULT_BUY_MESSAGE,
    sell_message: str = DEFAULT_SELL_MESSAGE
) -> Optional[Signal]:
    """
    Map a raw webhook message to a canonical signal.

    Returns:
        Signal.BUY, Signal.SELL, or None for anything else
    """
    if message == buy_message:
        return Signal.BUY
    if message == sell_message:
        return Signal.SELL
    return None


@dataclass
class GateState:
    """In-memory cache of the durable state; only the gate mutates it."""
    last_signal: Optional[Signal] = None
    interrupted_signal: Optional[Signal] = None
    loaded: bool = False


@dataclass
class SignalResult:
    outcome: SignalOutcome
    signal: Optional[Signal] = None
    transition: Optional[TransitionResult] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "signal": self.signal.value if self.signal else None,
            "transition": self.transition.to_dict() if self.transition else None,
        }


class SignalGate:
    """
    Single owner of the accepted signal.

    At most one transition runs at a time; a recognized signal arriving while
    one is running is rejected with TransitionBusyError rather than queued.

    Usage:
        gate = SignalGate(repository, engine)
        await gate.load()
        result = await gate.handle_signal("SuperTrend Buy!")
        result.outcome  # SignalOutcome.APPLIED
    """

    def __init__(
        self,
        repository: SignalStateRepository,
        engine: PositionTransitionEngine,
        buy_message: str = DEFAULT_BUY_MESSAGE,
        sell_message: str = DEFAULT_SELL_MESSAGE
    ):
        self.repository = repository
        self.engine = engine
        self.buy_message = buy_message
        self.sell_message = sell_message
        self._state = GateState()
        self._lock = asyncio.Lock()

    @property
    def last_signal(self) -> Optional[Signal]:
        return self._state.last_signal

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def snapshot(self) -> Dict[str, Any]:
        """Read-only view for status endpoints"""
        return {
            "last_signal": self._state.last_signal.value if self._state.last_signal else None,
            "interrupted_signal": (
                self._state.interrupted_signal.value if self._state.interrupted_signal else None
            ),
            "busy": self.busy,
            "loaded": self._state.loaded,
        }

    async def load(self) -> None:
        """Seed in-memory state from the durable store. Call once at startup."""
        persisted = await self.repository.get_state()

        self._state = GateState(
            last_signal=persisted.last_signal,
            interrupted_signal=persisted.pending_signal,
            loaded=True,
        )

        if persisted.pending_signal is not None:
            logger.warning(
                f"Previous transition toward '{persisted.pending_signal.value}' did not finish; "
                f"exchange position may not match lastSignal="
                f"{persisted.last_signal.value if persisted.last_signal else None}"
            )

    async def handle_signal(self, raw_message: Any) -> SignalResult:
        """
        Process one inbound message.

        Returns:
            SignalResult with APPLIED, DUPLICATE or IGNORED outcome

        Raises:
            TransitionBusyError: another transition is running
            Any transition or persistence error, with durable state untouched
        """
        signal = parse_signal(raw_message, self.buy_message, self.sell_message)

        if signal is None:
            logger.info(f"Unrecognized signal ignored: {raw_message!r}")
            return SignalResult(outcome=SignalOutcome.IGNORED)

        if self._lock.locked():
            logger.warning(f"Signal '{signal.value}' rejected: transition already in progress")
            raise TransitionBusyError()

        async with self._lock:
            if signal == self._state.last_signal:
                logger.info(f"Duplicate signal '{signal.value}' skipped")
                return SignalResult(outcome=SignalOutcome.DUPLICATE, signal=signal)

            transition = await self._apply(signal)
            return SignalResult(outcome=SignalOutcome.APPLIED, signal=signal, transition=transition)

    async def _apply(self, signal: Signal) -> TransitionResult:
        logger.info(
            f"Accepting signal '{signal.value}' "
            f"(previous: {self._state.last_signal.value if self._state.last_signal else None})"
        )

        await self.repository.mark_pending(signal)

        try:
            transition = await self.engine.transition_to(signal.direction)
        except Exception:
            await self._clear_pending_after_failure()
            raise

        try:
            await self.repository.save_last_signal(signal)
        except Exception:
            logger.critical(
                f"Transition to {signal.direction.value} succeeded but lastSignal could not be saved"
            )
            raise

        self._state.last_signal = signal
        self._state.interrupted_signal = None
        return transition

    async def _clear_pending_after_failure(self) -> None:
        try:
            await self.repository.clear_pending()
        except Exception as e:
            # The transition error is the one reported to the caller
            logger.error(f"Failed to clear pending signal marker: {str(e)}")
            return

        self._state.interrupted_signal = None
