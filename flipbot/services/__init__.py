"""
Services

Quantity/price calculator, position transition engine and signal gate.
"""

from flipbot.services.transition_engine import (
    PositionTransitionEngine,
    TransitionResult,
    TransitionState,
)
from flipbot.services.signal_gate import SignalGate, SignalResult, parse_signal

__all__ = [
    "PositionTransitionEngine",
    "TransitionResult",
    "TransitionState",
    "SignalGate",
    "SignalResult",
    "parse_signal",
]
