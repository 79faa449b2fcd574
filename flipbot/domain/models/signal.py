"""
Signal Domain Model

Canonical signal values, trading directions and the durable bot state record.
No database dependencies - business logic only.
"""

from typing import Optional
from enum import Enum
from pydantic import Field

from flipbot.shared.models import DomainModel


# ==================== ENUMS ====================

class Signal(str, Enum):
    """Accepted directional signal"""
    BUY = "buy"
    SELL = "sell"

    @property
    def direction(self) -> "Direction":
        return Direction.LONG if self is Signal.BUY else Direction.SHORT


class Direction(str, Enum):
    """Requested net exposure"""
    LONG = "long"
    SHORT = "short"


class SignalOutcome(str, Enum):
    """How the gate disposed of an inbound message"""
    APPLIED = "applied"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"


# ==================== PERSISTED STATE ====================

class PersistedState(DomainModel):
    """
    Durable bot state record.

    One document keyed by a fixed id. ``last_signal`` is the last signal whose
    transition fully succeeded. ``pending_signal`` is set only while a
    transition is running; a non-null value at startup means the previous
    process died mid-transition.

    Usage:
        state = PersistedState.model_validate({"_id": 1, "lastSignal": "buy"})
        state.last_signal  # Signal.BUY
    """

    id: int = Field(default=1, alias="_id")
    last_signal: Optional[Signal] = Field(default=None, alias="lastSignal")
    pending_signal: Optional[Signal] = Field(default=None, alias="pendingSignal")
