"""
Domain Models

Pure Pydantic domain models with no database dependencies.
"""

from flipbot.shared.models import DomainModel
from flipbot.domain.models.signal import (
    Signal,
    Direction,
    SignalOutcome,
    PersistedState,
)

__all__ = [
    "DomainModel",
    "Signal",
    "Direction",
    "SignalOutcome",
    "PersistedState",
]
