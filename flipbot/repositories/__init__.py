"""
Repositories

Persistence access for the bot.
"""

from flipbot.repositories.signal_state_repository import SignalStateRepository

__all__ = ["SignalStateRepository"]
