"""
Pytest configuration and shared fixtures.

Provides an in-memory stand-in for the bot state collection and a mocked
futures client.
"""

import os

# Settings are loaded on import; give required fields test values first
os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("BINANCE_API_KEY", "test_api_key_123")
os.environ.setdefault("BINANCE_API_SECRET", "test_api_secret_456")

import copy
from decimal import Decimal
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock

import pytest

from flipbot.integrations.exchanges.binance_futures import BinanceFuturesClient
from flipbot.repositories.signal_state_repository import SignalStateRepository
from flipbot.services.transition_engine import PositionTransitionEngine


class FakeStateCollection:
    """Minimal find_one / update_one($set, upsert) collection keyed by _id."""

    def __init__(self):
        self.documents: Dict[Any, Dict[str, Any]] = {}
        self.find_calls = 0
        self.update_calls = 0

    async def find_one(self, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self.find_calls += 1
        document = self.documents.get(filter["_id"])
        return copy.deepcopy(document) if document else None

    async def update_one(self, filter: Dict[str, Any], update: Dict[str, Any], upsert: bool = False):
        self.update_calls += 1
        key = filter["_id"]
        if key not in self.documents:
            if not upsert:
                return None
            self.documents[key] = {"_id": key}
        self.documents[key].update(update["$set"])
        return None

    def last_signal(self, document_id: int = 1) -> Optional[str]:
        return self.documents.get(document_id, {}).get("lastSignal")


@pytest.fixture
def state_collection() -> FakeStateCollection:
    return FakeStateCollection()


@pytest.fixture
def state_repository(state_collection) -> SignalStateRepository:
    return SignalStateRepository({"bot_state": state_collection})


@pytest.fixture
def mock_client():
    """Futures client whose every call succeeds on a flat 1000 USDT account"""
    client = AsyncMock(spec=BinanceFuturesClient)
    client.set_leverage_and_isolated_margin.return_value = None
    client.cancel_all_open_orders.return_value = {"code": 200, "msg": "The operation of cancel all open order is done."}
    client.close_any_open_position.return_value = None
    client.get_balance.return_value = Decimal("1000")
    client.get_mark_price.return_value = Decimal("100")
    client.get_symbol_step_size.return_value = Decimal("0.1")
    client.place_order.return_value = {"orderId": 1, "status": "NEW"}
    return client


@pytest.fixture
def engine(mock_client) -> PositionTransitionEngine:
    return PositionTransitionEngine(mock_client, symbol="SOLUSDT", leverage=5)
