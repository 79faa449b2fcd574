"""
Signal State Repository

Durable storage of the last accepted signal in a single MongoDB document.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from flipbot.domain.models.signal import PersistedState, Signal
from flipbot.shared.exceptions import DatabaseError
from flipbot.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_COLLECTION = "bot_state"
DEFAULT_DOCUMENT_ID = 1


class SignalStateRepository:
    """
    Get-by-id / upsert-by-id access to the bot state document.

    Document shape:
        {"_id": 1, "lastSignal": "buy" | "sell" | null, "pendingSignal": ...}
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        collection_name: str = DEFAULT_COLLECTION,
        document_id: int = DEFAULT_DOCUMENT_ID
    ):
        """
        Initialize repository.

        Args:
            db: MongoDB database instance
            collection_name: Name of the collection
            document_id: Fixed id of the state document
        """
        self.db = db
        self.collection_name = collection_name
        self.collection = db[collection_name]
        self.document_id = document_id

    async def get_state(self) -> PersistedState:
        """
        Load the state document.

        Returns:
            PersistedState, empty when the document does not exist yet
        """
        try:
            document = await self.collection.find_one({"_id": self.document_id})
        except PyMongoError as e:
            logger.error(f"Failed to load bot state: {str(e)}")
            raise DatabaseError(f"Failed to load bot state: {str(e)}")

        if not document:
            logger.info("No persisted bot state found, starting with no signal")
            return PersistedState(id=self.document_id)

        state = PersistedState.model_validate(document)
        logger.info(f"Loaded persisted state: lastSignal={_value(state.last_signal)}")
        return state

    async def save_last_signal(self, signal: Signal) -> None:
        """Record an accepted signal and clear the in-progress marker."""
        await self._upsert({
            "lastSignal": signal.value,
            "pendingSignal": None,
            "updatedAt": datetime.now(timezone.utc),
        })
        logger.info(f"lastSignal updated to {signal.value}")

    async def mark_pending(self, signal: Signal) -> None:
        """Record that a transition toward ``signal`` has started."""
        await self._upsert({"pendingSignal": signal.value})

    async def clear_pending(self) -> None:
        await self._upsert({"pendingSignal": None})

    async def _upsert(self, fields: Dict[str, Any]) -> None:
        try:
            await self.collection.update_one(
                {"_id": self.document_id},
                {"$set": fields},
                upsert=True
            )
        except PyMongoError as e:
            logger.error(f"Failed to write bot state: {str(e)}")
            raise DatabaseError(f"Failed to write bot state: {str(e)}")


def _value(signal: Optional[Signal]) -> Optional[str]:
    return signal.value if signal else None
