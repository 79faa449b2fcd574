"""
MongoDB connection for the bot state store (Motor).

One client per process, opened in the application lifespan before the
signal gate loads its persisted state.
"""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from flipbot.config.settings import get_settings
from flipbot.utils.logger import get_logger

logger = get_logger(__name__)

_client: AsyncIOMotorClient | None = None
_database: AsyncIOMotorDatabase | None = None


async def connect_to_mongodb() -> AsyncIOMotorDatabase:
    """
    Open the client, select the state database and ping the server.

    Raises:
        pymongo.errors.PyMongoError: server unreachable or auth rejected
    """
    global _client, _database

    current_settings = get_settings()
    logger.info(f"Connecting to state store database '{current_settings.MONGODB_DB_NAME}'")

    # A single document is read at startup and written once per transition
    _client = AsyncIOMotorClient(
        current_settings.MONGODB_URL,
        serverSelectionTimeoutMS=5000,
        maxPoolSize=5,
    )

    try:
        await _client.admin.command("ping")
    except Exception as e:
        logger.error(f"State store unreachable: {str(e)}")
        _client.close()
        _client = None
        raise

    _database = _client[current_settings.MONGODB_DB_NAME]
    logger.info(f"State store ready: {current_settings.MONGODB_DB_NAME}.{current_settings.STATE_COLLECTION}")
    return _database


async def close_mongodb_connection() -> None:
    """Close the client if one is open. Safe to call more than once."""
    global _client, _database

    if _client is None:
        return

    _client.close()
    _client = None
    _database = None
    logger.info("State store connection closed")


def get_database() -> AsyncIOMotorDatabase:
    """
    Raises:
        RuntimeError: connect_to_mongodb() has not completed
    """
    if _database is None:
        raise RuntimeError("State store is not connected; call connect_to_mongodb() first")
    return _database
