"""MongoDB connection management on the Motor async driver.

One client per process, created on first use. Tests swap it for a
mongomock client with ``set_client``.
"""

import logging
import os

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "ebook_studio")

_client: AsyncIOMotorClient | None = None


async def get_database() -> AsyncIOMotorDatabase:
    """Get the database, connecting on first call."""
    global _client
    if _client is None:
        # Short timeouts so an unreachable server surfaces as a 503 quickly
        _client = AsyncIOMotorClient(
            MONGODB_URL,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            tz_aware=True,
        )
    return _client[DATABASE_NAME]


async def ping() -> bool:
    """Whether the database answers a ping."""
    try:
        db = await get_database()
        await db.command("ping")
    except PyMongoError as e:
        logger.warning(f"MongoDB ping failed: {e}")
        return False
    return True


async def close_database() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None


def get_client() -> AsyncIOMotorClient | None:
    """Get the current client instance (for testing)."""
    return _client


def set_client(client: AsyncIOMotorClient | None) -> None:
    """Set the client instance (for testing)."""
    global _client
    _client = client
