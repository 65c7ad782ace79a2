"""
MongoDB client for the account store.
Handles connection management and index creation.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from membership.core.config import (
    get_mongodb_database_name,
    get_mongodb_url,
    settings,
)
from membership.core.exceptions import DatabaseError
from membership.core.logging import get_logger

logger = get_logger(__name__)


class MongoClient:
    """Lazily connected motor client."""

    def __init__(self):
        """Initialize MongoDB client."""
        self._client: Optional[AsyncIOMotorClient] = None
        self._database: Optional[AsyncIOMotorDatabase] = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def connect(self) -> None:
        """Create the motor client. Motor connects on first operation."""
        if self._client:
            return

        try:
            database_name = get_mongodb_database_name()
            self._client = AsyncIOMotorClient(get_mongodb_url(), tz_aware=True)
            self._database = self._client[database_name]
            logger.info(f"MongoDB client created for database: {database_name}")
        except (PyMongoError, ValueError) as e:
            logger.error(f"Failed to create MongoDB client: {e}")
            raise DatabaseError(f"Failed to create MongoDB client: {e}")

    def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("Disconnected from MongoDB")

    def get_database(self) -> AsyncIOMotorDatabase:
        """
        Get the configured database, connecting if needed.

        Returns:
            AsyncIOMotorDatabase: Motor database handle
        """
        if not self._client:
            self.connect()
        return self._database

    async def ensure_indexes(self) -> None:
        """Create indexes for the accounts collection."""
        collection = self.get_database()[settings.ACCOUNTS_COLLECTION]

        try:
            # User names are unique per store
            await collection.create_index(
                [("username", ASCENDING)], unique=True, name="username_unique"
            )
            await collection.create_index([("email", ASCENDING)], name="email_index")
            await collection.create_index(
                [("is_online", ASCENDING)], name="is_online_index"
            )
            await collection.create_index(
                [("is_approved", ASCENDING)], name="is_approved_index"
            )
            logger.info("Account indexes created successfully")
        except PyMongoError as e:
            logger.error(f"Failed to create indexes: {e}")
            raise DatabaseError(f"Failed to create indexes: {e}")


# Global MongoDB client instance
mongo_client = MongoClient()


def get_mongo_client() -> MongoClient:
    """
    Get MongoDB client instance.

    Returns:
        MongoClient: MongoDB client instance
    """
    if not mongo_client.is_connected:
        mongo_client.connect()
    return mongo_client
