"""MongoDB database connection using Motor (async driver)."""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from app.config import settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and make sure indexes exist."""
        self.client = AsyncIOMotorClient(settings.mongodb_url, tz_aware=True)
        self.db = self.client[settings.mongodb_db_name]
        logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)
        await ensure_indexes(self.db)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    def get_collection(self, name: str):
        """Get a MongoDB collection."""
        if self.db is None:
            raise RuntimeError("Database not connected")
        return self.db[name]


async def ensure_indexes(db) -> None:
    """
    Create the indexes the services rely on.

    The partial unique index on goals allows at most one active goal per
    user, so concurrent activations cannot both succeed.
    """
    await db["goals"].create_index(
        [("user_id", ASCENDING)],
        name="one_active_goal_per_user",
        unique=True,
        partialFilterExpression={"status": "active"},
    )
    await db["goals"].create_index(
        [("user_id", ASCENDING), ("slug", ASCENDING)],
        name="goal_slug_per_user",
        unique=True,
    )
    await db["tasks"].create_index(
        [("user_id", ASCENDING), ("goal_slug", ASCENDING), ("priority", ASCENDING)],
        name="tasks_by_goal",
    )
    await db["users"].create_index([("user_id", ASCENDING)], name="user_settings", unique=True)
    logger.info("MongoDB indexes ensured")


# Global database instance
database = Database()


async def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get database instance."""
    if database.db is None:
        raise RuntimeError("Database not connected")
    return database.db
