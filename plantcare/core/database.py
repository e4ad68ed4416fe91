"""
MongoDB database connection and utilities.
"""

import logging

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from plantcare.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

    @staticmethod
    def _make_client(uri: str) -> AsyncIOMotorClient:
        client_kwargs = {}
        if "mongodb+srv://" in uri or "ssl=true" in uri.lower():
            client_kwargs["tlsCAFile"] = certifi.where()
        return AsyncIOMotorClient(uri, **client_kwargs)

    @classmethod
    async def connect(cls):
        """Connect to MongoDB."""
        cls.client = cls._make_client(settings.MONGO_URI)
        cls.db = cls.client[settings.MONGO_DB_NAME]

        # Create indexes
        await cls._create_indexes()

        logger.info(f"Connected to MongoDB: {settings.MONGO_DB_NAME}")

    @classmethod
    async def disconnect(cls):
        """Disconnect from MongoDB."""
        if cls.client:
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("Disconnected from MongoDB")

    @classmethod
    async def _create_indexes(cls):
        """Create database indexes for better query performance."""
        # Plants collection
        await cls.db.plants.create_index("household_id")
        await cls.db.plants.create_index("user_id")

        # Care activities (append-only, queried per household and month)
        await cls.db.care_activities.create_index([("household_id", 1), ("performed_at", -1)])

        # Notification settings: one record per user
        await cls.db.notification_settings.create_index("user_id", unique=True)

        # Delivery audit log, newest first per user
        await cls.db.notification_log.create_index([("user_id", 1), ("sent_at", -1)])

        # Planned on-device alerts, one per (household, device, alert id)
        await cls.db.pending_alerts.create_index(
            [("household_id", 1), ("device_id", 1), ("alert_id", 1)], unique=True
        )

    @classmethod
    def get_collection(cls, name: str):
        """Get a collection by name."""
        return cls.db[name]
