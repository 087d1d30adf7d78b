"""
MongoDB connection management for stored simulation runs.

The service runs without a database; only the history endpoints need one.
"""
import logging
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from . import config

logger = logging.getLogger(__name__)

class MongoDB:
    """MongoDB connection manager"""
    client: AsyncIOMotorClient = None
    database = None

# MongoDB instance
mongodb = MongoDB()

async def connect_to_mongo():
    """Create database connection, leaving it unset if the server is unreachable"""
    try:
        mongodb.client = AsyncIOMotorClient(
            config.MONGODB_URL,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
        )
        mongodb.database = mongodb.client[config.DATABASE_NAME]

        # Test the connection
        await mongodb.client.admin.command('ping')
        logger.info(f"Connected to MongoDB database '{config.DATABASE_NAME}'")

    except PyMongoError as e:
        logger.warning(f"Failed to connect to MongoDB: {e}")
        logger.warning("Server will start without simulation history")
        if mongodb.client:
            mongodb.client.close()
        mongodb.client = None
        mongodb.database = None

async def close_mongo_connection():
    """Close database connection"""
    if mongodb.client:
        mongodb.client.close()
        mongodb.client = None
        mongodb.database = None
        logger.info("Disconnected from MongoDB")

def get_database():
    """Get the MongoDB database instance"""
    return mongodb.database

# Collection names
SIMULATIONS_COLLECTION = "simulations"
