import logging
from typing import Optional

from pymongo import MongoClient

from vidtube import config
from vidtube.db.store import EntityStore

# Configure logging
logger = logging.getLogger(__name__)

# Global instances
_client: Optional[MongoClient] = None
_database = None
_store: Optional[EntityStore] = None


def get_mongodb_client() -> MongoClient:
    """Get MongoDB client instance (singleton pattern)"""
    global _client
    if _client is None:
        logger.info(f"Connecting to MongoDB: {config.MONGO_URL}")
        _client = MongoClient(config.MONGO_URL)

        # Test the connection
        try:
            _client.admin.command('ping')
            logger.info("✅ MongoDB connection successful")
        except Exception as e:
            logger.error(f"❌ MongoDB connection failed: {e}")
            raise

    return _client


def get_database():
    """Get MongoDB database instance"""
    global _database
    if _database is None:
        client = get_mongodb_client()
        _database = client[config.DATABASE_NAME]
        logger.info(f"📁 Using database: {config.DATABASE_NAME}")

    return _database


def get_store() -> EntityStore:
    """Get the entity store for the configured backend"""
    global _store
    if _store is None:
        if config.STORE_BACKEND == "memory":
            from vidtube.db.memory_store import MemoryStore
            _store = MemoryStore()
            logger.info("🧠 Using in-memory entity store")
        else:
            from vidtube.db.mongo_store import MongoStore
            _store = MongoStore(get_database())
    return _store


def set_store(store: Optional[EntityStore]):
    """Swap the entity store (tests, scripts)"""
    global _store
    _store = store


def close_connection():
    """Close MongoDB connection"""
    global _client, _database, _store
    if _client:
        _client.close()
        _client = None
        _database = None
        _store = None
        logger.info("🔌 MongoDB connection closed")
