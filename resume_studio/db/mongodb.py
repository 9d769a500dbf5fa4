"""
MongoDB Connection Utility

MongoDB stores:
- AI response cache (prompt hash -> completion text)

WHY MongoDB for this?
- TTL indexes expire cache entries without a cleanup job
- Cache survives restarts and is shared between API workers

MongoDB is optional: with MONGODB_URI empty the AI cache stays in process memory.
"""
from typing import Optional

from loguru import logger
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from resume_studio.core.config import get_settings

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: Optional[MongoClient] = None
_db: Optional[Database] = None

# Collection name constants (avoid typos)
COLLECTIONS = {
    "ai_cache": "ai_response_cache",
}


def mongo_enabled() -> bool:
    return bool(settings.mongodb_uri)


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=2000)
    return _client


def get_mongo_db() -> Database:
    """Get the cache database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    db = get_mongo_db()
    return db[COLLECTIONS.get(name, name)]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    if not mongo_enabled():
        return False
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning(f"MongoDB connection failed: {e}")
        return False


def init_mongo_indexes():
    """
    Create indexes for the cache collection.
    Call this once during app startup.
    """
    cache = get_collection("ai_cache")

    # Unique lookup key
    cache.create_index([("key", ASCENDING)], unique=True)

    # TTL: MongoDB drops documents once expires_at has passed
    cache.create_index("expires_at", expireAfterSeconds=0)

    # Oldest-first eviction when the collection exceeds its size cap
    cache.create_index("created_at")

    logger.info("MongoDB indexes created successfully")
