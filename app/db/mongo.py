# app/db/mongo.py
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.config import settings

logger = logging.getLogger(__name__)

_mongo_client: Optional[AsyncIOMotorClient] = None

def get_mongo_client() -> AsyncIOMotorClient:
    """
    Returns a cached Motor client.
    """
    global _mongo_client
    if _mongo_client is None:
        _mongo_client = AsyncIOMotorClient(settings.MONGODB_URI)
    return _mongo_client

def get_db() -> AsyncIOMotorDatabase:
    client = get_mongo_client()
    return client[settings.MONGODB_DB]

def get_portfolio_collection():
    return get_db()[settings.PORTFOLIO_COLLECTION]

async def init_db():
    # one portfolio per job seeker: the store rejects a second concurrent insert
    collection = get_portfolio_collection()
    await collection.create_index("job_seeker_id", unique=True, name="uniq_job_seeker_id")
    logger.info("Mongo indexes ensured on %s.%s", settings.MONGODB_DB, settings.PORTFOLIO_COLLECTION)

def close_db():
    global _mongo_client
    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None
