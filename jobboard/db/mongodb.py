"""
MongoDB Connection Utility

MongoDB stores the uploaded resume files in a GridFS bucket.
Each file's _id is its storage path: resumes/<user id>/<random>.pdf
"""
import logging
from typing import Optional

from gridfs import AsyncGridFSBucket
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from jobboard.core.config import get_settings

logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: Optional[AsyncMongoClient] = None


def get_mongo_client() -> AsyncMongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = AsyncMongoClient(get_settings().mongodb_uri)
    return _client


def get_mongo_db() -> AsyncDatabase:
    """Get the file database"""
    return get_mongo_client()[get_settings().mongodb_db]


def get_resume_bucket() -> AsyncGridFSBucket:
    """GridFS bucket holding resume PDFs."""
    return AsyncGridFSBucket(get_mongo_db(), bucket_name=get_settings().resume_bucket)


async def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        # ping command checks connection
        await get_mongo_client().admin.command("ping")
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


async def close_mongo_client() -> None:
    global _client
    if _client is not None:
        await _client.close()
        _client = None
