"""
Database module - PostgreSQL and MongoDB connections.
"""
from jobboard.db.postgres import get_db_session, test_postgres_connection
from jobboard.db.mongodb import get_mongo_db, test_mongo_connection

__all__ = [
    "get_db_session",
    "test_postgres_connection",
    "get_mongo_db",
    "test_mongo_connection"
]
