"""
Database module - SQL database and MongoDB connections.
"""
from resume_studio.db.database import Base, get_db_session, init_db, test_database_connection
from resume_studio.db.mongodb import get_mongo_db, test_mongo_connection

__all__ = [
    "Base",
    "get_db_session",
    "init_db",
    "test_database_connection",
    "get_mongo_db",
    "test_mongo_connection"
]
