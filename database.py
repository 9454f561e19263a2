"""
MongoDB connection handle

The client is opened once by the application lifespan and closed on shutdown.
Route handlers receive the database through the ``get_db`` dependency rather
than importing a module-level global.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel
from pymongo import ASCENDING, GEOSPHERE, MongoClient
from pymongo.database import Database

import config

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
_db: Optional[Database] = None


def connect(uri: Optional[str] = None, name: Optional[str] = None) -> Database:
    global _client, _db
    client = MongoClient(uri or config.MONGO_URI, tz_aware=True)
    # fail fast when the server is unreachable
    client.admin.command("ping")
    _client = client
    _db = client[name or config.DATABASE_NAME]
    logger.info("Connected to database %s", _db.name)
    return _db


def close() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
        logger.info("Database connection closed")
    _client = None
    _db = None


def get_db() -> Database:
    if _db is None:
        raise RuntimeError("Database is not connected")
    return _db


def ensure_indexes(db: Database) -> None:
    db["user"].create_index("email", unique=True)
    db["bootcamp"].create_index("name", unique=True)
    db["bootcamp"].create_index([("location", GEOSPHERE)])
    db["course"].create_index("bootcamp")
    db["review"].create_index([("bootcamp", ASCENDING), ("user", ASCENDING)], unique=True)


def create_document(db: Database, collection_name: str, data: BaseModel, **extra: Any) -> Dict:
    """Insert a validated model and return the stored document."""
    doc = data.model_dump()
    doc.update(extra)
    doc.setdefault("createdAt", datetime.now(timezone.utc))
    res = db[collection_name].insert_one(doc)
    doc["_id"] = res.inserted_id
    return doc
